"""
Calculator configuration loading.

The config file is read once at startup and again on explicit reload. A missing or
broken file never takes the relay down: the failure is logged and an empty config is
served instead. Each load produces a new immutable CalcConfig; the store swaps the
reference, it never mutates the current instance.
"""

import json
import logging
from pathlib import Path

from fastapi import Depends, Request
from pydantic import ValidationError

from dealcalc.schemas.calc_config import CalcConfig

logger = logging.getLogger(__name__)

# Deal properties the calculator always needs, regardless of configured features
BASE_DEAL_PROPERTIES = [
    "dealname",
    "amount",
    "dealstage",
    "pipeline",
    "closedate",
    "deal_currency_code",
    "hubspot_owner_id",
]


def default_calc_config() -> CalcConfig:
    """No features, empty standard/options catalog."""
    return CalcConfig()


def load_calc_config(path: Path | str) -> CalcConfig:
    """Read and validate the config file. Falls back to the default on any failure."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
        config = CalcConfig.model_validate(data)
    except OSError as e:
        logger.error("Could not read calculator config %s: %s", path, e)
        return default_calc_config()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error("Calculator config %s is not valid JSON: %s", path, e)
        return default_calc_config()
    except ValidationError as e:
        logger.error("Calculator config %s has an invalid shape: %s", path, e)
        return default_calc_config()
    logger.info(
        "Loaded calculator config from %s (%d features, %d standard, %d options)",
        path,
        len(config.features),
        len(config.line_items.standard),
        len(config.line_items.options),
    )
    return config


def build_deal_properties(config: CalcConfig) -> list[str]:
    """Base deal properties plus every configured fromDealProperty, first occurrence wins."""
    names = list(BASE_DEAL_PROPERTIES)
    names.extend(f.from_deal_property for f in config.features if f.from_deal_property)
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        name = name.strip()
        if name and name not in seen:
            seen.add(name)
            result.append(name)
    return result


class CalcConfigStore:
    """Holds the current CalcConfig and replaces it wholesale on reload."""

    def __init__(self, path: Path | str, config: CalcConfig | None = None) -> None:
        self._path = Path(path)
        self._config = config if config is not None else load_calc_config(self._path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def current(self) -> CalcConfig:
        return self._config

    def reload(self) -> CalcConfig:
        """Load the file again and swap in the new config."""
        config = load_calc_config(self._path)
        self._config = config
        logger.info("Calculator config reloaded from %s", self._path)
        return config


def get_calc_config_store(request: Request) -> CalcConfigStore:
    """Dependency: the store created in the application lifespan."""
    return request.app.state.calc_config_store


def get_calc_config(store: CalcConfigStore = Depends(get_calc_config_store)) -> CalcConfig:
    """Dependency: snapshot of the current config for the duration of one request."""
    return store.current
