"""
Calculator configuration endpoints: read the current config, reload it from disk.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from dealcalc.schemas.calc_config import CalcConfig, ReloadConfigResponse
from dealcalc.services.calc_config_service import (
    CalcConfigStore,
    get_calc_config,
    get_calc_config_store,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["config"])


@router.get("/calc-config", summary="Calculator config")
def read_calc_config(config: CalcConfig = Depends(get_calc_config)) -> JSONResponse:
    """GET /api/calc-config : features and line-item catalog, never cached by the browser."""
    return JSONResponse(config.to_public(), headers={"Cache-Control": "no-store"})


@router.post(
    "/reload-config",
    response_model=ReloadConfigResponse,
    summary="Reload calculator config",
)
def reload_calc_config(
    store: CalcConfigStore = Depends(get_calc_config_store),
) -> ReloadConfigResponse:
    """POST /api/reload-config : re-read the config file and report what was loaded."""
    config = store.reload()
    return ReloadConfigResponse(
        features=len(config.features),
        standard=len(config.line_items.standard),
        options=len(config.line_items.options),
    )
