"""Pytest fixtures: test settings, a recording HubSpot fake, and a TestClient wired to both."""

import json
import os

# Settings are read at import of dealcalc.main; set them before anything imports it
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("HUBSPOT_TOKEN", "test-hubspot-token")

import pytest
from fastapi.testclient import TestClient

from dealcalc.main import app
from dealcalc.services.calc_config_service import CalcConfigStore, get_calc_config_store
from dealcalc.services.hubspot_service import HubSpotServiceError, get_hubspot_service

SAMPLE_CONFIG = {
    "features": [
        {"key": "seats", "type": "number", "fromDealProperty": "seat_count"},
        {"key": "term", "type": "select", "fromDealProperty": "amount"},
        {"key": "showDiscounts", "type": "flag", "enabled": True},
    ],
    "lineItems": {
        "standard": [{"name": "Platform license", "price": 1200}],
        "options": [{"name": "Premium support", "price": 300}, {"name": "Extra seat", "price": 25}],
    },
}


class FakeHubSpotService:
    """Stands in for HubSpotService; records every call in order."""

    def __init__(self):
        self.calls = []
        self.deal_properties = {"dealname": "Acme renewal", "amount": "1000"}
        self.line_item_ids = []
        self.line_items = {}
        self.error = None
        self._next_id = 900

    def _record(self, name, *args):
        self.calls.append((name, args))
        if self.error:
            raise self.error

    def calls_named(self, name):
        return [args for n, args in self.calls if n == name]

    def get_deal(self, deal_id, properties=None):
        self._record("get_deal", deal_id, properties)
        return {"id": deal_id, "properties": dict(self.deal_properties), "archived": False}

    def update_deal(self, deal_id, properties):
        self._record("update_deal", deal_id, properties)
        merged = {**self.deal_properties, **properties}
        return {"id": deal_id, "properties": merged}

    def get_deal_line_item_ids(self, deal_id):
        self._record("get_deal_line_item_ids", deal_id)
        return list(self.line_item_ids)

    def batch_read_line_items(self, line_item_ids, properties):
        self._record("batch_read_line_items", line_item_ids, properties)
        return [{"id": lid, "properties": self.line_items.get(lid, {})} for lid in line_item_ids]

    def batch_create_line_items(self, deal_id, properties_list):
        self._record("batch_create_line_items", deal_id, properties_list)
        created = []
        for props in properties_list:
            self._next_id += 1
            created.append({"id": str(self._next_id), "properties": {k: str(v) for k, v in props.items()}})
        return created

    def batch_update_line_items(self, updates):
        self._record("batch_update_line_items", updates)
        return [
            {"id": u["id"], "properties": {k: str(v) for k, v in u["properties"].items()}}
            for u in updates
        ]


@pytest.fixture
def upstream_error():
    """Factory for the error HubSpotService raises on a non-2xx response."""

    def make(status_code=404, detail=None):
        return HubSpotServiceError(
            f"HubSpot API error: {status_code}",
            status_code=status_code,
            detail=detail if detail is not None else {"status": "error", "message": "resource not found"},
        )

    return make


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "calc-config.json"
    path.write_text(json.dumps(SAMPLE_CONFIG), encoding="utf-8")
    return path


@pytest.fixture
def calc_config_store(config_path):
    return CalcConfigStore(config_path)


@pytest.fixture
def fake_hubspot():
    return FakeHubSpotService()


@pytest.fixture
def client(fake_hubspot, calc_config_store):
    app.dependency_overrides[get_hubspot_service] = lambda: fake_hubspot
    app.dependency_overrides[get_calc_config_store] = lambda: calc_config_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
