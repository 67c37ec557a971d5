# Pydantic request/response schemas (API contract). Kept in sync with the calculator UI.

from dealcalc.schemas.common import ErrorResponse, HealthResponse
from dealcalc.schemas.calc_config import CalcConfig, CalcFeature, LineItemCatalog, ReloadConfigResponse
from dealcalc.schemas.deal import Deal, DealUpdate, DealUpdateResponse
from dealcalc.schemas.line_item import (
    LineItem,
    LineItemInput,
    LineItemListResponse,
    LineItemUpsertRequest,
    LineItemUpsertResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "CalcConfig",
    "CalcFeature",
    "LineItemCatalog",
    "ReloadConfigResponse",
    "Deal",
    "DealUpdate",
    "DealUpdateResponse",
    "LineItem",
    "LineItemInput",
    "LineItemListResponse",
    "LineItemUpsertRequest",
    "LineItemUpsertResponse",
]
