"""
Line item endpoints. List a deal's line items and upsert a batch of them in HubSpot.
"""

import logging
import re
from typing import Any

from fastapi import APIRouter, Depends

from dealcalc.core.security import require_deal_token, verify_deal_token
from dealcalc.schemas.line_item import (
    LineItem,
    LineItemInput,
    LineItemListResponse,
    LineItemUpsertRequest,
    LineItemUpsertResponse,
)
from dealcalc.services.hubspot_service import HubSpotService, get_hubspot_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["line-items"])

# HubSpot line item property names
HS_NAME = "name"
HS_PRICE = "price"
HS_QUANTITY = "quantity"
HS_CURRENCY = "hs_line_item_currency_code"
HS_DISCOUNT = "discount"
HS_DISCOUNT_PERCENT = "hs_discount_percentage"
HS_TERM = "hs_recurring_billing_period"
HS_PRODUCT_ID = "hs_product_id"
HS_SKU = "hs_sku"

LINE_ITEM_PROPERTIES = [
    HS_NAME,
    HS_PRICE,
    HS_QUANTITY,
    HS_CURRENCY,
    HS_DISCOUNT,
    HS_DISCOUNT_PERCENT,
    HS_TERM,
    HS_PRODUCT_ID,
    HS_SKU,
]

_MONTHS_PERIOD = re.compile(r"^P(\d+)M$")


def _to_number(value: Any) -> int | float | None:
    """HubSpot returns numeric properties as strings; empty means unset."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if number.is_integer() else number


def _term_to_hubspot(term: int | str) -> str:
    """Months become an ISO-8601 period (12 -> P12M); other strings pass through."""
    if isinstance(term, int) or (isinstance(term, str) and term.strip().isdigit()):
        return f"P{int(term)}M"
    return term.strip()


def _term_from_hubspot(value: str | None) -> int | str | None:
    if not value:
        return None
    match = _MONTHS_PERIOD.match(value)
    return int(match.group(1)) if match else value


def _line_item_to_hubspot_properties(item: LineItemInput) -> dict[str, Any]:
    """Build HubSpot line item properties from an upsert item, skipping unset fields."""
    props: dict[str, Any] = {}
    if item.name is not None:
        props[HS_NAME] = item.name
    if item.price is not None:
        props[HS_PRICE] = item.price
    if item.quantity is not None:
        props[HS_QUANTITY] = item.quantity
    if item.currency:
        props[HS_CURRENCY] = item.currency
    if item.discount is not None:
        props[HS_DISCOUNT] = item.discount
    if item.discount_percent is not None:
        props[HS_DISCOUNT_PERCENT] = item.discount_percent
    if item.term is not None and str(item.term).strip():
        props[HS_TERM] = _term_to_hubspot(item.term)
    if item.product_id:
        props[HS_PRODUCT_ID] = item.product_id
    if item.sku:
        props[HS_SKU] = item.sku
    return props


def _hubspot_line_item_to_line_item(hl: dict[str, Any]) -> LineItem:
    """Transform HubSpot line item object to LineItem."""
    props = hl.get("properties") or {}
    return LineItem(
        id=str(hl.get("id") or ""),
        name=props.get(HS_NAME),
        price=_to_number(props.get(HS_PRICE)),
        quantity=_to_number(props.get(HS_QUANTITY)),
        currency=props.get(HS_CURRENCY) or None,
        discount=_to_number(props.get(HS_DISCOUNT)),
        discount_percent=_to_number(props.get(HS_DISCOUNT_PERCENT)),
        term=_term_from_hubspot(props.get(HS_TERM)),
        product_id=props.get(HS_PRODUCT_ID) or None,
        sku=props.get(HS_SKU) or None,
    )


@router.get(
    "/deals/{deal_id}/line-items",
    response_model=LineItemListResponse,
    summary="List deal line items",
)
def list_line_items(
    deal_id: str = Depends(require_deal_token),
    hubspot: HubSpotService = Depends(get_hubspot_service),
) -> LineItemListResponse:
    """GET /api/deals/{deal_id}/line-items?t= : every line item associated with the deal."""
    ids = hubspot.get_deal_line_item_ids(deal_id)
    if not ids:
        return LineItemListResponse(results=[])
    records = hubspot.batch_read_line_items(ids, LINE_ITEM_PROPERTIES)
    return LineItemListResponse(results=[_hubspot_line_item_to_line_item(r) for r in records])


@router.post(
    "/line-items/upsert",
    response_model=LineItemUpsertResponse,
    summary="Create or update line items",
)
def upsert_line_items(
    body: LineItemUpsertRequest,
    hubspot: HubSpotService = Depends(get_hubspot_service),
) -> LineItemUpsertResponse:
    """
    POST /api/line-items/upsert : body {dealId, t, items}.
    Items without id are created and associated to the deal; items with id are updated.
    At most one batch-create and one batch-update call go to HubSpot.
    """
    verify_deal_token(body.t, body.deal_id)

    creates: list[dict[str, Any]] = []
    updates: list[dict[str, Any]] = []
    for item in body.items:
        props = _line_item_to_hubspot_properties(item)
        if item.id:
            updates.append({"id": item.id, "properties": props})
        else:
            creates.append(props)

    created = hubspot.batch_create_line_items(body.deal_id, creates) if creates else []
    updated = hubspot.batch_update_line_items(updates) if updates else []
    logger.info(
        "Upserted line items for deal %s: %d created, %d updated",
        body.deal_id,
        len(created),
        len(updated),
    )
    return LineItemUpsertResponse(
        created=[_hubspot_line_item_to_line_item(r) for r in created],
        updated=[_hubspot_line_item_to_line_item(r) for r in updated],
    )
