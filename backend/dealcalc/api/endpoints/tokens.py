"""
Token endpoint: mint a short-lived token scoped to one deal.
"""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import PlainTextResponse

from dealcalc.core.errors import ValidationError
from dealcalc.core.security import create_deal_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.get(
    "/jwt",
    response_class=PlainTextResponse,
    summary="Mint deal token",
    description="Returns a plaintext token valid for 5 minutes against the given deal only.",
)
def issue_token(
    deal_id: str | None = Query(None, alias="dealId", description="HubSpot deal ID"),
) -> PlainTextResponse:
    """GET /api/jwt?dealId= : token for the calculator iframe."""
    deal_id = (deal_id or "").strip()
    if not deal_id:
        raise ValidationError("dealId required")
    token = create_deal_token(deal_id)
    logger.info("Issued token for deal %s", deal_id)
    return PlainTextResponse(token, headers={"Cache-Control": "no-store"})
