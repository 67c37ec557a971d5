"""
Deal schemas for the deal gateway.
"""

from typing import Any

from pydantic import BaseModel, Field


class Deal(BaseModel):
    """Deal as returned to the calculator: HubSpot id plus the requested properties."""
    id: str
    properties: dict[str, Any] = {}


class DealUpdate(BaseModel):
    """Request body for PATCH /api/deals/{deal_id}."""
    t: str | None = Field(None, description="Deal-scoped token from /api/jwt")
    properties: dict[str, Any] = Field(..., min_length=1, description="HubSpot deal properties to set")


class DealUpdateResponse(BaseModel):
    ok: bool = True
    deal: Deal
