"""
Line item schemas (API contract). Field names match the calculator UI, not HubSpot.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

Number = int | float


class LineItemBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    price: Number | None = None
    quantity: Number | None = None
    currency: str | None = None
    discount: Number | None = None
    discount_percent: Number | None = Field(None, alias="discountPercent")
    # Billing term in months, or a raw ISO-8601 period HubSpot stores (e.g. "P1Y")
    term: int | str | None = None
    product_id: str | None = Field(None, alias="productId")
    sku: str | None = None


class LineItemInput(LineItemBase):
    """Item in an upsert batch. id present means update, id absent means create."""

    id: str | None = None
    quantity: Number | None = Field(None, validation_alias=AliasChoices("quantity", "qty"))

    @field_validator("id", "product_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str | None:
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class LineItem(LineItemBase):
    """Line item returned to the UI."""

    id: str


class LineItemListResponse(BaseModel):
    results: list[LineItem]


class LineItemUpsertRequest(BaseModel):
    """Request body for POST /api/line-items/upsert."""
    model_config = ConfigDict(populate_by_name=True)

    deal_id: str = Field(..., min_length=1, alias="dealId")
    t: str | None = None
    items: list[LineItemInput]

    @field_validator("deal_id", mode="before")
    @classmethod
    def coerce_deal_id(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v.strip() if isinstance(v, str) else v


class LineItemUpsertResponse(BaseModel):
    ok: bool = True
    created: list[LineItem]
    updated: list[LineItem]
