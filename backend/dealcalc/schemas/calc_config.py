"""
Calculator configuration schema. Served verbatim to the calculator UI; unknown keys are kept.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CalcFeature(BaseModel):
    """One calculator feature. fromDealProperty names the deal property that drives it."""
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    from_deal_property: str | None = Field(None, alias="fromDealProperty")


class LineItemCatalog(BaseModel):
    """Line items offered by the calculator: always-on standard items and optional add-ons."""
    model_config = ConfigDict(extra="allow", frozen=True)

    standard: tuple[dict[str, Any], ...] = ()
    options: tuple[dict[str, Any], ...] = ()


class CalcConfig(BaseModel):
    """Immutable calculator configuration; reload builds a new instance."""
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    features: tuple[CalcFeature, ...] = ()
    line_items: LineItemCatalog = Field(default_factory=LineItemCatalog, alias="lineItems")

    def to_public(self) -> dict[str, Any]:
        """JSON shape served at /api/calc-config."""
        data = self.model_dump(mode="json", by_alias=True, exclude={"features"})
        data["features"] = [f.model_dump(mode="json", by_alias=True, exclude_unset=True) for f in self.features]
        return data


class ReloadConfigResponse(BaseModel):
    ok: bool = True
    features: int
    standard: int
    options: int
