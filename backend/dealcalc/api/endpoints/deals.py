"""
Deal endpoints. Read and patch one deal in HubSpot, authorized by a deal-scoped token.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from dealcalc.core.security import require_deal_token, verify_deal_token
from dealcalc.schemas.calc_config import CalcConfig
from dealcalc.schemas.deal import Deal, DealUpdate, DealUpdateResponse
from dealcalc.services.calc_config_service import build_deal_properties, get_calc_config
from dealcalc.services.hubspot_service import HubSpotService, get_hubspot_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deals", tags=["deals"])


def _hubspot_deal_to_deal(hd: dict[str, Any], deal_id: str) -> Deal:
    """Keep only id and properties from a HubSpot deal object."""
    return Deal(
        id=str(hd.get("id") or deal_id),
        properties=hd.get("properties") or {},
    )


@router.get("/{deal_id}", response_model=Deal, summary="Get deal")
def get_deal(
    deal_id: str = Depends(require_deal_token),
    config: CalcConfig = Depends(get_calc_config),
    hubspot: HubSpotService = Depends(get_hubspot_service),
) -> Deal:
    """GET /api/deals/{deal_id}?t= : base properties plus every property the config reads."""
    properties = build_deal_properties(config)
    data = hubspot.get_deal(deal_id, properties=properties)
    return _hubspot_deal_to_deal(data, deal_id)


@router.patch("/{deal_id}", response_model=DealUpdateResponse, summary="Update deal")
def update_deal(
    deal_id: str,
    body: DealUpdate,
    hubspot: HubSpotService = Depends(get_hubspot_service),
) -> DealUpdateResponse:
    """PATCH /api/deals/{deal_id} : body {t, properties}."""
    verify_deal_token(body.t, deal_id)
    data = hubspot.update_deal(deal_id, body.properties)
    logger.info("Updated deal %s (%s)", deal_id, ", ".join(sorted(body.properties)))
    return DealUpdateResponse(deal=_hubspot_deal_to_deal(data, deal_id))
