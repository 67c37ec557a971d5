# Services: HubSpot client, calculator config

from dealcalc.services.calc_config_service import (
    BASE_DEAL_PROPERTIES,
    CalcConfigStore,
    build_deal_properties,
    get_calc_config,
    get_calc_config_store,
    load_calc_config,
)
from dealcalc.services.hubspot_service import (
    HubSpotService,
    HubSpotServiceError,
    get_hubspot_service,
)

__all__ = [
    "BASE_DEAL_PROPERTIES",
    "CalcConfigStore",
    "build_deal_properties",
    "get_calc_config",
    "get_calc_config_store",
    "load_calc_config",
    "HubSpotService",
    "HubSpotServiceError",
    "get_hubspot_service",
]
