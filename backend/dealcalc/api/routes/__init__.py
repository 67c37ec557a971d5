"""
Aggregate /api routes.

Convention: routes are declared without trailing slashes (e.g. "/calc-config") so the
calculator iframe never hits a 307 redirect.
"""

from fastapi import APIRouter

from dealcalc.api.endpoints import calc_config, deals, line_items, tokens

api_router = APIRouter()

api_router.include_router(calc_config.router, prefix="")
api_router.include_router(tokens.router, prefix="")
api_router.include_router(deals.router, prefix="")
api_router.include_router(line_items.router, prefix="")
