"""
Deal Calculator Relay - FastAPI application.
Relays the embedded calculator UI to HubSpot: deal tokens, calc config, deals, line items.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Callable

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request as StarletteRequest

from dealcalc.api.routes import api_router
from dealcalc.core.config import Settings, get_settings
from dealcalc.core.errors import RelayError
from dealcalc.schemas.common import ErrorResponse, HealthResponse
from dealcalc.services.calc_config_service import CalcConfigStore
from dealcalc.services.hubspot_service import HubSpotServiceError

# Ensure app logs (including request logs) appear in deploy logs
_log_handler = logging.StreamHandler(sys.stdout)
_log_handler.setLevel(logging.INFO)
_log_handler.setFormatter(logging.Formatter("%(levelname)s:     %(name)s: %(message)s"))
_package_logger = logging.getLogger("dealcalc")
_package_logger.setLevel(logging.INFO)
if not _package_logger.handlers:
    _package_logger.addHandler(_log_handler)
logger = logging.getLogger(__name__)

# Load settings once at import so CORS list and static mount are available
_settings = get_settings()

# Allow embedding inside HubSpot (iframe modal)
FRAME_ANCESTORS = "frame-ancestors 'self' https://app.hubspot.com https://*.hubspot.com"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request (method + path) so deploy logs show traffic."""

    async def dispatch(self, request: StarletteRequest, call_next: Callable) -> Response:
        response = await call_next(request)
        logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
        return response


class FrameAncestorsMiddleware(BaseHTTPMiddleware):
    """Set Content-Security-Policy so HubSpot may frame the calculator."""

    async def dispatch(self, request: StarletteRequest, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers["Content-Security-Policy"] = FRAME_ANCESTORS
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Loads the calculator config once."""
    logger.info("Starting Deal Calculator Relay")
    logger.info("CORS_ORIGINS=%s", _settings.cors_origins)
    if not _settings.hubspot_token:
        logger.warning("HUBSPOT_TOKEN is not set; deal and line-item calls will fail")
    app.state.calc_config_store = CalcConfigStore(_settings.calc_config_path)
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Deal Calculator Relay",
    version="1.0.0",
    description="Deal-scoped tokens, calculator config, and HubSpot deal/line-item relay.",
    lifespan=lifespan,
)


# Registered first so the CSP and CORS middlewares also wrap its 500 responses
@app.middleware("http")
async def catch_exceptions(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )


app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(FrameAncestorsMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins_list,
    allow_credentials="*" not in _settings.cors_origins_list,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error handling: every error body is {"error": ..., "details"?: ...}
@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(HubSpotServiceError)
async def hubspot_error_handler(request: Request, exc: HubSpotServiceError) -> JSONResponse:
    content: dict[str, Any] = {"error": exc.message}
    if exc.detail is not None:
        content["details"] = exc.detail
    return JSONResponse(
        status_code=exc.status_code or status.HTTP_502_BAD_GATEWAY,
        content=jsonable_encoder(content),
    )


def _validation_message(errors: list[dict[str, Any]]) -> str:
    """First validation error as 'field: message'."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    msg = first.get("msg") or "invalid value"
    return f"{'.'.join(loc)}: {msg}" if loc else msg


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _validation_message(errors), "details": jsonable_encoder(errors)},
    )


@app.get("/", response_class=HTMLResponse)
def root() -> str:
    mount = _settings.calc_mount_path
    return (
        "<h3>HubSpot Calculator</h3>"
        f"<p>Try <code>{mount}/?dealId=YOUR_DEAL_ID&amp;t=YOUR_JWT</code></p>"
    )


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse()


app.include_router(
    api_router,
    prefix="/api",
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid field"},
        401: {"model": ErrorResponse, "description": "Missing, invalid, or expired token"},
        403: {"model": ErrorResponse, "description": "Token was issued for another deal"},
    },
)


def mount_calculator(target: FastAPI, settings: Settings) -> bool:
    """Serve the static calculator UI at CALC_MOUNT_PATH. Returns False when the directory is missing."""
    if not settings.calc_static_dir.is_dir():
        logger.warning("Static calculator directory %s not found; UI not mounted", settings.calc_static_dir)
        return False
    target.mount(
        settings.calc_mount_path,
        StaticFiles(directory=settings.calc_static_dir, html=True),
        name="calculator",
    )
    return True


mount_calculator(app, _settings)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("dealcalc.main:app", host="0.0.0.0", port=_settings.port)
