"""
Security utilities: deal-scoped JWT minting and validation, dependency injection for auth.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Query
from jose import ExpiredSignatureError, JWTError, jwt

from dealcalc.core.config import get_settings
from dealcalc.core.errors import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEAL_TOKEN_EXPIRE_MINUTES = 5
# Allowance for clock drift between the issuing and verifying hosts
CLOCK_TOLERANCE_SECONDS = 5
DEAL_CLAIM = "dealId"


def create_deal_token(deal_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Mint a token that authorizes calls against a single deal."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=DEAL_TOKEN_EXPIRE_MINUTES))
    to_encode = {DEAL_CLAIM: str(deal_id), "iat": now, "exp": expire}
    return jwt.encode(to_encode, get_settings().JWT_SECRET, algorithm=ALGORITHM)


def decode_deal_token(token: Optional[str]) -> dict[str, Any]:
    """Verify signature and expiry. Raises AuthenticationError on any failure."""
    if not token:
        raise AuthenticationError("Missing token")
    try:
        payload = jwt.decode(
            token,
            get_settings().JWT_SECRET,
            algorithms=[ALGORITHM],
            options={"leeway": CLOCK_TOLERANCE_SECONDS},
        )
    except ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except JWTError as e:
        logger.info("Rejected token: %s", e)
        raise AuthenticationError("Invalid token")
    if not payload.get(DEAL_CLAIM):
        raise AuthenticationError("Invalid token")
    return payload


def verify_deal_token(token: Optional[str], deal_id: str) -> dict[str, Any]:
    """Decode the token and require that it was minted for deal_id."""
    payload = decode_deal_token(token)
    if str(payload[DEAL_CLAIM]) != str(deal_id):
        logger.warning("Token for deal %s used against deal %s", payload[DEAL_CLAIM], deal_id)
        raise AuthorizationError("Token/deal mismatch")
    return payload


async def require_deal_token(
    deal_id: str,
    t: Optional[str] = Query(None, description="Deal-scoped token from /api/jwt"),
) -> str:
    """Dependency for /deals/{deal_id} routes: validate ?t= against the path deal id."""
    verify_deal_token(t, deal_id)
    return deal_id
