"""
Relay error taxonomy. Every error is rendered as JSON {"error": ..., "details"?: ...}
by the handlers registered in dealcalc.main.
"""

from typing import Any

from fastapi import status


class RelayError(Exception):
    """Base class for errors surfaced to the calculator UI."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: Any = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)

    def to_content(self) -> dict[str, Any]:
        content: dict[str, Any] = {"error": self.message}
        if self.detail is not None:
            content["details"] = self.detail
        return content


class ValidationError(RelayError):
    """Missing or malformed request field."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(RelayError):
    """Token missing, badly signed, or expired."""

    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(RelayError):
    """Token is valid but was minted for a different deal."""

    status_code = status.HTTP_403_FORBIDDEN
