"""
Common Pydantic schemas (error, health).
"""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Shape of every error body returned by the relay."""
    error: str
    details: Any = None


class HealthResponse(BaseModel):
    status: str = "healthy"
