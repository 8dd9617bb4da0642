"""Callable function envelope schemas."""
from typing import Any, Dict

from pydantic import BaseModel, Field


class CallableRequest(BaseModel):
    """Request body of a callable function."""

    data: Dict[str, Any] = Field(default_factory=dict)


class CallableResponse(BaseModel):
    """Successful response of a callable function."""

    result: Dict[str, Any]
