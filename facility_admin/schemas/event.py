"""Event schemas."""
from typing import Optional

from pydantic import Field

from facility_admin.schemas.common import CamelModel


class EventForm(CamelModel):
    """Schema for creating or updating an event."""

    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    category: Optional[str] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    max_participants: Optional[int] = Field(None, ge=0)
    current_participants: Optional[int] = Field(None, ge=0)
    entry_fee: Optional[float] = Field(None, ge=0)
    status: Optional[str] = None
    active: Optional[bool] = None
