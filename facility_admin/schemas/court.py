"""Court schemas."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from facility_admin.schemas.common import CamelModel


class DayAvailability(CamelModel):
    """Opening window of a court on one weekday."""

    enabled: bool = True
    start_time: str = "08:00"
    end_time: str = "22:00"


class CourtForm(CamelModel):
    """Schema for creating or updating a court."""

    name: Optional[str] = None
    type: Optional[str] = None
    sport: Optional[str] = None
    location: Optional[str] = None
    capacity: Optional[int] = None
    surface: Optional[str] = None
    dimensions: Optional[Dict[str, Any]] = None
    amenities: Optional[List[str]] = None
    hourly_rate: Optional[float] = None
    status: Optional[str] = None
    description: Optional[str] = None
    active: Optional[bool] = None
    booking_interval_minutes: Optional[int] = None
    availability: Optional[Dict[str, DayAvailability]] = None


class CourtStatusUpdate(BaseModel):
    """Schema for setting a court's status."""

    status: str


class BookingSlot(CamelModel):
    """A bookable slot generated from a court's availability."""

    start_time: str
    end_time: str
