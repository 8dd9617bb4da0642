"""Booking schemas."""
from typing import Literal, Optional

from pydantic import BaseModel, Field

from facility_admin.schemas.common import CamelModel


class BookingForm(CamelModel):
    """Schema for creating or updating a booking."""

    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    type: Optional[Literal["court", "academy", "event"]] = None
    court_id: Optional[str] = None
    academy_id: Optional[str] = None
    event_id: Optional[str] = None
    date: Optional[str] = Field(None, description="ISO date, e.g. 2024-01-02")
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    duration: Optional[int] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    total_price: Optional[float] = Field(None, ge=0)
    payment_status: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    status: str
