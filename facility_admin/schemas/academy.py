"""Academy schemas."""
from typing import Dict, List, Optional

from pydantic import Field

from facility_admin.schemas.common import CamelModel


class TimeSlot(CamelModel):
    """Schema for a program time slot."""

    start_time: str
    end_time: str


class AcademyForm(CamelModel):
    """Schema for creating or updating an academy."""

    name: Optional[str] = None
    type: Optional[str] = None
    established_year: Optional[int] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    description: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    capacity: Optional[int] = None
    operating_hours: Optional[str] = None
    facilities: Optional[List[str]] = None


class ProgramForm(CamelModel):
    """Schema for a program embedded in an academy."""

    name: Optional[str] = None
    category: Optional[str] = None
    age_group: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[float] = None
    capacity: Optional[int] = None
    days: Optional[List[str]] = None
    time_slots_by_day: Optional[Dict[str, List[TimeSlot]]] = None
    coaches: Optional[List[str]] = None
    description: Optional[str] = None
