"""Sport schemas."""
from typing import List, Optional

from facility_admin.schemas.common import CamelModel


class SportForm(CamelModel):
    """Schema for creating or updating a sport."""

    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    age_group: Optional[str] = None
    max_participants: Optional[int] = None
    duration: Optional[int] = None
    equipment: Optional[List[str]] = None
    rules: Optional[List[str]] = None
    image: Optional[str] = None
    active: Optional[bool] = None
