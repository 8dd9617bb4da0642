"""Gate pass schemas."""
from typing import Any, Dict, List, Optional

from facility_admin.schemas.common import CamelModel


class GatePassForm(CamelModel):
    """Schema for issuing or updating a gate pass."""

    pass_number: Optional[str] = None
    type: Optional[str] = None
    user_id: Optional[str] = None
    visitor_name: Optional[str] = None
    visitor_email: Optional[str] = None
    visitor_phone: Optional[str] = None
    purpose: Optional[str] = None
    valid_from: Optional[str] = None
    valid_until: Optional[str] = None
    access_level: Optional[str] = None
    allowed_areas: Optional[List[str]] = None
    vehicle_info: Optional[Dict[str, Any]] = None
    issued_by: Optional[str] = None
    notes: Optional[str] = None
