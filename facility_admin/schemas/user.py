"""Project member and platform account schemas."""
from typing import Any, Dict, Optional

from facility_admin.schemas.common import CamelModel


class ProjectUserForm(CamelModel):
    """Schema for creating or updating a project member."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    membership_type: Optional[str] = None
    join_date: Optional[str] = None
    profile_image: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[Dict[str, Any]] = None
    preferences: Optional[Dict[str, Any]] = None


class PlatformUserCreate(CamelModel):
    """Schema for registering the account document of an identity."""

    uid: str
    email: str
    display_name: str = ""
    is_temporary: bool = False
    validity_start_date: Optional[str] = None
    validity_end_date: Optional[str] = None


class SuspendRequest(CamelModel):
    reason: str
