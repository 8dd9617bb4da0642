"""Notification schemas."""
from typing import List, Optional

from pydantic import BaseModel

from facility_admin.schemas.common import CamelModel


class NotificationForm(CamelModel):
    """Schema for creating or updating a notification."""

    title: Optional[str] = None
    message: Optional[str] = None
    type: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    target_audience: Optional[str] = None
    specific_users: Optional[List[str]] = None
    scheduled_for: Optional[str] = None
    expires_at: Optional[str] = None
    is_active: Optional[bool] = None
    requires_action: Optional[bool] = None
    action_url: Optional[str] = None
    action_text: Optional[str] = None
    image_url: Optional[str] = None
    created_by: Optional[str] = None


class ActiveToggle(BaseModel):
    """Schema for switching an entity on or off."""

    active: bool
