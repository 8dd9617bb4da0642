"""Ad schemas."""
from typing import Optional

from pydantic import BaseModel

from facility_admin.schemas.common import CamelModel


class AdForm(CamelModel):
    """Schema for updating an ad; creation comes in as a multipart form."""

    link_url: Optional[str] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None


class AdOrderUpdate(BaseModel):
    order: int
