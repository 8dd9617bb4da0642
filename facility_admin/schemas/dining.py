"""Dining schemas."""
from typing import List, Optional

from pydantic import BaseModel

from facility_admin.schemas.common import CamelModel


class ShopForm(CamelModel):
    """Schema for creating or updating a dining shop."""

    name: Optional[str] = None
    delivery_time: Optional[str] = None
    location: Optional[str] = None
    categories: Optional[List[str]] = None


class MenuItemForm(CamelModel):
    """Schema for a dining shop's menu item."""

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    available: Optional[bool] = None


class CategoryCreate(BaseModel):
    name: str
