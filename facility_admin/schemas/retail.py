"""Retail store and product schemas."""
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field

from facility_admin.schemas.common import CamelModel


class WorkingHours(BaseModel):
    open: str = ""
    close: str = ""


class ContactInfo(BaseModel):
    phone: str = ""
    email: str = ""
    website: str = ""


class StoreForm(CamelModel):
    """Schema for creating or updating a store."""

    name: Optional[str] = None
    location: Optional[str] = None
    average_delivery_time: Optional[str] = None
    delivery_fee: Optional[float] = None
    status: Optional[Literal["active", "inactive"]] = None
    working_days: Optional[Dict[str, bool]] = None
    working_hours: Optional[WorkingHours] = None
    special_notes: Optional[str] = None
    contact_info: Optional[ContactInfo] = None


class ProductForm(CamelModel):
    """Schema for creating or updating a product."""

    name: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    description: Optional[str] = None
    sku: Optional[str] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    min_stock_level: Optional[int] = Field(None, ge=0)
    available: Optional[bool] = None


class StockUpdate(BaseModel):
    """Schema for adjusting a product's stock."""

    quantity: int = Field(..., ge=0)
    operation: Literal["add", "subtract", "set"] = "add"


class StoreRatingCreate(CamelModel):
    """Schema for rating a store."""

    user_id: str
    rating: int
    comment: str = ""
