"""Order schemas."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from facility_admin.schemas.common import CamelModel


class OrderItemForm(CamelModel):
    """Schema for an order line."""

    product_id: Optional[str] = None
    product_name: Optional[str] = None
    store_id: Optional[str] = None
    store_name: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[float] = None


class OrderForm(CamelModel):
    """Schema for creating an order."""

    order_number: Optional[str] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    items: Optional[List[OrderItemForm]] = None
    tax: Optional[float] = None
    shipping: Optional[float] = None
    status: Optional[str] = None
    payment_status: Optional[str] = None
    payment_method: Optional[str] = None
    shipping_address: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None
    order_date: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: str


class PaymentStatusUpdate(CamelModel):
    payment_status: str
