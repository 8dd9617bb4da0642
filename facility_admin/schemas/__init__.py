"""API schemas."""
from facility_admin.schemas.academy import AcademyForm, ProgramForm, TimeSlot
from facility_admin.schemas.ad import AdForm, AdOrderUpdate
from facility_admin.schemas.booking import BookingForm, BookingStatusUpdate
from facility_admin.schemas.court import BookingSlot, CourtForm, CourtStatusUpdate, DayAvailability
from facility_admin.schemas.dining import CategoryCreate, MenuItemForm, ShopForm
from facility_admin.schemas.event import EventForm
from facility_admin.schemas.functions import CallableRequest, CallableResponse
from facility_admin.schemas.gate_pass import GatePassForm
from facility_admin.schemas.notification import ActiveToggle, NotificationForm
from facility_admin.schemas.order import (
    OrderForm,
    OrderItemForm,
    OrderStatusUpdate,
    PaymentStatusUpdate,
)
from facility_admin.schemas.retail import ProductForm, StockUpdate, StoreForm, StoreRatingCreate
from facility_admin.schemas.sport import SportForm
from facility_admin.schemas.user import PlatformUserCreate, ProjectUserForm, SuspendRequest

__all__ = [
    "AcademyForm",
    "ProgramForm",
    "TimeSlot",
    "AdForm",
    "AdOrderUpdate",
    "BookingForm",
    "BookingStatusUpdate",
    "BookingSlot",
    "CourtForm",
    "CourtStatusUpdate",
    "DayAvailability",
    "CategoryCreate",
    "MenuItemForm",
    "ShopForm",
    "EventForm",
    "CallableRequest",
    "CallableResponse",
    "GatePassForm",
    "ActiveToggle",
    "NotificationForm",
    "OrderForm",
    "OrderItemForm",
    "OrderStatusUpdate",
    "PaymentStatusUpdate",
    "ProductForm",
    "StockUpdate",
    "StoreForm",
    "StoreRatingCreate",
    "SportForm",
    "PlatformUserCreate",
    "ProjectUserForm",
    "SuspendRequest",
]
