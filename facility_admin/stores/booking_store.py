"""Booking store."""
import logging
from typing import Any, Dict, List, Optional

from facility_admin.services.document_store import parse_timestamp
from facility_admin.stores.base import EntityStore
from facility_admin.stores.court_store import booking_slots

logger = logging.getLogger(__name__)

BOOKING_STATUSES = ["pending", "confirmed", "cancelled", "completed"]
BOOKING_PAYMENT_STATUSES = ["pending", "paid", "refunded"]


def fits_court_slot(court: Dict[str, Any], booking: Dict[str, Any]) -> bool:
    """
    True when the booking's time range is one of the court's slots on its date.

    A day disabled in the court's availability, or a court under
    maintenance, has no slots and so accepts no bookings.
    """
    day = parse_timestamp(booking.get("date"))
    if day is None:
        return False
    wanted = {"startTime": booking.get("startTime"), "endTime": booking.get("endTime")}
    return wanted in booking_slots(court, day.date())


class BookingStore(EntityStore):
    """Court, academy and event bookings of a project, ordered by date and start time."""

    collection_name = "bookings"
    entity_label = "booking"
    order_by = "date"
    filter_fields = {
        "status": "status",
        "userId": "userId",
        "courtId": "courtId",
        "academyId": "academyId",
        "date": "date",
    }

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "userId": data.get("userId"),
            "userName": data.get("userName", ""),
            "userEmail": data.get("userEmail", ""),
            "type": data.get("type") or "court",
            "courtId": data.get("courtId"),
            "academyId": data.get("academyId"),
            "eventId": data.get("eventId"),
            "date": data.get("date"),
            "startTime": data.get("startTime"),
            "endTime": data.get("endTime"),
            "duration": data.get("duration"),
            "status": data.get("status") or "pending",
            "notes": data.get("notes") or "",
            "totalPrice": data.get("totalPrice") or 0,
            "paymentStatus": data.get("paymentStatus") or "pending",
        }

    async def fetch(self, project_id: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        await super().fetch(project_id, filters)
        # Same-day bookings are ordered by start time
        self.items = sorted(self.items, key=lambda b: (str(b.get("date") or ""), str(b.get("startTime") or "")))
        return self.items

    async def update_booking_status(self, project_id: str, booking_id: str, status: str) -> Dict[str, Any]:
        if status not in BOOKING_STATUSES:
            raise ValueError(f"Invalid booking status: {status}")
        async with self._operation("updating booking status"):
            updated = await self._update_fields(project_id, booking_id, {"status": status})
            logger.info(f"Booking {booking_id} is now {status}")
            return updated

    async def update_payment_status(self, project_id: str, booking_id: str, payment_status: str) -> Dict[str, Any]:
        if payment_status not in BOOKING_PAYMENT_STATUSES:
            raise ValueError(f"Invalid payment status: {payment_status}")
        async with self._operation("updating payment status"):
            return await self._update_fields(project_id, booking_id, {"paymentStatus": payment_status})

    def bookings_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        return [b for b in self.items if b.get("userId") == user_id]

    def bookings_by_court(self, court_id: str) -> List[Dict[str, Any]]:
        return [b for b in self.items if b.get("courtId") == court_id]

    def bookings_by_academy(self, academy_id: str) -> List[Dict[str, Any]]:
        return [b for b in self.items if b.get("academyId") == academy_id]

    def bookings_by_date(self, on_date: str) -> List[Dict[str, Any]]:
        return [b for b in self.items if b.get("date") == on_date]

    def bookings_by_status(self, status: str) -> List[Dict[str, Any]]:
        return [b for b in self.items if b.get("status") == status]

    def bookings_in_range(self, start_date: str, end_date: str) -> List[Dict[str, Any]]:
        """Bookings whose ISO date falls within [start_date, end_date]."""
        return [b for b in self.items if start_date <= str(b.get("date") or "") <= end_date]

    def stats(self) -> Dict[str, int]:
        return {
            "total": len(self.items),
            **{status: len(self.bookings_by_status(status)) for status in BOOKING_STATUSES},
        }


# Singleton instance
booking_store = BookingStore()
