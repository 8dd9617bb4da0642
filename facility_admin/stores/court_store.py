"""Court store."""
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

import pytz

from facility_admin.stores.base import EntityStore

logger = logging.getLogger(__name__)

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

COURT_STATUSES = {"available", "maintenance", "booked"}


def default_availability() -> Dict[str, Dict[str, Any]]:
    return {day: {"enabled": True, "startTime": "08:00", "endTime": "22:00"} for day in WEEKDAYS}


def _minutes(value: str) -> int:
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def _clock(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def booking_slots(court: Dict[str, Any], on_date: date) -> List[Dict[str, str]]:
    """
    Generate bookable slots for a court on a given date.

    Slots run from the day's start time in steps of the court's booking
    interval; a slot that would pass the end time is dropped. Days with
    ``enabled`` false, inactive courts and courts under maintenance have
    no slots.

    Args:
        court: Court document
        on_date: Date to generate slots for

    Returns:
        List of {"startTime", "endTime"} dicts
    """
    if not court.get("active", True) or court.get("status") == "maintenance":
        return []

    day = (court.get("availability") or {}).get(WEEKDAYS[on_date.weekday()])
    if not day or not day.get("enabled"):
        return []

    interval = int(court.get("bookingIntervalMinutes") or 60)
    if interval <= 0:
        return []

    try:
        start = _minutes(day.get("startTime") or "")
        end = _minutes(day.get("endTime") or "")
    except ValueError:
        logger.warning(f"Court {court.get('id')} has invalid hours for {WEEKDAYS[on_date.weekday()]}")
        return []

    slots = []
    current = start
    while current + interval <= end:
        slots.append({"startTime": _clock(current), "endTime": _clock(current + interval)})
        current += interval
    return slots


class CourtStore(EntityStore):
    """Courts of a project."""

    collection_name = "courts"
    entity_label = "court"

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": data.get("name", ""),
            "type": data.get("type", ""),
            "sport": data.get("sport", ""),
            "location": data.get("location", ""),
            "capacity": data.get("capacity") or 0,
            "surface": data.get("surface", ""),
            "dimensions": data.get("dimensions") or {},
            "amenities": list(data.get("amenities") or []),
            "hourlyRate": data.get("hourlyRate") or 0,
            "status": data.get("status") or "available",
            "description": data.get("description") or "",
            "active": data.get("active", True),
            "bookingIntervalMinutes": data.get("bookingIntervalMinutes") or 60,
            "availability": data.get("availability") or default_availability(),
            "imageUrl": data.get("imageUrl") or "",
            "imagePath": data.get("imagePath") or "",
        }

    async def update_court_status(self, project_id: str, court_id: str, status: str) -> Dict[str, Any]:
        """Set a court's status."""
        if status not in COURT_STATUSES:
            raise ValueError(f"Invalid court status: {status}")
        async with self._operation("updating court status"):
            return await self._update_fields(project_id, court_id, {"status": status})

    async def toggle_court_status(self, project_id: str, court_id: str) -> Optional[Dict[str, Any]]:
        """
        Flip a cached court between available and maintenance.

        Returns:
            The updated court, or None if it is not cached
        """
        async with self._operation("toggling court status"):
            court = self.get(court_id)
            if court is None:
                return None
            new_status = "maintenance" if court.get("status") == "available" else "available"
            return await self._update_fields(project_id, court_id, {"status": new_status})

    def courts_by_sport(self, sport: str) -> List[Dict[str, Any]]:
        return [c for c in self.items if c.get("sport") == sport]

    def courts_by_status(self, status: str) -> List[Dict[str, Any]]:
        return [c for c in self.items if c.get("status") == status]

    def active_courts(self) -> List[Dict[str, Any]]:
        return [c for c in self.items if c.get("active")]

    def available_courts(self) -> List[Dict[str, Any]]:
        return [c for c in self.items if c.get("status") == "available" and c.get("active")]

    def stats(self) -> Dict[str, int]:
        return {
            "total": len(self.items),
            "available": len(self.courts_by_status("available")),
            "maintenance": len(self.courts_by_status("maintenance")),
            "booked": len(self.courts_by_status("booked")),
            "active": len(self.active_courts()),
        }

    def slots_for(self, court_id: str, on_date: Optional[date] = None) -> List[Dict[str, str]]:
        court = self.get(court_id)
        if court is None:
            raise LookupError(f"Court {court_id} not found")
        return booking_slots(court, on_date or datetime.now(pytz.UTC).date())

    def week_slots(self, court_id: str, start: date) -> Dict[str, List[Dict[str, str]]]:
        """Slots for seven consecutive days keyed by ISO date."""
        return {
            (start + timedelta(days=offset)).isoformat(): self.slots_for(court_id, start + timedelta(days=offset))
            for offset in range(7)
        }


# Singleton instance
court_store = CourtStore()
