"""Event store."""
from typing import Any, Dict, List

from facility_admin.stores.base import EntityStore

EVENT_STATUSES = ["upcoming", "ongoing", "completed", "cancelled"]


class EventStore(EntityStore):
    """Tournaments, leagues and other events of a project."""

    collection_name = "events"
    entity_label = "event"
    filter_fields = {"status": "status", "type": "type"}

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": data.get("name", ""),
            "description": data.get("description", ""),
            "type": data.get("type", ""),
            "category": data.get("category", ""),
            "date": data.get("date"),
            "startTime": data.get("startTime"),
            "endTime": data.get("endTime"),
            "location": data.get("location", ""),
            "maxParticipants": data.get("maxParticipants"),
            "currentParticipants": data.get("currentParticipants") or 0,
            "entryFee": data.get("entryFee") or 0,
            "status": data.get("status") or "upcoming",
            "active": data.get("active", True),
        }

    def events_by_type(self, event_type: str) -> List[Dict[str, Any]]:
        return [e for e in self.items if e.get("type") == event_type]

    def events_by_status(self, status: str) -> List[Dict[str, Any]]:
        return [e for e in self.items if e.get("status") == status]

    def upcoming_events(self) -> List[Dict[str, Any]]:
        return self.events_by_status("upcoming")

    def stats(self) -> Dict[str, int]:
        return {
            "total": len(self.items),
            **{status: len(self.events_by_status(status)) for status in EVENT_STATUSES},
        }


# Singleton instance
event_store = EventStore()
