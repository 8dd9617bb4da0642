"""Notification store."""
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz

from facility_admin.services.document_store import parse_timestamp
from facility_admin.stores.base import EntityStore

NOTIFICATION_TYPES = ["announcement", "event", "alert", "info"]
PRIORITIES = ["low", "normal", "high", "urgent"]
AUDIENCES = ["all", "residents", "staff", "specific"]


class NotificationStore(EntityStore):
    """Project notifications, newest first."""

    collection_name = "notifications"
    entity_label = "notification"
    order_by = "createdAt"
    descending = True
    filter_fields = {"type": "type", "priority": "priority", "isActive": "isActive"}

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        audience = data.get("targetAudience") or "all"
        return {
            "title": data.get("title", ""),
            "message": data.get("message", ""),
            "type": data.get("type") or "announcement",
            "category": data.get("category") or "general",
            "priority": data.get("priority") or "normal",
            "targetAudience": audience,
            "specificUsers": list(data.get("specificUsers") or []) if audience == "specific" else [],
            "scheduledFor": data.get("scheduledFor"),
            "expiresAt": data.get("expiresAt"),
            "isActive": data.get("isActive", True),
            "requiresAction": data.get("requiresAction", False),
            "actionUrl": data.get("actionUrl"),
            "actionText": data.get("actionText"),
            "imageUrl": data.get("imageUrl"),
            "createdBy": data.get("createdBy") or "admin",
        }

    async def toggle_notification(self, project_id: str, notification_id: str, is_active: bool) -> Dict[str, Any]:
        """Activate or deactivate a notification."""
        return await self.update(project_id, notification_id, {"isActive": is_active})

    def notifications_by_type(self, notification_type: str) -> List[Dict[str, Any]]:
        return [n for n in self.items if n.get("type") == notification_type]

    def notifications_by_priority(self, priority: str) -> List[Dict[str, Any]]:
        return [n for n in self.items if n.get("priority") == priority]

    def active_notifications(self) -> List[Dict[str, Any]]:
        return [n for n in self.items if n.get("isActive")]

    def upcoming(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        now = now or datetime.now(pytz.UTC)
        result = []
        for notification in self.items:
            scheduled = parse_timestamp(notification.get("scheduledFor"))
            if scheduled is not None and scheduled > now:
                result.append(notification)
        return result

    def expired(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        now = now or datetime.now(pytz.UTC)
        result = []
        for notification in self.items:
            expires = parse_timestamp(notification.get("expiresAt"))
            if expires is not None and expires < now:
                result.append(notification)
        return result

    def stats(self) -> Dict[str, int]:
        total = len(self.items)
        active = len(self.active_notifications())
        return {
            "total": total,
            "active": active,
            "inactive": total - active,
            "announcements": len(self.notifications_by_type("announcement")),
            "events": len(self.notifications_by_type("event")),
            "alerts": len(self.notifications_by_type("alert")),
            "urgent": len(self.notifications_by_priority("urgent")),
            "high": len(self.notifications_by_priority("high")),
        }


# Singleton instance
notification_store = NotificationStore()
