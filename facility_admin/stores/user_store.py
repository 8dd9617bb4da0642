"""Project members and platform accounts."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz

from facility_admin.services.document_store import SERVER_TIMESTAMP, parse_timestamp
from facility_admin.stores.base import EntityStore

logger = logging.getLogger(__name__)

USER_ROLES = ["admin", "manager", "member", "guest"]
USER_STATUSES = ["active", "inactive", "suspended"]
MEMBERSHIP_TYPES = ["basic", "premium", "vip"]

PLATFORM_USERS_COLLECTION = "users"


class ProjectUserStore(EntityStore):
    """Members registered under one project."""

    collection_name = "users"
    entity_label = "user"
    filter_fields = {"role": "role", "status": "status"}

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "firstName": data.get("firstName", ""),
            "lastName": data.get("lastName", ""),
            "email": data.get("email", ""),
            "phone": data.get("phone", ""),
            "role": data.get("role") or "member",
            "status": data.get("status") or "active",
            "membershipType": data.get("membershipType") or "basic",
            "joinDate": data.get("joinDate") or datetime.now(pytz.UTC).isoformat(),
            "profileImage": data.get("profileImage") or "",
            "address": data.get("address") or "",
            "emergencyContact": data.get("emergencyContact") or {},
            "preferences": data.get("preferences") or {},
        }

    def users_by_role(self, role: str) -> List[Dict[str, Any]]:
        return [u for u in self.items if u.get("role") == role]

    def users_by_status(self, status: str) -> List[Dict[str, Any]]:
        return [u for u in self.items if u.get("status") == status]

    def active_users(self) -> List[Dict[str, Any]]:
        return self.users_by_status("active")


class PlatformUserStore(EntityStore):
    """
    Accounts in the top-level ``users`` collection, keyed by identity uid.

    These are not project scoped; the ``project_id`` argument accepted by
    the inherited operations is ignored.
    """

    collection_name = PLATFORM_USERS_COLLECTION
    entity_label = "platform user"
    filter_fields = {"isTemporary": "isTemporary", "isExpired": "isExpired", "isSuspended": "isSuspended"}

    def collection_path(self, project_id: Optional[str] = None) -> str:
        return PLATFORM_USERS_COLLECTION

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        is_temporary = bool(data.get("isTemporary", False))
        return {
            "email": data.get("email", ""),
            "displayName": data.get("displayName", ""),
            "uid": data.get("uid"),
            "isTemporary": is_temporary,
            "validityStartDate": data.get("validityStartDate") if is_temporary else None,
            "validityEndDate": data.get("validityEndDate") if is_temporary else None,
            "isExpired": False,
            "expiredAt": None,
            "isSuspended": bool(data.get("isSuspended", False)),
            "suspensionReason": data.get("suspensionReason") or "",
        }

    async def register(self, uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create the account document for an identity.

        Args:
            uid: Identity uid, also used as the document id
            data: email, displayName, isTemporary, validityStartDate, validityEndDate

        Returns:
            The stored account
        """
        async with self._operation("registering platform user"):
            snapshot = await self.documents.set(
                PLATFORM_USERS_COLLECTION,
                uid,
                {
                    **self.shape({**data, "uid": uid}),
                    "createdAt": SERVER_TIMESTAMP,
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
            account = snapshot.to_dict()
            self.items = [*[u for u in self.items if u.get("id") != uid], account]
            logger.info(f"Registered platform user {uid}")
            return account

    async def suspend_user(self, uid: str, reason: str) -> Dict[str, Any]:
        async with self._operation("suspending user"):
            return await self._update_fields(
                None, uid, {"isSuspended": True, "suspensionReason": reason}
            )

    async def reinstate_user(self, uid: str) -> Dict[str, Any]:
        async with self._operation("reinstating user"):
            return await self._update_fields(
                None, uid, {"isSuspended": False, "suspensionReason": ""}
            )

    def temporary_users(self) -> List[Dict[str, Any]]:
        return [u for u in self.items if u.get("isTemporary")]

    def suspended_users(self) -> List[Dict[str, Any]]:
        return [u for u in self.items if u.get("isSuspended")]

    def overdue_users(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Temporary accounts past their end date that are not yet marked expired."""
        now = now or datetime.now(pytz.UTC)
        overdue = []
        for user in self.temporary_users():
            end = parse_timestamp(user.get("validityEndDate"))
            if end is not None and end < now and not user.get("isExpired"):
                overdue.append(user)
        return overdue


# Singleton instances
project_user_store = ProjectUserStore()
platform_user_store = PlatformUserStore()
