"""Gate pass store."""
import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz

from facility_admin.services.document_store import parse_timestamp
from facility_admin.stores.base import EntityStore

logger = logging.getLogger(__name__)

PASS_TYPES = ["visitor", "contractor", "vendor", "member", "guest"]
PASS_STATUSES = ["active", "used", "revoked"]
ACCESS_LEVELS = ["full", "restricted", "limited"]


class GatePassStore(EntityStore):
    """
    Gate passes of a project.

    Status moves ``active -> used`` on check-in, or to ``revoked``.
    """

    collection_name = "gatePasses"
    entity_label = "gate pass"
    order_by = "validFrom"
    descending = True
    filter_fields = {"status": "status", "type": "type", "userId": "userId", "date": "validFrom"}

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "passNumber": data.get("passNumber") or f"GP-{int(time.time() * 1000)}",
            "type": data.get("type", "visitor"),
            "userId": data.get("userId"),
            "visitorName": data.get("visitorName", ""),
            "visitorEmail": data.get("visitorEmail", ""),
            "visitorPhone": data.get("visitorPhone", ""),
            "purpose": data.get("purpose", ""),
            "validFrom": data.get("validFrom"),
            "validUntil": data.get("validUntil"),
            "entryTime": data.get("entryTime"),
            "exitTime": data.get("exitTime"),
            "status": data.get("status") or "active",
            "accessLevel": data.get("accessLevel") or "restricted",
            "allowedAreas": list(data.get("allowedAreas") or []),
            "vehicleInfo": data.get("vehicleInfo") or {},
            "issuedBy": data.get("issuedBy"),
            "notes": data.get("notes") or "",
        }

    async def check_in(self, project_id: str, pass_id: str) -> Optional[Dict[str, Any]]:
        """
        Record entry for an active pass and mark it used.

        Passes that are not cached or not active are left untouched and
        nothing is written.

        Returns:
            The updated pass, or None if nothing changed
        """
        async with self._operation("checking in"):
            gate_pass = self.get(pass_id)
            if gate_pass is None or gate_pass.get("status") != "active":
                return None
            entry_time = datetime.now(pytz.UTC).isoformat()
            return await self._update_fields(
                project_id, pass_id, {"entryTime": entry_time, "status": "used"}
            )

    async def check_out(self, project_id: str, pass_id: str) -> Optional[Dict[str, Any]]:
        """Record exit for a pass that has checked in; otherwise a no-op."""
        async with self._operation("checking out"):
            gate_pass = self.get(pass_id)
            if gate_pass is None or not gate_pass.get("entryTime"):
                return None
            exit_time = datetime.now(pytz.UTC).isoformat()
            return await self._update_fields(project_id, pass_id, {"exitTime": exit_time})

    async def revoke(self, project_id: str, pass_id: str) -> Dict[str, Any]:
        async with self._operation("revoking gate pass"):
            return await self._update_fields(project_id, pass_id, {"status": "revoked"})

    def active_passes(self) -> List[Dict[str, Any]]:
        return [p for p in self.items if p.get("status") == "active"]

    def expired_passes(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Active passes whose validity window has already closed."""
        now = now or datetime.now(pytz.UTC)
        expired = []
        for gate_pass in self.active_passes():
            valid_until = parse_timestamp(gate_pass.get("validUntil"))
            if valid_until is not None and valid_until < now:
                expired.append(gate_pass)
        return expired

    def passes_by_status(self, status: str) -> List[Dict[str, Any]]:
        return [p for p in self.items if p.get("status") == status]

    def passes_for_today(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        today = (now or datetime.now(pytz.UTC)).date().isoformat()
        return [
            p for p in self.items
            if str(p.get("validFrom") or "").startswith(today)
            or str(p.get("validUntil") or "").startswith(today)
        ]

    def stats(self) -> Dict[str, int]:
        return {
            "total": len(self.items),
            "active": len(self.active_passes()),
            "used": len(self.passes_by_status("used")),
            "revoked": len(self.passes_by_status("revoked")),
            "expired": len(self.expired_passes()),
        }


# Singleton instance
gate_pass_store = GatePassStore()
