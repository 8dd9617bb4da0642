"""Sport store."""
from typing import Any, Dict, List, Optional

from facility_admin.stores.base import EntityStore


class SportStore(EntityStore):
    """Sports referenced by courts."""

    collection_name = "sports"
    entity_label = "sport"

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": data.get("name", ""),
            "description": data.get("description", ""),
            "category": data.get("category", ""),
            "difficulty": data.get("difficulty", ""),
            "ageGroup": data.get("ageGroup", ""),
            "maxParticipants": data.get("maxParticipants"),
            "duration": data.get("duration"),
            "equipment": list(data.get("equipment") or []),
            "rules": list(data.get("rules") or []),
            "image": data.get("image") or "",
            "active": data.get("active", True),
        }

    async def toggle_sport_status(self, project_id: str, sport_id: str) -> Optional[Dict[str, Any]]:
        """Flip the active flag of a cached sport."""
        async with self._operation("toggling sport status"):
            sport = self.get(sport_id)
            if sport is None:
                return None
            return await self._update_fields(project_id, sport_id, {"active": not sport.get("active")})

    def sports_by_category(self, category: str) -> List[Dict[str, Any]]:
        return [s for s in self.items if s.get("category") == category]

    def active_sports(self) -> List[Dict[str, Any]]:
        return [s for s in self.items if s.get("active")]


# Singleton instance
sport_store = SportStore()
