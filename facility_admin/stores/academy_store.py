"""Academy store with embedded programs."""
import logging
import time
from typing import Any, Dict, List

from facility_admin.services.document_store import SERVER_TIMESTAMP
from facility_admin.stores.base import EntityStore

logger = logging.getLogger(__name__)


_last_timestamp_id = 0


def timestamp_id() -> str:
    """
    Client-side id derived from the current time in milliseconds.

    Ids issued within the same millisecond are bumped so they stay unique
    within the process.
    """
    global _last_timestamp_id
    value = max(int(time.time() * 1000), _last_timestamp_id + 1)
    _last_timestamp_id = value
    return str(value)


class AcademyStore(EntityStore):
    """
    Academies and their programs.

    Programs live inside the academy document. Changing one program
    rewrites the academy's whole program list as computed from the cache,
    so two clients editing programs of the same academy overwrite each
    other.
    """

    collection_name = "academies"
    entity_label = "academy"

    def new_id(self) -> str:
        return timestamp_id()

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": data.get("name", ""),
            "type": data.get("type", ""),
            "establishedYear": data.get("establishedYear"),
            "rating": data.get("rating") or 0,
            "description": data.get("description", ""),
            "email": data.get("email", ""),
            "phone": data.get("phone", ""),
            "location": data.get("location", ""),
            "website": data.get("website", ""),
            "capacity": data.get("capacity") or 0,
            "operatingHours": data.get("operatingHours", ""),
            "facilities": list(data.get("facilities") or []),
            "programs": [],
            "imageUrl": data.get("imageUrl") or "",
            "imagePath": data.get("imagePath") or "",
        }

    async def update(self, project_id: str, entity_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        # Programs are only changed through the program operations
        data = {k: v for k, v in data.items() if k != "programs"}
        return await super().update(project_id, entity_id, data)

    def programs_for(self, academy_id: str) -> List[Dict[str, Any]]:
        academy = self.get(academy_id)
        return list(academy.get("programs") or []) if academy else []

    async def _write_programs(
        self, project_id: str, academy_id: str, programs: List[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        await self.documents.update(
            self.collection_path(project_id),
            academy_id,
            {"programs": programs, "updatedAt": SERVER_TIMESTAMP},
        )
        self._patch_local(academy_id, {"programs": programs})
        return programs

    def _cached_academy(self, academy_id: str) -> Dict[str, Any]:
        academy = self.get(academy_id)
        if academy is None:
            raise LookupError(f"Academy {academy_id} not found")
        return academy

    async def add_program(self, project_id: str, academy_id: str, program: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append a program to an academy.

        Args:
            project_id: Project ID
            academy_id: Academy ID
            program: Program fields

        Returns:
            The new program with its id
        """
        async with self._operation("adding program"):
            academy = self._cached_academy(academy_id)
            new_program = {**program, "id": timestamp_id()}
            programs = [*(academy.get("programs") or []), new_program]
            await self._write_programs(project_id, academy_id, programs)
            logger.info(f"Added program {new_program['id']} to academy {academy_id}")
            return new_program

    async def update_program(
        self, project_id: str, academy_id: str, program_id: str, changes: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        """Merge changes into one program and rewrite the program list."""
        async with self._operation("updating program"):
            academy = self._cached_academy(academy_id)
            changes = {k: v for k, v in changes.items() if k != "id"}
            programs = [
                {**p, **changes} if p.get("id") == program_id else p
                for p in academy.get("programs") or []
            ]
            return await self._write_programs(project_id, academy_id, programs)

    async def delete_program(self, project_id: str, academy_id: str, program_id: str) -> List[Dict[str, Any]]:
        """Remove one program and rewrite the program list."""
        async with self._operation("deleting program"):
            academy = self._cached_academy(academy_id)
            programs = [p for p in academy.get("programs") or [] if p.get("id") != program_id]
            return await self._write_programs(project_id, academy_id, programs)

    def stats(self) -> Dict[str, Any]:
        academies = self.items
        total_programs = sum(len(a.get("programs") or []) for a in academies)
        rated = [a.get("rating") or 0 for a in academies if a.get("rating")]
        return {
            "totalAcademies": len(academies),
            "totalPrograms": total_programs,
            "averageRating": round(sum(rated) / len(rated), 1) if rated else 0,
        }


# Singleton instance
academy_store = AcademyStore()
