"""Base entity store.

An entity store mirrors one project-scoped collection into memory. Every
operation follows the same shape: set ``loading`` and clear ``error`` on
entry, perform the remote call, patch the in-memory ``items`` only after
the remote call succeeded, and reset ``loading`` on exit.

Nothing is sequenced between concurrent operations; whichever remote call
resolves last wins in the cache.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from facility_admin.services.blob_store import BlobStore, blob_store
from facility_admin.services.document_store import (
    SERVER_TIMESTAMP,
    DocumentStore,
    Filter,
    document_store,
)
from facility_admin.services.uploads import ImageFile, discard_blob, upload_image

logger = logging.getLogger(__name__)


class EntityStore:
    """Cache plus CRUD operations for one entity collection."""

    # Collection name under projects/{projectId}/
    collection_name: str = ""
    # Human readable label used in log messages
    entity_label: str = "document"
    # Default ordering applied on fetch
    order_by: Optional[str] = None
    descending: bool = False
    # filters key -> document field for equality filters accepted by fetch()
    filter_fields: Dict[str, str] = {}

    def __init__(
        self,
        documents: Optional[DocumentStore] = None,
        blobs: Optional[BlobStore] = None,
    ):
        self.documents = documents or document_store
        self.blobs = blobs or blob_store
        self.items: List[Dict[str, Any]] = []
        self.project_id: Optional[str] = None
        # True while the cache holds a filtered subset of the collection
        self.filtered = False
        self.loading = False
        self.error: Optional[str] = None

    def collection_path(self, project_id: str) -> str:
        return f"projects/{project_id}/{self.collection_name}"

    @asynccontextmanager
    async def _operation(self, action: str, reraise: bool = True):
        """Track loading/error state around a remote call."""
        self.loading = True
        self.error = None
        try:
            yield
        except Exception as e:
            logger.error(f"Error {action}: {e}")
            self.error = str(e)
            if reraise:
                raise
        finally:
            self.loading = False

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Build the document written by add(), filling in defaults."""
        return dict(data)

    def new_id(self) -> Optional[str]:
        """Id for a new document, or None to let the store generate one."""
        return None

    def build_filters(self, filters: Optional[Dict[str, Any]]) -> List[Filter]:
        """Translate fetch() filter arguments into equality predicates."""
        where: List[Filter] = []
        for key, value in (filters or {}).items():
            if value is None or value == "" or value == "all":
                continue
            if key not in self.filter_fields:
                raise ValueError(f"Unsupported {self.entity_label} filter: {key}")
            where.append((self.filter_fields[key], "==", value))
        return where

    def get(self, entity_id: str) -> Optional[Dict[str, Any]]:
        """Return the cached entity with the given id."""
        for item in self.items:
            if item.get("id") == entity_id:
                return item
        return None

    def _patch_local(self, entity_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        patched = None
        items = []
        for item in self.items:
            if item.get("id") == entity_id:
                item = {**item, **fields}
                patched = item
            items.append(item)
        self.items = items
        return patched

    def clear(self) -> None:
        self.items = []
        self.project_id = None
        self.filtered = False
        self.error = None

    async def fetch(self, project_id: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Replace the cache with the project's collection.

        On failure ``error`` is set and the previous cache is kept.

        Args:
            project_id: Project ID
            filters: Equality filters, keys from ``filter_fields``

        Returns:
            The cached items
        """
        async with self._operation(f"fetching {self.entity_label}s", reraise=False):
            where = self.build_filters(filters)
            snapshots = await self.documents.query(
                self.collection_path(project_id),
                where=where,
                order_by=self.order_by,
                descending=self.descending,
            )
            self.items = [self.hydrate(s.to_dict()) for s in snapshots]
            self.project_id = project_id
            self.filtered = bool(where)
        return self.items

    def hydrate(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Hook to derive fields on fetched items."""
        return item

    async def ensure_fetched(self, project_id: str) -> List[Dict[str, Any]]:
        """Fetch the project's whole collection unless it is already cached."""
        if self.project_id != project_id or self.filtered:
            await self.fetch(project_id)
            if self.error:
                raise RuntimeError(self.error)
        return self.items

    async def add(self, project_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create an entity and append it to the cache.

        Args:
            project_id: Project ID
            data: Form data

        Returns:
            The stored entity including its id and timestamps
        """
        async with self._operation(f"adding {self.entity_label}"):
            document = {
                **self.shape(data),
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            }
            entity_id = self.new_id()
            if entity_id is None:
                snapshot = await self.documents.add(self.collection_path(project_id), document)
            else:
                snapshot = await self.documents.set(self.collection_path(project_id), entity_id, document)

            entity = self.hydrate(snapshot.to_dict())
            self.items = [*self.items, entity]
            logger.info(f"Added {self.entity_label} {snapshot.id} to project {project_id}")
            return entity

    async def _update_fields(self, project_id: str, entity_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        # Remote partial write, then shallow merge of the written fields
        snapshot = await self.documents.update(
            self.collection_path(project_id),
            entity_id,
            {**fields, "updatedAt": SERVER_TIMESTAMP},
        )
        written = {key: snapshot.data.get(key) for key in [*fields, "updatedAt"]}
        patched = self._patch_local(entity_id, written)
        return patched if patched is not None else snapshot.to_dict()

    async def update(self, project_id: str, entity_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Write a partial update and merge it into the cached entity.

        Returns:
            The updated entity
        """
        async with self._operation(f"updating {self.entity_label}"):
            data = {k: v for k, v in data.items() if k != "id"}
            return await self._update_fields(project_id, entity_id, data)

    async def delete(self, project_id: str, entity_id: str) -> None:
        """Delete an entity and drop it from the cache."""
        async with self._operation(f"deleting {self.entity_label}"):
            await self.documents.delete(self.collection_path(project_id), entity_id)
            self.items = [item for item in self.items if item.get("id") != entity_id]
            logger.info(f"Deleted {self.entity_label} {entity_id} from project {project_id}")

    async def replace_image(self, project_id: str, entity_id: str, image: ImageFile) -> Dict[str, Any]:
        """
        Upload a new image for an entity and drop the one it replaces.

        The old blob is deleted only after the document points at the new
        one; a failed deletion leaves the old blob behind.

        Returns:
            The updated entity
        """
        async with self._operation(f"uploading {self.entity_label} image"):
            current = self.get(entity_id)
            if current is None:
                snapshot = await self.documents.get(self.collection_path(project_id), entity_id)
                if snapshot is None:
                    raise LookupError(f"{self.entity_label.capitalize()} {entity_id} not found")
                current = snapshot.to_dict()
            old_path = current.get("imagePath")

            blob = await upload_image(self.blobs, project_id, self.collection_name, image)
            updated = await self._update_fields(
                project_id,
                entity_id,
                {"imageUrl": blob.url, "imagePath": blob.path},
            )

        if old_path and old_path != blob.path:
            await discard_blob(self.blobs, old_path)
        return updated
