"""Promotional ad store."""
import logging
from typing import Any, Dict, List

from facility_admin.services.uploads import ImageFile, discard_blob, upload_image
from facility_admin.stores.base import EntityStore

logger = logging.getLogger(__name__)


class AdStore(EntityStore):
    """
    Banner ads shown in the resident app.

    Every ad owns exactly one uploaded image; deleting the ad removes it.
    """

    collection_name = "ads"
    entity_label = "ad"
    order_by = "createdAt"
    descending = True
    filter_fields = {"isActive": "isActive"}

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "linkUrl": data.get("linkUrl") or "",
            "order": data.get("order") or 0,
            "isActive": data.get("isActive", True),
            "imageUrl": data.get("imageUrl") or "",
            "imagePath": data.get("imagePath") or "",
        }

    async def add_ad(self, project_id: str, data: Dict[str, Any], image: ImageFile) -> Dict[str, Any]:
        """
        Upload the ad image, then create the ad document.

        Args:
            project_id: Project ID
            data: linkUrl, order, isActive
            image: The banner image, required

        Returns:
            The stored ad
        """
        async with self._operation("uploading ad image"):
            blob = await upload_image(self.blobs, project_id, self.collection_name, image)

        try:
            return await self.add(
                project_id, {**data, "imageUrl": blob.url, "imagePath": blob.path}
            )
        except Exception:
            await discard_blob(self.blobs, blob.path)
            raise

    async def delete(self, project_id: str, entity_id: str) -> None:
        """Delete an ad together with its image."""
        async with self._operation("deleting ad"):
            ad = self.get(entity_id)
            if ad is None:
                snapshot = await self.documents.get(self.collection_path(project_id), entity_id)
                ad = snapshot.to_dict() if snapshot is not None else {}

            await discard_blob(self.blobs, ad.get("imagePath"))
            await self.documents.delete(self.collection_path(project_id), entity_id)
            self.items = [item for item in self.items if item.get("id") != entity_id]
            logger.info(f"Deleted ad {entity_id} from project {project_id}")

    async def toggle_ad(self, project_id: str, ad_id: str, is_active: bool) -> Dict[str, Any]:
        async with self._operation("toggling ad status"):
            return await self._update_fields(project_id, ad_id, {"isActive": is_active})

    async def reorder_ad(self, project_id: str, ad_id: str, order: int) -> Dict[str, Any]:
        async with self._operation("updating ad order"):
            return await self._update_fields(project_id, ad_id, {"order": order})

    def active_ads(self) -> List[Dict[str, Any]]:
        """Active ads in display order."""
        return sorted(
            (ad for ad in self.items if ad.get("isActive")),
            key=lambda ad: ad.get("order") or 0,
        )


# Singleton instance
ad_store = AdStore()
