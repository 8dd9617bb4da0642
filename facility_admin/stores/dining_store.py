"""Dining shops, their menus and the project's dining categories."""
import logging
from typing import Any, Dict, List, Optional

from facility_admin.services.document_store import SERVER_TIMESTAMP
from facility_admin.services.uploads import ImageFile, discard_blob, upload_image
from facility_admin.stores.base import EntityStore

logger = logging.getLogger(__name__)


class DiningStore(EntityStore):
    """Shops with products in a child collection per shop."""

    collection_name = "shops"
    entity_label = "shop"
    categories_collection = "categories"

    def __init__(self, documents=None, blobs=None):
        super().__init__(documents, blobs)
        self.products_by_shop: Dict[str, List[Dict[str, Any]]] = {}
        self.categories: List[str] = []

    def products_path(self, project_id: str, shop_id: str) -> str:
        return f"{self.collection_path(project_id)}/{shop_id}/products"

    def categories_path(self, project_id: str) -> str:
        return f"projects/{project_id}/{self.categories_collection}"

    def clear(self) -> None:
        super().clear()
        self.products_by_shop = {}
        self.categories = []

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": data.get("name", ""),
            "deliveryTime": data.get("deliveryTime", ""),
            "location": data.get("location", ""),
            "image": data.get("image") or "",
            "imagePath": data.get("imagePath") or "",
            "rating": 0,
            "categories": list(data.get("categories") or []),
        }

    def shape_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": data.get("name", ""),
            "description": data.get("description", ""),
            "price": data.get("price") or 0,
            "category": data.get("category", ""),
            "image": data.get("image") or "",
            "imagePath": data.get("imagePath") or "",
            "available": data.get("available", True),
        }

    async def fetch(self, project_id: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Replace the cached shops and load each shop's products."""
        async with self._operation("fetching shops", reraise=False):
            where = self.build_filters(filters)
            snapshots = await self.documents.query(self.collection_path(project_id), where=where)
            products_by_shop = {}
            for snapshot in snapshots:
                products = await self.documents.query(self.products_path(project_id, snapshot.id))
                products_by_shop[snapshot.id] = [p.to_dict() for p in products]

            self.items = [s.to_dict() for s in snapshots]
            self.products_by_shop = products_by_shop
            self.project_id = project_id
            self.filtered = bool(where)
        return self.items

    async def add_shop(
        self, project_id: str, data: Dict[str, Any], image: Optional[ImageFile] = None
    ) -> Dict[str, Any]:
        """Create a shop, uploading its image first when one is given."""
        if image is not None:
            async with self._operation("uploading shop image"):
                blob = await upload_image(self.blobs, project_id, self.collection_name, image)
            data = {**data, "image": blob.url, "imagePath": blob.path}

        shop = await self.add(project_id, data)
        self.products_by_shop[shop["id"]] = []
        return shop

    async def update_shop(
        self, project_id: str, shop_id: str, data: Dict[str, Any], image: Optional[ImageFile] = None
    ) -> Dict[str, Any]:
        """Update a shop; a new image replaces the old blob."""
        fields = {k: v for k, v in data.items() if k not in ("id", "rating")}
        if image is None:
            return await self.update(project_id, shop_id, fields)

        if fields:
            await self.update(project_id, shop_id, fields)
        shop = await self.replace_image(project_id, shop_id, image)
        return shop

    async def replace_image(self, project_id: str, entity_id: str, image: ImageFile) -> Dict[str, Any]:
        # Shops keep their URL in "image" rather than "imageUrl"
        async with self._operation("uploading shop image"):
            current = self.get(entity_id)
            if current is None:
                snapshot = await self.documents.get(self.collection_path(project_id), entity_id)
                if snapshot is None:
                    raise LookupError(f"Shop {entity_id} not found")
                current = snapshot.to_dict()
            old_path = current.get("imagePath")

            blob = await upload_image(self.blobs, project_id, self.collection_name, image)
            updated = await self._update_fields(
                project_id, entity_id, {"image": blob.url, "imagePath": blob.path}
            )

        if old_path and old_path != blob.path:
            await discard_blob(self.blobs, old_path)
        return updated

    async def delete(self, project_id: str, entity_id: str) -> None:
        await super().delete(project_id, entity_id)
        self.products_by_shop.pop(entity_id, None)

    async def fetch_categories(self, project_id: str) -> List[str]:
        async with self._operation("fetching categories", reraise=False):
            snapshots = await self.documents.query(self.categories_path(project_id))
            categories: List[str] = []
            for snapshot in snapshots:
                name = snapshot.get("name")
                if name and name not in categories:
                    categories.append(name)
            self.categories = categories
        return self.categories

    async def add_category(self, project_id: str, name: str) -> List[str]:
        """Add a dining category unless it is already known."""
        name = (name or "").strip()
        if not name:
            raise ValueError("Category name is required")
        async with self._operation("adding category"):
            if name not in self.categories:
                await self.documents.add(
                    self.categories_path(project_id),
                    {"name": name, "createdAt": SERVER_TIMESTAMP},
                )
                self.categories = [*self.categories, name]
        return self.categories

    async def fetch_products(self, project_id: str, shop_id: str) -> List[Dict[str, Any]]:
        async with self._operation("fetching products", reraise=False):
            snapshots = await self.documents.query(self.products_path(project_id, shop_id))
            self.products_by_shop[shop_id] = [s.to_dict() for s in snapshots]
        return self.products_by_shop.get(shop_id, [])

    async def add_product(
        self, project_id: str, shop_id: str, data: Dict[str, Any], image: Optional[ImageFile] = None
    ) -> Dict[str, Any]:
        """Add a menu item to a shop."""
        async with self._operation("adding product"):
            if image is not None:
                blob = await upload_image(self.blobs, project_id, f"shops/{shop_id}/products", image)
                data = {**data, "image": blob.url, "imagePath": blob.path}

            snapshot = await self.documents.add(
                self.products_path(project_id, shop_id),
                {
                    **self.shape_product(data),
                    "createdAt": SERVER_TIMESTAMP,
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
            product = snapshot.to_dict()
            self.products_by_shop[shop_id] = [*self.products_by_shop.get(shop_id, []), product]
            return product

    async def update_product(
        self, project_id: str, shop_id: str, product_id: str, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        async with self._operation("updating product"):
            fields = {k: v for k, v in data.items() if k != "id"}
            snapshot = await self.documents.update(
                self.products_path(project_id, shop_id),
                product_id,
                {**fields, "updatedAt": SERVER_TIMESTAMP},
            )
            written = {key: snapshot.data.get(key) for key in [*fields, "updatedAt"]}

            updated = None
            products = []
            for product in self.products_by_shop.get(shop_id, []):
                if product.get("id") == product_id:
                    product = {**product, **written}
                    updated = product
                products.append(product)
            self.products_by_shop[shop_id] = products
            return updated if updated is not None else snapshot.to_dict()

    async def delete_product(self, project_id: str, shop_id: str, product_id: str) -> None:
        async with self._operation("deleting product"):
            await self.documents.delete(self.products_path(project_id, shop_id), product_id)
            self.products_by_shop[shop_id] = [
                p for p in self.products_by_shop.get(shop_id, []) if p.get("id") != product_id
            ]

    def products_by_category(self, category: str) -> List[Dict[str, Any]]:
        return [
            p for products in self.products_by_shop.values() for p in products
            if p.get("category") == category
        ]


# Singleton instance
dining_store = DiningStore()
