"""Retail store management: stores, their products and ratings."""
import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional

from facility_admin.services.document_store import SERVER_TIMESTAMP
from facility_admin.services.filtering import stock_level
from facility_admin.services.uploads import ImageFile, discard_blob, upload_image
from facility_admin.stores.base import EntityStore

logger = logging.getLogger(__name__)

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

STOCK_OPERATIONS = {"add", "subtract", "set"}

# Derived on fetch, never written
DERIVED_STORE_FIELDS = {"rating", "ratingCount"}


class RetailStore(EntityStore):
    """
    Stores of a project with products kept in a child collection per store.

    Store ratings are not stored on the store document; every fetch
    averages the project's ``storeRatings`` collection instead.
    """

    collection_name = "stores"
    entity_label = "store"
    ratings_collection = "storeRatings"
    filter_fields = {"status": "status"}

    def __init__(self, documents=None, blobs=None):
        super().__init__(documents, blobs)
        self.products_by_store: Dict[str, List[Dict[str, Any]]] = {}

    def products_path(self, project_id: str, store_id: str) -> str:
        return f"{self.collection_path(project_id)}/{store_id}/products"

    def ratings_path(self, project_id: str) -> str:
        return f"projects/{project_id}/{self.ratings_collection}"

    def clear(self) -> None:
        super().clear()
        self.products_by_store = {}

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        working_days = data.get("workingDays") or {
            day: day not in ("saturday", "sunday") for day in WEEKDAYS
        }
        return {
            "name": data.get("name", ""),
            "location": data.get("location", ""),
            "averageDeliveryTime": data.get("averageDeliveryTime", ""),
            "deliveryFee": data.get("deliveryFee") or 0,
            "status": data.get("status") or "active",
            "workingDays": working_days,
            "workingHours": data.get("workingHours") or {"open": "", "close": ""},
            "specialNotes": data.get("specialNotes") or "",
            "contactInfo": data.get("contactInfo") or {"phone": "", "email": "", "website": ""},
            "imageUrl": data.get("imageUrl") or "",
            "imagePath": data.get("imagePath") or "",
        }

    def shape_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": data.get("name", ""),
            "price": data.get("price") or 0,
            "category": data.get("category", ""),
            "description": data.get("description") or "",
            "sku": data.get("sku") or "",
            "stockQuantity": data.get("stockQuantity") or 0,
            "minStockLevel": data.get("minStockLevel") if data.get("minStockLevel") is not None else 5,
            "available": data.get("available", True),
            "imageUrl": data.get("imageUrl") or "",
            "imagePath": data.get("imagePath") or "",
        }

    async def fetch(self, project_id: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Replace the cached stores, attaching the average rating of each.

        Args:
            project_id: Project ID
            filters: Optional {"status": ...}

        Returns:
            The cached stores
        """
        async with self._operation("fetching stores", reraise=False):
            where = self.build_filters(filters)
            snapshots = await self.documents.query(self.collection_path(project_id), where=where)
            ratings = await self.documents.query(self.ratings_path(project_id))

            scores: Dict[str, List[float]] = defaultdict(list)
            for rating in ratings:
                value = rating.get("rating")
                if isinstance(value, (int, float)) and rating.get("storeId"):
                    scores[rating.get("storeId")].append(float(value))

            stores = []
            for snapshot in snapshots:
                store = snapshot.to_dict()
                store_scores = scores.get(snapshot.id, [])
                store["rating"] = round(sum(store_scores) / len(store_scores), 1) if store_scores else 0
                store["ratingCount"] = len(store_scores)
                stores.append(store)

            self.items = stores
            self.project_id = project_id
            self.filtered = bool(where)
        return self.items

    async def add(self, project_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        store = await super().add(project_id, data)
        self._patch_local(store["id"], {"rating": 0, "ratingCount": 0})
        self.products_by_store[store["id"]] = []
        return self.get(store["id"])

    async def update(self, project_id: str, entity_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        data = {k: v for k, v in data.items() if k not in DERIVED_STORE_FIELDS}
        return await super().update(project_id, entity_id, data)

    async def delete(self, project_id: str, entity_id: str) -> None:
        await super().delete(project_id, entity_id)
        self.products_by_store.pop(entity_id, None)

    async def fetch_products(self, project_id: str, store_id: str) -> List[Dict[str, Any]]:
        """Replace the cached products of one store."""
        async with self._operation("fetching products", reraise=False):
            snapshots = await self.documents.query(self.products_path(project_id, store_id))
            self.products_by_store[store_id] = [
                {**s.to_dict(), "storeId": store_id} for s in snapshots
            ]
        return self.products_by_store.get(store_id, [])

    async def fetch_all_products(self, project_id: str) -> Dict[str, List[Dict[str, Any]]]:
        """Fetch the products of every cached store."""
        for store in list(self.items):
            await self.fetch_products(project_id, store["id"])
        return self.products_by_store

    def get_product(self, store_id: str, product_id: str) -> Optional[Dict[str, Any]]:
        for product in self.products_by_store.get(store_id, []):
            if product.get("id") == product_id:
                return product
        return None

    def _patch_product(self, store_id: str, product_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        patched = None
        products = []
        for product in self.products_by_store.get(store_id, []):
            if product.get("id") == product_id:
                product = {**product, **fields}
                patched = product
            products.append(product)
        self.products_by_store[store_id] = products
        return patched

    async def add_product(self, project_id: str, store_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a product under a store."""
        async with self._operation("adding product"):
            snapshot = await self.documents.add(
                self.products_path(project_id, store_id),
                {
                    **self.shape_product(data),
                    "createdAt": SERVER_TIMESTAMP,
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
            product = {**snapshot.to_dict(), "storeId": store_id}
            self.products_by_store[store_id] = [*self.products_by_store.get(store_id, []), product]
            return product

    async def _write_product(
        self, project_id: str, store_id: str, product_id: str, fields: Dict[str, Any]
    ) -> Dict[str, Any]:
        snapshot = await self.documents.update(
            self.products_path(project_id, store_id),
            product_id,
            {**fields, "updatedAt": SERVER_TIMESTAMP},
        )
        written = {key: snapshot.data.get(key) for key in [*fields, "updatedAt"]}
        patched = self._patch_product(store_id, product_id, written)
        return patched if patched is not None else {**snapshot.to_dict(), "storeId": store_id}

    async def update_product(
        self, project_id: str, store_id: str, product_id: str, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Write a partial product update."""
        async with self._operation("updating product"):
            data = {k: v for k, v in data.items() if k not in ("id", "storeId")}
            return await self._write_product(project_id, store_id, product_id, data)

    async def delete_product(self, project_id: str, store_id: str, product_id: str) -> None:
        async with self._operation("deleting product"):
            await self.documents.delete(self.products_path(project_id, store_id), product_id)
            self.products_by_store[store_id] = [
                p for p in self.products_by_store.get(store_id, []) if p.get("id") != product_id
            ]

    async def update_product_stock(
        self,
        project_id: str,
        store_id: str,
        product_id: str,
        quantity: int,
        operation: str = "add",
    ) -> Optional[Dict[str, Any]]:
        """
        Adjust a cached product's stock quantity.

        Args:
            project_id: Project ID
            store_id: Store ID
            product_id: Product ID
            quantity: Amount to add, subtract or set
            operation: "add", "subtract" (never below zero) or "set"

        Returns:
            The updated product, or None if it is not cached
        """
        if operation not in STOCK_OPERATIONS:
            raise ValueError(f"Invalid stock operation: {operation}")

        async with self._operation("updating product stock"):
            product = self.get_product(store_id, product_id)
            if product is None:
                return None

            current = product.get("stockQuantity") or 0
            if operation == "add":
                new_quantity = current + quantity
            elif operation == "subtract":
                new_quantity = max(0, current - quantity)
            else:
                new_quantity = quantity

            return await self._write_product(
                project_id, store_id, product_id, {"stockQuantity": new_quantity}
            )

    async def replace_product_image(
        self, project_id: str, store_id: str, product_id: str, image: ImageFile
    ) -> Dict[str, Any]:
        """Upload a product image, deleting the previous one afterwards."""
        async with self._operation("uploading product image"):
            product = self.get_product(store_id, product_id)
            if product is None:
                snapshot = await self.documents.get(self.products_path(project_id, store_id), product_id)
                if snapshot is None:
                    raise LookupError(f"Product {product_id} not found")
                product = snapshot.to_dict()
            old_path = product.get("imagePath")

            blob = await upload_image(self.blobs, project_id, f"stores/{store_id}/products", image)
            updated = await self._write_product(
                project_id, store_id, product_id, {"imageUrl": blob.url, "imagePath": blob.path}
            )

        if old_path and old_path != blob.path:
            await discard_blob(self.blobs, old_path)
        return updated

    async def rate_store(
        self, project_id: str, store_id: str, user_id: str, rating: int, comment: str = ""
    ) -> Dict[str, Any]:
        """
        Record a rating for a store.

        The store's cached average is refreshed on the next fetch.
        """
        if not 1 <= rating <= 5:
            raise ValueError("Rating must be between 1 and 5")
        async with self._operation("rating store"):
            snapshot = await self.documents.add(
                self.ratings_path(project_id),
                {
                    "storeId": store_id,
                    "userId": user_id,
                    "rating": rating,
                    "comment": comment,
                    "createdAt": SERVER_TIMESTAMP,
                },
            )
            return snapshot.to_dict()

    def all_products(self) -> List[Dict[str, Any]]:
        return [p for products in self.products_by_store.values() for p in products]

    def products_by_category(self, category: str) -> List[Dict[str, Any]]:
        return [p for p in self.all_products() if p.get("category") == category]

    def low_stock_products(self) -> List[Dict[str, Any]]:
        return [p for p in self.all_products() if stock_level(p) == "low_stock"]

    def out_of_stock_products(self) -> List[Dict[str, Any]]:
        return [p for p in self.all_products() if stock_level(p) == "out_of_stock"]

    def stats(self) -> Dict[str, int]:
        return {
            "totalStores": len(self.items),
            "activeStores": sum(1 for s in self.items if s.get("status") == "active"),
            "totalProducts": len(self.all_products()),
            "lowStockProducts": len(self.low_stock_products()),
            "outOfStockProducts": len(self.out_of_stock_products()),
        }


# Singleton instance
retail_store = RetailStore()
