"""Dining shop, menu and category endpoints."""
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile

from facility_admin.api.common import (
    ensure_valid,
    get_or_404,
    load_items,
    merged,
    read_image,
    store_errors,
)
from facility_admin.schemas.dining import CategoryCreate, MenuItemForm, ShopForm
from facility_admin.services.filtering import SEARCH_FIELDS, filter_items
from facility_admin.services.validation import validate_product, validate_shop
from facility_admin.stores.dining_store import dining_store

router = APIRouter(prefix="/projects/{project_id}/dining", tags=["dining"])


@router.get("/shops")
async def list_shops(project_id: str, search: Optional[str] = Query(None)):
    """List shops; each shop's menu is loaded alongside."""
    items = await load_items(dining_store, project_id, "fetch shops")
    return filter_items(items, search, SEARCH_FIELDS["shops"])


@router.get("/shops/{shop_id}")
async def get_shop(project_id: str, shop_id: str):
    with store_errors("fetch shop"):
        await dining_store.ensure_fetched(project_id)
    shop = get_or_404(dining_store, shop_id)
    return {**shop, "products": dining_store.products_by_shop.get(shop_id, [])}


@router.post("/shops", status_code=201)
async def create_shop(
    project_id: str,
    name: str = Form(""),
    location: str = Form(""),
    delivery_time: str = Form("", alias="deliveryTime"),
    categories: List[str] = Form([]),
    image: Optional[UploadFile] = File(None),
):
    data = {"name": name, "location": location, "deliveryTime": delivery_time, "categories": categories}
    ensure_valid(validate_shop(data))

    with store_errors("create shop"):
        await dining_store.ensure_fetched(project_id)
        return await dining_store.add_shop(project_id, data, await read_image(image))


@router.put("/shops/{shop_id}")
async def update_shop(project_id: str, shop_id: str, form: ShopForm):
    with store_errors("update shop"):
        await dining_store.ensure_fetched(project_id)
        current = get_or_404(dining_store, shop_id)
        changes = form.to_document()
        ensure_valid(validate_shop(merged(current, changes)))
        return await dining_store.update_shop(project_id, shop_id, changes)


@router.post("/shops/{shop_id}/image")
async def replace_shop_image(project_id: str, shop_id: str, image: UploadFile = File(...)):
    with store_errors("upload shop image"):
        await dining_store.ensure_fetched(project_id)
        return await dining_store.update_shop(project_id, shop_id, {}, await read_image(image))


@router.delete("/shops/{shop_id}", status_code=204)
async def delete_shop(project_id: str, shop_id: str):
    with store_errors("delete shop"):
        await dining_store.ensure_fetched(project_id)
        await dining_store.delete(project_id, shop_id)


@router.get("/shops/{shop_id}/products")
async def list_menu(project_id: str, shop_id: str):
    with store_errors("fetch products"):
        await dining_store.ensure_fetched(project_id)
        get_or_404(dining_store, shop_id)
        products = await dining_store.fetch_products(project_id, shop_id)
        if dining_store.error:
            raise RuntimeError(dining_store.error)
    return products


@router.post("/shops/{shop_id}/products", status_code=201)
async def create_menu_item(project_id: str, shop_id: str, form: MenuItemForm):
    data = form.to_document()
    ensure_valid(validate_product(data))

    with store_errors("add product"):
        await dining_store.ensure_fetched(project_id)
        get_or_404(dining_store, shop_id)
        return await dining_store.add_product(project_id, shop_id, data)


@router.put("/shops/{shop_id}/products/{product_id}")
async def update_menu_item(project_id: str, shop_id: str, product_id: str, form: MenuItemForm):
    with store_errors("update product"):
        await dining_store.ensure_fetched(project_id)
        current = next(
            (p for p in dining_store.products_by_shop.get(shop_id, []) if p.get("id") == product_id),
            None,
        )
        if current is None:
            raise HTTPException(status_code=404, detail="Product not found")
        changes = form.to_document()
        ensure_valid(validate_product(merged(current, changes)))
        return await dining_store.update_product(project_id, shop_id, product_id, changes)


@router.delete("/shops/{shop_id}/products/{product_id}", status_code=204)
async def delete_menu_item(project_id: str, shop_id: str, product_id: str):
    with store_errors("delete product"):
        await dining_store.ensure_fetched(project_id)
        await dining_store.delete_product(project_id, shop_id, product_id)


@router.get("/categories")
async def list_categories(project_id: str):
    categories = await dining_store.fetch_categories(project_id)
    if dining_store.error:
        raise HTTPException(status_code=500, detail=f"Failed to fetch categories: {dining_store.error}")
    return categories


@router.post("/categories", status_code=201)
async def create_category(project_id: str, body: CategoryCreate):
    """Add a category; names already present are not duplicated."""
    with store_errors("add category"):
        await dining_store.fetch_categories(project_id)
        return await dining_store.add_category(project_id, body.name)
