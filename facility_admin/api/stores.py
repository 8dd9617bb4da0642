"""Retail store, product and rating endpoints."""
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile

from facility_admin.api.common import (
    ensure_valid,
    get_or_404,
    load_items,
    merged,
    read_image,
    store_errors,
)
from facility_admin.schemas.retail import ProductForm, StockUpdate, StoreForm, StoreRatingCreate
from facility_admin.services.filtering import SEARCH_FIELDS, filter_items
from facility_admin.services.validation import validate_product, validate_store
from facility_admin.stores.retail_store import retail_store

router = APIRouter(prefix="/projects/{project_id}/stores", tags=["stores"])


def _product_or_404(store_id: str, product_id: str):
    product = retail_store.get_product(store_id, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("")
async def list_stores(
    project_id: str,
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="active, inactive or 'all'"),
):
    """
    List the stores of a project with their average ratings.

    Args:
        project_id: Project ID
        search: Search term matched against name and location
        status: Status filter

    Returns:
        Matching stores
    """
    items = await load_items(retail_store, project_id, "fetch stores")
    return filter_items(items, search, SEARCH_FIELDS["stores"], {"status": status})


@router.get("/stats")
async def store_stats(project_id: str):
    await load_items(retail_store, project_id, "fetch stores")
    with store_errors("fetch products"):
        await retail_store.fetch_all_products(project_id)
    return retail_store.stats()


@router.get("/inventory")
async def inventory(project_id: str):
    """Products across all stores grouped by stock level."""
    await load_items(retail_store, project_id, "fetch stores")
    with store_errors("fetch products"):
        await retail_store.fetch_all_products(project_id)
    return {
        "lowStock": retail_store.low_stock_products(),
        "outOfStock": retail_store.out_of_stock_products(),
    }


@router.get("/{store_id}")
async def get_store(project_id: str, store_id: str):
    with store_errors("fetch store"):
        await retail_store.ensure_fetched(project_id)
    return get_or_404(retail_store, store_id)


@router.post("", status_code=201)
async def create_store(project_id: str, form: StoreForm):
    data = form.to_document()
    ensure_valid(validate_store(data))

    with store_errors("create store"):
        await retail_store.ensure_fetched(project_id)
        return await retail_store.add(project_id, data)


@router.put("/{store_id}")
async def update_store(project_id: str, store_id: str, form: StoreForm):
    with store_errors("update store"):
        await retail_store.ensure_fetched(project_id)
        current = get_or_404(retail_store, store_id)
        changes = form.to_document()
        ensure_valid(validate_store(merged(current, changes)))
        return await retail_store.update(project_id, store_id, changes)


@router.delete("/{store_id}", status_code=204)
async def delete_store(project_id: str, store_id: str):
    with store_errors("delete store"):
        await retail_store.ensure_fetched(project_id)
        await retail_store.delete(project_id, store_id)


@router.post("/{store_id}/image")
async def upload_store_image(project_id: str, store_id: str, image: UploadFile = File(...)):
    with store_errors("upload store image"):
        await retail_store.ensure_fetched(project_id)
        return await retail_store.replace_image(project_id, store_id, await read_image(image))


@router.post("/{store_id}/ratings", status_code=201)
async def rate_store(project_id: str, store_id: str, body: StoreRatingCreate):
    """Record a rating; the store's average is recomputed on the next listing."""
    with store_errors("rate store"):
        await retail_store.ensure_fetched(project_id)
        get_or_404(retail_store, store_id)
        return await retail_store.rate_store(
            project_id, store_id, body.user_id, body.rating, body.comment
        )


@router.get("/{store_id}/products")
async def list_products(
    project_id: str,
    store_id: str,
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
):
    with store_errors("fetch products"):
        await retail_store.ensure_fetched(project_id)
        get_or_404(retail_store, store_id)
        products = await retail_store.fetch_products(project_id, store_id)
        if retail_store.error:
            raise RuntimeError(retail_store.error)
    return filter_items(products, search, SEARCH_FIELDS["products"], {"category": category})


@router.post("/{store_id}/products", status_code=201)
async def create_product(project_id: str, store_id: str, form: ProductForm):
    data = form.to_document()
    ensure_valid(validate_product(data))

    with store_errors("add product"):
        await retail_store.ensure_fetched(project_id)
        get_or_404(retail_store, store_id)
        return await retail_store.add_product(project_id, store_id, data)


@router.put("/{store_id}/products/{product_id}")
async def update_product(project_id: str, store_id: str, product_id: str, form: ProductForm):
    with store_errors("update product"):
        await retail_store.ensure_fetched(project_id)
        if store_id not in retail_store.products_by_store:
            await retail_store.fetch_products(project_id, store_id)
        current = _product_or_404(store_id, product_id)
        changes = form.to_document()
        ensure_valid(validate_product(merged(current, changes)))
        return await retail_store.update_product(project_id, store_id, product_id, changes)


@router.delete("/{store_id}/products/{product_id}", status_code=204)
async def delete_product(project_id: str, store_id: str, product_id: str):
    with store_errors("delete product"):
        await retail_store.ensure_fetched(project_id)
        await retail_store.delete_product(project_id, store_id, product_id)


@router.post("/{store_id}/products/{product_id}/stock")
async def update_stock(project_id: str, store_id: str, product_id: str, body: StockUpdate):
    """
    Adjust a product's stock.

    ``subtract`` never takes the quantity below zero.
    """
    with store_errors("update product stock"):
        await retail_store.ensure_fetched(project_id)
        if store_id not in retail_store.products_by_store:
            await retail_store.fetch_products(project_id, store_id)
        _product_or_404(store_id, product_id)
        return await retail_store.update_product_stock(
            project_id, store_id, product_id, body.quantity, body.operation
        )


@router.post("/{store_id}/products/{product_id}/image")
async def upload_product_image(
    project_id: str, store_id: str, product_id: str, image: UploadFile = File(...)
):
    with store_errors("upload product image"):
        await retail_store.ensure_fetched(project_id)
        return await retail_store.replace_product_image(
            project_id, store_id, product_id, await read_image(image)
        )
