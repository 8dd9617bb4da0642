"""Ad endpoints."""
from fastapi import APIRouter, File, Form, UploadFile

from facility_admin.api.common import (
    ensure_valid,
    get_or_404,
    load_items,
    merged,
    read_image,
    store_errors,
)
from facility_admin.schemas.ad import AdForm, AdOrderUpdate
from facility_admin.schemas.notification import ActiveToggle
from facility_admin.services.validation import validate_ad
from facility_admin.stores.ad_store import ad_store

router = APIRouter(prefix="/projects/{project_id}/ads", tags=["ads"])


@router.get("")
async def list_ads(project_id: str):
    return await load_items(ad_store, project_id, "fetch ads")


@router.get("/active")
async def active_ads(project_id: str):
    """Active ads in display order."""
    await load_items(ad_store, project_id, "fetch ads")
    return ad_store.active_ads()


@router.post("", status_code=201)
async def create_ad(
    project_id: str,
    image: UploadFile = File(...),
    link_url: str = Form("", alias="linkUrl"),
    order: int = Form(0),
    is_active: bool = Form(True, alias="isActive"),
):
    """
    Create an ad from a multipart form.

    Args:
        project_id: Project ID
        image: Banner image (image/*, under the upload size limit)
        link_url: Target of the banner
        order: Display position
        is_active: Whether the ad is shown

    Returns:
        Created ad
    """
    data = {"linkUrl": link_url, "order": order, "isActive": is_active}
    ensure_valid(validate_ad(data))

    with store_errors("create ad"):
        await ad_store.ensure_fetched(project_id)
        return await ad_store.add_ad(project_id, data, await read_image(image))


@router.put("/{ad_id}")
async def update_ad(project_id: str, ad_id: str, form: AdForm):
    with store_errors("update ad"):
        await ad_store.ensure_fetched(project_id)
        current = get_or_404(ad_store, ad_id)
        changes = form.to_document()
        ensure_valid(validate_ad(merged(current, changes)))
        return await ad_store.update(project_id, ad_id, changes)


@router.post("/{ad_id}/image")
async def replace_ad_image(project_id: str, ad_id: str, image: UploadFile = File(...)):
    with store_errors("upload ad image"):
        await ad_store.ensure_fetched(project_id)
        return await ad_store.replace_image(project_id, ad_id, await read_image(image))


@router.delete("/{ad_id}", status_code=204)
async def delete_ad(project_id: str, ad_id: str):
    """Delete an ad; its image is removed on a best-effort basis."""
    with store_errors("delete ad"):
        await ad_store.ensure_fetched(project_id)
        await ad_store.delete(project_id, ad_id)


@router.post("/{ad_id}/toggle")
async def toggle_ad(project_id: str, ad_id: str, body: ActiveToggle):
    with store_errors("toggle ad"):
        await ad_store.ensure_fetched(project_id)
        return await ad_store.toggle_ad(project_id, ad_id, body.active)


@router.put("/{ad_id}/order")
async def reorder_ad(project_id: str, ad_id: str, body: AdOrderUpdate):
    ensure_valid(validate_ad({"order": body.order}))
    with store_errors("update ad order"):
        await ad_store.ensure_fetched(project_id)
        return await ad_store.reorder_ad(project_id, ad_id, body.order)
