"""Sport endpoints."""
from typing import Optional

from fastapi import APIRouter, Query

from facility_admin.api.common import ensure_valid, get_or_404, load_items, merged, store_errors
from facility_admin.schemas.sport import SportForm
from facility_admin.services.filtering import SEARCH_FIELDS, active_split, filter_items
from facility_admin.services.validation import validate_sport
from facility_admin.stores.sport_store import sport_store

router = APIRouter(prefix="/projects/{project_id}/sports", tags=["sports"])


@router.get("")
async def list_sports(
    project_id: str,
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None, description="Category, or 'all'"),
    active: Optional[bool] = Query(None),
):
    items = await load_items(sport_store, project_id, "fetch sports")
    return filter_items(
        items, search, SEARCH_FIELDS["sports"], {"category": category, "active": active}
    )


@router.get("/stats")
async def sport_stats(project_id: str):
    await load_items(sport_store, project_id, "fetch sports")
    return active_split(sport_store.items)


@router.get("/{sport_id}")
async def get_sport(project_id: str, sport_id: str):
    with store_errors("fetch sport"):
        await sport_store.ensure_fetched(project_id)
    return get_or_404(sport_store, sport_id)


@router.post("", status_code=201)
async def create_sport(project_id: str, form: SportForm):
    data = form.to_document()
    ensure_valid(validate_sport(data))

    with store_errors("create sport"):
        await sport_store.ensure_fetched(project_id)
        return await sport_store.add(project_id, data)


@router.put("/{sport_id}")
async def update_sport(project_id: str, sport_id: str, form: SportForm):
    with store_errors("update sport"):
        await sport_store.ensure_fetched(project_id)
        current = get_or_404(sport_store, sport_id)
        changes = form.to_document()
        ensure_valid(validate_sport(merged(current, changes)))
        return await sport_store.update(project_id, sport_id, changes)


@router.delete("/{sport_id}", status_code=204)
async def delete_sport(project_id: str, sport_id: str):
    with store_errors("delete sport"):
        await sport_store.ensure_fetched(project_id)
        await sport_store.delete(project_id, sport_id)


@router.post("/{sport_id}/toggle")
async def toggle_sport(project_id: str, sport_id: str):
    with store_errors("toggle sport status"):
        await sport_store.ensure_fetched(project_id)
        get_or_404(sport_store, sport_id)
        return await sport_store.toggle_sport_status(project_id, sport_id)
