"""Court endpoints."""
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, File, Query, UploadFile

from facility_admin.api.common import (
    ensure_valid,
    get_or_404,
    load_items,
    merged,
    read_image,
    store_errors,
)
from facility_admin.schemas.court import BookingSlot, CourtForm, CourtStatusUpdate
from facility_admin.services.filtering import SEARCH_FIELDS, filter_items
from facility_admin.services.validation import validate_court
from facility_admin.stores.court_store import court_store

router = APIRouter(prefix="/projects/{project_id}/courts", tags=["courts"])


@router.get("")
async def list_courts(
    project_id: str,
    search: Optional[str] = Query(None, description="Search name, location or type"),
    sport: Optional[str] = Query(None, description="Sport ID, or 'all'"),
    status: Optional[str] = Query(None, description="available, maintenance, booked or 'all'"),
):
    """
    List the courts of a project.

    Args:
        project_id: Project ID
        search: Case-insensitive search term
        sport: Sport filter
        status: Status filter

    Returns:
        Matching courts
    """
    items = await load_items(court_store, project_id, "fetch courts")
    return filter_items(items, search, SEARCH_FIELDS["courts"], {"sport": sport, "status": status})


@router.get("/stats")
async def court_stats(project_id: str):
    await load_items(court_store, project_id, "fetch courts")
    return court_store.stats()


@router.get("/available")
async def available_courts(project_id: str):
    await load_items(court_store, project_id, "fetch courts")
    return court_store.available_courts()


@router.get("/{court_id}")
async def get_court(project_id: str, court_id: str):
    with store_errors("fetch court"):
        await court_store.ensure_fetched(project_id)
    return get_or_404(court_store, court_id)


@router.post("", status_code=201)
async def create_court(project_id: str, form: CourtForm):
    data = form.to_document()
    ensure_valid(validate_court(data))

    with store_errors("create court"):
        await court_store.ensure_fetched(project_id)
        return await court_store.add(project_id, data)


@router.put("/{court_id}")
async def update_court(project_id: str, court_id: str, form: CourtForm):
    with store_errors("update court"):
        await court_store.ensure_fetched(project_id)
        current = get_or_404(court_store, court_id)
        changes = form.to_document()
        ensure_valid(validate_court(merged(current, changes)))
        return await court_store.update(project_id, court_id, changes)


@router.delete("/{court_id}", status_code=204)
async def delete_court(project_id: str, court_id: str):
    with store_errors("delete court"):
        await court_store.ensure_fetched(project_id)
        await court_store.delete(project_id, court_id)


@router.put("/{court_id}/status")
async def set_court_status(project_id: str, court_id: str, body: CourtStatusUpdate):
    with store_errors("update court status"):
        await court_store.ensure_fetched(project_id)
        return await court_store.update_court_status(project_id, court_id, body.status)


@router.post("/{court_id}/toggle")
async def toggle_court(project_id: str, court_id: str):
    """Switch a court between available and maintenance."""
    with store_errors("toggle court status"):
        await court_store.ensure_fetched(project_id)
        get_or_404(court_store, court_id)
        return await court_store.toggle_court_status(project_id, court_id)


@router.post("/{court_id}/image")
async def upload_court_image(project_id: str, court_id: str, image: UploadFile = File(...)):
    with store_errors("upload court image"):
        await court_store.ensure_fetched(project_id)
        return await court_store.replace_image(project_id, court_id, await read_image(image))


@router.get("/{court_id}/slots", response_model=List[BookingSlot])
async def court_slots(
    project_id: str,
    court_id: str,
    on: Optional[date] = Query(None, description="Date (YYYY-MM-DD), defaults to today"),
):
    """
    Bookable slots of a court on one day.

    Disabled days, inactive courts and courts under maintenance have none.
    """
    with store_errors("generate booking slots"):
        await court_store.ensure_fetched(project_id)
        return court_store.slots_for(court_id, on)


@router.get("/{court_id}/week", response_model=Dict[str, List[BookingSlot]])
async def court_week(project_id: str, court_id: str, start: date = Query(...)):
    with store_errors("generate booking slots"):
        await court_store.ensure_fetched(project_id)
        return court_store.week_slots(court_id, start)
