"""Event endpoints."""
from typing import Optional

from fastapi import APIRouter, Query

from facility_admin.api.common import ensure_valid, get_or_404, load_items, merged, store_errors
from facility_admin.schemas.event import EventForm
from facility_admin.services.filtering import SEARCH_FIELDS, filter_items
from facility_admin.services.validation import validate_event
from facility_admin.stores.event_store import event_store

router = APIRouter(prefix="/projects/{project_id}/events", tags=["events"])


@router.get("")
async def list_events(
    project_id: str,
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="Status, or 'all'"),
    event_type: Optional[str] = Query(None, alias="type"),
):
    items = await load_items(event_store, project_id, "fetch events")
    return filter_items(items, search, SEARCH_FIELDS["events"], {"status": status, "type": event_type})


@router.get("/stats")
async def event_stats(project_id: str):
    await load_items(event_store, project_id, "fetch events")
    return event_store.stats()


@router.get("/upcoming")
async def upcoming_events(project_id: str):
    await load_items(event_store, project_id, "fetch events")
    return event_store.upcoming_events()


@router.get("/{event_id}")
async def get_event(project_id: str, event_id: str):
    with store_errors("fetch event"):
        await event_store.ensure_fetched(project_id)
    return get_or_404(event_store, event_id)


@router.post("", status_code=201)
async def create_event(project_id: str, form: EventForm):
    data = form.to_document()
    ensure_valid(validate_event(data))

    with store_errors("create event"):
        await event_store.ensure_fetched(project_id)
        return await event_store.add(project_id, data)


@router.put("/{event_id}")
async def update_event(project_id: str, event_id: str, form: EventForm):
    with store_errors("update event"):
        await event_store.ensure_fetched(project_id)
        current = get_or_404(event_store, event_id)
        changes = form.to_document()
        ensure_valid(validate_event(merged(current, changes)))
        return await event_store.update(project_id, event_id, changes)


@router.delete("/{event_id}", status_code=204)
async def delete_event(project_id: str, event_id: str):
    with store_errors("delete event"):
        await event_store.ensure_fetched(project_id)
        await event_store.delete(project_id, event_id)
