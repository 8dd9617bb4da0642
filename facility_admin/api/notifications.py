"""Notification endpoints."""
from typing import Optional

from fastapi import APIRouter, Query

from facility_admin.api.common import ensure_valid, get_or_404, load_items, merged, store_errors
from facility_admin.schemas.notification import ActiveToggle, NotificationForm
from facility_admin.services.filtering import SEARCH_FIELDS, filter_items
from facility_admin.services.validation import validate_notification
from facility_admin.stores.notification_store import notification_store

router = APIRouter(prefix="/projects/{project_id}/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    project_id: str,
    search: Optional[str] = Query(None),
    notification_type: Optional[str] = Query(None, alias="type"),
    priority: Optional[str] = Query(None),
):
    items = await load_items(notification_store, project_id, "fetch notifications")
    return filter_items(
        items,
        search,
        SEARCH_FIELDS["notifications"],
        {"type": notification_type, "priority": priority},
    )


@router.get("/stats")
async def notification_stats(project_id: str):
    await load_items(notification_store, project_id, "fetch notifications")
    return notification_store.stats()


@router.get("/upcoming")
async def upcoming_notifications(project_id: str):
    await load_items(notification_store, project_id, "fetch notifications")
    return notification_store.upcoming()


@router.get("/expired")
async def expired_notifications(project_id: str):
    await load_items(notification_store, project_id, "fetch notifications")
    return notification_store.expired()


@router.get("/{notification_id}")
async def get_notification(project_id: str, notification_id: str):
    with store_errors("fetch notification"):
        await notification_store.ensure_fetched(project_id)
    return get_or_404(notification_store, notification_id)


@router.post("", status_code=201)
async def create_notification(project_id: str, form: NotificationForm):
    data = form.to_document()
    ensure_valid(validate_notification(data))

    with store_errors("create notification"):
        await notification_store.ensure_fetched(project_id)
        return await notification_store.add(project_id, data)


@router.put("/{notification_id}")
async def update_notification(project_id: str, notification_id: str, form: NotificationForm):
    with store_errors("update notification"):
        await notification_store.ensure_fetched(project_id)
        current = get_or_404(notification_store, notification_id)
        changes = form.to_document()
        ensure_valid(validate_notification(merged(current, changes)))
        return await notification_store.update(project_id, notification_id, changes)


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(project_id: str, notification_id: str):
    with store_errors("delete notification"):
        await notification_store.ensure_fetched(project_id)
        await notification_store.delete(project_id, notification_id)


@router.post("/{notification_id}/toggle")
async def toggle_notification(project_id: str, notification_id: str, body: ActiveToggle):
    with store_errors("toggle notification"):
        await notification_store.ensure_fetched(project_id)
        return await notification_store.toggle_notification(project_id, notification_id, body.active)
