"""Project member and platform account endpoints."""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from facility_admin.api.common import ensure_valid, get_or_404, load_items, merged, store_errors
from facility_admin.schemas.user import PlatformUserCreate, ProjectUserForm, SuspendRequest
from facility_admin.services.filtering import SEARCH_FIELDS, count_by, filter_items
from facility_admin.services.validation import validate_project_user
from facility_admin.stores.user_store import platform_user_store, project_user_store

router = APIRouter(prefix="/projects/{project_id}/users", tags=["users"])
platform_router = APIRouter(prefix="/platform-users", tags=["platform users"])


@router.get("")
async def list_users(
    project_id: str,
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
):
    items = await load_items(project_user_store, project_id, "fetch users")
    return filter_items(items, search, SEARCH_FIELDS["users"], {"role": role, "status": status})


@router.get("/stats")
async def user_stats(project_id: str):
    await load_items(project_user_store, project_id, "fetch users")
    return {
        "total": len(project_user_store.items),
        "active": len(project_user_store.active_users()),
        "byRole": count_by(project_user_store.items, "role"),
        "byStatus": count_by(project_user_store.items, "status"),
    }


@router.get("/{user_id}")
async def get_user(project_id: str, user_id: str):
    with store_errors("fetch user"):
        await project_user_store.ensure_fetched(project_id)
    return get_or_404(project_user_store, user_id)


@router.post("", status_code=201)
async def create_user(project_id: str, form: ProjectUserForm):
    data = form.to_document()
    ensure_valid(validate_project_user(data))

    with store_errors("create user"):
        await project_user_store.ensure_fetched(project_id)
        return await project_user_store.add(project_id, data)


@router.put("/{user_id}")
async def update_user(project_id: str, user_id: str, form: ProjectUserForm):
    with store_errors("update user"):
        await project_user_store.ensure_fetched(project_id)
        current = get_or_404(project_user_store, user_id)
        changes = form.to_document()
        ensure_valid(validate_project_user(merged(current, changes)))
        return await project_user_store.update(project_id, user_id, changes)


@router.delete("/{user_id}", status_code=204)
async def delete_user(project_id: str, user_id: str):
    with store_errors("delete user"):
        await project_user_store.ensure_fetched(project_id)
        await project_user_store.delete(project_id, user_id)


@platform_router.get("")
async def list_platform_users(
    temporary: Optional[bool] = Query(None, description="Only temporary (true) or permanent (false) accounts"),
):
    await platform_user_store.fetch(None)
    if platform_user_store.error:
        raise HTTPException(
            status_code=500, detail=f"Failed to fetch platform users: {platform_user_store.error}"
        )
    return filter_items(platform_user_store.items, filters={"isTemporary": temporary})


@platform_router.post("", status_code=201)
async def register_platform_user(body: PlatformUserCreate):
    """
    Create the account document for an existing identity.

    Temporary accounts carry a validity window checked by validateUserAccess
    and the daily expiry sweep.
    """
    data = body.to_document()
    with store_errors("register platform user"):
        return await platform_user_store.register(body.uid, data)


@platform_router.post("/{uid}/suspend")
async def suspend_platform_user(uid: str, body: SuspendRequest):
    with store_errors("suspend user"):
        return await platform_user_store.suspend_user(uid, body.reason)


@platform_router.post("/{uid}/reinstate")
async def reinstate_platform_user(uid: str):
    with store_errors("reinstate user"):
        return await platform_user_store.reinstate_user(uid)
