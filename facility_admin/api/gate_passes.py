"""Gate pass endpoints."""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from facility_admin.api.common import ensure_valid, get_or_404, merged, store_errors
from facility_admin.schemas.gate_pass import GatePassForm
from facility_admin.services.filtering import SEARCH_FIELDS, filter_items
from facility_admin.services.validation import validate_gate_pass
from facility_admin.stores.gate_pass_store import gate_pass_store

router = APIRouter(prefix="/projects/{project_id}/gate-passes", tags=["gate passes"])


async def _fetch(project_id: str, filters=None):
    await gate_pass_store.fetch(project_id, filters)
    if gate_pass_store.error:
        raise HTTPException(
            status_code=500, detail=f"Failed to fetch gate passes: {gate_pass_store.error}"
        )
    return gate_pass_store.items


@router.get("")
async def list_gate_passes(
    project_id: str,
    status: Optional[str] = Query(None),
    pass_type: Optional[str] = Query(None, alias="type"),
    user_id: Optional[str] = Query(None, alias="userId"),
    search: Optional[str] = Query(None),
):
    items = await _fetch(project_id, {"status": status, "type": pass_type, "userId": user_id})
    return filter_items(items, search, SEARCH_FIELDS["gatePasses"])


@router.get("/stats")
async def gate_pass_stats(project_id: str):
    await _fetch(project_id)
    return gate_pass_store.stats()


@router.get("/today")
async def passes_for_today(project_id: str):
    await _fetch(project_id)
    return gate_pass_store.passes_for_today()


@router.get("/expired")
async def expired_passes(project_id: str):
    """Active passes whose validity window has closed."""
    await _fetch(project_id)
    return gate_pass_store.expired_passes()


@router.get("/{pass_id}")
async def get_gate_pass(project_id: str, pass_id: str):
    with store_errors("fetch gate pass"):
        await gate_pass_store.ensure_fetched(project_id)
    return get_or_404(gate_pass_store, pass_id)


@router.post("", status_code=201)
async def create_gate_pass(project_id: str, form: GatePassForm):
    data = form.to_document()
    ensure_valid(validate_gate_pass(data))

    with store_errors("create gate pass"):
        await gate_pass_store.ensure_fetched(project_id)
        return await gate_pass_store.add(project_id, data)


@router.put("/{pass_id}")
async def update_gate_pass(project_id: str, pass_id: str, form: GatePassForm):
    with store_errors("update gate pass"):
        await gate_pass_store.ensure_fetched(project_id)
        current = get_or_404(gate_pass_store, pass_id)
        changes = form.to_document()
        ensure_valid(validate_gate_pass(merged(current, changes)))
        return await gate_pass_store.update(project_id, pass_id, changes)


@router.delete("/{pass_id}", status_code=204)
async def delete_gate_pass(project_id: str, pass_id: str):
    with store_errors("delete gate pass"):
        await gate_pass_store.ensure_fetched(project_id)
        await gate_pass_store.delete(project_id, pass_id)


@router.post("/{pass_id}/check-in")
async def check_in(project_id: str, pass_id: str):
    """
    Record entry for an active pass.

    Passes that are not active are returned unchanged.
    """
    with store_errors("check in"):
        await gate_pass_store.ensure_fetched(project_id)
        current = get_or_404(gate_pass_store, pass_id)
        updated = await gate_pass_store.check_in(project_id, pass_id)
        return updated if updated is not None else current


@router.post("/{pass_id}/check-out")
async def check_out(project_id: str, pass_id: str):
    with store_errors("check out"):
        await gate_pass_store.ensure_fetched(project_id)
        current = get_or_404(gate_pass_store, pass_id)
        updated = await gate_pass_store.check_out(project_id, pass_id)
        return updated if updated is not None else current


@router.post("/{pass_id}/revoke")
async def revoke(project_id: str, pass_id: str):
    with store_errors("revoke gate pass"):
        await gate_pass_store.ensure_fetched(project_id)
        return await gate_pass_store.revoke(project_id, pass_id)
