"""Academy and program endpoints."""
from typing import Optional

from fastapi import APIRouter, File, Query, UploadFile

from facility_admin.api.common import (
    ensure_valid,
    get_or_404,
    load_items,
    merged,
    read_image,
    store_errors,
)
from facility_admin.schemas.academy import AcademyForm, ProgramForm
from facility_admin.services.filtering import SEARCH_FIELDS, filter_items
from facility_admin.services.validation import validate_academy, validate_program
from facility_admin.stores.academy_store import academy_store

router = APIRouter(prefix="/projects/{project_id}/academies", tags=["academies"])


@router.get("")
async def list_academies(
    project_id: str,
    search: Optional[str] = Query(None, description="Search name, type, location or email"),
    academy_type: Optional[str] = Query(None, alias="type", description="Academy type, or 'all'"),
):
    """
    List the academies of a project.

    Args:
        project_id: Project ID
        search: Case-insensitive search term
        academy_type: Academy type filter

    Returns:
        Matching academies
    """
    items = await load_items(academy_store, project_id, "fetch academies")
    return filter_items(items, search, SEARCH_FIELDS["academies"], {"type": academy_type})


@router.get("/stats")
async def academy_stats(project_id: str):
    await load_items(academy_store, project_id, "fetch academies")
    return academy_store.stats()


@router.get("/{academy_id}")
async def get_academy(project_id: str, academy_id: str):
    with store_errors("fetch academy"):
        await academy_store.ensure_fetched(project_id)
    return get_or_404(academy_store, academy_id)


@router.post("", status_code=201)
async def create_academy(project_id: str, form: AcademyForm):
    """
    Create an academy.

    Optional fields are defaulted; the academy starts without programs.
    """
    data = form.to_document()
    ensure_valid(validate_academy(data))

    with store_errors("create academy"):
        await academy_store.ensure_fetched(project_id)
        return await academy_store.add(project_id, data)


@router.put("/{academy_id}")
async def update_academy(project_id: str, academy_id: str, form: AcademyForm):
    with store_errors("update academy"):
        await academy_store.ensure_fetched(project_id)
        current = get_or_404(academy_store, academy_id)
        changes = form.to_document()
        ensure_valid(validate_academy(merged(current, changes)))
        return await academy_store.update(project_id, academy_id, changes)


@router.delete("/{academy_id}", status_code=204)
async def delete_academy(project_id: str, academy_id: str):
    with store_errors("delete academy"):
        await academy_store.ensure_fetched(project_id)
        await academy_store.delete(project_id, academy_id)


@router.post("/{academy_id}/image")
async def upload_academy_image(project_id: str, academy_id: str, image: UploadFile = File(...)):
    """Replace the academy image; the previous image is deleted afterwards."""
    with store_errors("upload academy image"):
        await academy_store.ensure_fetched(project_id)
        return await academy_store.replace_image(project_id, academy_id, await read_image(image))


@router.get("/{academy_id}/programs")
async def list_programs(project_id: str, academy_id: str):
    with store_errors("fetch programs"):
        await academy_store.ensure_fetched(project_id)
    get_or_404(academy_store, academy_id)
    return academy_store.programs_for(academy_id)


@router.post("/{academy_id}/programs", status_code=201)
async def create_program(project_id: str, academy_id: str, form: ProgramForm):
    """
    Add a program to an academy.

    Every selected day needs at least one time slot.
    """
    data = form.to_document()
    ensure_valid(validate_program(data))

    with store_errors("add program"):
        await academy_store.ensure_fetched(project_id)
        return await academy_store.add_program(project_id, academy_id, data)


@router.put("/{academy_id}/programs/{program_id}")
async def update_program(project_id: str, academy_id: str, program_id: str, form: ProgramForm):
    with store_errors("update program"):
        await academy_store.ensure_fetched(project_id)
        get_or_404(academy_store, academy_id)
        current = next(
            (p for p in academy_store.programs_for(academy_id) if p.get("id") == program_id),
            None,
        )
        if current is None:
            raise LookupError("Program not found")

        changes = form.to_document()
        ensure_valid(validate_program(merged(current, changes)))
        return await academy_store.update_program(project_id, academy_id, program_id, changes)


@router.delete("/{academy_id}/programs/{program_id}")
async def delete_program(project_id: str, academy_id: str, program_id: str):
    with store_errors("delete program"):
        await academy_store.ensure_fetched(project_id)
        return await academy_store.delete_program(project_id, academy_id, program_id)
