"""Helpers shared by the entity routers."""
from contextlib import contextmanager
from typing import Any, Dict, Mapping, Optional

from fastapi import HTTPException, UploadFile

from facility_admin.services.uploads import ImageFile
from facility_admin.services.validation import ValidationErrors
from facility_admin.stores.base import EntityStore


class FormValidationError(Exception):
    """A submitted form failed validation; rendered as 422 {"errors": {...}}."""

    def __init__(self, errors: ValidationErrors):
        super().__init__("Form validation failed")
        self.errors = errors


def ensure_valid(errors: ValidationErrors) -> None:
    if errors:
        raise FormValidationError(errors)


@contextmanager
def store_errors(action: str):
    """
    Translate store failures into HTTP errors.

    LookupError -> 404, ValueError -> 400, anything else -> 500.
    """
    try:
        yield
    except (HTTPException, FormValidationError):
        raise
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e).strip("'\""))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to {action}: {str(e)}")


async def load_items(store: EntityStore, project_id: str, action: str):
    """Fetch the project's collection into the store, failing loudly."""
    await store.fetch(project_id)
    if store.error:
        raise HTTPException(status_code=500, detail=f"Failed to {action}: {store.error}")
    return store.items


def get_or_404(store: EntityStore, entity_id: str) -> Dict[str, Any]:
    entity = store.get(entity_id)
    if entity is None:
        raise HTTPException(
            status_code=404, detail=f"{store.entity_label.capitalize()} not found"
        )
    return entity


def merged(current: Mapping[str, Any], changes: Mapping[str, Any]) -> Dict[str, Any]:
    """The entity as it would look after a partial update; used for validation."""
    return {**current, **changes}


async def read_image(upload: Optional[UploadFile]) -> Optional[ImageFile]:
    """Read an uploaded file into memory."""
    if upload is None:
        return None
    content = await upload.read()
    return ImageFile(
        filename=upload.filename or "",
        content_type=upload.content_type or "",
        content=content,
    )
