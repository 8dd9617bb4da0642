"""Tests for the document, blob and identity services."""
from datetime import datetime

import pytest
import pytz

from facility_admin.services.auth_service import AuthError
from facility_admin.services.blob_store import BlobNotFoundError
from facility_admin.services.document_store import (
    SERVER_TIMESTAMP,
    DocumentNotFoundError,
    parse_timestamp,
)
from facility_admin.services.uploads import (
    ImageFile,
    UploadValidationError,
    build_blob_path,
    discard_blob,
    upload_image,
    validate_image,
)


async def test_add_generates_id_and_resolves_server_timestamp(documents):
    snapshot = await documents.add("projects/p1/sports", {"name": "Padel", "createdAt": SERVER_TIMESTAMP})

    assert len(snapshot.id) == 20
    assert snapshot.data["name"] == "Padel"
    assert parse_timestamp(snapshot.data["createdAt"]) is not None

    stored = await documents.get("projects/p1/sports", snapshot.id)
    assert stored.to_dict() == {"id": snapshot.id, **snapshot.data}


async def test_collections_are_isolated_by_path(documents):
    await documents.set("projects/p1/courts", "c1", {"name": "A"})
    await documents.set("projects/p2/courts", "c1", {"name": "B"})

    p1 = await documents.query("projects/p1/courts")
    assert [s.get("name") for s in p1] == ["A"]


async def test_update_merges_fields(documents):
    await documents.set("projects/p1/courts", "c1", {"name": "A", "status": "available"})
    snapshot = await documents.update("projects/p1/courts", "c1", {"status": "maintenance"})

    assert snapshot.data == {"name": "A", "status": "maintenance"}


async def test_update_missing_document_raises(documents):
    with pytest.raises(DocumentNotFoundError):
        await documents.update("projects/p1/courts", "missing", {"status": "booked"})


async def test_delete_missing_document_is_noop(documents):
    await documents.delete("projects/p1/courts", "missing")
    assert await documents.get("projects/p1/courts", "missing") is None


async def test_query_filters_and_ordering(documents):
    await documents.set("projects/p1/orders", "a", {"status": "pending", "orderDate": "2024-01-02"})
    await documents.set("projects/p1/orders", "b", {"status": "pending", "orderDate": "2024-01-05"})
    await documents.set("projects/p1/orders", "c", {"status": "delivered", "orderDate": "2024-01-03"})
    await documents.set("projects/p1/orders", "d", {"status": "pending"})

    pending = await documents.query(
        "projects/p1/orders",
        where=[("status", "==", "pending")],
        order_by="orderDate",
        descending=True,
    )

    # Documents without the ordering field are left out
    assert [s.id for s in pending] == ["b", "a"]


async def test_query_compares_datetimes_against_stored_strings(documents):
    now = datetime(2024, 6, 1, tzinfo=pytz.UTC)
    await documents.set("users", "old", {"validityEndDate": "2024-05-01T00:00:00Z"})
    await documents.set("users", "new", {"validityEndDate": "2024-07-01T00:00:00+00:00"})

    past = await documents.query("users", where=[("validityEndDate", "<", now)])
    assert [s.id for s in past] == ["old"]


async def test_query_rejects_unknown_operator(documents):
    with pytest.raises(ValueError):
        await documents.query("users", where=[("a", "~=", 1)])


async def test_batch_is_all_or_nothing(documents):
    await documents.set("users", "u1", {"isExpired": False})

    batch = documents.batch()
    batch.update("users", "u1", {"isExpired": True})
    batch.update("users", "missing", {"isExpired": True})
    with pytest.raises(DocumentNotFoundError):
        await batch.commit()

    assert (await documents.get("users", "u1")).get("isExpired") is False


def test_parse_timestamp_variants():
    assert parse_timestamp("2024-01-01T10:00:00Z") == datetime(2024, 1, 1, 10, tzinfo=pytz.UTC)
    assert parse_timestamp("2024-01-01") == datetime(2024, 1, 1, tzinfo=pytz.UTC)
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(None) is None


def test_validate_image_messages():
    with pytest.raises(UploadValidationError, match="Please select an image file"):
        validate_image(None)
    with pytest.raises(UploadValidationError, match="Please select a valid image file"):
        validate_image(ImageFile("doc.pdf", "application/pdf", b"%PDF"))
    with pytest.raises(UploadValidationError, match="less than 5MB"):
        validate_image(ImageFile("big.png", "image/png", b"0" * (5 * 1024 * 1024 + 1)))


def test_blob_paths_are_namespaced_and_unique():
    first = build_blob_path("p1", "courts", "court a.png")
    second = build_blob_path("p1", "courts", "court a.png")

    assert first.startswith("projects/p1/courts/")
    assert first.endswith("_court_a.png")
    assert first != second


async def test_upload_and_discard_blob(blobs, png_image):
    blob = await upload_image(blobs, "p1", "ads", png_image)

    assert blob.url.endswith(blob.path)
    assert await blobs.read(blob.path) == png_image.content

    assert await discard_blob(blobs, blob.path) is True
    assert await blobs.exists(blob.path) is False
    # Already gone: logged and swallowed
    assert await discard_blob(blobs, blob.path) is False


async def test_blob_store_rejects_path_traversal(blobs):
    with pytest.raises(ValueError):
        await blobs.upload("../outside.png", b"x")


async def test_read_missing_blob(blobs):
    with pytest.raises(BlobNotFoundError):
        await blobs.read("projects/p1/ads/missing.png")


async def test_identity_lifecycle(auth):
    record = await auth.create_user("coach@Example.COM", "Coach")
    assert record.email == "coach@example.com"
    assert record.email_verified is False
    assert record.disabled is False

    token = await auth.issue_token(record.uid)
    assert await auth.verify_token(token) == record.uid

    await auth.update_user(record.uid, disabled=True)
    assert (await auth.get_user(record.uid)).disabled is True
    assert await auth.verify_token(token) is None


async def test_identity_errors(auth):
    await auth.create_user("coach@example.com", "Coach")

    with pytest.raises(AuthError) as exc:
        await auth.create_user("coach@example.com", "Again")
    assert exc.value.code == "auth/email-already-exists"

    with pytest.raises(AuthError) as exc:
        await auth.create_user("not-an-email", "Nobody")
    assert exc.value.code == "auth/invalid-email"

    with pytest.raises(AuthError) as exc:
        await auth.update_user("missing-uid", disabled=True)
    assert exc.value.code == "auth/user-not-found"


async def test_password_reset_link(auth):
    await auth.create_user("coach@example.com", "Coach")
    link = await auth.generate_password_reset_link("coach@example.com", "http://localhost:3000/login")

    assert link.startswith("http://localhost:3000/auth/action?")
    assert "mode=resetPassword" in link
    assert "oobCode=" in link

