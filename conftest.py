"""Shared test fixtures."""
import os
import tempfile

# Point the app at throwaway storage before any facility_admin import reads settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BLOB_STORAGE_DIR"] = tempfile.mkdtemp(prefix="facility-admin-blobs-")
os.environ["BLOB_PUBLIC_BASE_URL"] = "http://testserver/blobs"

import httpx
import pytest

from facility_admin.core.database import drop_db, engine, init_db
from facility_admin.services.auth_service import auth_service
from facility_admin.services.blob_store import blob_store
from facility_admin.services.document_store import document_store
from facility_admin.services.uploads import ImageFile
from facility_admin.stores.academy_store import academy_store
from facility_admin.stores.ad_store import ad_store
from facility_admin.stores.booking_store import booking_store
from facility_admin.stores.court_store import court_store
from facility_admin.stores.dining_store import dining_store
from facility_admin.stores.event_store import event_store
from facility_admin.stores.gate_pass_store import gate_pass_store
from facility_admin.stores.notification_store import notification_store
from facility_admin.stores.order_store import order_store
from facility_admin.stores.retail_store import retail_store
from facility_admin.stores.sport_store import sport_store
from facility_admin.stores.user_store import platform_user_store, project_user_store

ALL_STORES = [
    academy_store,
    ad_store,
    booking_store,
    court_store,
    dining_store,
    event_store,
    gate_pass_store,
    notification_store,
    order_store,
    retail_store,
    sport_store,
    platform_user_store,
    project_user_store,
]

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000001e221bc330000000049454e44ae426082"
)


@pytest.fixture(autouse=True)
async def database():
    """Fresh tables and empty store caches for every test."""
    await init_db()
    for store in ALL_STORES:
        store.clear()
    yield
    for store in ALL_STORES:
        store.clear()
    await drop_db()
    # The in-memory database lives in one pooled connection; drop it with the loop
    await engine.dispose()


@pytest.fixture
def documents():
    return document_store


@pytest.fixture
def blobs():
    return blob_store


@pytest.fixture
def auth():
    return auth_service


@pytest.fixture
def png_image():
    return ImageFile(filename="banner.png", content_type="image/png", content=PNG_BYTES)


@pytest.fixture
async def client():
    """HTTP client bound to the app without running its lifespan."""
    from facility_admin.main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
async def admin_token(auth):
    """Bearer token of an existing admin identity."""
    admin = await auth.create_user("admin@example.com", "Admin", email_verified=True)
    return await auth.issue_token(admin.uid)
