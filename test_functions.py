"""Tests for the callable functions and the scheduled maintenance jobs."""
from datetime import datetime, timedelta

import pytest
import pytz

from facility_admin.core.errors import FunctionError
from facility_admin.services.account_functions import (
    create_user,
    expire_temporary_users,
    validate_user_access,
)
from facility_admin.services.push_notifications import cleanup_push_notifications, push_notification_stats
from facility_admin.services.scheduler import ExpirySweepScheduler

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=pytz.UTC)


async def make_account(auth, documents, email, **fields):
    record = await auth.create_user(email, email.split("@")[0])
    await documents.set("users", record.uid, {"email": email, "uid": record.uid, **fields})
    return record.uid


async def test_create_user_requires_authentication(auth):
    with pytest.raises(FunctionError) as exc:
        await create_user(None, {"email": "new@example.com", "displayName": "New"}, auth=auth)
    assert exc.value.code == "unauthenticated"


async def test_create_user_requires_email_and_display_name(auth):
    with pytest.raises(FunctionError) as exc:
        await create_user("admin", {"email": "new@example.com"}, auth=auth)
    assert exc.value.code == "invalid-argument"
    assert exc.value.message == "Email and display name are required"


async def test_create_user_creates_unverified_identity(auth):
    result = await create_user(
        "admin",
        {"email": "new@example.com", "displayName": "New", "sendPasswordResetEmail": True},
        auth=auth,
    )

    assert result["success"] is True
    assert result["email"] == "new@example.com"
    assert result["message"] == "User created successfully"

    record = await auth.get_user(result["uid"])
    assert record.email_verified is False
    assert record.display_name == "New"


async def test_create_user_maps_identity_errors(auth):
    await create_user("admin", {"email": "new@example.com", "displayName": "New"}, auth=auth)

    with pytest.raises(FunctionError) as exc:
        await create_user("admin", {"email": "new@example.com", "displayName": "Again"}, auth=auth)
    assert exc.value.code == "already-exists"

    with pytest.raises(FunctionError) as exc:
        await create_user("admin", {"email": "nope", "displayName": "Bad"}, auth=auth)
    assert exc.value.code == "invalid-argument"


async def test_sweep_expires_only_overdue_temporary_users(auth, documents):
    past = await make_account(
        auth, documents, "past@example.com", isTemporary=True, validityEndDate="2024-05-01T00:00:00Z"
    )
    future = await make_account(
        auth, documents, "future@example.com", isTemporary=True, validityEndDate="2024-07-01T00:00:00Z"
    )
    permanent = await make_account(auth, documents, "perm@example.com", isTemporary=False)

    result = await expire_temporary_users(auth=auth, documents=documents, now=NOW)

    assert result == {"expired": 1, "disabled": 1}

    expired = await documents.get("users", past)
    assert expired.get("isExpired") is True
    assert expired.get("expiredAt")
    assert (await auth.get_user(past)).disabled is True

    assert (await documents.get("users", future)).get("isExpired") is None
    assert (await auth.get_user(future)).disabled is False
    assert (await documents.get("users", permanent)).get("isExpired") is None


async def test_sweep_skips_already_expired_users(auth, documents):
    await make_account(
        auth,
        documents,
        "past@example.com",
        isTemporary=True,
        validityEndDate="2024-05-01T00:00:00Z",
        isExpired=True,
    )

    assert await expire_temporary_users(auth=auth, documents=documents, now=NOW) == {"expired": 0, "disabled": 0}


async def test_sweep_tolerates_identity_failures(auth, documents):
    await documents.set(
        "users", "orphan", {"isTemporary": True, "validityEndDate": "2024-05-01T00:00:00Z", "uid": "no-such-uid"}
    )

    result = await expire_temporary_users(auth=auth, documents=documents, now=NOW)

    assert result == {"expired": 1, "disabled": 0}
    assert (await documents.get("users", "orphan")).get("isExpired") is True


async def test_validate_access_requires_authentication(auth, documents):
    with pytest.raises(FunctionError) as exc:
        await validate_user_access(None, {}, auth=auth, documents=documents, now=NOW)
    assert exc.value.code == "unauthenticated"


async def test_validate_access_unknown_user(auth, documents):
    with pytest.raises(FunctionError) as exc:
        await validate_user_access("ghost", {}, auth=auth, documents=documents, now=NOW)
    assert exc.value.code == "not-found"
    assert exc.value.message == "User not found"


async def test_validate_access_expired_user_is_disabled(auth, documents):
    uid = await make_account(
        auth, documents, "temp@example.com", isTemporary=True, validityEndDate="2024-05-01T00:00:00Z"
    )

    with pytest.raises(FunctionError) as exc:
        await validate_user_access(uid, {}, auth=auth, documents=documents, now=NOW)

    assert exc.value.code == "permission-denied"
    assert exc.value.message == "Your temporary access has expired"
    assert exc.value.details["reason"] == "expired"
    assert (await auth.get_user(uid)).disabled is True
    assert (await documents.get("users", uid)).get("isExpired") is True


async def test_validate_access_not_yet_active(auth, documents):
    uid = await make_account(
        auth,
        documents,
        "temp@example.com",
        isTemporary=True,
        validityStartDate="2024-07-01T00:00:00Z",
        validityEndDate="2024-08-01T00:00:00Z",
    )

    with pytest.raises(FunctionError) as exc:
        await validate_user_access(uid, {}, auth=auth, documents=documents, now=NOW)

    assert exc.value.message == "Your temporary access is not yet active"
    assert exc.value.details["reason"] == "not-yet-active"
    assert (await auth.get_user(uid)).disabled is False


async def test_validate_access_suspended_reason_is_verbatim(auth, documents):
    uid = await make_account(
        auth, documents, "member@example.com", isSuspended=True, suspensionReason="Unpaid fees"
    )

    with pytest.raises(FunctionError) as exc:
        await validate_user_access("admin", {"userId": uid}, auth=auth, documents=documents, now=NOW)

    assert exc.value.message == "Your account has been suspended. Reason: Unpaid fees"
    assert exc.value.details == {"reason": "suspended", "suspensionReason": "Unpaid fees"}


async def test_validate_access_success(auth, documents):
    uid = await make_account(
        auth,
        documents,
        "temp@example.com",
        isTemporary=True,
        validityStartDate="2024-05-01T00:00:00Z",
        validityEndDate="2024-07-01T00:00:00Z",
    )

    result = await validate_user_access(uid, {}, auth=auth, documents=documents, now=NOW)

    assert result == {
        "success": True,
        "isValid": True,
        "isTemporary": True,
        "validityEndDate": "2024-07-01T00:00:00+00:00",
    }


def test_function_error_envelope():
    error = FunctionError("permission-denied", "Nope", {"reason": "expired"})

    assert error.http_status == 403
    assert error.to_dict() == {
        "error": {"status": "PERMISSION_DENIED", "message": "Nope", "details": {"reason": "expired"}}
    }

    with pytest.raises(ValueError):
        FunctionError("teapot", "Unknown")


async def test_callable_endpoint_envelope(client, admin_token):
    headers = {"Authorization": f"Bearer {admin_token}"}

    response = await client.post(
        "/functions/createUser",
        json={"data": {"email": "staff@example.com", "displayName": "Staff"}},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["result"]["email"] == "staff@example.com"

    response = await client.post("/functions/validateUserAccess", json={"data": {}}, headers=headers)
    assert response.status_code == 404
    assert response.json() == {"error": {"status": "NOT_FOUND", "message": "User not found"}}


async def test_callable_endpoint_rejects_anonymous_callers(client):
    response = await client.post(
        "/functions/createUser", json={"data": {"email": "staff@example.com", "displayName": "Staff"}}
    )

    assert response.status_code == 401
    assert response.json()["error"]["status"] == "UNAUTHENTICATED"


async def test_unknown_function(client):
    response = await client.post("/functions/deleteEverything", json={"data": {}})
    assert response.status_code == 404


async def test_scheduler_start_and_stop():
    scheduler = ExpirySweepScheduler(hour=0, minute=0, timezone="UTC")

    await scheduler.start()
    assert scheduler.running is True
    assert scheduler.scheduler.get_job("expiry_sweep_job") is not None
    assert scheduler.scheduler.get_job("push_cleanup_job") is not None

    await scheduler.stop()
    assert scheduler.running is False


async def test_scheduled_sweep_runs_against_the_document_store(auth, documents):
    await make_account(
        auth, documents, "past@example.com", isTemporary=True, validityEndDate="2020-01-01T00:00:00Z"
    )

    result = await ExpirySweepScheduler(timezone="UTC").run_sweep()

    assert result == {"expired": 1, "disabled": 1}


async def test_cleanup_deletes_only_old_push_records(documents):
    await documents.set("pushNotifications", "old", {"projectId": "p1", "createdAt": NOW - timedelta(days=31)})
    await documents.set("pushNotifications", "recent", {"projectId": "p1", "createdAt": NOW - timedelta(days=2)})

    result = await cleanup_push_notifications(documents=documents, now=NOW)

    assert result == {"cleaned": 1}
    assert [s.id for s in await documents.query("pushNotifications")] == ["recent"]

    assert await cleanup_push_notifications(documents=documents, now=NOW) == {"cleaned": 0}


async def test_push_stats_require_caller_and_project(documents):
    with pytest.raises(FunctionError) as exc:
        await push_notification_stats(None, {"projectId": "p1"}, documents=documents)
    assert exc.value.code == "unauthenticated"

    with pytest.raises(FunctionError) as exc:
        await push_notification_stats("admin", {}, documents=documents)
    assert exc.value.code == "invalid-argument"
    assert exc.value.message == "Project ID is required"


async def test_push_stats_count_users_tokens_and_todays_sends(documents):
    await documents.set("users", "u1", {"projects": [{"projectId": "p1"}]})
    await documents.set("users", "u2", {"projects": [{"projectId": "p1"}]})
    await documents.set("users", "u3", {"projects": [{"projectId": "p2"}]})
    await documents.set("users/u1/tokens", "t1", {"isActive": True})
    await documents.set("users/u2/tokens", "t2", {"isActive": False})
    await documents.set("pushNotifications", "n1", {"projectId": "p1", "createdAt": NOW - timedelta(hours=1)})
    await documents.set("pushNotifications", "n2", {"projectId": "p1", "createdAt": NOW - timedelta(days=1)})
    await documents.set("pushNotifications", "n3", {"projectId": "p2", "createdAt": NOW})

    stats = await push_notification_stats("admin", {"projectId": "p1"}, documents=documents, now=NOW)

    assert stats == {"totalUsers": 2, "usersWithTokens": 1, "sentToday": 1, "tokenCoverage": 50.0}


async def test_push_stats_over_http(client, admin_token):
    response = await client.post(
        "/functions/getPushNotificationStats",
        json={"data": {"projectId": "p1"}},
        headers={"Authorization": f"Bearer {admin_token}"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "result": {"totalUsers": 0, "usersWithTokens": 0, "sentToday": 0, "tokenCoverage": 0}
    }


async def test_scheduled_push_cleanup_runs_against_the_document_store(documents):
    await documents.set("pushNotifications", "old", {"createdAt": "2020-01-01T00:00:00Z"})

    result = await ExpirySweepScheduler(timezone="UTC").run_push_cleanup()

    assert result == {"cleaned": 1}
