"""Callable account functions and the temporary account expiry sweep."""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import pytz

from facility_admin.core.config import settings
from facility_admin.core.errors import FunctionError
from facility_admin.services.auth_service import AuthError, AuthService, auth_service
from facility_admin.services.document_store import (
    SERVER_TIMESTAMP,
    DocumentStore,
    document_store,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"

# Identity error code -> (callable error code, message)
AUTH_ERROR_MAP = {
    "auth/email-already-exists": ("already-exists", "The email address is already in use by another account."),
    "auth/invalid-email": ("invalid-argument", "The email address is invalid."),
}


def require_caller(caller_uid: Optional[str]) -> str:
    if not caller_uid:
        raise FunctionError("unauthenticated", "User must be authenticated")
    return caller_uid


async def create_user(
    caller_uid: Optional[str],
    data: Dict[str, Any],
    auth: Optional[AuthService] = None,
) -> Dict[str, Any]:
    """
    Create an identity on behalf of an authenticated admin.

    Args:
        caller_uid: Uid of the authenticated caller
        data: email, displayName, sendPasswordResetEmail

    Returns:
        {success, uid, email, message}

    Raises:
        FunctionError: unauthenticated, invalid-argument, already-exists or internal
    """
    auth = auth or auth_service
    require_caller(caller_uid)

    email = (data.get("email") or "").strip()
    display_name = (data.get("displayName") or "").strip()
    if not email or not display_name:
        raise FunctionError("invalid-argument", "Email and display name are required")

    try:
        record = await auth.create_user(email, display_name, email_verified=False)
    except AuthError as e:
        code, message = AUTH_ERROR_MAP.get(e.code, ("internal", e.message))
        logger.error(f"Error creating user {email}: {e.code} {e.message}")
        raise FunctionError(code, message)
    except Exception as e:
        logger.error(f"Error creating user {email}: {e}")
        raise FunctionError("internal", str(e))

    logger.info(f"User {record.uid} created by {caller_uid}")

    if data.get("sendPasswordResetEmail"):
        # Generated for the admin only; delivery is handled elsewhere
        try:
            await auth.generate_password_reset_link(
                record.email, continue_url=f"{settings.PROJECT_URL.rstrip('/')}/login"
            )
            logger.info(f"Password reset link generated for {record.email}")
        except Exception as e:
            logger.warning(f"Failed to generate password reset link for {record.email}: {e}")

    return {
        "success": True,
        "uid": record.uid,
        "email": record.email,
        "message": "User created successfully",
    }


async def _expire_account(
    documents: DocumentStore, auth: AuthService, user_id: str, uid: Optional[str]
) -> None:
    # Identity first, then the document; the two writes are independent
    try:
        await auth.update_user(uid or user_id, disabled=True)
    except Exception as e:
        logger.error(f"Failed to disable identity for user {user_id}: {e}")

    await documents.update(
        USERS_COLLECTION,
        user_id,
        {"isExpired": True, "expiredAt": SERVER_TIMESTAMP, "updatedAt": SERVER_TIMESTAMP},
    )


async def validate_user_access(
    caller_uid: Optional[str],
    data: Dict[str, Any],
    auth: Optional[AuthService] = None,
    documents: Optional[DocumentStore] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Check that an account may currently sign in.

    Temporary accounts found past their end date are expired on the spot.

    Args:
        caller_uid: Uid of the authenticated caller
        data: Optional userId; defaults to the caller

    Returns:
        {success, isValid, isTemporary, validityEndDate}

    Raises:
        FunctionError: unauthenticated, not-found, permission-denied or internal
    """
    auth = auth or auth_service
    documents = documents or document_store
    now = now or datetime.now(pytz.UTC)
    caller_uid = require_caller(caller_uid)
    user_id = (data or {}).get("userId") or caller_uid

    try:
        snapshot = await documents.get(USERS_COLLECTION, user_id)
        if snapshot is None:
            raise FunctionError("not-found", "User not found")

        user = snapshot.data
        is_temporary = bool(user.get("isTemporary"))
        start = parse_timestamp(user.get("validityStartDate"))
        end = parse_timestamp(user.get("validityEndDate"))

        if is_temporary and end is not None and now > end:
            await _expire_account(documents, auth, user_id, user.get("uid"))
            logger.info(f"Temporary access for user {user_id} expired on validation")
            raise FunctionError(
                "permission-denied",
                "Your temporary access has expired",
                {"reason": "expired", "validityEndDate": end.isoformat()},
            )

        if is_temporary and start is not None and now < start:
            raise FunctionError(
                "permission-denied",
                "Your temporary access is not yet active",
                {"reason": "not-yet-active", "validityStartDate": start.isoformat()},
            )

        if user.get("isSuspended"):
            reason = user.get("suspensionReason") or ""
            raise FunctionError(
                "permission-denied",
                f"Your account has been suspended. Reason: {reason}" if reason else "Your account has been suspended",
                {"reason": "suspended", "suspensionReason": reason},
            )

        return {
            "success": True,
            "isValid": True,
            "isTemporary": is_temporary,
            "validityEndDate": end.isoformat() if end is not None else None,
        }
    except FunctionError:
        raise
    except Exception as e:
        logger.error(f"Error validating access for user {user_id}: {e}")
        raise FunctionError("internal", str(e))


async def expire_temporary_users(
    auth: Optional[AuthService] = None,
    documents: Optional[DocumentStore] = None,
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    """
    Mark temporary accounts past their end date as expired and disable them.

    All document updates are committed in one batch. Identities are then
    disabled one by one; a failure for one user is logged and the rest
    continue.

    Returns:
        Counts of expired documents and disabled identities
    """
    auth = auth or auth_service
    documents = documents or document_store
    now = now or datetime.now(pytz.UTC)

    snapshots = await documents.query(
        USERS_COLLECTION,
        where=[("isTemporary", "==", True), ("validityEndDate", "<", now)],
    )
    overdue = [s for s in snapshots if not s.get("isExpired")]
    if not overdue:
        logger.info("No temporary users to expire")
        return {"expired": 0, "disabled": 0}

    batch = documents.batch()
    for snapshot in overdue:
        batch.update(
            USERS_COLLECTION,
            snapshot.id,
            {"isExpired": True, "expiredAt": SERVER_TIMESTAMP, "updatedAt": SERVER_TIMESTAMP},
        )
    await batch.commit()
    logger.info(f"Marked {len(overdue)} temporary users as expired")

    disabled = 0
    for snapshot in overdue:
        uid = snapshot.get("uid") or snapshot.id
        try:
            await auth.update_user(uid, disabled=True)
            disabled += 1
        except Exception as e:
            logger.error(f"Failed to disable identity {uid} for user {snapshot.id}: {e}")

    return {"expired": len(overdue), "disabled": disabled}
