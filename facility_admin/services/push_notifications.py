"""Push notification record cleanup and delivery statistics."""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import pytz

from facility_admin.core.config import settings
from facility_admin.core.errors import FunctionError
from facility_admin.services.account_functions import USERS_COLLECTION, require_caller
from facility_admin.services.document_store import DocumentStore, document_store

logger = logging.getLogger(__name__)

PUSH_NOTIFICATIONS_COLLECTION = "pushNotifications"


async def cleanup_push_notifications(
    documents: Optional[DocumentStore] = None,
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    """
    Delete push notification records past the retention period.

    At most ``PUSH_CLEANUP_BATCH_SIZE`` records are removed per run, in
    one batch.

    Returns:
        {"cleaned": <number of deleted records>}
    """
    documents = documents or document_store
    now = now or datetime.now(pytz.UTC)
    cutoff = now - timedelta(days=settings.PUSH_NOTIFICATION_RETENTION_DAYS)

    snapshots = await documents.query(
        PUSH_NOTIFICATIONS_COLLECTION,
        where=[("createdAt", "<", cutoff)],
        limit=settings.PUSH_CLEANUP_BATCH_SIZE,
    )
    if not snapshots:
        logger.info("No old notifications to clean up")
        return {"cleaned": 0}

    batch = documents.batch()
    for snapshot in snapshots:
        batch.delete(PUSH_NOTIFICATIONS_COLLECTION, snapshot.id)
    await batch.commit()

    logger.info(f"Cleaned up {len(snapshots)} old notification records")
    return {"cleaned": len(snapshots)}


async def push_notification_stats(
    caller_uid: Optional[str],
    data: Dict[str, Any],
    documents: Optional[DocumentStore] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Summarize push notification reach for a project.

    Args:
        caller_uid: Uid of the authenticated caller
        data: projectId

    Returns:
        {totalUsers, usersWithTokens, sentToday, tokenCoverage}; coverage is
        the percentage of users with an active token, to one decimal

    Raises:
        FunctionError: unauthenticated, invalid-argument or internal
    """
    require_caller(caller_uid)
    project_id = (data or {}).get("projectId")
    if not project_id:
        raise FunctionError("invalid-argument", "Project ID is required")

    documents = documents or document_store
    now = now or datetime.now(pytz.UTC)

    try:
        users = await documents.query(
            USERS_COLLECTION,
            where=[("projects", "array-contains", {"projectId": project_id})],
        )

        users_with_tokens = 0
        for user in users:
            tokens = await documents.query(
                f"{USERS_COLLECTION}/{user.id}/tokens",
                where=[("isActive", "==", True)],
                limit=1,
            )
            if tokens:
                users_with_tokens += 1

        start_of_day = now.astimezone(pytz.UTC).replace(hour=0, minute=0, second=0, microsecond=0)
        sent_today = await documents.query(
            PUSH_NOTIFICATIONS_COLLECTION,
            where=[("projectId", "==", project_id), ("createdAt", ">=", start_of_day)],
        )
    except Exception as e:
        logger.error(f"Error getting push notification stats for project {project_id}: {e}")
        raise FunctionError("internal", "Failed to get statistics")

    total_users = len(users)
    return {
        "totalUsers": total_users,
        "usersWithTokens": users_with_tokens,
        "sentToday": len(sent_today),
        "tokenCoverage": round(users_with_tokens / total_users * 100, 1) if total_users else 0,
    }
