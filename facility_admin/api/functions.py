"""Callable function endpoint."""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import APIRouter, Header

from facility_admin.core.errors import FunctionError
from facility_admin.schemas.functions import CallableRequest, CallableResponse
from facility_admin.services.account_functions import create_user, validate_user_access
from facility_admin.services.auth_service import auth_service
from facility_admin.services.push_notifications import push_notification_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["functions"])

CallableFunction = Callable[[Optional[str], Dict[str, Any]], Awaitable[Dict[str, Any]]]

# Functions reachable through POST /functions/{name}
CALLABLE_FUNCTIONS: Dict[str, CallableFunction] = {
    "createUser": create_user,
    "validateUserAccess": validate_user_access,
    "getPushNotificationStats": push_notification_stats,
}


async def resolve_caller(authorization: Optional[str]) -> Optional[str]:
    """Uid behind a ``Bearer`` token, or None for anonymous callers."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return await auth_service.verify_token(token.strip())


@router.post("/{name}", response_model=CallableResponse)
async def call_function(
    name: str,
    request: CallableRequest,
    authorization: Optional[str] = Header(None),
):
    """
    Invoke a callable function.

    Args:
        name: createUser, validateUserAccess or getPushNotificationStats
        request: {"data": {...}}
        authorization: ``Bearer <token>`` of the caller

    Returns:
        {"result": ...}; failures are rendered as {"error": {...}}
    """
    handler = CALLABLE_FUNCTIONS.get(name)
    if handler is None:
        raise FunctionError("not-found", f"Function {name} not found")

    caller_uid = await resolve_caller(authorization)
    result = await handler(caller_uid, request.data)
    return {"result": result}
