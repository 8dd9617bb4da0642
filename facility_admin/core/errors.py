"""Errors raised by callable backend functions."""
from typing import Any, Optional

# Callable error codes and the HTTP status each one is answered with
FUNCTION_ERROR_STATUS = {
    "invalid-argument": 400,
    "unauthenticated": 401,
    "permission-denied": 403,
    "not-found": 404,
    "already-exists": 409,
    "internal": 500,
}


class FunctionError(Exception):
    """Client-facing error of a callable function."""

    def __init__(self, code: str, message: str, details: Optional[Any] = None):
        if code not in FUNCTION_ERROR_STATUS:
            raise ValueError(f"Unknown function error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    @property
    def http_status(self) -> int:
        return FUNCTION_ERROR_STATUS[self.code]

    def to_dict(self) -> dict:
        """Render the error in the callable response envelope."""
        error = {
            "status": self.code.upper().replace("-", "_"),
            "message": self.message,
        }
        if self.details is not None:
            error["details"] = self.details
        return {"error": error}
