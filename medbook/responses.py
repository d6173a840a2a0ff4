"""
Response envelope and error taxonomy.

Every result leaving the API is one of two shapes:

    {"success": true,  "message": ..., "data"?: ..., "pagination"?: {...}}
    {"success": false, "message": ..., "errors"?: [{"field", "message"}, ...]}
"""

from typing import Any, Dict, List, Optional, Tuple, TypeVar

T = TypeVar("T")

Envelope = Dict[str, Any]


def success_body(message: str = "Success", data: Optional[T] = None,
                 pagination: Optional[Dict[str, Any]] = None) -> Envelope:
    """Build a success envelope.

    Pagination is always a top-level sibling of ``data``. A ``data`` dict that
    carries its own ``pagination`` key (and a ``data`` list) is unwrapped.
    """
    body: Envelope = {"success": True, "message": message}
    if isinstance(data, dict) and "pagination" in data and pagination is None:
        pagination = data["pagination"]
        data = data.get("data")
    if data is not None:
        body["data"] = data
    if pagination is not None:
        body["pagination"] = pagination
    return body


def error_body(message: str = "Server Error",
               errors: Optional[List[Dict[str, str]]] = None) -> Envelope:
    body: Envelope = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


# ── Error taxonomy ───────────────────────────────────────────────────

class ApiError(Exception):
    """Base for every error that may cross the API boundary."""
    status_code = 500
    default_message = "Server Error"

    def __init__(self, message: Optional[str] = None,
                 errors: Optional[List[Dict[str, str]]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    def to_response(self) -> Tuple[Envelope, int]:
        return error_body(self.message, self.errors), self.status_code


class ValidationError(ApiError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: Optional[List[Dict[str, str]]] = None,
                 message: Optional[str] = None):
        super().__init__(message, errors)

    @classmethod
    def from_verdict(cls, verdict) -> "ValidationError":
        return cls(verdict.error_list())


class NotFoundError(ApiError):
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class AuthenticationError(ApiError):
    status_code = 401
    default_message = "Access denied"


class AuthorizationError(ApiError):
    status_code = 403
    default_message = "Forbidden"


class UnclassifiedError(ApiError):
    status_code = 500
    default_message = "Server Error"

    def __init__(self):
        # never carry internal details to the caller
        super().__init__(self.default_message)
