"""Error codes and error payloads returned to clients."""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes."""

    UNAUTHORIZED = "UNAUTHORIZED"
    ACCESS_DENIED = "ACCESS_DENIED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_REQUEST = "INVALID_REQUEST"
    MISSING_CONTEXT = "MISSING_CONTEXT"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorMessage(BaseModel):
    """Error body."""

    type: Literal["error"] = "error"
    code: ErrorCode
    message: str
    details: Optional[str] = None


class MissingContextError(RuntimeError):
    """An operation was skipped because required context was absent."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.MISSING_CONTEXT):
        super().__init__(message)
        self.code = code


class AccessDeniedError(PermissionError):
    """The current user cannot act on the requested session, document or lesson."""
