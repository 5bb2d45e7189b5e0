"""
Errors raised by the API client and their conversion to display strings.
"""
from typing import Any, Dict, Optional

from pydantic import ValidationError

NETWORK_ERROR_MESSAGE = "Request failed. Please check your connection and try again."
UNAUTHORIZED_MESSAGE = "Your session has expired. Please sign in again."
NOT_FOUND_MESSAGE = "The requested resource was not found."
SERVER_ERROR_MESSAGE = "Something went wrong on our side. Please try again later."
INVALID_RESPONSE_MESSAGE = "Received an unexpected response from the server."
DEFAULT_ERROR_MESSAGE = "An unexpected error occurred"


class RawgleAPIError(Exception):
    """Base error for every failed call to the Rawgle backend"""

    default_message = DEFAULT_ERROR_MESSAGE

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        self.status_code = status_code
        super().__init__(self.message)


class NetworkError(RawgleAPIError):
    """No response was received (connection refused, DNS failure, timeout)"""

    default_message = NETWORK_ERROR_MESSAGE


class UnauthorizedError(RawgleAPIError):
    default_message = UNAUTHORIZED_MESSAGE


class NotFoundError(RawgleAPIError):
    default_message = NOT_FOUND_MESSAGE


class ValidationFailedError(RawgleAPIError):
    """4xx response, usually with a structured error body"""


class ServerError(RawgleAPIError):
    default_message = SERVER_ERROR_MESSAGE


class InvalidResponseError(RawgleAPIError):
    """Response body does not match the expected contract"""

    default_message = INVALID_RESPONSE_MESSAGE


def extract_error_message(body: Any) -> Optional[str]:
    """
    Pull a human-readable message out of an error response body.

    Supports {"error": "..."}, {"error": {"message": "..."}}, {"message": "..."}
    and FastAPI-style {"detail": "..."} / {"detail": [{"msg": "..."}]}.
    """
    if isinstance(body, str):
        return body.strip() or None
    if not isinstance(body, dict):
        return None

    for key in ("error", "message", "detail"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value
        if isinstance(value, dict):
            nested = extract_error_message(value)
            if nested:
                return nested
        if isinstance(value, list) and value:
            messages = [
                item.get("msg") if isinstance(item, dict) else str(item)
                for item in value
            ]
            messages = [m for m in messages if m]
            if messages:
                return "; ".join(messages)
    return None


def validation_messages(error: ValidationError) -> Dict[str, str]:
    """Map each invalid field to its first message, without pydantic's "Value error, " prefix"""
    messages: Dict[str, str] = {}
    for err in error.errors():
        field = str(err["loc"][0]) if err.get("loc") else "__root__"
        if field in messages:
            continue
        ctx = err.get("ctx") or {}
        if "error" in ctx:
            messages[field] = str(ctx["error"])
        else:
            messages[field] = err["msg"]
    return messages


def handle_error(error: BaseException) -> str:
    """Convert any exception into the single string shown to the user"""
    if isinstance(error, RawgleAPIError):
        return error.message
    if isinstance(error, ValidationError):
        messages = list(validation_messages(error).values())
        return "; ".join(messages) or DEFAULT_ERROR_MESSAGE
    text = str(error)
    if text:
        return text
    return DEFAULT_ERROR_MESSAGE
