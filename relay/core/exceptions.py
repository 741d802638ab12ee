from functools import wraps
from typing import Any, Optional

from google.api_core.exceptions import GoogleAPICallError, NotFound


class ServiceException(Exception):
    def __init__(self, message: str, status_code: int = 400, type: str = "error"):
        self.message = message
        self.status_code = status_code
        self.type = type
        super().__init__(message)


class GatewayError(Exception):
    """Raised when the payment gateway rejects a request or cannot be reached."""

    def __init__(self, message: str, payload: Optional[Any] = None):
        self.message = message
        self.payload = payload
        super().__init__(message)


class CredentialError(Exception):
    """No usable service-account credential could be resolved."""


def store_exception(not_found_message: str = "Document not found"):
    """Map Google API errors raised by an async store call to ServiceException."""

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except NotFound:
                raise ServiceException(not_found_message, 404, "not_found")
            except GoogleAPICallError as e:
                raise ServiceException(
                    f"Storage service error: {e.message}", 502, "database_error"
                )

        return wrapper

    return decorator
