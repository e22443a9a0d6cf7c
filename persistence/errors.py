"""Error hierarchy for the document store and the API built on it.

Every error carries the HTTP status the API reports it with; the FastAPI
handlers in endpoints.error_handlers render them as {"error": message}.
"""

from __future__ import annotations


class DygoError(Exception):
    """Base exception for all store and API errors."""

    http_status: int = 500

    def __init__(self, message: str, *, http_status: int | None = None):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status

    def to_response(self) -> dict[str, str]:
        return {"error": self.message}


class NotFound(DygoError):
    http_status = 404


class UserNotFound(NotFound):
    def __init__(self, message: str = "User not found", **kwargs):
        super().__init__(message, **kwargs)


class Conflict(DygoError):
    http_status = 409


class InvalidRequest(DygoError):
    http_status = 400


class InvalidCredentials(DygoError):
    http_status = 401

    def __init__(self, message: str = "Invalid credentials", **kwargs):
        super().__init__(message, **kwargs)


class TokenInvalid(DygoError):
    http_status = 400

    def __init__(self, message: str = "Invalid reset token", **kwargs):
        super().__init__(message, **kwargs)


class TokenExpired(DygoError):
    http_status = 400

    def __init__(self, message: str = "Reset token has expired", **kwargs):
        super().__init__(message, **kwargs)


class StorageCorrupt(DygoError):
    """Backing file unreadable. Recovered inside DocumentStore.load, never surfaced."""


class StorageWriteFailed(DygoError):
    def __init__(self, message: str = "Failed to persist data", **kwargs):
        super().__init__(message, **kwargs)
