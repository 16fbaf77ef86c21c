"""Dispatch error taxonomy.

Every error carries the HTTP status it maps to; ``rescuelink.main`` renders
them as ``{"message": ...}`` bodies.
"""

from __future__ import annotations


class DispatchError(Exception):
    """Base class for errors reported back to the caller."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(DispatchError):
    """Missing required field, invalid enum value or malformed number."""

    status_code = 400
    default_message = "Bad request"


class Forbidden(DispatchError):
    """Caller's role or ownership does not permit the operation."""

    status_code = 403
    default_message = "Access denied"


class NotFound(DispatchError):
    status_code = 404
    default_message = "Alert not found"


class StoreFailure(DispatchError):
    """The record store raised while serving the primary operation."""

    status_code = 500
    default_message = "Server error"
