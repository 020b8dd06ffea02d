"""
Application exceptions module.

This module provides a clean separation of concerns for error handling:
- Base exceptions define the hierarchy
- Remote exceptions describe failed calls to the learning platform API
- Validation exceptions are raised locally, before any network call
- Auth exceptions describe a missing or refused admin credential
- HTTP mapping is handled separately in app/core/error_handlers.py

Cancellation is deliberately absent: an aborted request surfaces as
``asyncio.CancelledError`` and is never wrapped into an AppException.
"""

from app.exceptions.base import AppException
from app.exceptions.remote import (
    RemoteError,
    TransportError,
    RequestRejectedError,
)
from app.exceptions.validation import (
    ValidationError,
    NoSelectionError,
)
from app.exceptions.auth import (
    AuthenticationError,
    NotAuthenticatedError,
    UnauthorizedError,
)

__all__ = [
    # Base
    "AppException",
    # Remote
    "RemoteError",
    "TransportError",
    "RequestRejectedError",
    # Validation
    "ValidationError",
    "NoSelectionError",
    # Auth
    "AuthenticationError",
    "NotAuthenticatedError",
    "UnauthorizedError",
]
