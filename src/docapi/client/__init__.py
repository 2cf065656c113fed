"""
Document API Client.

Provides:
- Tenant-aware login/registration
- Lease-lock endpoints (lock, renew, unlock)
- Multipart upload session endpoints
- Typed errors for every failure mode

Everything else on the service is reached as plain request/response calls.
"""

from .client import LOCK_HEADER, DocumentApiClient
from .exceptions import (
    ApiResponseError,
    AuthError,
    ConflictError,
    DocumentApiError,
    ExpiredLockError,
    LockMismatchError,
    LockRequiredError,
    NotFoundError,
    TransportError,
    ValidationError,
)

__all__ = [
    "DocumentApiClient",
    "LOCK_HEADER",
    "DocumentApiError",
    "ApiResponseError",
    "AuthError",
    "ConflictError",
    "ExpiredLockError",
    "LockMismatchError",
    "LockRequiredError",
    "NotFoundError",
    "TransportError",
    "ValidationError",
]
