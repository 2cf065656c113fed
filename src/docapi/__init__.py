"""
Client for a multi-tenant document-management API.

Covers the parts of the API with real client-side state: per-tenant
credentials, lease locks guarding document mutations, and chunked multipart
uploads through presigned storage URLs.
"""

from .client import DocumentApiClient
from .credentials import CredentialStore
from .locking import LockManager
from .uploads import MultipartUploader

__version__ = "0.1.0"

__all__ = [
    "DocumentApiClient",
    "CredentialStore",
    "LockManager",
    "MultipartUploader",
]
