"""
Credential Store.

Provides:
- One bearer token per tenant
- Active/default tenant tracking
- Tenant-less single-token mode
"""

from .store import CredentialStore

__all__ = [
    "CredentialStore",
]
