"""
Per-tenant bearer token store.
"""

import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class CredentialStore:
    """
    Holds one bearer token per tenant plus an active-tenant pointer.

    Two modes coexist:
    - tenant-less mode: ``set_token("", token)`` sets a current token that is
      used regardless of the active tenant, until it is overwritten or cleared
    - tenant mode: tokens are stored per tenant and the active tenant's token
      is mirrored into the current token on switch

    The active-tenant path is a convenience for sequential, CLI-style use.
    Concurrent callers driving several tenants should use ``token_for(tenant)``
    (or pass a token per call) instead of switching the active tenant.
    """

    def __init__(self, default_tenant: Optional[str] = None):
        self._tokens: dict[str, str] = {}
        self._current_token: Optional[str] = None
        # True while the current token came from set_token("", ...)
        self._explicit_current = False
        self._active_tenant: Optional[str] = None
        self._default_tenant = default_tenant if not _blank(default_tenant) else None
        self._lock = threading.Lock()

    @property
    def active_tenant(self) -> Optional[str]:
        return self._active_tenant

    @property
    def default_tenant(self) -> Optional[str]:
        return self._default_tenant

    def tenants(self) -> list[str]:
        """Tenants that currently hold a token."""
        with self._lock:
            return sorted(self._tokens)

    def set_token(self, tenant: Optional[str], token: Optional[str]) -> None:
        """
        Store or remove a token.

        Args:
            tenant: Tenant key; empty/None selects tenant-less mode
            token: Bearer token; empty/None removes the entry
        """
        with self._lock:
            if _blank(tenant):
                if _blank(token):
                    self._current_token = None
                    self._explicit_current = False
                else:
                    self._current_token = token
                    self._explicit_current = True
                return

            tenant = tenant.strip()
            if _blank(token):
                self._tokens.pop(tenant, None)
                logger.debug("Removed token for tenant %s", tenant)
            else:
                self._tokens[tenant] = token
                logger.debug("Stored token for tenant %s", tenant)

            if tenant == self._active_tenant:
                self._current_token = None if _blank(token) else token
                self._explicit_current = False

    def set_active_tenant(self, tenant: Optional[str]) -> None:
        """
        Switch the active tenant.

        A non-empty tenant also becomes the default tenant. The current token is
        refreshed from the store; a tenant-less token set explicitly is kept
        unless the store holds a token for the new tenant.
        """
        with self._lock:
            if _blank(tenant):
                self._active_tenant = None
                if not self._explicit_current:
                    self._current_token = None
                return

            tenant = tenant.strip()
            self._active_tenant = tenant
            self._default_tenant = tenant

            stored = self._tokens.get(tenant)
            if stored:
                self._current_token = stored
                self._explicit_current = False
            elif not self._explicit_current:
                self._current_token = None

    def resolve_token(self) -> Optional[str]:
        """Token for an outgoing call made without an explicit tenant, or None."""
        with self._lock:
            if not _blank(self._current_token):
                return self._current_token
            if self._active_tenant:
                return self._tokens.get(self._active_tenant)
            return None

    def token_for(self, tenant: Optional[str]) -> Optional[str]:
        """Deterministic per-call lookup; blank tenant falls back to resolve_token()."""
        if _blank(tenant):
            return self.resolve_token()
        with self._lock:
            return self._tokens.get(tenant.strip())

    def clear(self, tenant: Optional[str] = None) -> None:
        """Remove one tenant's token, or every token and the current token."""
        with self._lock:
            if not _blank(tenant):
                tenant = tenant.strip()
                self._tokens.pop(tenant, None)
                if tenant == self._active_tenant and not self._explicit_current:
                    self._current_token = None
                return

            self._tokens.clear()
            self._current_token = None
            self._explicit_current = False
