"""
Lease-lock helper around the document lock endpoints.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from ..client import DocumentApiClient, ValidationError
from ..schemas import DocumentLock

logger = logging.getLogger(__name__)


class LockManager:
    """
    Call-site ergonomics for the server's lease locks.

    The manager keeps no lock state: every acquired lock is returned to the
    caller, who threads its ``lock_id`` into later mutating calls and into the
    next renew. Lock and renew are never retried here; backing off on a
    ConflictError is the caller's decision.
    """

    DEFAULT_LEASE_SECONDS = 60

    def __init__(
        self,
        client: DocumentApiClient,
        default_lease_seconds: int = DEFAULT_LEASE_SECONDS,
    ):
        self.client = client
        self.default_lease_seconds = default_lease_seconds

    def _lease(self, document_id: str, lease_seconds: Optional[int]) -> int:
        lease = self.default_lease_seconds if lease_seconds is None else lease_seconds
        if lease <= 0:
            raise ValidationError(
                f"Lease must be a positive number of seconds, got {lease}",
                document_id=document_id,
            )
        return lease

    @staticmethod
    def _require_lock_id(document_id: str, lock_id: Optional[str]) -> str:
        if not lock_id or not lock_id.strip():
            raise ValidationError("A lock id is required", document_id=document_id)
        return lock_id

    def lock(
        self,
        document_id: str,
        lease_seconds: Optional[int] = None,
        tenant: Optional[str] = None,
    ) -> DocumentLock:
        """
        Acquire a lease lock.

        Raises:
            ConflictError: Another party holds a live lock
            NotFoundError: The document does not exist
        """
        lease = self._lease(document_id, lease_seconds)
        lock = self.client.lock_document(document_id, lease, tenant=tenant)
        logger.info(
            "Locked document %s (lock=%s, expires=%s)",
            document_id,
            lock.lock_id,
            lock.expires_at,
        )
        return lock

    def renew(
        self,
        document_id: str,
        lock_id: str,
        lease_seconds: Optional[int] = None,
        tenant: Optional[str] = None,
    ) -> DocumentLock:
        """
        Extend a lease. Use the lock id from the most recent lock/renew.

        Raises:
            LockMismatchError: lock_id is not the current holder
            ExpiredLockError: The lease already lapsed
        """
        lease = self._lease(document_id, lease_seconds)
        self._require_lock_id(document_id, lock_id)
        lock = self.client.renew_lock(document_id, lock_id, lease, tenant=tenant)
        logger.debug("Renewed lock %s on document %s until %s", lock.lock_id, document_id, lock.expires_at)
        return lock

    def unlock(self, document_id: str, lock_id: str, tenant: Optional[str] = None) -> None:
        """Release a lock, propagating any server error."""
        self._require_lock_id(document_id, lock_id)
        self.client.unlock_document(document_id, lock_id, tenant=tenant)
        logger.info("Unlocked document %s (lock=%s)", document_id, lock_id)

    def release(self, document_id: str, lock_id: str, tenant: Optional[str] = None) -> bool:
        """
        Release a lock as cleanup.

        Failures are logged and swallowed: the lease expires server-side
        regardless, and a second release of the same lock is expected to fail.

        Returns:
            True if the server confirmed the unlock
        """
        try:
            self.unlock(document_id, lock_id, tenant=tenant)
            return True
        except Exception as e:
            logger.warning(f"Failed to release lock {lock_id} on document {document_id}: {e}")
            return False

    @contextmanager
    def hold(
        self,
        document_id: str,
        lease_seconds: Optional[int] = None,
        tenant: Optional[str] = None,
    ) -> Iterator[DocumentLock]:
        """Acquire a lock for the duration of a ``with`` block."""
        lock = self.lock(document_id, lease_seconds, tenant=tenant)
        try:
            yield lock
        finally:
            self.release(document_id, lock.lock_id, tenant=tenant)
