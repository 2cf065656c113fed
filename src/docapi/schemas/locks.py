"""
Document lease-lock representation.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

# Epoch values above this are milliseconds
_EPOCH_MILLIS_THRESHOLD = 10**11


def parse_timestamp(value: Union[str, int, float, None]) -> Optional[datetime]:
    """Parse an API timestamp: ISO-8601 (with or without offset) or epoch seconds/millis."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) >= _EPOCH_MILLIS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass
class DocumentLock:
    """A lease lock granted by the server.

    The client treats the lock as opaque beyond its id and expiry; expiry is
    never evaluated locally, the server's responses are authoritative.
    """

    document_id: str
    lock_id: str
    locked_by: Optional[str] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_api_response(cls, data: dict, document_id: str) -> "DocumentLock":
        """Create from a lock or renew response."""
        lock_id = data.get("lockId")
        if not lock_id:
            raise ValueError("Lock response is missing lockId")
        return cls(
            document_id=str(data.get("documentId") or document_id),
            lock_id=lock_id,
            locked_by=data.get("lockedBy"),
            expires_at=parse_timestamp(data.get("lockExpiresAt") or data.get("expiresAt")),
        )
