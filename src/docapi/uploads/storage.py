"""
Direct part uploads to backing storage through presigned URLs.
"""

import logging
from typing import Optional

import httpx

from ..client import TransportError, ValidationError

logger = logging.getLogger(__name__)


class StorageUploader:
    """
    PUTs part bodies straight to presigned storage URLs.

    Presigned URLs carry their own authorization, so no API credentials are
    sent. No retries: a failed part fails the whole upload session.
    """

    DEFAULT_TIMEOUT_SECONDS = 120

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._client = httpx.Client(
            timeout=httpx.Timeout(
                connect=10.0,
                read=float(timeout_seconds),
                write=float(timeout_seconds),
                pool=10.0,
            ),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "StorageUploader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def put_part(self, url: str, data: bytes, part_number: int) -> str:
        """
        Upload one part and return the storage-issued ETag.

        Raises:
            TransportError: Network failure or non-2xx response
            ValidationError: 2xx response without an ETag header
        """
        try:
            response = self._client.put(url, content=data)
        except httpx.RequestError as e:
            logger.error("Storage upload of part %d failed: %s", part_number, e)
            raise TransportError(
                f"Storage upload failed: {e}", part_number=part_number
            ) from e

        if not response.is_success:
            logger.error(
                "Storage rejected part %d with status %d", part_number, response.status_code
            )
            raise TransportError(
                f"Storage returned {response.status_code} for part upload",
                status_code=response.status_code,
                part_number=part_number,
            )

        # httpx headers are case-insensitive
        etag = response.headers.get("ETag")
        if not etag or not etag.strip():
            raise ValidationError(
                "Storage accepted the part but returned no ETag", part_number=part_number
            )

        logger.debug("Part %d stored (%d bytes, etag=%s)", part_number, len(data), etag)
        return etag.strip()
