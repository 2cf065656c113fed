"""
Multipart upload session schemas.

Wire names follow the server (camelCase, ``eTag``, ``s3Key``); the Python
side uses snake_case and storage-neutral names.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class MultipartUploadSession:
    """Server-tracked state for one in-flight multipart upload."""

    session_id: str
    upload_id: Optional[str] = None
    storage_key: Optional[str] = None
    bucket: Optional[str] = None
    part_size_bytes: Optional[int] = None
    file_name: Optional[str] = None
    content_type: Optional[str] = None
    total_size: Optional[int] = None
    status: Optional[str] = None
    document_id: Optional[str] = None
    attachment_id: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: dict) -> "MultipartUploadSession":
        """Create from an initiate or status response."""
        session_id = data.get("sessionId")
        if not session_id:
            raise ValueError("Multipart session response is missing sessionId")
        return cls(
            session_id=session_id,
            upload_id=data.get("uploadId"),
            storage_key=data.get("s3Key") or data.get("storageKey"),
            bucket=data.get("bucket"),
            part_size_bytes=data.get("partSizeBytes"),
            file_name=data.get("fileName"),
            content_type=data.get("contentType"),
            total_size=data.get("fileSize"),
            status=data.get("status"),
            document_id=data.get("documentId"),
            attachment_id=data.get("attachmentId"),
        )


@dataclass
class PresignedPart:
    """Presigned storage URL for a single part."""

    session_id: str
    part_number: int
    url: str
    expires_in_seconds: Optional[int] = None

    @classmethod
    def from_api_response(cls, data: dict, session_id: str, part_number: int) -> "PresignedPart":
        url = data.get("presignedUrl")
        if not url:
            raise ValueError(f"Presign response for part {part_number} is missing presignedUrl")
        return cls(
            session_id=data.get("sessionId") or session_id,
            part_number=data.get("partNumber") or part_number,
            url=url,
            expires_in_seconds=data.get("expiresInSeconds"),
        )


@dataclass(frozen=True)
class CompletedPart:
    """A part that storage has acknowledged with a content digest."""

    part_number: int
    etag: str

    def to_dict(self) -> dict:
        return {"partNumber": self.part_number, "eTag": self.etag}


@dataclass
class MultipartUploadResult:
    """Outcome of a completed multipart upload."""

    session_id: str
    attachment_id: Optional[str] = None
    storage_key: Optional[str] = None
    bucket: Optional[str] = None
    parts_uploaded: int = 0
    total_size: int = 0

    @classmethod
    def from_api_response(cls, data: dict, session_id: str) -> "MultipartUploadResult":
        return cls(
            session_id=data.get("sessionId") or session_id,
            attachment_id=data.get("attachmentId"),
            storage_key=data.get("s3Key") or data.get("storageKey"),
            bucket=data.get("bucket"),
        )
