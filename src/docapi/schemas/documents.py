"""
Document and attachment DTOs.

Document content is opaque to this client; the raw JSON is kept as-is.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Document:
    """Document as returned by the API."""

    id: str
    title: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api_response(cls, data: dict) -> "Document":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or data.get("name"),
            raw=data,
        )


@dataclass
class UploadResult:
    """Result of a single-shot attachment upload."""

    status: Optional[str] = None
    message: Optional[str] = None
    attachment_id: Optional[str] = None
    document_id: Optional[str] = None
    file_name: Optional[str] = None
    file_size: int = 0

    @classmethod
    def from_api_response(cls, data: dict) -> "UploadResult":
        return cls(
            status=data.get("status"),
            message=data.get("message"),
            attachment_id=data.get("attachmentId"),
            document_id=data.get("documentId"),
            file_name=data.get("fileName"),
            file_size=data.get("fileSize") or 0,
        )
