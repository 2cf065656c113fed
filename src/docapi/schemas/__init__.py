"""
Typed views of the document API's JSON payloads.

Each schema builds itself from a response dict via ``from_api_response``.
"""

from .auth import LoginResult
from .documents import Document, UploadResult
from .locks import DocumentLock, parse_timestamp
from .multipart import (
    CompletedPart,
    MultipartUploadResult,
    MultipartUploadSession,
    PresignedPart,
)

__all__ = [
    "LoginResult",
    "Document",
    "UploadResult",
    "DocumentLock",
    "parse_timestamp",
    "CompletedPart",
    "MultipartUploadResult",
    "MultipartUploadSession",
    "PresignedPart",
]
