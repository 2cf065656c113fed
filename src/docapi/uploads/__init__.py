"""
Multipart Upload Orchestrator.

Provides:
- Part planning (1-based, contiguous, last part holds the remainder)
- Per-part byte-range reads without buffering the whole file
- Direct PUTs to presigned storage URLs
- Session completion, or best-effort abort on failure
"""

from .multipart import MultipartUploader
from .parts import DEFAULT_PART_SIZE_BYTES, FilePartSource, PartRange, count_parts, plan_parts
from .storage import StorageUploader

__all__ = [
    "MultipartUploader",
    "StorageUploader",
    "FilePartSource",
    "PartRange",
    "DEFAULT_PART_SIZE_BYTES",
    "count_parts",
    "plan_parts",
]
