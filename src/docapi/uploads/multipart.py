"""
Multipart upload orchestrator.

Drives: initiate session -> (presign, PUT) per part -> complete, or abort on
any failure once a session exists.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Callable, Optional

from ..client import DocumentApiClient, DocumentApiError, ValidationError
from ..schemas import CompletedPart, MultipartUploadResult, MultipartUploadSession
from .parts import DEFAULT_PART_SIZE_BYTES, FilePartSource, plan_parts
from .storage import StorageUploader

logger = logging.getLogger(__name__)

# progress(part_number, total_parts, bytes_sent)
ProgressCallback = Callable[[int, int, int], None]

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class MultipartUploader:
    """
    Moves a local file to storage in bounded-size parts.

    Parts go up strictly in order, one buffer at a time. A failed part aborts
    the whole session; resuming a session is not supported, so callers retry
    by starting a new upload.
    """

    def __init__(
        self,
        client: DocumentApiClient,
        storage: Optional[StorageUploader] = None,
        default_part_size_bytes: int = DEFAULT_PART_SIZE_BYTES,
    ):
        self.client = client
        self.storage = storage if storage is not None else StorageUploader()
        self.default_part_size_bytes = default_part_size_bytes

    def upload(
        self,
        document_id: str,
        path: Path,
        lock_id: Optional[str] = None,
        content_type: Optional[str] = None,
        file_name: Optional[str] = None,
        part_size_bytes: Optional[int] = None,
        progress: Optional[ProgressCallback] = None,
        tenant: Optional[str] = None,
    ) -> MultipartUploadResult:
        """
        Upload a file as a new attachment of a document.

        Args:
            document_id: Target document
            path: Local file to upload
            lock_id: Lock governing the document, sent on every session call
            content_type: MIME type (guessed from the file name if omitted)
            file_name: Name to record (defaults to the local file name)
            part_size_bytes: Requested part size; the server's choice wins
            progress: Called after each part is stored
            tenant: Tenant whose token authenticates the session calls

        Returns:
            MultipartUploadResult with the new attachment id

        Raises:
            ValidationError: Bad file, bad part size, missing ETag
            TransportError: Network or storage failure
            ApiResponseError: Any API error (lock, session, auth)
        """
        path = Path(path)
        file_size = self._validate_file(document_id, path)
        if part_size_bytes is not None and part_size_bytes <= 0:
            raise ValidationError(
                f"Part size must be positive, got {part_size_bytes}", document_id=document_id
            )

        file_name = file_name or path.name
        content_type = content_type or mimetypes.guess_type(file_name)[0] or DEFAULT_CONTENT_TYPE

        session: Optional[MultipartUploadSession] = None
        current_part: Optional[int] = None
        try:
            session = self.client.initiate_multipart_upload(
                document_id,
                file_name=file_name,
                content_type=content_type,
                file_size=file_size,
                lock_id=lock_id,
                part_size_bytes=part_size_bytes,
                tenant=tenant,
            )
            part_size = self._effective_part_size(session)
            logger.info(
                "Started multipart upload of %s to document %s (session=%s, %d bytes, part size %d)",
                file_name,
                document_id,
                session.session_id,
                file_size,
                part_size,
            )

            plan = plan_parts(file_size, part_size)
            total_parts = len(plan)
            completed: list[CompletedPart] = []
            bytes_sent = 0

            for part in plan:
                current_part = part.part_number
                source = FilePartSource(path, part)
                data = source.read()

                presigned = self.client.presign_part(
                    document_id,
                    session.session_id,
                    part.part_number,
                    lock_id=lock_id,
                    tenant=tenant,
                )
                etag = self.storage.put_part(presigned.url, data, part.part_number)
                completed.append(CompletedPart(part_number=part.part_number, etag=etag))
                bytes_sent += len(data)

                logger.debug("Uploaded part %d/%d of session %s", part.part_number, total_parts, session.session_id)
                if progress is not None:
                    progress(part.part_number, total_parts, bytes_sent)

            current_part = None
            self._check_completed(completed, total_parts)

            result = self.client.complete_multipart_upload(
                document_id,
                session.session_id,
                completed,
                lock_id=lock_id,
                tenant=tenant,
            )
        except Exception as e:
            if isinstance(e, DocumentApiError):
                e.add_context(
                    document_id=document_id,
                    session_id=session.session_id if session else None,
                    part_number=current_part,
                )
            if session is not None:
                logger.error(
                    "Multipart upload %s for document %s failed: %s",
                    session.session_id,
                    document_id,
                    e,
                )
                self.abort(document_id, session.session_id, lock_id=lock_id, tenant=tenant)
            raise

        result.parts_uploaded = total_parts
        result.total_size = file_size
        logger.info(
            "Completed multipart upload %s: attachment %s (%d parts)",
            result.session_id,
            result.attachment_id,
            total_parts,
        )
        return result

    def abort(
        self,
        document_id: str,
        session_id: str,
        lock_id: Optional[str] = None,
        tenant: Optional[str] = None,
    ) -> bool:
        """
        Abort a session, best-effort.

        Returns:
            True if the server confirmed the abort
        """
        try:
            self.client.abort_multipart_upload(document_id, session_id, lock_id=lock_id, tenant=tenant)
        except Exception as e:
            logger.warning(f"Failed to abort multipart session {session_id} on document {document_id}: {e}")
            return False
        logger.info("Aborted multipart session %s on document %s", session_id, document_id)
        return True

    def status(
        self,
        document_id: str,
        session_id: str,
        tenant: Optional[str] = None,
    ) -> MultipartUploadSession:
        """Fetch the server's view of a session."""
        return self.client.get_multipart_upload_status(document_id, session_id, tenant=tenant)

    @staticmethod
    def _validate_file(document_id: str, path: Path) -> int:
        if not path.exists():
            raise ValidationError(f"File not found: {path}", document_id=document_id)
        if not path.is_file():
            raise ValidationError(f"Not a regular file: {path}", document_id=document_id)
        file_size = path.stat().st_size
        if file_size <= 0:
            raise ValidationError(f"File is empty: {path}", document_id=document_id)
        return file_size

    def _effective_part_size(self, session: MultipartUploadSession) -> int:
        if session.part_size_bytes and session.part_size_bytes > 0:
            return session.part_size_bytes
        logger.debug(
            "Server did not choose a part size for session %s, using %d",
            session.session_id,
            self.default_part_size_bytes,
        )
        return self.default_part_size_bytes

    @staticmethod
    def _check_completed(completed: list[CompletedPart], total_parts: int) -> None:
        numbers = [part.part_number for part in completed]
        if numbers != list(range(1, total_parts + 1)):
            raise ValidationError(f"Completed parts are not contiguous 1..{total_parts}: {numbers}")
