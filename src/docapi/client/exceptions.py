"""
Error taxonomy for the document API client.

Every error carries whatever context was known when it was raised
(document id, upload session id, part number) so callers can decide
whether to restart an upload from scratch.
"""

from typing import Optional


class DocumentApiError(Exception):
    """Base exception for document API client errors."""

    def __init__(
        self,
        message: str,
        document_id: Optional[str] = None,
        session_id: Optional[str] = None,
        part_number: Optional[int] = None,
    ):
        self.message = message
        self.document_id = document_id
        self.session_id = session_id
        self.part_number = part_number
        super().__init__(message)

    def add_context(
        self,
        document_id: Optional[str] = None,
        session_id: Optional[str] = None,
        part_number: Optional[int] = None,
    ) -> "DocumentApiError":
        """Fill in context fields that are still unset. Returns self."""
        if self.document_id is None:
            self.document_id = document_id
        if self.session_id is None:
            self.session_id = session_id
        if self.part_number is None:
            self.part_number = part_number
        return self

    def __str__(self) -> str:
        context = []
        if self.document_id is not None:
            context.append(f"document={self.document_id}")
        if self.session_id is not None:
            context.append(f"session={self.session_id}")
        if self.part_number is not None:
            context.append(f"part={self.part_number}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class ValidationError(DocumentApiError):
    """Client-side validation failed before (or instead of) a network call."""
    pass


class TransportError(DocumentApiError):
    """Network or storage-layer failure, distinct from an API error response."""

    def __init__(self, message: str, status_code: Optional[int] = None, **context):
        self.status_code = status_code
        super().__init__(message, **context)


class ApiResponseError(DocumentApiError):
    """API returned an error response."""

    def __init__(
        self,
        status_code: int,
        message: str,
        response_body: Optional[str] = None,
        error_code: Optional[str] = None,
        **context,
    ):
        self.status_code = status_code
        self.response_body = response_body
        self.error_code = error_code
        super().__init__(f"Document API error {status_code}: {message}", **context)


class AuthError(ApiResponseError):
    """Bad or missing credentials."""
    pass


class NotFoundError(ApiResponseError):
    """Requested resource does not exist."""
    pass


class ConflictError(ApiResponseError):
    """Resource is already locked by another party."""
    pass


class LockRequiredError(ApiResponseError):
    """Mutation requires a lock token and none was supplied."""
    pass


class LockMismatchError(ApiResponseError):
    """Supplied lock id is not the server's current lock holder."""
    pass


class ExpiredLockError(ApiResponseError):
    """The lease behind the supplied lock id has already lapsed."""
    pass


# Machine-readable codes in the error body take precedence over the status code
ERROR_CODE_MAP: dict[str, type[ApiResponseError]] = {
    "LOCK_REQUIRED": LockRequiredError,
    "LOCK_MISMATCH": LockMismatchError,
    "LOCK_EXPIRED": ExpiredLockError,
    "DOCUMENT_LOCKED": ConflictError,
    "UNAUTHORIZED": AuthError,
    "NOT_FOUND": NotFoundError,
}

STATUS_MAP: dict[int, type[ApiResponseError]] = {
    401: AuthError,
    403: AuthError,
    404: NotFoundError,
    409: ConflictError,
    410: ExpiredLockError,
    412: LockMismatchError,
    423: ConflictError,
    428: LockRequiredError,
}


def error_class_for(status_code: int, error_code: Optional[str] = None) -> type[ApiResponseError]:
    """Pick the exception class for an API error response."""
    if isinstance(error_code, str) and error_code:
        normalized = error_code.strip().upper().replace("-", "_")
        if normalized in ERROR_CODE_MAP:
            return ERROR_CODE_MAP[normalized]
    return STATUS_MAP.get(status_code, ApiResponseError)
