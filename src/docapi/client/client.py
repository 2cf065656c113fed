"""
Document API client implementation.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..credentials import CredentialStore
from ..schemas import (
    CompletedPart,
    Document,
    DocumentLock,
    LoginResult,
    MultipartUploadResult,
    MultipartUploadSession,
    PresignedPart,
    UploadResult,
)
from .exceptions import (
    DocumentApiError,
    NotFoundError,
    TransportError,
    ValidationError,
    error_class_for,
)

logger = logging.getLogger(__name__)

LOCK_HEADER = "X-Document-Lock-Id"


class DocumentApiClient:
    """
    Client for the document-management API.

    Features:
    - Tenant-aware bearer auth resolved per call from a CredentialStore
    - Lease-lock endpoints (lock, renew, unlock)
    - Multipart upload session endpoints (initiate, presign, complete, abort)
    - Supporting document calls that accept a lock id
    - Automatic retry with backoff for idempotent methods only
    """

    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        base_url: str,
        credentials: Optional[CredentialStore] = None,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
    ):
        """
        Initialize document API client.

        Args:
            base_url: API base URL (e.g., "http://localhost:8080")
            credentials: Token store shared by every call of this client
            timeout: Request timeout in seconds
            max_retries: Maximum retry attempts for transient failures
            backoff_factor: Backoff factor for retries
        """
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials if credentials is not None else CredentialStore()
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

        # POST is left out: lock, renew and session calls are not idempotent
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "HEAD", "PUT", "DELETE"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _auth_headers(self, tenant: Optional[str], token: Optional[str]) -> dict[str, str]:
        if not token:
            token = self.credentials.token_for(tenant)
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_data: Optional[dict] = None,
        files: Optional[dict] = None,
        lock_id: Optional[str] = None,
        tenant: Optional[str] = None,
        token: Optional[str] = None,
        document_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> requests.Response:
        """Make an API request with error handling."""
        url = f"{self.base_url}{endpoint}"
        headers = self._auth_headers(tenant, token)
        if lock_id:
            headers[LOCK_HEADER] = lock_id
        context = {"document_id": document_id, "session_id": session_id}

        logger.debug(f"API Request: {method} {url}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                files=files,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error to {url}: {e}")
            raise TransportError(
                f"Failed to connect to document API at {self.base_url}: {e}", **context
            ) from e
        except requests.exceptions.Timeout as e:
            logger.error(f"Timeout for {url}: {e}")
            raise TransportError(f"Request to document API timed out: {e}", **context) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error for {url}: {e}")
            raise TransportError(f"Request failed: {e}", **context) from e

        logger.debug(f"Response status: {response.status_code}")

        if not response.ok:
            error_body = response.text
            message = response.reason or "error"
            error_code = None
            try:
                error_json = response.json()
            except ValueError:
                error_json = None
            if isinstance(error_json, dict):
                message = error_json.get("message") or error_json.get("detail") or message
                for key in ("code", "errorCode", "error"):
                    if isinstance(error_json.get(key), str) and error_json[key].strip():
                        error_code = error_json[key]
                        break

            error_cls = error_class_for(response.status_code, error_code)
            logger.error(f"API Error {response.status_code} on {method} {endpoint}: {message}")
            raise error_cls(
                status_code=response.status_code,
                message=message,
                response_body=error_body,
                error_code=error_code,
                **context,
            )

        return response

    @staticmethod
    def _json(response: requests.Response) -> dict:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise DocumentApiError(f"Invalid JSON in response: {e}") from e
        return data if isinstance(data, dict) else {}

    # Authentication

    def login(
        self,
        username: str,
        password: str,
        tenant: Optional[str] = None,
    ) -> LoginResult:
        """
        Log in and store the returned token.

        On success the token is stored under the tenant and that tenant becomes
        active; without a tenant the token is stored in tenant-less mode.
        """
        return self._authenticate(
            "/api/auth/login",
            {"username": username, "password": password},
            tenant,
        )

    def register(
        self,
        username: str,
        email: str,
        password: str,
        tenant: Optional[str] = None,
        privilege_set_name: Optional[str] = None,
    ) -> LoginResult:
        """Register a user and store the returned token (same rules as login)."""
        body: dict[str, Any] = {"username": username, "email": email, "password": password}
        if privilege_set_name:
            body["privilegeSetName"] = privilege_set_name
        return self._authenticate("/api/auth/register", body, tenant)

    def _authenticate(self, endpoint: str, body: dict, tenant: Optional[str]) -> LoginResult:
        tenant = tenant or self.credentials.default_tenant
        params = {"tenant": tenant} if tenant else None

        response = self._request("POST", endpoint, params=params, json_data=body, token=None)
        try:
            result = LoginResult.from_api_response(self._json(response), tenant)
        except ValueError as e:
            raise DocumentApiError(str(e)) from e

        if tenant:
            self.credentials.set_token(tenant, result.token)
            self.credentials.set_active_tenant(tenant)
        else:
            self.credentials.set_token("", result.token)

        logger.info(f"Authenticated as {result.username or body.get('username')} (tenant={tenant})")
        return result

    # Documents

    def get_document(self, document_id: str, tenant: Optional[str] = None) -> Document:
        """Get a document; raises NotFoundError if it does not exist."""
        response = self._request(
            "GET", f"/api/documents/{document_id}", tenant=tenant, document_id=document_id
        )
        return Document.from_api_response(self._json(response))

    def try_get_document(self, document_id: str, tenant: Optional[str] = None) -> Optional[Document]:
        """Get a document, or None if it does not exist."""
        try:
            return self.get_document(document_id, tenant=tenant)
        except NotFoundError:
            return None

    def document_exists(self, document_id: str, tenant: Optional[str] = None) -> bool:
        return self.try_get_document(document_id, tenant=tenant) is not None

    def create_document(self, payload: dict, tenant: Optional[str] = None) -> Document:
        response = self._request("POST", "/api/documents", json_data=payload, tenant=tenant)
        return Document.from_api_response(self._json(response))

    def update_document(
        self,
        document_id: str,
        payload: dict,
        lock_id: Optional[str] = None,
        tenant: Optional[str] = None,
    ) -> Document:
        response = self._request(
            "PUT",
            f"/api/documents/{document_id}",
            json_data=payload,
            lock_id=lock_id,
            tenant=tenant,
            document_id=document_id,
        )
        return Document.from_api_response(self._json(response))

    def delete_document(
        self,
        document_id: str,
        lock_id: Optional[str] = None,
        tenant: Optional[str] = None,
    ) -> None:
        self._request(
            "DELETE",
            f"/api/documents/{document_id}",
            lock_id=lock_id,
            tenant=tenant,
            document_id=document_id,
        )

    def upload_attachment(
        self,
        document_id: str,
        path: Path,
        lock_id: Optional[str] = None,
        tenant: Optional[str] = None,
    ) -> UploadResult:
        """
        Upload a small file as multipart/form-data in a single request.

        Large files should go through MultipartUploader instead.
        """
        path = Path(path)
        if not path.is_file():
            raise ValidationError(f"Not a file: {path}", document_id=document_id)

        with open(path, "rb") as f:
            response = self._request(
                "POST",
                f"/api/documents/{document_id}/attachments",
                files={"file": (path.name, f)},
                lock_id=lock_id,
                tenant=tenant,
                document_id=document_id,
            )
        return UploadResult.from_api_response(self._json(response))

    # Locks

    def lock_document(
        self,
        document_id: str,
        lease_seconds: int,
        tenant: Optional[str] = None,
    ) -> DocumentLock:
        response = self._request(
            "POST",
            f"/api/documents/{document_id}/lock",
            json_data={"leaseSeconds": lease_seconds},
            tenant=tenant,
            document_id=document_id,
        )
        return self._parse_lock(response, document_id)

    def renew_lock(
        self,
        document_id: str,
        lock_id: str,
        lease_seconds: int,
        tenant: Optional[str] = None,
    ) -> DocumentLock:
        response = self._request(
            "POST",
            f"/api/documents/{document_id}/lock/renew",
            json_data={"leaseSeconds": lease_seconds},
            lock_id=lock_id,
            tenant=tenant,
            document_id=document_id,
        )
        return self._parse_lock(response, document_id)

    def unlock_document(
        self,
        document_id: str,
        lock_id: str,
        tenant: Optional[str] = None,
    ) -> None:
        self._request(
            "POST",
            f"/api/documents/{document_id}/unlock",
            lock_id=lock_id,
            tenant=tenant,
            document_id=document_id,
        )

    def _parse_lock(self, response: requests.Response, document_id: str) -> DocumentLock:
        try:
            return DocumentLock.from_api_response(self._json(response), document_id)
        except ValueError as e:
            raise DocumentApiError(str(e), document_id=document_id) from e

    # Multipart upload sessions

    def _multipart_path(self, document_id: str, session_id: Optional[str] = None) -> str:
        path = f"/api/documents/{document_id}/attachments/multipart"
        if session_id:
            path = f"{path}/{session_id}"
        return path

    def initiate_multipart_upload(
        self,
        document_id: str,
        file_name: str,
        content_type: str,
        file_size: int,
        lock_id: Optional[str] = None,
        part_size_bytes: Optional[int] = None,
        tenant: Optional[str] = None,
    ) -> MultipartUploadSession:
        body: dict[str, Any] = {
            "fileName": file_name,
            "contentType": content_type,
            "fileSize": file_size,
        }
        if part_size_bytes:
            body["partSizeBytes"] = part_size_bytes

        response = self._request(
            "POST",
            self._multipart_path(document_id),
            json_data=body,
            lock_id=lock_id,
            tenant=tenant,
            document_id=document_id,
        )
        try:
            session = MultipartUploadSession.from_api_response(self._json(response))
        except ValueError as e:
            raise DocumentApiError(str(e), document_id=document_id) from e

        # Initiate responses only echo storage details
        session.document_id = session.document_id or document_id
        session.file_name = session.file_name or file_name
        session.content_type = session.content_type or content_type
        session.total_size = session.total_size or file_size
        return session

    def presign_part(
        self,
        document_id: str,
        session_id: str,
        part_number: int,
        lock_id: Optional[str] = None,
        tenant: Optional[str] = None,
    ) -> PresignedPart:
        response = self._request(
            "POST",
            f"{self._multipart_path(document_id, session_id)}/presign-part",
            params={"partNumber": part_number},
            lock_id=lock_id,
            tenant=tenant,
            document_id=document_id,
            session_id=session_id,
        )
        try:
            return PresignedPart.from_api_response(self._json(response), session_id, part_number)
        except ValueError as e:
            raise DocumentApiError(
                str(e), document_id=document_id, session_id=session_id, part_number=part_number
            ) from e

    def complete_multipart_upload(
        self,
        document_id: str,
        session_id: str,
        parts: list[CompletedPart],
        lock_id: Optional[str] = None,
        tenant: Optional[str] = None,
    ) -> MultipartUploadResult:
        response = self._request(
            "POST",
            f"{self._multipart_path(document_id, session_id)}/complete",
            json_data={"parts": [part.to_dict() for part in parts]},
            lock_id=lock_id,
            tenant=tenant,
            document_id=document_id,
            session_id=session_id,
        )
        try:
            data = self._json(response)
        except DocumentApiError as e:
            # The server has already created the attachment
            logger.warning(f"Unreadable completion response for session {session_id}: {e}")
            data = {}
        return MultipartUploadResult.from_api_response(data, session_id)

    def abort_multipart_upload(
        self,
        document_id: str,
        session_id: str,
        lock_id: Optional[str] = None,
        tenant: Optional[str] = None,
    ) -> None:
        self._request(
            "POST",
            f"{self._multipart_path(document_id, session_id)}/abort",
            lock_id=lock_id,
            tenant=tenant,
            document_id=document_id,
            session_id=session_id,
        )

    def get_multipart_upload_status(
        self,
        document_id: str,
        session_id: str,
        tenant: Optional[str] = None,
    ) -> MultipartUploadSession:
        response = self._request(
            "GET",
            self._multipart_path(document_id, session_id),
            tenant=tenant,
            document_id=document_id,
            session_id=session_id,
        )
        try:
            return MultipartUploadSession.from_api_response(self._json(response))
        except ValueError as e:
            raise DocumentApiError(str(e), document_id=document_id, session_id=session_id) from e
