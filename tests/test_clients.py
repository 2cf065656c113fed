"""
Tests for the document API client.

These tests use responses library to mock HTTP requests,
validating client behavior without making real API calls.
"""

import json

import pytest
import requests
import responses

from docapi.client import (
    LOCK_HEADER,
    ApiResponseError,
    AuthError,
    ConflictError,
    DocumentApiClient,
    ExpiredLockError,
    LockMismatchError,
    LockRequiredError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from docapi.credentials import CredentialStore
from docapi.schemas import CompletedPart

from fixtures import BASE_URL, TOKEN


class TestAuthentication:
    """Login/registration and token bookkeeping."""

    @responses.activate
    def test_login_with_tenant_stores_token_and_activates_tenant(self):
        """Successful login stores the token under the tenant and switches to it."""
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/auth/login",
            json={
                "token": "acme-token",
                "tokenType": "Bearer",
                "userId": "u-1",
                "username": "alice",
                "privilegeSetName": "EDITOR",
            },
            status=200,
        )

        store = CredentialStore()
        client = DocumentApiClient(BASE_URL, credentials=store)
        result = client.login("alice", "secret", tenant="acme")

        assert result.token == "acme-token"
        assert result.username == "alice"
        assert result.tenant == "acme"
        assert store.active_tenant == "acme"
        assert store.token_for("acme") == "acme-token"
        assert store.resolve_token() == "acme-token"

        request = responses.calls[0].request
        assert "tenant=acme" in request.url
        assert json.loads(request.body) == {"username": "alice", "password": "secret"}

    @responses.activate
    def test_login_without_tenant_uses_tenantless_mode(self):
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/auth/login",
            json={"token": "plain-token"},
            status=200,
        )

        store = CredentialStore()
        client = DocumentApiClient(BASE_URL, credentials=store)
        client.login("alice", "secret")

        assert store.active_tenant is None
        assert store.resolve_token() == "plain-token"
        assert "tenant=" not in responses.calls[0].request.url

    @responses.activate
    def test_login_uses_default_tenant(self):
        """A call without a tenant falls back to the store's default tenant."""
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/auth/login",
            json={"token": "t"},
            status=200,
        )

        store = CredentialStore(default_tenant="globex")
        client = DocumentApiClient(BASE_URL, credentials=store)
        client.login("bob", "pw")

        assert "tenant=globex" in responses.calls[0].request.url
        assert store.active_tenant == "globex"

    @responses.activate
    def test_login_bad_credentials(self):
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/auth/login",
            json={"message": "Bad credentials"},
            status=401,
        )

        store = CredentialStore()
        client = DocumentApiClient(BASE_URL, credentials=store)

        with pytest.raises(AuthError) as exc_info:
            client.login("alice", "wrong", tenant="acme")

        assert exc_info.value.status_code == 401
        assert store.resolve_token() is None
        assert store.active_tenant is None

    @responses.activate
    def test_register_sends_privilege_set(self):
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/auth/register",
            json={"token": "new-token", "username": "carol"},
            status=200,
        )

        store = CredentialStore()
        client = DocumentApiClient(BASE_URL, credentials=store)
        client.register("carol", "carol@example.com", "pw", tenant="acme", privilege_set_name="VIEWER")

        body = json.loads(responses.calls[0].request.body)
        assert body["privilegeSetName"] == "VIEWER"
        assert body["email"] == "carol@example.com"
        assert store.token_for("acme") == "new-token"


class TestAuthHeaders:
    """Per-call bearer token resolution."""

    @responses.activate
    def test_auth_header_sent(self, client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/documents/doc-1",
            json={"id": "doc-1", "title": "Claim"},
            status=200,
        )

        client.get_document("doc-1")

        assert responses.calls[0].request.headers["Authorization"] == f"Bearer {TOKEN}"

    @responses.activate
    def test_tenant_argument_selects_tenant_token(self):
        """Passing tenant= resolves that tenant's token regardless of the active tenant."""
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/documents/doc-1",
            json={"id": "doc-1"},
            status=200,
        )

        store = CredentialStore()
        store.set_token("acme", "acme-token")
        store.set_token("globex", "globex-token")
        store.set_active_tenant("acme")
        client = DocumentApiClient(BASE_URL, credentials=store)

        client.get_document("doc-1", tenant="globex")

        assert responses.calls[0].request.headers["Authorization"] == "Bearer globex-token"

    @responses.activate
    def test_anonymous_call_has_no_auth_header(self):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/documents/doc-1",
            json={"id": "doc-1"},
            status=200,
        )

        client = DocumentApiClient(BASE_URL)
        client.get_document("doc-1")

        assert "Authorization" not in responses.calls[0].request.headers


class TestDocuments:
    """Supporting document calls."""

    @responses.activate
    def test_get_document_not_found(self, client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/documents/missing",
            json={"message": "Document not found"},
            status=404,
        )

        with pytest.raises(NotFoundError) as exc_info:
            client.get_document("missing")

        assert exc_info.value.document_id == "missing"

    @responses.activate
    def test_try_get_document_returns_none(self, client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/documents/missing",
            json={"message": "Document not found"},
            status=404,
        )

        assert client.try_get_document("missing") is None
        assert client.document_exists("missing") is False

    @responses.activate
    def test_document_exists(self, client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/documents/doc-1",
            json={"id": "doc-1", "title": "Claim"},
            status=200,
        )

        assert client.document_exists("doc-1") is True

    @responses.activate
    def test_update_document_sends_lock_header(self, client):
        responses.add(
            responses.PUT,
            f"{BASE_URL}/api/documents/doc-1",
            json={"id": "doc-1", "title": "Renamed"},
            status=200,
        )

        doc = client.update_document("doc-1", {"title": "Renamed"}, lock_id="lock-1")

        assert doc.title == "Renamed"
        assert responses.calls[0].request.headers[LOCK_HEADER] == "lock-1"

    @responses.activate
    def test_delete_document_without_lock_omits_header(self, client):
        responses.add(responses.DELETE, f"{BASE_URL}/api/documents/doc-1", status=204)

        client.delete_document("doc-1")

        assert LOCK_HEADER not in responses.calls[0].request.headers

    @responses.activate
    def test_update_document_lock_required(self, client):
        responses.add(
            responses.PUT,
            f"{BASE_URL}/api/documents/doc-1",
            json={"message": "Document is locked", "code": "LOCK_REQUIRED"},
            status=409,
        )

        with pytest.raises(LockRequiredError):
            client.update_document("doc-1", {"title": "x"})

    @responses.activate
    def test_upload_attachment(self, client, make_file):
        path = make_file(64, name="small.txt")
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/documents/doc-1/attachments",
            json={
                "status": "SUCCESS",
                "attachmentId": "att-9",
                "documentId": "doc-1",
                "fileName": "small.txt",
                "fileSize": 64,
            },
            status=200,
        )

        result = client.upload_attachment("doc-1", path, lock_id="lock-1")

        assert result.attachment_id == "att-9"
        assert result.file_size == 64
        request = responses.calls[0].request
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert request.headers[LOCK_HEADER] == "lock-1"

    def test_upload_attachment_missing_file(self, client, tmp_path):
        with pytest.raises(ValidationError):
            client.upload_attachment("doc-1", tmp_path / "nope.bin")


class TestLockEndpoints:
    """Raw lock endpoint calls."""

    @responses.activate
    def test_lock_document(self, client):
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/documents/doc-1/lock",
            json={
                "documentId": "doc-1",
                "lockId": "lock-1",
                "lockedBy": "alice",
                "lockExpiresAt": "2026-10-18T12:01:00",
            },
            status=200,
        )

        lock = client.lock_document("doc-1", 60)

        assert lock.lock_id == "lock-1"
        assert lock.locked_by == "alice"
        assert lock.expires_at.minute == 1
        assert json.loads(responses.calls[0].request.body) == {"leaseSeconds": 60}
        assert LOCK_HEADER not in responses.calls[0].request.headers

    @responses.activate
    def test_renew_lock_sends_header(self, client):
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/documents/doc-1/lock/renew",
            json={"documentId": "doc-1", "lockId": "lock-1", "lockExpiresAt": "2026-10-18T12:02:00Z"},
            status=200,
        )

        lock = client.renew_lock("doc-1", "lock-1", 120)

        assert lock.expires_at.tzinfo is not None
        assert responses.calls[0].request.headers[LOCK_HEADER] == "lock-1"
        assert json.loads(responses.calls[0].request.body) == {"leaseSeconds": 120}

    @responses.activate
    def test_unlock_document(self, client):
        responses.add(responses.POST, f"{BASE_URL}/api/documents/doc-1/unlock", status=200)

        client.unlock_document("doc-1", "lock-1")

        assert responses.calls[0].request.headers[LOCK_HEADER] == "lock-1"

    @responses.activate
    def test_lock_is_not_retried_on_server_error(self, client):
        """POST lock calls go out exactly once even on a 503."""
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/documents/doc-1/lock",
            json={"message": "unavailable"},
            status=503,
        )

        with pytest.raises(ApiResponseError) as exc_info:
            client.lock_document("doc-1", 60)

        assert exc_info.value.status_code == 503
        assert len(responses.calls) == 1


class TestErrorMapping:
    """HTTP status and error codes mapped to exception types."""

    @pytest.mark.parametrize(
        "status,body,expected",
        [
            (401, {}, AuthError),
            (403, {}, AuthError),
            (404, {}, NotFoundError),
            (409, {}, ConflictError),
            (423, {}, ConflictError),
            (410, {}, ExpiredLockError),
            (412, {}, LockMismatchError),
            (428, {}, LockRequiredError),
            (409, {"code": "LOCK_MISMATCH"}, LockMismatchError),
            (409, {"error": "lock-expired"}, ExpiredLockError),
            (400, {"message": "bad"}, ApiResponseError),
            (409, {"code": 409, "message": "locked"}, ConflictError),
            (500, {"code": 500}, ApiResponseError),
            (412, {"code": "", "errorCode": "LOCK_EXPIRED"}, ExpiredLockError),
        ],
    )
    @responses.activate
    def test_status_mapping(self, client, status, body, expected):
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/documents/doc-1/unlock",
            json=body,
            status=status,
        )

        with pytest.raises(expected) as exc_info:
            client.unlock_document("doc-1", "lock-1")

        assert type(exc_info.value) is expected
        assert exc_info.value.document_id == "doc-1"

    @responses.activate
    def test_connection_error_is_transport_error(self, client):
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/documents/doc-1/lock",
            body=requests.exceptions.ConnectionError("refused"),
        )

        with pytest.raises(TransportError):
            client.lock_document("doc-1", 60)


class TestMultipartEndpoints:
    """Raw multipart session calls."""

    @responses.activate
    def test_initiate_fills_request_fields(self, client):
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/documents/doc-1/attachments/multipart",
            json={
                "sessionId": "sess-1",
                "uploadId": "up-1",
                "s3Key": "docs/doc-1/big.bin",
                "bucket": "claims",
                "partSizeBytes": 5242880,
            },
            status=200,
        )

        session = client.initiate_multipart_upload(
            "doc-1", "big.bin", "application/octet-stream", 12_000_000, lock_id="lock-1"
        )

        assert session.session_id == "sess-1"
        assert session.storage_key == "docs/doc-1/big.bin"
        assert session.part_size_bytes == 5242880
        assert session.file_name == "big.bin"
        assert session.total_size == 12_000_000
        body = json.loads(responses.calls[0].request.body)
        assert body == {
            "fileName": "big.bin",
            "contentType": "application/octet-stream",
            "fileSize": 12_000_000,
        }
        assert responses.calls[0].request.headers[LOCK_HEADER] == "lock-1"

    @responses.activate
    def test_presign_part(self, client):
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/documents/doc-1/attachments/multipart/sess-1/presign-part",
            json={"sessionId": "sess-1", "partNumber": 2, "presignedUrl": "https://s/2", "expiresInSeconds": 900},
            status=200,
        )

        presigned = client.presign_part("doc-1", "sess-1", 2)

        assert presigned.url == "https://s/2"
        assert presigned.part_number == 2
        assert "partNumber=2" in responses.calls[0].request.url

    @responses.activate
    def test_complete_sends_parts(self, client):
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/documents/doc-1/attachments/multipart/sess-1/complete",
            json={"sessionId": "sess-1", "attachmentId": "att-1", "s3Key": "k", "bucket": "b"},
            status=200,
        )

        result = client.complete_multipart_upload(
            "doc-1",
            "sess-1",
            [CompletedPart(1, '"a"'), CompletedPart(2, '"b"')],
            lock_id="lock-1",
        )

        assert result.attachment_id == "att-1"
        body = json.loads(responses.calls[0].request.body)
        assert body == {"parts": [{"partNumber": 1, "eTag": '"a"'}, {"partNumber": 2, "eTag": '"b"'}]}

    @responses.activate
    def test_complete_with_unreadable_body_still_succeeds(self, client):
        """A 2xx completion means the attachment exists, even if the body is garbage."""
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/documents/doc-1/attachments/multipart/sess-1/complete",
            body="<html>ok</html>",
            status=200,
        )

        result = client.complete_multipart_upload("doc-1", "sess-1", [CompletedPart(1, '"a"')])

        assert result.session_id == "sess-1"
        assert result.attachment_id is None

    @responses.activate
    def test_get_status(self, client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/documents/doc-1/attachments/multipart/sess-1",
            json={
                "sessionId": "sess-1",
                "documentId": "doc-1",
                "fileName": "big.bin",
                "fileSize": 100,
                "status": "IN_PROGRESS",
            },
            status=200,
        )

        session = client.get_multipart_upload_status("doc-1", "sess-1")

        assert session.status == "IN_PROGRESS"
        assert session.total_size == 100
