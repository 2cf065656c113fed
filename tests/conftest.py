"""Test fixtures and utilities."""

from pathlib import Path

import httpx
import pytest

from docapi.client import DocumentApiClient
from docapi.credentials import CredentialStore
from docapi.uploads import StorageUploader
from fixtures import BASE_URL, TOKEN, FakeStorage


@pytest.fixture
def credentials() -> CredentialStore:
    """Credential store holding a tenant-less token."""
    store = CredentialStore()
    store.set_token("", TOKEN)
    return store


@pytest.fixture
def client(credentials) -> DocumentApiClient:
    """API client against the mocked base URL."""
    return DocumentApiClient(BASE_URL, credentials=credentials)


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def storage(fake_storage):
    """Storage uploader wired to the fake object store."""
    uploader = StorageUploader(transport=httpx.MockTransport(fake_storage.handler))
    yield uploader
    uploader.close()


@pytest.fixture
def make_file(tmp_path):
    """Create a file of the given size with a repeating byte pattern."""

    def _make(size: int, name: str = "scan.pdf") -> Path:
        path = tmp_path / name
        path.write_bytes(bytes(i % 251 for i in range(size)))
        return path

    return _make
