"""
Shared test constants and fakes.

- BASE_URL / TOKEN: the mocked document API
- FakeStorage: an httpx handler standing in for the object store behind
  presigned URLs
"""

import httpx

BASE_URL = "http://docapi.test:8080"
STORAGE_URL = "https://storage.test/claims/docs/doc-1/scan.pdf"
TOKEN = "test-token-12345"


def presigned_url(part_number: int) -> str:
    """Presigned URL for a part, as the API would hand it out."""
    return f"{STORAGE_URL}?partNumber={part_number}&uploadId=up-1&X-Amz-Signature=sig{part_number}"


class FakeStorage:
    """Records part PUTs and answers like an object store."""

    def __init__(self, etag_for=None, status_for=None):
        self.requests: list[httpx.Request] = []
        self.etag_for = etag_for or (lambda part: f'"etag-{part}"')
        self.status_for = status_for or (lambda part: 200)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        part = int(request.url.params.get("partNumber", "0"))
        headers = {}
        etag = self.etag_for(part)
        if etag is not None:
            headers["ETag"] = etag
        return httpx.Response(self.status_for(part), headers=headers)

    @property
    def bodies(self) -> list[bytes]:
        return [r.content for r in self.requests]

    @property
    def part_numbers(self) -> list[int]:
        return [int(r.url.params["partNumber"]) for r in self.requests]
