import json

import pytest
import requests

from paper_dump.config import Config


class FakeResponse:
    def __init__(self, status_code=200, headers=None, content=b"", json_data=None):
        self.status_code = status_code
        self.headers = headers or {}
        self._content = content
        self._json_data = json_data
        self.closed = False
        self.content_read = False

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    @property
    def content(self):
        self.content_read = True
        return self._content

    def json(self):
        if self._json_data is None:
            raise ValueError("no JSON body")
        return self._json_data

    def iter_content(self, chunk_size=1):
        self.content_read = True
        for i in range(0, len(self._content), chunk_size):
            yield self._content[i:i + chunk_size]

    def close(self):
        self.closed = True


class FakePaperAPI:
    """In-memory stand-in for the Paper endpoints, shaped like a requests.Session."""

    def __init__(self, docs=None, page_size=2, images=None):
        # docs: {doc_id: {"title": ..., "owner": ..., "body": ...}}
        self.docs = docs or {}
        self.page_size = page_size
        self.images = images or {}  # url -> (content_type, bytes)
        self.doc_ids = list(self.docs)
        self.metadata_failures = set()
        self.content_failures = set()
        self.list_error = None
        self.calls = []
        self.responses = []

    def _respond(self, response):
        self.responses.append(response)
        return response

    def _page(self, offset):
        ids = self.doc_ids[offset:offset + self.page_size]
        has_more = offset + self.page_size < len(self.doc_ids)
        return FakeResponse(json_data={
            "doc_ids": ids,
            "cursor": {"value": str(offset + self.page_size), "expiration": None},
            "has_more": has_more,
        })

    def post(self, url, json=None, headers=None, stream=False, timeout=None):
        if url.endswith("/paper/docs/list"):
            self.calls.append(("list", None))
            if self.list_error is not None:
                raise self.list_error
            return self._respond(self._page(0))
        if url.endswith("/paper/docs/list/continue"):
            self.calls.append(("list_continue", json["cursor"]))
            return self._respond(self._page(int(json["cursor"])))
        if url.endswith("/paper/docs/download"):
            return self._download(headers, stream)
        raise AssertionError(f"unexpected POST {url}")

    def _download(self, headers, stream):
        doc_id = json.loads(headers["Dropbox-API-Arg"])["doc_id"]
        stage = "metadata" if stream else "content"
        self.calls.append((stage, doc_id))

        failures = self.metadata_failures if stream else self.content_failures
        if doc_id in failures or doc_id not in self.docs:
            return self._respond(FakeResponse(
                status_code=409,
                json_data={"error_summary": "doc_not_found/..", "error": {".tag": "doc_not_found"}},
            ))

        doc = self.docs[doc_id]
        result = {
            "owner": doc.get("owner", "owner@example.com"),
            "title": doc.get("title", ""),
            "revision": 3,
            "mime_type": "text/x-markdown",
        }
        return self._respond(FakeResponse(
            headers={"Dropbox-API-Result": json.dumps(result)},
            content=doc.get("body", "").encode("utf-8"),
        ))

    def get(self, url, headers=None, stream=False, timeout=None):
        self.calls.append(("image", url))
        self.last_image_headers = headers or {}
        if url not in self.images:
            return self._respond(FakeResponse(status_code=404))
        content_type, data = self.images[url]
        return self._respond(FakeResponse(headers={"Content-Type": content_type}, content=data))


@pytest.fixture
def config(tmp_path):
    return Config(token="test-token", output_dir=tmp_path / "docs", timeout=5)


@pytest.fixture
def connection_error():
    return requests.exceptions.ConnectionError("connection refused")


@pytest.fixture
def make_api():
    return FakePaperAPI


@pytest.fixture
def make_response():
    return FakeResponse
