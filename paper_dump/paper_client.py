"""
Module for talking to the legacy Dropbox Paper API.
"""

import json

import requests

from .constants import (
    API_BASE_URL,
    CONTENT_BASE_URL,
    EXPORT_FORMAT,
    LIST_PAGE_SIZE,
    USER_AGENT,
)
from .exceptions import PaperAPIError
from .models import DocumentContent, DocumentMetadata


def build_session(token):
    """Create a requests session that authenticates every call with the bearer token."""
    session = requests.Session()
    session.headers["Authorization"] = f"Bearer {token}"
    session.headers["User-Agent"] = USER_AGENT
    return session


def _error_from_response(endpoint, response):
    """Turn a non-2xx response into a PaperAPIError with Dropbox's error summary."""
    summary = None
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        summary = data.get("error_summary")
    message = f"HTTP {response.status_code}"
    if summary:
        message += f" ({summary})"
    return PaperAPIError(endpoint, message, status=response.status_code, summary=summary)


class PaperClient:
    """Thin client over the deprecated paper/docs/* endpoints."""

    def __init__(self, config, session=None):
        """Initialize the client with an authenticated session."""
        self.config = config
        self.session = session if session is not None else build_session(config.token)

    def _rpc(self, endpoint, payload):
        """POST a JSON payload to an RPC endpoint and return the decoded JSON result."""
        try:
            response = self.session.post(
                f"{API_BASE_URL}/{endpoint}",
                json=payload,
                timeout=self.config.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise PaperAPIError(endpoint, f"network error: {e}")

        if not response.ok:
            raise _error_from_response(endpoint, response)
        try:
            result = response.json()
        except ValueError as e:
            raise PaperAPIError(endpoint, f"invalid JSON response: {e}", status=response.status_code)
        if not isinstance(result, dict):
            raise PaperAPIError(endpoint, "JSON response is not an object", status=response.status_code)
        return result

    def _download(self, doc_id, stream):
        """Call paper/docs/download for one document and return the raw response."""
        endpoint = "paper/docs/download"
        arg = json.dumps({"doc_id": doc_id, "export_format": EXPORT_FORMAT})
        try:
            response = self.session.post(
                f"{CONTENT_BASE_URL}/{endpoint}",
                headers={"Dropbox-API-Arg": arg},
                stream=stream,
                timeout=self.config.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise PaperAPIError(endpoint, f"network error for doc {doc_id}: {e}")

        if not response.ok:
            error = _error_from_response(endpoint, response)
            response.close()
            raise error
        return response

    def list_doc_ids(self):
        """
        List every Paper doc id visible to the account.

        Follows the continuation cursor until has_more is false. Ids are
        returned in the order the API first reports them, without duplicates.
        """
        result = self._rpc("paper/docs/list", {"limit": LIST_PAGE_SIZE})
        doc_ids = []
        seen = set()

        while True:
            for doc_id in result.get("doc_ids", []):
                if doc_id not in seen:
                    seen.add(doc_id)
                    doc_ids.append(doc_id)

            if not result.get("has_more"):
                break
            cursor = result.get("cursor", {}).get("value")
            if not cursor:
                raise PaperAPIError("paper/docs/list/continue", "has_more set without a cursor")
            result = self._rpc("paper/docs/list/continue", {"cursor": cursor})

        return doc_ids

    def get_metadata(self, doc_id):
        """Fetch a document's title and owner without reading its body."""
        response = self._download(doc_id, stream=True)
        try:
            raw = response.headers.get("Dropbox-API-Result")
        finally:
            response.close()

        if not raw:
            raise PaperAPIError("paper/docs/download", f"missing Dropbox-API-Result header for doc {doc_id}")
        try:
            result = json.loads(raw)
        except ValueError as e:
            raise PaperAPIError("paper/docs/download", f"invalid Dropbox-API-Result header for doc {doc_id}: {e}")
        if not isinstance(result, dict):
            raise PaperAPIError("paper/docs/download", f"Dropbox-API-Result header for doc {doc_id} is not an object")

        return DocumentMetadata(
            doc_id=doc_id,
            title=result.get("title") or "",
            owner=result.get("owner") or "",
            revision=result.get("revision"),
        )

    def get_content(self, doc_id):
        """Download a document's Markdown export."""
        response = self._download(doc_id, stream=False)
        try:
            body = response.content.decode("utf-8", errors="replace")
        except requests.exceptions.RequestException as e:
            raise PaperAPIError("paper/docs/download", f"error reading body of doc {doc_id}: {e}")
        finally:
            response.close()
        return DocumentContent(doc_id=doc_id, body=body)
