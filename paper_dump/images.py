"""
Module for finding and downloading images embedded in exported documents.
"""

import html
import re
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urljoin, urlparse

import requests
from slugify import slugify

from .constants import (
    AUTHENTICATED_HOST_SUFFIXES,
    DOWNLOAD_CHUNK_SIZE,
    MAX_SLUG_LENGTH,
    PAPER_BASE_URL,
    USER_AGENT,
)
from .exceptions import ImageDownloadError
from .models import ImageReference

# Markdown ![alt](url "title") and HTML <img ... src="url" ...>, in document order
IMAGE_PATTERN = re.compile(
    r'!\[(?P<md_alt>[^\]]*)\]\(\s*(?P<md_url><[^>\n]+>|(?:[^()\s]|\([^()\s]*\))+)(?:\s+"[^"]*")?\s*\)'
    r'|<img\b[^>]*?(?<![\w-])src="(?P<html_url>[^"]+)"[^>]*>',
    re.IGNORECASE,
)

# Map Content-Type subtypes to file extensions
_EXT = {
    "jpeg": "jpg", "jpg": "jpg", "png": "png", "gif": "gif",
    "webp": "webp", "svg+xml": "svg", "bmp": "bmp", "tiff": "tiff",
}


def iter_image_references(content):
    """Yield every downloadable image reference in the content, in order."""
    for match in IMAGE_PATTERN.finditer(content):
        if match.group("md_url") is not None:
            url = match.group("md_url")
            alt = match.group("md_alt")
            start, end = match.span("md_url")
            if url.startswith("<") and url.endswith(">"):
                url = url[1:-1]
                start, end = start + 1, end - 1
        else:
            url = html.unescape(match.group("html_url"))
            alt = ""
            start, end = match.span("html_url")

        url = url.strip()
        if not url or url.lower().startswith("data:"):
            continue
        yield ImageReference(url=url, alt=alt, start=start, end=end)


def rewrite_references(content, replacements):
    """
    Replace image URLs in content with local paths.

    replacements is a list of (ImageReference, new_url) pairs whose spans
    come from a scan of this same content.
    """
    parts = []
    last_end = 0
    for reference, new_url in sorted(replacements, key=lambda item: item[0].start):
        parts.append(content[last_end:reference.start])
        parts.append(new_url)
        last_end = reference.end
    parts.append(content[last_end:])
    return "".join(parts)


def _is_authenticated_host(host):
    host = (host or "").lower()
    return any(host == suffix or host.endswith("." + suffix) for suffix in AUTHENTICATED_HOST_SUFFIXES)


def image_filename(url, index, content_type):
    """Build a unique, filesystem-safe name for the index-th image of a document."""
    segment = unquote(PurePosixPath(urlparse(url).path).name)
    suffix = PurePosixPath(segment).suffix.lower()
    stem = slugify(PurePosixPath(segment).stem, max_length=MAX_SLUG_LENGTH) if segment else ""

    if not suffix or not re.match(r"^\.[a-z0-9]{1,5}$", suffix):
        subtype = content_type.split(";")[0].split("/")[-1].strip().lower()
        ext = _EXT.get(subtype, subtype if re.match(r"^[a-z0-9]+$", subtype) else "bin")
        suffix = f".{ext}"

    if stem:
        return f"{index}-{stem}{suffix}"
    return f"{index}{suffix}"


class ImageDownloader:
    """Downloads embedded images, one request per image."""

    def __init__(self, config, session=None):
        self.config = config
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        self.session = session

    def download(self, reference, dest_dir, index):
        """
        Download one image into dest_dir.

        Returns:
            Path of the written file

        Raises:
            ImageDownloadError: on invalid URLs, HTTP errors, non-image
                responses or write failures. No partial file is left behind.
        """
        try:
            url = urljoin(PAPER_BASE_URL, reference.url)
            parsed = urlparse(url)
            hostname = parsed.hostname
        except ValueError as e:
            raise ImageDownloadError(f"invalid image URL {reference.url}: {e}")
        if parsed.scheme not in ("http", "https") or not hostname:
            raise ImageDownloadError(f"unsupported image URL {reference.url}")

        headers = {}
        if _is_authenticated_host(hostname):
            headers["Authorization"] = f"Bearer {self.config.token}"

        try:
            response = self.session.get(url, headers=headers, stream=True, timeout=self.config.timeout)
        except requests.exceptions.RequestException as e:
            raise ImageDownloadError(f"failed to fetch {url}: {e}")

        try:
            if not response.ok:
                raise ImageDownloadError(f"failed to fetch {url}: HTTP {response.status_code}")
            content_type = response.headers.get("Content-Type", "")
            if not content_type.lower().startswith("image/"):
                raise ImageDownloadError(f"{url}: content type is '{content_type}'")

            dest = Path(dest_dir) / image_filename(url, index, content_type)
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                with open(dest, "wb") as f:
                    for chunk in response.iter_content(DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
            except (OSError, requests.exceptions.RequestException) as e:
                dest.unlink(missing_ok=True)
                raise ImageDownloadError(f"failed to download {url}: {e}")
            return dest
        finally:
            response.close()
