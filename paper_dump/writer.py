"""
Module for writing exported documents and the index files to disk.
"""

import html
import json
import os
from datetime import datetime
from urllib.parse import quote

from slugify import slugify

from .constants import DOCUMENT_EXTENSION, INDEX_FILE, LIST_FILE, MAX_SLUG_LENGTH
from .exceptions import OutputError


def image_dir_name(stem, doc_id, taken):
    """Pick a slug for a document's image subdirectory, unique within `taken`."""
    name = slugify(stem, max_length=MAX_SLUG_LENGTH) or slugify(doc_id, max_length=MAX_SLUG_LENGTH) or "document"
    if name in taken:
        name = slugify(f"{name}-{doc_id}", max_length=2 * MAX_SLUG_LENGTH)
    counter = 2
    base = name
    while name in taken:
        name = f"{base}-{counter}"
        counter += 1
    taken.add(name)
    return name


def render_document(title, body, url, owner="", downloaded_at=None):
    """Prefix the exported body with a short provenance header."""
    downloaded_at = downloaded_at or datetime.now().astimezone()
    source = f"*Downloaded on {downloaded_at.strftime('%Y-%m-%d %H:%M %Z').strip()} from <{url}>"
    if owner:
        source += f", owned by {owner}"
    source += "*"
    return f"# {title}\n\n{source}\n\n{body.rstrip()}\n"


def write_document(config, stem, content):
    """Write one document file, replacing any previous copy. Returns the file name."""
    filename = f"{stem}{DOCUMENT_EXTENSION}"
    output_file = os.path.join(config.output_dir, filename)
    try:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise OutputError(f"Unable to write '{output_file}': {e}")
    return filename


def write_index(config, results):
    """Write list.json and index.html for every document that produced a file."""
    written = sorted((r for r in results if r.written), key=lambda r: (r.title.casefold(), r.doc_id))

    list_path = os.path.join(config.output_dir, LIST_FILE)
    index_path = os.path.join(config.output_dir, INDEX_FILE)

    lines = ["<html><head><meta charset=\"utf-8\"><title>Paper Doc Index</title></head><body>"]
    for result in written:
        lines.append(
            '<p><a href="{path}">{name}</a><br><small>{owner}</small> &middot; '
            '<small><a href="{url}">link</a></small></p>'.format(
                path=html.escape(quote(result.path)),
                name=html.escape(result.title),
                owner=html.escape(result.owner),
                url=html.escape(result.url),
            )
        )
    lines.append("</body></html>")

    try:
        with open(list_path, "w", encoding="utf-8") as f:
            json.dump({"docs": [r.to_dict() for r in written]}, f, ensure_ascii=False, indent=2)
        with open(index_path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
    except OSError as e:
        raise OutputError(f"Unable to write index files: {e}")
