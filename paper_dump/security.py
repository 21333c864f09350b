"""
Utility functions for safe, collision-free output filenames.
"""

import re
from typing import Set

from .constants import MAX_FILENAME_BYTES

ILLEGAL_FILENAME_CHARS = '<>:"/\\|?*'

_ILLEGAL_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')

RESERVED_NAMES = {
    'CON', 'PRN', 'AUX', 'NUL',
    'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
    'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
}


def truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut text to at most max_bytes of UTF-8 without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text.rstrip(" .")
    return encoded[:max_bytes].decode("utf-8", "ignore").rstrip(" .")


def sanitize_filename(filename: str) -> str:
    """
    Sanitize a file name so it is valid on Windows, macOS and Linux.

    Args:
        filename: Raw name, typically a document title

    Returns:
        A safe name, or an empty string if nothing usable is left
    """
    if not filename:
        return ""

    sanitized = _ILLEGAL_RE.sub('_', filename)
    # Trailing dots and spaces are dropped by Windows; leading dots hide files
    sanitized = sanitized.strip().strip('.').strip()

    if sanitized.split('.')[0].upper() in RESERVED_NAMES:
        sanitized = f"_{sanitized}"

    return truncate_utf8(sanitized, MAX_FILENAME_BYTES)


class FilenameAllocator:
    """Hands out unique file stems for documents within one output directory."""

    def __init__(self) -> None:
        self._taken: Set[str] = set()

    def _claim(self, stem: str) -> bool:
        key = stem.casefold()
        if key in self._taken:
            return False
        self._taken.add(key)
        return True

    def allocate(self, title: str, doc_id: str) -> str:
        """
        Pick the file stem for a document.

        Args:
            title: Document title (may be empty when metadata failed)
            doc_id: Document id, used as fallback and disambiguator

        Returns:
            A stem unique among all stems allocated so far (case-insensitive)
        """
        safe_id = sanitize_filename(doc_id) or "untitled"
        safe_title = sanitize_filename(title or "")

        if not safe_title:
            candidate = safe_id
        elif self._claim(safe_title):
            return safe_title
        else:
            suffix = f" ({safe_id})"
            candidate = truncate_utf8(safe_title, MAX_FILENAME_BYTES - len(suffix.encode("utf-8"))) + suffix

        if self._claim(candidate):
            return candidate

        counter = 2
        while not self._claim(f"{candidate} {counter}"):
            counter += 1
        return f"{candidate} {counter}"

