"""Data models for legacy Paper documents and their export results."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import PAPER_DOC_URL

DocumentId = str


@dataclass(frozen=True)
class DocumentMetadata:
    """Title and ownership of a Paper document."""

    doc_id: DocumentId
    title: str
    owner: str = ""
    revision: Optional[int] = None

    @property
    def url(self) -> str:
        return PAPER_DOC_URL.format(doc_id=self.doc_id)


@dataclass(frozen=True)
class DocumentContent:
    """Exported Markdown body of a Paper document."""

    doc_id: DocumentId
    body: str


@dataclass(frozen=True)
class ImageReference:
    """An image URL embedded in exported content, with its offsets in the body."""

    url: str
    alt: str
    start: int
    end: int


@dataclass
class DocumentResult:
    """Outcome of processing a single document."""

    doc_id: DocumentId
    title: str
    owner: str = ""
    path: Optional[str] = None  # relative to the output dir; None if nothing was written
    images_found: int = 0
    images_downloaded: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def url(self) -> str:
        return PAPER_DOC_URL.format(doc_id=self.doc_id)

    @property
    def written(self) -> bool:
        return self.path is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the entry written to list.json."""
        return {
            'url': self.url,
            'name': self.title,
            'owner': self.owner,
            'path': self.path,
        }
