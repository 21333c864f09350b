"""
Package for exporting legacy Dropbox Paper docs to a local directory.
"""

from .config import Config, load_config, ensure_directories
from .paper_client import PaperClient
from .images import ImageDownloader, iter_image_references, rewrite_references
from .security import FilenameAllocator, sanitize_filename
from .writer import write_document, write_index

__all__ = [
    'Config',
    'load_config',
    'ensure_directories',
    'PaperClient',
    'ImageDownloader',
    'iter_image_references',
    'rewrite_references',
    'FilenameAllocator',
    'sanitize_filename',
    'write_document',
    'write_index'
]
