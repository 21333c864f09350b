"""
Constants and fixed values for the Paper dump tool.
"""

# Dropbox API endpoints
API_BASE_URL = "https://api.dropboxapi.com/2"
CONTENT_BASE_URL = "https://content.dropboxapi.com/2"
PAPER_DOC_URL = "https://paper.dropbox.com/doc/{doc_id}"
PAPER_BASE_URL = "https://paper.dropbox.com/"

# Hosts that receive the bearer token when downloading images
AUTHENTICATED_HOST_SUFFIXES = (
    "dropbox.com",
    "dropboxapi.com",
    "dropboxusercontent.com",
)

# Listing and export
LIST_PAGE_SIZE = 100
EXPORT_FORMAT = "markdown"
DOCUMENT_EXTENSION = ".md"

# Output layout
OUTPUT_DIR = "docs"
IMAGES_DIR = "images"
LIST_FILE = "list.json"
INDEX_FILE = "index.html"

# HTTP
DEFAULT_TIMEOUT_SECONDS = 60
USER_AGENT = "legacy-paper-dump/0.1"
DOWNLOAD_CHUNK_SIZE = 65536

# Filenames (stem limit in UTF-8 bytes, below NAME_MAX of 255)
MAX_FILENAME_BYTES = 200
MAX_SLUG_LENGTH = 80
