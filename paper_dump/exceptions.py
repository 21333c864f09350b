"""
Custom exceptions for the Paper dump tool.
"""


class PaperDumpError(Exception):
    """Base exception for Paper dump operations."""
    pass


class ConfigurationError(PaperDumpError):
    """Raised when configuration is invalid or missing."""
    pass


class PaperAPIError(PaperDumpError):
    """Raised when a Dropbox Paper API call fails."""

    def __init__(self, endpoint, message, status=None, summary=None):
        self.endpoint = endpoint
        self.status = status
        self.summary = summary
        super().__init__(f"{endpoint}: {message}")


class ImageDownloadError(PaperDumpError):
    """Raised when an embedded image cannot be downloaded."""
    pass


class OutputError(PaperDumpError):
    """Raised when output files or directories cannot be written."""
    pass
