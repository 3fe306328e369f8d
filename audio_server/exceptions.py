"""
Custom exceptions for the Audio Library Browse Server
Provides a hierarchy of exceptions for different error scenarios
"""
from typing import Optional


class MusicLibraryError(Exception):
    """Base exception for all music library errors"""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class FileSystemError(MusicLibraryError):
    """
    Raised when a library path cannot be read

    Examples:
    - Directory or file does not exist
    - Permission denied
    - Path resolves outside the library root
    """
    pass


class MetadataError(MusicLibraryError):
    """
    Raised when an audio file cannot be decoded

    Examples:
    - File is not parsable as audio
    - Unsupported container
    - Corrupted tag block
    """
    pass


class BrowseError(MusicLibraryError):
    """
    Raised when a requested directory cannot be listed

    This is the only failure that aborts a whole browse request.
    """

    NOT_FOUND = "not_found"

    def __init__(self, message: str, reason: str = NOT_FOUND, details: Optional[dict] = None):
        self.reason = reason
        super().__init__(message, details)


class AuthenticationError(MusicLibraryError):
    """
    Raised when an operator-only endpoint is called without a valid token
    """
    pass


# Error code mapping for HTTP responses
ERROR_CODES = {
    BrowseError: "NOT_FOUND",
    FileSystemError: "FILE_SYSTEM_ERROR",
    MetadataError: "METADATA_ERROR",
    AuthenticationError: "AUTHENTICATION_FAILED",
    MusicLibraryError: "INTERNAL_ERROR",
}


def get_error_code(exception: Exception) -> str:
    """Get the error code for an exception"""
    for exc_class, code in ERROR_CODES.items():
        if isinstance(exception, exc_class):
            return code
    return "UNKNOWN_ERROR"
