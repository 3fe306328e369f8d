"""
Error handling utilities for the Audio Library Browse Server
Provides consistent error responses and logging
"""
import logging
from typing import Optional
from audio_server.exceptions import MusicLibraryError, get_error_code

logger = logging.getLogger(__name__)


def _error_message(error: Exception) -> str:
    if isinstance(error, MusicLibraryError):
        return error.message
    return str(error) or type(error).__name__


def create_error_response(
    error: Exception,
    message: Optional[str] = None,
) -> dict:
    """
    Create a standardized error response body

    Args:
        error: The exception that occurred
        message: Optional custom error message (defaults to exception message)

    Returns:
        dict: ``{"ok": False, "error": <message>, "code": <error code>}``
    """
    return {
        "ok": False,
        "error": message or _error_message(error),
        "code": get_error_code(error),
    }


def log_error(
    error: Exception,
    context: Optional[dict] = None,
    level: str = "error"
) -> None:
    """
    Log an error with structured context

    Args:
        error: The exception to log
        context: Additional context information
        level: Log level (error, warning, critical)
    """
    log_data = {
        "error_type": type(error).__name__,
        "error_code": get_error_code(error),
        "error_message": _error_message(error),
    }

    if isinstance(error, MusicLibraryError) and error.details:
        log_data["details"] = error.details

    if context:
        log_data["context"] = context

    log_method = getattr(logger, level.lower(), logger.error)
    log_method(
        f"{log_data['error_code']}: {log_data['error_message']}",
        extra={"error_data": log_data},
        # Tracebacks only for unexpected failures
        exc_info=not isinstance(error, MusicLibraryError),
    )
