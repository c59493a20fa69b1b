"""
Custom exceptions for fftcompress.

Every failure the compression core can report is a subclass of
MediaCompressionError, so callers can tell error kinds apart and map them
to distinct exit codes.
"""

from typing import Any, Optional


class MediaCompressionError(Exception):
    """Base exception for all compression and analysis errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class FormatError(MediaCompressionError):
    """Raised when a container or its sample data is malformed."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path} if file_path else None)
        self.file_path = file_path


class UnsupportedFormatError(FormatError):
    """Raised when a container format or sample encoding is not supported."""

    def __init__(self, message: str, format: Optional[str] = None):
        super().__init__(message)
        self.format = format
        self.details = {"format": format}


class InvalidParameterError(MediaCompressionError):
    """Raised when a compression or analysis parameter is out of range."""

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.value = value
        self.details = {"parameter": parameter, "value": value}


class MediaIOError(MediaCompressionError):
    """Raised when a media file cannot be read or written."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.file_path = file_path
        self.original_error = original_error
        self.details = {
            "file_path": file_path,
            "original_error": str(original_error) if original_error else None,
        }


class ConfigurationError(MediaCompressionError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message)
        self.config_key = config_key
        self.details = {"config_key": config_key}
