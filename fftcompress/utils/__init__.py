"""
Utility modules for configuration, logging, and error handling.
"""

from fftcompress.utils.errors import (
    MediaCompressionError,
    FormatError,
    UnsupportedFormatError,
    InvalidParameterError,
    MediaIOError,
    ConfigurationError,
)
from fftcompress.utils.logging import get_logger, setup_logging, JSONFormatter
from fftcompress.utils.config import ConfigManager, load_config, get_default_config

__all__ = [
    "MediaCompressionError",
    "FormatError",
    "UnsupportedFormatError",
    "InvalidParameterError",
    "MediaIOError",
    "ConfigurationError",
    "get_logger",
    "setup_logging",
    "JSONFormatter",
    "ConfigManager",
    "load_config",
    "get_default_config",
]
