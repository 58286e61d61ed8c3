"""Core module for Atelier Agent shared configuration and models."""

from core.config import (
    CONFIG_FILE,
    DEFAULT_OUTPUT_DIR,
    PROJECT_ROOT,
    Settings,
    get_api_base_url,
    get_api_host,
    get_api_port,
    load_settings,
    validate_settings,
)
from core.errors import (
    AtelierError,
    ConfigurationError,
    PublishError,
    UploadError,
    UpstreamError,
    ValidationError,
)

__all__ = [
    "CONFIG_FILE",
    "DEFAULT_OUTPUT_DIR",
    "PROJECT_ROOT",
    "Settings",
    "get_api_base_url",
    "get_api_host",
    "get_api_port",
    "load_settings",
    "validate_settings",
    "AtelierError",
    "ConfigurationError",
    "PublishError",
    "UploadError",
    "UpstreamError",
    "ValidationError",
]
