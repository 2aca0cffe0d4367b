"""Configuration for orbis-access."""

from .settings import AccessSettings, get_settings, reset_settings
from .logging_config import LoggingConfig, LogFormat, setup_logging, get_logger

__all__ = [
    "AccessSettings",
    "get_settings",
    "reset_settings",
    "LoggingConfig",
    "LogFormat",
    "setup_logging",
    "get_logger",
]
