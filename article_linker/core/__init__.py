"""Core utilities and configuration."""

from article_linker.core.config import Settings, get_settings
from article_linker.core.logging import get_logger, link_logger, setup_logging

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "get_logger",
    "link_logger",
    "setup_logging",
]
