"""Configuration package."""

from halfpipe.config.logging import configure_logging, get_logger
from halfpipe.config.settings import Settings, settings

__all__ = ["settings", "Settings", "configure_logging", "get_logger"]
