"""Configuration package."""

from sqlfixture.config.logging import configure_logging, get_logger
from sqlfixture.config.settings import Settings, settings

__all__ = ["settings", "Settings", "configure_logging", "get_logger"]
