"""Logging configuration for container_version_manager."""

from container_version_manager.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
