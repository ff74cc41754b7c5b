"""Version information for container_version_manager."""

__version__ = "0.1.0"
