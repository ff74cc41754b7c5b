"""Command-line interface for container_version_manager."""
