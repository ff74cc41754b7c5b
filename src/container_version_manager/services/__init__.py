"""Service layer for container version management."""
