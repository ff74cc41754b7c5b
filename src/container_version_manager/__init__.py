"""Container version manager - roll image tags out across Kubernetes workloads."""

from container_version_manager.__version__ import __version__

__all__ = ["__version__"]
