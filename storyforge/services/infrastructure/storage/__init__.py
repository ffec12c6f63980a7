"""Storage infrastructure: file-based project store."""

from .project_repository import ProjectStore, get_project_store

__all__ = ["ProjectStore", "get_project_store"]
