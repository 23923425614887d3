"""railsforge operations module -- applies file operations to the application tree."""

from .engine import FileOperationEngine

__all__ = ["FileOperationEngine"]
