"""Centralized exceptions for techblog."""


class TechblogError(Exception):
    """Base exception for all techblog errors."""


class ContentError(TechblogError):
    """Base exception for content-file problems that stop processing."""


class PathTraversalError(ContentError):
    """Raised when a path would escape its intended directory."""
