"""techblog: content tooling for a Jekyll-style static technical blog."""

__version__ = "0.1.0"
__all__ = ["__version__"]
