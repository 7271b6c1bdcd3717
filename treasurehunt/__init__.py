"""Treasure hunts kept on disk: records, management, scoring and an interactive hub."""

__version__ = "0.1.0"
__all__ = ["__version__"]