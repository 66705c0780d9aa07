# src/__init__.py - v1
"""scgen: smart-contract generation engine."""

from scgen.version import __version__

__all__ = ["__version__"]
