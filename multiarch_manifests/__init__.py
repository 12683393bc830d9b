"""Assemble and publish multi-architecture manifest lists from per-arch images."""

from .version import __version__

__all__ = ["__version__"]
