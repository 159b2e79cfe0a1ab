"""Models module exporting all database models."""

from .tour import Tour

__all__ = [
    "Tour",
]
