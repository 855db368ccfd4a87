"""Storage layer for cms-link."""

from cmslink.storage.database import Database
from cmslink.storage.repositories import LinkRepository

__all__ = [
    "Database",
    "LinkRepository",
]
