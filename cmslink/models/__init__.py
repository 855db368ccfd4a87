"""Database models for cms-link."""

from cmslink.models.base import Base, TimestampMixin
from cmslink.models.link import Link

__all__ = ["Base", "TimestampMixin", "Link"]
