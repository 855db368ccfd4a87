"""Repository pattern implementation for data access layer."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from cmslink.models.link import Link


class LinkRepository:
    """Repository for link operations."""

    def __init__(self, session: Session):
        """Initialize repository with a database session."""
        self.session = session

    def create(self, link: Link) -> Link:
        """Create a new link."""
        self.session.add(link)
        self.session.flush()
        return link

    def get_by_id(self, link_id: int) -> Optional[Link]:
        """Get link by ID."""
        return self.session.get(Link, link_id)

    def get_by_reference(self, field: str, entity_id: Any) -> list[Link]:
        """Get links whose reference column (e.g. file_id) points at an entity."""
        column = getattr(Link, field)
        stmt = select(Link).where(column == entity_id).order_by(Link.id)
        return list(self.session.scalars(stmt))

    def update(self, link: Link) -> Link:
        """Write changes to an existing link, reattaching it if detached."""
        self.session.add(link)
        self.session.flush()
        return link

    def list(
        self,
        link_type: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Link]:
        """List links, optionally filtered by type, oldest first."""
        query = select(Link)
        if link_type:
            query = query.where(Link.link_type == link_type)
        query = query.order_by(Link.id).limit(limit).offset(offset)
        return list(self.session.scalars(query))

    def count(self, link_type: Optional[str] = None) -> int:
        """Count links, optionally filtered by type."""
        query = select(func.count(Link.id))
        if link_type:
            query = query.where(Link.link_type == link_type)
        return self.session.scalar(query) or 0

    def delete(self, link_id: int) -> bool:
        """Delete a link by ID."""
        link = self.get_by_id(link_id)
        if link:
            self.session.delete(link)
            return True
        return False
