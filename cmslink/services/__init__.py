"""Service layer for business logic and validation."""

from cmslink.services.link_service import LinkService

__all__ = ["LinkService"]
