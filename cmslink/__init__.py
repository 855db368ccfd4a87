"""cms-link: a polymorphic link entity for content management systems."""

from cmslink.exceptions import (
    ConfigurationError,
    DatabaseError,
    InvalidInputError,
    LinkServiceError,
    NotFoundError,
    ValidationError,
)
from cmslink.models.link import Link
from cmslink.registry import LinkKind, TypeDefinition, TypeRegistry, get_registry

__version__ = "0.1.0"

__all__ = [
    "Link",
    "LinkKind",
    "TypeDefinition",
    "TypeRegistry",
    "get_registry",
    "LinkServiceError",
    "ConfigurationError",
    "InvalidInputError",
    "ValidationError",
    "NotFoundError",
    "DatabaseError",
]
