"""Link service layer: validated, two-phase persistence of links."""

import logging
from typing import Any, Callable

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from cmslink.exceptions import (
    ConfigurationError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from cmslink.i18n import TranslationService
from cmslink.lookup import EntityLookup, InMemoryEntityLookup
from cmslink.models.link import Link
from cmslink.registry import TypeRegistry, get_registry
from cmslink.services.link.reporting import LinkReporter
from cmslink.services.link.resolver import LinkResolver
from cmslink.services.link.validation import LinkValidator
from cmslink.storage.repositories import LinkRepository

logger = logging.getLogger(__name__)

# A post-create step receives the freshly inserted link and returns True if it
# changed the link and another write is needed.
PostCreateStep = Callable[[Link], bool]


class LinkService:
    """Service layer for link CRUD operations with validation and error handling."""

    def __init__(
        self,
        session: Session,
        registry: TypeRegistry | None = None,
        lookup: EntityLookup | None = None,
        translator: TranslationService | None = None,
    ):
        """
        Initialize link service with database session.

        Args:
            session: SQLAlchemy database session
            registry: Link type registry. If None, uses the global registry.
            lookup: Finds referenced files and pages. If None, nothing resolves.
            translator: Translation service for labels and messages
        """
        self.session = session
        self.registry = registry or get_registry(translator)
        self.link_repo = LinkRepository(session)
        self.validator = LinkValidator(self.registry, translator)
        self.resolver = LinkResolver(
            self.registry, lookup or InMemoryEntityLookup(), translator
        )
        self.reporter = LinkReporter(self.link_repo, self.resolver)
        self.post_create_steps: list[PostCreateStep] = [self.fill_title]

    def fill_title(self, link: Link) -> bool:
        """
        Give a link without a title one derived from what it points at.

        Args:
            link: Persisted link

        Returns:
            True if the title was set, False if the link already had one
        """
        if link.title:
            return False
        link.title = self.resolver.derive_title(link)
        logger.debug("Derived title %r for link %s", link.title, link.id)
        return True

    def _active_field(self, link: Link) -> str | None:
        definition = self.registry.get(link.link_type)
        return definition.field if definition is not None else None

    def save(self, link: Link) -> Link:
        """
        Validate and persist a link.

        New links are written, then each post-create step runs; if any step
        changed the link it is written once more before committing.

        Args:
            link: Link to save

        Returns:
            The saved link

        Raises:
            ValidationError: If the link fails validation
            DatabaseError: If database operation fails
        """
        state = inspect(link)
        result = self.validator.validate(link)
        if not result.valid:
            field = self._active_field(link)
            if state.persistent:
                # Drop the rejected changes so a later commit cannot write them
                state.session.expire(link)
            raise ValidationError(result.message or "Invalid link", field)

        is_new = not state.has_identity
        try:
            if is_new:
                self.link_repo.create(link)
            else:
                self.link_repo.update(link)

            if is_new:
                changed = False
                for step in self.post_create_steps:
                    changed = step(link) or changed
                if changed:
                    self.link_repo.update(link)

            self.session.commit()
            logger.info("Saved link %s (%s)", link.id, link.link_type)
            return link

        except Exception as e:
            self.session.rollback()
            if is_new:
                # The rolled back INSERT leaves the flushed id behind
                link.id = None
            raise DatabaseError(f"Failed to save link: {str(e)}", e) from e

    def create_link(self, link_class: type[Link] = Link, **fields: Any) -> Link:
        """
        Create and save a link.

        Args:
            link_class: Link class to instantiate (Link or a subclass)
            **fields: Column values, e.g. link_type="Email", email="a@b.com"

        Returns:
            Created link with ID

        Raises:
            ValidationError: If a field is unknown or the link fails validation
            DatabaseError: If database operation fails
        """
        self._check_fields(link_class, fields)
        return self.save(link_class(**fields))

    def get_link(self, link_id: int) -> Link:
        """
        Get a link by ID.

        Raises:
            NotFoundError: If link is not found
            DatabaseError: If database operation fails
        """
        try:
            link = self.link_repo.get_by_id(link_id)
        except Exception as e:
            raise DatabaseError(f"Failed to get link: {str(e)}", e) from e
        if link is None:
            raise NotFoundError("Link", str(link_id))
        return link

    def update_link(self, link_id: int, **fields: Any) -> Link:
        """
        Update fields on an existing link and save it.

        Args:
            link_id: Link ID
            **fields: Column values to change

        Returns:
            Updated link

        Raises:
            ValidationError: If a field is unknown or the link fails validation
            NotFoundError: If link is not found
            DatabaseError: If database operation fails
        """
        link = self.get_link(link_id)
        self._check_fields(type(link), fields)
        for key, value in fields.items():
            setattr(link, key, value)
        return self.save(link)

    def delete_link(self, link_id: int) -> bool:
        """
        Delete a link. Referenced files and pages are left untouched.

        Args:
            link_id: Link ID

        Returns:
            True if link was deleted, False if not found

        Raises:
            DatabaseError: If database operation fails
        """
        try:
            deleted = self.link_repo.delete(link_id)
            if deleted:
                self.session.commit()
                logger.info("Deleted link %s", link_id)
            return deleted

        except Exception as e:
            self.session.rollback()
            raise DatabaseError(f"Failed to delete link: {str(e)}", e) from e

    def list_links(
        self, link_type: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[Link]:
        """
        List links, optionally of one type.

        Raises:
            ConfigurationError: If link_type is not a registered type
            DatabaseError: If database operation fails
        """
        self._check_link_type(link_type)
        try:
            return self.link_repo.list(link_type=link_type, limit=limit, offset=offset)
        except Exception as e:
            raise DatabaseError(f"Failed to list links: {str(e)}", e) from e

    def count_links(self, link_type: str | None = None) -> int:
        """Count links, optionally of one type."""
        self._check_link_type(link_type)
        try:
            return self.link_repo.count(link_type=link_type)
        except Exception as e:
            raise DatabaseError(f"Failed to count links: {str(e)}", e) from e

    def generate_link_report(self, link_type: str | None = None) -> dict[str, Any]:
        """
        Generate a link report.

        Args:
            link_type: Optional link type to filter by

        Returns:
            Dictionary containing link statistics and broken links

        Raises:
            ConfigurationError: If link_type is not a registered type
            DatabaseError: If database operation fails
        """
        return self.reporter.generate_link_report(link_type)

    def _check_link_type(self, link_type: str | None) -> None:
        if link_type is not None and self.registry.get(link_type) is None:
            raise ConfigurationError(f"{link_type} is not a valid link type", link_type)

    @staticmethod
    def _check_fields(link_class: type[Link], fields: dict[str, Any]) -> None:
        columns = set(inspect(link_class).column_attrs.keys())
        for key in fields:
            if key not in columns or key in ("id", "class_name"):
                raise ValidationError(f"Unknown link field '{key}'", key)
