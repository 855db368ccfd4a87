"""Shared pytest fixtures and test utilities for cms-link tests."""

import os
import tempfile
from typing import Generator

import pytest

from cmslink.lookup import InMemoryEntityLookup, StoredEntity
from cmslink.models.link import Link
from cmslink.registry import TypeRegistry, reset_registry
from cmslink.services.link.resolver import LinkResolver
from cmslink.services.link.validation import LinkValidator
from cmslink.services.link_service import LinkService
from cmslink.storage.database import Database


class CallToActionLink(Link):
    """Link subclass used to exercise polymorphic loading and template lookup."""


class PageWithoutLink:
    """Entity that exists but cannot compute its own URL."""

    title = "Orphan"

    def exists(self) -> bool:
        return True


@pytest.fixture(scope="function")
def temp_db() -> Generator[Database, None, None]:
    """
    Create a temporary SQLite database for testing.

    Yields:
        Database instance with tables created
    """
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    reset_registry()

    database = Database(f"sqlite:///{db_path}")
    database.create_tables()

    yield database

    database.drop_tables()
    database.engine.dispose()
    reset_registry()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def db_session(temp_db):
    """Get a database session from temp_db."""
    with temp_db.session() as session:
        yield session


@pytest.fixture
def registry() -> TypeRegistry:
    """A fresh, still writable registry with the core types and two styles."""
    registry = TypeRegistry.with_core_types()
    registry.register_style("Card", "Card")
    registry.register_style("button", "Button")
    return registry


@pytest.fixture
def lookup() -> InMemoryEntityLookup:
    """Entity store with one file, one deleted file, and a few pages."""
    lookup = InMemoryEntityLookup()
    lookup.add("File", 1, StoredEntity(title="Annual report", url="/assets/report.pdf"))
    lookup.add("File", 2, StoredEntity(title="Old brochure", url="/assets/old.pdf", deleted=True))
    lookup.add(
        "SiteTree",
        10,
        StoredEntity(title="About our company", menu_title="About", url="/about/"),
    )
    lookup.add("SiteTree", 11, StoredEntity(title="Contact us", url="/contact/"))
    lookup.add("SiteTree", 12, PageWithoutLink())
    return lookup


@pytest.fixture
def validator(registry) -> LinkValidator:
    return LinkValidator(registry)


@pytest.fixture
def resolver(registry, lookup) -> LinkResolver:
    return LinkResolver(registry, lookup)


@pytest.fixture
def link_service(temp_db, registry, lookup):
    """Create a link service instance."""
    with temp_db.session() as session:
        yield LinkService(session, registry=registry, lookup=lookup)


@pytest.fixture
def call_to_action_link_class() -> type[Link]:
    return CallToActionLink


@pytest.fixture
def sample_links(link_service):
    """One saved link of each core type."""
    return {
        "URL": link_service.create_link(link_type="URL", url="https://example.com"),
        "Email": link_service.create_link(link_type="Email", email="hello@example.com"),
        "Phone": link_service.create_link(link_type="Phone", phone="+64 21 123 456"),
        "File": link_service.create_link(link_type="File", file_id=1),
        "SiteTree": link_service.create_link(link_type="SiteTree", site_tree_id=10),
    }
