"""Link reporting logic."""

from typing import Any

from cmslink.exceptions import ConfigurationError, DatabaseError
from cmslink.services.link.resolver import LinkResolver
from cmslink.storage.repositories import LinkRepository

REPORT_LIMIT = 10000


class LinkReporter:
    """Generates link statistics and lists links that no longer resolve."""

    def __init__(self, link_repo: LinkRepository, resolver: LinkResolver):
        """
        Initialize link reporter.

        Args:
            link_repo: Link repository for data access
            resolver: Resolver used to detect broken and unset links
        """
        self.link_repo = link_repo
        self.resolver = resolver

    def generate_link_report(self, link_type: str | None = None) -> dict[str, Any]:
        """
        Generate a link report.

        Args:
            link_type: Optional link type to filter by

        Returns:
            Dictionary with totals, a per-type breakdown, broken links (whose
            target no longer exists) and unset links (with nothing to point at)

        Raises:
            ConfigurationError: If link_type is not a registered type
            DatabaseError: If database operation fails
        """
        if link_type is not None and self.resolver.registry.get(link_type) is None:
            raise ConfigurationError(f"{link_type} is not a valid link type", link_type)

        try:
            links = self.link_repo.list(link_type=link_type, limit=REPORT_LIMIT)
        except Exception as e:
            raise DatabaseError(f"Failed to generate link report: {str(e)}", e) from e

        by_type: dict[str, int] = {}
        broken_links = []
        unset_links = []
        for link in links:
            by_type[link.link_type] = by_type.get(link.link_type, 0) + 1

            resolved = self.resolver.resolve_url(link)
            if resolved is False:
                broken_links.append(
                    {"id": link.id, "title": link.title, "type": link.link_type}
                )
            elif resolved is None:
                unset_links.append(link.id)

        return {
            "total_links": len(links),
            "by_type": by_type,
            "broken_links": broken_links,
            "unset_links": unset_links,
        }
