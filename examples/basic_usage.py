"""Basic usage example for cms-link."""

from cmslink.lookup import InMemoryEntityLookup, StoredEntity
from cmslink.log import configure_logging
from cmslink.registry import TypeRegistry
from cmslink.services.link_service import LinkService
from cmslink.storage import Database


class ConsoleRenderer:
    """Renders every link with the same anchor markup."""

    def render(self, templates, context):
        return (
            f"<a href=\"{context['url']}\"{context['class_attr']}"
            f"{context['target_attr']}>{context['title']}</a>"
        )


def main():
    """Demonstrate saving, resolving, and rendering links."""
    configure_logging()

    # Initialize database (uses SQLite by default)
    db = Database()
    db.create_tables()

    # Registry built from settings, plus an application style
    registry = TypeRegistry.from_settings()
    registry.register_style("button", "Button")

    # Files and pages belong to the host application
    lookup = InMemoryEntityLookup()
    lookup.add("File", 1, StoredEntity(title="Price list", url="/assets/prices.pdf"))
    lookup.add("SiteTree", 1, StoredEntity(title="About our company", menu_title="About", url="/about/"))

    print("Available link types:")
    for key, label in registry.i18n_types().items():
        print(f"  {key}: {label}")

    with db.session() as session:
        service = LinkService(session, registry=registry, lookup=lookup)
        renderer = ConsoleRenderer()

        links = [
            service.create_link(url="https://example.com", open_in_new_window=True),
            service.create_link(link_type="Email", email="hello@example.com"),
            service.create_link(link_type="Phone", phone="+1 800-FLOWERS"),
            service.create_link(link_type="File", file_id=1, anchor="#page=2"),
            service.create_link(link_type="SiteTree", site_tree_id=1, style="button"),
        ]

        for link in links:
            print(f"{link.title!r} -> {service.resolver.resolve_url(link)!r}")
            print(f"  templates: {service.resolver.render_template_candidates(link)}")
            print(f"  markup:    {service.resolver.render(link, renderer)}")

        # The file is removed from the asset store; the link now resolves to False
        lookup.remove("File", 1)
        report = service.generate_link_report()
        print(f"Broken links: {report['broken_links']}")


if __name__ == "__main__":
    main()
