"""Computes presentation values for links: target URL, title, classes, templates."""

import html
import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Protocol, Sequence, Union

from cmslink.exceptions import InvalidInputError
from cmslink.hooks import HookChain
from cmslink.i18n import DefaultTranslator, TranslationService
from cmslink.lookup import EntityLookup
from cmslink.models.base import Base
from cmslink.models.link import Link
from cmslink.registry import LinkKind, TypeDefinition, TypeRegistry

logger = logging.getLogger(__name__)

# str: a usable URL; None: nothing set yet; False: the link points at something
# that no longer exists (or at a type with no resolution rule)
ResolvedURL = Union[str, None, Literal[False]]

MSG_LINK_METHOD_MISSING = 'Please implement a link() method on your entity "{LinkType}"'

_KEYPAD = {
    letter: digit
    for digit, letters in {
        "2": "ABC",
        "3": "DEF",
        "4": "GHI",
        "5": "JKL",
        "6": "MNO",
        "7": "PQRS",
        "8": "TUV",
        "9": "WXYZ",
    }.items()
    for letter in letters
}
_PHONE_KEEP = set("0123456789+,#*")


def friendly_phone(phone: str | None) -> str:
    """
    Normalize a display phone number for use in a tel: URL.

    Separators are dropped and letters become keypad digits, so
    "+1 800-FLOWERS" becomes "+18003569377".
    """
    digits = []
    for char in (phone or "").upper():
        if char in _KEYPAD:
            digits.append(_KEYPAD[char])
        elif char in _PHONE_KEEP:
            digits.append(char)
    return "".join(digits)


class Renderer(Protocol):
    """Renders the first available template from a list of candidates."""

    def render(self, templates: Sequence[str], context: dict[str, Any]) -> str: ...


@dataclass
class ResolverHooks:
    """Post-processing callbacks, one chain per resolver operation."""

    url: HookChain[ResolvedURL] = field(default_factory=HookChain)
    title: HookChain[str] = field(default_factory=HookChain)
    classes: HookChain[list[str]] = field(default_factory=HookChain)
    templates: HookChain[list[str]] = field(default_factory=HookChain)
    id_value: HookChain[Optional[str]] = field(default_factory=HookChain)
    render: HookChain[str] = field(default_factory=HookChain)


class LinkResolver:
    """Derives read-only presentation values from a link."""

    def __init__(
        self,
        registry: TypeRegistry,
        lookup: EntityLookup,
        translator: TranslationService | None = None,
    ):
        """
        Initialize resolver.

        Args:
            registry: Registry of link types and styles
            lookup: Finds the files, pages and other entities links refer to
            translator: Translation service for placeholder messages
        """
        self.registry = registry
        self.lookup = lookup
        self.translator = translator or registry.translator or DefaultTranslator()
        self.hooks = ResolverHooks()

    def _find_entity(self, link: Link, definition: TypeDefinition) -> tuple[Any, Any]:
        entity_id = link.field_value(definition)
        if not entity_id:
            return None, None
        return entity_id, self.lookup.find_by_id(definition.entity_kind, entity_id)

    def _resolve_reference(self, link: Link, definition: TypeDefinition) -> ResolvedURL:
        entity_id, entity = self._find_entity(link, definition)
        if entity_id is None:
            return None
        if entity is None or not entity.exists():
            logger.info(
                "Link %s references missing %s %s", link.id, definition.entity_kind, entity_id
            )
            return False

        compute_link = getattr(entity, "link", None)
        if callable(compute_link):
            return f"{compute_link() or ''}{link.anchor or ''}"

        logger.warning(
            "Entity %s referenced by link %s has no link() method",
            definition.entity_kind,
            link.id,
        )
        return self.translator.translate(
            "Link.LINKMETHODMISSING", MSG_LINK_METHOD_MISSING, {"LinkType": definition.key}
        )

    def resolve_url(self, link: Link) -> ResolvedURL:
        """
        Work out the URL a link points at from its type.

        Args:
            link: Link to resolve

        Returns:
            The URL string; None if the link is unsaved or its value is unset;
            False if the referenced entity is gone or the type has no URL rule;
            a developer-facing message if the entity cannot compute a link
        """
        if not link.is_persisted:
            return None

        definition = self.registry.get(link.link_type)
        kind = definition.kind if definition is not None else None

        resolved: ResolvedURL
        if kind is LinkKind.URL:
            resolved = link.field_value(definition)
        elif kind is LinkKind.EMAIL:
            email = link.field_value(definition)
            resolved = f"mailto:{email}" if email else None
        elif kind is LinkKind.PHONE:
            phone = friendly_phone(link.field_value(definition))
            resolved = f"tel:{phone}" if phone else None
        elif kind is not None and kind.is_reference:
            resolved = self._resolve_reference(link, definition)
        else:
            resolved = False

        return self.hooks.url(resolved, link)

    def derive_title(self, link: Link) -> str:
        """
        Generate a title for a link saved without one.

        Args:
            link: Persisted link

        Returns:
            The raw value for text types, the page menu title for pages, the
            referenced entity's title for other references, otherwise "Link-<id>"
        """
        definition = self.registry.get(link.link_type)
        title: Optional[str] = None

        if definition is not None and definition.kind.is_text:
            title = link.field_value(definition)
        elif definition is not None and definition.kind.is_reference:
            _, entity = self._find_entity(link, definition)
            if entity is not None:
                if definition.kind is LinkKind.PAGE:
                    title = getattr(entity, "menu_title", None) or getattr(entity, "title", None)
                else:
                    title = getattr(entity, "title", None)

        if not title:
            title = f"Link-{link.id}"
        return self.hooks.title(title, link)

    def css_classes(self, link: Link) -> list[str]:
        """Extra classes plus the style key, de-duplicated in insertion order."""
        classes = dict.fromkeys(link.css_classes)
        if link.style:
            classes.update(dict.fromkeys(link.style.split()))
        return self.hooks.classes(list(classes), link)

    def css_class(self, link: Link) -> Optional[str]:
        classes = self.css_classes(link)
        return " ".join(classes) if classes else None

    def class_attr(self, link: Link) -> Optional[str]:
        css_class = self.css_class(link)
        return f" class='{html.escape(css_class)}'" if css_class else None

    def target_attribute(self, link: Link) -> Optional[str]:
        return "_blank" if link.open_in_new_window else None

    def target_attr(self, link: Link) -> Optional[str]:
        return " target='_blank'" if link.open_in_new_window else None

    def id_value(self, link: Link) -> Optional[str]:
        """HTML id for the anchor; None unless a hook supplies one."""
        return self.hooks.id_value(None, link)

    def id_attr(self, link: Link) -> Optional[str]:
        id_value = self.id_value(link)
        return f" id='{html.escape(id_value)}'" if id_value else None

    def link_type_label(self, link: Link) -> Optional[str]:
        return self.registry.type_label(link.link_type)

    def render_template_candidates(self, link: Any) -> list[str]:
        """
        List template names to try, most specific first.

        Each entity class from the link's own class up to (not including) the
        declarative base contributes "<Class>_<Style>" when a style is set,
        then "<Class>".

        Args:
            link: Link (or other entity) instance

        Returns:
            Ordered template names

        Raises:
            InvalidInputError: If link is not a persistent entity
        """
        if not isinstance(link, Base):
            raise InvalidInputError(f"{type(link).__name__} is not a persistent entity")

        style = getattr(link, "style", None)
        templates: list[str] = []
        for cls in type(link).__mro__:
            if cls is Base:
                break
            if not issubclass(cls, Base):
                continue
            if style:
                templates.append(f"{cls.__name__}_{style}")
            templates.append(cls.__name__)
        return self.hooks.templates(templates, link)

    def summary(self, link: Link) -> dict[str, Any]:
        """Title, type label and URL, as shown in admin listings."""
        return {
            "title": link.title,
            "type": self.link_type_label(link),
            "link": self.resolve_url(link),
        }

    def render(self, link: Link, renderer: Renderer) -> str:
        """
        Render a link through the most specific available template.

        Args:
            link: Link to render
            renderer: Template renderer

        Returns:
            Rendered markup, or an empty string when the link has no URL
        """
        output = ""
        url = self.resolve_url(link)
        if url:
            context = {
                "link": link,
                "title": link.title,
                "url": url,
                "style": link.style,
                "class_attr": self.class_attr(link) or "",
                "target_attr": self.target_attr(link) or "",
                "id_attr": self.id_attr(link) or "",
            }
            output = renderer.render(self.render_template_candidates(link), context)
        return self.hooks.render(output, link)
