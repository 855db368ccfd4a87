"""Registry of link types and styles.

The registry has two phases: types and styles are registered at startup, and
the first lookup freezes it. Registering after that point raises
ConfigurationError so that lookups never depend on import order.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from cmslink.config import Settings, get_settings
from cmslink.exceptions import ConfigurationError
from cmslink.i18n import TranslationService

logger = logging.getLogger(__name__)

TRANSLATION_PREFIX = "Link"


class LinkKind(str, Enum):
    """Behaviour a link type selects for resolution and validation."""

    URL = "url"
    EMAIL = "email"
    PHONE = "phone"
    FILE = "file"
    PAGE = "page"
    REFERENCE = "reference"
    CUSTOM = "custom"

    @property
    def is_text(self) -> bool:
        return self in (LinkKind.URL, LinkKind.EMAIL, LinkKind.PHONE)

    @property
    def is_reference(self) -> bool:
        return self in (LinkKind.FILE, LinkKind.PAGE, LinkKind.REFERENCE)


@dataclass(frozen=True)
class TypeDefinition:
    """A registered link type.

    Attributes:
        key: Value stored in Link.link_type
        label: Human readable label (untranslated)
        kind: Behaviour the type selects
        entity_kind: Kind passed to EntityLookup for reference types
        field: Link attribute holding the value (text kinds) or id (reference kinds)
    """

    key: str
    label: str
    kind: LinkKind = LinkKind.CUSTOM
    entity_kind: Optional[str] = None
    field: Optional[str] = None


CORE_TYPES: tuple[TypeDefinition, ...] = (
    TypeDefinition("URL", "URL", LinkKind.URL, field="url"),
    TypeDefinition("Email", "Email address", LinkKind.EMAIL, field="email"),
    TypeDefinition("Phone", "Phone number", LinkKind.PHONE, field="phone"),
    TypeDefinition("File", "File on this website", LinkKind.FILE, "File", "file_id"),
    TypeDefinition(
        "SiteTree", "Page on this website", LinkKind.PAGE, "SiteTree", "site_tree_id"
    ),
)


class TypeRegistry:
    """Holds the registered link types and styles."""

    def __init__(self, translator: TranslationService | None = None):
        """
        Initialize an empty registry.

        Args:
            translator: Optional translation service for labels
        """
        self.translator = translator
        self._types: dict[str, TypeDefinition] = {}
        self._styles: dict[str, str] = {}
        self._allowed_types: Optional[tuple[str, ...]] = None
        self._frozen = False

    @classmethod
    def with_core_types(cls, translator: TranslationService | None = None) -> "TypeRegistry":
        """Create a registry with URL, Email, Phone, File, and SiteTree registered."""
        registry = cls(translator)
        for definition in CORE_TYPES:
            registry.add_definition(definition)
        return registry

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        translator: TranslationService | None = None,
    ) -> "TypeRegistry":
        """
        Create a registry from application settings.

        Args:
            settings: Settings instance. If None, uses get_settings().
            translator: Optional translation service for labels

        Returns:
            Registry with core types, configured styles, and allowed types applied
        """
        if settings is None:
            settings = get_settings()
        registry = cls.with_core_types(translator)
        for key, label in settings.link_styles.items():
            registry.register_style(key, label)
        registry.set_allowed_types(settings.link_allowed_types)
        return registry

    # Registration phase

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _ensure_writable(self, key: str | None = None) -> None:
        if self._frozen:
            raise ConfigurationError(
                "Link registry is read-only once it has served a lookup", key
            )

    def register_type(
        self,
        key: str,
        label: str,
        kind: LinkKind = LinkKind.CUSTOM,
        entity_kind: str | None = None,
        field: str | None = None,
    ) -> TypeDefinition:
        """
        Register a link type.

        Re-registering an existing key replaces its definition and keeps its
        position in the declared order.

        Args:
            key: Type key stored on links
            label: Human readable label
            kind: Behaviour the type selects
            entity_kind: Entity kind for reference types
            field: Link attribute holding the value or reference id

        Returns:
            The registered definition

        Raises:
            ConfigurationError: If the registry is frozen or the definition is incomplete
        """
        return self.add_definition(TypeDefinition(key, label, LinkKind(kind), entity_kind, field))

    def add_definition(self, definition: TypeDefinition) -> TypeDefinition:
        """Register a prepared TypeDefinition. See register_type()."""
        self._ensure_writable(definition.key)
        if not definition.key:
            raise ConfigurationError("Link type key cannot be empty")
        if definition.kind.is_reference and not (definition.entity_kind and definition.field):
            raise ConfigurationError(
                f"Reference link type '{definition.key}' needs an entity kind and an id field",
                definition.key,
            )
        if definition.kind.is_text and not definition.field:
            raise ConfigurationError(
                f"Link type '{definition.key}' needs a value field", definition.key
            )
        if definition.key in self._types:
            logger.debug("Replacing link type %s", definition.key)
        self._types[definition.key] = definition
        return definition

    def register_style(self, key: str, label: str) -> None:
        """Register a named style variant."""
        self._ensure_writable(key)
        self._styles[key] = label

    def set_allowed_types(self, keys: Iterable[str] | None) -> None:
        """Restrict the types offered by list_types(); None or empty allows all."""
        self._ensure_writable()
        self._allowed_types = tuple(keys) if keys else None

    # Lookup phase

    def _freeze(self) -> None:
        if not self._frozen:
            self._frozen = True
            logger.debug(
                "Link registry frozen with types=%s styles=%s",
                list(self._types),
                list(self._styles),
            )

    def get(self, key: str | None) -> Optional[TypeDefinition]:
        """Get the definition registered for a type key."""
        self._freeze()
        if key is None:
            return None
        return self._types.get(key)

    def list_types(self, allowed_subset: Iterable[str] | None = None) -> dict[str, str]:
        """
        List link types as key -> label in declared order.

        Args:
            allowed_subset: Optional keys to restrict to. Takes priority over the
                configured allowed types, so an empty subset lists all types.
                None uses the configured allowed types.

        Returns:
            Mapping of type key to untranslated label

        Raises:
            ConfigurationError: If the effective subset names an unregistered type
        """
        self._freeze()
        subset = tuple(allowed_subset) if allowed_subset is not None else self._allowed_types
        if not subset:
            return {key: definition.label for key, definition in self._types.items()}

        for key in subset:
            if key not in self._types:
                raise ConfigurationError(f"{key} is not a valid link type", key)
        allowed = set(subset)
        return {
            key: definition.label
            for key, definition in self._types.items()
            if key in allowed
        }

    def list_styles(self) -> dict[str, str]:
        """List styles as key -> label in declared order."""
        self._freeze()
        return dict(self._styles)

    def translate(self, key: str, raw_label: str) -> str:
        """
        Translate a label, returning it unchanged when no translation is available.

        Args:
            key: Translation key
            raw_label: Label to fall back to

        Returns:
            Translated label, or raw_label
        """
        if self.translator is None:
            return raw_label
        try:
            translated = self.translator.translate(key, raw_label)
        except Exception:
            logger.warning("Translation of %s failed; using raw label", key, exc_info=True)
            return raw_label
        return translated or raw_label

    def i18n_types(self, allowed_subset: Iterable[str] | None = None) -> dict[str, str]:
        """Like list_types(), with labels passed through translate()."""
        return {
            key: self.translate(f"{TRANSLATION_PREFIX}.TYPE{key.upper()}", label)
            for key, label in self.list_types(allowed_subset).items()
        }

    def i18n_styles(self) -> dict[str, str]:
        """Like list_styles(), with labels passed through translate()."""
        return {
            key: self.translate(f"{TRANSLATION_PREFIX}.STYLE{key.upper()}", label)
            for key, label in self.list_styles().items()
        }

    def type_label(self, key: str | None) -> Optional[str]:
        """Translated label of a registered type, ignoring allowed-type restrictions."""
        definition = self.get(key)
        if definition is None:
            return None
        return self.translate(f"{TRANSLATION_PREFIX}.TYPE{definition.key.upper()}", definition.label)

    def __contains__(self, key: Any) -> bool:
        return key in self._types


# Global registry instance
_registry: TypeRegistry | None = None


def get_registry(translator: TranslationService | None = None) -> TypeRegistry:
    """
    Get or create the global registry instance.

    Args:
        translator: Translation service. Only used on first call.

    Returns:
        TypeRegistry built from settings
    """
    global _registry
    if _registry is None:
        _registry = TypeRegistry.from_settings(translator=translator)
    return _registry


def reset_registry() -> None:
    """Reset the global registry instance (useful for testing)."""
    global _registry
    _registry = None

