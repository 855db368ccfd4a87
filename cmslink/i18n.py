"""Translation services used for labels and validation messages."""

import re
from typing import Any, Mapping, Optional, Protocol

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def substitute(text: str, substitutions: Optional[Mapping[str, Any]] = None) -> str:
    """Replace ``{Name}`` placeholders; unknown placeholders are left as-is."""
    if not substitutions:
        return text
    return _PLACEHOLDER.sub(
        lambda match: str(substitutions[match.group(1)])
        if match.group(1) in substitutions
        else match.group(0),
        text,
    )


class TranslationService(Protocol):
    """Looks up a translated string by key, falling back to default text."""

    def translate(
        self,
        key: str,
        default: str,
        substitutions: Optional[Mapping[str, Any]] = None,
    ) -> str: ...


class DefaultTranslator:
    """Translator that always answers with the default text."""

    def translate(
        self,
        key: str,
        default: str,
        substitutions: Optional[Mapping[str, Any]] = None,
    ) -> str:
        return substitute(default, substitutions)


class CatalogTranslator:
    """Translator backed by an in-memory key -> text catalog."""

    def __init__(self, catalog: Mapping[str, str] | None = None):
        self.catalog = dict(catalog or {})

    def translate(
        self,
        key: str,
        default: str,
        substitutions: Optional[Mapping[str, Any]] = None,
    ) -> str:
        return substitute(self.catalog.get(key, default), substitutions)
