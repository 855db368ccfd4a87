"""Link validation logic."""

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from cmslink.hooks import HookChain
from cmslink.i18n import DefaultTranslator, TranslationService
from cmslink.models.link import Link
from cmslink.registry import LinkKind, TypeDefinition, TypeRegistry

logger = logging.getLogger(__name__)

# RFC 5322 simplified
EMAIL_REGEX = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+"
)

# Optional +, then digits/letters/hyphens/spaces, an optional , or # (pause or
# extension), then digits/hyphens/spaces
PHONE_REGEX = re.compile(r"\+?[0-9a-zA-Z\-\s]*[,#]?[0-9\-\s]*")

INTERNAL_URL_PREFIXES = ("#", "/")

MSG_EMPTY_VALUE = "You must enter a {LinkType}"
MSG_EMPTY_OBJECT = "Please select a {LinkType}"
MSG_INVALID_URL = (
    "Please enter a valid URL. Be sure to include http:// for an external URL. "
    'or begin your internal url/anchor with a "/" character'
)
MSG_INVALID_EMAIL = "Please enter a valid Email address"
MSG_INVALID_PHONE = "Please enter a valid Phone number"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a link: valid, or invalid with one message."""

    valid: bool = True
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(True, None)

    @classmethod
    def error(cls, message: str) -> "ValidationResult":
        return cls(False, message)

    def __bool__(self) -> bool:
        return self.valid


def is_valid_url(value: str) -> bool:
    """True for internal paths/anchors or absolute URLs with a scheme and host."""
    if value.startswith(INTERNAL_URL_PREFIXES):
        return True
    if any(char.isspace() for char in value):
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def is_valid_email(value: str) -> bool:
    return EMAIL_REGEX.fullmatch(value) is not None


def is_valid_phone(value: str) -> bool:
    return PHONE_REGEX.fullmatch(value) is not None


class LinkValidator:
    """Checks that a link's active field is present and well formed for its type.

    Validation failures are returned as a ValidationResult, never raised; the
    persistence layer decides whether to block the save.
    """

    def __init__(
        self,
        registry: TypeRegistry,
        translator: TranslationService | None = None,
    ):
        """
        Initialize validator.

        Args:
            registry: Registry used to find the link's type and its label
            translator: Translation service for messages. Defaults to the untranslated text.
        """
        self.registry = registry
        self.translator = translator or registry.translator or DefaultTranslator()
        self.hooks: HookChain[ValidationResult] = HookChain()

    def _message(self, key: str, default: str, link: Link) -> str:
        label = self.registry.type_label(link.link_type) or link.link_type
        return self.translator.translate(
            f"Link.{key}", default, {"LinkType": label}
        )

    def check_presence(self, link: Link, definition: TypeDefinition) -> ValidationResult:
        """
        Check that the field selected by the link's type is filled in.

        Args:
            link: Link to check
            definition: Registered definition of the link's type

        Returns:
            ValidationResult for the presence rule
        """
        kind = definition.kind
        value = link.field_value(definition)
        if kind.is_text and not value:
            return ValidationResult.error(
                self._message(
                    f"VALIDATIONERROR_EMPTY{definition.key.upper()}", MSG_EMPTY_VALUE, link
                )
            )
        if kind.is_reference and not value:
            return ValidationResult.error(
                self._message("VALIDATIONERROR_OBJECT", MSG_EMPTY_OBJECT, link)
            )
        return ValidationResult.ok()

    def check_format(self, link: Link, definition: TypeDefinition) -> ValidationResult:
        """
        Check that a present value is well formed. Only text kinds have format rules.

        Args:
            link: Link to check
            definition: Registered definition of the link's type

        Returns:
            ValidationResult for the format rule
        """
        value = link.field_value(definition) or ""
        kind = definition.kind
        if kind is LinkKind.URL and not is_valid_url(value):
            return ValidationResult.error(
                self._message("VALIDATIONERROR_VALIDURL", MSG_INVALID_URL, link)
            )
        if kind is LinkKind.EMAIL and not is_valid_email(value):
            return ValidationResult.error(
                self._message("VALIDATIONERROR_VALIDEMAIL", MSG_INVALID_EMAIL, link)
            )
        if kind is LinkKind.PHONE and not is_valid_phone(value):
            return ValidationResult.error(
                self._message("VALIDATIONERROR_VALIDPHONE", MSG_INVALID_PHONE, link)
            )
        return ValidationResult.ok()

    def validate(self, link: Link) -> ValidationResult:
        """
        Validate a link, stopping at the first failure.

        Args:
            link: Link to validate

        Returns:
            ValidationResult carrying at most one error message
        """
        result = ValidationResult.ok()
        definition = self.registry.get(link.link_type)
        if definition is not None:
            result = self.check_presence(link, definition)
            if result.valid:
                result = self.check_format(link, definition)

        result = self.hooks(result, link)
        if not result.valid:
            logger.debug("Link %s failed validation: %s", link.id, result.message)
        return result
