"""Link service module with validation, resolution and reporting components."""

from cmslink.services.link.reporting import LinkReporter
from cmslink.services.link.resolver import LinkResolver, ResolverHooks, friendly_phone
from cmslink.services.link.validation import LinkValidator, ValidationResult

__all__ = [
    "LinkValidator",
    "ValidationResult",
    "LinkResolver",
    "ResolverHooks",
    "LinkReporter",
    "friendly_phone",
]
