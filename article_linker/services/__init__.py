"""Business logic services."""

from article_linker.services.link_injection import (
    ArticleReference,
    InjectedLink,
    InternalLinkInjector,
    LinkCandidate,
    LinkInjectionResult,
    inject_internal_links,
    strip_internal_links,
)
from article_linker.services.link_validation import LinkValidator

__all__ = [
    "ArticleReference",
    "InjectedLink",
    "InternalLinkInjector",
    "LinkCandidate",
    "LinkInjectionResult",
    "LinkValidator",
    "inject_internal_links",
    "strip_internal_links",
]
