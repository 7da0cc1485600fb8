"""Pydantic schemas for API request/response validation."""

from article_linker.schemas.internal_link import (
    ArticleReferenceSchema,
    InjectedLinkResponse,
    InjectLinksRequest,
    InjectLinksResponse,
    RuleResult,
    StripLinksRequest,
    StripLinksResponse,
    ValidateLinksRequest,
    ValidateLinksResponse,
)

__all__ = [
    "ArticleReferenceSchema",
    "InjectLinksRequest",
    "InjectLinksResponse",
    "InjectedLinkResponse",
    "RuleResult",
    "StripLinksRequest",
    "StripLinksResponse",
    "ValidateLinksRequest",
    "ValidateLinksResponse",
]
