"""Internal link API router.

REST endpoints for injecting internal links into rendered article HTML,
stripping previously injected links, and validating link rules.
"""

from fastapi import APIRouter, Depends

from article_linker.core.config import Settings, get_settings
from article_linker.core.logging import get_logger
from article_linker.schemas.internal_link import (
    InjectedLinkResponse,
    InjectLinksRequest,
    InjectLinksResponse,
    RuleResult,
    StripLinksRequest,
    StripLinksResponse,
    ValidateLinksRequest,
    ValidateLinksResponse,
)
from article_linker.services.link_injection import InternalLinkInjector
from article_linker.services.link_validation import LinkValidator

logger = get_logger(__name__)

router = APIRouter(prefix="/links", tags=["Internal Links"])


@router.post("/inject", response_model=InjectLinksResponse)
async def inject_links(
    body: InjectLinksRequest,
    settings: Settings = Depends(get_settings),
) -> InjectLinksResponse:
    """Link related article titles found in the content.

    Omitted locale and link budget fall back to the configured defaults.
    Never fails on malformed HTML; content that cannot be linked is
    returned unchanged.
    """
    locale = body.locale or settings.default_locale
    max_links = (
        body.max_links_per_article
        if body.max_links_per_article is not None
        else settings.max_links_per_article
    )

    result = InternalLinkInjector().inject(
        body.content,
        [ref.to_reference() for ref in body.related_articles],
        locale=locale,
        max_links_per_article=max_links,
    )

    return InjectLinksResponse(
        content=result.content,
        links_created=result.links_created,
        links=[InjectedLinkResponse.model_validate(link) for link in result.links],
    )


@router.post("/strip", response_model=StripLinksResponse)
async def strip_links(body: StripLinksRequest) -> StripLinksResponse:
    """Remove injected internal links, keeping their text.

    When article_ids is given, only links to those articles are removed.
    """
    content, removed = InternalLinkInjector().strip(body.content, body.article_ids)
    return StripLinksResponse(content=content, links_removed=removed)


@router.post("/validate", response_model=ValidateLinksResponse)
async def validate_links(
    body: ValidateLinksRequest,
    settings: Settings = Depends(get_settings),
) -> ValidateLinksResponse:
    """Check rendered content against the internal link rules."""
    locale = body.locale or settings.default_locale
    max_links = (
        body.max_links_per_article
        if body.max_links_per_article is not None
        else settings.max_links_per_article
    )

    report = LinkValidator().validate(
        body.content,
        [ref.to_reference() for ref in body.related_articles],
        locale=locale,
        max_links_per_article=max_links,
    )

    if not report["passed"]:
        logger.warning(
            "Internal link validation failed",
            extra={
                "failed_rules": [r["rule"] for r in report["results"] if not r["passed"]],
            },
        )

    return ValidateLinksResponse(
        passed=report["passed"],
        results=[RuleResult(**r) for r in report["results"]],
    )
