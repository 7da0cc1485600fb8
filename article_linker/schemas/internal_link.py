"""Pydantic v2 schemas for the internal link API endpoints.

Schemas for injecting, stripping and validating internal links:
- ArticleReferenceSchema: A related article (accepts camelCase slug keys)
- InjectLinksRequest / InjectLinksResponse: Run the injector
- StripLinksRequest / StripLinksResponse: Remove injected links
- ValidateLinksRequest / ValidateLinksResponse: Audit rendered content
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from article_linker.services.link_injection import ArticleReference

# =============================================================================
# ARTICLE REFERENCE
# =============================================================================


class ArticleReferenceSchema(BaseModel):
    """A related article that may be linked from the content."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Stable article identifier")
    title: str = Field(
        ...,
        description="Canonical title, matched literally against the content",
        examples=["Uber Insurance"],
    )
    slug: str = Field(..., description="Fallback slug", examples=["uber-insurance"])
    slug_en: str | None = Field(
        None,
        validation_alias=AliasChoices("slug_en", "slugEn"),
        description="Slug used for English locales",
    )
    slug_pt: str | None = Field(
        None,
        validation_alias=AliasChoices("slug_pt", "slugPt"),
        description="Slug used for Portuguese locales",
    )

    def to_reference(self) -> ArticleReference:
        """Convert to the service-layer ArticleReference."""
        return ArticleReference(
            id=self.id,
            title=self.title,
            slug=self.slug,
            slug_en=self.slug_en,
            slug_pt=self.slug_pt,
        )


# =============================================================================
# INJECT
# =============================================================================


class InjectLinksRequest(BaseModel):
    """Request to inject internal links into rendered content."""

    content: str = Field(..., description="Rendered article HTML")
    related_articles: list[ArticleReferenceSchema] = Field(
        default_factory=list,
        description="Articles that may be linked from the content",
    )
    locale: str | None = Field(
        None,
        min_length=1,
        description="Locale for slugs and URL prefix (defaults to DEFAULT_LOCALE)",
        examples=["pt-BR", "en-US"],
    )
    max_links_per_article: int | None = Field(
        None,
        ge=0,
        description="Link budget per article (defaults to MAX_LINKS_PER_ARTICLE)",
    )


class InjectedLinkResponse(BaseModel):
    """A link created by the injector."""

    model_config = ConfigDict(from_attributes=True)

    article_id: str = Field(..., description="Linked article identifier")
    anchor_text: str = Field(..., description="Content text wrapped by the link")
    href: str = Field(..., description="Link target URL")


class InjectLinksResponse(BaseModel):
    """Response with the rewritten content and the links created."""

    content: str = Field(..., description="Content with internal links")
    links_created: int = Field(..., description="Number of links created")
    links: list[InjectedLinkResponse] = Field(
        default_factory=list,
        description="Links created, grouped by article in match order",
    )


# =============================================================================
# STRIP
# =============================================================================


class StripLinksRequest(BaseModel):
    """Request to remove injected internal links."""

    content: str = Field(..., description="HTML content with injected links")
    article_ids: list[str] | None = Field(
        None,
        description="Only strip links to these articles (all when omitted)",
    )


class StripLinksResponse(BaseModel):
    """Response with the content after stripping."""

    content: str = Field(..., description="Content without the stripped links")
    links_removed: int = Field(..., description="Number of links removed")


# =============================================================================
# VALIDATE
# =============================================================================


class ValidateLinksRequest(BaseModel):
    """Request to validate internal links in rendered content."""

    content: str = Field(..., description="HTML content to validate")
    related_articles: list[ArticleReferenceSchema] = Field(
        default_factory=list,
        description="Articles the content is allowed to link",
    )
    locale: str | None = Field(
        None,
        min_length=1,
        description="Locale used to build expected URLs (defaults to DEFAULT_LOCALE)",
    )
    max_links_per_article: int | None = Field(
        None,
        ge=0,
        description="Link budget per article (defaults to MAX_LINKS_PER_ARTICLE)",
    )


class RuleResult(BaseModel):
    """Outcome of one validation rule."""

    rule: str = Field(..., description="Rule name")
    passed: bool = Field(..., description="Whether the rule passed")
    message: str = Field(..., description="Details")


class ValidateLinksResponse(BaseModel):
    """Validation outcome for all rules."""

    passed: bool = Field(..., description="True if every rule passed")
    results: list[RuleResult] = Field(..., description="Per-rule results")
