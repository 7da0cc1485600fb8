"""Internal link injection for rendered article HTML.

InternalLinkInjector rewrites plain-text occurrences of related article
titles into anchors pointing at those articles:

1. Candidates are prepared: each reference's title is kept verbatim and its
   URL is built from the locale-appropriate slug.
2. Candidates are ordered longest title first (stable), so "Uber Insurance"
   is consumed before "Uber" can match inside it.
3. For each candidate the current content is tokenized and the title is
   searched case-insensitively in linkable text only (never inside tags,
   attribute values, existing anchors, script/style/code/pre). Only whole
   words of the rendered text match, and a match never cuts a character
   reference such as &copy;.
4. The earliest matches are wrapped in anchors until the per-article
   budget is spent.

Link counts live in a local Counter per call. Anchors already carrying a
candidate's data-article-id count toward its budget, so running the
injector over its own output changes nothing.

strip_internal_links removes anchors produced by the injector, restoring
the original text.
"""

import html
import re
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from article_linker.core.logging import link_logger
from article_linker.utils.html_tokenizer import (
    INLINE_ELEMENTS,
    Token,
    TokenKind,
    linkable_spans,
    tokenize,
)

LINK_CLASS = "internal-link"
DEFAULT_LOCALE = "pt-BR"
DEFAULT_MAX_LINKS_PER_ARTICLE = 1

PORTUGUESE_LANGUAGE = "pt"
ENGLISH_LANGUAGE = "en"


@dataclass(frozen=True)
class ArticleReference:
    """A related article that may be linked from the content."""

    id: str
    title: str
    slug: str
    slug_en: str | None = None
    slug_pt: str | None = None


@dataclass(frozen=True)
class LinkCandidate:
    """A reference projected for one locale, ready for matching.

    Attributes:
        reference: The source ArticleReference.
        display_title: Text searched for in the content (the title verbatim).
        target_url: href of anchors created for this candidate.
        order: Position in the caller's list, used as the sort tie-break.
    """

    reference: ArticleReference
    display_title: str
    target_url: str
    order: int

    @property
    def article_id(self) -> str:
        return self.reference.id


@dataclass(frozen=True)
class InjectedLink:
    """An anchor created by the injector."""

    article_id: str
    anchor_text: str
    href: str


@dataclass
class LinkInjectionResult:
    """Rewritten content plus the anchors created, in document order per candidate."""

    content: str
    links: list[InjectedLink] = field(default_factory=list)

    @property
    def links_created(self) -> int:
        return len(self.links)


# ---------------------------------------------------------------------------
# Candidate preparation
# ---------------------------------------------------------------------------


def locale_language(locale: str) -> str:
    """Return the primary language subtag of a locale ("pt-BR" -> "pt")."""
    return re.split(r"[-_]", locale.strip(), maxsplit=1)[0].lower()


def resolve_slug(reference: ArticleReference, locale: str) -> str:
    """Pick the slug for a locale.

    Portuguese locales prefer slug_pt, English locales prefer slug_en, and
    both fall back to slug.
    """
    language = locale_language(locale)
    if language == PORTUGUESE_LANGUAGE and reference.slug_pt:
        return reference.slug_pt
    if language == ENGLISH_LANGUAGE and reference.slug_en:
        return reference.slug_en
    return reference.slug


def build_article_url(reference: ArticleReference, locale: str) -> str:
    """Build the site-relative URL of an article for a locale."""
    return f"/{locale}/articles/{resolve_slug(reference, locale)}"


def prepare_candidates(
    related_articles: Iterable[ArticleReference], locale: str
) -> list[LinkCandidate]:
    """Project references into candidates, dropping ones that can never link."""
    candidates: list[LinkCandidate] = []
    for order, reference in enumerate(related_articles):
        if not reference.title or not reference.title.strip():
            link_logger.candidate_dropped(reference.id, "blank title")
            continue
        if not resolve_slug(reference, locale):
            link_logger.candidate_dropped(reference.id, "no slug")
            continue
        candidates.append(
            LinkCandidate(
                reference=reference,
                display_title=reference.title,
                target_url=build_article_url(reference, locale),
                order=order,
            )
        )
    return candidates


def order_candidates(candidates: Iterable[LinkCandidate]) -> list[LinkCandidate]:
    """Sort candidates by title length, longest first; ties keep input order."""
    return sorted(candidates, key=lambda c: (-len(c.display_title), c.order))


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


# Named, decimal and hexadecimal character references
_CHAR_REF_RE = re.compile(r"&(?:#\d+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);?")

# Longer than the longest named character reference
_CHAR_REF_WINDOW = 40


def _title_pattern(title: str) -> re.Pattern[str]:
    # Content is HTML, so "Ben & Jerry" may appear as "Ben &amp; Jerry".
    # The escaped form is tried first so it wins over a raw "&" that would
    # cut the reference.
    forms = [title]
    escaped = html.escape(title, quote=False)
    if escaped != title:
        forms.insert(0, escaped)
    return re.compile("|".join(re.escape(form) for form in forms), re.IGNORECASE)


def _char_ref_spans(content: str, span: Token) -> list[tuple[int, int]]:
    """Offsets of the character references inside a text token."""
    return [
        ref.span()
        for ref in _CHAR_REF_RE.finditer(content, span.start, span.end)
        if html.unescape(ref.group(0)) != ref.group(0)
    ]


def _splits_char_ref(start: int, end: int, refs: Sequence[tuple[int, int]]) -> bool:
    return any(s < start < e or s < end < e for s, e in refs)


def _visible_char_before(
    content: str, tokens: Sequence[Token], index: int, pos: int
) -> str:
    """Rendered character just before ``pos``, looking through inline tags."""
    start = tokens[index].start
    while pos <= start:
        index -= 1
        if index < 0:
            return ""
        token = tokens[index]
        if token.kind is TokenKind.MARKUP:
            if token.tag not in INLINE_ELEMENTS:
                return ""
            pos = start = token.start
        else:
            pos, start = token.end, token.start
    return html.unescape(content[max(start, pos - _CHAR_REF_WINDOW) : pos])[-1:]


def _visible_char_after(
    content: str, tokens: Sequence[Token], index: int, pos: int
) -> str:
    """Rendered character at ``pos``, looking through inline tags."""
    end = tokens[index].end
    while pos >= end:
        index += 1
        if index >= len(tokens):
            return ""
        token = tokens[index]
        if token.kind is TokenKind.MARKUP:
            if token.tag not in INLINE_ELEMENTS:
                return ""
            pos = end = token.end
        else:
            pos, end = token.start, token.end
    return html.unescape(content[pos : min(end, pos + _CHAR_REF_WINDOW)])[:1]


def _is_whole_occurrence(
    content: str, start: int, end: int, tokens: Sequence[Token], index: int
) -> bool:
    before = _visible_char_before(content, tokens, index, start)
    after = _visible_char_after(content, tokens, index, end)
    return not before.isalnum() and not after.isalnum()


def find_eligible_matches(
    content: str,
    title: str,
    tokens: Sequence[Token] | None = None,
) -> list[tuple[int, int]]:
    """Find whole, case-insensitive occurrences of title in linkable text.

    An occurrence is whole when the rendered characters around it are not
    letters or digits. Character references are decoded for that check,
    and inline phrasing tags such as ``<b>`` do not count as a boundary.
    An occurrence that cuts into a character reference never matches.

    Args:
        content: HTML content to scan.
        title: Literal text to find (never interpreted as a pattern).
        tokens: Tokens of ``content`` if already computed.

    Returns:
        (start, end) offsets into content, in document order.
    """
    if not title:
        return []
    tokens = tokenize(content) if tokens is None else list(tokens)

    pattern = _title_pattern(title)
    matches: list[tuple[int, int]] = []

    for index, span in linkable_spans(tokens):
        refs = _char_ref_spans(content, span)
        pos = span.start
        while pos < span.end:
            match = pattern.search(content, pos, span.end)
            if match is None:
                break
            start, end = match.span()
            if not _splits_char_ref(start, end, refs) and _is_whole_occurrence(
                content, start, end, tokens, index
            ):
                matches.append((start, end))
                pos = end
            else:
                # Retry one character later so overlapping occurrences are seen
                pos = start + 1

    return matches


# ---------------------------------------------------------------------------
# Substitution
# ---------------------------------------------------------------------------


def build_anchor(candidate: LinkCandidate, anchor_text: str) -> str:
    """Render the anchor for a candidate around already-HTML anchor text."""
    href = html.escape(candidate.target_url, quote=True)
    article_id = html.escape(candidate.article_id, quote=True)
    return (
        f'<a href="{href}" class="{LINK_CLASS}" '
        f'data-article-id="{article_id}">{anchor_text}</a>'
    )


class InternalLinkInjector:
    """Injects internal links to related articles into HTML content."""

    def inject(
        self,
        content: str,
        related_articles: Sequence[ArticleReference],
        locale: str = DEFAULT_LOCALE,
        max_links_per_article: int = DEFAULT_MAX_LINKS_PER_ARTICLE,
    ) -> LinkInjectionResult:
        """Link related article titles found in content.

        Args:
            content: Rendered article HTML.
            related_articles: Articles that may be linked.
            locale: Locale used to pick slugs and prefix URLs.
            max_links_per_article: Most anchors allowed per article id.

        Returns:
            LinkInjectionResult with the rewritten content and created links.
            Content is returned unchanged when it is empty, when there are no
            related articles, or when nothing matches.
        """
        if not content or not related_articles:
            return LinkInjectionResult(content=content)

        candidates = order_candidates(prepare_candidates(related_articles, locale))
        if not candidates or max_links_per_article <= 0:
            return LinkInjectionResult(content=content)

        tokens = tokenize(content)
        link_counts = self._count_existing_links(
            tokens, {c.article_id for c in candidates}
        )
        links: list[InjectedLink] = []

        for candidate in candidates:
            remaining = max_links_per_article - link_counts[candidate.article_id]
            if remaining <= 0:
                link_logger.budget_exhausted(
                    candidate.article_id,
                    link_counts[candidate.article_id],
                    max_links_per_article,
                )
                continue

            matches = find_eligible_matches(content, candidate.display_title, tokens)
            selected = matches[:remaining]
            if selected:
                content, created = self._substitute(content, candidate, selected)
                links.extend(created)
                link_counts[candidate.article_id] += len(created)
                # Later candidates must see the new anchors as excluded regions
                tokens = tokenize(content)

            link_logger.candidate_scanned(
                candidate.article_id,
                candidate.display_title,
                len(matches),
                len(selected),
            )

        link_logger.injection_complete(
            candidates=len(candidates),
            links_created=len(links),
            content_length=len(content),
            locale=locale,
        )
        return LinkInjectionResult(content=content, links=links)

    def strip(
        self,
        content: str,
        article_ids: Iterable[str] | None = None,
    ) -> tuple[str, int]:
        """Remove injected anchors, keeping their text.

        Only anchors with the internal-link class are removed; when
        article_ids is given, only those whose data-article-id is listed.

        Returns:
            Tuple of (content, number of anchors removed).
        """
        if not content:
            return content, 0

        wanted = set(article_ids) if article_ids is not None else None
        pieces: list[str] = []
        open_anchors: list[bool] = []
        removed = 0

        for token in tokenize(content):
            if token.tag == "a" and token.is_start_tag:
                drop = LINK_CLASS in token.classes and (
                    wanted is None or token.attrs.get("data-article-id") in wanted
                )
                open_anchors.append(drop)
                if drop:
                    removed += 1
                    continue
            elif token.tag == "a" and token.is_end_tag and open_anchors:
                if open_anchors.pop():
                    continue
            pieces.append(content[token.start : token.end])

        link_logger.links_stripped(removed, filtered=wanted is not None)
        return "".join(pieces), removed

    def _count_existing_links(
        self, tokens: Iterable[Token], article_ids: set[str]
    ) -> Counter[str]:
        """Count anchors already pointing at candidate articles."""
        counts: Counter[str] = Counter()
        for token in tokens:
            if token.tag != "a" or not token.is_start_tag:
                continue
            article_id = token.attrs.get("data-article-id")
            if article_id in article_ids:
                counts[article_id] += 1
        return counts

    def _substitute(
        self,
        content: str,
        candidate: LinkCandidate,
        matches: Sequence[tuple[int, int]],
    ) -> tuple[str, list[InjectedLink]]:
        """Wrap each (start, end) span of content in the candidate's anchor.

        Spans are in ascending order and all offsets refer to the content
        passed in; the result is rebuilt in one pass.
        """
        pieces: list[str] = []
        created: list[InjectedLink] = []
        cursor = 0

        for start, end in matches:
            anchor_text = content[start:end]
            pieces.append(content[cursor:start])
            pieces.append(build_anchor(candidate, anchor_text))
            created.append(
                InjectedLink(
                    article_id=candidate.article_id,
                    anchor_text=anchor_text,
                    href=candidate.target_url,
                )
            )
            cursor = end

        pieces.append(content[cursor:])
        return "".join(pieces), created


def inject_internal_links(
    content: str,
    related_articles: Sequence[ArticleReference],
    locale: str = DEFAULT_LOCALE,
    max_links_per_article: int = DEFAULT_MAX_LINKS_PER_ARTICLE,
) -> str:
    """Return content with related article titles linked.

    See InternalLinkInjector.inject for the rules.
    """
    result = InternalLinkInjector().inject(
        content, related_articles, locale, max_links_per_article
    )
    return result.content


def strip_internal_links(content: str, article_ids: Iterable[str] | None = None) -> str:
    """Remove anchors created by inject_internal_links, keeping their text."""
    stripped, _ = InternalLinkInjector().strip(content, article_ids)
    return stripped
