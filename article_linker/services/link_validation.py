"""Post-injection validation of internal links in rendered HTML.

LinkValidator parses content with BeautifulSoup and checks hard rules:
- no_nested_links: no <a> inside another <a>
- link_budget: anchors per data-article-id within the per-article budget
- known_targets: every internal link points at a related article, with the
  href the injector would build for the locale

Each rule returns {rule, passed, message}.
"""

from collections import Counter
from collections.abc import Sequence
from typing import Any

from bs4 import BeautifulSoup, Tag

from article_linker.core.logging import get_logger
from article_linker.services.link_injection import (
    DEFAULT_LOCALE,
    DEFAULT_MAX_LINKS_PER_ARTICLE,
    LINK_CLASS,
    ArticleReference,
    build_article_url,
)

logger = get_logger(__name__)


class LinkValidator:
    """Validates internal links in rendered content against hard rules."""

    def validate(
        self,
        content: str,
        related_articles: Sequence[ArticleReference],
        locale: str = DEFAULT_LOCALE,
        max_links_per_article: int = DEFAULT_MAX_LINKS_PER_ARTICLE,
    ) -> dict[str, Any]:
        """Run all validation rules against content.

        Returns:
            Dict with:
                passed: bool, True if ALL rules pass
                results: list of {rule, passed, message}
        """
        soup = BeautifulSoup(content or "", "html.parser")
        anchors: list[Tag] = soup.find_all("a")

        results = [
            self._check_no_nested_links(anchors),
            self._check_link_budget(anchors, max_links_per_article),
            self._check_known_targets(anchors, related_articles, locale),
        ]
        passed = all(r["passed"] for r in results)

        logger.info(
            "Validated internal links",
            extra={
                "total_links": len(anchors),
                "passed": passed,
                "failed_rules": [r["rule"] for r in results if not r["passed"]],
            },
        )
        return {"passed": passed, "results": results}

    def _check_no_nested_links(self, anchors: list[Tag]) -> dict[str, Any]:
        """Rule: no_nested_links, an anchor never has an anchor ancestor."""
        nested = [a for a in anchors if a.find_parent("a") is not None]
        if nested:
            texts = ", ".join(f"'{a.get_text()}'" for a in nested)
            return {
                "rule": "no_nested_links",
                "passed": False,
                "message": f"{len(nested)} nested link(s): {texts}",
            }
        return {
            "rule": "no_nested_links",
            "passed": True,
            "message": "No nested links",
        }

    def _check_link_budget(
        self, anchors: list[Tag], max_links_per_article: int
    ) -> dict[str, Any]:
        """Rule: link_budget, at most max_links_per_article anchors per article id."""
        counts = Counter(
            str(a["data-article-id"]) for a in anchors if a.has_attr("data-article-id")
        )
        over = {
            article_id: count
            for article_id, count in counts.items()
            if count > max_links_per_article
        }

        if over:
            msgs = [
                f"Article {article_id} linked {count}x (max {max_links_per_article})"
                for article_id, count in over.items()
            ]
            return {
                "rule": "link_budget",
                "passed": False,
                "message": "; ".join(msgs),
            }
        return {
            "rule": "link_budget",
            "passed": True,
            "message": f"All articles within {max_links_per_article} link(s)",
        }

    def _check_known_targets(
        self,
        anchors: list[Tag],
        related_articles: Sequence[ArticleReference],
        locale: str,
    ) -> dict[str, Any]:
        """Rule: known_targets, internal links point at related articles' URLs."""
        expected = {ref.id: build_article_url(ref, locale) for ref in related_articles}
        violations: list[str] = []

        for a_tag in anchors:
            if LINK_CLASS not in (a_tag.get("class") or []):
                continue

            article_id = a_tag.get("data-article-id")
            href = a_tag.get("href", "")
            if not isinstance(article_id, str) or article_id not in expected:
                violations.append(f"Link '{a_tag.get_text()}' targets unknown article")
            elif href != expected[article_id]:
                violations.append(
                    f"Link to {article_id} has href '{href}', "
                    f"expected '{expected[article_id]}'"
                )

        if violations:
            return {
                "rule": "known_targets",
                "passed": False,
                "message": "; ".join(violations),
            }
        return {
            "rule": "known_targets",
            "passed": True,
            "message": "All internal links point at related articles",
        }
