"""Tests for LinkValidator.

Tests cover:
- Engine output passes every rule
- no_nested_links: anchor inside anchor fails
- link_budget: more anchors per article id than allowed fails
- known_targets: unknown article id or wrong href fails
- Non-internal anchors are ignored by known_targets
"""

import pytest

from article_linker.services.link_injection import (
    ArticleReference,
    inject_internal_links,
)
from article_linker.services.link_validation import LinkValidator

REFS = [
    ArticleReference(id="a1", title="Uber Insurance", slug="uber-insurance"),
    ArticleReference(id="a2", title="Uber", slug="uber", slug_en="uber-guide"),
]


def _internal(article_id: str, href: str, text: str) -> str:
    return (
        f'<a href="{href}" class="internal-link" '
        f'data-article-id="{article_id}">{text}</a>'
    )


def _rule(report: dict, name: str) -> dict:
    return next(r for r in report["results"] if r["rule"] == name)


@pytest.fixture
def validator() -> LinkValidator:
    return LinkValidator()


class TestValidEngineOutput:
    def test_engine_output_passes(self, validator: LinkValidator) -> None:
        content = inject_internal_links(
            "<p>Uber Insurance pays off when you drive for Uber.</p>",
            REFS,
            "en-US",
        )
        report = validator.validate(content, REFS, "en-US")
        assert report["passed"] is True
        assert [r["rule"] for r in report["results"]] == [
            "no_nested_links",
            "link_budget",
            "known_targets",
        ]

    def test_empty_content_passes(self, validator: LinkValidator) -> None:
        report = validator.validate("", REFS)
        assert report["passed"] is True


class TestNoNestedLinks:
    def test_nested_anchor_fails(self, validator: LinkValidator) -> None:
        content = '<a href="/x">outer ' + _internal("a2", "/pt-BR/articles/uber", "Uber") + "</a>"
        report = validator.validate(content, REFS, "pt-BR")
        assert report["passed"] is False
        result = _rule(report, "no_nested_links")
        assert result["passed"] is False
        assert "'Uber'" in result["message"]


class TestLinkBudget:
    def test_over_budget_fails(self, validator: LinkValidator) -> None:
        link = _internal("a1", "/pt-BR/articles/uber-insurance", "Uber Insurance")
        content = f"<p>{link} and {link}</p>"
        report = validator.validate(content, REFS, "pt-BR", max_links_per_article=1)
        result = _rule(report, "link_budget")
        assert result["passed"] is False
        assert "Article a1 linked 2x (max 1)" in result["message"]

    def test_within_larger_budget_passes(self, validator: LinkValidator) -> None:
        link = _internal("a1", "/pt-BR/articles/uber-insurance", "Uber Insurance")
        content = f"<p>{link} and {link}</p>"
        report = validator.validate(content, REFS, "pt-BR", max_links_per_article=2)
        assert report["passed"] is True


class TestKnownTargets:
    def test_unknown_article_fails(self, validator: LinkValidator) -> None:
        content = _internal("zz", "/pt-BR/articles/zz", "Mystery")
        result = _rule(validator.validate(content, REFS, "pt-BR"), "known_targets")
        assert result["passed"] is False
        assert "unknown article" in result["message"]

    def test_wrong_href_fails(self, validator: LinkValidator) -> None:
        # a2 has an English slug, so the English URL is expected
        content = _internal("a2", "/en-US/articles/uber", "Uber")
        result = _rule(validator.validate(content, REFS, "en-US"), "known_targets")
        assert result["passed"] is False
        assert "expected '/en-US/articles/uber-guide'" in result["message"]

    def test_plain_anchors_ignored(self, validator: LinkValidator) -> None:
        content = '<p><a href="https://example.com">Uber</a></p>'
        report = validator.validate(content, REFS, "pt-BR")
        assert report["passed"] is True
