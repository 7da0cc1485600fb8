"""Pytest configuration and fixtures.

Provides fixtures for:
- Settings override for testing
- FastAPI test client
- Related article references shared by service and API tests
"""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from article_linker.core.config import Settings, get_settings
from article_linker.services.link_injection import ArticleReference

# ---------------------------------------------------------------------------
# Settings Fixtures
# ---------------------------------------------------------------------------


def get_test_settings() -> Settings:
    """Get test settings."""
    return Settings(
        app_name="Test App",
        app_version="0.0.1",
        debug=True,
        environment="test",
        log_level="DEBUG",
        log_format="text",
        default_locale="pt-BR",
        max_links_per_article=1,
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Session-scoped test settings."""
    return get_test_settings()


# ---------------------------------------------------------------------------
# App Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def app() -> FastAPI:
    """Create FastAPI app for testing."""
    from article_linker.main import create_app

    return create_app()


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Create synchronous test client with test settings."""
    app.dependency_overrides[get_settings] = get_test_settings

    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Article Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def uber_insurance() -> ArticleReference:
    return ArticleReference(
        id="a1",
        title="Uber Insurance",
        slug="uber-insurance",
        slug_en="uber-insurance-guide",
        slug_pt="seguro-uber",
    )


@pytest.fixture
def uber() -> ArticleReference:
    return ArticleReference(id="a2", title="Uber", slug="uber")
