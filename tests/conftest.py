"""webpilot test configuration: shared fixtures for unit and integration tests."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

FIXTURES_DIR = Path(__file__).parent / "fixtures"
PAGES_DIR = FIXTURES_DIR / "pages"


@pytest.fixture()
def form_url() -> str:
    """file:// URL of the static form used by the browser tests."""
    return (PAGES_DIR / "form.html").as_uri()


# ---------------------------------------------------------------------------
# Async backend
# ---------------------------------------------------------------------------


@pytest.fixture()
def anyio_backend() -> str:
    """Playwright's async API only runs on asyncio."""
    return "asyncio"


# ---------------------------------------------------------------------------
# Settings / timing
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings LRU cache between tests."""
    from webpilot.settings.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def no_settle_settings():
    """Default settings with every settle delay set to zero."""
    from webpilot.settings.config import Settings

    return Settings(timing={"pre_click_ms": 0, "post_navigation_ms": 0, "post_trigger_ms": 0})


@pytest.fixture()
def fast_timing():
    """A ``TimeScaler`` with multiplier 1 and no settle delays."""
    from webpilot.browser.timing import TimeScaler

    return TimeScaler(pre_click_ms=0, post_navigation_ms=0, post_trigger_ms=0)


# ---------------------------------------------------------------------------
# Playwright doubles
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_element():
    """Factory for ``ElementHandle`` doubles whose text content is the given string."""

    def _make(text: str | None) -> AsyncMock:
        element = AsyncMock(name=f"element<{text}>")
        element.text_content = AsyncMock(return_value=text)
        return element

    return _make


@pytest.fixture()
def mock_page() -> AsyncMock:
    """A Playwright ``Page`` double; every page method is awaitable."""
    page = AsyncMock(name="page")
    page.query_selector_all = AsyncMock(return_value=[])
    return page


@pytest.fixture()
def playwright_mocks(monkeypatch):
    """Patch ``async_playwright`` in the session module with a fake driver.

    Returns a namespace exposing the fake ``playwright``, ``browser``,
    ``page`` and the page-level ``cdp`` session.
    """
    page = AsyncMock(name="page")
    cdp = AsyncMock(name="cdp")
    page.context.new_cdp_session = AsyncMock(return_value=cdp)

    browser = AsyncMock(name="browser")
    browser.new_page = AsyncMock(return_value=page)

    playwright = AsyncMock(name="playwright")
    playwright.chromium.launch = AsyncMock(return_value=browser)

    starter = MagicMock(name="async_playwright()")
    starter.start = AsyncMock(return_value=playwright)
    monkeypatch.setattr("webpilot.browser.session.async_playwright", MagicMock(return_value=starter))

    return SimpleNamespace(playwright=playwright, browser=browser, page=page, cdp=cdp)


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that require external services or real I/O")
    config.addinivalue_line("markers", "slow: marks tests that take more than a few seconds")
