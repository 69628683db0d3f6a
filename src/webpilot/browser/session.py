"""PageSession: one Chromium browser and one active page.

Handles browser lifecycle, page identity (user agent, locale, timezone),
request interception, download behavior, navigation and blank-tab
cleanup, and exposes the interaction primitives bound to the current page
and the session's timing.

Lifecycle::

    UNOPENED --open()--> OPEN --close()--> CLOSED

Page operations before ``open()`` raise ``SessionNotOpenError``; anything
after ``close()`` raises ``SessionClosedError``. Operations are expected
to be awaited one at a time: the session holds no locks.

Usage::

    async with PageSession() as session:
        await session.goto("https://example.com/login")
        await session.type("#user", "alice")
        await session.click("button[type=submit]", require_enabled=True)
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from playwright.async_api import async_playwright

from webpilot.browser import actions, locator, navigation, targets
from webpilot.browser.custom_select import custom_select
from webpilot.browser.downloads import configure_downloads
from webpilot.browser.interception import RequestFilter, RequestGate
from webpilot.browser.stealth import (
    apply_stealth_scripts,
    build_browser_profile,
    merge_launch_options,
    override_user_agent,
    random_user_agent,
)
from webpilot.browser.timing import TimeScaler
from webpilot.exceptions import SessionClosedError, SessionNotOpenError, SessionStateError

if TYPE_CHECKING:
    from playwright.async_api import Browser, ElementHandle, Page, Playwright, Response

    from webpilot.settings.config import Settings

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle state of a ``PageSession``."""

    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


class PageSession:
    """Owns one browser and one page and drives them with scaled waits.

    All configuration is read from ``webpilot.settings.get_settings()``
    unless a ``Settings`` instance is passed explicitly.

    Args:
        settings: Settings to use instead of the cached global ones.
        time_multiplier: Overrides ``settings.timing.multiplier`` for this session.
        request_filter: Decides which requests the page may make; all pass by default.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        time_multiplier: float | None = None,
        request_filter: RequestFilter | None = None,
    ) -> None:
        if settings is None:
            from webpilot.settings import get_settings

            settings = get_settings()

        self.settings = settings
        self.timing = TimeScaler.from_settings(settings.timing)
        if time_multiplier is not None:
            self.time_multiplier = time_multiplier
        self.profile = build_browser_profile(settings)
        self.request_gate = RequestGate(request_filter)

        self.state = SessionState.UNOPENED
        self.download_path: str = ""
        self.user_agent: str = ""

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._page: Page | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def time_multiplier(self) -> float:
        return self.timing.multiplier

    @time_multiplier.setter
    def time_multiplier(self, value: float) -> None:
        if value <= 0:
            raise ValueError(f"time_multiplier must be positive, got {value}")
        self.timing.multiplier = value

    @property
    def browser(self) -> Browser:
        self._require_open("access the browser")
        assert self._browser is not None
        return self._browser

    @property
    def page(self) -> Page:
        return self._current_page("access the page")

    def _require_open(self, operation: str) -> None:
        if self.state is SessionState.CLOSED:
            raise SessionClosedError(operation)
        if self.state is SessionState.UNOPENED:
            raise SessionNotOpenError(operation)

    def _current_page(self, operation: str) -> Page:
        self._require_open(operation)
        if self._page is None:
            raise SessionStateError(f"Cannot {operation}: session has no active page.")
        return self._page

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self, launch_options: dict[str, Any] | None = None) -> None:
        """Launch Chromium and open the first page.

        Args:
            launch_options: ``chromium.launch()`` keyword arguments. They are
                merged over the baseline (headless flag, profile directory,
                sandbox and feature flags); the caller wins on conflicting keys.
        """
        if self.state is SessionState.CLOSED:
            raise SessionClosedError("open")
        if self.state is SessionState.OPEN:
            raise SessionStateError("Cannot open: session is already open.")

        options = merge_launch_options(self.profile.launch_args, launch_options)
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(**options)
        except BaseException:
            await self._playwright.stop()
            self._playwright = None
            raise

        self.state = SessionState.OPEN
        logger.info("Browser launched (headless=%s)", options.get("headless"))
        try:
            await self.new_page()
            if self.settings.downloads.path:
                await self.config_download(self.settings.downloads.path)
        except BaseException:
            logger.warning("Session setup failed after launch; closing the browser")
            await self.close()
            raise

    async def new_page(self) -> Page:
        """Open a fresh page and make it the session's active page.

        The page gets the session identity (random desktop user agent,
        locale, timezone, ``Accept-Language``), the stealth scripts, and
        request interception through the session's ``RequestGate``.
        """
        browser = self.browser
        user_agent = self.profile.pick_user_agent()
        page = await browser.new_page(**self.profile.context_args(user_agent))
        if self.profile.stealth_scripts:
            await apply_stealth_scripts(page, self.profile.accept_languages)
        await self.request_gate.attach(page)

        self._page = page
        self.user_agent = user_agent
        logger.debug("New page opened (user_agent=%s)", user_agent)
        return page

    def set_page(self, page: Page) -> None:
        """Make *page* (e.g. a popup) the active page. No validation is done."""
        self._require_open("set the page")
        self._page = page

    async def close(self) -> None:
        """Shut the browser down. The session cannot be reopened."""
        if self.state is SessionState.CLOSED:
            return
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
            self._browser = None
            self._page = None
            self._playwright = None
            self.state = SessionState.CLOSED
        logger.info("Browser closed")

    async def __aenter__(self) -> PageSession:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Page configuration
    # ------------------------------------------------------------------

    async def config_download(self, path: str | Path) -> str:
        """Allow downloads from the active page into *path* and remember it."""
        page = self._current_page("configure downloads")
        self.download_path = await configure_downloads(page, path)
        return self.download_path

    async def set_new_agent(self) -> str:
        """Give the active page a fresh desktop user agent for the configured platform."""
        page = self._current_page("set a user agent")
        user_agent = random_user_agent(self.settings.identity.user_agent_platform)
        await override_user_agent(page, user_agent, accept_languages=self.profile.accept_languages)
        self.user_agent = user_agent
        return user_agent

    async def close_blank_tabs(self) -> list[str]:
        """Close page targets that have neither a URL nor a title."""
        return await targets.close_blank_tabs(self.browser)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def goto(self, url: str, *, timeout_ms: float | None = None, **options: Any) -> Response | None:
        """Navigate the active page; see ``webpilot.browser.navigation.goto``.

        *timeout_ms* is the nominal timeout (``timing.navigation_timeout_ms``
        by default); it is scaled like every other wait.
        """
        page = self._current_page("navigate")
        return await navigation.goto(
            page,
            url,
            timing=self.timing,
            timeout_ms=self.settings.timing.navigation_timeout_ms if timeout_ms is None else timeout_ms,
            **options,
        )

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    async def type(self, selector: str, text: str) -> None:
        await actions.type_into(
            self._current_page("type"),
            selector,
            text,
            timeout_ms=self.settings.timing.type_timeout_ms,
            timing=self.timing,
        )

    async def click(self, selector: str, require_enabled: bool = False) -> None:
        await actions.click(
            self._current_page("click"),
            selector,
            require_enabled,
            timeout_ms=self.settings.timing.click_timeout_ms,
            enabled_timeout_ms=self.settings.timing.click_enabled_timeout_ms,
            timing=self.timing,
        )

    async def select(self, selector: str, value: str) -> list[str]:
        return await actions.select_option(
            self._current_page("select"),
            selector,
            value,
            timeout_ms=self.settings.timing.select_timeout_ms,
            timing=self.timing,
        )

    async def custom_select(
        self,
        trigger_selector: str,
        option_selector: str,
        value: str,
        *,
        index: int | None = None,
        strict: bool = False,
    ) -> bool:
        return await custom_select(
            self._current_page("use a custom select"),
            trigger_selector,
            option_selector,
            value,
            index=index,
            strict=strict,
            timeout_ms=self.settings.timing.custom_select_timeout_ms,
            timing=self.timing,
        )

    async def get(
        self,
        selector: str,
        *,
        index: int | None = None,
        text: str | None = None,
        timeout_ms: float | None = None,
    ) -> ElementHandle | None:
        """Soft lookup: the matching element or ``None``, never a timeout error."""
        return await locator.locate(
            self._current_page("look up an element"),
            selector,
            index=index,
            text=text,
            timeout_ms=self.settings.timing.locate_timeout_ms if timeout_ms is None else timeout_ms,
            timing=self.timing,
        )

    async def get_value(self, selector: str, *, index: int | None = None) -> str:
        """Hard read of an element's value or text, whitespace-normalized."""
        return await locator.read_value(
            self._current_page("read a value"),
            selector,
            index=index,
            timeout_ms=self.settings.timing.read_timeout_ms,
            timing=self.timing,
        )

    async def wait_for_element(self, selector: str, text: str | None = None, timeout_ms: float | None = None) -> None:
        if timeout_ms is None:
            timing_cfg = self.settings.timing
            timeout_ms = timing_cfg.wait_text_timeout_ms if text else timing_cfg.wait_element_timeout_ms
        await actions.wait_for_element(
            self._current_page("wait for an element"),
            selector,
            text,
            timeout_ms=timeout_ms,
            timing=self.timing,
        )

    async def script(self, script: str, *args: Any) -> Any:
        return await actions.run_script(self._current_page("run a script"), script, *args)

    # ------------------------------------------------------------------
    # Timing
    # ------------------------------------------------------------------

    def time(self, nominal_ms: float) -> float:
        """Scale a nominal timeout by this session's multiplier."""
        return self.timing.scale(nominal_ms)

    async def sleep(self, ms: float) -> None:
        await self.timing.sleep(ms)
