"""Browser identity: launch baseline, user agents, locale/timezone and stealth patches.

Provides a ``BrowserProfile`` that configures Playwright's ``launch()`` and
per-page ``new_page()`` calls with:

- The Chromium launch baseline (profile directory, sandbox flags, disabled features)
- A randomized desktop user-agent per page
- Locale, timezone and ``Accept-Language`` preferences
- Stealth patches (hide ``navigator.webdriver``, fake ``chrome.runtime`` and plugins)

Usage::

    from webpilot.browser.stealth import build_browser_profile, apply_stealth_scripts

    profile = build_browser_profile(settings)
    browser = await pw.chromium.launch(**profile.launch_args)
    page = await browser.new_page(**profile.context_args(random_user_agent()))
    await apply_stealth_scripts(page, profile.accept_languages)
"""

from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from playwright.async_api import Page

    from webpilot.settings.config import Settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Desktop user-agent strings keyed by navigator.platform
# ---------------------------------------------------------------------------

_USER_AGENTS: dict[str, list[str]] = {
    "Win32": [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36 Edg/122.0.0.0",
    ],
    "MacIntel": [
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    ],
    "Linux x86_64": [
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    ],
}

# Injected via page.add_init_script(); %(languages)s is filled with a JSON array
_STEALTH_SCRIPTS: str = """
// Remove navigator.webdriver flag
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });

// Mimic chrome.runtime (present in real Chrome)
if (!window.chrome) window.chrome = {};
if (!window.chrome.runtime) window.chrome.runtime = {};

// Patch navigator.plugins to look non-empty
Object.defineProperty(navigator, 'plugins', {
    get: () => [1, 2, 3, 4, 5],
});

// Patch navigator.languages
Object.defineProperty(navigator, 'languages', {
    get: () => %(languages)s,
});

// Prevent detection via permissions API
const originalQuery = window.navigator.permissions.query;
window.navigator.permissions.query = (parameters) =>
    parameters.name === 'notifications'
        ? Promise.resolve({ state: Notification.permission })
        : originalQuery(parameters);
"""


def random_user_agent(platform: str | None = None) -> str:
    """Return a random desktop user-agent string.

    Args:
        platform: Restrict the draw to one ``navigator.platform`` value
            (``"Win32"``, ``"MacIntel"``, ``"Linux x86_64"``). Any platform if ``None``.

    Raises:
        ValueError: If *platform* is unknown.
    """
    if platform is None:
        pool = [ua for agents in _USER_AGENTS.values() for ua in agents]
    else:
        try:
            pool = _USER_AGENTS[platform]
        except KeyError:
            raise ValueError(f"Unknown user-agent platform: {platform!r}") from None
    return random.choice(pool)


def platform_for(user_agent: str) -> str:
    """Best-effort ``navigator.platform`` value for *user_agent*."""
    for platform, agents in _USER_AGENTS.items():
        if user_agent in agents:
            return platform
    if "Windows" in user_agent:
        return "Win32"
    if "Macintosh" in user_agent:
        return "MacIntel"
    return "Linux x86_64"


# ---------------------------------------------------------------------------
# Browser profile
# ---------------------------------------------------------------------------


@dataclass
class BrowserProfile:
    """Playwright launch arguments plus the identity applied to every page.

    Generated by ``build_browser_profile()`` from settings.
    """

    # Arguments for pw.chromium.launch()
    launch_args: dict[str, Any] = field(default_factory=dict)

    locale: str = ""
    timezone_id: str = ""
    accept_languages: str = ""
    accept_downloads: bool = True
    fixed_user_agent: str = ""
    stealth_scripts: bool = True

    def pick_user_agent(self) -> str:
        """The configured user agent, or a fresh random desktop one."""
        return self.fixed_user_agent or random_user_agent()

    def context_args(self, user_agent: str) -> dict[str, Any]:
        """Arguments for ``browser.new_page()`` carrying this identity."""
        ctx: dict[str, Any] = {
            "user_agent": user_agent,
            "accept_downloads": self.accept_downloads,
        }
        if self.locale:
            ctx["locale"] = self.locale
        if self.timezone_id:
            ctx["timezone_id"] = self.timezone_id
        if self.accept_languages:
            ctx["extra_http_headers"] = {"Accept-Language": self.accept_languages}
        return ctx


def baseline_launch_args(settings: Settings) -> dict[str, Any]:
    """Chromium launch options every session starts from."""
    browser = settings.browser
    args = [f"--profile-directory={browser.profile_directory}"]
    if not browser.sandbox:
        args.extend(["--no-sandbox", "--disable-setuid-sandbox"])
    if browser.disabled_features:
        args.append(f"--disable-features={','.join(browser.disabled_features)}")
    args.extend(browser.extra_args)
    return {"headless": browser.headless, "args": args}


def merge_launch_options(baseline: dict[str, Any], overrides: dict[str, Any] | None) -> dict[str, Any]:
    """Shallow-merge caller *overrides* over *baseline*; the caller wins on every key."""
    return {**baseline, **(overrides or {})}


def build_browser_profile(settings: Settings) -> BrowserProfile:
    """Build a ``BrowserProfile`` from the ``browser``, ``identity`` and ``downloads`` sections."""
    identity = settings.identity
    return BrowserProfile(
        launch_args=baseline_launch_args(settings),
        locale=identity.locale,
        timezone_id=identity.timezone_id,
        accept_languages=identity.accept_languages,
        accept_downloads=settings.downloads.accept,
        fixed_user_agent=identity.user_agent,
        stealth_scripts=identity.apply_stealth_scripts,
    )


def _languages(accept_languages: str) -> list[str]:
    return [lang.split(";")[0].strip() for lang in accept_languages.split(",") if lang.strip()]


async def apply_stealth_scripts(page: Page, accept_languages: str = "pt-BR,pt") -> None:
    """Inject stealth JavaScript into a Playwright page.

    Call this **before** navigating so the scripts run in every frame from the start.
    """
    script = _STEALTH_SCRIPTS % {"languages": json.dumps(_languages(accept_languages))}
    await page.add_init_script(script)
    logger.debug("Stealth scripts injected")


async def override_user_agent(
    page: Page,
    user_agent: str,
    *,
    accept_languages: str = "",
    platform: str = "",
) -> None:
    """Replace the user agent of an already-open page through the debugging protocol.

    ``navigator.platform`` follows *platform*, or is derived from *user_agent*
    when empty.
    """
    params: dict[str, Any] = {"userAgent": user_agent, "platform": platform or platform_for(user_agent)}
    if accept_languages:
        params["acceptLanguage"] = accept_languages
    client = await page.context.new_cdp_session(page)
    try:
        await client.send("Emulation.setUserAgentOverride", params)
    finally:
        await client.detach()
    logger.debug("User agent overridden: %s", user_agent)
