"""End-to-end tests against a real headless Chromium.

Requires ``playwright install chromium``; the tests skip when the browser
cannot be launched.
"""

from __future__ import annotations

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from webpilot.browser.session import PageSession
from webpilot.settings.config import Settings

pytestmark = [pytest.mark.integration, pytest.mark.slow, pytest.mark.anyio]


@pytest.fixture()
async def session():
    s = PageSession(
        Settings(
            browser={"headless": True},
            timing={"pre_click_ms": 50, "post_navigation_ms": 0, "post_trigger_ms": 100},
        )
    )
    try:
        await s.open()
    except PlaywrightError as exc:
        pytest.skip(f"Chromium not available: {exc}")
    try:
        yield s
    finally:
        await s.close()


@pytest.fixture()
async def form(session, form_url):
    await session.goto(form_url, wait_until="load")
    return session


async def test_click_waits_for_enabled(session) -> None:
    await session.page.set_content(
        """
        <button id="submit" disabled>Send</button>
        <script>
          window.__actions = [];
          const button = document.getElementById("submit");
          button.addEventListener("click", () => window.__actions.push("click"));
          setTimeout(() => { button.disabled = false; window.__actions.push("enabled"); }, 2000);
        </script>
        """
    )

    await session.click("#submit", require_enabled=True)

    assert await session.script("window.__actions") == ["enabled", "click"]


async def test_type_and_read_back(form) -> None:
    await form.type("#name", "Ana")

    assert await form.get_value("#name") == "Ana"


async def test_read_normalizes_whitespace(form) -> None:
    assert await form.get_value("#prefilled") == "Maria da Silva"
    assert await form.get_value(".item", index=1) == "Beta"


async def test_native_select(form) -> None:
    assert await form.select("#uf", "SP") == ["SP"]
    assert await form.script("document.getElementById('uf').value") == "SP"


async def test_locate_by_text_and_index(form) -> None:
    beta = await form.get(".item", text="Beta")
    assert beta is not None
    assert (await beta.text_content()).strip() == "Beta"

    assert await form.get(".item", index=5) is None
    assert await form.get(".item", text="Delta") is None
    assert await form.get("#missing", timeout_ms=200) is None


async def test_custom_select_picks_option(form) -> None:
    assert await form.custom_select(".fruit", "li.option", "Banana", index=1) is True

    labels = await form.script("Array.from(document.querySelectorAll('.fruit .label')).map(e => e.textContent)")
    assert labels == ["Escolha", "Banana"]


async def test_custom_select_no_match(form) -> None:
    assert await form.custom_select(".fruit", "li.option", "Durian") is False


async def test_wait_for_text(form) -> None:
    await form.wait_for_element("#status", "pronto", timeout_ms=5000)

    assert await form.get_value("#status") == "pronto para envio"


async def test_wait_for_missing_element_times_out(form) -> None:
    with pytest.raises(PlaywrightTimeout):
        await form.wait_for_element("#never", timeout_ms=200)


async def test_download_directory(session, tmp_path) -> None:
    path = await session.config_download(tmp_path / "downloads")

    assert session.download_path == path
    assert (tmp_path / "downloads").is_dir()


async def test_close_blank_tabs_keeps_loaded_page(form) -> None:
    await form.close_blank_tabs()

    assert await form.script("document.title") == "Cadastro"
