"""Tests for the webpilot CLI (settings commands and version flag)."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

from typer.testing import CliRunner

from webpilot.cli import app as cli_app
from webpilot.exceptions import NavigationError

runner = CliRunner()


def test_version_flag() -> None:
    result = runner.invoke(cli_app.app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.startswith("webpilot ")


def test_settings_show_outputs_json() -> None:
    result = runner.invoke(cli_app.app, ["settings", "show"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["timing"]["multiplier"] == 1.0
    assert data["identity"]["locale"] == "pt-BR"


def test_settings_validate_reports_multiplier(monkeypatch) -> None:
    monkeypatch.setenv("WEBPILOT_TIMING__MULTIPLIER", "3")
    result = runner.invoke(cli_app.app, ["settings", "validate"])
    assert result.exit_code == 0
    assert "Time multiplier: 3.0" in result.stdout


def test_open_prints_page_info(monkeypatch) -> None:
    visit = AsyncMock(return_value={"url": "https://example.com/", "title": "Example Domain"})
    monkeypatch.setattr(cli_app, "_visit", visit)

    result = runner.invoke(cli_app.app, ["open", "https://example.com", "--headless", "-m", "2"])

    assert result.exit_code == 0
    assert "Example Domain" in result.stdout
    kwargs = visit.await_args.kwargs
    assert kwargs["headless"] is True
    assert kwargs["multiplier"] == 2.0
    assert kwargs["close_blank"] is True


def test_open_reports_navigation_failure(monkeypatch) -> None:
    visit = AsyncMock(side_effect=NavigationError("https://nope.invalid", "name not resolved"))
    monkeypatch.setattr(cli_app, "_visit", visit)

    result = runner.invoke(cli_app.app, ["open", "https://nope.invalid"])

    assert result.exit_code == 1
    assert "name not resolved" in result.stdout


def test_settings_show_single_section() -> None:
    result = runner.invoke(cli_app.app, ["settings", "show", "--section", "timing"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["click_enabled_timeout_ms"] == 20000


def test_settings_show_unknown_section() -> None:
    result = runner.invoke(cli_app.app, ["settings", "show", "-s", "proxy"])
    assert result.exit_code == 2


def test_settings_validate_rejects_bad_multiplier(monkeypatch) -> None:
    monkeypatch.setenv("WEBPILOT_TIMING__MULTIPLIER", "0")
    result = runner.invoke(cli_app.app, ["settings", "validate"])
    assert result.exit_code == 1
