"""Unit tests for webpilot settings.

Covers default loading, env var overrides, the ci profile, path
resolution and validation for the browser, timing, identity and
downloads sections.
"""

from __future__ import annotations

import os

import pytest
from pydantic import ValidationError


class TestSettings:
    """Core settings loading and override mechanics."""

    def test_default_settings_load(self, monkeypatch):
        """Settings should load without any env overrides."""
        monkeypatch.delenv("WEBPILOT_ENV", raising=False)
        from webpilot.settings import get_settings

        s = get_settings()
        assert s.env == "local"
        assert s.browser.headless is False
        assert s.timing.multiplier == 1.0

    def test_get_settings_is_cached(self):
        from webpilot.settings import get_settings

        assert get_settings() is get_settings()

    def test_env_override(self, monkeypatch):
        """WEBPILOT_TIMING__MULTIPLIER should override the default."""
        monkeypatch.setenv("WEBPILOT_TIMING__MULTIPLIER", "2.5")
        from webpilot.settings.config import Settings

        s = Settings()
        assert s.timing.multiplier == 2.5

    def test_nested_env_var_override_double_underscore(self, monkeypatch):
        monkeypatch.setenv("WEBPILOT_IDENTITY__TIMEZONE_ID", "America/Manaus")
        from webpilot.settings.config import Settings

        s = Settings()
        assert s.identity.timezone_id == "America/Manaus"

    def test_ci_profile(self, monkeypatch):
        """WEBPILOT_ENV=ci should load settings.ci.toml."""
        monkeypatch.setenv("WEBPILOT_ENV", "ci")
        from webpilot.settings.config import Settings

        s = Settings()
        assert s.env == "ci"
        assert s.browser.headless is True
        assert s.timing.multiplier == 2.0
        # untouched keys still come from the default file
        assert s.browser.profile_directory == "Profile 1"

    def test_explicit_values_win(self, monkeypatch):
        monkeypatch.setenv("WEBPILOT_ENV", "ci")
        from webpilot.settings.config import Settings

        s = Settings(timing={"multiplier": 0.5})
        assert s.timing.multiplier == 0.5


class TestSectionDefaults:
    """Defaults that encode the target environment."""

    def test_timing_defaults(self):
        from webpilot.settings.config import TimingSettings

        t = TimingSettings()
        assert (t.pre_click_ms, t.post_navigation_ms, t.post_trigger_ms) == (300, 1000, 1000)
        assert t.click_timeout_ms == 4000
        assert t.click_enabled_timeout_ms == 20_000
        assert t.navigation_timeout_ms == 30_000
        assert t.wait_text_timeout_ms == 500_000

    def test_identity_defaults(self):
        from webpilot.settings.config import IdentitySettings

        i = IdentitySettings()
        assert i.accept_languages == "pt-BR,pt"
        assert i.timezone_id == "America/Sao_Paulo"
        assert i.user_agent_platform == "Linux x86_64"

    def test_browser_defaults(self):
        from webpilot.settings.config import BrowserSettings

        b = BrowserSettings()
        assert b.profile_directory == "Profile 1"
        assert b.sandbox is False
        assert b.disabled_features == ["PasswordLeakDetection"]


class TestValidation:
    """Validation and path handling."""

    @pytest.mark.parametrize("multiplier", [0, -2])
    def test_non_positive_multiplier_rejected(self, multiplier):
        from webpilot.settings.config import Settings

        with pytest.raises(ValidationError):
            Settings(timing={"multiplier": multiplier})

    def test_relative_download_path_resolved(self):
        from webpilot.settings.config import Settings

        s = Settings(downloads={"path": "data/downloads"})
        assert os.path.isabs(s.downloads.path)
        assert s.downloads.path.endswith(os.path.join("data", "downloads"))

    def test_empty_download_path_kept_empty(self):
        from webpilot.settings.config import Settings

        assert Settings().downloads.path == ""
