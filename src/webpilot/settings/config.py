"""Configuration loader for webpilot using Pydantic settings.

Config precedence (highest wins):
  1. Explicit constructor / CLI values
  2. Environment variables (WEBPILOT_* with __ for nesting)
  3. settings.local.toml
  4. settings.<env>.toml
  5. settings.default.toml
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = Path(os.getenv("WEBPILOT_PROJECT_ROOT", _THIS_DIR.parents[2]))
CONFIG_DIR = PROJECT_ROOT / "config"

ENV_VAR_NAME = "WEBPILOT_ENV"
DEFAULT_ENV = "local"


def _resolve_env() -> str:
    return (os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def _load_toml(path: Path) -> dict[str, Any]:
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class BrowserSettings(BaseSettings):
    """Chromium launch baseline."""

    model_config = SettingsConfigDict(env_prefix="WEBPILOT_BROWSER__")

    headless: bool = False
    profile_directory: str = "Profile 1"
    sandbox: bool = False
    disabled_features: list[str] = Field(default_factory=lambda: ["PasswordLeakDetection"])
    extra_args: list[str] = Field(default_factory=list)


class TimingSettings(BaseSettings):
    """Timeout multiplier, settle delays and nominal timeouts (all in ms)."""

    model_config = SettingsConfigDict(env_prefix="WEBPILOT_TIMING__")

    multiplier: float = 1.0

    # Settle delays (not scaled by the multiplier)
    pre_click_ms: int = 300
    post_navigation_ms: int = 1000
    post_trigger_ms: int = 1000

    # Nominal timeouts (scaled by the multiplier)
    type_timeout_ms: int = 2000
    click_timeout_ms: int = 4000
    click_enabled_timeout_ms: int = 20_000
    select_timeout_ms: int = 2000
    locate_timeout_ms: int = 2000
    read_timeout_ms: int = 2000
    custom_select_timeout_ms: int = 2000
    wait_element_timeout_ms: int = 5000
    wait_text_timeout_ms: int = 500_000
    navigation_timeout_ms: int = 30_000

    @field_validator("multiplier")
    @classmethod
    def _positive_multiplier(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timing multiplier must be positive")
        return v


class IdentitySettings(BaseSettings):
    """Browser identity presented to target sites."""

    model_config = SettingsConfigDict(env_prefix="WEBPILOT_IDENTITY__")

    locale: str = "pt-BR"
    accept_languages: str = "pt-BR,pt"
    timezone_id: str = "America/Sao_Paulo"
    user_agent: str = ""  # fixed UA; empty means pick a random desktop UA per page
    user_agent_platform: str = "Linux x86_64"  # platform used by set_new_agent()
    apply_stealth_scripts: bool = True


class DownloadSettings(BaseSettings):
    """Download handling."""

    model_config = SettingsConfigDict(env_prefix="WEBPILOT_DOWNLOADS__")

    accept: bool = True
    path: str = ""  # when set, PageSession.open() configures downloads into it


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Root webpilot settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="WEBPILOT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: str = Field(default_factory=_resolve_env)
    project_root: Path = Field(default=PROJECT_ROOT)
    debug: bool = False
    log_level: str = "INFO"

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    timing: TimingSettings = Field(default_factory=TimingSettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    downloads: DownloadSettings = Field(default_factory=DownloadSettings)

    @model_validator(mode="before")
    @classmethod
    def _merge_toml_files(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Layer TOML config files before env var overrides."""
        defaults = _load_toml(CONFIG_DIR / "settings.default.toml")
        env_name = (values.get("env") or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()
        env_overrides = _load_toml(CONFIG_DIR / f"settings.{env_name}.toml")
        local_overrides = _load_toml(CONFIG_DIR / "settings.local.toml")

        # Merge: defaults < env-specific < local < explicit values
        merged: dict[str, Any] = {}
        for layer in (defaults, env_overrides, local_overrides, values):
            for key, val in layer.items():
                if isinstance(val, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **val}
                else:
                    merged[key] = val
        return merged

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Normalize a relative download path against project_root."""
        if self.downloads.path and not Path(self.downloads.path).is_absolute():
            self.downloads.path = str(self.project_root / self.downloads.path)
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings instance (cached)."""
    return Settings()
