"""Layered configuration (TOML files + ``WEBPILOT_*`` environment variables)."""

from webpilot.settings.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
