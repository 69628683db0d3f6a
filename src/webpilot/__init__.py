"""webpilot: a timing-tolerant control layer over a Playwright-driven Chromium session."""

from __future__ import annotations

try:
    from importlib.metadata import version

    __version__ = version("webpilot")
except Exception:
    __version__ = "0.0.0"
