"""Timeout scaling and settle delays.

Every wait in a session goes through one ``TimeScaler`` so a caller can
slow down (or speed up) all of them at once, e.g. for a sluggish target
site or while debugging, without touching call sites.

Settle delays are fixed pauses that let in-page JavaScript finish before
the next action. They are pauses, not deadlines, so the multiplier does
not apply to them.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from webpilot.settings.config import TimingSettings


@dataclass
class TimeScaler:
    """Per-session timing configuration.

    Args:
        multiplier: Factor applied to every nominal timeout. Must be positive.
        pre_click_ms: Pause between a successful wait and a click.
        post_navigation_ms: Pause after every navigation.
        post_trigger_ms: Pause after opening a custom select.
    """

    multiplier: float = 1.0
    pre_click_ms: int = 300
    post_navigation_ms: int = 1000
    post_trigger_ms: int = 1000

    def __post_init__(self) -> None:
        if self.multiplier <= 0:
            raise ValueError(f"multiplier must be positive, got {self.multiplier}")

    @classmethod
    def from_settings(cls, timing: TimingSettings) -> TimeScaler:
        """Build a scaler from the ``timing`` settings section."""
        return cls(
            multiplier=timing.multiplier,
            pre_click_ms=timing.pre_click_ms,
            post_navigation_ms=timing.post_navigation_ms,
            post_trigger_ms=timing.post_trigger_ms,
        )

    def scale(self, nominal_ms: float) -> float:
        """Return the effective timeout for *nominal_ms*."""
        return nominal_ms * self.multiplier

    async def sleep(self, ms: float) -> None:
        """Pause for *ms* milliseconds."""
        if ms <= 0:
            return
        await asyncio.sleep(ms / 1000)
