"""Unified CLI entry point for webpilot.

Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml -> env vars (WEBPILOT_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from webpilot.cli.settings_cmd import settings_app

try:
    from importlib.metadata import version

    VERSION = version("webpilot")
except Exception:
    VERSION = "unknown"

APP_HELP = (
    "webpilot: drive a Chromium session with timing-tolerant interaction primitives. "
    "Config precedence: settings.default.toml -> settings.local.toml -> env vars (WEBPILOT_* with __) -> CLI flags."
)

app = typer.Typer(add_completion=True, help=APP_HELP)
app.add_typer(settings_app, name="settings")
console = Console()


def _configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stderr,
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (defaults to settings.log_level)."),
) -> None:
    """Show help when no subcommand is provided."""
    if version:
        typer.echo(f"webpilot {VERSION}")
        raise typer.Exit()

    from pydantic import ValidationError

    from webpilot.settings import get_settings

    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(f"[red]✗[/red] Invalid settings: {e}")
        raise typer.Exit(code=1)

    _configure_logging(log_level or settings.log_level)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


async def _visit(
    url: str,
    *,
    headless: bool | None,
    multiplier: float | None,
    download_dir: Path | None,
    close_blank: bool,
) -> dict[str, Any]:
    from webpilot.browser.session import PageSession

    session = PageSession(time_multiplier=multiplier)
    await session.open({"headless": headless} if headless is not None else None)
    try:
        if download_dir:
            await session.config_download(download_dir)
        await session.goto(url)
        closed = await session.close_blank_tabs() if close_blank else []
        return {
            "url": session.page.url,
            "title": await session.script("document.title"),
            "user_agent": session.user_agent,
            "download_path": session.download_path,
            "closed_tabs": len(closed),
        }
    finally:
        await session.close()


@app.command("open")
def open_url(
    url: str = typer.Argument(..., help="URL to load."),
    headless: Optional[bool] = typer.Option(None, "--headless/--headed", help="Override browser.headless."),
    multiplier: Optional[float] = typer.Option(None, "--multiplier", "-m", help="Scale every timeout by this factor."),
    download_dir: Optional[Path] = typer.Option(None, "--download-dir", "-d", help="Allow downloads into this directory."),
    close_blank: bool = typer.Option(True, "--close-blank/--keep-blank", help="Close stray blank tabs after loading."),
) -> None:
    """Open a session, load URL, report what the browser sees and close again."""
    from playwright.async_api import Error as PlaywrightError

    from webpilot.exceptions import WebPilotError

    try:
        info = asyncio.run(
            _visit(url, headless=headless, multiplier=multiplier, download_dir=download_dir, close_blank=close_blank)
        )
    except (WebPilotError, PlaywrightError) as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    table = Table(title="Page", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in info.items():
        table.add_row(key, str(value))
    console.print(table)


if __name__ == "__main__":
    app()
