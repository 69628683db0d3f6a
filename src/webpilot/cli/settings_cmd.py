"""`webpilot settings` commands: print the resolved configuration and check it."""

from __future__ import annotations

import json
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

settings_app = typer.Typer(help="Inspect and validate webpilot configuration.")
console = Console()

_SECTIONS = ("browser", "timing", "identity", "downloads")


@settings_app.command("show")
def show_settings(
    section: Optional[str] = typer.Option(None, "--section", "-s", help=f"Only show one of: {', '.join(_SECTIONS)}."),
) -> None:
    """Print the resolved settings as JSON."""
    from webpilot.settings import get_settings

    data = get_settings().model_dump(mode="json")
    if section is not None:
        if section not in _SECTIONS:
            console.print(f"[red]✗[/red] Unknown section {section!r}; expected one of {', '.join(_SECTIONS)}.")
            raise typer.Exit(code=2)
        data = data[section]
    console.print_json(json.dumps(data, default=str))


@settings_app.command("validate")
def validate_settings() -> None:
    """Load the settings and list the effective (scaled) timeouts."""
    from pydantic import ValidationError

    from webpilot.settings import get_settings

    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(f"[red]✗[/red] Settings validation failed: {e}")
        raise typer.Exit(code=1)

    timing = settings.timing
    console.print("[green]✓[/green] Settings are valid.")
    console.print(f"  Environment: {settings.env}")
    console.print(f"  Headless: {settings.browser.headless}")
    console.print(f"  Time multiplier: {timing.multiplier}")
    console.print(f"  Locale / timezone: {settings.identity.locale} / {settings.identity.timezone_id}")

    table = Table(title="Timeouts (ms)")
    table.add_column("Operation")
    table.add_column("Nominal", justify="right")
    table.add_column("Effective", justify="right")
    for name, nominal in timing.model_dump().items():
        if name.endswith("_timeout_ms"):
            table.add_row(name.removesuffix("_timeout_ms"), str(nominal), f"{nominal * timing.multiplier:g}")
    console.print(table)
