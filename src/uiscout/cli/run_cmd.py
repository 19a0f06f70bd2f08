"""CLI commands for capture runs and dataset viewer regeneration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from playwright.sync_api import Error as PlaywrightError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from uiscout.exceptions import BrowserStartupError, NavigationError, PageUnavailableError

console = Console()


def run_command(
    task: str = typer.Option("demo task", "--task", "-t", help="Task description recorded in metadata.json."),
    start_url: str = typer.Option("https://example.com", "--start-url", "-u", help="URL to start exploring from."),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Run directory (default: <output_dir>/<task slug>)."),
    max_steps: Optional[int] = typer.Option(None, "--max-steps", "-n", min=1, help="Maximum propose/act iterations."),
    allow_destructive: bool = typer.Option(
        False, "--allow-destructive", help="Allow clicking delete/remove/archive/reset controls."
    ),
    cookies: Optional[Path] = typer.Option(
        None, "--cookies", help="Cookie file ({\"cookies\": [...]}) imported before and saved after the run."
    ),
    hold: Optional[int] = typer.Option(None, "--hold", min=0, help="Milliseconds to wait after the first navigation."),
    hints: Optional[str] = typer.Option(None, "--hints", help="Comma-separated keywords that boost matching controls."),
    headless: Optional[bool] = typer.Option(None, "--headless/--headed", help="Override browser.headless."),
) -> None:
    """Explore a web app from START_URL and record before/after steps."""
    from uiscout.capture.runner import default_run_dir, run_capture
    from uiscout.settings import get_settings, parse_hints

    settings = get_settings()
    run_dir = out or default_run_dir(task, settings)

    console.print(Panel(f"[bold]Exploring:[/bold] {start_url}\n[bold]Task:[/bold] {task}", title="uiscout", border_style="blue"))

    try:
        summary = run_capture(
            task=task,
            start_url=start_url,
            output_dir=run_dir,
            max_steps=max_steps,
            allow_destructive=allow_destructive or settings.capture.allow_destructive,
            hints=parse_hints(hints) if hints is not None else None,
            hold_ms=hold,
            credentials_path=cookies,
            headless=headless,
            settings=settings,
        )
    except (BrowserStartupError, NavigationError, PageUnavailableError, PlaywrightError) as e:
        console.print(f"\n[red]✗[/red] Run failed: {e}")
        raise typer.Exit(code=1)

    table = Table(title="Capture summary", show_header=False)
    table.add_row("Run directory", summary.run_dir)
    table.add_row("Steps written", str(summary.steps_written))
    table.add_row("Captures skipped", str(summary.captures_skipped))
    table.add_row("Iterations", str(summary.iterations))
    table.add_row("Abandoned", str(summary.iterations_abandoned))
    table.add_row("Stopped because", summary.termination_reason.value)
    console.print(table)
    console.print(f"\n[green]✓[/green] Viewer: {Path(summary.run_dir) / 'index.html'}")


def index_command(
    run_dir: Path = typer.Argument(..., help="Run directory containing step-NNN folders."),
) -> None:
    """Regenerate the dataset viewer page for RUN_DIR."""
    from uiscout.dataset.viewer import write_dataset_index

    if not run_dir.is_dir():
        console.print(f"[red]Run directory not found:[/red] {run_dir}")
        raise typer.Exit(code=1)

    path = write_dataset_index(run_dir)
    console.print(f"[green]✓[/green] Viewer written to {path}")
