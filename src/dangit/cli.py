"""CLI entry point for dangit."""

import logging
import math
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape as markup_escape

from . import __version__
from .config import CONFIG_FILE, MAX_TRANSITION_DURATION, Config, load_config, save_config
from .github import FetchError, GitHubClient, fetch_snapshot, get_token
from .navigation import Snapshot
from .tui_textual import DashboardApp

console = Console()
logger = logging.getLogger(__name__)

LOG_FILE = Path.home() / ".cache" / "dangit" / "debug.log"


def _require_finite(ctx: click.Context, param: click.Parameter, value: float | None) -> float | None:
    # FloatRange lets nan through, every comparison with it is False
    if value is not None and not math.isfinite(value):
        raise click.BadParameter(f"{value} is not a finite number")
    return value


def configure_logging(debug_logging: bool) -> None:
    """Send logs to a rotating file when debugging, else only warnings to stderr."""
    if debug_logging:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
        )
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            handlers=[handler],
        )
        logging.info("dangit starting (debug logging enabled)")
    else:
        # Default: only warn+ so TUI stays clean
        logging.basicConfig(
            level=logging.WARNING,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )


def load_snapshot(config: Config) -> Snapshot:
    """Authenticate and fetch everything, exiting with status 1 on failure."""
    try:
        client = GitHubClient(
            get_token(),
            organization=config.organization,
            api_url=config.api_url,
            notifications_per_page=config.notifications_per_page,
        )
        scope = f"org {config.organization}" if config.organization else "all repositories"
        with console.status(f"[dim]Fetching your work in {scope}...[/dim]"):
            return fetch_snapshot(client)
    except FetchError as exc:
        logger.error(f"Startup fetch failed: {exc}")
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1)


@click.group(invoke_without_command=True)
@click.option("--org", "organization", default=None, help="Only show work in this organization")
@click.option("--debug-logging/--no-debug-logging", default=None, help="Enable debug logging to file")
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def main(ctx: click.Context, organization: str | None, debug_logging: bool | None, version: bool) -> None:
    """dangit - your open issues, pull requests and notifications in one place."""
    if version:
        console.print(f"dangit v{__version__}")
        return

    # If no subcommand, run the dashboard
    if ctx.invoked_subcommand is None:
        config = load_config()
        # Apply CLI overrides (not saved to config file)
        if organization is not None:
            config.organization = organization
        if debug_logging is not None:
            config.debug_logging = debug_logging
        run_dashboard(config)


def run_dashboard(config: Config | None = None) -> None:
    """Fetch once, then run the interactive dashboard until the user quits."""
    if config is None:
        config = load_config()

    configure_logging(config.debug_logging)
    snapshot = load_snapshot(config)

    try:
        app = DashboardApp(
            snapshot,
            transition_duration=config.transition_duration,
            tick=config.tick_interval,
        )
        app.run()
    except KeyboardInterrupt:
        pass


@main.command("list")
@click.option("--org", "organization", default=None, help="Only show work in this organization")
def list_items(organization: str | None) -> None:
    """Print notifications and work items grouped by repository."""
    config = load_config()
    if organization is not None:
        config.organization = organization
    configure_logging(config.debug_logging)
    snapshot = load_snapshot(config)

    if snapshot.notifications:
        console.print(f"🔔 Notifications ({len(snapshot.notifications)}):", markup=False)
        for notification in snapshot.notifications:
            console.print(f"  {notification}", markup=False, highlight=False)

    for repo, items in snapshot.all_view.items():
        console.print(f"[bold]{markup_escape(repo)}[/bold]:")
        for item in items:
            console.print(f"  {item.kind.glyph} {item}", markup=False, highlight=False)

    if not snapshot.all_view and not snapshot.notifications:
        console.print("[dim]Nothing open. Enjoy your day![/dim]")


@main.command()
@click.option("--org", "organization", default=None, help="Restrict searches to an organization")
@click.option("--clear-org", is_flag=True, help="Search across all organizations")
@click.option("--transition-duration", type=click.FloatRange(min=0.0, max=MAX_TRANSITION_DURATION), default=None, callback=_require_finite, help="Seconds the reveal effect plays (0 disables it)")
@click.option("--debug-logging/--no-debug-logging", default=None, help="Enable debug logging to file")
@click.option("--show", is_flag=True, help="Show current configuration")
def config(organization: str | None, clear_org: bool, transition_duration: float | None, debug_logging: bool | None, show: bool) -> None:
    """Configure dangit settings.

    Examples:
      dangit config --org my-company            # Only show my-company work
      dangit config --clear-org                 # Show work everywhere
      dangit config --transition-duration 0     # Disable the reveal effect
      dangit config --show                      # Show current config
    """
    if organization and clear_org:
        raise click.UsageError("--org and --clear-org are mutually exclusive")

    current_config = load_config()

    if show:
        console.print("\n[bold]Current Configuration:[/bold]")
        console.print(f"  Organization:        [cyan]{current_config.organization or '(all)'}[/cyan]")
        console.print(f"  API URL:             [cyan]{current_config.api_url}[/cyan]")
        console.print(f"  Transition Duration: [cyan]{current_config.transition_duration}s[/cyan]")
        console.print(f"  Debug Logging:       [cyan]{current_config.debug_logging}[/cyan]")
        console.print(f"\nConfig file: [dim]{CONFIG_FILE}[/dim]")

        for name in ("DANGIT_ORG", "DANGIT_API_URL", "DANGIT_TRANSITION_DURATION", "DANGIT_DEBUG_LOGGING"):
            if os.getenv(name):
                console.print(f"[yellow]Note:[/yellow] {name} is set: {os.getenv(name)}")
        return

    if organization is None and not clear_org and transition_duration is None and debug_logging is None:
        console.print("Nothing to change. See [cyan]dangit config --help[/cyan].")
        return

    if organization is not None:
        current_config.organization = organization
    if clear_org:
        current_config.organization = None
    if transition_duration is not None:
        current_config.transition_duration = transition_duration
    if debug_logging is not None:
        current_config.debug_logging = debug_logging

    save_config(current_config)
    console.print("[green]Configuration saved![/green]")
    console.print(f"  Organization:        [cyan]{current_config.organization or '(all)'}[/cyan]")
    console.print(f"  Transition Duration: [cyan]{current_config.transition_duration}s[/cyan]")
    console.print(f"  Debug Logging:       [cyan]{current_config.debug_logging}[/cyan]")


if __name__ == "__main__":
    main()
