"""
Command-line interface for Pinger Core.

Provides commands for showing the system identity and reporting it to a server.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from pinger_core import __version__
from pinger_core.config import Config
from pinger_core.core import PingerCore
from pinger_core.errors import IdentityError
from pinger_core.uploader import UploadError

console = Console()


def setup_logging(level: str, log_file: str | None = None) -> None:
    """Configure logging with rich handler."""
    handlers: list[logging.Handler] = [RichHandler(console=console, rich_tracebacks=True)]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="pinger-core")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "-V",
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """
    Pinger Core - System identity reporting for Linux.

    Detect the platform, OS versions and cloud instance type of this
    machine and optionally report them to a remote server.
    """
    ctx.ensure_object(dict)

    ctx.obj["config"] = Config.load(config)

    log_level = "DEBUG" if verbose else ctx.obj["config"].log_level
    setup_logging(log_level, ctx.obj["config"].log_file)
    ctx.obj["verbose"] = verbose


@main.command()
@click.option(
    "--level",
    "-l",
    help="Collecting level: minimal or full, anything else means minimal "
    "(defaults to the configured level)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Write identity JSON to file instead of stdout",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["json", "pretty"]),
    default="pretty",
    help="Output format",
)
@click.pass_context
def identity(
    ctx: click.Context,
    level: str | None,
    output: Path | None,
    format: str,
) -> None:
    """
    Show the identity of this system.

    Reads the boot arguments, OS version marker, booted deployment and
    cloud metadata, without sending anything.
    """
    config: Config = ctx.obj["config"]
    core = PingerCore(config)

    try:
        ident = core.identify(level)
    except IdentityError as e:
        console.print(f"[red]Error: {e}[/]")
        sys.exit(1)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(ident.to_json())
        console.print(f"[dim]Identity saved to: {output}[/]")
    elif format == "json":
        console.print_json(ident.to_json())
    else:
        _display_identity(ident.flatten())


def _display_identity(data: dict[str, str]) -> None:
    """Display the flattened identity as a table."""
    table = Table(title="System Identity", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, value or "[dim]n/a[/]")

    console.print()
    console.print(table)


@main.command()
@click.option(
    "--level",
    "-l",
    help="Collecting level: minimal or full, anything else means minimal "
    "(defaults to the configured level)",
)
@click.pass_context
def ping(ctx: click.Context, level: str | None) -> None:
    """
    Build the identity and report it.

    Requires a reporting URL in the configuration or PINGER_REPORTING_URL.
    """
    config: Config = ctx.obj["config"]

    if not config.reporting_url:
        console.print("[red]Error: No reporting URL configured.[/]")
        console.print("Set PINGER_REPORTING_URL or configure in config file.")
        sys.exit(1)

    if not config.reporting_enabled:
        console.print("[yellow]Reporting is disabled in the configuration. Nothing sent.[/]")
        return

    core = PingerCore(config)

    try:
        report = core.build_report(level)
    except IdentityError as e:
        console.print(f"[red]Error: {e}[/]")
        sys.exit(1)

    _display_identity(report.identity.flatten())

    try:
        response = core.upload(report)
    except UploadError as e:
        console.print(f"[red]✗ Upload failed: {e}[/]")
        sys.exit(1)

    console.print("[green]✓ Identity reported[/]")
    if ctx.obj["verbose"]:
        console.print(f"  Response: {response}")


@main.command("version", short_help="Display version information")
def version() -> None:
    """Display version information for Pinger Core."""
    console.print()
    console.print(
        Panel.fit(
            f"[bold blue]Pinger Core[/]\nVersion: [cyan]{__version__}[/]",
            border_style="blue",
            title="Version Information",
        )
    )
    console.print()

    table = Table(show_header=False, box=None)
    table.add_column("Component", style="dim", width=20)
    table.add_column("Version", style="cyan")

    table.add_row("Pinger Core", __version__)
    table.add_row("Python", sys.version.split()[0])

    console.print(table)
    console.print()


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show current configuration and connection status."""
    config: Config = ctx.obj["config"]

    console.print()
    console.print(Panel.fit("[bold]Pinger Core Status[/]", border_style="blue"))

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("Collecting Level", config.collecting_level)
    table.add_row("Reporting URL", config.reporting_url or "[dim]Not configured[/]")
    table.add_row("Reporting Enabled", "Yes" if config.reporting_enabled else "No")
    table.add_row("API Key", "Configured" if config.api_key else "[dim]Not set[/]")
    table.add_row("Boot Arguments", config.cmdline_path)
    table.add_row("Aleph Version", config.aleph_version_path)
    table.add_row("Cloud Metadata", config.metadata_path)
    table.add_row("Log Level", config.log_level)

    console.print(table)

    if config.reporting_url:
        console.print()
        from pinger_core.uploader import Uploader

        with console.status("Testing connection..."):
            connected = Uploader(config).check_endpoint()

        if connected:
            console.print("[green]✓ Server is reachable[/]")
        else:
            console.print("[red]✗ Server is not reachable[/]")


SAMPLE_CONFIG = """# Pinger Core Configuration
# Fragments in /etc/pinger-core/config.d/*.yaml override this file

# Collection settings
collecting:
  # Collecting level: minimal or full (unknown values mean minimal)
  level: minimal

# Identity sources
sources:
  cmdline_path: /proc/cmdline
  aleph_version_path: /.coreos-aleph-version.json
  metadata_path: /run/metadata/afterburn
  # Timeout for the rpm-ostree status query in seconds
  status_timeout: 30

# Reporting settings
reporting:
  # Enable/disable sending the identity
  enabled: true

  # URL the identity is sent to
  url: https://your-server.example.com/api/v1/ping

  # Request timeout in seconds
  timeout: 30

  # Number of attempts
  retries: 3

# Authentication
auth:
  api_key: null  # Set via PINGER_API_KEY env var for security

# Logging
logging:
  # Log level: DEBUG, INFO, WARNING, ERROR
  level: INFO

  # Log file path (null = stderr only)
  file: null
"""


@main.command()
@click.argument("output_path", type=click.Path(path_type=Path))
def init_config(output_path: Path) -> None:
    """
    Generate a sample configuration file.

    Creates a YAML configuration file with all available options
    and helpful comments.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(SAMPLE_CONFIG)
    console.print(f"[green]✓ Configuration file created: {output_path}[/]")
    console.print()
    console.print("Next steps:")
    console.print("  1. Edit the configuration file with your server URL")
    console.print("  2. Set your API key: [cyan]export PINGER_API_KEY=your-key[/]")
    console.print("  3. Report the identity: [cyan]pinger ping[/]")


if __name__ == "__main__":
    main()
