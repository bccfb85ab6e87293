"""keepwarm CLI - keep a sleepy whiteboard backend awake."""

import os
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel

import keepwarm
from keepwarm.cli.keepalive_commands import keepalive_app
from keepwarm.config import get_settings
from keepwarm.logging import configure_logging, enable_network_debug, get_logger

# Configure logging early from env vars; -v/-vv and --log-format may
# reconfigure it in main_callback().
configure_logging(
    level=os.environ.get("KEEPWARM_LOG_LEVEL", "WARNING"),
    json_output=os.environ.get("KEEPWARM_LOG_FORMAT", "console") == "json",
)

LOG = get_logger(__name__)

app = typer.Typer(
    name="keepwarm",
    help="""
    ☕ keepwarm - keep a sleepy whiteboard backend awake

    \b
    Quick start:
      keepwarm keepalive run      Ping now and every interval
      keepwarm keepalive ping     Send one ping
      keepwarm keepalive health   Show the backend health report
      keepwarm config             Show current configuration
    """,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


@app.callback(invoke_without_command=True)
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v for info, -vv for debug)",
        ),
    ] = 0,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            help="Log output format: console (human-readable) or json (structured)",
        ),
    ] = None,
    network_debug: Annotated[
        bool,
        typer.Option(
            "--network-debug",
            help="Enable HTTP debug logging from httpx and httpcore",
        ),
    ] = False,
) -> None:
    """keepwarm - keep a sleepy whiteboard backend awake."""
    settings = get_settings()
    json_output = (log_format or settings.log_format) == "json"

    if verbose >= 2:
        configure_logging(level="DEBUG", json_output=json_output)
    elif verbose >= 1:
        configure_logging(level="INFO", json_output=json_output)
    elif log_format is not None:
        configure_logging(level=settings.log_level, json_output=json_output)

    if network_debug:
        enable_network_debug()


@app.command("version")
def version() -> None:
    """Show keepwarm version."""
    settings = get_settings()
    console.print(
        Panel(
            f"[bold cyan]keepwarm[/bold cyan] v{keepwarm.__version__}\n\n"
            f"[dim]Backend:[/dim] {settings.resolved_api_url}",
            title="Keep the whiteboard backend awake",
            border_style="cyan",
        )
    )


@app.command("config")
def config() -> None:
    """Show current keepwarm configuration."""
    settings = get_settings()

    api_source = "explicit" if settings.api_url else f"hostname: {settings.page_hostname or '-'}"

    info = f"""
[dim]API base URL:[/dim]     {settings.resolved_api_url} [dim]({api_source})[/dim]
[dim]Ping interval:[/dim]    {settings.interval_ms / 1000:g}s
[dim]Request timeout:[/dim]  {settings.request_timeout:g}s
[dim]Config directory:[/dim] {settings.config_dir}
[dim]Log level:[/dim]        {settings.log_level}
[dim]Log format:[/dim]       {settings.log_format}"""

    console.print(Panel(info.strip(), title="⚙ Configuration", border_style="cyan"))


# Keepalive subcommand group (defined in keepalive_commands.py)
app.add_typer(keepalive_app)

if __name__ == "__main__":
    app()
