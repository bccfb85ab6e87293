"""Keepalive CLI commands."""

import asyncio
import os
import signal
from datetime import datetime
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.panel import Panel

from keepwarm import console as kw_console
from keepwarm.config import get_settings
from keepwarm.keepalive.handler import ProbeResult
from keepwarm.keepalive.lifecycle import PageLifecycle, run_keepalive_daemon
from keepwarm.keepalive.scheduler import KeepAliveScheduler
from keepwarm.keepalive.state import read_keepalive_pid, read_keepalive_state
from keepwarm.logging import get_logger, suppress_asyncio_noise

LOG = get_logger(__name__)

console = Console()

keepalive_app = typer.Typer(
    name="keepalive",
    help="Keep the whiteboard backend warm.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

ApiUrlOption = Annotated[
    str | None,
    typer.Option("--api-url", help="API base URL (default: KEEPWARM_API_URL or hostname-based)"),
]


def _build_scheduler(api_url: str | None, interval_ms: int | None = None) -> KeepAliveScheduler:
    """Create the scheduler a command drives."""
    return KeepAliveScheduler.create(interval=interval_ms, base_url=api_url)


def _format_millis(value: int | None) -> str:
    if value is None:
        return "never"
    return datetime.fromtimestamp(value / 1000).astimezone().isoformat(timespec="seconds")


def _report_ping(data: Any) -> None:
    message = data.get("message") if isinstance(data, dict) else None
    kw_console.success(f"Ping successful: {message or 'ok'}")


def _report_error(exc: Exception) -> None:
    kw_console.error(str(exc))


async def _run_daemon(interval_ms: int, api_url: str | None) -> None:
    scheduler = _build_scheduler(api_url, interval_ms)
    scheduler.on_ping(_report_ping)
    scheduler.on_error(_report_error)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    stop_signals = (signal.SIGINT, signal.SIGTERM)
    wake_signal = getattr(signal, "SIGUSR1", None)
    try:
        for sig in stop_signals:
            loop.add_signal_handler(sig, stop_event.set)
    except NotImplementedError:
        console.print("[red]keepalive run requires Unix/macOS (signal handlers unavailable).[/red]")
        await scheduler.aclose()
        raise typer.Exit(1) from None

    def _on_started(lifecycle: PageLifecycle) -> None:
        # SIGUSR1 plays the part of the page becoming visible again
        if wake_signal is not None:
            loop.add_signal_handler(wake_signal, lifecycle.on_visibility_change, False)

    console.print(
        f"\n[bold]Keeping {scheduler.config.base_url} warm every "
        f"{scheduler.interval / 1000:g}s... press Ctrl+C to stop[/bold]\n"
    )
    try:
        status = await run_keepalive_daemon(scheduler, stop_event, on_started=_on_started)
    finally:
        for sig in stop_signals:
            loop.remove_signal_handler(sig)
        if wake_signal is not None:
            loop.remove_signal_handler(wake_signal)

    LOG.info("keepalive_daemon_exited", last_ping_time=status.last_ping_time)
    console.print(f"\n[dim]Stopped. Last successful ping: {_format_millis(status.last_ping_time)}[/dim]")


@keepalive_app.command("run")
def keepalive_run(
    interval_ms: Annotated[
        int | None,
        typer.Option("--interval-ms", "-i", help="Milliseconds between pings"),
    ] = None,
    api_url: ApiUrlOption = None,
) -> None:
    """Ping the backend now and on every interval until stopped."""
    pid = read_keepalive_pid()
    if pid:
        console.print(f"[yellow]Keepalive daemon already running (PID {pid})[/yellow]")
        raise typer.Exit(1)

    settings = get_settings()
    with suppress_asyncio_noise():
        asyncio.run(_run_daemon(interval_ms or settings.interval_ms, api_url))


async def _ping_once(api_url: str | None) -> tuple[ProbeResult, KeepAliveScheduler]:
    async with _build_scheduler(api_url) as scheduler:
        return await scheduler.ping(), scheduler


@keepalive_app.command("ping")
def keepalive_ping(api_url: ApiUrlOption = None) -> None:
    """Send a single keepalive ping."""
    result, scheduler = asyncio.run(_ping_once(api_url))
    if not result.ok:
        kw_console.error(str(result.error))
        raise typer.Exit(1)

    _report_ping(result.payload)
    kw_console.info(f"Next ping expected: {_format_millis(scheduler.next_ping_time)}")


async def _health_once(api_url: str | None) -> ProbeResult:
    async with _build_scheduler(api_url) as scheduler:
        return await scheduler.probe_health()


@keepalive_app.command("health")
def keepalive_health(api_url: ApiUrlOption = None) -> None:
    """Fetch the backend's health report."""
    result = asyncio.run(_health_once(api_url))
    if not result.ok:
        kw_console.error(str(result.error))
        raise typer.Exit(1)

    kw_console.print_json(result.payload)


@keepalive_app.command("status")
def keepalive_status() -> None:
    """Show keepalive daemon status."""
    pid = read_keepalive_pid()
    saved = read_keepalive_state()

    if not pid:
        console.print(
            Panel(
                "[dim]Daemon is not running[/dim]",
                title="⏸ Keepalive Status",
                border_style="yellow",
            )
        )
        return

    if saved:
        status, base_url = saved
        if status.is_active:
            status_display = "[green]● running[/green]"
        else:
            status_display = "[red]○ stopped[/red]"

        info = f"""
{status_display}  PID {pid}

[dim]Backend:[/dim]    {base_url}
[dim]Interval:[/dim]   {status.interval / 1000:g} seconds
[dim]Last ping:[/dim]  {_format_millis(status.last_ping_time)}
[dim]Next ping:[/dim]  {_format_millis(status.next_ping_time)}"""
    else:
        info = f"PID {pid}\n\n[dim]State file not found[/dim]"

    console.print(Panel(info.strip(), title="🔄 Keepalive Status", border_style="cyan"))


def _signal_daemon(sig: signal.Signals, done_message: str) -> None:
    pid = read_keepalive_pid()
    if not pid:
        console.print("[yellow]Daemon is not running[/yellow]")
        return

    try:
        os.kill(pid, sig)
        console.print(f"[green]✓ {done_message} (PID {pid})[/green]")
    except ProcessLookupError:
        console.print("[yellow]Daemon already stopped[/yellow]")
    except PermissionError:
        console.print(f"[red]✗ Permission denied (PID {pid})[/red]")
        raise typer.Exit(1) from None
    except OSError as exc:
        console.print(f"[red]✗ Failed to signal daemon: {exc}[/red]")
        raise typer.Exit(1) from None


@keepalive_app.command("stop")
def keepalive_stop() -> None:
    """Stop the keepalive daemon."""
    _signal_daemon(signal.SIGTERM, "Stopped daemon")


@keepalive_app.command("wake")
def keepalive_wake() -> None:
    """Ask the running daemon to ping immediately."""
    wake_signal = getattr(signal, "SIGUSR1", None)
    if wake_signal is None:
        console.print("[red]✗ wake requires Unix/macOS[/red]")
        raise typer.Exit(1)
    _signal_daemon(wake_signal, "Woke daemon")
