"""Page-lifecycle hooks and the long-running keepalive daemon."""

import asyncio
from collections.abc import Callable

from keepwarm.keepalive.scheduler import KeepAliveScheduler
from keepwarm.keepalive.state import (
    SchedulerStatus,
    remove_keepalive_files,
    write_keepalive_pid,
    write_keepalive_state,
)
from keepwarm.logging import get_logger

LOG = get_logger(__name__)


class PageLifecycle:
    """Drives one scheduler from page ready and visibility signals.

    The lifecycle owns the session's single scheduler instance and is passed
    to whatever raises the signals, instead of the scheduler living in
    global state.
    """

    def __init__(self, scheduler: KeepAliveScheduler) -> None:
        self.scheduler = scheduler

    def on_ready(self) -> None:
        """Start keepalive once the client is ready. Repeated calls are harmless."""
        was_active = self.scheduler.is_active
        self.scheduler.start()
        if not was_active:
            LOG.info("keepalive_auto_started")

    def on_visibility_change(self, hidden: bool) -> None:
        """React to the client becoming hidden or visible again.

        Hiding does nothing. Coming back restarts a stopped scheduler, or pings
        right away if it is still running.
        """
        if hidden:
            return
        if not self.scheduler.is_active:
            self.scheduler.start()
            LOG.info("keepalive_restarted_on_visibility_change")
        else:
            self.scheduler.trigger_ping()
            LOG.info("keepalive_immediate_ping_on_visibility_change")


async def run_keepalive_daemon(
    scheduler: KeepAliveScheduler,
    stop_event: asyncio.Event,
    on_started: Callable[[PageLifecycle], None] | None = None,
) -> SchedulerStatus:
    """Run ``scheduler`` until ``stop_event`` is set.

    Writes a PID file and mirrors the scheduler status to the state file
    after every ping outcome, so ``keepwarm keepalive status`` can report on
    the running daemon. Both files are removed on exit.

    Args:
        scheduler: Scheduler to drive. It is closed on exit.
        stop_event: Set to shut the daemon down.
        on_started: Called with the lifecycle once keepalive has started.

    Returns:
        Final scheduler status.
    """
    lifecycle = PageLifecycle(scheduler)
    base_url = scheduler.config.base_url

    def _mirror_status(_: object) -> None:
        write_keepalive_state(scheduler.get_status(), base_url)

    scheduler.on_ping(_mirror_status)
    scheduler.on_error(_mirror_status)

    write_keepalive_pid()
    try:
        async with scheduler:
            lifecycle.on_ready()
            write_keepalive_state(scheduler.get_status(), base_url)
            if on_started is not None:
                on_started(lifecycle)
            await stop_event.wait()
            LOG.info("keepalive_daemon_stopping")
        return scheduler.get_status()
    finally:
        remove_keepalive_files()
