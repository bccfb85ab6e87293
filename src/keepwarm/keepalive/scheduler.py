"""Fixed-rate keepalive scheduler.

KeepAliveScheduler pings the whiteboard backend on an interval so a
free-tier host does not spin down, probes its health endpoint on demand,
and reports both through ordered listener collections.

All work happens on one asyncio event loop. Pings are not mutually
excluded: a manual ``ping()`` and a timer-driven ping may be in flight at
once, and whichever completes last decides ``last_ping_time`` and
``next_ping_time``.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from keepwarm.config import get_settings
from keepwarm.exceptions import KeepaliveError, KeepaliveTransportError
from keepwarm.keepalive.handler import HTTPKeepaliveClient, KeepaliveTransport, ProbeResult
from keepwarm.keepalive.listeners import EventKind, Listener, ListenerRegistry, Subscription
from keepwarm.keepalive.state import SchedulerConfig, SchedulerStatus
from keepwarm.logging import get_logger

LOG = get_logger(__name__)

Clock = Callable[[], int]
Sleep = Callable[[float], Awaitable[Any]]


def epoch_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class KeepAliveScheduler:
    """Keeps a remote service warm by pinging it on a fixed-rate timer.

    Example:
        >>> scheduler = KeepAliveScheduler.create(interval=60_000, base_url="http://localhost:5050")
        >>> scheduler.on_ping(lambda data: print(data["message"]))
        >>> scheduler.start()  # pings now, then every minute
        >>> ...
        >>> await scheduler.aclose()
    """

    def __init__(
        self,
        config: SchedulerConfig,
        transport: KeepaliveTransport | None = None,
        *,
        clock: Clock | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            config: Interval and endpoints.
            transport: Transport used for ping and health calls. A transport
                created here is closed by aclose().
            clock: Returns the current time in epoch milliseconds.
            sleep: Awaitable sleep in seconds used by the timer.
        """
        self.config = config
        self._owns_transport = transport is None
        self._transport: KeepaliveTransport = (
            transport
            if transport is not None
            else HTTPKeepaliveClient(timeout=get_settings().request_timeout)
        )
        self._clock = clock or epoch_millis
        self._sleep = sleep or asyncio.sleep
        self._timer: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[ProbeResult]] = set()
        self._last_ping_time: int | None = None
        self._next_ping_time: int | None = None
        self._listeners = ListenerRegistry()
        self._closed = False
        self._released = False

        LOG.info(
            "scheduler_initialized",
            interval_seconds=config.interval / 1000,
            base_url=config.base_url,
        )

    @classmethod
    def create(
        cls,
        interval: int | None = None,
        base_url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        clock: Clock | None = None,
        sleep: Sleep | None = None,
    ) -> "KeepAliveScheduler":
        """Build a scheduler from optional settings.

        Args:
            interval: Milliseconds between pings (default 10 minutes).
            base_url: Base address of the remote service (default from settings).
            client: Optional AsyncClient; the caller keeps ownership of it.
            clock: Returns the current time in epoch milliseconds.
            sleep: Awaitable sleep in seconds used by the timer.

        Returns:
            An inactive scheduler.
        """
        config = SchedulerConfig.create(interval=interval, base_url=base_url)
        transport = HTTPKeepaliveClient(client) if client is not None else None
        return cls(config, transport, clock=clock, sleep=sleep)

    @property
    def is_active(self) -> bool:
        return self._timer is not None

    @property
    def interval(self) -> int:
        return self.config.interval

    @property
    def ping_endpoint(self) -> str:
        return self.config.ping_endpoint

    @property
    def health_endpoint(self) -> str:
        return self.config.health_endpoint

    @property
    def last_ping_time(self) -> int | None:
        return self._last_ping_time

    @property
    def next_ping_time(self) -> int | None:
        return self._next_ping_time

    def start(self) -> None:
        """Ping immediately, then arm the recurring timer.

        Must be called from a running event loop. No-op if already active.
        Refused once the scheduler has been closed.
        """
        if self.is_active:
            LOG.info("scheduler_already_running")
            return
        if self._closed:
            LOG.warning("scheduler_closed", action="start")
            return

        loop = asyncio.get_running_loop()
        self.trigger_ping()
        self._timer = loop.create_task(self._run_timer(), name="keepwarm-timer")
        LOG.info("scheduler_started", interval_ms=self.interval, ping_endpoint=self.ping_endpoint)

    def stop(self) -> None:
        """Cancel the recurring timer. In-flight pings still complete.

        No-op if already inactive.
        """
        if self._timer is None:
            LOG.info("scheduler_already_stopped")
            return

        timer, self._timer = self._timer, None
        timer.cancel()
        LOG.info("scheduler_stopped")

    def trigger_ping(self) -> "asyncio.Task[ProbeResult]":
        """Start a ping without waiting for it.

        Returns:
            The task running the ping cycle.
        """
        task = asyncio.get_running_loop().create_task(self.ping())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def ping(self) -> ProbeResult:
        """Run one liveness cycle against the ping endpoint.

        Never raises for network or protocol failures: error listeners are
        notified and the failure is returned in the result.

        Returns:
            ProbeResult with the parsed ping payload or the error.
        """
        try:
            self._ensure_open()
            data = await self._transport.post_ping(self.ping_endpoint)
        except KeepaliveError as exc:
            LOG.warning("ping_failed", url=self.ping_endpoint, error=str(exc))
            self._listeners.emit(EventKind.ERROR, exc)
            return ProbeResult.failure(exc)

        now = self._clock()
        next_ping = data.get("nextPing") if isinstance(data, dict) else None
        self._last_ping_time = now
        self._next_ping_time = next_ping or now + self.interval

        LOG.info(
            "ping_succeeded",
            message=data.get("message") if isinstance(data, dict) else None,
            next_ping_time=self._next_ping_time,
        )
        self._listeners.emit(EventKind.PING, data)
        return ProbeResult.success(data)

    async def probe_health(self) -> ProbeResult:
        """Query the health endpoint once.

        Returns:
            ProbeResult with the parsed health payload or the error.
        """
        try:
            self._ensure_open()
            data = await self._transport.get_health(self.health_endpoint)
        except KeepaliveError as exc:
            LOG.warning("health_check_failed", url=self.health_endpoint, error=str(exc))
            self._listeners.emit(EventKind.ERROR, exc)
            return ProbeResult.failure(exc)

        LOG.debug("health_check_succeeded", url=self.health_endpoint)
        self._listeners.emit(EventKind.HEALTH_UPDATE, data)
        return ProbeResult.success(data)

    async def get_health(self) -> Any | None:
        """Query the health endpoint once.

        Returns:
            The parsed health payload, or None if the probe failed.
        """
        result = await self.probe_health()
        return result.payload if result.ok else None

    def on_ping(self, callback: Listener) -> Subscription:
        """Register a listener called with each successful ping payload."""
        return self._listeners.add(EventKind.PING, callback)

    def on_error(self, callback: Listener) -> Subscription:
        """Register a listener called with each ping or health failure."""
        return self._listeners.add(EventKind.ERROR, callback)

    def on_health_update(self, callback: Listener) -> Subscription:
        """Register a listener called with each successful health payload."""
        return self._listeners.add(EventKind.HEALTH_UPDATE, callback)

    def get_status(self) -> SchedulerStatus:
        return SchedulerStatus(
            is_active=self.is_active,
            interval=self.interval,
            last_ping_time=self._last_ping_time,
            next_ping_time=self._next_ping_time,
        )

    async def wait_idle(self) -> None:
        """Wait until every in-flight ping has completed."""
        while self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    async def aclose(self) -> None:
        """Stop the timer, let in-flight pings finish, and release the transport."""
        if self._closed:
            return
        self._closed = True
        if self.is_active:
            self.stop()
        await self.wait_idle()
        self._released = True
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> "KeepAliveScheduler":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _ensure_open(self) -> None:
        if self._released:
            raise KeepaliveTransportError("scheduler is closed")

    async def _run_timer(self) -> None:
        # Fixed rate: each deadline is measured from the previous one, not from
        # when a ping finished. Pings run as their own tasks so a slow ping
        # never delays the next firing.
        deadline = self._clock() + self.interval
        while True:
            await self._sleep(max(0, deadline - self._clock()) / 1000)
            self.trigger_ping()
            deadline += self.interval
            now = self._clock()
            if deadline <= now:
                # Clock jumped or the loop stalled; skip missed firings
                deadline = now + self.interval
