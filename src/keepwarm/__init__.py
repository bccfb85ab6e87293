"""keepwarm - keep a sleepy whiteboard backend awake.

Free-tier and serverless hosts spin a backend down after a stretch without
traffic. keepwarm pings the whiteboard server's ``/api/ping`` endpoint on a
fixed-rate interval, probes ``/api/health`` on demand, and reports both
through listener callbacks.

Example:
    >>> import asyncio
    >>> from keepwarm import KeepAliveScheduler
    >>> async def main():
    ...     async with KeepAliveScheduler.create(base_url="http://localhost:5050") as ka:
    ...         ka.on_ping(lambda data: print(data["message"]))
    ...         ka.start()
    ...         await asyncio.sleep(3600)
    >>> asyncio.run(main())
"""

from keepwarm.config import KeepwarmSettings, get_settings
from keepwarm.exceptions import (
    HealthCheckFailedError,
    KeepaliveError,
    KeepaliveTransportError,
    KeepwarmError,
    MalformedResponseError,
    PingFailedError,
    ProtocolError,
)
from keepwarm.keepalive import (
    KeepAliveScheduler,
    PageLifecycle,
    ProbeResult,
    SchedulerConfig,
    SchedulerStatus,
    Subscription,
)

__version__ = "0.3.0"

__all__ = [
    # Version
    "__version__",
    # Scheduler
    "KeepAliveScheduler",
    "PageLifecycle",
    "ProbeResult",
    "SchedulerConfig",
    "SchedulerStatus",
    "Subscription",
    # Configuration
    "KeepwarmSettings",
    "get_settings",
    # Exceptions
    "KeepwarmError",
    "KeepaliveError",
    "KeepaliveTransportError",
    "ProtocolError",
    "PingFailedError",
    "HealthCheckFailedError",
    "MalformedResponseError",
]
