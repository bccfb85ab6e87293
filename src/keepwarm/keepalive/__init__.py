"""Keepalive scheduler for keeping a free-tier backend warm.

This package provides:
- KeepAliveScheduler, the fixed-rate ping scheduler
- KeepaliveTransport protocol and the httpx-backed HTTPKeepaliveClient
- SchedulerConfig and SchedulerStatus value types
- PageLifecycle and run_keepalive_daemon for driving a scheduler
"""

from keepwarm.keepalive.handler import (
    HTTPKeepaliveClient,
    KeepaliveTransport,
    ProbeResult,
)
from keepwarm.keepalive.lifecycle import PageLifecycle, run_keepalive_daemon
from keepwarm.keepalive.listeners import EventKind, ListenerRegistry, Subscription
from keepwarm.keepalive.scheduler import KeepAliveScheduler
from keepwarm.keepalive.state import SchedulerConfig, SchedulerStatus

__all__ = [
    # Scheduler
    "KeepAliveScheduler",
    "PageLifecycle",
    "run_keepalive_daemon",
    # Transport
    "KeepaliveTransport",
    "HTTPKeepaliveClient",
    "ProbeResult",
    # Listeners
    "EventKind",
    "ListenerRegistry",
    "Subscription",
    # State
    "SchedulerConfig",
    "SchedulerStatus",
]
