"""Keepalive scheduler configuration and status types.

This module holds the immutable scheduler configuration, the status snapshot
returned by the scheduler, and the helpers that mirror a running daemon's
status to disk for ``keepwarm keepalive status``. It is intentionally
separated from CLI code to avoid circular imports.
"""

import json
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from keepwarm.config import get_settings

DEFAULT_INTERVAL_MS = 10 * 60 * 1000
PING_PATH = "/api/ping"
HEALTH_PATH = "/api/health"


@dataclass(frozen=True)
class SchedulerConfig:
    """Immutable keepalive scheduler configuration.

    Attributes:
        interval: Milliseconds between pings.
        base_url: Base address of the remote service.
    """

    interval: int
    base_url: str

    @classmethod
    def create(
        cls,
        interval: int | None = None,
        base_url: str | None = None,
    ) -> "SchedulerConfig":
        """Build a config, falling back to defaults for omitted options.

        A missing or non-positive interval falls back to the configured
        interval, and an empty base URL to the configured API URL. Trailing
        slashes are stripped. URLs are otherwise not validated; a malformed
        base URL surfaces as a ping failure.

        Args:
            interval: Milliseconds between pings. Defaults to the configured
                interval.
            base_url: Base address of the remote service. Defaults to the
                configured API URL.

        Returns:
            SchedulerConfig instance.
        """
        settings = get_settings()
        if not interval or interval <= 0:
            interval = settings.interval_ms if settings.interval_ms > 0 else DEFAULT_INTERVAL_MS
        if not base_url:
            base_url = settings.resolved_api_url
        return cls(interval=interval, base_url=base_url.rstrip("/"))

    @property
    def ping_endpoint(self) -> str:
        return f"{self.base_url}{PING_PATH}"

    @property
    def health_endpoint(self) -> str:
        return f"{self.base_url}{HEALTH_PATH}"


@dataclass(frozen=True)
class SchedulerStatus:
    """Point-in-time snapshot of a scheduler.

    Attributes:
        is_active: Whether the recurring timer is armed.
        interval: Milliseconds between pings.
        last_ping_time: Epoch milliseconds of the last successful ping.
        next_ping_time: Epoch milliseconds of the next expected ping.
    """

    is_active: bool
    interval: int
    last_ping_time: int | None = None
    next_ping_time: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchedulerStatus":
        """Create instance from dictionary.

        Unknown fields are ignored for forward compatibility.
        """
        known_fields = {"is_active", "interval", "last_ping_time", "next_ping_time"}
        filtered = {k: v for k, v in data.items() if k in known_fields}
        return cls(**filtered)


def _get_keepalive_pid_path() -> Path:
    """Get path to keepalive PID file."""
    return get_settings().config_dir / "keepalive.pid"


def _get_keepalive_state_path() -> Path:
    """Get path to keepalive status file."""
    return get_settings().config_dir / "keepalive.state.json"


def read_keepalive_pid() -> int | None:
    """Read PID from keepalive PID file, return None if not found or invalid.

    Returns:
        PID if daemon is running, None otherwise.
    """
    pid_path = _get_keepalive_pid_path()
    if not pid_path.exists():
        return None
    try:
        pid = int(pid_path.read_text().strip())
        # Signal 0 only checks that the process exists
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        # Stale PID file from a daemon that died without cleaning up
        remove_keepalive_files()
        return None


def write_keepalive_pid() -> None:
    """Write current PID to keepalive PID file."""
    pid_path = _get_keepalive_pid_path()
    pid_path.parent.mkdir(parents=True, exist_ok=True)
    pid_path.write_text(str(os.getpid()))


def write_keepalive_state(status: SchedulerStatus, base_url: str) -> None:
    """Write the daemon's status snapshot to the state file atomically.

    Args:
        status: Current scheduler status.
        base_url: Base address the daemon is pinging.
    """
    state_path = _get_keepalive_state_path()
    state_path.parent.mkdir(parents=True, exist_ok=True)

    state_dict = {**status.to_dict(), "base_url": base_url}

    # Temp file + rename so readers never see a partial write
    fd, temp_path = tempfile.mkstemp(
        dir=state_path.parent,
        prefix=".keepalive.state.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w") as f:
            f.write(json.dumps(state_dict))
        Path(temp_path).rename(state_path)
    except Exception:
        Path(temp_path).unlink(missing_ok=True)
        raise


def read_keepalive_state() -> tuple[SchedulerStatus, str] | None:
    """Read the daemon's status snapshot from the state file.

    Returns:
        Tuple of (status, base_url) if the file exists and is valid, None otherwise.
    """
    state_path = _get_keepalive_state_path()
    if not state_path.exists():
        return None
    try:
        data = json.loads(state_path.read_text())
        return SchedulerStatus.from_dict(data), str(data.get("base_url", ""))
    except (ValueError, TypeError, AttributeError):
        return None


def remove_keepalive_files() -> None:
    """Remove keepalive PID and state files."""
    _get_keepalive_pid_path().unlink(missing_ok=True)
    _get_keepalive_state_path().unlink(missing_ok=True)
