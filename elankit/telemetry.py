"""
Local telemetry storage.

Events are appended as JSON lines to one log file per day inside the
telemetry directory. Only the newest MAX_TELEMETRY_FILES logs are kept.
"""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .core.exceptions import TelemetryError

logger = logging.getLogger(__name__)

MAX_TELEMETRY_FILES = 100


@dataclass(frozen=True)
class TelemetryEvent:
    """A toolchain update attempt."""

    toolchain: str
    success: bool
    kind: str = "toolchain_update"


class Telemetry:
    """Appends telemetry events to daily log files."""

    def __init__(self, telemetry_dir: Path):
        self.telemetry_dir = Path(telemetry_dir)

    def log_telemetry(self, event: TelemetryEvent, now: Optional[datetime] = None) -> None:
        """
        Record an event, then prune old log files.

        Raises:
            TelemetryError: If the event cannot be written or old logs removed
        """
        now = now or datetime.now(timezone.utc)
        record = dict(asdict(event), timestamp=now.isoformat())
        log_file = self.telemetry_dir / f"log-{now.strftime('%Y-%m-%d')}.json"

        try:
            self.telemetry_dir.mkdir(parents=True, exist_ok=True)
            with open(log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(record) + "\n")
        except OSError as e:
            raise TelemetryError(f"Failed to write telemetry to {log_file}: {e}") from e

        logger.debug(f"Recorded telemetry event {event.kind} for {event.toolchain}")
        self.clean_telemetry_dir()

    def clean_telemetry_dir(self) -> int:
        """Remove the oldest log files beyond MAX_TELEMETRY_FILES."""
        logs = sorted(self.telemetry_dir.glob("log-*.json"))
        stale = logs[: max(len(logs) - MAX_TELEMETRY_FILES, 0)]

        for log_file in stale:
            try:
                log_file.unlink()
            except OSError as e:
                raise TelemetryError(f"Failed to remove telemetry log {log_file}: {e}") from e

        return len(stale)


__all__ = ["MAX_TELEMETRY_FILES", "Telemetry", "TelemetryEvent"]
