"""
Plain-text diagnostic trail of arbiter events.

Each event becomes one timestamped line appended to a file. Writing is best
effort: a missing directory or a read-only path only produces a warning.
"""

from datetime import datetime
from pathlib import Path
from typing import Union

from .events import ArbiterEvent
from ..core.logging import get_logger


class DiagnosticLog:
    """Appends arbiter events to a text file, one line per event."""

    def __init__(self, path: Union[str, Path]):
        self.logger = get_logger("diagnostics")
        self.path = Path(path)
        self.failures = 0

    @staticmethod
    def format_event(event: ArbiterEvent) -> str:
        timestamp = datetime.fromtimestamp(event.timestamp).isoformat(timespec="milliseconds")
        return f"{timestamp} {event.event_type.value} index={event.index}\n"

    def record(self, event: ArbiterEvent) -> bool:
        """
        Append ``event`` to the log file.

        Args:
            event: Event to record

        Returns:
            True if the line was written
        """
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(self.format_event(event))
            return True
        except (OSError, ValueError) as e:
            self.failures += 1
            self.logger.warning("Could not write diagnostic log", extra={
                "path": str(self.path),
                "error": str(e)
            })
            return False
