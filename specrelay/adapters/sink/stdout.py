"""Stdout reporter sink.

Implements ReporterSinkPort by printing one human-readable line per
event to the terminal.
"""

import json
import logging

from specrelay.core.models import NormalizedEvent
from specrelay.core.ports import ReporterSinkPort

logger = logging.getLogger(__name__)


class StdoutSinkAdapter(ReporterSinkPort):
    """Prints events to stdout."""

    def __init__(self, verbose: bool = False):
        """Initialize stdout sink.

        Args:
            verbose: If True, print the full JSON payload under each line.
        """
        self.verbose = verbose

    def publish(self, event_name: str, payload: NormalizedEvent) -> None:
        print(self._format_line(event_name, payload))
        if self.verbose:
            print(json.dumps(payload.to_dict(), indent=2, default=str))

    @staticmethod
    def _format_line(event_name: str, payload: NormalizedEvent) -> str:
        """Format the summary line for an event."""
        line = f"[{payload.correlation_id}] {event_name:<12} {payload.full_title or payload.title}"

        if event_name.endswith(":end") or event_name in {"test:pass", "test:fail"}:
            line += f" ({payload.duration_ms}ms)"
        if payload.pending and payload.pending_reason:
            line += f" - {payload.pending_reason}"
        if payload.error is not None:
            line += f"\n    {payload.error.name}: {payload.error.message}"

        return line
