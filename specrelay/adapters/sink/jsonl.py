"""JSON lines reporter sink.

Implements ReporterSinkPort by appending one JSON record per event to
a file, suitable for later replay or ingestion by other tools.
"""

import json
import logging
from pathlib import Path

from specrelay.core.models import NormalizedEvent
from specrelay.core.ports import ReporterSinkPort

logger = logging.getLogger(__name__)


class JsonLinesSinkAdapter(ReporterSinkPort):
    """Appends events to a JSON lines file."""

    def __init__(self, path: str):
        """Initialize JSON lines sink.

        Args:
            path: File to append to. Parent directories are created.

        Raises:
            ValueError: If path points to an existing directory.
            OSError: If the parent directory cannot be created.
        """
        self.path = Path(path).resolve()

        if self.path.is_dir():
            raise ValueError(f"path must be a file, got directory: {path}")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OSError(f"Failed to create directory {self.path.parent}: {e}") from e

    def publish(self, event_name: str, payload: NormalizedEvent) -> None:
        record = {"event": event_name, "payload": payload.to_dict()}
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, default=str) + "\n")

    def read_events(self) -> list[dict]:
        """Load all records written so far."""
        if not self.path.exists():
            return []
        with self.path.open(encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
