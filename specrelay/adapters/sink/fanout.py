"""Fan-out reporter sink forwarding every event to several sinks."""

from collections.abc import Sequence

from specrelay.core.models import NormalizedEvent
from specrelay.core.ports import ReporterSinkPort


class FanOutSinkAdapter(ReporterSinkPort):
    """Publishes each event to every wrapped sink, in order."""

    def __init__(self, sinks: Sequence[ReporterSinkPort]):
        if not sinks:
            raise ValueError("FanOutSinkAdapter requires at least one sink")
        self.sinks = list(sinks)

    def publish(self, event_name: str, payload: NormalizedEvent) -> None:
        for sink in self.sinks:
            sink.publish(event_name, payload)

    def close(self) -> None:
        """Close wrapped sinks that hold resources."""
        for sink in self.sinks:
            if hasattr(sink, "close"):
                sink.close()
