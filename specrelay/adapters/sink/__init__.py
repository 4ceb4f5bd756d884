"""Reporter sinks receiving normalized events.

Implementations support multiple output channels:
- Stdout (one line per event)
- JSON lines file (one record per event)
- HTTP (POST per event to a reporter service)
- Fan-out (several sinks at once)
"""

from .fanout import FanOutSinkAdapter
from .http import HttpSinkAdapter
from .jsonl import JsonLinesSinkAdapter
from .stdout import StdoutSinkAdapter

__all__ = [
    "FanOutSinkAdapter",
    "HttpSinkAdapter",
    "JsonLinesSinkAdapter",
    "StdoutSinkAdapter",
]
