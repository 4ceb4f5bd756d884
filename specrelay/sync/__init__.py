"""Compatibility layer for deferred commands.

Frames from this package are treated as noise by the stack reconciler,
so traces reported to users point at their own code.
"""

from .deferred import CommandError, preserve_call_site, settle
from .runtime import probe_runtime

__all__ = [
    "CommandError",
    "preserve_call_site",
    "probe_runtime",
    "settle",
]
