"""Core domain logic for the specrelay event adapter.

This package contains zero external dependencies and represents
the lifecycle state machine and stack trace handling. Sinks and
runner integrations are handled by the adapters package.
"""

from .models import (
    EntityKind,
    ErrorRecord,
    NormalizedEvent,
    RunContext,
    RunnerResult,
    RuntimeProbe,
    SuiteFrame,
)

__all__ = [
    "EntityKind",
    "ErrorRecord",
    "NormalizedEvent",
    "RunContext",
    "RunnerResult",
    "RuntimeProbe",
    "SuiteFrame",
]
