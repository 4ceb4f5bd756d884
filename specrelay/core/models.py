"""Domain models for the specrelay event adapter.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

import traceback
from dataclasses import dataclass, field
from datetime import datetime
from types import TracebackType
from typing import Any, Literal, TypeAlias

EntityKind: TypeAlias = Literal["suite", "test"]

ExcInfo: TypeAlias = tuple[type[BaseException], BaseException, TracebackType | None]


def format_frames(summary: traceback.StackSummary) -> list[str]:
    """Render frames one per line, outermost first."""
    return [
        f'File "{frame.filename}", line {frame.lineno}, in {frame.name}'
        for frame in summary
    ]


@dataclass
class ErrorRecord:
    """An error as reported to listeners.

    The stack is a newline-joined trace whose first line is the
    "Name: message" header, followed by one line per frame.

    Note: This dataclass is intentionally mutable; stack cleaning
    rewrites ``stack`` in place.
    """

    name: str = "Error"
    message: str = ""
    stack: str | None = None

    @classmethod
    def from_exc_info(cls, exc_info: ExcInfo) -> "ErrorRecord":
        """Build a record from a ``sys.exc_info()`` style triple."""
        exc_type, exc, tb = exc_info
        name = exc_type.__name__
        message = str(exc)
        lines = [f"{name}: {message}" if message else name]
        if tb is not None:
            lines.extend(format_frames(traceback.extract_tb(tb)))
        return cls(name=name, message=message, stack="\n".join(lines))

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorRecord":
        """Build a record from a raised exception."""
        return cls.from_exc_info((type(exc), exc, exc.__traceback__))

    @classmethod
    def capture(cls, message: str = "", skip: int = 1) -> "ErrorRecord":
        """Record the current call stack as a call-site trace.

        Args:
            message: Message for the header line.
            skip: Number of innermost frames to leave out (1 drops capture itself).
        """
        summary = traceback.extract_stack()
        if skip:
            summary = traceback.StackSummary.from_list(summary[:-skip])
        header = f"Error: {message}" if message else "Error"
        return cls(message=message, stack="\n".join([header, *format_frames(summary)]))

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "message": self.message, "stack": self.stack}


@dataclass
class RunnerResult:
    """A suite or test as delivered by the runner's lifecycle callbacks.

    The runner fills in the descriptive fields; the adapter stamps
    ``kind``, ``start_time``, ``duration_ms``, ``error`` and ``errors``
    onto the same object as it goes.
    """

    description: str
    identifier: str
    full_title: str | None = None
    status: str | None = None
    failure_records: list[ErrorRecord] = field(default_factory=list)
    pending_reason: str | None = None

    kind: EntityKind | None = None
    start_time: datetime | None = None
    duration_ms: int | None = None
    error: ErrorRecord | None = None
    errors: list[ErrorRecord] | None = None


@dataclass
class SuiteFrame:
    """One currently-open suite on the adapter's stack."""

    description: str
    identifier: str
    test_count: int = 0

    @property
    def uid(self) -> str:
        return unique_identifier(self.description, self.identifier)


@dataclass(frozen=True)
class NormalizedEvent:
    """The uniform payload handed to every reporter sink.

    ``error`` duplicates ``errors[0]`` for listeners written before
    multi-error reporting existed; both fields are always populated
    together.
    """

    correlation_id: str
    uid: str
    event_name: str
    title: str
    full_title: str | None
    pending: bool
    pending_reason: str | None
    parent_uid: str | None
    kind: EntityKind | None
    error: ErrorRecord | None
    errors: tuple[ErrorRecord, ...] | None
    duration_ms: int
    spec_files: tuple[str, ...]
    environment_info: Any
    start_time: datetime | None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable mapping."""
        return {
            "correlation_id": self.correlation_id,
            "uid": self.uid,
            "event": self.event_name,
            "title": self.title,
            "full_title": self.full_title,
            "pending": self.pending,
            "pending_reason": self.pending_reason,
            "parent_uid": self.parent_uid,
            "type": self.kind,
            "error": self.error.to_dict() if self.error else None,
            "errors": [e.to_dict() for e in self.errors] if self.errors is not None else None,
            "duration_ms": self.duration_ms,
            "spec_files": list(self.spec_files),
            "environment_info": self.environment_info,
            "start_time": self.start_time.isoformat() if self.start_time else None,
        }


@dataclass
class RunContext:
    """Per-adapter state for one execution worker."""

    correlation_id: str
    environment_info: Any = None
    spec_files: tuple[str, ...] = ()
    clean_stack_enabled: bool = True
    open_suites: list[SuiteFrame] = field(default_factory=list)
    failed_count: int = 0
    current_suite_start_time: datetime | None = None
    current_test_start_time: datetime | None = None

    @property
    def top_suite(self) -> SuiteFrame | None:
        """The innermost open suite, if any."""
        if self.open_suites:
            return self.open_suites[-1]
        return None


@dataclass(frozen=True)
class RuntimeProbe:
    """Outcome of probing for an optional coroutine-emulation runtime."""

    available: bool
    module: str
    version: str | None = None
    reason: str | None = None

    def __post_init__(self) -> None:
        """Validate that the result is tagged consistently."""
        if self.available and self.version is None:
            raise ValueError("available probe must carry a version")
        if not self.available and not self.reason:
            raise ValueError("unavailable probe must carry a reason")


def unique_identifier(description: str, identifier: str) -> str:
    """Identity of a suite or test: description followed by runner id."""
    return f"{description}{identifier}"
