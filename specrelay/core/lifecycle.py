"""Lifecycle state machine turning runner callbacks into normalized events.

The adapter keeps a stack of open suites so every event can name its
parent, counts failed tests, measures durations and recovers from one
known runner contract violation: a suite that fails before any of its
tests started.
"""

import logging
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

from .models import (
    NormalizedEvent,
    RunContext,
    RunnerResult,
    SuiteFrame,
    unique_identifier,
)
from .ports import LifecycleListenerPort, ReporterSinkPort
from .stack import StackReconciler

UNKNOWN_TEST = "<unknown test>"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def event_name_for_status(status: str) -> str:
    """Derive the test event name from a final status.

    A trailing "ed" is dropped: "failed" -> "test:fail",
    "passed" -> "test:pass". Other statuses are kept as they are.
    """
    if status.endswith("ed"):
        status = status[: -len("ed")]
    return f"test:{status}"


class LifecycleAdapter(LifecycleListenerPort):
    """Normalizes suite/test callbacks and publishes them to a sink.

    One instance serves exactly one execution worker. All handlers are
    synchronous and publish in callback order.
    """

    def __init__(
        self,
        sink: ReporterSinkPort,
        correlation_id: str,
        environment_info: Any = None,
        spec_files: Sequence[str] = (),
        clean_stack: Any = True,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize the adapter.

        Args:
            sink: Where normalized events are published.
            correlation_id: Identifier of the execution worker.
            environment_info: Opaque metadata attached to every event.
            spec_files: Spec files handled by this worker.
            clean_stack: Filter noise from failure traces. Anything that is
                not a bool falls back to True.
            logger: Logger for contract warnings (defaults to module logger).
            clock: Source of timestamps.
        """
        self.sink = sink
        self.context = RunContext(
            correlation_id=correlation_id,
            environment_info=environment_info,
            spec_files=tuple(spec_files),
            clean_stack_enabled=clean_stack if isinstance(clean_stack, bool) else True,
        )
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock

    def on_suite_start(self, suite: RunnerResult) -> None:
        now = self._clock()
        self.context.current_suite_start_time = now
        suite.kind = "suite"
        suite.start_time = now

        self._emit("suite:start", suite)
        self.context.open_suites.append(
            SuiteFrame(description=suite.description, identifier=suite.identifier)
        )

    def on_test_start(self, test: RunnerResult) -> None:
        now = self._clock()
        self.context.current_test_start_time = now
        test.kind = "test"
        test.start_time = now

        parent = self.context.top_suite
        if parent is None:
            self.logger.warning(
                "No root suite was defined! This can cause reporters to malfunction. "
                "Please always group tests inside a suite."
            )
        else:
            parent.test_count += 1

        self._emit("test:start", test)

    def on_test_end(self, test: RunnerResult) -> None:
        # excluded tests are treated as pending tests
        if test.status == "excluded":
            test.status = "pending"

        if test.failure_records:
            errors = list(test.failure_records)
            if self.context.clean_stack_enabled:
                errors = [StackReconciler.filter_noise(record) for record in errors]
            test.errors = errors
            test.error = errors[0]

        if test.status is None:
            self.logger.warning(
                f"Test {test.description!r} finished without a status"
            )
            event_name = "test:unknown"
        else:
            event_name = event_name_for_status(test.status)

        test.kind = "test"
        test.duration_ms = self._elapsed_ms(self.context.current_test_start_time)

        self._emit(event_name, test)
        if test.status == "failed":
            self.context.failed_count += 1
        self._emit("test:end", test)

    def on_suite_end(self, suite: RunnerResult) -> None:
        frame = self.context.open_suites[-1]

        # an error inside the suite body before any test started:
        # attach it to a placeholder test so it is not lost
        if frame.test_count == 0 and suite.failure_records:
            identifier = f"spec{uuid.uuid4().hex[:12]}"
            self.logger.debug(
                f"Suite {frame.uid!r} failed without tests, reporting {UNKNOWN_TEST}"
            )
            self.on_test_start(
                RunnerResult(
                    description=UNKNOWN_TEST,
                    identifier=identifier,
                    full_title=UNKNOWN_TEST,
                )
            )
            self.on_test_end(
                RunnerResult(
                    description=UNKNOWN_TEST,
                    identifier=identifier,
                    full_title=UNKNOWN_TEST,
                    status="failed",
                    failure_records=list(suite.failure_records),
                )
            )

        self.context.open_suites.pop()
        suite.kind = "suite"
        suite.duration_ms = self._elapsed_ms(self.context.current_suite_start_time)
        self._emit("suite:end", suite)

    def get_failed_count(self) -> int:
        return self.context.failed_count

    def _elapsed_ms(self, started: datetime | None) -> int:
        if started is None:
            return 0
        return int((self._clock() - started).total_seconds() * 1000)

    def _emit(self, event_name: str, payload: RunnerResult) -> None:
        """Build the normalized event for a payload and publish it."""
        parent = self.context.top_suite
        event = NormalizedEvent(
            correlation_id=self.context.correlation_id,
            uid=unique_identifier(payload.description, payload.identifier),
            event_name=event_name,
            title=payload.description,
            full_title=payload.full_title,
            pending=payload.status == "pending",
            pending_reason=payload.pending_reason,
            parent_uid=parent.uid if parent is not None else None,
            kind=payload.kind,
            error=payload.error,
            errors=tuple(payload.errors) if payload.errors is not None else None,
            duration_ms=payload.duration_ms or 0,
            spec_files=self.context.spec_files,
            environment_info=self.context.environment_info,
            start_time=payload.start_time,
        )
        self.sink.publish(event_name, event)
