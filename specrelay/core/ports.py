"""Port interfaces for the specrelay event adapter.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - ReporterSinkPort: Deliver normalized events to downstream reporters

2. **Driving Ports** (runners call into core)
   - LifecycleListenerPort: Suite and test lifecycle callbacks
"""

from abc import ABC, abstractmethod

from .models import NormalizedEvent, RunnerResult


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class ReporterSinkPort(ABC):
    """Port for handing normalized events to downstream reporters.

    Delivery is fire-and-forget from the core's perspective: there is
    no return value and no acknowledgment. Implementations must not
    buffer events in a way that reorders them.
    """

    @abstractmethod
    def publish(self, event_name: str, payload: NormalizedEvent) -> None:
        """Publish one named event.

        Args:
            event_name: Event name such as "suite:start" or "test:fail".
            payload: Normalized event payload.
        """


# ============================================================================
# DRIVING PORTS (Runners call into core)
# ============================================================================


class LifecycleListenerPort(ABC):
    """Port a test runner drives with its lifecycle callbacks.

    The runner holds a reference to an implementation and invokes the
    handlers in execution order. Every handler runs to completion
    before returning; none of them suspend.
    """

    @abstractmethod
    def on_suite_start(self, suite: RunnerResult) -> None:
        """A suite (describe block, test class, module) has started."""

    @abstractmethod
    def on_test_start(self, test: RunnerResult) -> None:
        """A single test has started."""

    @abstractmethod
    def on_test_end(self, test: RunnerResult) -> None:
        """A single test has finished.

        ``test.status`` carries the final status ("passed", "failed",
        "pending" or "excluded") and ``test.failure_records`` any
        failures observed.
        """

    @abstractmethod
    def on_suite_end(self, suite: RunnerResult) -> None:
        """The innermost open suite has finished.

        ``suite.failure_records`` carries errors raised by the suite's own
        body or fixtures, outside of any test.
        """

    @abstractmethod
    def get_failed_count(self) -> int:
        """Number of tests reported as failed so far."""
