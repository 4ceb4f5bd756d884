"""unittest integration.

Implements a ``unittest.TestResult`` that translates unittest's
callbacks into the four lifecycle callbacks of a LifecycleListenerPort.
Suites are derived from the running test's module and class, since
unittest itself reports no suite boundaries.
"""

import itertools
import logging
import re
import sys
import unittest
from typing import Any

from specrelay.core.models import ErrorRecord, ExcInfo, RunnerResult
from specrelay.core.ports import LifecycleListenerPort

logger = logging.getLogger(__name__)

# unittest reports fixture errors as e.g. "setUpClass (pkg.mod.Class)"
FIXTURE_DESCRIPTION = re.compile(r"^(?P<fixture>\w+) \((?P<target>[^)]+)\)")

MODULE_FIXTURES = {"setUpModule", "tearDownModule"}

SuitePath = list[tuple[str, str]]


def _trim_unittest_frames(err: ExcInfo) -> ExcInfo:
    """Drop leading traceback frames that belong to unittest itself."""
    exc_type, exc, tb = err
    while tb is not None and "__unittest" in tb.tb_frame.f_globals:
        tb = tb.tb_next
    return exc_type, exc, tb


class LifecycleTestResult(unittest.TestResult):
    """Drives a LifecycleListenerPort from a unittest run.

    Tests are grouped into a module suite containing one suite per test
    class. Statuses map as follows: success and expected failure are
    "passed"; failure, error, unexpected success and failing subtests are
    "failed"; skip decorators are "excluded" and runtime skips "pending".
    A SkipTest raised by a class or module fixture is reported as one
    pending test named after the fixture.
    """

    def __init__(
        self,
        listener: LifecycleListenerPort,
        stream: Any = None,
        descriptions: bool | None = None,
        verbosity: int = 0,
    ):
        super().__init__(stream, descriptions, verbosity)
        self.listener = listener
        self._suites: list[tuple[str, RunnerResult]] = []
        self._current: RunnerResult | None = None
        self._ids = itertools.count()

    # ------------------------------------------------------------------
    # unittest callbacks
    # ------------------------------------------------------------------

    def startTest(self, test: unittest.TestCase) -> None:
        super().startTest(test)
        self._enter(self._suite_path(test))
        self._current = RunnerResult(
            description=getattr(test, "_testMethodName", str(test)),
            identifier=self._next_id("spec"),
            full_title=test.id(),
        )
        self.listener.on_test_start(self._current)

    def stopTest(self, test: unittest.TestCase) -> None:
        super().stopTest(test)
        if self._current is not None:
            self.listener.on_test_end(self._current)
            self._current = None

    def stopTestRun(self) -> None:
        super().stopTestRun()
        self._enter([])

    def addSuccess(self, test: unittest.TestCase) -> None:
        super().addSuccess(test)
        self._set_status("passed")

    def addExpectedFailure(self, test: unittest.TestCase, err: ExcInfo) -> None:
        super().addExpectedFailure(test, err)
        self._set_status("passed")

    def addFailure(self, test: unittest.TestCase, err: ExcInfo) -> None:
        super().addFailure(test, err)
        self._record_failure(ErrorRecord.from_exc_info(_trim_unittest_frames(err)))

    def addError(self, test: Any, err: ExcInfo) -> None:
        super().addError(test, err)
        record = ErrorRecord.from_exc_info(_trim_unittest_frames(err))
        if isinstance(test, unittest.TestCase):
            self._record_failure(record)
        else:
            self._record_fixture_failure(str(test), record)

    def addUnexpectedSuccess(self, test: unittest.TestCase) -> None:
        super().addUnexpectedSuccess(test)
        self._record_failure(
            ErrorRecord(
                name="UnexpectedSuccess",
                message=f"{test.id()} was expected to fail",
            )
        )

    def addSubTest(self, test: unittest.TestCase, subtest: Any, err: ExcInfo | None) -> None:
        super().addSubTest(test, subtest, err)
        if err is not None:
            self._record_failure(ErrorRecord.from_exc_info(_trim_unittest_frames(err)))

    def addSkip(self, test: Any, reason: str) -> None:
        super().addSkip(test, reason)
        if not isinstance(test, unittest.TestCase):
            self._record_fixture_skip(str(test), reason)
            return
        if self._current is None:
            return
        self._current.status = "excluded" if self._is_skip_declared(test) else "pending"
        self._current.pending_reason = reason

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    def _set_status(self, status: str) -> None:
        # a failing subtest already decided the outcome
        if self._current is not None and self._current.status != "failed":
            self._current.status = status

    def _record_failure(self, record: ErrorRecord) -> None:
        if self._current is None:
            logger.warning(f"Failure reported outside of a test: {record.name}: {record.message}")
            return
        self._current.status = "failed"
        self._current.failure_records.append(record)

    def _record_fixture_failure(self, description: str, record: ErrorRecord) -> None:
        """Attach a class or module fixture error to its suite."""
        path = self._fixture_path(description)
        if path is None:
            if not self._suites:
                logger.warning(f"Cannot attribute fixture error {description!r} to a suite")
                return
        else:
            self._enter(path)

        self._suites[-1][1].failure_records.append(record)

    def _record_fixture_skip(self, description: str, reason: str) -> None:
        """Report a SkipTest raised by a class or module fixture as a pending test."""
        path = self._fixture_path(description)
        if path is None:
            logger.warning(f"Cannot attribute fixture skip {description!r} to a suite")
            return

        self._enter(path)
        skipped = RunnerResult(
            description=FIXTURE_DESCRIPTION.match(description)["fixture"],
            identifier=self._next_id("spec"),
            full_title=description,
            status="pending",
            pending_reason=reason,
        )
        self.listener.on_test_start(skipped)
        self.listener.on_test_end(skipped)

    def _fixture_path(self, description: str) -> SuitePath | None:
        match = FIXTURE_DESCRIPTION.match(description)
        if match is None:
            return None
        target = match["target"]
        if match["fixture"] in MODULE_FIXTURES:
            return [(target, target)]
        module = self._owning_module(target)
        return [(module, module), (target, target[len(module) + 1:])]

    @staticmethod
    def _owning_module(class_path: str) -> str:
        """Longest imported module prefix of a dotted class path."""
        module = class_path.rpartition(".")[0]
        while module and module not in sys.modules:
            module = module.rpartition(".")[0]
        return module or class_path.rpartition(".")[0]

    @staticmethod
    def _is_skip_declared(test: Any) -> bool:
        """Was the test skipped by a decorator rather than at run time?"""
        method = getattr(test, getattr(test, "_testMethodName", ""), None)
        return bool(
            getattr(type(test), "__unittest_skip__", False)
            or getattr(method, "__unittest_skip__", False)
        )

    @staticmethod
    def _suite_path(test: unittest.TestCase) -> SuitePath:
        cls = type(test)
        module = cls.__module__
        return [(module, module), (f"{module}.{cls.__qualname__}", cls.__qualname__)]

    def _enter(self, path: SuitePath) -> None:
        """Close and open suites so the open stack matches ``path``."""
        common = 0
        for (open_key, _), (key, _) in zip(self._suites, path):
            if open_key != key:
                break
            common += 1

        while len(self._suites) > common:
            _, suite = self._suites.pop()
            self.listener.on_suite_end(suite)

        for key, description in path[common:]:
            suite = RunnerResult(
                description=description,
                identifier=self._next_id("suite"),
                full_title=key,
            )
            self.listener.on_suite_start(suite)
            self._suites.append((key, suite))
