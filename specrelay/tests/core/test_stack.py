"""Tests for stack trace filtering and merging."""

import pytest

from specrelay.core.models import ErrorRecord
from specrelay.core.stack import StackReconciler

USER_FRAME = 'File "/home/dev/project/tests/test_cart.py", line 20, in test_checkout'
HELPER_FRAME = 'File "/home/dev/project/tests/pages/cart.py", line 8, in submit'
LIB_FRAME = 'File "/venv/lib/python3.12/site-packages/httpx/_client.py", line 900, in send'
DIST_FRAME = 'File "/usr/lib/python3/dist-packages/urllib3/connection.py", line 10, in connect'
COMPAT_FRAME = 'File "/home/dev/project/specrelay/sync/deferred.py", line 44, in settle'
WINDOWS_LIB_FRAME = r'File "C:\venv\Lib\site-packages\pluggy\_hooks.py", line 5, in __call__'


# ============================================================================
# filter_noise
# ============================================================================


@pytest.mark.parametrize(
    "line",
    [LIB_FRAME, DIST_FRAME, COMPAT_FRAME, WINDOWS_LIB_FRAME, "- - - - -", "    - - - - - - - -"],
)
def test_noise_lines_are_detected(line: str) -> None:
    assert StackReconciler.is_noise(line)


@pytest.mark.parametrize("line", [USER_FRAME, HELPER_FRAME, "AssertionError: boom", ""])
def test_user_lines_are_not_noise(line: str) -> None:
    assert not StackReconciler.is_noise(line)


def test_filter_noise_removes_noise_lines() -> None:
    """Only user frames and the header survive."""
    error = ErrorRecord(
        name="AssertionError",
        message="boom",
        stack="\n".join(["AssertionError: boom", USER_FRAME, LIB_FRAME, "- - - - -", COMPAT_FRAME, HELPER_FRAME]),
    )

    result = StackReconciler.filter_noise(error)

    assert result.stack == "\n".join(["AssertionError: boom", USER_FRAME, HELPER_FRAME])


def test_filter_noise_mutates_and_returns_same_record() -> None:
    error = ErrorRecord(stack="\n".join(["Error", USER_FRAME, LIB_FRAME]))
    assert StackReconciler.filter_noise(error) is error
    assert LIB_FRAME not in error.stack


def test_filter_noise_without_stack_is_identity() -> None:
    error = ErrorRecord(name="TypeError", message="nope")
    result = StackReconciler.filter_noise(error)
    assert result is error
    assert result.stack is None


def test_filter_noise_is_idempotent() -> None:
    error = ErrorRecord(stack="\n".join(["Error", USER_FRAME, LIB_FRAME, COMPAT_FRAME, HELPER_FRAME]))
    once = StackReconciler.filter_noise(error).stack
    twice = StackReconciler.filter_noise(error).stack
    assert once == twice


# ============================================================================
# merge_and_clean
# ============================================================================


@pytest.fixture
def saved_error() -> ErrorRecord:
    """Call-site record as captured before issuing a command."""
    return ErrorRecord(
        message="",
        stack="\n".join(["Error", USER_FRAME, COMPAT_FRAME, HELPER_FRAME]),
    )


def test_merge_puts_command_frames_first(saved_error: ErrorRecord) -> None:
    """Command-side frames precede call-site frames; the saved header is dropped."""
    command_error = ErrorRecord(
        name="TimeoutError",
        message="element not found",
        stack="\n".join(["TimeoutError: element not found", LIB_FRAME, 'File "/app/server.py", line 3, in find']),
    )

    merged = StackReconciler.merge_and_clean(command_error, saved_error)

    assert merged is not command_error
    assert merged.name == "TimeoutError"
    assert merged.message == "element not found"
    assert merged.stack == "\n".join(
        [
            "TimeoutError: element not found",
            'File "/app/server.py", line 3, in find',
            "",
            USER_FRAME,
            HELPER_FRAME,
        ]
    )


def test_merge_collapses_duplicated_name_prefix(saved_error: ErrorRecord) -> None:
    command_error = ErrorRecord(
        name="TimeoutError",
        message="late",
        stack="TimeoutError: TimeoutError: late\n" + USER_FRAME,
    )

    merged = StackReconciler.merge_and_clean(command_error, saved_error)

    assert merged.stack.split("\n")[0] == "TimeoutError: late"


def test_merge_removes_duplicate_lines_keeping_first(saved_error: ErrorRecord) -> None:
    command_error = ErrorRecord(
        name="Error",
        message="x",
        stack="\n".join(["Error: x", HELPER_FRAME, USER_FRAME]),
    )

    merged = StackReconciler.merge_and_clean(command_error, saved_error)

    assert merged.stack == "Error: x\n" + HELPER_FRAME + "\n" + USER_FRAME


def test_merge_dedup_preserves_first_occurrence_order() -> None:
    """A saved trace A, B, A with no command trace keeps A once, before B."""
    saved = ErrorRecord(stack="A\nB\nA")

    merged = StackReconciler.merge_and_clean("rejected", saved)

    assert merged.stack == "A\nB"


def test_merge_accepts_exceptions(saved_error: ErrorRecord) -> None:
    try:
        raise KeyError("missing")
    except KeyError as e:
        merged = StackReconciler.merge_and_clean(e, saved_error)

    assert merged.name == "KeyError"
    assert merged.message == "'missing'"
    lines = merged.stack.split("\n")
    assert lines[0] == "KeyError: 'missing'"
    assert "test_merge_accepts_exceptions" in lines[1]
    assert USER_FRAME in lines


@pytest.mark.parametrize(
    ("value", "message"),
    [("socket hang up", "socket hang up"), (42, "42"), (None, "")],
)
def test_merge_normalizes_non_error_values(saved_error: ErrorRecord, value: object, message: str) -> None:
    """Non-error rejection values become a plain Error with the value as message."""
    merged = StackReconciler.merge_and_clean(value, saved_error)

    assert merged.name == "Error"
    assert merged.message == message
    # without a command-side trace the call-site header is kept
    assert merged.stack == "\n".join(["Error", USER_FRAME, HELPER_FRAME])


def test_merge_with_command_record_without_stack(saved_error: ErrorRecord) -> None:
    merged = StackReconciler.merge_and_clean(ErrorRecord(name="ValueError", message="bad"), saved_error)

    assert merged.name == "ValueError"
    assert merged.stack.startswith("Error\n")


def test_merge_requires_saved_stack() -> None:
    with pytest.raises(ValueError, match="call-site stack"):
        StackReconciler.merge_and_clean("boom", ErrorRecord(message="no trace"))


def test_merge_output_contains_no_noise(saved_error: ErrorRecord) -> None:
    command_error = ErrorRecord(
        name="Error",
        message="x",
        stack="\n".join(["Error: x", LIB_FRAME, DIST_FRAME, "- - - - -", COMPAT_FRAME]),
    )

    merged = StackReconciler.merge_and_clean(command_error, saved_error)

    assert not any(StackReconciler.is_noise(line) for line in merged.stack.split("\n"))
