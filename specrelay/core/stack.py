"""Stack trace cleaning and reconciliation.

This module removes frames that carry no diagnostic value for the
user (installed third-party packages, the coroutine compatibility
layer, separator lines) and merges the trace of a failed deferred
command with the trace captured where that command was issued.
"""

import re
from typing import Any

from .models import ErrorRecord

NOISE_PATTERN = re.compile(
    r"(site-packages|dist-packages)[/\\]\w*"
    r"|specrelay[/\\]sync[/\\]"
    r"|- - - - -"
)


class StackReconciler:
    """Filters and merges stack traces.

    No external dependencies, pure functions over error records.
    All methods are static as the class carries no state.
    """

    @staticmethod
    def is_noise(line: str) -> bool:
        """Does this trace line come from internal or compatibility code?"""
        return NOISE_PATTERN.search(line) is not None

    @staticmethod
    def filter_noise(error: ErrorRecord) -> ErrorRecord:
        """Remove noise lines from the record's stack.

        The record is modified in place and returned. A record without a
        stack is returned untouched.
        """
        if not error.stack:
            return error

        lines = error.stack.split("\n")
        error.stack = "\n".join(
            line for line in lines if not StackReconciler.is_noise(line)
        )
        return error

    @staticmethod
    def merge_and_clean(command_error: Any, saved_error: ErrorRecord) -> ErrorRecord:
        """Merge a command failure with the trace saved at its call site.

        Args:
            command_error: What the deferred command failed with. An
                ErrorRecord or exception contributes its name, message and
                stack; any other value becomes the message of a plain "Error".
            saved_error: Record captured where the command was issued.

        Returns:
            A new ErrorRecord whose stack holds the command-side frames
            followed by the call-site frames, noise removed and each line
            kept only at its first occurrence.

        Raises:
            ValueError: If saved_error has no stack.
        """
        stack: str | None
        if isinstance(command_error, ErrorRecord):
            name, message, stack = command_error.name, command_error.message, command_error.stack
        elif isinstance(command_error, BaseException):
            record = ErrorRecord.from_exception(command_error)
            name, message, stack = record.name, record.message, record.stack
        else:
            name = "Error"
            message = "" if command_error is None else str(command_error)
            stack = None

        merged = ErrorRecord(name=name, message=message)

        if not saved_error.stack:
            raise ValueError("saved_error must carry a call-site stack trace")
        lines = saved_error.stack.split("\n")

        if stack:
            # double wrapping leaves "Name: Name: message" in the header
            stack = stack.replace(f"{name}: {name}", name, 1)
            # the command header supersedes the call-site header
            lines[0] = ""
            lines = stack.split("\n") + lines

        unique: list[str] = []
        for line in lines:
            if StackReconciler.is_noise(line) or line in unique:
                continue
            unique.append(line)

        merged.stack = "\n".join(unique).strip()
        return merged
