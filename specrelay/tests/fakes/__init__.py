"""Fake implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without external dependencies:

- FakeReporterSink: Captured events for assertion
"""

from .sink import FakeReporterSink

__all__ = [
    "FakeReporterSink",
]
