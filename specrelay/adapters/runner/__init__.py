"""Runner integrations that drive the lifecycle callbacks."""

from .unittest_result import LifecycleTestResult

__all__ = ["LifecycleTestResult"]
