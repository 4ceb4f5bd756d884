"""Tests for the coroutine runtime capability probe."""

import sys
import types

import pytest

from specrelay.sync.runtime import probe_runtime


def test_probe_reports_available_module_with_version(monkeypatch: pytest.MonkeyPatch) -> None:
    module = types.ModuleType("fake_runtime")
    module.__version__ = "4.0.1"
    monkeypatch.setitem(sys.modules, "fake_runtime", module)

    result = probe_runtime("fake_runtime")

    assert result.available is True
    assert result.module == "fake_runtime"
    assert result.version == "4.0.1"
    assert result.reason is None


def test_probe_without_version_metadata(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "fake_runtime_bare", types.ModuleType("fake_runtime_bare"))

    result = probe_runtime("fake_runtime_bare")

    assert result.available is True
    assert result.version == "unknown"


def test_probe_reports_missing_module_without_raising() -> None:
    result = probe_runtime("specrelay_no_such_runtime")

    assert result.available is False
    assert result.version is None
    assert "No proper `specrelay_no_such_runtime` package could be loaded" in result.reason


def test_probe_reports_broken_module(monkeypatch: pytest.MonkeyPatch) -> None:
    # a None entry in sys.modules makes the import fail
    monkeypatch.setitem(sys.modules, "fake_runtime_broken", None)

    result = probe_runtime("fake_runtime_broken")

    assert result.available is False
    assert "fake_runtime_broken" in result.reason
