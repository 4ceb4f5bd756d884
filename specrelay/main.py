"""Composition root for the specrelay event adapter.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Sink instantiation
- Lifecycle adapter initialization
- Command selection (run, probe)
"""

import argparse
import json
import logging
import sys
import unittest
from collections.abc import Sequence

from specrelay.adapters.runner.unittest_result import LifecycleTestResult
from specrelay.adapters.sink.fanout import FanOutSinkAdapter
from specrelay.adapters.sink.http import HttpSinkAdapter
from specrelay.adapters.sink.jsonl import JsonLinesSinkAdapter
from specrelay.adapters.sink.stdout import StdoutSinkAdapter
from specrelay.config import Settings, load_settings
from specrelay.core.lifecycle import LifecycleAdapter
from specrelay.core.ports import ReporterSinkPort
from specrelay.sync.runtime import DEFAULT_RUNTIME, probe_runtime

logger = logging.getLogger(__name__)


class JsonFormatter(logging.Formatter):
    """Render each log record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )


def build_sink(settings: Settings) -> ReporterSinkPort:
    """Instantiate the configured reporter sinks.

    A single backend is returned as is; several are wrapped in a
    FanOutSinkAdapter in configuration order.
    """
    sinks: list[ReporterSinkPort] = []
    for backend in settings.sink_backends:
        if backend == "stdout":
            sinks.append(StdoutSinkAdapter(verbose=settings.sink_verbose))
            logger.info("Reporter sink: stdout")
        elif backend == "jsonl":
            sinks.append(JsonLinesSinkAdapter(settings.sink_jsonl_path))
            logger.info(f"Reporter sink: JSON lines ({settings.sink_jsonl_path})")
        elif backend == "http":
            sinks.append(
                HttpSinkAdapter(
                    base_url=settings.sink_http_url,
                    endpoint=settings.sink_http_endpoint,
                    timeout_seconds=settings.sink_http_timeout_seconds,
                )
            )
            logger.info(f"Reporter sink: HTTP ({settings.sink_http_url})")
        else:
            raise ValueError(f"Unknown sink backend: {backend}")

    if len(sinks) == 1:
        return sinks[0]
    return FanOutSinkAdapter(sinks)


def build_adapter(settings: Settings, sink: ReporterSinkPort) -> LifecycleAdapter:
    """Wire the lifecycle adapter to a sink using settings."""
    return LifecycleAdapter(
        sink=sink,
        correlation_id=settings.correlation_id,
        environment_info=settings.environment_info,
        spec_files=settings.spec_files,
        clean_stack=settings.clean_stack,
        logger=logging.getLogger("specrelay.lifecycle"),
    )


def run_tests(settings: Settings, start_dir: str, pattern: str) -> int:
    """Discover and run unittest tests, relaying events to the sinks.

    Returns:
        Process exit code: 0 if every test passed, 1 otherwise.
    """
    sink = build_sink(settings)
    adapter = build_adapter(settings, sink)

    try:
        suite = unittest.TestLoader().discover(start_dir, pattern=pattern)
        result = LifecycleTestResult(adapter)
        result.startTestRun()
        try:
            suite.run(result)
        finally:
            result.stopTestRun()
    finally:
        if hasattr(sink, "close"):
            sink.close()

    failed = adapter.get_failed_count()
    logger.info(f"Run finished: {result.testsRun} tests, {failed} failed")
    return 0 if failed == 0 and result.wasSuccessful() else 1


def probe(module_name: str) -> int:
    """Print the runtime probe result as JSON."""
    result = probe_runtime(module_name)
    print(
        json.dumps(
            {
                "available": result.available,
                "module": result.module,
                "version": result.version,
                "reason": result.reason,
            },
            indent=2,
        )
    )
    return 0 if result.available else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="specrelay",
        description="Relay test lifecycle events to reporter sinks.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run unittest tests and relay their events")
    run_parser.add_argument("start_dir", nargs="?", default=".", help="Directory to discover tests in")
    run_parser.add_argument("-p", "--pattern", default="test*.py", help="Test file pattern")
    run_parser.add_argument("--env-file", default=None, help="Path to a .env file")

    probe_parser = subparsers.add_parser("probe", help="Check for the coroutine runtime")
    probe_parser.add_argument("--module", default=DEFAULT_RUNTIME, help="Runtime module name")

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Application entry point.

    Exit codes:
        0: Success (all tests passed, or runtime available)
        1: Failed tests, unavailable runtime, or fatal error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    args = build_parser().parse_args(argv)

    try:
        if args.command == "probe":
            sys.exit(probe(args.module))

        settings = load_settings(args.env_file)
        configure_logging(settings.log_level, settings.log_format)
        sys.exit(run_tests(settings, args.start_dir, args.pattern))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user (SIGINT)")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
