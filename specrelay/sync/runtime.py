"""Capability probe for an optional coroutine-emulation runtime."""

import importlib
import importlib.metadata
import logging

from specrelay.core.models import RuntimeProbe

logger = logging.getLogger(__name__)

DEFAULT_RUNTIME = "greenlet"


def probe_runtime(module_name: str = DEFAULT_RUNTIME) -> RuntimeProbe:
    """Check whether a runtime module can be loaded.

    Never raises for a missing or broken package; the outcome is
    reported through the returned RuntimeProbe instead.

    Args:
        module_name: Importable module name of the runtime.

    Returns:
        RuntimeProbe with ``version`` when available, ``reason`` otherwise.
    """
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        reason = f"No proper `{module_name}` package could be loaded: {e}"
        logger.debug(reason)
        return RuntimeProbe(available=False, module=module_name, reason=reason)

    version = getattr(module, "__version__", None)
    if version is None:
        try:
            version = importlib.metadata.version(module_name)
        except importlib.metadata.PackageNotFoundError:
            version = "unknown"

    logger.debug(f"Runtime {module_name} {version} available")
    return RuntimeProbe(available=True, module=module_name, version=str(version))
