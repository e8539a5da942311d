"""Helpers for acquiring the compiled native module and checking its version.

A single import attempt either yields the live module or raises
``NativeModuleUnavailable``. Missing, broken and out-of-date binaries all end
up in that one exception so callers have a single remediation path.
"""

from __future__ import annotations

import importlib
import importlib.metadata
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Optional

logger = logging.getLogger(__name__)

MISSING = "missing"
LOAD_ERROR = "load-error"
VERSION_MISMATCH = "version-mismatch"


class NativeModuleUnavailable(Exception):
    """The native module cannot be used as-is."""

    def __init__(self, reason: str, message: str, *, actual: Optional[str] = None,
                 expected: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.actual = actual
        self.expected = expected


class ManifestError(Exception):
    """The project's declared version could not be read."""


def _ensure_sys_path(native_dir: Path) -> None:
    """Make the native directory and its build output importable."""
    for path in (native_dir / "build", native_dir):
        path_str = str(path)
        if path_str not in sys.path:
            sys.path.insert(0, path_str)


def load_native_module(module_name: str, native_dir: Path) -> ModuleType:
    """Import ``module_name`` once, looking in ``native_dir`` as well."""
    _ensure_sys_path(Path(native_dir))
    # A build may have dropped the binary into a directory the finders already cached.
    importlib.invalidate_caches()
    try:
        return importlib.import_module(module_name)
    except ModuleNotFoundError as exc:
        # exc.name is the first package that failed, possibly a parent of module_name
        if exc.name != module_name and not module_name.startswith(f"{exc.name}."):
            raise NativeModuleUnavailable(LOAD_ERROR, str(exc)) from exc
        raise NativeModuleUnavailable(MISSING, f"{module_name} is not built") from exc
    except (ImportError, OSError) as exc:
        raise NativeModuleUnavailable(LOAD_ERROR, str(exc)) from exc


def native_version(handle) -> str:
    try:
        return str(handle.version())
    except Exception as exc:
        raise NativeModuleUnavailable(
            LOAD_ERROR, f"version() query failed: {exc}"
        ) from exc


def read_expected_version(distribution: str, override: Optional[str] = None) -> str:
    """Return the version the project declares for itself."""
    if override:
        return override
    try:
        return importlib.metadata.version(distribution)
    except importlib.metadata.PackageNotFoundError as exc:
        raise ManifestError(
            f"distribution {distribution!r} is not installed; "
            "install the project or set BUILD_GUARD_EXPECTED_VERSION"
        ) from exc


def check_version(handle, expected: str) -> str:
    """Compare the handle's version to ``expected`` by exact string equality."""
    actual = native_version(handle)
    if actual != expected:
        raise NativeModuleUnavailable(
            VERSION_MISMATCH,
            f"Native library version mismatch: {actual} != {expected}",
            actual=actual,
            expected=expected,
        )
    logger.debug("native version %s matches manifest", actual)
    return actual


__all__ = [
    "LOAD_ERROR",
    "MISSING",
    "ManifestError",
    "NativeModuleUnavailable",
    "VERSION_MISMATCH",
    "check_version",
    "load_native_module",
    "native_version",
    "read_expected_version",
]
