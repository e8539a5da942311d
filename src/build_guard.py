"""Build the native module for the current platform if it can't be imported.

The guard makes at most one import attempt and at most one build invocation
per run. A usable module ends the run silently; anything else (missing binary,
load error, version skew) prints a notice and, depending on the configured
failure mode, either rebuilds or aborts.
"""

from __future__ import annotations

import enum
import logging
import sys
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

from env_manager import FailureMode, GuardConfig
from native_build import BuildError, BuildResult, BuildRunner, SubprocessBuildRunner
from native_loader import (
    VERSION_MISMATCH,
    NativeModuleUnavailable,
    check_version,
    load_native_module,
    read_expected_version,
)

logger = logging.getLogger(__name__)

ABORT_EXIT_CODE = -1


class GuardOutcome(str, enum.Enum):
    OK = "ok"
    REBUILT = "rebuilt"
    ABORTED = "aborted"


@dataclass
class GuardReport:
    outcome: GuardOutcome
    reason: Optional[str] = None
    build_result: Optional[BuildResult] = None
    exit_code: int = 0


def _acquire(config: GuardConfig, loader, version_reader) -> None:
    handle = loader(config.module_name, config.native_dir)
    if config.check_version:
        expected = version_reader(config.distribution, config.expected_version)
        check_version(handle, expected)


def _print_notice(exc: NativeModuleUnavailable, out: TextIO) -> None:
    if exc.reason == VERSION_MISMATCH:
        print(str(exc), file=out)
    # Blank line so the notice doesn't extend a line left by the installer.
    print(file=out)
    print(f"No current binary was found for the platform {sys.platform}.", file=out)


def _remediate(config: GuardConfig, runner: BuildRunner, out: TextIO, err: TextIO) -> BuildResult:
    print("A binary will now be built for this platform. This may take a while.", file=out)
    out.flush()
    result = runner.run(config.build_command, config.native_dir)
    if result.stdout:
        print(result.stdout, file=out)
    if result.stderr:
        print(result.stderr, file=err)
    if not result.ok:
        if config.fail_on_build_error:
            raise BuildError(f"build command exited with status {result.returncode}", result)
        logger.warning("build command exited with status %d", result.returncode)
    return result


def run_guard(
    config: GuardConfig,
    *,
    loader: Callable = load_native_module,
    runner: Optional[BuildRunner] = None,
    version_reader: Callable = read_expected_version,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> GuardReport:
    """Check the native module and remediate according to ``config``."""
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr

    try:
        _acquire(config, loader, version_reader)
    except NativeModuleUnavailable as exc:
        logger.debug("native module unusable (%s): %s", exc.reason, exc)
        _print_notice(exc, out)
        reason = exc.reason
    else:
        logger.debug("native module %s is usable", config.module_name)
        return GuardReport(GuardOutcome.OK)

    if config.on_failure is FailureMode.EXIT:
        out.flush()
        return GuardReport(GuardOutcome.ABORTED, reason=reason, exit_code=ABORT_EXIT_CODE)

    result = _remediate(config, runner or SubprocessBuildRunner(), out, err)
    return GuardReport(GuardOutcome.REBUILT, reason=reason, build_result=result)


__all__ = ["ABORT_EXIT_CODE", "GuardOutcome", "GuardReport", "run_guard"]
