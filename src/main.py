#!/usr/bin/env python3
"""
Build Guard - entry point

Run as a post-install / pre-use step:
    python src/main.py
    build-guard --preset version-checked

With no arguments the configuration comes from BUILD_GUARD_* environment
variables (see env_manager.py).
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from build_guard import run_guard
from env_manager import PRESETS, FailureMode, GuardConfig, get_env_config, preset_config
from native_build import BuildError
from native_loader import ManifestError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="build-guard",
        description="Build the native module for this platform if it can't be imported.",
    )
    parser.add_argument("--preset", choices=sorted(PRESETS), help="Use a named guard variant")
    parser.add_argument(
        "--check-version",
        dest="check_version",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Compare the module's version() with the project version",
    )
    parser.add_argument(
        "--on-failure",
        choices=[mode.value for mode in FailureMode],
        help="Rebuild the module or exit with an error when it is unusable",
    )
    parser.add_argument("--native-dir", type=Path, help="Directory the build command runs in")
    parser.add_argument("--module", dest="module_name", help="Import name of the native module")
    parser.add_argument(
        "--fail-on-build-error",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Exit with an error when the build command fails",
    )
    return parser


def resolve_config(args: argparse.Namespace, base: GuardConfig) -> GuardConfig:
    config = preset_config(args.preset, base) if args.preset else base
    overrides = {}
    if args.check_version is not None:
        overrides["check_version"] = args.check_version
    if args.on_failure is not None:
        overrides["on_failure"] = FailureMode(args.on_failure)
    if args.native_dir is not None:
        overrides["native_dir"] = args.native_dir.expanduser().resolve()
    if args.module_name:
        overrides["module_name"] = args.module_name
    if args.fail_on_build_error is not None:
        overrides["fail_on_build_error"] = args.fail_on_build_error
    return replace(config, **overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = resolve_config(args, get_env_config())

    logging.basicConfig(level=config.log_level, stream=sys.stdout)

    try:
        report = run_guard(config)
    except ManifestError as exc:
        print(f"Could not read the project version: {exc}", file=sys.stderr)
        return 1
    except BuildError as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        return 1

    logger.debug("guard finished: %s", report.outcome.value)
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
