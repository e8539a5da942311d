from __future__ import annotations

import enum
import logging
import os
import shlex
import sys
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

_FALSE_VALUES = {"0", "false", "off", "no", ""}


class FailureMode(str, enum.Enum):
  REBUILD = "rebuild"
  EXIT = "exit"


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
  raw = os.getenv(name)
  if raw is None or not raw.strip():
    return default
  return raw.strip()


def _env_bool(name: str, default: bool) -> bool:
  raw = os.getenv(name)
  if raw is None:
    return default
  return raw.strip().lower() not in _FALSE_VALUES


def _env_failure_mode(name: str, default: FailureMode) -> FailureMode:
  try:
    return FailureMode(os.getenv(name, default.value).strip().lower())
  except ValueError:
    return default


def _env_log_level(name: str, default: str) -> str:
  level = (_env_str(name, default) or default).upper()
  if not isinstance(getattr(logging, level, None), int):
    return default
  return level


def _env_command(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
  raw = os.getenv(name)
  if raw is None or not raw.strip():
    return default
  return tuple(shlex.split(raw))


PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_NATIVE_DIR = PROJECT_ROOT / "native"
DEFAULT_MODULE_NAME = "guard_native"
DEFAULT_DISTRIBUTION = "native-build-guard"
DEFAULT_BUILD_COMMAND = (sys.executable, "setup.py", "build_ext", "--inplace")


@dataclass(frozen=True)
class GuardConfig:
  module_name: str = DEFAULT_MODULE_NAME
  native_dir: Path = DEFAULT_NATIVE_DIR
  build_command: Tuple[str, ...] = DEFAULT_BUILD_COMMAND
  check_version: bool = False
  on_failure: FailureMode = FailureMode.REBUILD
  distribution: str = DEFAULT_DISTRIBUTION
  expected_version: Optional[str] = None
  fail_on_build_error: bool = False
  log_level: str = "INFO"


# Historical variants of the guard, expressed as overrides on a base config.
PRESETS = {
    "rebuild": {"check_version": False, "on_failure": FailureMode.REBUILD},
    "exit-on-missing": {"check_version": False, "on_failure": FailureMode.EXIT},
    "version-checked": {"check_version": True, "on_failure": FailureMode.REBUILD},
}


def preset_config(name: str, base: Optional[GuardConfig] = None) -> GuardConfig:
  """Apply the named preset on top of ``base`` (defaults when omitted)."""
  try:
    overrides = PRESETS[name]
  except KeyError:
    raise ValueError(
        f"unknown preset {name!r}, expected one of {sorted(PRESETS)}"
    ) from None
  return replace(base or GuardConfig(), **overrides)


@lru_cache(maxsize=1)
def get_env_config() -> GuardConfig:
  native_dir = _env_str("BUILD_GUARD_NATIVE_DIR", None)
  return GuardConfig(
      module_name=_env_str("BUILD_GUARD_MODULE", DEFAULT_MODULE_NAME),
      native_dir=Path(native_dir).expanduser() if native_dir else DEFAULT_NATIVE_DIR,
      build_command=_env_command("BUILD_GUARD_BUILD_COMMAND", DEFAULT_BUILD_COMMAND),
      check_version=_env_bool("BUILD_GUARD_CHECK_VERSION", False),
      on_failure=_env_failure_mode("BUILD_GUARD_ON_FAILURE", FailureMode.REBUILD),
      distribution=_env_str("BUILD_GUARD_DISTRIBUTION", DEFAULT_DISTRIBUTION),
      expected_version=_env_str("BUILD_GUARD_EXPECTED_VERSION", None),
      fail_on_build_error=_env_bool("BUILD_GUARD_FAIL_ON_BUILD_ERROR", False),
      log_level=_env_log_level("BUILD_GUARD_LOG_LEVEL", "INFO"),
  )
