from __future__ import annotations

import sys
from pathlib import Path

import pytest

from env_manager import (
    DEFAULT_BUILD_COMMAND,
    DEFAULT_NATIVE_DIR,
    FailureMode,
    GuardConfig,
    get_env_config,
    preset_config,
)

ENV_VARS = [
    "BUILD_GUARD_MODULE",
    "BUILD_GUARD_NATIVE_DIR",
    "BUILD_GUARD_BUILD_COMMAND",
    "BUILD_GUARD_CHECK_VERSION",
    "BUILD_GUARD_ON_FAILURE",
    "BUILD_GUARD_DISTRIBUTION",
    "BUILD_GUARD_EXPECTED_VERSION",
    "BUILD_GUARD_FAIL_ON_BUILD_ERROR",
    "BUILD_GUARD_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = get_env_config()

    assert config == GuardConfig()
    assert config.native_dir == DEFAULT_NATIVE_DIR
    assert config.native_dir.name == "native"
    assert config.native_dir.parent == Path(__file__).resolve().parent.parent
    assert config.build_command == DEFAULT_BUILD_COMMAND
    assert config.build_command[0] == sys.executable
    assert config.on_failure is FailureMode.REBUILD
    assert not config.check_version
    assert not config.fail_on_build_error


def test_reads_environment(clean_env, tmp_path):
    clean_env.setenv("BUILD_GUARD_MODULE", "my_native")
    clean_env.setenv("BUILD_GUARD_NATIVE_DIR", str(tmp_path))
    clean_env.setenv("BUILD_GUARD_BUILD_COMMAND", "npm run 'build native'")
    clean_env.setenv("BUILD_GUARD_CHECK_VERSION", "yes")
    clean_env.setenv("BUILD_GUARD_ON_FAILURE", "EXIT")
    clean_env.setenv("BUILD_GUARD_EXPECTED_VERSION", "2.0.0")
    clean_env.setenv("BUILD_GUARD_FAIL_ON_BUILD_ERROR", "1")
    clean_env.setenv("BUILD_GUARD_LOG_LEVEL", "debug")

    config = get_env_config()

    assert config.module_name == "my_native"
    assert config.native_dir == tmp_path
    assert config.build_command == ("npm", "run", "build native")
    assert config.check_version
    assert config.on_failure is FailureMode.EXIT
    assert config.expected_version == "2.0.0"
    assert config.fail_on_build_error
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("raw", ["0", "false", "OFF", "no", ""])
def test_false_values(clean_env, raw):
    clean_env.setenv("BUILD_GUARD_CHECK_VERSION", raw)

    assert get_env_config().check_version is False


def test_invalid_values_fall_back(clean_env):
    clean_env.setenv("BUILD_GUARD_ON_FAILURE", "explode")
    clean_env.setenv("BUILD_GUARD_BUILD_COMMAND", "   ")

    config = get_env_config()

    assert config.on_failure is FailureMode.REBUILD
    assert config.build_command == DEFAULT_BUILD_COMMAND


def test_config_is_cached(clean_env):
    first = get_env_config()
    clean_env.setenv("BUILD_GUARD_MODULE", "changed")

    assert get_env_config() is first


@pytest.mark.parametrize("name,check,mode", [
    ("rebuild", False, FailureMode.REBUILD),
    ("exit-on-missing", False, FailureMode.EXIT),
    ("version-checked", True, FailureMode.REBUILD),
])
def test_presets(name, check, mode, tmp_path):
    base = GuardConfig(module_name="x", native_dir=tmp_path, check_version=not check)

    config = preset_config(name, base)

    assert config.check_version is check
    assert config.on_failure is mode
    assert config.module_name == "x"
    assert config.native_dir == tmp_path


def test_unknown_preset():
    with pytest.raises(ValueError):
        preset_config("sometimes")


@pytest.mark.parametrize("raw,expected", [
    ("verbose", "INFO"),
    ("BASIC_FORMAT", "INFO"),
    ("warning", "WARNING"),
    ("Debug", "DEBUG"),
])
def test_log_level_validated(clean_env, raw, expected):
    clean_env.setenv("BUILD_GUARD_LOG_LEVEL", raw)

    assert get_env_config().log_level == expected
