from __future__ import annotations

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = REPO_ROOT / "src"

for path in (REPO_ROOT, SRC_DIR):
    path_str = str(path)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from env_manager import GuardConfig, get_env_config  # noqa: E402
from fakes import FakeHandle, RecordingRunner  # noqa: E402
from native_loader import MISSING, NativeModuleUnavailable  # noqa: E402


@pytest.fixture(autouse=True)
def _clear_env_cache():
    get_env_config.cache_clear()
    yield
    get_env_config.cache_clear()


@pytest.fixture
def guard_config(tmp_path):
    """Config pointing at a throwaway native dir with a harmless command."""
    native_dir = tmp_path / "native"
    native_dir.mkdir()
    return GuardConfig(
        module_name="guard_native_fake",
        native_dir=native_dir,
        build_command=("make", "native"),
        distribution="native-build-guard",
    )


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def loader_for():
    """Return a loader that yields ``handle`` or raises ``error``, counting calls."""

    def _make(handle=None, error=None):
        calls = []

        def _loader(module_name, native_dir):
            calls.append((module_name, native_dir))
            if error is not None:
                raise error
            return handle

        _loader.calls = calls
        return _loader

    return _make


@pytest.fixture
def missing_error():
    return NativeModuleUnavailable(MISSING, "guard_native_fake is not built")


@pytest.fixture
def fake_handle():
    return FakeHandle
