"""Runs the external build command for the native module."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    command: Tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class BuildError(Exception):
    def __init__(self, message: str, result: Optional[BuildResult] = None):
        super().__init__(message)
        self.result = result


class BuildRunner(Protocol):
    def run(self, command: Sequence[str], cwd: Path) -> BuildResult:
        ...


class SubprocessBuildRunner:
    """Blocking build invocation; waits for the child to exit, no timeout."""

    def run(self, command: Sequence[str], cwd: Path) -> BuildResult:
        command = tuple(command)
        logger.debug("running %s in %s", " ".join(command), cwd)
        try:
            completed = subprocess.run(
                list(command),
                cwd=str(cwd),
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise BuildError(f"could not start build command {command[0]!r}: {exc}") from exc
        return BuildResult(
            command=command,
            cwd=Path(cwd),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


__all__ = ["BuildError", "BuildResult", "BuildRunner", "SubprocessBuildRunner"]
