"""Subprocess spawning for the channel.

mecab-channel runtime module v0.1.0

Key design points:
- stdin/stdout are pipes owned by the channel; stderr is drained so the
  child never blocks on a full pipe
- POSIX: start_new_session=True so terminal signals are not forwarded
- Windows: CREATE_NEW_PROCESS_GROUP for signal isolation
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from ..errors import SpawnError

__all__ = [
    "ProcessLike",
    "SpawnSpec",
    "start_process",
]

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"


class ProcessLike(Protocol):
    """What the channel needs from a process.

    ``asyncio.subprocess.Process`` satisfies it; tests use an in-memory fake.
    """

    stdin: Any
    stdout: Any
    stderr: Any
    pid: int
    returncode: int | None

    async def wait(self) -> int: ...

    def send_signal(self, sig: int) -> None: ...

    def kill(self) -> None: ...


@dataclass(frozen=True)
class SpawnSpec:
    """Specification for the analyser process.

    Attributes:
        command: Executable name or path
        args: Command line arguments
        cwd: Working directory (None = inherit)
        env: Environment variables (None = inherit parent)
    """

    command: str
    args: Sequence[str] = ()
    cwd: Path | None = None
    env: Mapping[str, str] | None = None

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]


def _build_subprocess_kwargs(spec: SpawnSpec) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    if spec.env is not None:
        kwargs["env"] = dict(spec.env)
    if spec.cwd is not None:
        kwargs["cwd"] = spec.cwd
    if IS_WINDOWS:
        kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        kwargs["start_new_session"] = True
    return kwargs


async def start_process(spec: SpawnSpec) -> asyncio.subprocess.Process:
    """Start the analyser with piped stdin/stdout/stderr.

    Args:
        spec: Process specification

    Returns:
        The running process

    Raises:
        SpawnError: If the OS refuses to start the process
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *spec.argv,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            **_build_subprocess_kwargs(spec),
        )
    except OSError as e:
        raise SpawnError(f"Failed to spawn {spec.command!r}: {e}", e) from e

    logger.debug(f"Started subprocess pid={process.pid} argv={spec.argv}")
    return process
