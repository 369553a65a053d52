"""Runtime module for the analyser channel.

This module provides the ordered task queue, the queued operations and the
channel that wires process output and exit events to them.
"""

from __future__ import annotations

from .channel import Channel, spawn
from .operations import KillOperation, Operation, ReadOperation
from .process import ProcessLike, SpawnSpec, start_process
from .task_queue import TaskQueue

__all__ = [
    "Channel",
    "KillOperation",
    "Operation",
    "ProcessLike",
    "ReadOperation",
    "SpawnSpec",
    "TaskQueue",
    "spawn",
    "start_process",
]
