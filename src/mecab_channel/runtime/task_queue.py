"""FIFO queue with a single active operation.

mecab-channel runtime module v0.1.0

Only the head of the queue has issued its side effect. The next operation
is started when the head finishes, so two requests never share the pipe.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator

from .operations import Operation

__all__ = ["TaskQueue"]

logger = logging.getLogger(__name__)


class TaskQueue:
    """Ordered operations for one channel.

    Thread safety: none. All calls are made from the event loop thread.

    Example:
        queue = TaskQueue()
        queue.enqueue(read_op)      # started immediately, queue was empty
        queue.enqueue(kill_op)      # pending
        ...
        if read_op.consume(chunk):
            queue.advance()         # removes read_op, starts kill_op
    """

    def __init__(self) -> None:
        self._ops: deque[Operation] = deque()

    def __len__(self) -> int:
        return len(self._ops)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._ops)

    @property
    def head(self) -> Operation | None:
        return self._ops[0] if self._ops else None

    def enqueue(self, op: Operation) -> Operation:
        """Append ``op``; start it if the queue was empty."""
        self._ops.append(op)
        logger.debug(f"Enqueued {op!r} (queue length={len(self._ops)})")
        if len(self._ops) == 1:
            self._run_head()
        return op

    def advance(self) -> None:
        """Remove the finished head and start the next operation."""
        if not self._ops:
            raise RuntimeError("advance() called on an empty task queue")
        head = self._ops.popleft()
        if not head.finished:
            raise RuntimeError(f"advance() called before {head!r} finished")
        self._run_head()

    def drain(self) -> list[Operation]:
        """Remove and return every queued operation."""
        ops = list(self._ops)
        self._ops.clear()
        return ops

    def _run_head(self) -> None:
        while self._ops:
            head = self._ops[0]
            if not head.started and head.future.cancelled():
                # Nothing was written for it yet, so it can be skipped.
                logger.debug(f"Skipping cancelled {head!r}")
                self._ops.popleft()
                continue

            head.start()
            if not head.finished:
                return
            # Kill operations finish inside start(). The queue may also have
            # been drained while starting.
            if self._ops and self._ops[0] is head:
                self._ops.popleft()
