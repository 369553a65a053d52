"""Queued operations bound to one channel.

mecab-channel runtime module v0.1.0

This module provides:
- Operation: base class carrying the completion future
- ReadOperation: writes one payload and accumulates its framed records
- KillOperation: sends a signal to the process

Key design points:
- An operation only issues its side effect from start(), which the task
  queue calls once the operation reaches the head.
- ``finished`` tells the queue when to advance. It is independent of the
  future so a read whose caller gave up still consumes its own output.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Callable
from typing import Any

from ..errors import SpawnError
from ..framing import RecordDecoder, SentinelScanner

__all__ = [
    "Operation",
    "ReadOperation",
    "KillOperation",
]

logger = logging.getLogger(__name__)


class Operation:
    """Unit of queued work with a completion future."""

    kind = "operation"

    def __init__(self) -> None:
        self.future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self.started = False
        self.finished = False

    def start(self) -> None:
        """Issue the side effect. Called once by the task queue."""
        self.started = True
        self._issue()

    def _issue(self) -> None:
        pass

    def resolve(self, value: Any) -> None:
        self.finished = True
        if not self.future.done():
            self.future.set_result(value)

    def reject(self, error: BaseException) -> None:
        self.finished = True
        if not self.future.done():
            self.future.set_exception(error)

    def __repr__(self) -> str:
        state = "finished" if self.finished else "started" if self.started else "pending"
        return f"{type(self).__name__}(state={state})"


class ReadOperation(Operation):
    """Write one payload and collect records until enough sentinels arrive.

    Every sentinel found appends ``eos_object`` to the result, after the
    records decoded from the bytes before it. The operation completes as
    soon as ``expected`` sentinels have been observed.

    Attributes:
        payload: Bytes written to the process on start (terminator included)
        expected: Number of sentinels that complete this read
        observed: Number of sentinels seen so far
        records: Accumulated result list
    """

    kind = "read"

    def __init__(
        self,
        payload: bytes,
        expected: int,
        *,
        scanner: SentinelScanner,
        decoder: RecordDecoder,
        eos_object: Any,
        write: Callable[[bytes], None],
    ) -> None:
        super().__init__()
        if expected < 1:
            raise ValueError(f"expected sentinel count must be positive, got {expected}")
        self.payload = payload
        self.expected = expected
        self.observed = 0
        self.records: list[Any] = []
        self._scanner = scanner
        self._decoder = decoder
        self._eos_object = eos_object
        self._write = write

    def _issue(self) -> None:
        logger.debug(f"Writing {len(self.payload)} bytes, expecting {self.expected} sentinel(s)")
        self._write(self.payload)

    def consume(self, chunk: bytes) -> bool:
        """Feed one output chunk.

        Args:
            chunk: Bytes read from the process stdout

        Returns:
            True once the expected number of sentinels has been observed

        Raises:
            Exception: Whatever the line parser or decode hook raises
        """
        scanner = self._scanner
        buffer = scanner.feed(chunk)
        offset = 0
        while offset < len(buffer):
            index = scanner.find(buffer, offset)
            if index == -1:
                scanner.retain(buffer, offset)
                break

            self.records.extend(self._decoder.decode(buffer[offset:index]))
            self.records.append(self._eos_object)
            self.observed += 1
            offset = index + len(scanner.sentinel)

            if self.observed == self.expected:
                if offset < len(buffer):
                    logger.warning(
                        f"Discarding {len(buffer) - offset} bytes after the final sentinel"
                    )
                self.resolve(self.records)
                return True
        return False

    def __repr__(self) -> str:
        return (
            f"ReadOperation(observed={self.observed}/{self.expected}, "
            f"records={len(self.records)}, "
            f"pending_bytes={self._scanner.pending}, "
            f"finished={self.finished})"
        )


class KillOperation(Operation):
    """Send a termination signal.

    Resolves as soon as the signal has been sent; it does not wait for the
    process to exit. Use ``Channel.wait_closed()`` for that.
    """

    kind = "kill"

    def __init__(
        self,
        sig: signal.Signals,
        *,
        send: Callable[[signal.Signals], None],
    ) -> None:
        super().__init__()
        self.signal = sig
        self._send = send

    def _issue(self) -> None:
        try:
            self._send(self.signal)
        except ProcessLookupError:
            logger.debug(f"Process already exited before {self.signal.name}")
            self.resolve("MeCab process is killed.")
        except OSError as e:
            self.reject(SpawnError(f"Failed to send {self.signal.name}: {e}", e))
        else:
            self.resolve(f"Sent {self.signal.name} to MeCab process.")
