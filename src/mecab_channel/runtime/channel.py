"""Ordered request channel over one analyser process.

mecab-channel runtime module v0.1.0

This module provides:
- Channel: serialises analysis requests against one stdin/stdout pair
- spawn(): start the analyser and return a running Channel

Key design points:
- A single reader task routes every stdout chunk to the head of the
  task queue, so no locking is needed
- A request's payload is written only once every earlier request has
  received all of its sentinels
- Process exit and pipe errors settle every queued operation before the
  queue is cleared
- Kill requests resolve once the signal is sent; wait_closed() reports
  the actual exit

Example:
    async with await spawn("mecab") as channel:
        records = await channel.analyze("すもももももももものうち")
"""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import anyio

from ..config import ChannelConfig, get_config
from ..errors import (
    ChannelClosedError,
    ChannelError,
    OperationInterruptedError,
    ProcessCrashedError,
    ProcessKilledError,
    SpawnError,
)
from ..framing import (
    DecodeHook,
    EncodeHook,
    LineParser,
    RecordDecoder,
    SentinelPolicy,
    SentinelScanner,
    create_line_parser,
    default_sentinel_policy,
)
from .operations import KillOperation, Operation, ReadOperation
from .process import ProcessLike, SpawnSpec, start_process
from .task_queue import TaskQueue

__all__ = [
    "Channel",
    "spawn",
]

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


def _to_signal(sig: int | str | signal.Signals) -> signal.Signals:
    if isinstance(sig, str):
        return signal.Signals[sig.upper()]
    return signal.Signals(sig)


class Channel:
    """Analysis channel bound to one process.

    Configuration setters only affect operations created afterwards; an
    operation keeps the sentinel, boundary object, parser and hooks that
    were current when it was submitted.

    Attributes:
        line_parser: Function converting one output line into a record
        returncode: Exit code once the process has exited
    """

    def __init__(
        self,
        process: ProcessLike,
        *,
        config: ChannelConfig | None = None,
    ) -> None:
        config = config or get_config()
        self._process = process
        self._config = config
        self._line_terminator = config.line_terminator
        self._encoding = config.encoding
        self._strict_framing = config.strict_framing
        self._encoder: EncodeHook | None = None
        self._decoder: DecodeHook | None = None
        self._eos_sample = b""
        self.set_eos_sample(config.eos_sample)
        self._eos_object: Any = config.eos_object
        self._sentinel_policy: SentinelPolicy = default_sentinel_policy
        self.line_parser: LineParser = self.create_line_parser(config.separator)
        self.returncode: int | None = None
        # Set when the output pipe fails; the process may still be running.
        self._broken: SpawnError | None = None

        self._queue = TaskQueue()
        self._closed = asyncio.Event()
        self._reader_task: asyncio.Task[None] | None = None
        self._stderr_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> Channel:
        """Start reading the process output. Must run inside the event loop."""
        if self._reader_task is not None:
            raise RuntimeError("Channel already started")
        self._reader_task = asyncio.create_task(self._read_stdout())
        if getattr(self._process, "stderr", None) is not None:
            self._stderr_task = asyncio.create_task(self._drain_stderr())
        return self

    @property
    def is_closed(self) -> bool:
        return self._closed.is_set()

    @property
    def pending(self) -> int:
        """Number of queued operations, the active one included."""
        return len(self._queue)

    async def wait_closed(self) -> int | None:
        """Wait until the process has exited and return its exit code."""
        await self._closed.wait()
        return self.returncode

    async def aclose(self) -> None:
        """Terminate gracefully once queued work is done, then force if needed.

        Termination strategy:
        1. Queue a SIGTERM behind pending work and wait for exit
        2. After term_timeout, reject what is still queued and SIGKILL
        """
        if not self.is_closed:
            try:
                await asyncio.wait_for(self._terminate(), timeout=self._config.term_timeout)
            except asyncio.TimeoutError:
                logger.debug(f"Force killing subprocess pid={self._process.pid}")
                self._reject_all(OperationInterruptedError())
                try:
                    self._process.kill()
                except ProcessLookupError:
                    pass
                await self.wait_closed()

        for task in (self._reader_task, self._stderr_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

    async def _terminate(self) -> None:
        try:
            await self.kill()
        except ChannelError as e:
            logger.debug(f"Kill during close failed: {e}")
        await self.wait_closed()

    async def __aenter__(self) -> Channel:
        if self._reader_task is None:
            self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _read_stdout(self) -> None:
        stdout = self._process.stdout
        try:
            while True:
                chunk = await stdout.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                self._on_data(chunk)
            returncode = await self._process.wait()
        except anyio.get_cancelled_exc_class():
            self._reject_all(ChannelClosedError("Channel reader was cancelled."))
            raise
        except OSError as e:
            logger.error(f"Pipe error on pid={self._process.pid}: {e}")
            self._broken = SpawnError(f"MeCab pipe error: {e}", e)
            self._reject_all(self._broken)
            # Still reap the process; kill() can reach it until it exits.
            returncode = await self._process.wait()
        self._on_close(returncode)

    async def _drain_stderr(self) -> None:
        stderr = self._process.stderr
        while True:
            line = await stderr.readline()
            if not line:
                break
            logger.debug(f"stderr pid={self._process.pid}: {line.decode(errors='replace').rstrip()}")

    def _on_data(self, chunk: bytes) -> None:
        head = self._queue.head
        if not isinstance(head, ReadOperation) or not head.started:
            logger.warning(f"Discarding {len(chunk)} bytes with no active read: {head!r}")
            return

        try:
            done = head.consume(chunk)
        except Exception as e:
            logger.error(f"Failed to decode output of {head!r}: {e}", exc_info=True)
            head.reject(e)
            self._reject_all(ChannelError(f"Output stream corrupted: {e}"))
            self._send_signal(signal.SIGTERM, quiet=True)
            return

        if done:
            logger.debug(f"Completed {head!r}")
            self._queue.advance()

    def _on_close(self, returncode: int | None) -> None:
        self.returncode = returncode
        crashed = returncode is not None and returncode > 0
        ops = self._queue.drain()
        logger.debug(
            f"Subprocess exited pid={self._process.pid} "
            f"returncode={returncode} pending={len(ops)}"
        )
        for op in ops:
            if crashed:
                op.reject(ProcessCrashedError(returncode))
            elif isinstance(op, ReadOperation):
                op.reject(ProcessKilledError())
            else:
                op.resolve("MeCab process is killed.")
        self._closed.set()

    def _reject_all(self, error: BaseException) -> None:
        for op in self._queue.drain():
            op.reject(error)

    def _write(self, data: bytes) -> None:
        try:
            self._process.stdin.write(data)
        except OSError as e:
            logger.error(f"Failed to write to pid={self._process.pid}: {e}")
            # Settle the queue after the current start() call returns.
            asyncio.get_running_loop().call_soon(
                self._reject_all, SpawnError(f"MeCab pipe error: {e}", e)
            )

    def _send_signal(self, sig: signal.Signals, quiet: bool = False) -> None:
        try:
            self._process.send_signal(sig)
            logger.debug(f"Sent {sig.name} to pid={self._process.pid}")
        except ProcessLookupError:
            if not quiet:
                raise

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def _settled(self, op: Operation, error: BaseException | None, value: Any = None) -> asyncio.Future[Any]:
        if error is not None:
            op.reject(error)
        else:
            op.resolve(value)
        return op.future

    def analyze(
        self,
        obj: str | bytes,
        encoder: EncodeHook | None = None,
        decoder: DecodeHook | None = None,
    ) -> asyncio.Future[list[Any]]:
        """Queue ``obj`` for analysis.

        Args:
            obj: Input text or raw bytes; each line is one sentence
            encoder: Encode hook for this call (overrides the default)
            decoder: Decode hook for this call (overrides the default)

        Returns:
            Future resolving to the records of every sentence, each sentence
            followed by the boundary object
        """
        buffer = obj.encode(self._encoding) if isinstance(obj, str) else bytes(obj)
        encode = encoder or self._encoder
        if encode:
            buffer = encode(buffer)

        expected = self._sentinel_policy(buffer)
        terminator = self._line_terminator.encode("ascii")
        op = ReadOperation(
            buffer + terminator,
            expected,
            scanner=SentinelScanner(
                self._eos_sample,
                line_terminator=terminator if self._strict_framing else None,
            ),
            decoder=RecordDecoder(
                self.line_parser,
                decoder=decoder or self._decoder,
                line_terminator=self._line_terminator,
                encoding=self._encoding,
            ),
            eos_object=self._eos_object,
            write=self._write,
        )
        if self._broken is not None:
            return self._settled(op, ChannelClosedError(f"MeCab output is unusable: {self._broken}"))
        if self.is_closed:
            return self._settled(op, ChannelClosedError("MeCab process has already exited."))
        return self._queue.enqueue(op).future

    def kill(
        self,
        force: bool = False,
        sig: int | str | signal.Signals = signal.SIGTERM,
    ) -> asyncio.Future[str]:
        """Request termination of the process.

        Args:
            force: Reject every queued operation first instead of waiting
            sig: Signal to send (number, name or Signals member)

        Returns:
            Future resolving to a confirmation message once the signal is
            sent. It does not wait for the process to exit.
        """
        sig = _to_signal(sig)
        if force:
            self._reject_all(OperationInterruptedError())

        op = KillOperation(sig, send=self._send_signal)
        if self.is_closed:
            if self.returncode is not None and self.returncode > 0:
                return self._settled(op, ProcessCrashedError(self.returncode))
            return self._settled(op, None, "MeCab process is killed.")
        return self._queue.enqueue(op).future

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_default_encoder(self, encoder: EncodeHook | None) -> None:
        self._encoder = encoder

    def set_default_decoder(self, decoder: DecodeHook | None) -> None:
        self._decoder = decoder

    def set_eos_sample(self, sample: str | bytes) -> None:
        """Set the sentinel. In strings, a literal ``\\n`` means the line terminator."""
        if isinstance(sample, str):
            sample = sample.replace("\\n", self._line_terminator).encode(self._encoding)
        if not sample:
            raise ValueError("EOS sample must not be empty")
        self._eos_sample = bytes(sample)

    def get_eos_sample(self) -> bytes:
        return self._eos_sample

    def set_eos_object(self, obj: Any) -> None:
        self._eos_object = obj

    def get_eos_object(self) -> Any:
        return self._eos_object

    def set_line_parser(self, parser: LineParser) -> None:
        self.line_parser = parser

    def set_sentinel_policy(self, policy: SentinelPolicy) -> None:
        """Replace the payload-to-sentinel-count rule (default: line breaks + 1)."""
        self._sentinel_policy = policy

    @staticmethod
    def create_line_parser(separator: Any) -> LineParser:
        return create_line_parser(separator)

    def get_process(self) -> ProcessLike:
        return self._process


async def spawn(
    command: str | None = None,
    args: Sequence[str] | None = None,
    *,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    config: ChannelConfig | None = None,
) -> Channel:
    """Start the analyser and return a running channel.

    Args:
        command: Executable (default from config, usually ``mecab``)
        args: Command line arguments (default from config)
        cwd: Working directory
        env: Environment variables (None = inherit parent)
        config: Channel configuration (default: environment)

    Raises:
        SpawnError: If the process cannot be started
    """
    config = config or get_config()
    spec = SpawnSpec(
        command=command or config.command,
        args=tuple(args if args is not None else config.args),
        cwd=cwd,
        env=env,
    )
    process = await start_process(spec)
    return Channel(process, config=config).start()
