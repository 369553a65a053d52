"""Channel 模块异常类。

mecab-channel errors v0.1.0

所有失败都只通过操作的 Future 传递给调用方。
"""

from __future__ import annotations

__all__ = [
    "ChannelError",
    "ProcessCrashedError",
    "ProcessKilledError",
    "SpawnError",
    "OperationInterruptedError",
    "ChannelClosedError",
]


class ChannelError(Exception):
    """Channel 模块基础异常。"""
    pass


class ProcessCrashedError(ChannelError):
    """进程以非零退出码结束时仍有挂起的操作。

    Attributes:
        returncode: 进程退出码
    """

    def __init__(self, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(f"MeCab process crashed. code:{returncode}")


class ProcessKilledError(ChannelError):
    """进程正常退出（或被信号终止）时仍有挂起的读取操作。"""

    def __init__(self, message: str = "MeCab process is killed.") -> None:
        super().__init__(message)


class SpawnError(ChannelError):
    """启动进程或读写管道时的 OS 级错误。

    Attributes:
        cause: 原始 OSError
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class OperationInterruptedError(ChannelError):
    """强制终止时被立即放弃的操作。"""

    def __init__(self, message: str = "The process was interrupted immediately.") -> None:
        super().__init__(message)


class ChannelClosedError(ChannelError):
    """向已经退出的进程提交操作。"""
    pass
