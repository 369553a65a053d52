"""mecab-channel - 通过 stdin/stdout 与常驻 MeCab 进程交互。

请求按提交顺序串行写入同一个进程，输出按 EOS 哨兵切分为结果列表。

环境变量:
    MECAB_CHANNEL_COMMAND: 要启动的命令（默认 mecab）
    MECAB_CHANNEL_EOS: 句末哨兵样本（默认 EOS\\n）
    MECAB_CHANNEL_STRICT_FRAMING: 仅接受行首哨兵 (默认 false)

用法:
    channel = await spawn()
    records = await channel.analyze("すもももももももものうち")
    await channel.kill()
"""

__version__ = "0.1.0"

from .errors import (
    ChannelClosedError,
    ChannelError,
    OperationInterruptedError,
    ProcessCrashedError,
    ProcessKilledError,
    SpawnError,
)
from .morpheme import Morpheme, parse_morpheme
from .runtime import Channel, spawn

__all__ = [
    "__version__",
    "Channel",
    "ChannelClosedError",
    "ChannelError",
    "Morpheme",
    "OperationInterruptedError",
    "ProcessCrashedError",
    "ProcessKilledError",
    "SpawnError",
    "parse_morpheme",
    "spawn",
]
