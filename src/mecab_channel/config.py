"""Channel 环境变量配置管理。

环境变量:
    MECAB_CHANNEL_COMMAND: 要启动的命令（默认 mecab）

    MECAB_CHANNEL_ARGS: 命令参数
        - 以空白分割，支持 shell 风格引号
        - 例: "-d /usr/lib/mecab/dic/ipadic"

    MECAB_CHANNEL_EOS: 句末哨兵样本
        - 字面量 "\\n" 会被替换为平台换行符
        - 默认 "EOS\\n"

    MECAB_CHANNEL_STRICT_FRAMING: 严格分帧
        - true/1/yes = 仅接受出现在行首的哨兵
        - false/0/no = 接受任意位置的哨兵 (默认)

    MECAB_CHANNEL_ENCODING: 子进程文本编码（默认 utf-8）

    MECAB_CHANNEL_TERM_TIMEOUT: 关闭时等待进程退出的时间（秒）
        - 默认 2.0 秒
        - 超时后发送 SIGKILL

    MECAB_CHANNEL_LOG_DEBUG: 日志调试模式
        - true/1/yes = 开启 (日志输出到临时文件)
        - false/0/no = 关闭 (默认，日志输出到 stderr)
"""

from __future__ import annotations

import os
import shlex
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

__all__ = [
    "ChannelConfig",
    "load_config",
    "get_config",
    "reload_config",
    "DEFAULT_EOS_SAMPLE",
    "DEFAULT_EOS_OBJECT",
    "DEFAULT_SEPARATOR",
]

DEFAULT_COMMAND = "mecab"
DEFAULT_EOS_SAMPLE = "EOS\\n"
DEFAULT_EOS_OBJECT = "EOS"
DEFAULT_SEPARATOR = r"[\t,]"
DEFAULT_TERM_TIMEOUT = 2.0


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """解析布尔值环境变量。"""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_args(value: str | None) -> list[str]:
    """解析命令参数环境变量。"""
    if not value or not value.strip():
        return []
    try:
        return shlex.split(value)
    except ValueError:
        # 引号不匹配时退化为按空白分割
        return value.split()


def _parse_term_timeout(value: str | None) -> float:
    """解析终止等待时间环境变量。"""
    if not value:
        return DEFAULT_TERM_TIMEOUT
    try:
        timeout = float(value)
        return max(0.1, min(timeout, 60.0))  # 限制在 0.1-60 秒范围
    except ValueError:
        return DEFAULT_TERM_TIMEOUT


def _generate_log_file_path() -> str:
    """生成日志文件路径。

    Returns:
        临时目录下的日志文件绝对路径
    """
    log_dir = Path(tempfile.gettempdir()) / "mecab-channel"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"channel_debug_{timestamp}.log"

    return str(log_file.resolve())


@dataclass
class ChannelConfig:
    """Channel 配置。

    Attributes:
        command: 要启动的命令
        args: 命令参数
        eos_sample: 句末哨兵样本（字符串中的字面量 "\\n" 会被替换为换行符）
        eos_object: 结果列表中每个哨兵位置插入的边界值
        line_terminator: 平台换行符
        separator: 默认行解析器的字段分隔正则
        strict_framing: 是否仅接受行首的哨兵
        encoding: 子进程文本编码
        term_timeout: 关闭时等待进程退出的时间（秒）
        log_debug: 日志调试模式（输出到临时文件）
        log_file: 日志文件路径（当 log_debug=True 时自动设置）
    """

    command: str = DEFAULT_COMMAND
    args: list[str] = field(default_factory=list)
    eos_sample: str = DEFAULT_EOS_SAMPLE
    eos_object: object = DEFAULT_EOS_OBJECT
    line_terminator: str = os.linesep
    separator: str = DEFAULT_SEPARATOR
    strict_framing: bool = False
    encoding: str = "utf-8"
    term_timeout: float = DEFAULT_TERM_TIMEOUT
    log_debug: bool = False
    log_file: str | None = None

    def __repr__(self) -> str:
        return (
            f"ChannelConfig(command={self.command}, "
            f"args={self.args}, "
            f"eos_sample={self.eos_sample!r}, "
            f"strict_framing={self.strict_framing}, "
            f"encoding={self.encoding}, "
            f"term_timeout={self.term_timeout}, "
            f"log_debug={self.log_debug}, "
            f"log_file={self.log_file})"
        )


def load_config() -> ChannelConfig:
    """从环境变量加载配置。"""
    log_debug = _parse_bool(os.environ.get("MECAB_CHANNEL_LOG_DEBUG"), default=False)
    log_file = _generate_log_file_path() if log_debug else None

    return ChannelConfig(
        command=os.environ.get("MECAB_CHANNEL_COMMAND") or DEFAULT_COMMAND,
        args=_parse_args(os.environ.get("MECAB_CHANNEL_ARGS")),
        eos_sample=os.environ.get("MECAB_CHANNEL_EOS") or DEFAULT_EOS_SAMPLE,
        strict_framing=_parse_bool(os.environ.get("MECAB_CHANNEL_STRICT_FRAMING"), default=False),
        encoding=os.environ.get("MECAB_CHANNEL_ENCODING") or "utf-8",
        term_timeout=_parse_term_timeout(os.environ.get("MECAB_CHANNEL_TERM_TIMEOUT")),
        log_debug=log_debug,
        log_file=log_file,
    )


# 全局配置实例（延迟加载）
_config: ChannelConfig | None = None


def get_config() -> ChannelConfig:
    """获取全局配置实例。"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> ChannelConfig:
    """重新加载配置（用于测试）。"""
    global _config
    _config = load_config()
    return _config
