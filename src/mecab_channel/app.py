"""命令行入口。

用法:
    mecab-channel [--command mecab] [--strict] [--morpheme] [text ...]

未给出 text 时逐行读取 stdin，每行作为一个句子提交。
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from .config import ChannelConfig, get_config
from .errors import ChannelError
from .morpheme import Morpheme, parse_morpheme
from .runtime import spawn

__all__ = ["main", "configure_logging", "run"]

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(config: ChannelConfig) -> None:
    """配置日志输出。

    root logger 为 WARNING，仅 mecab_channel 命名空间输出详细日志。
    """
    log_handlers: list[logging.Handler] = []

    if config.log_debug and config.log_file:
        # LOG_DEBUG 模式：输出到临时文件
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log_handlers.append(file_handler)
        log_level = logging.DEBUG
    else:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log_handlers.append(stderr_handler)
        log_level = logging.INFO

    logging.basicConfig(level=logging.WARNING, handlers=log_handlers)
    logging.getLogger("mecab_channel").setLevel(log_level)


def _format_record(record: object) -> str:
    if isinstance(record, Morpheme):
        return record.model_dump_json()
    if isinstance(record, list):
        return "\t".join(str(field) for field in record)
    return str(record)


async def run(texts: Sequence[str], config: ChannelConfig, morpheme: bool = False) -> int:
    """提交所有文本并按顺序打印结果。

    Returns:
        进程退出码（0 表示成功）
    """
    try:
        channel = await spawn(config=config)
    except ChannelError as e:
        logger.error(f"Failed to start analyser: {e}")
        return 1
    if morpheme:
        channel.set_line_parser(parse_morpheme)

    try:
        # 全部提交后再等待，由队列保证顺序
        futures = [channel.analyze(text) for text in texts]
        for future in futures:
            for record in await future:
                print(_format_record(record))
    except ChannelError as e:
        logger.error(f"Analysis failed: {e}")
        return 1
    finally:
        await channel.aclose()
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """主入口点。"""
    parser = argparse.ArgumentParser(description="Analyse text through a MeCab process")
    parser.add_argument("--command", default=None, help="Analyser command (default: mecab)")
    parser.add_argument("--strict", action="store_true", help="Only accept EOS at line starts")
    parser.add_argument("--morpheme", action="store_true", help="Print records as Morpheme JSON")
    parser.add_argument("texts", nargs="*", help="Sentences to analyse (default: stdin)")
    args = parser.parse_args(argv)

    config = get_config()
    if args.command:
        config.command = args.command
    if args.strict:
        config.strict_framing = True
    configure_logging(config)

    texts = args.texts or [line.rstrip("\r\n") for line in sys.stdin]
    sys.exit(asyncio.run(run(texts, config, morpheme=args.morpheme)))


if __name__ == "__main__":
    main()
