"""Pytest 配置和 fixtures。"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# 项目根目录
PROJECT_ROOT = Path(__file__).parent.parent

# 添加 src 目录到 Python 路径
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

# 添加 fixtures 目录到 Python 路径（fake_process 等测试替身）
FIXTURES_DIR = PROJECT_ROOT / "tests" / "fixtures"
if str(FIXTURES_DIR) not in sys.path:
    sys.path.insert(0, str(FIXTURES_DIR))

from mecab_channel.config import ChannelConfig  # noqa: E402


@pytest.fixture
def project_root() -> Path:
    """项目根目录。"""
    return PROJECT_ROOT


@pytest.fixture
def fixtures_dir() -> Path:
    """测试替身目录。"""
    return FIXTURES_DIR


@pytest.fixture
def config() -> ChannelConfig:
    """与平台无关的 Channel 配置（LF 换行）。"""
    return ChannelConfig(line_terminator="\n")


@pytest.fixture
def strict_config() -> ChannelConfig:
    """启用严格分帧的配置。"""
    return ChannelConfig(line_terminator="\n", strict_framing=True)
