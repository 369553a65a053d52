"""Config 模块测试。

测试 MECAB_CHANNEL_* 环境变量解析和配置管理。
"""

from __future__ import annotations

import os
from unittest import mock

import pytest

from mecab_channel.config import (
    DEFAULT_EOS_SAMPLE,
    ChannelConfig,
    get_config,
    load_config,
    reload_config,
)

ENV_KEYS = (
    "MECAB_CHANNEL_COMMAND",
    "MECAB_CHANNEL_ARGS",
    "MECAB_CHANNEL_EOS",
    "MECAB_CHANNEL_STRICT_FRAMING",
    "MECAB_CHANNEL_ENCODING",
    "MECAB_CHANNEL_TERM_TIMEOUT",
    "MECAB_CHANNEL_LOG_DEBUG",
)


@pytest.fixture
def clean_env():
    """移除所有 MECAB_CHANNEL_* 环境变量。"""
    env = {k: v for k, v in os.environ.items() if k not in ENV_KEYS}
    with mock.patch.dict(os.environ, env, clear=True):
        yield


class TestDefaults:
    """默认值测试。"""

    def test_defaults(self, clean_env):
        config = load_config()

        assert config.command == "mecab"
        assert config.args == []
        assert config.eos_sample == DEFAULT_EOS_SAMPLE
        assert config.eos_object == "EOS"
        assert config.strict_framing is False
        assert config.encoding == "utf-8"
        assert config.term_timeout == 2.0
        assert config.log_debug is False
        assert config.log_file is None


class TestParseArgs:
    """命令参数解析测试。"""

    def test_shell_style_split(self, clean_env):
        with mock.patch.dict(os.environ, {"MECAB_CHANNEL_ARGS": "-d '/opt/my dic'"}):
            assert load_config().args == ["-d", "/opt/my dic"]

    def test_unbalanced_quotes_fall_back(self, clean_env):
        with mock.patch.dict(os.environ, {"MECAB_CHANNEL_ARGS": "-d 'x"}):
            assert load_config().args == ["-d", "'x"]

    def test_command_override(self, clean_env):
        with mock.patch.dict(os.environ, {"MECAB_CHANNEL_COMMAND": "/usr/local/bin/mecab"}):
            assert load_config().command == "/usr/local/bin/mecab"


class TestParseBool:
    """布尔值解析测试。"""

    @pytest.mark.parametrize("value", ["true", "True", "TRUE", "1", "yes", "Yes", "on"])
    def test_truthy_values(self, clean_env, value: str):
        with mock.patch.dict(os.environ, {"MECAB_CHANNEL_STRICT_FRAMING": value}):
            assert load_config().strict_framing is True

    @pytest.mark.parametrize("value", ["false", "False", "0", "no", "off", ""])
    def test_falsy_values(self, clean_env, value: str):
        with mock.patch.dict(os.environ, {"MECAB_CHANNEL_STRICT_FRAMING": value}):
            assert load_config().strict_framing is False


class TestTermTimeout:
    """终止等待时间解析测试。"""

    @pytest.mark.parametrize(
        "value,expected",
        [("5", 5.0), ("0.01", 0.1), ("1000", 60.0), ("abc", 2.0), ("", 2.0)],
    )
    def test_values(self, clean_env, value: str, expected: float):
        with mock.patch.dict(os.environ, {"MECAB_CHANNEL_TERM_TIMEOUT": value}):
            assert load_config().term_timeout == expected


class TestLogDebug:
    """日志调试模式测试。"""

    def test_log_file_generated(self, clean_env):
        with mock.patch.dict(os.environ, {"MECAB_CHANNEL_LOG_DEBUG": "1"}):
            config = load_config()
            assert config.log_debug is True
            assert config.log_file is not None
            assert "channel_debug_" in config.log_file


class TestGlobalConfig:
    """全局配置实例测试。"""

    def test_get_config_is_cached(self, clean_env):
        reload_config()
        assert get_config() is get_config()

    def test_reload_config_picks_up_changes(self, clean_env):
        with mock.patch.dict(os.environ, {"MECAB_CHANNEL_ENCODING": "euc-jp"}):
            assert reload_config().encoding == "euc-jp"
        assert reload_config().encoding == "utf-8"
