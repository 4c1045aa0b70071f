"""Tests for merge_or_pr.logging (MergeOrPrLogging, level/format from config,
workflow command rendering)."""

import logging

from merge_or_pr.config import LoggingConfig
from merge_or_pr.logging import (
    DEFAULT_FORMAT,
    LEVELS,
    ActionsFormatter,
    MergeOrPrLogging,
    _resolve_level,
    escape_command_data,
    running_in_actions,
)


def _record(level: int, msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord("merge_or_pr.test", level, __file__, 1, msg, args, None)


class TestConstants:
    """Module constants and level mapping."""

    def test_levels_has_four_standard_levels(self) -> None:
        assert LEVELS == {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
        }


class TestResolveLevel:
    """_resolve_level maps level names to logging constants."""

    def test_known_levels(self) -> None:
        assert _resolve_level("DEBUG") == logging.DEBUG
        assert _resolve_level("WARNING") == logging.WARNING

    def test_lowercase_and_whitespace(self) -> None:
        assert _resolve_level("  debug ") == logging.DEBUG

    def test_unknown_level_returns_info(self) -> None:
        assert _resolve_level("TRACE") == logging.INFO
        assert _resolve_level("") == logging.INFO


class TestActionsFormatter:
    def test_warning_becomes_workflow_command(self) -> None:
        text = ActionsFormatter().format(_record(logging.WARNING, 'Unexpected "%s"', "x"))
        assert text == '::warning::Unexpected "x"'

    def test_debug_and_error_commands(self) -> None:
        fmt = ActionsFormatter()
        assert fmt.format(_record(logging.DEBUG, "d")) == "::debug::d"
        assert fmt.format(_record(logging.ERROR, "e")) == "::error::e"

    def test_info_is_plain(self) -> None:
        assert ActionsFormatter().format(_record(logging.INFO, "50% done")) == "50% done"

    def test_command_data_escaped(self) -> None:
        text = ActionsFormatter().format(_record(logging.ERROR, "100%\nfailed\r"))
        assert text == "::error::100%25%0Afailed%0D"

    def test_escape_command_data(self) -> None:
        assert escape_command_data("a%b\r\nc") == "a%25b%0D%0Ac"

    def test_running_in_actions(self) -> None:
        assert running_in_actions({"GITHUB_ACTIONS": "true"})
        assert not running_in_actions({})


class TestMergeOrPrLogging:
    """MergeOrPrLogging applies LoggingConfig to the root logger."""

    def test_setup_sets_root_level_from_config(self) -> None:
        for level_name, expected_num in LEVELS.items():
            cfg = LoggingConfig(level=level_name, format="%(message)s")
            MergeOrPrLogging(cfg, actions=False).setup()
            assert logging.root.level == expected_num

    def test_setup_applies_format(self) -> None:
        custom = "%(levelname)s || %(message)s"
        MergeOrPrLogging(LoggingConfig(level="INFO", format=custom), actions=False).setup()
        handler = logging.root.handlers[0]
        assert handler.formatter is not None
        assert handler.formatter._fmt == custom

    def test_empty_format_uses_default(self) -> None:
        MergeOrPrLogging(LoggingConfig(level="INFO", format=""), actions=False).setup()
        assert logging.root.handlers[0].formatter._fmt == DEFAULT_FORMAT

    def test_actions_mode_uses_actions_formatter(self) -> None:
        MergeOrPrLogging(LoggingConfig(level="WARNING"), actions=True).setup()
        assert logging.root.level == logging.DEBUG
        assert isinstance(logging.root.handlers[0].formatter, ActionsFormatter)
        MergeOrPrLogging(LoggingConfig(), actions=False).setup()
