"""Logging from config and env.

Levels (inclusive):
- ERROR: critical errors only
- WARNING: non-critical issues and ERROR
- INFO: service messages, WARNING, and ERROR
- DEBUG: debugging and all levels above

Configure via the YAML file (logging.level, logging.format) or env
(LOGGING_LEVEL, LOGGING_FORMAT). Inside GitHub Actions (GITHUB_ACTIONS=true)
records are written as workflow commands so the runner annotates warnings
and errors and hides debug lines unless step debug logging is enabled.
"""

import logging
import os
import sys
from typing import Mapping

from merge_or_pr.config import LoggingConfig

# Supported levels only (DEBUG, INFO, WARNING, ERROR)
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    """Map level name to logging constant.

    Falls back to INFO if unknown.
    """
    return LEVELS.get(level.upper().strip(), logging.INFO)


def escape_command_data(text: str) -> str:
    """Escape a workflow command message (%, CR and LF)."""
    return text.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def running_in_actions(env: Mapping[str, str] | None = None) -> bool:
    env = os.environ if env is None else env
    return env.get("GITHUB_ACTIONS", "").lower() == "true"


class ActionsFormatter(logging.Formatter):
    """Render records as GitHub Actions workflow commands."""

    COMMANDS = {
        logging.DEBUG: "debug",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        command = self.COMMANDS.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{escape_command_data(message)}"


class MergeOrPrLogging:
    """Configures root logger from LoggingConfig (YAML + env LOGGING_*)."""

    def __init__(self, config: LoggingConfig, actions: bool | None = None) -> None:
        """Store logging config; actions=None detects the runner from env."""
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT
        self._actions = running_in_actions() if actions is None else actions

    def setup(self) -> None:
        """Apply level and format to the root logger."""
        if self._actions:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(ActionsFormatter())
            # the runner filters ::debug:: lines itself
            logging.basicConfig(level=logging.DEBUG, handlers=[handler], force=True)
            return
        logging.basicConfig(
            level=self._level,
            format=self._format,
            force=True,
        )
