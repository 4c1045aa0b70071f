"""Step outputs for the invoking GitHub Actions runner."""

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Dict, Mapping

logger = logging.getLogger(__name__)

PR_CREATED = "PR_CREATED"
PR_NUMBER = "PR_NUMBER"
PR_MERGEABLE = "PR_MERGEABLE"
PR_URL = "PR_URL"
MERGE_BRANCH_NAME = "MERGE_BRANCH_NAME"


def format_output_value(value: Any) -> str:
    """Serialize a value as the Actions toolkit does.

    None becomes "", strings are kept, everything else is JSON
    (so True is "true" and 42 is "42").
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


class StepOutputs:
    """Collects outputs and appends them to the GITHUB_OUTPUT file if set."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self.values: Dict[str, str] = {}

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "StepOutputs":
        env = os.environ if env is None else env
        path = env.get("GITHUB_OUTPUT")
        return cls(Path(path) if path else None)

    def set(self, name: str, value: Any) -> None:
        text = format_output_value(value)
        self.values[name] = text
        logger.debug("Output %s=%s", name, text)
        if self._path is None:
            return
        if "\n" in text or "\r" in text:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            line = f"{name}<<{delimiter}\n{text}\n{delimiter}\n"
        else:
            line = f"{name}={text}\n"
        with self._path.open("a", encoding="utf-8") as f:
            f.write(line)
