"""Configuration loading from YAML, GitHub Actions inputs and environment.

Sources, later wins: YAML file, INPUT_* variables set by the Actions
runner, then GITHUB_* fallbacks for values still missing. Tokens belong
in env or secret files; never put real tokens in config files committed
to the repo.
"""

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from merge_or_pr.adapters.github import DEFAULT_API_URL

DEFAULT_CONFIG_PATH = Path("merge-or-pr.yaml")

# Action input name -> (section, field). Section "pr" is the nested PrConfig.
ACTION_INPUTS: dict[str, tuple[str, str]] = {
    "repo-token": ("action", "repo_token"),
    "repo-owner": ("action", "repo_owner"),
    "repo-name": ("action", "repo_name"),
    "target-branch": ("action", "target_branch"),
    "head-to-merge": ("action", "head_to_merge"),
    "merge-branch-name": ("pr", "merge_branch_name"),
    "pr-title": ("pr", "title"),
    "pr-body": ("pr", "body"),
    "pr-draft": ("pr", "is_draft"),
    "maintainer-can-modify": ("pr", "maintainer_can_modify"),
    "assigned-user": ("pr", "assigned_user"),
    "reviewer": ("pr", "reviewer"),
}


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


def input_env_name(name: str) -> str:
    """Env var the Actions runner uses for an input (spaces become _)."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


def _read_secret(env: Mapping[str, str], env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = env.get(env_key)
    if value:
        return value.strip()
    file_path = env.get(file_env_key)
    if file_path:
        try:
            return Path(file_path).read_text().strip()
        except OSError as e:
            raise ConfigError(f"Cannot read {file_env_key} file {file_path}: {e}") from e
    return None


class PrConfig(BaseModel):
    """Pull request options used when the merge conflicts."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    merge_branch_name: str = Field(min_length=1, description="Branch created at head to open the PR from")
    title: str = Field(min_length=1, description="PR title")
    body: str = Field(default="", description="PR description (markdown)")
    is_draft: bool = Field(default=False, description="Open the PR as draft")
    maintainer_can_modify: bool = Field(default=True, description="Allow maintainers to push to the branch")
    assigned_user: str | None = Field(default=None, description="Login to assign to the PR")
    reviewer: str | None = Field(default=None, description="Login to request a review from")

    @field_validator("merge_branch_name", "title", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("assigned_user", "reviewer", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class ActionConfig(BaseSettings):
    """What to merge where, and how to fall back to a pull request."""

    model_config = SettingsConfigDict(env_prefix="MERGE_OR_PR_", extra="ignore", frozen=True)

    repo_token: str = Field(min_length=1, repr=False, description="Token that can push to target_branch")
    repo_owner: str = Field(min_length=1, description="Repository owner")
    repo_name: str = Field(min_length=1, description="Repository name")
    target_branch: str = Field(min_length=1, description="Branch to merge into")
    head_to_merge: str = Field(min_length=1, description="Commit SHA or ref to merge")
    api_url: str = Field(default=DEFAULT_API_URL, description="API base URL")
    pr: PrConfig

    @model_validator(mode="before")
    @classmethod
    def _pr_defaults(cls, data: Any) -> Any:
        """Derive branch name and title from head/target when not given."""
        if not isinstance(data, dict):
            return data
        pr = data.get("pr") or {}
        if isinstance(pr, PrConfig):
            return data
        pr = dict(pr)
        head = data.get("head_to_merge")
        target = data.get("target_branch")
        if not pr.get("merge_branch_name") and head:
            pr["merge_branch_name"] = f"merge-or-pr/{head}"
        if not pr.get("title") and head and target:
            pr["title"] = f"Merge {head} into {target}"
        return {**data, "pr": pr}

    @property
    def repository(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseModel):
    """Root application config."""

    action: ActionConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _substitute_env(value: Any, env: Mapping[str, str]) -> Any:
    """Replace ${VAR} and $VAR in strings with values from env."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v, env) for v in value]
    return value


def _apply_inputs(action_raw: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    """Overlay non-empty INPUT_* values onto the raw action dict."""
    pr_raw = dict(action_raw.get("pr") or {})
    merged = {**action_raw}
    for name, (section, field) in ACTION_INPUTS.items():
        value = env.get(input_env_name(name))
        if value is None or not value.strip():
            continue
        if section == "pr":
            # the body is markdown; surrounding whitespace is kept
            pr_raw[field] = value if field == "body" else value.strip()
        else:
            merged[field] = value.strip()
    merged["pr"] = pr_raw
    return merged


def _apply_github_env(action_raw: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    """Fill owner/name, token and API URL from the runner's GITHUB_* vars."""
    merged = {**action_raw}
    repository = env.get("GITHUB_REPOSITORY", "")
    if "/" in repository:
        owner, name = repository.split("/", 1)
        if not merged.get("repo_owner"):
            merged["repo_owner"] = owner
        if not merged.get("repo_name"):
            merged["repo_name"] = name
    # an unresolved ${VAR} placeholder from YAML counts as missing
    if not merged.get("repo_token") or str(merged["repo_token"]).startswith("$"):
        token = _read_secret(env, "GITHUB_TOKEN", "GITHUB_TOKEN_FILE")
        if token:
            merged["repo_token"] = token
    if env.get("GITHUB_API_URL"):
        merged["api_url"] = env["GITHUB_API_URL"]
    return merged


def load_config(config_path: Path | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    """Load config from YAML file, Actions inputs and environment.

    Raises:
        ConfigError: If a required value is missing or a value is invalid
    """
    env = dict(os.environ) if env is None else env

    path = config_path or DEFAULT_CONFIG_PATH
    raw: dict[str, Any] = {}
    if path.is_file():
        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        raw = _substitute_env(raw, env)

    action_raw = _apply_inputs(raw.get("action") or {}, env)
    action_raw = _apply_github_env(action_raw, env)

    try:
        action = ActionConfig(**action_raw)
        logging_config = LoggingConfig(**(raw.get("logging") or {}))
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    return AppConfig(action=action, logging=logging_config)
