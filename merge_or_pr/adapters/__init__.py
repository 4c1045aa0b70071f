"""Git platform adapters (base and implementations)."""

from merge_or_pr.adapters.base import GitPlatformAdapter, GitPlatformError, HttpError
from merge_or_pr.adapters.github import GitHubAdapter

__all__ = ["GitPlatformAdapter", "GitPlatformError", "GitHubAdapter", "HttpError"]
