"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from typing import List

from merge_or_pr.models import PullRequest


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    name = "GitPlatformError"

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class HttpError(GitPlatformError):
    """The platform answered with an HTTP error status (>= 400)."""

    name = "HttpError"

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message, status=status)

    def __str__(self) -> str:
        return f"{self.status}: {self.message}"


class GitPlatformAdapter(ABC):
    """Abstract interface for the remote calls a merge-or-pr run needs."""

    @abstractmethod
    def merge(self, owner: str, repo: str, base: str, head: str) -> str | None:
        """Merge head into base.

        Args:
            owner: Repository owner (user or organization)
            repo: Repository name
            base: Branch to merge into
            head: Commit SHA or ref to merge

        Returns:
            SHA of the merge commit, or None when there was nothing to merge

        Raises:
            HttpError: On a rejected merge (409 for conflicts)
            GitPlatformError: On transport failures
        """
        ...

    @abstractmethod
    def create_ref(self, owner: str, repo: str, ref: str, sha: str) -> None:
        """Create a fully qualified reference (e.g. refs/heads/name) at sha."""
        ...

    @abstractmethod
    def create_pr(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
        draft: bool = False,
        maintainer_can_modify: bool = True,
    ) -> PullRequest:
        """Open a pull request from head into base."""
        ...

    @abstractmethod
    def add_assignees(self, owner: str, repo: str, issue_number: int, assignees: List[str]) -> None:
        """Add assignees to an issue or pull request."""
        ...

    @abstractmethod
    def request_reviewers(self, owner: str, repo: str, pull_number: int, reviewers: List[str]) -> None:
        """Request reviews on a pull request."""
        ...

    def close(self) -> None:
        """Release client resources. Override if needed."""
        return None
