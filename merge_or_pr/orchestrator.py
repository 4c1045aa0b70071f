"""Merge a head commit into a branch, or open a pull request on conflict.

A run goes through these stages (see Stage):

    START -> MERGE_ATTEMPTED -> MERGED
                             -> CONFLICT -> PR_BRANCH_CREATED -> PR_OPENED
                                -> [ASSIGNEE_SET] -> [REVIEWER_SET] -> DONE

Any unexpected error ends the run in FAILED. Every remote call is made
exactly once.
"""

import logging
from typing import Any, Callable, TypeVar

from merge_or_pr import outputs as out
from merge_or_pr.adapters.base import GitPlatformAdapter, GitPlatformError
from merge_or_pr.config import ActionConfig
from merge_or_pr.models import Conflict, Merged, MergeResult, OtherError, Outcome, PullRequest, Stage
from merge_or_pr.outputs import StepOutputs

logger = logging.getLogger(__name__)

EXPECTED_CONFLICT_MESSAGE = "Merge conflict"
CONFLICT_STATUS = 409

T = TypeVar("T")


class MergeOrPrError(Exception):
    """Fatal failure of a run; stage is the one the failed step would have
    reached."""

    def __init__(self, stage: Stage, action: str, message: str) -> None:
        super().__init__(f"{action} failed at stage '{stage.value}': {message}")
        self.stage = stage
        self.action = action


def attempt_merge(adapter: GitPlatformAdapter, config: ActionConfig) -> MergeResult:
    """Ask the platform to merge head into base; classify the result.

    Only an HTTP 409 raised as an HTTP error counts as a conflict. Anything
    else the adapter raises becomes OtherError.
    """
    try:
        sha = adapter.merge(
            config.repo_owner,
            config.repo_name,
            base=config.target_branch,
            head=config.head_to_merge,
        )
    except GitPlatformError as e:
        if e.name == "HttpError" and e.status == CONFLICT_STATUS:
            return Conflict(message=e.message)
        return OtherError(name=e.name, message=str(e), status=e.status)
    if sha:
        logger.info("Merged %s into %s (%s)", config.head_to_merge, config.target_branch, sha)
    else:
        logger.info("%s already contains %s, nothing to merge", config.target_branch, config.head_to_merge)
    return Merged()


class MergeOrPr:
    """Runs one merge-or-PR step against a platform adapter."""

    def __init__(self, adapter: GitPlatformAdapter, config: ActionConfig, outputs: StepOutputs | None = None) -> None:
        self._adapter = adapter
        self._config = config
        self._outputs = outputs if outputs is not None else StepOutputs()
        self.stage = Stage.START

    def run(self) -> Outcome:
        """Merge, or fall back to a pull request on conflict.

        Raises:
            MergeOrPrError: If the merge fails for a reason other than a
                conflict, or any pull request step fails
        """
        config = self._config
        logger.info(
            "Merging %s into %s/%s:%s",
            config.head_to_merge,
            config.repo_owner,
            config.repo_name,
            config.target_branch,
        )
        try:
            result = attempt_merge(self._adapter, config)
        except Exception:
            self.stage = Stage.FAILED
            raise
        self.stage = Stage.MERGE_ATTEMPTED

        if isinstance(result, Merged):
            self._outputs.set(out.PR_CREATED, False)
            self.stage = Stage.MERGED
            return Outcome.merged()

        if isinstance(result, OtherError):
            self.stage = Stage.FAILED
            raise MergeOrPrError(Stage.MERGE_ATTEMPTED, "merge", result.message)

        self._log_conflict(result)
        self.stage = Stage.CONFLICT
        pr = self.create_pr()
        return Outcome.from_pull_request(pr, config.pr.merge_branch_name)

    def _log_conflict(self, conflict: Conflict) -> None:
        logger.debug('API returned conflict: "%s"', conflict.message)
        if conflict.message != EXPECTED_CONFLICT_MESSAGE:
            logger.warning(
                'Unexpected conflict message was returned from GitHub API: "%s", '
                "please ensure you're using a token that can push to protected branches",
                conflict.message,
            )

    def _call(self, stage: Stage, action: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run one remote step that reaches stage on success.

        Platform errors are wrapped as fatal; any other error still ends
        the run in FAILED before propagating.
        """
        try:
            value = fn(*args, **kwargs)
        except GitPlatformError as e:
            self.stage = Stage.FAILED
            raise MergeOrPrError(stage, action, str(e)) from e
        except Exception:
            self.stage = Stage.FAILED
            raise
        self.stage = stage
        return value

    def create_pr(self) -> PullRequest:
        """Create the merge branch at head, open the PR, then assign and
        request review if configured. Steps run strictly in this order."""
        config = self._config
        pr_config = config.pr
        owner, repo = config.repo_owner, config.repo_name
        branch_ref = f"refs/heads/{pr_config.merge_branch_name}"

        self._call(
            Stage.PR_BRANCH_CREATED,
            "create branch",
            self._adapter.create_ref,
            owner,
            repo,
            ref=branch_ref,
            sha=config.head_to_merge,
        )
        logger.info("Created %s at %s", branch_ref, config.head_to_merge)

        pr = self._call(
            Stage.PR_OPENED,
            "create pull request",
            self._adapter.create_pr,
            owner,
            repo,
            title=pr_config.title,
            body=pr_config.body,
            head=branch_ref,
            base=config.target_branch,
            draft=pr_config.is_draft,
            maintainer_can_modify=pr_config.maintainer_can_modify,
        )
        logger.info("Opened pull request #%s: %s", pr.number, pr.html_url)

        if pr_config.assigned_user:
            self._call(
                Stage.ASSIGNEE_SET,
                "add assignee",
                self._adapter.add_assignees,
                owner,
                repo,
                issue_number=pr.number,
                assignees=[pr_config.assigned_user],
            )
            logger.info("Assigned %s to #%s", pr_config.assigned_user, pr.number)

        if pr_config.reviewer:
            self._call(
                Stage.REVIEWER_SET,
                "request reviewer",
                self._adapter.request_reviewers,
                owner,
                repo,
                pull_number=pr.number,
                reviewers=[pr_config.reviewer],
            )
            logger.info("Requested review from %s on #%s", pr_config.reviewer, pr.number)

        self._outputs.set(out.PR_CREATED, True)
        self._outputs.set(out.PR_NUMBER, pr.number)
        self._outputs.set(out.PR_MERGEABLE, pr.mergeable)
        self._outputs.set(out.PR_URL, pr.html_url)
        self._outputs.set(out.MERGE_BRANCH_NAME, pr_config.merge_branch_name)
        self.stage = Stage.DONE
        return pr


def merge_or_pr(adapter: GitPlatformAdapter, config: ActionConfig, outputs: StepOutputs | None = None) -> Outcome:
    """Run a single merge-or-PR step."""
    return MergeOrPr(adapter, config, outputs).run()
