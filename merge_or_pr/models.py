"""Data models for merge results, pull requests and run outcomes
(Pydantic)."""

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class Stage(str, Enum):
    """Steps of a single run, in the order they are reached."""

    START = "start"
    MERGE_ATTEMPTED = "merge_attempted"
    MERGED = "merged"
    CONFLICT = "conflict"
    PR_BRANCH_CREATED = "pr_branch_created"
    PR_OPENED = "pr_opened"
    ASSIGNEE_SET = "assignee_set"
    REVIEWER_SET = "reviewer_set"
    DONE = "done"
    FAILED = "failed"


class Merged(BaseModel):
    """The platform accepted the merge (or there was nothing to merge)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["merged"] = "merged"


class Conflict(BaseModel):
    """The platform rejected the merge with a conflict."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["conflict"] = "conflict"
    message: str


class OtherError(BaseModel):
    """The merge call failed for any reason other than a conflict."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["other_error"] = "other_error"
    name: str
    message: str
    status: int | None = None


MergeResult = Union[Merged, Conflict, OtherError]


class PullRequest(BaseModel):
    """Pull request as returned by the platform after creation."""

    number: int
    html_url: str
    # null until the platform has computed mergeability
    mergeable: bool | None = None


class Outcome(BaseModel):
    """What a run did: merged directly, or opened a pull request."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["merged", "pr_created"]
    pr_number: int | None = None
    pr_mergeable: bool | None = None
    pr_url: str | None = None
    merge_branch_name: str | None = None

    @property
    def pr_created(self) -> bool:
        return self.kind == "pr_created"

    @classmethod
    def merged(cls) -> "Outcome":
        return cls(kind="merged")

    @classmethod
    def from_pull_request(cls, pr: PullRequest, merge_branch_name: str) -> "Outcome":
        return cls(
            kind="pr_created",
            pr_number=pr.number,
            pr_mergeable=pr.mergeable,
            pr_url=pr.html_url,
            merge_branch_name=merge_branch_name,
        )
