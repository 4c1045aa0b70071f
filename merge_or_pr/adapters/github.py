"""GitHub REST API adapter."""

import logging
from typing import Any, Dict, List

import requests
from pydantic import ValidationError

from merge_or_pr.adapters.base import GitPlatformAdapter, GitPlatformError, HttpError
from merge_or_pr.models import PullRequest

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 30


def _pr_from_api(data: Any) -> PullRequest:
    if not isinstance(data, dict):
        raise GitPlatformError(f"Unexpected pull request response: {data!r}")
    try:
        return PullRequest(
            number=data["number"],
            html_url=data.get("html_url") or "",
            mergeable=data.get("mergeable"),
        )
    except (KeyError, ValidationError) as e:
        raise GitPlatformError(f"Malformed pull request response: {e!r}") from e


def _json_body(resp: requests.Response, path: str) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise GitPlatformError(f"Invalid JSON in response from {path}: {e}", status=resp.status_code) from e


class GitHubAdapter(GitPlatformAdapter):
    """GitHub API implementation of GitPlatformAdapter."""

    def __init__(self, token: str | None = None, api_url: str = DEFAULT_API_URL) -> None:
        self.api_url = api_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    def _request(
        self,
        method: str,
        path: str,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self.api_url}{path}"
        logger.debug("%s %s", method, path)
        try:
            resp = self._session.request(method, url, json=json, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise GitPlatformError(f"{method} {path} failed: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                data = resp.json()
                if isinstance(data, dict) and data.get("message"):
                    msg = data["message"]
            except ValueError:
                pass
            raise HttpError(resp.status_code, msg)
        return resp

    def merge(self, owner: str, repo: str, base: str, head: str) -> str | None:
        """Merge head into base via the merges endpoint.

        GitHub answers 201 with the merge commit, 204 when base already
        contains head, and 409 on a merge conflict.
        """
        resp = self._request(
            "POST",
            f"/repos/{owner}/{repo}/merges",
            json={"base": base, "head": head},
        )
        if resp.status_code == 204:
            return None
        data = _json_body(resp, f"/repos/{owner}/{repo}/merges")
        if not isinstance(data, dict):
            raise GitPlatformError(f"Unexpected merge response: {data!r}", status=resp.status_code)
        return data.get("sha")

    def create_ref(self, owner: str, repo: str, ref: str, sha: str) -> None:
        self._request(
            "POST",
            f"/repos/{owner}/{repo}/git/refs",
            json={"ref": ref, "sha": sha},
        )

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
        resp = self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls",
            json={
                "title": title,
                "body": body,
                "head": head,
                "base": base,
                "draft": draft,
                "maintainer_can_modify": maintainer_can_modify,
            },
        )
        return _pr_from_api(_json_body(resp, f"/repos/{owner}/{repo}/pulls"))

    def add_assignees(self, owner: str, repo: str, issue_number: int, assignees: List[str]) -> None:
        self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/assignees",
            json={"assignees": assignees},
        )

    def request_reviewers(self, owner: str, repo: str, pull_number: int, reviewers: List[str]) -> None:
        self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls/{pull_number}/requested_reviewers",
            json={"reviewers": reviewers},
        )

    def close(self) -> None:
        self._session.close()
