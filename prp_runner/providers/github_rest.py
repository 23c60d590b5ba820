"""GitHub access for the pipeline: issues, comments and pull requests.

PyGithub is synchronous; every call runs in a worker thread through
``asyncio.to_thread`` and ``GithubException`` is turned into
``ExternalServiceError`` carrying the HTTP status.
"""

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from github import Auth, Github, GithubException  # type: ignore[import-not-found]
from github.Issue import Issue as GHIssue  # type: ignore[import-not-found]
from github.IssueComment import IssueComment as GHComment  # type: ignore[import-not-found]
from github.PullRequest import PullRequest as GHPullRequest  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from prp_runner.exceptions import ExternalServiceError
from prp_runner.models.domain import Comment, Issue, PullRequest

log = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_API_URL = "https://api.github.com"


def _service_error(action: str, error: GithubException) -> ExternalServiceError:
    data = error.data if isinstance(error.data, dict) else {}
    detail = data.get("message") or str(error)
    return ExternalServiceError(
        f"Failed to {action}: {detail}",
        status_code=error.status,
        response_text=str(error.data),
    )


async def _call(action: str, func: Callable[[], T], **log_fields: Any) -> T:
    try:
        return await asyncio.to_thread(func)
    except GithubException as e:
        log.error("github_request_failed", action=action, status=e.status, **log_fields)
        raise _service_error(action, e) from e


def to_issue(gh_issue: GHIssue) -> Issue:
    return Issue(
        number=gh_issue.number,
        title=gh_issue.title,
        body=gh_issue.body or "",
        url=gh_issue.html_url,
    )


def to_comment(gh_comment: GHComment) -> Comment:
    author = gh_comment.user.login if gh_comment.user else "unknown"
    return Comment(id=gh_comment.id, body=gh_comment.body or "", author=author, created_at=gh_comment.created_at)


def to_pull_request(gh_pr: GHPullRequest) -> PullRequest:
    return PullRequest(
        number=gh_pr.number,
        title=gh_pr.title,
        head=gh_pr.head.ref,
        base=gh_pr.base.ref,
        url=gh_pr.html_url,
        draft=bool(gh_pr.draft),
    )


class GitHubRestProvider:
    """One repository on github.com or a GitHub Enterprise server.

    Call ``connect()`` before anything else and ``disconnect()`` when done.
    """

    def __init__(self, token: str, owner: str, repo: str, base_url: str = DEFAULT_API_URL):
        self.token = token.strip() if token else token
        self.owner = owner
        self.repo = repo
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None
        self._repo: GHRepository | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def repository(self) -> GHRepository:
        if self._repo is None:
            raise ExternalServiceError("GitHub provider is not connected; call connect() first")
        return self._repo

    async def connect(self) -> None:
        client = Github(auth=Auth.Token(self.token), base_url=self.base_url)
        self._repo = await _call(f"open repository {self.full_name}", lambda: client.get_repo(self.full_name))
        self._client = client
        log.info("github_connected", base_url=self.base_url, repository=self.full_name)

    async def disconnect(self) -> None:
        client, self._client, self._repo = self._client, None, None
        if client is not None:
            await asyncio.to_thread(client.close)

    async def get_issue(self, issue_number: int) -> Issue:
        gh_issue = await _call(
            f"get issue #{issue_number}", lambda: self.repository.get_issue(issue_number), issue=issue_number
        )
        return to_issue(gh_issue)

    async def get_comments(self, issue_number: int) -> list[Comment]:
        """Every comment on the issue, oldest first."""
        gh_comments = await _call(
            f"list comments on issue #{issue_number}",
            lambda: list(self.repository.get_issue(issue_number).get_comments()),
            issue=issue_number,
        )
        log.debug("github_comments_fetched", issue=issue_number, count=len(gh_comments))
        return [to_comment(c) for c in gh_comments]

    async def add_comment(self, issue_number: int, body: str) -> Comment:
        gh_comment = await _call(
            f"comment on issue #{issue_number}",
            lambda: self.repository.get_issue(issue_number).create_comment(body),
            issue=issue_number,
        )
        log.info("github_comment_added", issue=issue_number, comment_id=gh_comment.id)
        return to_comment(gh_comment)

    async def create_pull_request(
        self,
        title: str,
        body: str,
        head: str,
        base: str,
        draft: bool = False,
    ) -> PullRequest:
        gh_pr = await _call(
            "create pull request",
            lambda: self.repository.create_pull(title=title, body=body, head=head, base=base, draft=draft),
            head=head,
            base=base,
        )
        pr = to_pull_request(gh_pr)
        log.info("pull_request_created", number=pr.number, url=pr.url, draft=pr.draft)
        return pr
