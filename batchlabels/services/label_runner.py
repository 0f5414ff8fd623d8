from __future__ import annotations

from collections.abc import Callable

import structlog

from batchlabels.adapters.github_client import GitHubClient, GitHubClientError
from batchlabels.adapters.github_models import GitHubIssue
from batchlabels.schemas.labels import Issue, Repo, RunOptions

logger = structlog.get_logger(__name__)

# GitHub status codes meaning the requested state is already in place.
LABEL_EXISTS_STATUS = 422
LABEL_ABSENT_STATUS = 404


class LabelOperationError(Exception):
    """Raised when a remote label operation fails and the batch has to stop."""


class LabelRunner:
    """Applies or removes the labels grouped onto each repository, one blocking call at a time.

    The first unexpected GitHub error aborts the batch. Labels already applied
    stay applied.
    """

    def __init__(
        self,
        client: GitHubClient,
        options: RunOptions | None = None,
        echo: Callable[[str], None] = print,
    ) -> None:
        self._client = client
        self._options = options or RunOptions()
        self._echo = echo
        self._ensured: set[tuple[str, str]] = set()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def add(self, repos: list[Repo]) -> None:
        for repo in repos:
            for issue in repo.issues:
                for number in self._resolve_numbers(repo, issue):
                    self._add_to_issue(repo, number, issue)

    def remove(self, repos: list[Repo]) -> None:
        for repo in repos:
            for issue in repo.issues:
                for number in self._resolve_numbers(repo, issue):
                    self._remove_from_issue(repo, number, issue)

    def should_skip(self, issue: GitHubIssue) -> bool:
        """Whether an open issue falls outside the issues-only / pull-requests-only filter."""
        opts = self._options
        if issue.is_pull_request:
            return opts.only_issues or (opts.hacktoberfest and not opts.only_prs)
        return opts.only_prs

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_numbers(self, repo: Repo, issue: Issue) -> list[int]:
        if not issue.targets_all:
            return [issue.id]  # type: ignore[list-item]

        try:
            open_issues = self._client.list_open_issues(repo.full_name)
        except GitHubClientError as exc:
            raise LabelOperationError(f"Cannot find open issues for {repo}: {exc}") from exc

        numbers: list[int] = []
        for candidate in open_issues:
            if self.should_skip(candidate):
                logger.debug("issue_skipped", repo=str(repo), number=candidate.number)
                continue
            numbers.append(candidate.number)
        return numbers

    def _ensure_label(self, repo: Repo, issue: Issue) -> None:
        for label in issue.labels:
            key = (repo.full_name, label.name.lower())
            if key in self._ensured:
                continue
            try:
                self._client.create_label(repo.full_name, label)
                logger.info("label_created", repo=str(repo), label=label.name, color=label.color)
            except GitHubClientError as exc:
                if exc.status_code != LABEL_EXISTS_STATUS:
                    raise LabelOperationError(f"Cannot create label for {repo}: {exc}") from exc
                logger.debug("label_exists", repo=str(repo), label=label.name)
            self._ensured.add(key)

    def _add_to_issue(self, repo: Repo, number: int, issue: Issue) -> None:
        names = [label.name for label in issue.labels]
        if self._options.dry_run:
            self._echo(f"add    {repo}#{number}: {', '.join(names)}")
            return

        self._ensure_label(repo, issue)
        try:
            self._client.add_labels_to_issue(repo.full_name, number, names)
        except GitHubClientError as exc:
            raise LabelOperationError(f"Cannot add labels to {repo}: {exc}") from exc
        logger.info("labels_added", repo=str(repo), number=number, labels=names)

    def _remove_from_issue(self, repo: Repo, number: int, issue: Issue) -> None:
        for label in issue.labels:
            if self._options.dry_run:
                self._echo(f"remove {repo}#{number}: {label.name}")
                continue
            try:
                self._client.remove_label_from_issue(repo.full_name, number, label.name)
            except GitHubClientError as exc:
                if exc.status_code != LABEL_ABSENT_STATUS:
                    raise LabelOperationError(f"Cannot remove label for {repo}: {exc}") from exc
                logger.debug("label_absent", repo=str(repo), number=number, label=label.name)
                continue
            logger.info("label_removed", repo=str(repo), number=number, label=label.name)
