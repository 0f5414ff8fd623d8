"""HTTP adapter for the GitHub REST API v3."""

import json
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
import pydantic
import structlog

from batchlabels.adapters.github_models import GitHubIssue, GitHubLabel
from batchlabels.schemas.labels import Label

logger = structlog.get_logger(__name__)

_T = TypeVar("_T")


class GitHubClientError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubClient:
    _BASE_URL = "https://api.github.com"
    _PER_PAGE = 100

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if user_agent:
            headers["User-Agent"] = user_agent
        self._http = httpx.Client(base_url=base_url or self._BASE_URL, headers=headers)

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        if not self._http.is_closed:
            self._http.close()

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    def list_open_issues(self, repo: str) -> list[GitHubIssue]:
        """List every open issue and pull request in a repository.

        Args:
            repo: Repository in ``owner/repo`` format.

        Returns:
            All open issues, following ``Link: rel="next"`` pagination to the end.

        Raises:
            GitHubClientError: On any non-2xx response or transport failure.
        """
        issues: list[GitHubIssue] = []
        url: str | None = f"/repos/{repo}/issues"
        params: dict[str, Any] | None = {"state": "open", "per_page": self._PER_PAGE}

        while url is not None:
            resp = self._request("GET", url, params=params)
            issues.extend(self._parse_list(resp, GitHubIssue))
            # The next link already carries the query string.
            url = resp.links.get("next", {}).get("url")
            params = None

        logger.debug("open_issues_listed", repo=repo, count=len(issues))
        return issues

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    def create_label(self, repo: str, label: Label) -> GitHubLabel:
        """Create a repository label. GitHub answers 422 when the name is taken."""
        body: dict[str, Any] = {"name": label.name}
        if label.color:
            body["color"] = label.color
        resp = self._request("POST", f"/repos/{repo}/labels", json=body)
        return self._parse(resp, GitHubLabel)

    def add_labels_to_issue(self, repo: str, number: int, names: list[str]) -> list[GitHubLabel]:
        """Attach labels to an issue; returns the issue's full label set afterwards."""
        resp = self._request("POST", f"/repos/{repo}/issues/{number}/labels", json={"labels": names})
        return self._parse_list(resp, GitHubLabel)

    def remove_label_from_issue(self, repo: str, number: int, name: str) -> None:
        """Detach one label. GitHub answers 404 when the issue does not carry it."""
        self._request("DELETE", f"/repos/{repo}/issues/{number}/labels/{quote(name, safe='')}")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise GitHubClientError(f"GitHub request failed: {exc}") from exc
        self._raise_for_status(resp)
        return resp

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.is_error:
            raise GitHubClientError(
                f"GitHub API error {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )

    def _json(self, resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except json.JSONDecodeError as exc:
            raise GitHubClientError(
                f"GitHub returned non-JSON body (status {resp.status_code}): {exc}",
                status_code=resp.status_code,
            ) from exc

    def _parse(self, resp: httpx.Response, model: type[_T]) -> _T:
        try:
            return model.model_validate(self._json(resp))  # type: ignore[attr-defined]
        except pydantic.ValidationError as exc:
            raise GitHubClientError(
                f"GitHub response schema mismatch: {exc}",
                status_code=resp.status_code,
            ) from exc

    def _parse_list(self, resp: httpx.Response, model: type[_T]) -> list[_T]:
        """Parse the response body as a JSON array, validating each element."""
        items = self._json(resp)
        if not isinstance(items, list):
            raise GitHubClientError(
                f"GitHub returned unexpected shape, expected array, got {type(items).__name__} "
                f"(status {resp.status_code})",
                status_code=resp.status_code,
            )
        result: list[_T] = []
        for item in items:
            try:
                result.append(model.model_validate(item))  # type: ignore[attr-defined]
            except pydantic.ValidationError as exc:
                raise GitHubClientError(
                    f"GitHub response schema mismatch: {exc}",
                    status_code=resp.status_code,
                ) from exc
        return result
