"""Pydantic models for the GitHub API adapter."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class GitHubLabel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    color: str | None = None


class GitHubIssue(BaseModel):
    model_config = ConfigDict(extra="ignore")

    number: int
    # Present only when the issue is a pull request.
    pull_request: dict[str, Any] | None = None

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None
