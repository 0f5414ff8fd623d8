import pytest
import structlog

from batchlabels.adapters.github_client import GitHubClient

API_URL = "https://api.github.com"


def issue_json(number: int, *, pull_request: bool = False, labels: list[str] | None = None) -> dict:
    """A trimmed-down issue object as returned by ``GET /repos/{owner}/{repo}/issues``."""
    data: dict = {
        "number": number,
        "title": f"Issue {number}",
        "state": "open",
        "labels": [{"name": name, "color": "ededed"} for name in labels or []],
    }
    if pull_request:
        data["pull_request"] = {"url": f"{API_URL}/repos/sshaw/batchlabels/pulls/{number}"}
    return data


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def github():
    with GitHubClient(token="test-token", base_url=API_URL) as client:
        yield client
