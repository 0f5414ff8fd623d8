from unittest.mock import MagicMock, call

import pytest

from batchlabels.adapters.github_client import GitHubClient, GitHubClientError
from batchlabels.adapters.github_models import GitHubIssue
from batchlabels.schemas.labels import ALL_ISSUES, Issue, Label, Repo, RunOptions
from batchlabels.services.label_runner import LabelOperationError, LabelRunner

BUG = Label(name="bug", color="ff0000")
DOCS = Label(name="docs")


def make_repo(*issues: Issue) -> Repo:
    return Repo(owner="sshaw", name="batchlabels", issues=list(issues))


def open_issues(*numbers: int, prs: tuple[int, ...] = ()) -> list[GitHubIssue]:
    return [GitHubIssue(number=n, pull_request={"url": "x"} if n in prs else None) for n in numbers]


@pytest.fixture
def client() -> MagicMock:
    return MagicMock(spec=GitHubClient)


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


class TestAdd:
    def test_creates_labels_then_attaches_them(self, client: MagicMock) -> None:
        LabelRunner(client).add([make_repo(Issue(id=4, labels=[BUG, DOCS]))])

        assert client.create_label.call_args_list == [
            call("sshaw/batchlabels", BUG),
            call("sshaw/batchlabels", DOCS),
        ]
        client.add_labels_to_issue.assert_called_once_with("sshaw/batchlabels", 4, ["bug", "docs"])
        client.list_open_issues.assert_not_called()

    def test_existing_label_is_not_an_error(self, client: MagicMock) -> None:
        client.create_label.side_effect = GitHubClientError("Validation Failed", status_code=422)

        LabelRunner(client).add([make_repo(Issue(id=4, labels=[BUG]))])

        client.add_labels_to_issue.assert_called_once_with("sshaw/batchlabels", 4, ["bug"])

    def test_create_failure_aborts_batch(self, client: MagicMock) -> None:
        client.create_label.side_effect = GitHubClientError("Forbidden", status_code=403)

        with pytest.raises(LabelOperationError, match="Cannot create label for sshaw/batchlabels"):
            LabelRunner(client).add([make_repo(Issue(id=4, labels=[BUG]))])
        client.add_labels_to_issue.assert_not_called()

    def test_attach_failure_aborts_batch(self, client: MagicMock) -> None:
        client.add_labels_to_issue.side_effect = GitHubClientError("Not Found", status_code=404)
        repos = [make_repo(Issue(id=4, labels=[BUG]), Issue(id=5, labels=[BUG]))]

        with pytest.raises(LabelOperationError, match="Cannot add labels to sshaw/batchlabels"):
            LabelRunner(client).add(repos)
        assert client.add_labels_to_issue.call_count == 1

    def test_all_issues_are_enumerated(self, client: MagicMock) -> None:
        client.list_open_issues.return_value = open_issues(1, 2, 3)

        LabelRunner(client).add([make_repo(Issue(id=ALL_ISSUES, labels=[BUG]))])

        client.list_open_issues.assert_called_once_with("sshaw/batchlabels")
        assert [c.args[1] for c in client.add_labels_to_issue.call_args_list] == [1, 2, 3]

    def test_label_is_created_once_per_repo(self, client: MagicMock) -> None:
        client.list_open_issues.return_value = open_issues(1, 2, 3)

        LabelRunner(client).add([make_repo(Issue(id=ALL_ISSUES, labels=[BUG]))])

        client.create_label.assert_called_once_with("sshaw/batchlabels", BUG)

    def test_listing_failure_aborts_batch(self, client: MagicMock) -> None:
        client.list_open_issues.side_effect = GitHubClientError("boom", status_code=500)

        with pytest.raises(LabelOperationError, match="Cannot find open issues for sshaw/batchlabels"):
            LabelRunner(client).add([make_repo(Issue(id=ALL_ISSUES, labels=[BUG]))])

    def test_dry_run_makes_no_changes(self, client: MagicMock) -> None:
        client.list_open_issues.return_value = open_issues(8)
        lines: list[str] = []
        runner = LabelRunner(client, RunOptions(dry_run=True), echo=lines.append)

        runner.add([make_repo(Issue(id=3, labels=[BUG, DOCS]), Issue(id=ALL_ISSUES, labels=[DOCS]))])

        client.create_label.assert_not_called()
        client.add_labels_to_issue.assert_not_called()
        assert lines == ["add    sshaw/batchlabels#3: bug, docs", "add    sshaw/batchlabels#8: docs"]


# ---------------------------------------------------------------------------
# remove
# ---------------------------------------------------------------------------


class TestRemove:
    def test_detaches_each_label(self, client: MagicMock) -> None:
        LabelRunner(client).remove([make_repo(Issue(id=9, labels=[BUG, DOCS]))])

        assert client.remove_label_from_issue.call_args_list == [
            call("sshaw/batchlabels", 9, "bug"),
            call("sshaw/batchlabels", 9, "docs"),
        ]
        client.create_label.assert_not_called()

    def test_absent_label_is_not_an_error(self, client: MagicMock) -> None:
        client.remove_label_from_issue.side_effect = GitHubClientError("Label does not exist", status_code=404)

        LabelRunner(client).remove([make_repo(Issue(id=9, labels=[BUG, DOCS]))])

        assert client.remove_label_from_issue.call_count == 2

    def test_other_errors_abort_batch(self, client: MagicMock) -> None:
        client.remove_label_from_issue.side_effect = GitHubClientError("Unauthorized", status_code=401)

        with pytest.raises(LabelOperationError, match="Cannot remove label for sshaw/batchlabels"):
            LabelRunner(client).remove([make_repo(Issue(id=9, labels=[BUG, DOCS]))])
        assert client.remove_label_from_issue.call_count == 1

    def test_all_issues_are_enumerated(self, client: MagicMock) -> None:
        client.list_open_issues.return_value = open_issues(1, 2)

        LabelRunner(client).remove([make_repo(Issue(id=ALL_ISSUES, labels=[DOCS]))])

        assert client.remove_label_from_issue.call_args_list == [
            call("sshaw/batchlabels", 1, "docs"),
            call("sshaw/batchlabels", 2, "docs"),
        ]

    def test_dry_run_makes_no_changes(self, client: MagicMock) -> None:
        lines: list[str] = []
        runner = LabelRunner(client, RunOptions(dry_run=True), echo=lines.append)

        runner.remove([make_repo(Issue(id=3, labels=[BUG, DOCS]))])

        client.remove_label_from_issue.assert_not_called()
        assert lines == ["remove sshaw/batchlabels#3: bug", "remove sshaw/batchlabels#3: docs"]


# ---------------------------------------------------------------------------
# issue / pull request filtering
# ---------------------------------------------------------------------------


class TestFiltering:
    @pytest.mark.parametrize(
        ("options", "expected"),
        [
            (RunOptions(), [1, 2, 3, 4]),
            (RunOptions(only_issues=True), [1, 3]),
            (RunOptions(only_prs=True), [2, 4]),
            (RunOptions(hacktoberfest=True), [1, 3]),
            (RunOptions(hacktoberfest=True, only_prs=True), [2, 4]),
        ],
    )
    def test_open_issues_are_filtered(self, client: MagicMock, options: RunOptions, expected: list[int]) -> None:
        client.list_open_issues.return_value = open_issues(1, 2, 3, 4, prs=(2, 4))

        LabelRunner(client, options).add([make_repo(Issue(id=ALL_ISSUES, labels=[BUG]))])

        assert [c.args[1] for c in client.add_labels_to_issue.call_args_list] == expected

    def test_explicit_ids_are_never_filtered(self, client: MagicMock) -> None:
        LabelRunner(client, RunOptions(only_issues=True)).add([make_repo(Issue(id=2, labels=[BUG]))])

        client.list_open_issues.assert_not_called()
        client.add_labels_to_issue.assert_called_once_with("sshaw/batchlabels", 2, ["bug"])
