"""Turns command-line tokens into repositories carrying the issues and labels to touch."""

import re

import structlog

from batchlabels.schemas.labels import ALL_ISSUES, HEX_COLOR_PATTERN, Issue, Label, Repo

logger = structlog.get_logger(__name__)

LIST_SEP = ","
ID_LABEL_SEP = ":"
COLOR_SEP = "#"

HACKTOBERFEST_LABEL = Label(name="hacktoberfest", color="ff9a56")

_REPO_RE = re.compile(r"([^/\s]+)/([^/\s]+)")
_COLOR_RE = re.compile(HEX_COLOR_PATTERN)
_DIGITS_RE = re.compile(r"[0-9]+")


class LabelSpecError(ValueError):
    """Raised for a label or issue specifier that cannot be parsed."""


def parse_labels(spec: str) -> list[Label]:
    """Parse ``name``, ``name#color`` or a comma-separated list of either."""
    labels: list[Label] = []
    for part in spec.split(LIST_SEP):
        name, _, color = part.partition(COLOR_SEP)
        name = name.strip()
        if not name:
            raise LabelSpecError(f"Label name missing in '{spec}'")
        if color and not _COLOR_RE.fullmatch(color):
            raise LabelSpecError(f"Invalid color '{color}' for label '{name}', expected 6 hex digits")
        labels.append(Label(name=name, color=color or None))
    return labels


def _parse_issue_ids(spec: str, token: str) -> list[int]:
    ids: list[int] = []
    for part in spec.split(LIST_SEP):
        part = part.strip()
        if not _DIGITS_RE.fullmatch(part) or int(part) == 0:
            raise LabelSpecError(f"Invalid issue id '{part}' in '{token}'")
        ids.append(int(part))
    return ids


def build_repo_list(tokens: list[str]) -> list[Repo]:
    """Group label specifiers onto the repositories that follow them.

    Specifiers accumulate from the start of the argument list, so every
    repository receives all specifiers given before it. Specifiers with no
    ``ids:`` prefix go to the ``ALL_ISSUES`` bucket.

    Raises:
        LabelSpecError: If a specifier has an empty label name, a bad color or a bad issue id.
    """
    repos: list[Repo] = []
    pending: dict[int | str, list[Label]] = {}
    trailing: list[str] = []

    for token in tokens:
        match = _REPO_RE.fullmatch(token)
        if match:
            issues = [Issue(id=issue_id, labels=list(labels)) for issue_id, labels in pending.items()]
            repos.append(Repo(owner=match.group(1), name=match.group(2), issues=issues))
            trailing = []
            continue

        ids_spec, sep, labels_spec = token.partition(ID_LABEL_SEP)
        if not sep:
            pending.setdefault(ALL_ISSUES, []).extend(parse_labels(token))
        else:
            labels = parse_labels(labels_spec)
            for issue_id in _parse_issue_ids(ids_spec, token):
                pending.setdefault(issue_id, []).extend(labels)
        trailing.append(token)

    if repos and trailing:
        logger.warning("specifiers_without_repo_ignored", tokens=trailing)

    return repos


def _has_only_id_labels(issues: list[Issue]) -> bool:
    """True when every specifier was a bare integer, i.e. an issue id rather than a label."""
    if not issues:
        return False
    for issue in issues:
        if not issue.targets_all:
            return False
        for label in issue.labels:
            if label.color or not _DIGITS_RE.fullmatch(label.name) or int(label.name) == 0:
                return False
    return True


def apply_hacktoberfest(repos: list[Repo]) -> None:
    """Add the hacktoberfest label to each repository's issues, in place.

    Bare integer specifiers are read as issue ids to label; otherwise every
    open issue gets the label alongside whatever else was requested.
    """
    for repo in repos:
        if _has_only_id_labels(repo.issues):
            repo.issues = [
                Issue(id=int(label.name), labels=[HACKTOBERFEST_LABEL])
                for issue in repo.issues
                for label in issue.labels
            ]
        else:
            repo.issues.append(Issue(id=ALL_ISSUES, labels=[HACKTOBERFEST_LABEL]))
