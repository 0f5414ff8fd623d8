import argparse
import logging
import sys
import textwrap

import structlog

from batchlabels.adapters.github_client import GitHubClient
from batchlabels.config.config import settings
from batchlabels.schemas.labels import RunOptions
from batchlabels.services.label_runner import LabelOperationError, LabelRunner
from batchlabels.services.repo_parser import LabelSpecError, apply_hacktoberfest, build_repo_list

COMMAND_ADD = "add"
COMMAND_REMOVE = "remove"

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_REMOTE = 3

logger = structlog.get_logger(__name__)


def configure_logging(debug: bool = False) -> None:
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if debug else logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batchlabels",
        usage="%(prog)s [-hipnv] [-a TOKEN] [--hacktoberfest] command label [label ...] repo [repo ...]",
        description="Add or remove labels in batches to/from GitHub issues and pull requests.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            label can be one of: label, label#color, issue:label#color or
            issue1,issue2:labelA#color,labelB#color

            color is the 6 digit hex color for the label. If label contains no
            issues it is added to or removed from every open issue in the repo(s).

            With --hacktoberfest, labels that are plain integers are treated as
            issue IDs to receive the "hacktoberfest" label. If none are given the
            label goes on every open issue (not pull request) in the repo(s).

            repo must be given in username/reponame format.

            Options may come before or after command.
            Labels starting with - must follow --, after which nothing is read as an option.

            Examples:
              batchlabels add bug#d73a4a sshaw/batchlabels
              batchlabels add 12,14:docs,help-wanted#008672 sshaw/a sshaw/b
              batchlabels remove -p wip sshaw/batchlabels
              batchlabels --hacktoberfest add 3 5 8 sshaw/batchlabels
              batchlabels remove -- -wip sshaw/batchlabels
        """),
    )
    parser.add_argument(
        "-a",
        "--auth",
        metavar="TOKEN",
        help="repository auth token, defaults to the BATCHLABELS_AUTH_TOKEN environment variable",
    )
    only = parser.add_mutually_exclusive_group()
    only.add_argument(
        "-i", "--issues", action="store_true", help="only apply labels to issues and not pull requests"
    )
    only.add_argument("-p", "--pull-requests", action="store_true", help="only apply labels to pull requests")
    parser.add_argument(
        "--hacktoberfest",
        action="store_true",
        help='add the "hacktoberfest" label to the given IDs or to all open issues',
    )
    parser.add_argument(
        "-n", "--dry-run", action="store_true", help="print the changes that would be made without making them"
    )
    parser.add_argument("--debug", action="store_true", help="log every request outcome to stderr")
    parser.add_argument("-v", "--version", action="version", version=settings.app_version)
    parser.add_argument("command", choices=[COMMAND_ADD, COMMAND_REMOVE], help="add or remove")
    parser.add_argument("args", nargs="*", metavar="label|repo", help="label specifiers followed by repositories")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)
    configure_logging(args.debug)

    # add label repo, or with --hacktoberfest just add repo
    min_args = 1 if args.hacktoberfest else 2
    if len(args.args) < min_args:
        parser.print_usage(sys.stderr)
        return EXIT_USAGE

    try:
        repos = build_repo_list(args.args)
    except LabelSpecError as exc:
        print(f"Invalid label: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if not repos:
        print("No repository given", file=sys.stderr)
        return EXIT_USAGE

    options = RunOptions(
        only_issues=args.issues,
        only_prs=args.pull_requests,
        hacktoberfest=args.hacktoberfest,
        dry_run=args.dry_run,
    )
    if options.hacktoberfest:
        apply_hacktoberfest(repos)

    token = args.auth or settings.auth_token
    if not token:
        logger.warning("auth_token_missing", hint="set BATCHLABELS_AUTH_TOKEN or pass --auth")

    adding = args.command == COMMAND_ADD
    print("Adding labels..." if adding else "Removing labels...")

    with GitHubClient(token=token, base_url=settings.github_api_url, user_agent=settings.user_agent) as client:
        runner = LabelRunner(client, options)
        try:
            if adding:
                runner.add(repos)
            else:
                runner.remove(repos)
        except LabelOperationError as exc:
            action = "add" if adding else "remove"
            print(f"Failed to {action} labels: {exc}", file=sys.stderr)
            return EXIT_REMOTE

    print("Labels successfully added" if adding else "Labels successfully removed")
    return EXIT_OK


def run() -> None:
    sys.exit(main())
