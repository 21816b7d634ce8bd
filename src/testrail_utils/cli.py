"""Command line entry point: ``testrail-utils``.

Subcommands:

- ``runs``  -- list the runs of a project, filtered and ordered.
- ``tests`` -- list the tests of a run, optionally matched to files.
- ``cases`` -- reconcile a testsuite with a directory of test files,
  and optionally push the result back to TestRail.
- ``check`` -- verify the connection settings.
- ``init``  -- write a starter config file.

Results go to stdout; log records and errors go to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from dotenv import load_dotenv

from . import __version__
from .config import load_config, resolve_flag
from .config_loader import ensure_config, load_config_files
from .config_schema import UnifiedConfig, build_config
from .core.client import TestRailClient
from .errors import TestRailError
from .find import (
    CaseQuery,
    CaseSyncOptions,
    FileMatchOptions,
    MatchMode,
    RunQuery,
    TestQuery,
    find_cases,
    find_runs,
    find_tests,
    get_cases,
    get_tests,
)
from .logger import setup_logging
from .sync import (
    Synchronizer,
    create_resolver,
    format_reconciliation,
    format_sync_report,
    reconciliation_to_json,
    report_to_json,
)

logger = logging.getLogger(__name__)


def _stderr_print(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="testrail-utils",
        description="Find runs, tests and cases in TestRail and sync cases with test files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Runs with retest results, newest first
  testrail-utils runs --project Widgets --status retest --lifo

  # Tests of a plan run that exist under t/
  testrail-utils tests --project Widgets --plan "Release 2" --run Smoke \\
      --config Linux --match t/ --extension .t --names-only

  # Preview a sync of the Master testsuite with t/
  testrail-utils cases --project Widgets --testsuite Master \\
      --directory t/ --extension .t --orphans --update --sync --dry-run
        """,
    )

    parser.add_argument("--url", help="Override TestRail URL (TESTRAIL_URL)")
    parser.add_argument(
        "--username", help="Override TestRail user (TESTRAIL_USERNAME)"
    )
    parser.add_argument(
        "--password",
        help="Override TestRail password or API key (TESTRAIL_PASSWORD)"
        " (visible in process list -- prefer the env var)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification (use only for development)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Log record format (default: text)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"testrail-utils version {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    runs = subparsers.add_parser("runs", help="List runs of a project")
    runs.add_argument("--project", required=True)
    runs.add_argument(
        "--status",
        action="append",
        dest="statuses",
        help="Only runs with results in this status (repeatable, all must match)",
    )
    runs.add_argument(
        "--config",
        action="append",
        dest="configs",
        help="Only plan runs with exactly these configurations (repeatable)",
    )
    runs.add_argument(
        "--lifo", action="store_true", help="Newest first"
    )
    runs.add_argument(
        "--milesort",
        action="store_true",
        help="Sort by milestone due date instead of creation date",
    )
    runs.add_argument("--json", action="store_true")
    runs.set_defaults(handler=_cmd_runs)

    tests = subparsers.add_parser("tests", help="List tests of a run")
    tests.add_argument("--project", required=True)
    tests.add_argument("--run", required=True)
    tests.add_argument("--plan")
    tests.add_argument("--config", action="append", dest="configs")
    tests.add_argument(
        "--assignedto", action="append", dest="users", metavar="USER"
    )
    tests.add_argument("--status", action="append", dest="statuses")
    tests.add_argument(
        "--match", metavar="DIR", help="Only tests with a file in DIR"
    )
    tests.add_argument(
        "--no-match",
        metavar="DIR",
        help="Only files in DIR without a test",
    )
    tests.add_argument(
        "--orphans", metavar="DIR", help="Only tests without a file in DIR"
    )
    tests.add_argument(
        "--no-recurse",
        action="store_true",
        help="Do not scan subdirectories",
    )
    tests.add_argument("--names-only", action="store_true")
    tests.add_argument("--extension", help="Only files ending with this")
    tests.add_argument("--json", action="store_true")
    tests.set_defaults(handler=_cmd_tests)

    cases = subparsers.add_parser(
        "cases", help="Reconcile a testsuite with test files"
    )
    cases.add_argument("--project", required=True)
    cases.add_argument("--testsuite", required=True)
    cases.add_argument("--section")
    cases.add_argument("--type", action="append", dest="types")
    cases.add_argument("--directory", required=True)
    cases.add_argument("--extension")
    cases.add_argument(
        "--no-recurse",
        action="store_true",
        help="Do not scan subdirectories",
    )
    cases.add_argument(
        "--no-missing",
        action="store_true",
        help="Do not report files without a case",
    )
    cases.add_argument(
        "--orphans",
        action="store_true",
        help="Report cases without a file",
    )
    cases.add_argument(
        "--update",
        action="store_true",
        help="Report cases with a file",
    )
    cases.add_argument(
        "--sync",
        action="store_true",
        help="Create, delete and update cases in TestRail",
    )
    cases.add_argument(
        "--dry-run",
        action="store_true",
        help="With --sync, only show what would change",
    )
    cases.add_argument(
        "--section-id",
        type=int,
        help="Section for newly created cases",
    )
    cases.add_argument("--json", action="store_true")
    cases.set_defaults(handler=_cmd_cases)

    check = subparsers.add_parser(
        "check", help="Verify connection settings"
    )
    check.set_defaults(handler=_cmd_check)

    init = subparsers.add_parser(
        "init", help="Write a starter config file if none exists"
    )
    init.set_defaults(handler=_cmd_init, needs_client=False)

    return parser


def _load_settings(args: argparse.Namespace) -> UnifiedConfig:
    """Load .env and the YAML config files; configure logging."""
    load_dotenv()
    unified = build_config(load_config_files())

    setup_logging(
        debug=resolve_flag(
            args.debug, "TESTRAIL_DEBUG", unified.testrail.debug
        ),
        log_file=args.log_file or unified.logging.file,
        debug_format=args.log_format,
        level=unified.logging.level,
    )
    return unified


def _create_client(
    args: argparse.Namespace, unified: UnifiedConfig
) -> TestRailClient:
    yaml_fallbacks = {
        k: v
        for k, v in unified.testrail.model_dump().items()
        if v is not None
    }
    config = load_config(
        url=args.url,
        username=args.username,
        password=args.password,
        insecure=args.insecure,
        debug=args.debug,
        yaml_fallbacks=yaml_fallbacks,
    )
    logger.debug("TestRail URL: %s", config.testrail_url)
    return TestRailClient(config)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _cmd_runs(
    args: argparse.Namespace,
    client: TestRailClient,
    unified: UnifiedConfig,
) -> int:
    runs = find_runs(
        RunQuery(
            project=args.project,
            statuses=args.statuses,
            configs=args.configs,
            lifo=args.lifo,
            sort_by_milestone=args.milesort,
        ),
        client,
    )
    if args.json:
        _print_json([run.model_dump(mode="json") for run in runs])
    else:
        for run in runs:
            print(run.name)
    return 0


def _cmd_tests(
    args: argparse.Namespace,
    client: TestRailClient,
    unified: UnifiedConfig,
) -> int:
    # Conflicting flags fail before any request is made
    options = FileMatchOptions.from_flags(
        match=args.match,
        no_match=args.no_match,
        orphans=args.orphans,
        recursive=unified.finder.recursive and not args.no_recurse,
        names_only=args.names_only,
        extension=(
            args.extension
            if args.extension is not None
            else unified.finder.extension
        ),
    )
    tests, run = get_tests(
        TestQuery(
            project=args.project,
            run=args.run,
            plan=args.plan,
            configs=args.configs,
            users=args.users,
            statuses=args.statuses,
        ),
        client,
    )
    found = find_tests(options, tests)

    if args.json:
        _print_json(
            [
                item if isinstance(item, str) else item.model_dump(mode="json")
                for item in found
            ]
        )
        return 0

    for item in found:
        if isinstance(item, str):
            print(item)
        elif options.mode == MatchMode.MATCH:
            print(item.full_title)
        else:
            print(item.title)
    return 0


def _cmd_cases(
    args: argparse.Namespace,
    client: TestRailClient,
    unified: UnifiedConfig,
) -> int:
    cases, suite = get_cases(
        CaseQuery(
            project=args.project,
            testsuite=args.testsuite,
            section=args.section,
            types=args.types,
        ),
        client,
    )
    reconciliation = find_cases(
        CaseSyncOptions(
            directory=args.directory,
            extension=(
                args.extension
                if args.extension is not None
                else unified.finder.extension
            ),
            recursive=unified.finder.recursive and not args.no_recurse,
            missing=not args.no_missing,
            orphans=args.orphans,
            update=args.update,
        ),
        cases,
        testsuite_id=suite.id,
    )

    if not args.sync:
        if args.json:
            _print_json(reconciliation_to_json(reconciliation))
        else:
            print(format_reconciliation(reconciliation))
        return 0

    section_id = (
        args.section_id
        if args.section_id is not None
        else unified.finder.section_id
    )
    report = Synchronizer(client, create_resolver(section_id)).run(
        reconciliation.model_copy(update={"dry_run": args.dry_run})
    )
    if args.json:
        _print_json(report_to_json(report))
    else:
        print(format_sync_report(report))
    return 0


def _cmd_check(
    args: argparse.Namespace,
    client: TestRailClient,
    unified: UnifiedConfig,
) -> int:
    count = client.validate_connection()
    print(
        f"Connected to {client.config.testrail_url} ({count} projects visible)"
    )
    return 0


def _cmd_init(
    args: argparse.Namespace,
    client: None,
    unified: UnifiedConfig,
) -> int:
    print(ensure_config())
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the chosen subcommand and return the exit code."""
    args = build_parser().parse_args(argv)

    try:
        unified = _load_settings(args)
        if not getattr(args, "needs_client", True):
            return args.handler(args, None, unified)
        client = _create_client(args, unified)
        return args.handler(args, client, unified)
    except (TestRailError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        _stderr_print(f"ERROR: {e}")
        return 1


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        _stderr_print("\nInterrupted.")
        sys.exit(130)


if __name__ == "__main__":
    run()
