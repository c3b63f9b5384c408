"""Command line interface for the IAM dump tool."""
from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError

from .config import DumpSettings
from .core import (
    collect_reports,
    export_resources_to_excel,
    export_resources_to_json,
    print_resources,
)
from .errors import DumpError
from .logging_utils import configure_logging
from .services import REPORTS
from .session import DumpSession


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Return parsed command line arguments."""

    parser = argparse.ArgumentParser(
        description="Dump IAM entities enriched with service last-accessed details."
    )
    parser.add_argument("--profile", help="AWS CLI profile to use", default=None)
    parser.add_argument("--region", help="AWS region used for API calls", default=None)
    parser.add_argument(
        "--reports",
        nargs="*",
        choices=sorted(REPORTS),
        default=None,
        help="Subset of reports to run (default: all)",
    )
    parser.add_argument("--path-prefix", help="Only list entities under this IAM path", default=None)
    parser.add_argument("--json", dest="json_path", help="Optional path to export resources as JSON")
    parser.add_argument(
        "--excel",
        dest="excel_path",
        help="Optional path to export resources as an Excel workbook (.xlsx)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="Initial delay in seconds between last-accessed job status checks",
    )
    parser.add_argument(
        "--max-poll-attempts",
        type=int,
        default=None,
        help=(
            "Give up on a last-accessed job after this many in-progress checks "
            "(0 polls without a limit)"
        ),
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Verbosity of diagnostic output on stderr",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point used by ``python -m iam_dump``."""

    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings = DumpSettings.from_env()
        settings = settings.with_overrides(
            poll_interval=args.poll_interval,
            max_poll_interval=(
                max(args.poll_interval, settings.max_poll_interval)
                if args.poll_interval is not None
                else None
            ),
            max_poll_attempts=args.max_poll_attempts or None,
        )
        if args.max_poll_attempts == 0:
            settings = replace(settings, max_poll_attempts=None)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        boto_session = boto3.Session(profile_name=args.profile, region_name=args.region)
        session = DumpSession.from_boto_session(boto_session, settings)
    except (BotoCoreError, DumpError) as exc:
        print(f"Error: unable to resolve the AWS account: {exc}", file=sys.stderr)
        return 1

    try:
        results = collect_reports(session, args.reports, path_prefix=args.path_prefix)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print_resources(results)

    if args.json_path:
        path = export_resources_to_json(results, args.json_path)
        print(f"Resources exported to {path}")

    if args.excel_path:
        try:
            path = export_resources_to_excel(results, args.excel_path)
        except RuntimeError as exc:
            print(f"Failed to export Excel report: {exc}", file=sys.stderr)
        else:
            print(f"Excel report written to {path}")

    return 0 if results.ok else 1


__all__ = ["main", "parse_args"]
