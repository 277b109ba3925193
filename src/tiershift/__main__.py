"""Command-line entry point for the tiershift console.

Usage:
    tiershift [--endpoint-url URL] [--region REGION] [--profile NAME]
              [--policy-file PATH] [--status-capacity N] [--log-file PATH]

Examples:
    # Browse the default account and region
    tiershift

    # Against a local MinIO, logging to a file
    tiershift --endpoint-url http://localhost:9000 --log-file tiershift.log

Exit codes:
    0: Console closed normally
    2: Startup error (invalid configuration, unreadable policy file,
       storage client could not be created)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import NoReturn

from tiershift.backend.s3 import S3Backend
from tiershift.console import Console
from tiershift.exceptions import TiershiftError
from tiershift.policy import PolicyFile, PolicyStore
from tiershift.result import Failure, Success
from tiershift.settings import ConsoleSettings, load_settings
from tiershift.status import StatusLog
from tiershift.tui import TiershiftApp
from tiershift.validation import validation_message


logger = logging.getLogger("tiershift")


def configure_logging(log_file: Path | None, verbose: bool) -> None:
    """Log to ``log_file`` if given; otherwise stay silent so the TUI owns the terminal."""
    if log_file is None:
        logger.addHandler(logging.NullHandler())
        logger.propagate = False
        return
    logging.basicConfig(
        filename=str(log_file),
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def run_console(settings: ConsoleSettings) -> int:
    """Open the policy store and the S3 client, then run the TUI until it exits.

    Raises:
        PolicyStoreError: The policy file cannot be read.
        BackendStartupError: The S3 client cannot be created.
    """
    policy_store = PolicyStore.open(PolicyFile(settings.resolved_policy_file))
    async with S3Backend(settings) as backend:
        console = Console.create(backend, policy_store, StatusLog(settings.status_capacity))
        await TiershiftApp(console).run_async()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tiershift",
        description="Interactive console for moving S3 objects between storage classes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--endpoint-url", help="Custom S3 endpoint (env: AWS_ENDPOINT_URL)")
    parser.add_argument("--region", help="AWS region (env: AWS_REGION, default: us-east-1)")
    parser.add_argument("--profile", help="AWS profile name (env: AWS_PROFILE)")
    parser.add_argument(
        "--policy-file",
        type=Path,
        help="Saved policy file (env: TIERSHIFT_POLICY_FILE, "
        "default: ~/.config/tiershift/policies.jsonl)",
    )
    parser.add_argument(
        "--status-capacity",
        type=int,
        help="Status lines kept in the log view (env: TIERSHIFT_STATUS_CAPACITY, default: 20)",
    )
    parser.add_argument("--log-file", type=Path, help="Write diagnostic logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug-level logging")
    return parser


def main() -> NoReturn:
    """Main CLI entry point."""
    args = build_parser().parse_args()
    configure_logging(args.log_file, args.verbose)

    match load_settings(
        endpoint_url=args.endpoint_url,
        region=args.region,
        profile=args.profile,
        policy_file=args.policy_file,
        status_capacity=args.status_capacity,
    ):
        case Failure(exc):
            print(f"✗ Invalid configuration: {validation_message(exc)}", file=sys.stderr)
            sys.exit(2)
        case Success(settings):
            pass

    try:
        exit_code = asyncio.run(run_console(settings))
    except TiershiftError as exc:
        logger.error("Startup failed: %s", exc)
        print(f"✗ {exc}", file=sys.stderr)
        sys.exit(2)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
