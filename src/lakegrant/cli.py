"""Command-line entry point.

Usage:
    lakegrant ACCOUNT IDENTITY_ID --kind User
    lakegrant ACCOUNT IDENTITY_ID --kind Group --full-replication
    lakegrant ACCOUNT IDENTITY_ID --kind User --source /mnt/lake-mirror
"""

from __future__ import annotations

import argparse
import logging
import sys
import uuid

from .config import GrantConfig
from .context import SOURCE_ENV, StoreContext
from .orchestrator import LakeGrant
from .tasks import TaskRunner
from .types import Identity, IdentityKind


def _uuid(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a valid UUID: {value!r}") from None


def _identity_kind(value: str) -> IdentityKind:
    try:
        return IdentityKind.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lakegrant",
        description="Grant a user or group access to an analytics job-service account.",
    )
    parser.add_argument("account", help="Account name")
    parser.add_argument("identity_id", type=_uuid, help="Object id of the user or group")
    parser.add_argument(
        "--kind",
        type=_identity_kind,
        required=True,
        metavar="{User,Group}",
        help="Identity kind",
    )
    parser.add_argument(
        "--full-replication",
        action="store_true",
        help="Walk the whole system tree now instead of in the background",
    )
    parser.add_argument(
        "--source",
        default=None,
        help=f"Store URL or local directory (default: ${SOURCE_ENV} or sqlite file named after the account)",
    )
    parser.add_argument(
        "--files",
        action="store_true",
        help="Apply file entries to each file instead of its directory",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    identity = Identity(id=args.identity_id, kind=args.kind)
    context = StoreContext.for_account(args.account, args.source)
    config = GrantConfig(apply_to_files=args.files)

    runner = TaskRunner()
    try:
        try:
            result = LakeGrant(context, runner, config).grant_sync(
                identity, full_replication=args.full_replication
            )
        except Exception as e:
            print(f"error: {e}", file=sys.stderr)
            return 1

        print(result.message)
        if result.propagation is None:
            return 0

        print(f"Background propagation id: {result.propagation.id}")
        print("Propagation is running. Do not close this session until it finishes.")
        failures = runner.wait_all()
        if failures:
            print(f"error: {failures[0]}", file=sys.stderr)
            return 1
        print(f"Propagation {result.propagation.id} completed.")
        return 0
    finally:
        runner.close()


if __name__ == "__main__":
    sys.exit(main())
