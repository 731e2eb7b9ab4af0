"""
rolegrant command line interface.

Administrative commands mint and revoke tokens; any holder redeems them.

    rolegrant init
    rolegrant issue ROLE [ROLE ...] [--uses N] [--hours H]
    rolegrant revoke TOKEN
    rolegrant redeem TOKEN [--held ROLE ...]
    rolegrant inspect TOKEN
    rolegrant list
    rolegrant purge
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from datetime import timedelta
from typing import Iterable, List, Optional, Sequence

from ..common.utils import format_duration, format_token_id, get_current_time
from ..core.config import Config
from ..core.lifecycle import TokenLifecycleManager
from ..core.types import TokenRecord
from ..errors import ErrorCode, RoleGrantError, ValidationError
from ..tokenstore.store import TokenStore


MAX_ROLES = 4

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Send log records to stderr at the given level."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)-8s - %(name)-20s - %(message)s"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.addHandler(handler)


def privileges_to_grant(granted: Iterable[str], held: Iterable[str]) -> List[str]:
    """Sorted, de-duplicated privileges the redeemer does not hold yet."""
    return sorted(set(granted) - set(held))


def describe_record(token: str, record: TokenRecord) -> str:
    remaining = record.expiration - get_current_time()
    return (
        f"{token}  privileges={','.join(record.privileges)}  "
        f"uses={record.remaining_uses}  expires={record.expiration.isoformat()} "
        f"({'expired' if remaining.total_seconds() < 0 else 'in ' + format_duration(remaining)})"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rolegrant", description="Issue and redeem role tokens")
    parser.add_argument("--config", help="YAML or JSON configuration file")
    parser.add_argument("--store", help="token store file (overrides configuration)")
    parser.add_argument("--log-level", help="logging level (overrides configuration)")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init", help="create an empty token store")

    issue = commands.add_parser("issue", help="mint a token for up to four roles")
    issue.add_argument("roles", nargs="+", metavar="ROLE")
    issue.add_argument("--uses", type=int, help="number of redemptions (default 1)")
    issue.add_argument("--hours", type=int, help="hours until expiration (default 96)")

    revoke = commands.add_parser("revoke", help="remove a token")
    revoke.add_argument("token")

    redeem = commands.add_parser("redeem", help="use a token to gain its roles")
    redeem.add_argument("token")
    redeem.add_argument("--held", nargs="*", default=[], metavar="ROLE",
                        help="roles the redeemer already has")

    inspect = commands.add_parser("inspect", help="show a token")
    inspect.add_argument("token")

    commands.add_parser("list", help="show every token")
    commands.add_parser("purge", help="remove expired tokens")

    return parser


def load_config(args: argparse.Namespace) -> Config:
    config = Config.from_file(args.config) if args.config else Config.from_env()
    if args.store:
        config = replace(config, store_path=args.store)
    if args.log_level:
        config = replace(config, log_level=args.log_level)
    config.validate()
    return config


async def run(args: argparse.Namespace, config: Config) -> int:
    if args.command == "init":
        await TokenStore.initialize(config.store_path)
        print(f"created {config.store_path}")
        return 0

    if args.command == "issue" and len(args.roles) > MAX_ROLES:
        print(f"at most {MAX_ROLES} roles per token", file=sys.stderr)
        return 2

    async with await TokenLifecycleManager.open(config) as manager:
        if args.command == "issue":
            ttl = None
            if args.hours is not None:
                try:
                    ttl = timedelta(hours=args.hours)
                except OverflowError as e:
                    raise ValidationError(f"--hours out of range: {args.hours}", field="ttl",
                                          code=ErrorCode.INVALID_PARAMETER, cause=e)
            token_id = await manager.issue(args.roles, limit=args.uses, ttl=ttl)
            print(format_token_id(token_id))

        elif args.command == "revoke":
            await manager.revoke(args.token)
            print("success")

        elif args.command == "redeem":
            roles = await manager.redeem(args.token)
            for role in privileges_to_grant(roles, args.held):
                print(role)

        elif args.command == "inspect":
            record = await manager.inspect(args.token)
            if record is None:
                print("not found", file=sys.stderr)
                return 1
            print(describe_record(args.token.strip(), record))

        elif args.command == "list":
            for token_id, record in sorted((await manager.list_tokens()).items()):
                print(describe_record(format_token_id(token_id), record))

        elif args.command == "purge":
            print(f"purged {await manager.purge_expired()}")

    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Console entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
        setup_logging(config.log_level)
        return asyncio.run(run(args, config))
    except RoleGrantError as e:
        logger.debug(f"{args.command} failed: {e.to_dict()}")
        print(str(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
