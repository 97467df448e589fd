"""Entry point for the lending bot.

Loads settings (environment / .env) or a JSON list of accounts, sets up
logging, and runs each account once:

    lendbot                         # report wallet balances only
    lendbot --update-lends          # run the active strategy
    lendbot --update-lends --dry-run --conf accounts.json
"""

import argparse
import asyncio
import sys

from lendbot.config import AppSettings, load_accounts
from lendbot.exceptions import LendBotError
from lendbot.logging import DEFAULT_LOG_FILE, get_logger, setup_logging
from lendbot.runner import run_accounts


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lendbot",
        description="Re-lend funds on the Bitfinex funding market.",
    )
    parser.add_argument(
        "--conf",
        metavar="PATH",
        help="JSON file with a list of accounts (default: single account from environment)",
    )
    parser.add_argument(
        "--update-lends",
        action="store_true",
        help="Update lend offerings",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Output strategy decisions without placing orders",
    )
    parser.add_argument(
        "--log-to-file",
        action="store_true",
        help=f"Write log to {DEFAULT_LOG_FILE} instead of stderr",
    )
    return parser


async def run(argv: list[str] | None = None) -> int:
    """Run all configured accounts once. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    settings = AppSettings()
    setup_logging(settings.log_level, DEFAULT_LOG_FILE if args.log_to_file else None)
    logger = get_logger("lendbot.main")

    try:
        accounts = load_accounts(args.conf) if args.conf else [settings.as_account()]
        await run_accounts(
            accounts,
            update_lends=args.update_lends,
            dry_run=args.dry_run,
        )
    except LendBotError as e:
        logger.error("strategy_run_failed", error=str(e), exc_info=True)
        return 1

    return 0


def main() -> None:
    """Synchronous entry point."""
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
