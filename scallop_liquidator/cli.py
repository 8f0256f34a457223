"""Command-line interface for the Scallop liquidator."""
from __future__ import annotations

import argparse
import asyncio
import logging
import re
import sys

from .config import load_config
from .errors import LiquidatorError
from .logging_setup import configure_logging
from .services import Liquidator, Mode

logger = logging.getLogger(__name__)

_OBLIGATION_ID_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="scallop-liquidator",
        description="Check and liquidate Scallop obligations on SUI",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    for mode, help_text in (
        (Mode.CHECK, "Report obligation status and liquidation opportunity"),
        (Mode.EXECUTE, "Liquidate if the estimated profit clears the floor"),
        (Mode.FORCE, "Liquidate bypassing the profit check, or repay bad debt"),
    ):
        cmd = sub.add_parser(mode.value, help=help_text)
        cmd.add_argument("obligation_id", help="Obligation object ID (0x + 64 hex)")

    return parser


def is_valid_obligation_id(obligation_id: str) -> bool:
    return bool(_OBLIGATION_ID_RE.match(obligation_id))


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command and return the process exit code."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    liquidator = Liquidator.from_config(config)

    try:
        outcome = await liquidator.run(args.obligation_id, Mode(args.command))
    except LiquidatorError as e:
        logger.error("Error: %s", e)
        return 1

    if outcome.result is not None:
        if outcome.result.success:
            logger.info(
                "Success! Transaction: https://suiscan.xyz/mainnet/tx/%s",
                outcome.result.tx_digest,
            )
            logger.info("Repaid: %d", outcome.result.repaid_amount)
        else:
            logger.error("Failed: %s", outcome.result.error)
    return 1 if outcome.failed else 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if not is_valid_obligation_id(args.obligation_id):
        parser.error("Invalid obligation ID: expected 0x followed by 64 hex characters")

    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
