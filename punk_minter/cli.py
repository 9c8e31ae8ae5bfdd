"""Command-line interface for the LW3Punks minting client."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import load_config
from .errors import MintDappError
from .logging_setup import configure_logging
from .models import SupplySnapshot
from .services import MintSession


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="punk-minter",
        description="Mint LW3Punks through a connected wallet",
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

    sub.add_parser("status", help="Connect and show how many have been minted")
    sub.add_parser("mint", help="Connect and mint one token")
    sub.add_parser("watch", help="Connect and follow the minted count")
    sub.add_parser("run", help="Interactive page: Enter presses the button, q quits")

    return parser


async def _status(session: MintSession) -> int:
    if not await session.connect():
        return 1
    try:
        await session.refresh_supply()
    except MintDappError as e:
        print(f"Could not read supply: {e}", file=sys.stderr)
        return 1
    print(session.supply_line)
    return 0


async def _mint(session: MintSession) -> int:
    if not await session.connect():
        return 1
    result = await session.mint()
    if result.ok:
        print(f"Minted in transaction {result.tx_hash} (block {result.block_number})")
        return 0
    print(f"Mint failed: {result.message}", file=sys.stderr)
    return 1


async def _watch(session: MintSession) -> int:
    def show(snapshot: SupplySnapshot) -> None:
        print(session.supply_line, flush=True)

    session.on_supply(show)
    if not await session.connect():
        return 1
    await session.poller.wait()
    return 0


async def _interactive(session: MintSession) -> int:
    pending: set[asyncio.Task] = set()
    await session.connect()

    while True:
        print(session.render(), flush=True)
        try:
            line = await asyncio.to_thread(input, "Enter = press button, q = quit: ")
        except EOFError:
            break
        if line.strip().lower() == "q":
            break
        task = asyncio.create_task(session.on_primary_action())
        pending.add(task)
        task.add_done_callback(pending.discard)

    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
    return 0


_COMMANDS = {
    "status": _status,
    "mint": _mint,
    "watch": _watch,
    "run": _interactive,
}


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    session = MintSession(config)

    try:
        return await _COMMANDS[args.command](session)
    finally:
        await session.close()


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(asyncio.run(_run(args)))
    except KeyboardInterrupt:
        sys.exit(130)
