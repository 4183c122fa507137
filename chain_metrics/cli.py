"""Command-line interface for querying chain metrics from a Bitcoin Core node."""

import argparse
import sys

from rich.console import Console

from chain_metrics.context import AppContext
from chain_metrics.helpers.config import load_rpc_settings
from chain_metrics.helpers.durations import format_duration
from chain_metrics.helpers.errors import ChainMetricsError, InvalidHeightError
from chain_metrics.helpers.logging import LOG_LEVELS, get_logger, set_log_level
from chain_metrics.helpers.parsers import parse_block_height
from chain_metrics.metrics.blocks import (
    avg_time_to_mine,
    guess_time_to_mine_next_block,
    number_of_transactions,
    time_to_mine,
)
from chain_metrics.metrics.network import get_chain


__version__ = "0.1.0"

logger = get_logger(__name__)


def _block_height(value: str) -> int:
    try:
        return parse_block_height(value)
    except InvalidHeightError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per metric."""
    parser = argparse.ArgumentParser(
        prog="chain-metrics",
        description="A CLI for the Bitcoin RPC API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Which chain is the node on?
  chain-metrics chain

  # How long did block 24 take to mine?
  chain-metrics time-to-mine 24

  # Use credentials from a specific env file
  chain-metrics --env-file ./regtest.env next-block
        """,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--env-file",
        help=(
            "Load RPC settings and LOG_LEVEL from this .env file in addition "
            "to the environment"
        ),
    )
    parser.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        help="Logging level (default: LOG_LEVEL env var or WARNING)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Shortcut for --log-level DEBUG",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    subparsers.add_parser("chain", help="Get the current chain")

    height_help = "(numeric, required) The height index"

    time_to_mine_parser = subparsers.add_parser(
        "time-to-mine", help="Get the time it took to mine a block"
    )
    time_to_mine_parser.add_argument(
        "block_height", type=_block_height, help=height_help
    )

    avg_parser = subparsers.add_parser(
        "avg-time-to-mine",
        help="Get the average time to mine a block in its difficulty epoch",
    )
    avg_parser.add_argument("block_height", type=_block_height, help=height_help)

    transactions_parser = subparsers.add_parser(
        "number-of-transactions", help="Get the number of transactions in a block"
    )
    transactions_parser.add_argument(
        "block_height", type=_block_height, help=height_help
    )

    subparsers.add_parser(
        "next-block", help="Guess how long until next block is mined"
    )

    return parser


def _apply_log_level(args: argparse.Namespace) -> None:
    set_log_level("DEBUG" if args.verbose else args.log_level)


def call_command(ctx: AppContext, args: argparse.Namespace, console: Console) -> None:
    """Run the selected subcommand and print its result.

    Errors propagate to the caller unchanged.
    """
    match args.command:
        case "chain":
            console.print(get_chain(ctx).display_name)
        case "time-to-mine":
            console.print(format_duration(time_to_mine(ctx, args.block_height)))
        case "avg-time-to-mine":
            avg = avg_time_to_mine(ctx, args.block_height)
            console.print(f"Average time to mine in epoch: {format_duration(avg)}")
        case "number-of-transactions":
            num = number_of_transactions(ctx, args.block_height)
            console.print(f"{num} transactions")
        case "next-block":
            console.print("Next block will be mined in: ")
            remaining = guess_time_to_mine_next_block(ctx)
            console.print(format_duration(remaining, include_days=True))
        case _:
            msg = f"Unknown command: {args.command}"
            raise ValueError(msg)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments, defaults to sys.argv[1:]

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    console = Console(highlight=False)
    err_console = Console(stderr=True, highlight=False)

    _apply_log_level(args)

    if args.command is None:
        err_console.print("No command provided")
        parser.print_help(sys.stderr)
        return 1

    try:
        settings = load_rpc_settings(args.env_file)
        # LOG_LEVEL may come from the env file
        _apply_log_level(args)
        with AppContext(settings) as ctx:
            call_command(ctx, args, console)
    except ChainMetricsError as e:
        logger.debug("%s failed", args.command, exc_info=True)
        err_console.print(f"Error: {e}", style="red", markup=False, soft_wrap=True)
        return 1

    return 0


def cli() -> None:
    """Command-line interface entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
