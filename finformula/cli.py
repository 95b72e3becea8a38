"""
Command-line interface for the formula library.

This module provides CLI commands for listing formulas, evaluating a formula
as a spreadsheet cell would, and correlating two tickers.
"""

import argparse
import logging
import sys
import warnings
from datetime import date

# Suppress yfinance warnings about delisted tickers (reported as NotFound)
warnings.filterwarnings("ignore", message=".*possibly delisted.*")

from finformula.config import load_settings
from finformula.data_sources.client import DataClient
from finformula.formulas import FORMULAS, evaluate
from finformula.pacing import NoPacing
from finformula.errors import ConfigError


def _build_client(args) -> DataClient:
    settings = load_settings(args.config)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    pacer = NoPacing() if args.no_pacing else None
    return DataClient(settings=settings, pacer=pacer)


def list_command(args):
    """Print the available formula names."""
    for name in FORMULAS:
        print(name)


def eval_command(args):
    """Evaluate one formula and print the cell value."""
    if args.name not in FORMULAS:
        print(f"✗ Unknown formula: {args.name}", file=sys.stderr)
        sys.exit(2)

    client = _build_client(args)
    result = evaluate(args.name, *args.args, client=client)
    print(result.render())
    if not result.is_ok:
        sys.exit(1)


def corr_command(args):
    """Correlate two tickers with progress output."""
    ticker_a = args.ticker_a.upper()
    ticker_b = args.ticker_b.upper()

    print(f"Correlating {ticker_a} and {ticker_b} from {args.start} to {args.end}...")
    client = _build_client(args)

    result = evaluate("Corr", ticker_a, ticker_b, args.start, args.end, args.granularity, client=client)
    if result.is_ok:
        print(f"\n✓ Correlation = {result.value:.4f}")
    else:
        print(f"\n✗ {result.render()}", file=sys.stderr)
        sys.exit(1)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Financial data spreadsheet formulas",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--no-pacing", action="store_true", help="Do not pause before requests")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # List command
    subparsers.add_parser("list", help="List formula names")

    # Eval command
    eval_parser = subparsers.add_parser("eval", help="Evaluate a formula")
    eval_parser.add_argument("name", help="Formula name (e.g. Corr, GDP)")
    eval_parser.add_argument("args", nargs="*", help="Formula arguments")

    # Corr command
    corr_parser = subparsers.add_parser("corr", help="Correlate two tickers' closing prices")
    corr_parser.add_argument("ticker_a", help="First ticker symbol")
    corr_parser.add_argument("ticker_b", help="Second ticker symbol")
    corr_parser.add_argument("--start", default="2023-01-01", help="Start date (YYYY-MM-DD)")
    corr_parser.add_argument("--end", default=None, help="End date (YYYY-MM-DD, default: today)")
    corr_parser.add_argument("--granularity", type=int, default=86400, help="Bar size in seconds")

    args = parser.parse_args(argv)

    try:
        if args.command == "list":
            list_command(args)
        elif args.command == "eval":
            eval_command(args)
        elif args.command == "corr":
            if args.end is None:
                args.end = date.today().strftime("%Y-%m-%d")
            corr_command(args)
        else:
            parser.print_help()
            sys.exit(1)
    except ConfigError as e:
        print(f"\n✗ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
