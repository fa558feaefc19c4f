"""
Main entry point for the currency cycle finder.
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import SearchConfig, load_config
from .currencies import build_registry, resolve_currency
from .cycle_finder import CycleSearch
from .market_client import MarketDataError, PoeTradeClient
from .path_context import InvariantViolation
from .reporter import format_currency_summary, print_report
from .utils import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SEARCH_FAILED = 1
EXIT_BAD_CONFIG = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Find currency exchange cycles on currency.poe.trade')
    parser.add_argument('--league', help='The POE league to use (default: Synthesis)')
    parser.add_argument(
        '--dfs-depth', '--dfs_depth',
        dest='max_depth',
        type=int,
        help='The max depth for the DFS. Keep it >2 (default: 3)'
    )
    parser.add_argument('--currency', help='The starting currency for this scheme (default: chaos)')
    parser.add_argument('--amount', type=int, help='The starting currency amount (default: 10)')
    parser.add_argument('--host', help='Market host (default: currency.poe.trade)')
    parser.add_argument(
        '--log-level',
        dest='log_level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Log level for stderr output (default: INFO)'
    )
    return parser


async def main(config: SearchConfig) -> int:
    """
    Run one search and print its report.
    
    Returns:
        Process exit code
    """
    currencies = build_registry(config.currencies)
    
    start_id = resolve_currency(config.currency, currencies)
    if start_id is None:
        logger.error(f"Unknown starting currency: {config.currency}")
        print("Looks like nothing ran. Here's a summary of valid currencies:")
        print(format_currency_summary(currencies))
        return EXIT_BAD_CONFIG
    
    client = PoeTradeClient(
        league=config.league,
        host=config.host,
        timeout=config.timeout,
        requests_per_second=config.requests_per_second
    )
    search = CycleSearch(
        client,
        currencies,
        start_amount=config.amount,
        max_depth=config.max_depth
    )
    
    try:
        cycles = await search.run(start_id)
    except MarketDataError as e:
        logger.error(f"Market data failure, aborting search: {e}")
        return EXIT_SEARCH_FAILED
    except InvariantViolation as e:
        logger.error(f"This is a bug, aborting search: {e}")
        return EXIT_SEARCH_FAILED
    finally:
        await client.close()
    
    print_report(cycles, currencies)
    return EXIT_OK


def cli(argv: Optional[List[str]] = None) -> None:
    """Console entry point: parse flags, load config, run, exit."""
    args = build_parser().parse_args(argv)
    
    try:
        config = load_config(overrides=vars(args))
        setup_logging(config.log_level, config.log_file)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_BAD_CONFIG)

    try:
        exit_code = asyncio.run(main(config))
    except KeyboardInterrupt:
        print("\nSearch stopped by user", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_SEARCH_FAILED)

    sys.exit(exit_code)


if __name__ == '__main__':
    cli()
