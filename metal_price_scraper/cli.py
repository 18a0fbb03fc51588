"""
Command Line Interface for Metal Price Scraper
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .core.config import ScraperConfig, parse_source
from .core.scraper import MetalPriceScraper


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Metal Price Scraper - gold & silver prices to CSV and JSON logs'
    )
    parser.add_argument(
        'command',
        nargs='?',
        choices=['run', 'once', 'check'],
        default='run',
        help='run: scrape now and on every interval; once: single cycle; check: test connectivity'
    )

    # Sources
    parser.add_argument(
        '--url',
        action='append',
        dest='urls',
        help='Source URL, optionally suffixed with |markup or |embedded (repeatable, tried in order)'
    )
    parser.add_argument(
        '--timeout',
        type=float,
        help='Per-request timeout in seconds'
    )

    # Retry / schedule
    parser.add_argument(
        '--max-attempts',
        type=int,
        help='Attempts per cycle before falling back (default: 3)'
    )
    parser.add_argument(
        '--backoff',
        type=float,
        help='Seconds to wait between attempts (default: 10)'
    )
    parser.add_argument(
        '--interval',
        type=float,
        help='Seconds between cycles in run mode (default: 7200)'
    )

    # Output
    parser.add_argument(
        '--csv',
        type=str,
        help='CSV log path (default: gold_silver_prices.csv)'
    )
    parser.add_argument(
        '--json',
        type=str,
        help='JSON history path (default: gold_silver_prices.json)'
    )

    # Other
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    return parser


def build_config(args: argparse.Namespace) -> ScraperConfig:
    config = ScraperConfig.from_env()
    sources = None
    if args.urls:
        timeout = args.timeout if args.timeout is not None else 30.0
        sources = tuple(parse_source(entry, timeout) for entry in args.urls)
    elif args.timeout is not None:
        sources = tuple(replace(source, timeout=args.timeout) for source in config.sources)
    return config.with_overrides(
        sources=sources,
        max_attempts=args.max_attempts,
        backoff_seconds=args.backoff,
        interval_seconds=args.interval,
        csv_path=Path(args.csv) if args.csv else None,
        json_path=Path(args.json) if args.json else None,
    )


def print_check(results: List[dict]) -> bool:
    all_ok = True
    for result in results:
        print(f"\nTesting {result['url']} connectivity...")
        print("=====================================")
        if not result['reachable']:
            print(f"❌ Error: {result['error']}")
            all_ok = False
            continue
        print(f"Status Code: {result['status_code']}")
        print(f"Status: {result['status']}")
        print(f"Content-Type: {result['content_type']}")
        print(f"Content-Length: {result['content_length']}")
        if 200 <= result['status_code'] < 300:
            print("✅ Website is accessible!")
        else:
            print("⚠️ Website answered with a non-success status")
            all_ok = False
    return all_ok


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))

    scraper = MetalPriceScraper(config=config)
    try:
        if args.command == 'check':
            return 0 if print_check(scraper.check_sources()) else 1

        if args.command == 'once':
            result = scraper.run_cycle()
            print(json.dumps(result.record.to_dict(), indent=2, ensure_ascii=False))
            return 0 if result.csv_saved and result.json_saved else 1

        scraper.run_forever()
        return 0

    except KeyboardInterrupt:
        print("\n⚠️ Interrupted by user")
        return 1
    finally:
        scraper.close()


if __name__ == '__main__':
    sys.exit(main())
