#!/usr/bin/env python3
"""
Command line report for the damage dashboard.

Runs one refresh against the FTP share (or a local directory) and prints the
dashboard payload for the given filters as JSON.

Examples:
    schade-report --dir ./data --type Gelede --start 2024-01-01
    schade-report --id 1234 --strict
"""

import argparse
import json
import logging
import sys

import config
from dashboard import DashboardService
from filters import FilterCriteria
from normalizer import MappingPolicy
from sources import LocalFetcher, SourceError, default_fetcher

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Damage log dashboard report")
    parser.add_argument("--dir", help="Read source files from this directory instead of FTP")
    parser.add_argument("--path", help=f"Damage log workbook (default: {config.FTP_PATH})")
    parser.add_argument("--id", dest="id_substring", help="Personnel number search")
    parser.add_argument("--vehicle", dest="vehicle_substring", help="Bus/tram number search")
    parser.add_argument("--type", dest="exact_type", help="Vehicle category (exact)")
    parser.add_argument("--start", dest="start_date", help="First day, YYYY-MM-DD")
    parser.add_argument("--end", dest="end_date", help="Last day, YYYY-MM-DD")
    parser.add_argument("--strict", action="store_true", help="Use fixed header spellings only")
    parser.add_argument("--no-records", action="store_true", help="Leave the record list out of the output")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.dir:
        fetcher_factory = lambda: LocalFetcher(args.dir)
    else:
        missing = [] if config.LOCAL_DATA_DIR else config.missing_ftp_settings()
        if missing:
            logger.error(f"[Report] Set {', '.join(missing)} in .env or pass --dir")
            return 2
        fetcher_factory = default_fetcher

    service = DashboardService(
        fetcher_factory=fetcher_factory,
        main_path=args.path,
        policy=MappingPolicy.STRICT if args.strict else MappingPolicy.LENIENT,
    )

    try:
        service.refresh()
    except SourceError as e:
        logger.error(f"[Report] {e}")
        print(json.dumps(service.view(), indent=2, ensure_ascii=False))
        return 1

    criteria = FilterCriteria(
        id_substring=args.id_substring,
        vehicle_substring=args.vehicle_substring,
        exact_type=args.exact_type,
        start_date=args.start_date,
        end_date=args.end_date,
    )
    payload = service.view(criteria)
    if args.no_records:
        payload.pop("records", None)

    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
