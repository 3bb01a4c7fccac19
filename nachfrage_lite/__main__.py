"""Command line entry point: ``python -m nachfrage_lite``."""

import argparse
import sys
import traceback

from nachfrage_lite.runner import DEFAULT_OUTPUT, SOURCES, run_pipeline, write_document
from nachfrage_lite.scrapers.detail import DEFAULT_DELAY
from nachfrage_lite.utils import log


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nachfrage_lite",
        description="Scrape Berlin school admission demand into one JSON file.",
    )
    parser.add_argument("--output", default=DEFAULT_OUTPUT,
                        help=f"JSON output path (default: {DEFAULT_OUTPUT})")
    parser.add_argument("--delay", type=float, default=DEFAULT_DELAY,
                        help="seconds between detail page fetches")
    parser.add_argument("--source", action="append", dest="sources",
                        metavar="KEY",
                        help=f"source to scrape, repeatable ({', '.join(SOURCES)})")
    parser.add_argument("--no-details", action="store_true",
                        help="skip visiting each school's own page")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    log(f"Python {sys.version.split()[0]} starting...")

    try:
        document = run_pipeline(
            sources=args.sources,
            delay=args.delay,
            enrich=not args.no_details,
        )
        path = write_document(document, args.output)
    except Exception:
        traceback.print_exc()
        return 1

    log(f"Saved {len(document['schools'])} rows to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
