"""Command line entry point: ``python -m berlin_schools``."""

import argparse
import logging
import sys
from pathlib import Path

from berlin_schools.enrich import DEFAULT_MAX_PROJECTS
from berlin_schools.exceptions import FetchError
from berlin_schools.export import dump_json, to_feature_collection, to_records
from berlin_schools.filters import filter_records, summarize
from berlin_schools.runner import build_enriched_schools

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="berlin_schools",
        description="Build the enriched Berlin schools collection.",
    )
    parser.add_argument("-o", "--output", type=Path, help="Write to this file instead of stdout")
    parser.add_argument("--format", choices=("json", "geojson"), default="geojson")
    parser.add_argument("--stats", help="Path or URL of the statistics CSV")
    parser.add_argument("--eligibility", help="Path or URL of the after-4th-grade CSV")
    parser.add_argument(
        "--max-projects",
        type=int,
        default=DEFAULT_MAX_PROJECTS,
        help="Maximum number of standalone construction projects to geocode",
    )
    parser.add_argument("--district", action="append", help="Keep only this district (repeatable)")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None, *, build=build_enriched_schools) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        records = build(
            stats_source=args.stats,
            eligibility_source=args.eligibility,
            max_projects=args.max_projects,
        )
    except FetchError as e:
        print(f"School data unavailable: {e}", file=sys.stderr)
        return 1

    if args.district:
        records = filter_records(records, districts=set(args.district))

    payload = to_feature_collection(records) if args.format == "geojson" else to_records(records)
    text = dump_json(payload)
    if args.output:
        args.output.write_text(text + "\n", encoding="utf-8")
        logger.info("Wrote %s", args.output)
    else:
        sys.stdout.write(text + "\n")

    logger.info("Summary: %s", summarize(records))
    return 0
