"""CLI entry point for the ad-performance pipeline.

Orchestrates the full pipeline on a downloaded export: format selection,
ingestion, date filtering, aggregation, ranking and trends.

Usage::

    # Headline metrics, top keywords and campaign trends
    python -m src.cli summary \\
        --format google_ads --input data/google_ads.csv \\
        --from 2025-01-01 --to 2025-01-31

    # Same, as JSON, with the default range relative to a fixed day
    python -m src.cli summary \\
        --format meta_ads --input data/meta.csv --today 2025-02-01 --json

    # Write the canonical records to CSV
    python -m src.cli export \\
        --format google_ads --input data/google_ads.csv \\
        --output output/records.csv

    # Show a format's column contract
    python -m src.cli inspect --format google_ads

    # Use a custom YAML format contract
    python -m src.cli summary --schema formats/agency.yaml --input data/agency.csv
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from src.processor.dashboard import DashboardBuilder
from src.processor.ingestion import parse_csv, read_csv_text, records_to_frame
from src.processor.normalize import to_local_date
from src.processor.transform import filter_by_date_range
from src.schema.design_system import format_currency, format_number, format_percentage
from src.schema.formats import FORMATS, get_format
from src.schema.loader import load_format
from src.schema.models import ColumnRole, DateRange, LocatorStrategy


# ---------------------------------------------------------------------------
# Format loading
# ---------------------------------------------------------------------------

def _load_format(args):
    """Load a FormatSchema from CLI args (--schema or --format)."""
    if getattr(args, "schema", None):
        try:
            return load_format(args.schema)
        except (FileNotFoundError, ValueError) as exc:
            _error(str(exc))
    return get_format(getattr(args, "format", "google_ads"))


def _read_input(args, schema):
    path = Path(args.input)
    if not path.exists():
        _error(f"Export file not found: {path}")
    _info(f"Ingesting {schema.name} from {path}")
    result = parse_csv(read_csv_text(path), schema)
    for w in result.warnings:
        _warn(w)
    if result.dropped_rows:
        _info(f"Skipped {result.dropped_rows} row(s) without data")
    return result


def _date_range(args):
    """Build a DateRange from --from/--to, or None if neither is given."""
    if args.start is None and args.end is None:
        return None
    if args.start is None or args.end is None:
        _error("--from and --to must be given together.")
    return DateRange(args.start, args.end)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_summary(args):
    """Print headline metrics, top sub-entities and campaign trends."""
    schema = _load_format(args)
    parsed = _read_input(args, schema)

    builder = DashboardBuilder(schema, today=args.today, limit=args.limit)
    try:
        result = builder.build(parsed, _date_range(args))
    except ValueError as exc:
        _error(str(exc))
    for w in result.warnings[len(parsed.warnings):]:
        _warn(w)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    m = result.metrics
    rng = result.date_range
    print(f"Format:       {schema.name}")
    print(f"Period:       {rng.start.isoformat()} to {rng.end.isoformat()} ({rng.days} days)")
    if result.available_range:
        avail = result.available_range
        print(f"Data spans:   {avail.start.isoformat()} to {avail.end.isoformat()}")
    print(f"Rows:         {len(result.records)}")
    print()
    print(f"Spend:        {format_currency(m.total_spend)}")
    print(f"Conversions:  {format_number(m.total_conversions)}")
    print(f"Avg CPA:      {format_currency(m.avg_cost_per_conversion)}")
    print(f"Impressions:  {format_number(m.total_impressions)}")
    if schema.ctr_role is ColumnRole.ENGAGEMENT:
        print(f"Reach:        {format_number(m.total_reach)}")
        print(f"Engagement:   {format_number(m.total_engagement)}")
    else:
        print(f"Clicks:       {format_number(m.total_clicks)}")
        print(f"CPC:          {format_currency(m.cpc)}")
    print(f"CTR:          {format_percentage(m.ctr)}")

    print()
    print(f"Top {schema.entity_kind.value}s:")
    if not result.top_entities:
        print("  (none with conversions)")
    for rank, e in enumerate(result.top_entities, start=1):
        print(f"  {rank:2d}. {e.key}: {format_number(e.conversions)} conv, "
              f"{format_currency(e.spend)}, CPA {format_currency(e.cost_per_conversion)}, "
              f"CTR {format_percentage(e.ctr)}")

    print()
    print("Campaign trends (7d / 14d / 30d spend):")
    if not result.trends:
        print("  (no spend in the last 30 days)")
    for t in result.trends:
        print(f"  {t.campaign_name}: {format_currency(t.cost_7d)} / "
              f"{format_currency(t.cost_14d)} / {format_currency(t.cost_30d)}")


def cmd_export(args):
    """Write canonical records to a CSV file."""
    schema = _load_format(args)
    parsed = _read_input(args, schema)

    records = parsed.records
    rng = _date_range(args)
    if rng is not None:
        records = filter_by_date_range(records, rng.start, rng.end)

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    records_to_frame(records).to_csv(output, index=False)
    _info(f"Written: {output} ({len(records):,} rows)")


def cmd_inspect(args):
    """Show a format's column contract."""
    schema = _load_format(args)

    print(f"Format:       {schema.name}")
    print(f"Platform:     {schema.platform.value}")
    if schema.strategy is LocatorStrategy.SENTINEL:
        print(f"Data start:   2 lines after the line starting with {schema.sentinel!r}")
    else:
        print(f"Data start:   line {schema.data_offset}")
    print(f"Min fields:   {schema.min_fields}")
    print(f"Ranks by:     {schema.entity_kind.value}")
    print(f"CTR from:     {schema.ctr_role.value}")
    print()
    for role, idx in sorted(schema.columns.items(), key=lambda item: item[1]):
        print(f"  [{idx:2d}] {role.value}")


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _info(msg):
    print(f"  {msg}", file=sys.stderr)


def _warn(msg):
    print(f"  WARNING: {msg}", file=sys.stderr)


def _error(msg):
    print(f"  ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _iso_date(value):
    try:
        return to_local_date(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def _non_negative_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ad-pipeline",
        description="Aggregate, rank and trend ad-platform CSV exports.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Show debug logging from the pipeline.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- summary ----
    summ = subparsers.add_parser(
        "summary",
        help="Print metrics, top keywords/creatives and campaign trends.",
    )
    _add_format_args(summ)
    _add_input_args(summ)
    _add_range_args(summ)
    summ.add_argument(
        "--today",
        type=_iso_date,
        default=None,
        help="Day treated as today for the default range (default: real today).",
    )
    summ.add_argument(
        "--limit",
        type=_non_negative_int,
        default=None,
        help="Number of top keywords/creatives (default: per format).",
    )
    summ.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the result as JSON.",
    )
    summ.set_defaults(func=cmd_summary)

    # ---- export ----
    exp = subparsers.add_parser(
        "export",
        help="Write the canonical records to CSV.",
    )
    _add_format_args(exp)
    _add_input_args(exp)
    _add_range_args(exp)
    exp.add_argument(
        "-o", "--output",
        required=True,
        help="Output CSV file path.",
    )
    exp.set_defaults(func=cmd_export)

    # ---- inspect ----
    insp = subparsers.add_parser(
        "inspect",
        help="Show a format's column contract.",
    )
    _add_format_args(insp)
    insp.set_defaults(func=cmd_inspect)

    return parser


def _add_format_args(parser):
    """Add --format / --schema args to a subparser."""
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--format",
        choices=sorted(FORMATS),
        default="google_ads",
        help="Built-in export format (default: google_ads).",
    )
    group.add_argument(
        "--schema",
        help="Path to a custom YAML format contract.",
    )


def _add_input_args(parser):
    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Path to the CSV export.",
    )


def _add_range_args(parser):
    """Add --from / --to args to a subparser."""
    parser.add_argument(
        "--from",
        dest="start",
        type=_iso_date,
        default=None,
        help="First day of the range, inclusive (YYYY-MM-DD).",
    )
    parser.add_argument(
        "--to",
        dest="end",
        type=_iso_date,
        default=None,
        help="Last day of the range, inclusive (YYYY-MM-DD).",
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="  %(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
