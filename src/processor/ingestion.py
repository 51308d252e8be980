"""Data ingestion module for the ad-performance pipeline.

Turns the raw CSV text of a vendor export into canonical records:

1. split the text into non-blank lines
2. locate the data section (sentinel marker or fixed offset)
3. tokenize each data line
4. map positional fields to a CanonicalRecord using the format contract

Malformed input degrades instead of failing: short rows and rows without a
``YYYY-MM-DD`` date (section totals, blank rows) are dropped, unparseable
numbers become zero, and a missing data section yields no records plus a
warning.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from src.schema.formats import get_format
from src.schema.models import CanonicalRecord, ColumnRole, FormatSchema

from .locator import locate_data_start
from .normalize import is_iso_day, parse_number, to_local_date
from .tokenizer import parse_csv_line, split_lines

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------

@dataclass
class ParseResult:
    """Output of :func:`parse_csv`."""
    records: list[CanonicalRecord]
    warnings: list[str] = field(default_factory=list)
    data_start: int | None = None      # None when no data section was found
    short_rows: int = 0                # fewer fields than the format needs
    undated_rows: int = 0              # date field not YYYY-MM-DD

    @property
    def dropped_rows(self) -> int:
        return self.short_rows + self.undated_rows

    @property
    def found_data_section(self) -> bool:
        return self.data_start is not None


# ---------------------------------------------------------------------------
# Field mapping
# ---------------------------------------------------------------------------

def _text(fields, schema, role):
    idx = schema.index_of(role)
    if idx is None:
        return ""
    return fields[idx] or ""


def _number(fields, schema, role):
    idx = schema.index_of(role)
    if idx is None:
        return 0.0
    return parse_number(fields[idx])


def map_row(fields, schema: FormatSchema):
    """Map one tokenized row to a CanonicalRecord, or None if it is dropped.

    The source's own cost-per-conversion column is never read; the value is
    recomputed from spend and conversions.
    """
    if len(fields) < schema.min_fields:
        return None

    day = _text(fields, schema, ColumnRole.DATE)
    if not is_iso_day(day):
        return None
    try:
        record_date = to_local_date(day)
    except ValueError:
        # Matches the pattern but is not a real day, e.g. 2025-02-30
        return None

    spend = _number(fields, schema, ColumnRole.SPEND)
    conversions = _number(fields, schema, ColumnRole.CONVERSIONS)
    return CanonicalRecord(
        account=schema.account_label,
        date=record_date,
        campaign_name=_text(fields, schema, ColumnRole.CAMPAIGN),
        sub_entity=_text(fields, schema, ColumnRole.SUB_ENTITY),
        spend=spend,
        impressions=_number(fields, schema, ColumnRole.IMPRESSIONS),
        clicks=_number(fields, schema, ColumnRole.CLICKS),
        conversions=conversions,
        reach=_number(fields, schema, ColumnRole.REACH),
        engagement=_number(fields, schema, ColumnRole.ENGAGEMENT),
        cost_per_conversion=spend / conversions if conversions > 0 else 0.0,
    )


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _resolve_format(schema):
    if isinstance(schema, FormatSchema):
        return schema
    return get_format(schema)


def parse_csv(csv_text, schema="google_ads"):
    """Parse export text into a :class:`ParseResult`.

    Args:
        csv_text: Full text of the export.
        schema: A FormatSchema or the name of a built-in format.

    Returns:
        ParseResult with the records in input order, any warnings, and
        counters for dropped rows.
    """
    schema = _resolve_format(schema)
    lines = split_lines(csv_text)
    start = locate_data_start(lines, schema)

    if start is None:
        msg = f"Could not find {schema.sentinel!r} section in {schema.name} export"
        logger.warning(msg)
        return ParseResult(records=[], warnings=[msg])

    result = ParseResult(records=[], data_start=start)
    for line in lines[start:]:
        fields = parse_csv_line(line)
        if len(fields) < schema.min_fields:
            result.short_rows += 1
            continue
        record = map_row(fields, schema)
        if record is None:
            result.undated_rows += 1
            continue
        result.records.append(record)

    if result.dropped_rows:
        logger.debug(
            "Dropped %d row(s) from %s export (%d short, %d without a date)",
            result.dropped_rows, schema.name, result.short_rows, result.undated_rows,
        )
    logger.info("Parsed %d %s row(s)", len(result.records), schema.name)
    return result


def parse(csv_text, schema="google_ads"):
    """Parse export text into a list of canonical records."""
    return parse_csv(csv_text, schema).records


# ---------------------------------------------------------------------------
# File reading
# ---------------------------------------------------------------------------

def detect_encoding(path):
    """Detect the text encoding of an export from its byte-order mark."""
    with open(path, "rb") as f:
        raw = f.read(4)
    if raw[:2] in (b"\xff\xfe", b"\xfe\xff"):
        return "utf-16"
    return "utf-8-sig"


def read_csv_text(path):
    """Read an export file as text.

    Raises:
        FileNotFoundError: If *path* does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Export file not found: {path}")
    return path.read_text(encoding=detect_encoding(path))


def ingest_google_ads(path):
    """Ingest an Ads keyword report export."""
    return parse_csv(read_csv_text(path), "google_ads")


def ingest_meta_ads(path):
    """Ingest the social-ads creative sheet."""
    return parse_csv(read_csv_text(path), "meta_ads")


SOURCE_TYPES = {
    "google_ads": ingest_google_ads,
    "meta_ads": ingest_meta_ads,
}


def ingest(path, source_type):
    """Ingest an export file by source type.

    Args:
        path: Path to the CSV export.
        source_type: One of 'google_ads', 'meta_ads'.

    Returns:
        ParseResult.

    Raises:
        ValueError: If source_type is not recognized.
    """
    if source_type not in SOURCE_TYPES:
        raise ValueError(
            f"Unknown source type '{source_type}'. "
            f"Valid types: {', '.join(sorted(SOURCE_TYPES))}"
        )
    return SOURCE_TYPES[source_type](path)


# ---------------------------------------------------------------------------
# Tabular export
# ---------------------------------------------------------------------------

RECORD_COLUMNS = [
    "account", "date", "campaign_name", "sub_entity",
    "spend", "impressions", "clicks", "conversions",
    "reach", "engagement", "cost_per_conversion",
]


def records_to_frame(records):
    """Build a DataFrame with one row per canonical record.

    Dates stay ISO ``YYYY-MM-DD`` strings so a CSV round-trip cannot shift
    them.
    """
    if not records:
        return pd.DataFrame(columns=RECORD_COLUMNS)
    return pd.DataFrame([r.to_dict() for r in records], columns=RECORD_COLUMNS)
