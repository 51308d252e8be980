"""Data processor module for the ad-performance pipeline."""

from .dashboard import (
    DashboardBuilder,
    DashboardResult,
)
from .ingestion import (
    ingest,
    ingest_google_ads,
    ingest_meta_ads,
    map_row,
    parse,
    parse_csv,
    read_csv_text,
    records_to_frame,
    ParseResult,
    SOURCE_TYPES,
)
from .locator import locate_data_start
from .normalize import (
    end_of_day,
    parse_number,
    start_of_day,
    to_local_date,
)
from .tokenizer import parse_csv_line, split_lines
from .transform import (
    aggregate,
    available_date_range,
    campaign_trends,
    default_date_range,
    filter_by_date_range,
    safe_div,
    top_entities,
)
