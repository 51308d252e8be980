"""Pipeline schema package: typed models for export formats and results.

Provides the contract between ingestion, aggregation and display:

- models.py: Core dataclasses (FormatSchema, CanonicalRecord, AggregateMetrics, etc.)
- formats.py: Built-in export format contracts (google_ads, meta_ads)
- design_system.py: Value formatting functions (currency, numbers, percentages)
- loader.py: YAML serialization/deserialization of format contracts
"""

from .design_system import (
    format_currency,
    format_number,
    format_percentage,
)
from .formats import FORMATS, GOOGLE_ADS, META_ADS, get_format
from .loader import load_format, save_format
from .models import (
    TREND_WINDOWS,
    AggregateMetrics,
    CampaignTrend,
    CanonicalRecord,
    ColumnRole,
    DateRange,
    EntityKind,
    FormatSchema,
    LocatorStrategy,
    Platform,
    RankedEntity,
)

__all__ = [
    # Models
    "AggregateMetrics",
    "CampaignTrend",
    "CanonicalRecord",
    "ColumnRole",
    "DateRange",
    "EntityKind",
    "FormatSchema",
    "LocatorStrategy",
    "Platform",
    "RankedEntity",
    "TREND_WINDOWS",
    # Formats
    "FORMATS",
    "GOOGLE_ADS",
    "META_ADS",
    "get_format",
    # Loader
    "load_format",
    "save_format",
    # Formatting
    "format_currency",
    "format_number",
    "format_percentage",
]
