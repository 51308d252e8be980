"""Dashboard builder for the ad-performance pipeline.

Runs one ingestion cycle's worth of computations for a format: selects the
date range, filters the records, and computes the headline metrics, the
top-N sub-entities and the per-campaign trends. Sits between the ingestion
layer (src.processor.ingestion) and whatever displays the values.

Usage::

    from src.processor.dashboard import DashboardBuilder
    from src.processor.ingestion import parse_csv

    parsed = parse_csv(csv_text, "google_ads")
    builder = DashboardBuilder("google_ads", today=date(2025, 1, 31))
    result = builder.build(parsed)
    print(result.metrics.total_spend)
    print(result.warnings)           # list of warning strings
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from src.schema.formats import get_format
from src.schema.models import (
    AggregateMetrics,
    CampaignTrend,
    CanonicalRecord,
    DateRange,
    FormatSchema,
    Platform,
    RankedEntity,
)

from .ingestion import ParseResult
from .transform import (
    aggregate,
    available_date_range,
    campaign_trends,
    default_date_range,
    filter_by_date_range,
    top_entities,
)

logger = logging.getLogger(__name__)

# Social-ads headline ratios are shown rounded
DISPLAY_PRECISION = 2


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------

@dataclass
class DashboardResult:
    """Output of :meth:`DashboardBuilder.build`."""
    format_name: str
    date_range: DateRange
    available_range: DateRange | None
    records: list[CanonicalRecord]
    metrics: AggregateMetrics
    top_entities: list[RankedEntity]
    trends: list[CampaignTrend]
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format_name,
            "date_range": self.date_range.to_dict(),
            "available_range": self.available_range.to_dict() if self.available_range else None,
            "record_count": len(self.records),
            "metrics": self.metrics.to_dict(),
            "top_entities": [e.to_dict() for e in self.top_entities],
            "trends": [t.to_dict() for t in self.trends],
            "warnings": list(self.warnings),
        }


# ---------------------------------------------------------------------------
# DashboardBuilder
# ---------------------------------------------------------------------------

class DashboardBuilder:
    """Compute every dashboard value for one export format.

    Parameters
    ----------
    schema : FormatSchema or str
        The export format, or the name of a built-in one.
    today : date, optional
        Stands in for the current day when picking the default range.
    limit : int, optional
        Top-N size; defaults to the format's ``top_limit``.
    """

    def __init__(self, schema, today=None, limit=None):
        self.schema: FormatSchema = schema if isinstance(schema, FormatSchema) else get_format(schema)
        self.today = today
        self.limit = self.schema.top_limit if limit is None else limit

    def build(self, data, date_range: DateRange | None = None) -> DashboardResult:
        """Build the dashboard values.

        Args:
            data: A ParseResult or a list of CanonicalRecord.
            date_range: Inclusive range to display. Defaults to the
                platform's default range relative to ``today``.
        """
        warnings: list[str] = []
        if isinstance(data, ParseResult):
            records = data.records
            warnings.extend(data.warnings)
        else:
            records = list(data)

        if date_range is None:
            date_range = default_date_range(self.schema.platform, self.today)

        filtered = filter_by_date_range(records, date_range.start, date_range.end)
        if records and not filtered:
            warnings.append(
                f"No {self.schema.name} rows between "
                f"{date_range.start.isoformat()} and {date_range.end.isoformat()}"
            )

        metrics = aggregate(filtered, self.schema.ctr_role)
        if self.schema.platform is Platform.META_ADS:
            metrics = replace(
                metrics,
                avg_cost_per_conversion=round(metrics.avg_cost_per_conversion, DISPLAY_PRECISION),
                ctr=round(metrics.ctr, DISPLAY_PRECISION),
            )

        ranked = top_entities(
            filtered, self.limit,
            kind=self.schema.entity_kind,
            ctr_role=self.schema.ctr_role,
        )
        # Trends are relative to the end of the displayed range
        trends = campaign_trends(filtered, date_range.end, ctr_role=self.schema.ctr_role)

        logger.debug(
            "%s dashboard: %d of %d row(s) in range, %d ranked, %d trend(s)",
            self.schema.name, len(filtered), len(records), len(ranked), len(trends),
        )
        return DashboardResult(
            format_name=self.schema.name,
            date_range=date_range,
            available_range=available_date_range(records),
            records=filtered,
            metrics=metrics,
            top_entities=ranked,
            trends=trends,
            warnings=warnings,
        )
