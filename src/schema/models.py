"""Pipeline schema models - the contract between ingestion and aggregation.

Defines the typed structure of an ad-performance export format (where the
data section starts, which column holds which measure) and the immutable
value objects produced by the pipeline: canonical records, aggregates,
ranked sub-entities and per-campaign trends.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ColumnRole(Enum):
    """What a positional column of a data row means."""
    DATE = "date"
    CAMPAIGN = "campaign"
    SUB_ENTITY = "sub_entity"      # Keyword text or creative identifier
    SPEND = "spend"
    IMPRESSIONS = "impressions"
    CLICKS = "clicks"
    REACH = "reach"
    ENGAGEMENT = "engagement"
    CONVERSIONS = "conversions"


class LocatorStrategy(Enum):
    """How the start of the tabular data is found in an export."""
    SENTINEL = "sentinel"          # Marker line, then one header line
    FIXED_OFFSET = "fixed_offset"  # Data starts at a known line index


class Platform(Enum):
    """Ad platform a format belongs to."""
    GOOGLE_ADS = "google_ads"
    META_ADS = "meta_ads"


class EntityKind(Enum):
    """Which sub-entity the ranker groups by."""
    KEYWORD = "keyword"
    CREATIVE = "creative"


# ---------------------------------------------------------------------------
# FormatSchema: declarative column-position contract
# ---------------------------------------------------------------------------

@dataclass
class FormatSchema:
    """Column-position contract for one vendor export format.

    ``columns`` maps each role to the 0-based field index holding it.
    Roles absent from ``columns`` are read as zero (numeric) or empty (text).
    """
    name: str
    platform: Platform
    strategy: LocatorStrategy
    columns: dict[ColumnRole, int]
    min_fields: int
    entity_kind: EntityKind
    account_label: str = ""
    sentinel: str | None = None       # Required for SENTINEL
    data_offset: int = 0              # Used for FIXED_OFFSET
    ctr_role: ColumnRole = ColumnRole.CLICKS
    top_limit: int = 10

    def __post_init__(self):
        if self.strategy is LocatorStrategy.SENTINEL and not self.sentinel:
            raise ValueError(f"Format {self.name!r}: sentinel strategy needs a sentinel marker")
        if self.data_offset < 0:
            raise ValueError(f"Format {self.name!r}: data_offset must be >= 0")
        if self.top_limit < 0:
            raise ValueError(f"Format {self.name!r}: top_limit must be >= 0")
        if ColumnRole.DATE not in self.columns:
            raise ValueError(f"Format {self.name!r}: a DATE column is required")
        if self.ctr_role not in (ColumnRole.CLICKS, ColumnRole.ENGAGEMENT):
            raise ValueError(f"Format {self.name!r}: ctr_role must be clicks or engagement")
        highest = max(self.columns.values())
        if self.min_fields <= highest:
            raise ValueError(
                f"Format {self.name!r}: min_fields ({self.min_fields}) must exceed "
                f"the highest column index ({highest})"
            )

    def index_of(self, role: ColumnRole) -> int | None:
        return self.columns.get(role)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "name": self.name,
            "platform": self.platform.value,
            "strategy": self.strategy.value,
            "columns": {role.value: idx for role, idx in self.columns.items()},
            "min_fields": self.min_fields,
            "entity_kind": self.entity_kind.value,
        }
        if self.account_label:
            d["account_label"] = self.account_label
        if self.sentinel:
            d["sentinel"] = self.sentinel
        if self.data_offset:
            d["data_offset"] = self.data_offset
        if self.ctr_role is not ColumnRole.CLICKS:
            d["ctr_role"] = self.ctr_role.value
        if self.top_limit != 10:
            d["top_limit"] = self.top_limit
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "FormatSchema":
        return cls(
            name=d["name"],
            platform=Platform(d["platform"]),
            strategy=LocatorStrategy(d["strategy"]),
            columns={ColumnRole(role): int(idx) for role, idx in d["columns"].items()},
            min_fields=int(d["min_fields"]),
            entity_kind=EntityKind(d["entity_kind"]),
            account_label=d.get("account_label", ""),
            sentinel=d.get("sentinel"),
            data_offset=int(d.get("data_offset", 0)),
            ctr_role=ColumnRole(d.get("ctr_role", "clicks")),
            top_limit=int(d.get("top_limit", 10)),
        )


# ---------------------------------------------------------------------------
# Pipeline value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CanonicalRecord:
    """One normalized data row, independent of the source format."""
    account: str
    date: date
    campaign_name: str
    sub_entity: str
    spend: float = 0.0
    impressions: float = 0.0
    clicks: float = 0.0
    conversions: float = 0.0
    reach: float = 0.0
    engagement: float = 0.0
    cost_per_conversion: float = 0.0

    def to_dict(self) -> dict:
        return {
            "account": self.account,
            "date": self.date.isoformat(),
            "campaign_name": self.campaign_name,
            "sub_entity": self.sub_entity,
            "spend": self.spend,
            "impressions": self.impressions,
            "clicks": self.clicks,
            "conversions": self.conversions,
            "reach": self.reach,
            "engagement": self.engagement,
            "cost_per_conversion": self.cost_per_conversion,
        }


@dataclass(frozen=True)
class AggregateMetrics:
    """Totals for a record set plus ratios derived from those totals."""
    total_spend: float = 0.0
    total_conversions: float = 0.0
    total_impressions: float = 0.0
    total_clicks: float = 0.0
    total_reach: float = 0.0
    total_engagement: float = 0.0
    avg_cost_per_conversion: float = 0.0
    ctr: float = 0.0                  # Percent, e.g. 2.0 for 2%
    cpc: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_spend": self.total_spend,
            "total_conversions": self.total_conversions,
            "total_impressions": self.total_impressions,
            "total_clicks": self.total_clicks,
            "total_reach": self.total_reach,
            "total_engagement": self.total_engagement,
            "avg_cost_per_conversion": self.avg_cost_per_conversion,
            "ctr": self.ctr,
            "cpc": self.cpc,
        }


@dataclass(frozen=True)
class RankedEntity:
    """One keyword or creative with summed metrics and post-grouping ratios."""
    key: str
    kind: EntityKind
    campaign_name: str
    spend: float
    conversions: float
    impressions: float
    clicks: float
    engagement: float
    cost_per_conversion: float
    ctr: float
    cpc: float

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "kind": self.kind.value,
            "campaign_name": self.campaign_name,
            "spend": self.spend,
            "conversions": self.conversions,
            "impressions": self.impressions,
            "clicks": self.clicks,
            "engagement": self.engagement,
            "cost_per_conversion": self.cost_per_conversion,
            "ctr": self.ctr,
            "cpc": self.cpc,
        }


TREND_WINDOWS = (7, 14, 30)


@dataclass(frozen=True)
class CampaignTrend:
    """Trailing 7/14/30-day aggregates for one campaign."""
    campaign_name: str
    windows: dict[int, AggregateMetrics] = field(default_factory=dict)

    def _window(self, days: int) -> AggregateMetrics:
        return self.windows.get(days, AggregateMetrics())

    @property
    def cost_7d(self) -> float:
        return self._window(7).total_spend

    @property
    def cost_14d(self) -> float:
        return self._window(14).total_spend

    @property
    def cost_30d(self) -> float:
        return self._window(30).total_spend

    @property
    def conversions_7d(self) -> float:
        return self._window(7).total_conversions

    @property
    def conversions_14d(self) -> float:
        return self._window(14).total_conversions

    @property
    def conversions_30d(self) -> float:
        return self._window(30).total_conversions

    @property
    def cpa_7d(self) -> float:
        return self._window(7).avg_cost_per_conversion

    @property
    def cpa_14d(self) -> float:
        return self._window(14).avg_cost_per_conversion

    @property
    def cpa_30d(self) -> float:
        return self._window(30).avg_cost_per_conversion

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"campaign_name": self.campaign_name}
        for days in TREND_WINDOWS:
            agg = self._window(days)
            d[f"cost_{days}d"] = agg.total_spend
            d[f"conversions_{days}d"] = agg.total_conversions
            d[f"cpa_{days}d"] = agg.avg_cost_per_conversion
        return d


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] calendar-day interval."""
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}
