"""Aggregation, ranking and trend module for the ad-performance pipeline.

Takes canonical records (from the ingestion module) and produces the
values the dashboard displays: date-range subsets, aggregate totals with
derived ratios, the top-N keywords or creatives, and trailing-window
trends per campaign.

Every function is pure: the same inputs give the same outputs, and "now"
is always an injectable argument. Ratios are guarded so a zero
denominator yields 0.0; no function ever returns NaN or infinity.

Window convention: an N-day trailing window ending at reference day R is
the inclusive calendar interval [R - N days, R].
"""

from datetime import date

import pandas as pd

from src.schema.models import (
    TREND_WINDOWS,
    AggregateMetrics,
    CampaignTrend,
    ColumnRole,
    DateRange,
    EntityKind,
    Platform,
    RankedEntity,
)

from .ingestion import records_to_frame
from .normalize import days_before, to_local_date


# ---------------------------------------------------------------------------
# Safe math helpers
# ---------------------------------------------------------------------------

def safe_div(numerator, denominator, default=0.0):
    """Divide, returning *default* when the denominator is not positive."""
    if denominator is None or denominator <= 0:
        return default
    return numerator / denominator


def _ctr(engagement, impressions):
    """Click/engagement-through rate in percent."""
    return safe_div(engagement, impressions) * 100


def _today(today=None):
    return to_local_date(today) if today is not None else date.today()


# ---------------------------------------------------------------------------
# Range filter
# ---------------------------------------------------------------------------

def filter_by_date_range(records, start, end):
    """Select records dated within [start, end], both days inclusive.

    *start* and *end* may be dates, datetimes or ``YYYY-MM-DD`` strings;
    only their calendar day is compared, so a record dated on either
    boundary day is always included. ``start > end`` selects nothing.
    """
    window = DateRange(to_local_date(start), to_local_date(end))
    return [r for r in records if window.contains(r.date)]


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------

_SUM_COLUMNS = ["spend", "conversions", "impressions", "clicks", "reach", "engagement"]


def _as_frame(records):
    if isinstance(records, pd.DataFrame):
        return records
    return records_to_frame(list(records))


def _metrics_from_frame(df: pd.DataFrame, ctr_role) -> AggregateMetrics:
    """Compute aggregated metrics from a (possibly filtered) record frame."""
    totals = {col: float(df[col].sum()) for col in _SUM_COLUMNS}
    ctr_numerator = totals["engagement"] if ctr_role is ColumnRole.ENGAGEMENT else totals["clicks"]
    return AggregateMetrics(
        total_spend=totals["spend"],
        total_conversions=totals["conversions"],
        total_impressions=totals["impressions"],
        total_clicks=totals["clicks"],
        total_reach=totals["reach"],
        total_engagement=totals["engagement"],
        avg_cost_per_conversion=safe_div(totals["spend"], totals["conversions"]),
        ctr=_ctr(ctr_numerator, totals["impressions"]),
        cpc=safe_div(totals["spend"], totals["clicks"]),
    )


def aggregate(records, ctr_role=ColumnRole.CLICKS):
    """Sum core metrics over *records* and derive ratio metrics.

    Args:
        records: Iterable of CanonicalRecord, or a frame from
            :func:`records_to_frame`.
        ctr_role: ``ColumnRole.CLICKS`` or ``ColumnRole.ENGAGEMENT``; the
            measure divided by impressions for CTR.

    Returns:
        AggregateMetrics. An empty input gives all zeros.
    """
    return _metrics_from_frame(_as_frame(records), ctr_role)


# ---------------------------------------------------------------------------
# Top-N ranker
# ---------------------------------------------------------------------------

def top_entities(records, limit=10, kind=EntityKind.KEYWORD, ctr_role=ColumnRole.CLICKS):
    """Rank sub-entities (keywords or creatives) by total conversions.

    Rows are grouped by ``sub_entity`` in first-seen order; rows with an
    empty key are skipped. Ratios are derived from the grouped totals, not
    averaged from per-row values. Entities without conversions are dropped,
    the rest sorted by conversions descending (ties keep first-seen order)
    and truncated to *limit*.

    Raises:
        ValueError: If *limit* is negative.
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    df = _as_frame(records)
    df = df[df["sub_entity"] != ""]
    if df.empty:
        return []

    grouped = df.groupby("sub_entity", sort=False).agg(
        campaign_name=("campaign_name", "first"),
        spend=("spend", "sum"),
        conversions=("conversions", "sum"),
        impressions=("impressions", "sum"),
        clicks=("clicks", "sum"),
        engagement=("engagement", "sum"),
    )
    grouped = grouped[grouped["conversions"] > 0]
    grouped = grouped.sort_values("conversions", ascending=False, kind="stable").head(limit)

    ranked = []
    for key, row in grouped.iterrows():
        spend = float(row["spend"])
        conversions = float(row["conversions"])
        impressions = float(row["impressions"])
        clicks = float(row["clicks"])
        engagement = float(row["engagement"])
        ctr_numerator = engagement if ctr_role is ColumnRole.ENGAGEMENT else clicks
        ranked.append(RankedEntity(
            key=key,
            kind=kind,
            campaign_name=row["campaign_name"],
            spend=spend,
            conversions=conversions,
            impressions=impressions,
            clicks=clicks,
            engagement=engagement,
            cost_per_conversion=safe_div(spend, conversions),
            ctr=_ctr(ctr_numerator, impressions),
            cpc=safe_div(spend, clicks),
        ))
    return ranked


# ---------------------------------------------------------------------------
# Trend calculator
# ---------------------------------------------------------------------------

def trailing_window(reference_date, days):
    """Inclusive DateRange of the *days*-day window ending at *reference_date*."""
    end = to_local_date(reference_date)
    return DateRange(days_before(end, days), end)


def campaign_trends(records, reference_date=None, windows=TREND_WINDOWS,
                    ctr_role=ColumnRole.CLICKS):
    """Compute trailing-window aggregates per campaign.

    Args:
        records: Full record set.
        reference_date: Last day of every window. Defaults to today.
        windows: Window lengths in days; the longest one orders the output.
        ctr_role: Passed through to :func:`aggregate`.

    Returns:
        One CampaignTrend per named campaign with spend in at least one
        window, ordered by spend in the longest window, descending.
    """
    reference = _today(reference_date)
    df = _as_frame(records)
    if df.empty:
        return []

    # ISO day strings order the same way as the dates they spell
    window_masks = {}
    for days in windows:
        w = trailing_window(reference, days)
        window_masks[days] = (df["date"] >= w.start.isoformat()) & (df["date"] <= w.end.isoformat())

    campaigns = [c for c in df["campaign_name"].unique() if c]
    trends = []
    for campaign in campaigns:
        in_campaign = df["campaign_name"] == campaign
        per_window = {
            days: _metrics_from_frame(df[in_campaign & mask], ctr_role)
            for days, mask in window_masks.items()
        }
        if any(agg.total_spend > 0 for agg in per_window.values()):
            trends.append(CampaignTrend(campaign_name=campaign, windows=per_window))

    if not trends:
        return []
    longest = max(windows)
    return sorted(trends, key=lambda t: t.windows[longest].total_spend, reverse=True)


# ---------------------------------------------------------------------------
# Date ranges
# ---------------------------------------------------------------------------

def available_date_range(records):
    """Earliest and latest record dates, or None for an empty set."""
    dates = [r.date for r in records]
    if not dates:
        return None
    return DateRange(min(dates), max(dates))


def default_date_range(platform, today=None):
    """Initial dashboard range for *platform*.

    - Google Ads: the last 30 days up to and including today.
    - Meta Ads: the 7 days before yesterday up to and including yesterday,
      since today's social-ads numbers are still incomplete.
    """
    today = _today(today)
    platform = Platform(platform)
    if platform is Platform.META_ADS:
        end = days_before(today, 1)
        return DateRange(days_before(end, 7), end)
    return DateRange(days_before(today, 30), today)
