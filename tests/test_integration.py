"""End-to-end tests on realistic exports.

Exercises the full pipeline:
    CSV text → parse → filter_by_date_range → aggregate / top_entities / campaign_trends

Exports mimic the published spreadsheets: the Ads keyword report with its
metadata preamble and ``Rows`` marker, and the social-ads creative sheet.
"""

from datetime import date, timedelta

import pytest

from src.processor import (
    DashboardBuilder,
    aggregate,
    campaign_trends,
    filter_by_date_range,
    parse,
    parse_csv,
    top_entities,
)
from src.schema.models import ColumnRole, DateRange


# ---------------------------------------------------------------------------
# Synthetic export factories
# ---------------------------------------------------------------------------

PREAMBLE = [
    "Keyword report",
    "\"January 1, 2025 - January 31, 2025\"",
    "Account name,AmorSaúde Montes Claros",
    "Customer ID,123-456-7890",
    "Currency code,BRL",
    "Time zone,(GMT-03:00) Brasilia",
    "Report generated,2025-02-01",
    "Segment,Day",
    "Campaign status,All",
    "Keyword status,All but removed",
    "Columns,15",
    "Sorted by,Day",
]
HEADER = (
    "Day,Keyword status,Keyword,Match type,Campaign,Ad group,Status,"
    "Status reasons,Currency code,Max. CPC,Draft change,Clicks,Impr.,Cost,All conv."
)


def _row(day, keyword, campaign, clicks, impressions, cost, conversions):
    return (f"{day},Enabled,{keyword},Phrase match,{campaign},Ad group 1,Eligible,,"
            f"BRL,\"1,50\",,{clicks},{impressions},{cost},{conversions}")


def _export(rows):
    return "\n".join(PREAMBLE + ["Rows", HEADER] + rows + [
        "Total: Account,,,,,,,,,,,0,0,0,0",
        "Total: Search,,,,,,,,,,,0,0,0,0",
    ]) + "\n"


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

class TestTwoRowScenario:
    @pytest.fixture
    def records(self):
        return parse(_export([
            _row("2025-01-01", "clinica popular", "Search", 20, 1000, 100, 2),
            _row("2025-01-02", "clinica popular", "Search", 10, 500, 50, 1),
        ]))

    def test_parse(self, records):
        assert len(records) == 2
        assert records[0].date == date(2025, 1, 1)
        assert records[1].conversions == 1

    def test_aggregate_without_filter(self, records):
        agg = aggregate(records)
        assert agg.total_spend == 150
        assert agg.total_conversions == 3
        assert agg.avg_cost_per_conversion == pytest.approx(50.0)
        assert agg.ctr == pytest.approx(2.0)
        assert agg.cpc == pytest.approx(5.0)

    def test_top_entity(self, records):
        [entity] = top_entities(records, 10)
        assert entity.key == "clinica popular"
        assert entity.spend == 150
        assert entity.cost_per_conversion == pytest.approx(50.0)
        assert entity.ctr == pytest.approx(2.0)
        assert entity.cpc == pytest.approx(5.0)

    def test_boundary_days_included(self, records):
        assert len(filter_by_date_range(records, date(2025, 1, 1), date(2025, 1, 2))) == 2
        assert len(filter_by_date_range(records, date(2025, 1, 2), date(2025, 1, 2))) == 1


class TestMonthScenario:
    @pytest.fixture
    def text(self):
        start = date(2025, 1, 1)
        rows = []
        for offset in range(31):
            day = (start + timedelta(days=offset)).isoformat()
            rows.append(_row(day, "clinica", "Search", 10, 400, "\"20,5\"", 1))
            rows.append(_row(day, "exame", "Search", 5, 300, 15, 0))
            if offset < 10:
                rows.append(_row(day, "consulta", "Brand", 2, 100, 40, 2))
        return _export(rows)

    def test_parse_counts(self, text):
        result = parse_csv(text)
        assert len(result.records) == 31 * 2 + 10
        assert result.undated_rows == 2

    def test_comma_decimal_spend(self, text):
        records = parse(text)
        assert records[0].spend == 20.5

    def test_ranking(self, text):
        ranked = top_entities(parse(text), 10)
        assert [e.key for e in ranked] == ["clinica", "consulta"]
        assert ranked[0].conversions == 31
        assert ranked[1].campaign_name == "Brand"

    def test_trends(self, text):
        trends = campaign_trends(parse(text), date(2025, 1, 31))
        assert [t.campaign_name for t in trends] == ["Search", "Brand"]
        search, brand = trends
        # 7d window spans 2025-01-24..31 inclusive
        assert search.cost_7d == pytest.approx(8 * 35.5)
        assert brand.cost_7d == 0
        assert brand.cost_14d == 0
        assert brand.cost_30d == pytest.approx(10 * 40)

    def test_dashboard(self, text):
        result = DashboardBuilder("google_ads").build(
            parse_csv(text), DateRange(date(2025, 1, 25), date(2025, 1, 31))
        )
        assert len(result.records) == 14
        assert result.metrics.total_spend == pytest.approx(7 * 35.5)
        assert result.metrics.total_conversions == 7
        assert [e.key for e in result.top_entities] == ["clinica"]


class TestMetaScenario:
    def test_creatives(self):
        text = "\n".join([
            "Day,Campaign name,Ad name,Amount spent,Reach,Impressions,"
            "Post engagements,Results,Cost per result",
            "2025-01-28,Mensagens,Video 01,30,1000,2000,100,6,5",
            "2025-01-29,Mensagens,Video 01,30,900,1800,80,4,7.5",
            "2025-01-29,Mensagens,Carrossel,20,400,600,30,0,0",
            "2025-01-29,,,,,,,,",
        ])
        records = parse(text, "meta_ads")
        assert len(records) == 4

        agg = aggregate(records, ColumnRole.ENGAGEMENT)
        assert agg.total_reach == 2300
        assert agg.ctr == pytest.approx(210 / 4400 * 100)

        ranked = top_entities(records, 6)
        assert [e.key for e in ranked] == ["Video 01"]
        assert ranked[0].cost_per_conversion == pytest.approx(6.0)
