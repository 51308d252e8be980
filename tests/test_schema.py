"""Tests for format contracts, the YAML loader and display formatting."""

from datetime import date

import pytest
import yaml

from src.schema.design_system import format_currency, format_number, format_percentage
from src.schema.formats import FORMATS, GOOGLE_ADS, META_ADS, get_format
from src.schema.loader import load_format, save_format
from src.schema.models import (
    AggregateMetrics,
    CampaignTrend,
    CanonicalRecord,
    ColumnRole,
    DateRange,
    EntityKind,
    FormatSchema,
    LocatorStrategy,
    Platform,
)


def _schema(**overrides):
    kwargs = dict(
        name="custom",
        platform=Platform.GOOGLE_ADS,
        strategy=LocatorStrategy.FIXED_OFFSET,
        columns={ColumnRole.DATE: 0, ColumnRole.SPEND: 1},
        min_fields=2,
        entity_kind=EntityKind.KEYWORD,
    )
    kwargs.update(overrides)
    return FormatSchema(**kwargs)


# ---------------------------------------------------------------------------
# Built-in formats
# ---------------------------------------------------------------------------

class TestBuiltinFormats:
    def test_registry(self):
        assert set(FORMATS) == {"google_ads", "meta_ads"}
        assert get_format("google_ads") is GOOGLE_ADS

    def test_unknown(self):
        with pytest.raises(ValueError, match="Valid formats: google_ads, meta_ads"):
            get_format("tiktok")

    def test_google_contract(self):
        assert GOOGLE_ADS.strategy is LocatorStrategy.SENTINEL
        assert GOOGLE_ADS.sentinel == "Rows"
        assert GOOGLE_ADS.min_fields == 15
        assert GOOGLE_ADS.index_of(ColumnRole.CONVERSIONS) == 14
        assert GOOGLE_ADS.index_of(ColumnRole.REACH) is None

    def test_meta_contract(self):
        assert META_ADS.strategy is LocatorStrategy.FIXED_OFFSET
        assert META_ADS.data_offset == 1
        assert META_ADS.ctr_role is ColumnRole.ENGAGEMENT
        assert META_ADS.entity_kind is EntityKind.CREATIVE
        assert META_ADS.top_limit == 6


# ---------------------------------------------------------------------------
# FormatSchema validation and serialization
# ---------------------------------------------------------------------------

class TestFormatSchema:
    def test_sentinel_required(self):
        with pytest.raises(ValueError, match="sentinel"):
            _schema(strategy=LocatorStrategy.SENTINEL)

    def test_date_column_required(self):
        with pytest.raises(ValueError, match="DATE"):
            _schema(columns={ColumnRole.SPEND: 0}, min_fields=1)

    def test_min_fields_covers_columns(self):
        with pytest.raises(ValueError, match="min_fields"):
            _schema(min_fields=1)

    def test_negative_offset(self):
        with pytest.raises(ValueError, match="data_offset"):
            _schema(data_offset=-1)

    def test_negative_top_limit(self):
        with pytest.raises(ValueError, match="top_limit"):
            _schema(top_limit=-1)

    def test_ctr_role(self):
        with pytest.raises(ValueError, match="ctr_role"):
            _schema(ctr_role=ColumnRole.SPEND)

    @pytest.mark.parametrize("schema", [GOOGLE_ADS, META_ADS])
    def test_dict_round_trip(self, schema):
        assert FormatSchema.from_dict(schema.to_dict()) == schema

    def test_to_dict_omits_defaults(self):
        d = _schema().to_dict()
        assert "sentinel" not in d
        assert "ctr_role" not in d
        assert d["columns"] == {"date": 0, "spend": 1}

    def test_from_dict_bad_role(self):
        d = _schema().to_dict()
        d["columns"]["budget"] = 3
        with pytest.raises(ValueError):
            FormatSchema.from_dict(d)


# ---------------------------------------------------------------------------
# YAML loader
# ---------------------------------------------------------------------------

class TestLoader:
    def test_save_and_load(self, tmp_path):
        path = tmp_path / "formats" / "google.yaml"
        save_format(GOOGLE_ADS, path)
        assert path.exists()
        assert load_format(path) == GOOGLE_ADS

    def test_hand_written_yaml(self, tmp_path):
        path = tmp_path / "agency.yaml"
        path.write_text(
            "name: agency_keywords\n"
            "platform: google_ads\n"
            "strategy: sentinel\n"
            "sentinel: Rows\n"
            "min_fields: 6\n"
            "entity_kind: keyword\n"
            "columns:\n"
            "  date: 0\n"
            "  campaign: 1\n"
            "  sub_entity: 2\n"
            "  spend: 3\n"
            "  clicks: 4\n"
            "  conversions: 5\n",
            encoding="utf-8",
        )
        schema = load_format(path)
        assert schema.name == "agency_keywords"
        assert schema.index_of(ColumnRole.CONVERSIONS) == 5
        assert schema.top_limit == 10

    def test_unicode_preserved(self, tmp_path):
        path = tmp_path / "google.yaml"
        save_format(GOOGLE_ADS, path)
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["account_label"] == "AmorSaúde Montes Claros"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_format(tmp_path / "nope.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_format(path)

    def test_missing_key(self, tmp_path):
        path = tmp_path / "partial.yaml"
        path.write_text("name: x\nplatform: google_ads\n", encoding="utf-8")
        with pytest.raises(ValueError, match="missing required key"):
            load_format(path)

    def test_yaml_syntax_error(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("name: x\ncolumns: [date: 0\n", encoding="utf-8")
        with pytest.raises(ValueError, match="not valid YAML"):
            load_format(path)

    def test_columns_not_a_mapping(self, tmp_path):
        path = tmp_path / "columns.yaml"
        path.write_text(
            "name: x\n"
            "platform: google_ads\n"
            "strategy: fixed_offset\n"
            "min_fields: 2\n"
            "entity_kind: keyword\n"
            "columns: [0, 1]\n",
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="columns"):
            load_format(path)

    def test_negative_top_limit_rejected(self, tmp_path):
        path = tmp_path / "limit.yaml"
        path.write_text(
            "name: x\n"
            "platform: google_ads\n"
            "strategy: fixed_offset\n"
            "min_fields: 2\n"
            "entity_kind: keyword\n"
            "top_limit: -1\n"
            "columns:\n"
            "  date: 0\n",
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="top_limit"):
            load_format(path)


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

class TestValueObjects:
    def test_record_is_immutable(self):
        record = CanonicalRecord(account="a", date=date(2025, 1, 1),
                                 campaign_name="c", sub_entity="k")
        with pytest.raises(AttributeError):
            record.spend = 1.0

    def test_record_to_dict(self):
        record = CanonicalRecord(account="a", date=date(2025, 1, 1),
                                 campaign_name="c", sub_entity="k", spend=2.0)
        assert record.to_dict()["date"] == "2025-01-01"
        assert record.to_dict()["spend"] == 2.0

    def test_trend_missing_window_is_zero(self):
        trend = CampaignTrend(campaign_name="c",
                              windows={30: AggregateMetrics(total_spend=5.0)})
        assert trend.cost_30d == 5.0
        assert trend.cost_7d == 0.0

    def test_date_range(self):
        rng = DateRange(date(2025, 1, 1), date(2025, 1, 7))
        assert rng.days == 7
        assert rng.contains(date(2025, 1, 1))
        assert rng.contains(date(2025, 1, 7))
        assert not rng.contains(date(2025, 1, 8))


# ---------------------------------------------------------------------------
# Display formatting
# ---------------------------------------------------------------------------

class TestFormatting:
    def test_currency(self):
        assert format_currency(1234.5) == "R$ 1.234,50"
        assert format_currency(0) == "R$ 0,00"
        assert format_currency(-10) == "-R$ 10,00"

    def test_number(self):
        assert format_number(1234567) == "1.234.567"
        assert format_number(12) == "12"

    def test_percentage(self):
        assert format_percentage(2.0) == "2,00%"

    def test_missing(self):
        assert format_currency(None) == "N/A"
        assert format_number(float("nan")) == "N/A"
        assert format_percentage(float("inf")) == "N/A"
