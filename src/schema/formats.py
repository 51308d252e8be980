"""Built-in export format contracts.

Two vendor layouts are supported out of the box:

- ``google_ads``: the keyword report exported from the Ads UI and published
  as a spreadsheet. About a dozen metadata lines precede a ``Rows`` marker,
  followed by one header line and the data lines.
- ``meta_ads``: the creative-level sheet kept for the social-ads account.
  One header line, data from line 1 onwards.
"""

from .models import (
    ColumnRole,
    EntityKind,
    FormatSchema,
    LocatorStrategy,
    Platform,
)

ACCOUNT_LABEL = "AmorSaúde Montes Claros"


# Day(0), Keyword status(1), Keyword(2), Match type(3), Campaign(4),
# Ad group(5), Status(6), Status reasons(7), Currency code(8), Max. CPC(9),
# Draft change(10), Clicks(11), Impr.(12), Cost(13), All conv.(14)
GOOGLE_ADS = FormatSchema(
    name="google_ads",
    platform=Platform.GOOGLE_ADS,
    strategy=LocatorStrategy.SENTINEL,
    sentinel="Rows",
    columns={
        ColumnRole.DATE: 0,
        ColumnRole.SUB_ENTITY: 2,
        ColumnRole.CAMPAIGN: 4,
        ColumnRole.CLICKS: 11,
        ColumnRole.IMPRESSIONS: 12,
        ColumnRole.SPEND: 13,
        ColumnRole.CONVERSIONS: 14,
    },
    min_fields=15,
    entity_kind=EntityKind.KEYWORD,
    account_label=ACCOUNT_LABEL,
    ctr_role=ColumnRole.CLICKS,
    top_limit=10,
)

# Day(0), Campaign name(1), Ad name(2), Amount spent(3), Reach(4),
# Impressions(5), Post engagements(6), Results(7), Cost per result(8)
META_ADS = FormatSchema(
    name="meta_ads",
    platform=Platform.META_ADS,
    strategy=LocatorStrategy.FIXED_OFFSET,
    data_offset=1,
    columns={
        ColumnRole.DATE: 0,
        ColumnRole.CAMPAIGN: 1,
        ColumnRole.SUB_ENTITY: 2,
        ColumnRole.SPEND: 3,
        ColumnRole.REACH: 4,
        ColumnRole.IMPRESSIONS: 5,
        ColumnRole.ENGAGEMENT: 6,
        ColumnRole.CONVERSIONS: 7,
    },
    min_fields=9,
    entity_kind=EntityKind.CREATIVE,
    account_label=ACCOUNT_LABEL,
    ctr_role=ColumnRole.ENGAGEMENT,
    top_limit=6,
)


FORMATS = {
    GOOGLE_ADS.name: GOOGLE_ADS,
    META_ADS.name: META_ADS,
}


def get_format(name):
    """Look up a built-in format by name.

    Raises:
        ValueError: If *name* is not a known format.
    """
    if name not in FORMATS:
        raise ValueError(
            f"Unknown format '{name}'. "
            f"Valid formats: {', '.join(sorted(FORMATS))}"
        )
    return FORMATS[name]
