"""Locate the start of the tabular data section inside an export."""

from src.schema.models import FormatSchema, LocatorStrategy

# Marker line + header line
SENTINEL_SKIP = 2


def find_sentinel(lines, sentinel):
    """Return the index of the first line starting with *sentinel*, or None."""
    for idx, line in enumerate(lines):
        if line.startswith(sentinel):
            return idx
    return None


def locate_data_start(lines, schema: FormatSchema):
    """Return the index of the first data row in *lines*, or None.

    For the sentinel strategy, data begins two lines after the marker.
    For the fixed-offset strategy, data begins at ``schema.data_offset``;
    an offset beyond the end of the input yields an empty data section,
    not a "not found" signal.
    """
    if schema.strategy is LocatorStrategy.SENTINEL:
        marker = find_sentinel(lines, schema.sentinel)
        if marker is None:
            return None
        return marker + SENTINEL_SKIP
    return schema.data_offset
