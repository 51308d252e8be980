"""Display formatting for pipeline values.

Follows the dashboard's pt-BR conventions:
- Currency: R$ 1.234,56
- Numbers: 1.234 (dot thousands separator, no decimals)
- Percentages: 2,00%
"""

import math


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and (math.isnan(value) or math.isinf(value)))


def _swap_separators(text: str) -> str:
    """Turn ``1,234.56`` into ``1.234,56``."""
    return text.replace(",", "\0").replace(".", ",").replace("\0", ".")


def format_currency(value: float | int | None) -> str:
    """Format a BRL amount as ``R$ 1.234,56``."""
    if _is_missing(value):
        return "N/A"
    sign = "-" if value < 0 else ""
    return f"{sign}R$ {_swap_separators(f'{abs(value):,.2f}')}"


def format_number(value: float | int | None) -> str:
    """Format a count with dot thousands separators."""
    if _is_missing(value):
        return "N/A"
    return _swap_separators(f"{value:,.0f}")


def format_percentage(value: float | int | None) -> str:
    """Format a value already in percent as ``X,XX%``."""
    if _is_missing(value):
        return "N/A"
    return f"{_swap_separators(f'{value:.2f}')}%"
