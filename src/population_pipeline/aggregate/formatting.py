"""Display formatting for metric values."""

from __future__ import annotations


def format_number(value: float) -> str:
    """Format a number with thousands separators (``333287557`` → ``333,287,557``)."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_in_millions(value: float, decimals: int = 2) -> str:
    """Format a number in millions with an ``M`` suffix (``333.29M``)."""
    return f"{value / 1_000_000:.{decimals}f}M"
