"""Display formatting for money values"""

from typing import Optional

UNAVAILABLE = "—"


def format_currency(value: Optional[float]) -> str:
    """Format as US dollars with grouping and 2 decimals; unavailable values render as an em-dash"""
    if value is None:
        return UNAVAILABLE
    return f"${value:,.2f}"


def format_amount_param(value: float) -> str:
    """Plain 2-decimal amount for query strings (no symbol, no grouping)"""
    return f"{value:.2f}"
