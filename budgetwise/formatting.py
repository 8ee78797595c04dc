"""Formatting utilities for currency and text display."""

from __future__ import annotations

from typing import Union

try:
    from .config import CURRENCY_SYMBOL
except ImportError:
    from config import CURRENCY_SYMBOL


def format_currency(amount: Union[float, int], include_sign: bool = True, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format a currency amount with comma separators and two decimals.

    Args:
        amount: The amount to format
        include_sign: Whether to include the currency symbol
        symbol: Currency symbol placed before the number

    Returns:
        Formatted currency string (e.g., "₹1,234.56" or "1,234.56").
        Negative amounts keep the minus sign ahead of the symbol.

    Example:
        >>> format_currency(1234.56)
        '₹1,234.56'
        >>> format_currency(-50, symbol='$')
        '-$50.00'
        >>> format_currency(1234.56, include_sign=False)
        '1,234.56'
    """
    formatted = f"{abs(amount):,.2f}"
    prefix = '-' if amount < 0 else ''
    return f"{prefix}{symbol}{formatted}" if include_sign else f"{prefix}{formatted}"


def escape_currency_for_markdown(amount: float, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format an amount for ``st.markdown``.

    Streamlit treats ``$`` as a LaTeX delimiter, so a dollar symbol is
    escaped; other symbols pass through unchanged.

    Example:
        >>> escape_currency_for_markdown(1234.56, symbol='$')
        '\\\\$1,234.56'
    """
    return format_currency(amount, symbol=symbol).replace("$", "\\$")


def format_percent(value: Union[float, int], signed: bool = False) -> str:
    """Format a whole-number percentage, optionally with an explicit ``+``."""
    text = f"{value:.0f}%"
    if signed and value > 0:
        return f"+{text}"
    return text
