"""
modules/budget/utils.py
=======================
Exception classes dan helper formatting tampilan (locale id-ID)
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class BudgetMonitorError(Exception):
    """Base exception untuk Budget Monitor."""
    pass


class FileError(BudgetMonitorError):
    """Exception untuk file yang tidak bisa dibuka / format tidak didukung."""
    pass


class EmptyWorksheetError(BudgetMonitorError):
    """Worksheet tidak menghasilkan satu pun record."""
    pass


class ValidationError(BudgetMonitorError):
    """Exception untuk input record manual yang tidak valid."""
    pass


# ============================================================================
# FORMATTING
# ============================================================================

def format_number(num: int) -> str:
    """
    Format number dengan thousand separator gaya Indonesia.

    Args:
        num: Number to format

    Returns:
        str: Formatted number (e.g., '1.234.567')
    """
    return f"{int(num):,}".replace(',', '.')


def format_currency(amount: int) -> str:
    """
    Format nominal rupiah tanpa desimal.

    >>> format_currency(1000000)
    'Rp 1.000.000'
    >>> format_currency(-2500)
    '-Rp 2.500'
    """
    amount = int(amount)
    sign = '-' if amount < 0 else ''
    return f"{sign}Rp {format_number(abs(amount))}"


def format_currency_compact(amount: int) -> str:
    """Ringkas untuk label chart: 'Rp 1,5 M', 'Rp 250 jt'."""
    amount = int(amount)
    sign = '-' if amount < 0 else ''
    value = abs(amount)

    units = [
        (1_000_000_000_000, 'T'),
        (1_000_000_000, 'M'),
        (1_000_000, 'jt'),
    ]
    for base, suffix in units:
        if value >= base:
            scaled = value / base
            text = f"{scaled:.0f}" if value >= base * 10 else f"{scaled:.1f}"
            if text.endswith('.0'):
                text = text[:-2]
            return f"{sign}Rp {text.replace('.', ',')} {suffix}"

    return f"{sign}Rp {format_number(value)}"


def format_percent(value: float) -> str:
    return f"{value:.1f}%".replace('.', ',')


def format_months(value: Optional[float]) -> str:
    """Estimasi sisa bulan; None berarti tidak bisa dihitung."""
    if value is None:
        return 'Tidak diketahui'
    return f"{value:.1f} bulan".replace('.', ',')


def format_duration(seconds: float) -> str:
    """
    Format duration in human-readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        str: Formatted duration (e.g., '2m 30s', '45s')
    """
    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes = int(seconds // 60)
    remaining_seconds = int(seconds % 60)
    return f"{minutes}m {remaining_seconds}s"
