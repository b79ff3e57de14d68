"""
Won amount parsing utilities.

KRW has no minor unit, so amounts are plain integers:
- Comma grouping: 53,920 → 53920
- OCR dot grouping: 53.920 → 53920
- Spaced grouping: 53 920 → 53920
"""

from typing import Optional
import re

# Digits in the largest storable amount (2**64 - 1) and count (2**32 - 1)
MAX_AMOUNT_DIGITS = 20
MAX_COUNT_DIGITS = 10

_GROUPED = re.compile(r'^\d{1,3}(?:[,.\s]\d{3})+$')
_PLAIN = re.compile(r'^\d+$')


def parse_won(amount_str: str) -> Optional[int]:
    """
    Parse a won amount string into an integer.

    Args:
        amount_str: Amount text, optionally with thousands separators and
            a trailing "원"

    Returns:
        Non-negative integer amount or None if the text is not an amount

    Examples:
        >>> parse_won("53,920원")
        53920
        >>> parse_won("181710")
        181710
        >>> parse_won("12.5")
    """
    if not amount_str or not isinstance(amount_str, str):
        return None

    cleaned = amount_str.strip()
    if cleaned.endswith('원'):
        cleaned = cleaned[:-1].rstrip()

    if not cleaned:
        return None

    if _GROUPED.match(cleaned):
        digits = re.sub(r'[,.\s]', '', cleaned)
    elif _PLAIN.match(cleaned):
        digits = cleaned
    else:
        return None

    # Longer runs are OCR noise, not amounts
    if len(digits) > MAX_AMOUNT_DIGITS:
        return None
    return int(digits)


def parse_count(count_str: str) -> Optional[int]:
    """Parse a delivery count, or None for non-numeric or overlong text."""
    if not count_str or not _PLAIN.match(count_str) or len(count_str) > MAX_COUNT_DIGITS:
        return None
    return int(count_str)


def format_won(amount: Optional[int]) -> str:
    """
    Format an integer amount for display.

    Examples:
        >>> format_won(53920)
        '53,920원'
    """
    if amount is None:
        return 'N/A'
    return f"{amount:,}원"
