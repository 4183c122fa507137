"""Signed duration arithmetic and human-readable formatting.

Durations are plain ``int`` seconds. Block timestamps are reported by miners
and are not monotonic, so every value here may be negative.
"""

from chain_metrics.helpers.constants import SECONDS_PER_DAY, SECONDS_PER_MINUTE


def truncate_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero.

    Python's ``//`` floors, which would turn ``-7 // 2`` into ``-4``.

    Args:
        numerator: Dividend
        denominator: Divisor, must not be zero

    Returns:
        int: Quotient truncated toward zero

    Raises:
        ZeroDivisionError: If denominator is zero

    Example:
        >>> truncate_div(-7, 2)
        -3
    """
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def whole_minutes(seconds: int) -> int:
    """Whole minutes in a duration, truncated toward zero."""
    return truncate_div(seconds, SECONDS_PER_MINUTE)


def whole_days(seconds: int) -> int:
    """Whole days in a duration, truncated toward zero."""
    return truncate_div(seconds, SECONDS_PER_DAY)


def format_duration(seconds: int, *, include_days: bool = False) -> str:
    """Format a duration as ``"<s>s, <m>min"`` with an optional day count.

    Example:
        >>> format_duration(666)
        '666s, 11min'
        >>> format_duration(-125, include_days=True)
        '-125s, -2min, 0days'
    """
    text = f"{seconds}s, {whole_minutes(seconds)}min"
    if include_days:
        text = f"{text}, {whole_days(seconds)}days"
    return text


__all__ = ["format_duration", "truncate_div", "whole_days", "whole_minutes"]
