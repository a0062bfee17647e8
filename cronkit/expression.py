"""Parsing of six-field cron expressions (seconds through day of week)."""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = ["CronParseError", "CronExpr", "parse_expr"]

_MAX_EXPRESSION_LENGTH = 256
_INT_MAX = 2**31 - 1

_DAY_NAMES = ("SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT")
_MONTH_NAMES = (
    "FOO", "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)

# Whitespace as understood by the C locale; these characters are dropped
# from every token wherever they appear.
_DROP_WHITESPACE = str.maketrans("", "", " \t\n\v\f\r")
_ASCII_UPPER = str.maketrans(
    "abcdefghijklmnopqrstuvwxyz", "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)

# Integer syntax accepted with automatic base detection: hex, octal, decimal.
_UINT_PATTERN = re.compile(r"([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")


class CronParseError(ValueError):
    """Raised when a cron expression cannot be parsed."""


@dataclass(frozen=True)
class CronExpr:
    """A parsed cron expression as sets of matching values per field.

    ``months`` is zero based (0 is January) and ``days_of_week`` counts
    from Sunday as 0; ``days_of_month`` runs from 1 to 31.
    """

    seconds: frozenset[int]
    minutes: frozenset[int]
    hours: frozenset[int]
    days_of_week: frozenset[int]
    days_of_month: frozenset[int]
    months: frozenset[int]

    @classmethod
    def parse(cls, expression: str) -> CronExpr:
        """Parse ``expression`` with six space separated fields."""
        if expression is None:
            raise CronParseError("Invalid NULL expression")

        fields = _split(expression, " ")
        if len(fields) != 6:
            raise CronParseError(
                "Invalid number of fields, expression must consist of 6 fields"
            )

        seconds = _number_hits(fields[0], 0, 60)
        minutes = _number_hits(fields[1], 0, 60)
        hours = _number_hits(fields[2], 0, 24)

        days_field = _replace_ordinals(fields[5].translate(_ASCII_UPPER), _DAY_NAMES)
        if days_field == "?":
            days_field = "*"
        days_of_week = _number_hits(days_field, 0, 8)
        if 7 in days_of_week:
            # Sunday may be written as 0 or 7.
            days_of_week = (days_of_week - {7}) | {0}

        month_days_field = fields[3]
        if month_days_field == "?":
            month_days_field = "*"
        days_of_month = _number_hits(month_days_field, 1, 32)

        months_field = _replace_ordinals(fields[4].translate(_ASCII_UPPER), _MONTH_NAMES)
        months = {month - 1 for month in _number_hits(months_field, 1, 13)}

        return cls(
            seconds=frozenset(seconds),
            minutes=frozenset(minutes),
            hours=frozenset(hours),
            days_of_week=frozenset(days_of_week),
            days_of_month=frozenset(days_of_month),
            months=frozenset(months),
        )


def parse_expr(expression: str) -> CronExpr:
    """Parse a cron expression; see :meth:`CronExpr.parse`."""
    return CronExpr.parse(expression)


def _split(text: str, delimiter: str) -> list[str]:
    """Split on ``delimiter``, drop whitespace and empty tokens.

    Texts of 256 bytes or more yield no tokens at all.
    """
    if len(text.encode("utf-8")) >= _MAX_EXPRESSION_LENGTH:
        return []
    tokens = (piece.translate(_DROP_WHITESPACE) for piece in text.split(delimiter))
    return [token for token in tokens if token]


def _replace_ordinals(value: str, names: tuple[str, ...]) -> str:
    for index, name in enumerate(names):
        value = value.replace(name, str(index))
    return value


def _parse_uint(text: str) -> int | None:
    """Parse a non-negative integer with base prefixes; ``None`` on failure."""
    if text == "":
        return 0
    match = _UINT_PATTERN.fullmatch(text)
    if match is None:
        return None
    sign, digits = match.groups()
    if digits[:2] in ("0x", "0X"):
        number = int(digits[2:], 16)
    elif len(digits) > 1 and digits.startswith("0"):
        number = int(digits[1:], 8)
    else:
        number = int(digits, 10)
    if sign == "-":
        number = -number
    if number < 0 or number > _INT_MAX:
        return None
    return number


def _get_range(field: str, lowest: int, limit: int) -> tuple[int, int]:
    if field == "*":
        start, end = lowest, limit - 1
    elif "-" not in field:
        value = _parse_uint(field)
        if value is None:
            raise CronParseError("Unsigned integer parse error 1")
        start = end = value
    else:
        parts = _split(field, "-")
        if len(parts) != 2:
            raise CronParseError("Specified range requires two fields")
        start = _parse_uint(parts[0])
        if start is None:
            raise CronParseError("Unsigned integer parse error 2")
        end = _parse_uint(parts[1])
        if end is None:
            raise CronParseError("Unsigned integer parse error 3")

    if start >= limit or end >= limit:
        raise CronParseError("Specified range exceeds maximum")
    if start < lowest or end < lowest:
        raise CronParseError("Specified range is less than minimum")
    if start > end:
        raise CronParseError("Specified range start exceeds range end")
    return start, end


def _number_hits(value: str, lowest: int, limit: int) -> set[int]:
    """Collect the values matched by a comma separated list of items."""
    items = _split(value, ",")
    if not items:
        raise CronParseError("Comma split error")

    hits: set[int] = set()
    for item in items:
        if "/" not in item:
            start, end = _get_range(item, lowest, limit)
            hits.update(range(start, end + 1))
            continue

        parts = _split(item, "/")
        if len(parts) != 2:
            raise CronParseError("Incrementer must have two fields")
        start, end = _get_range(parts[0], lowest, limit)
        if "-" not in parts[0]:
            end = limit - 1
        delta = _parse_uint(parts[1])
        if delta is None:
            raise CronParseError("Unsigned integer parse error 4")
        if delta == 0:
            raise CronParseError("Incrementer may not be zero")
        hits.update(range(start, end + 1, delta))
    return hits