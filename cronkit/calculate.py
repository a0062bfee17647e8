"""Next and previous fire times for parsed cron expressions."""

from __future__ import annotations

import calendar as _calendar
import time
from datetime import date, datetime, timedelta, timezone
from enum import IntEnum

from cronkit.expression import CronExpr

__all__ = ["CronCalculationError", "next_fire", "prev_fire"]

_MAX_SECONDS = 60
_MAX_MINUTES = 60
_MAX_HOURS = 24
_MAX_MONTHS = 12
_MAX_YEARS_DIFF = 4
_MAX_DAY_STEPS = 366
_INVALID_INSTANT = -1

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_EPOCH_ORDINAL = date(1970, 1, 1).toordinal()


class CronCalculationError(ValueError):
    """Raised when no fire time can be calculated for an expression."""


class _Invalid(Exception):
    """Internal signal that a calendar operation failed."""


class _Field(IntEnum):
    SECOND = 0
    MINUTE = 1
    HOUR_OF_DAY = 2
    DAY_OF_WEEK = 3
    DAY_OF_MONTH = 4
    MONTH = 5
    YEAR = 6


class _Calendar:
    """Broken-down time whose fields may overflow until normalised.

    ``year`` counts from 1900, ``mon`` from 0 and ``wday`` from Sunday as 0,
    the way a C ``struct tm`` does.
    """

    def __init__(self, timestamp: int, utc: bool) -> None:
        self.utc = utc
        self.sec = self.minute = self.hour = 0
        self.mday = 1
        self.mon = self.year = self.wday = 0
        self.isdst = -1
        self._load(timestamp)

    def _load(self, timestamp: int) -> None:
        if self.utc:
            try:
                moment = _EPOCH + timedelta(seconds=timestamp)
            except OverflowError as exc:
                raise _Invalid from exc
            self.year = moment.year - 1900
            self.mon = moment.month - 1
            self.mday = moment.day
            self.hour = moment.hour
            self.minute = moment.minute
            self.sec = moment.second
            self.wday = (moment.weekday() + 1) % 7
            self.isdst = 0
        else:
            try:
                local = time.localtime(timestamp)
            except (OverflowError, OSError, ValueError) as exc:
                raise _Invalid from exc
            self.year = local.tm_year - 1900
            self.mon = local.tm_mon - 1
            self.mday = local.tm_mday
            self.hour = local.tm_hour
            self.minute = local.tm_min
            self.sec = local.tm_sec
            self.wday = (local.tm_wday + 1) % 7
            self.isdst = local.tm_isdst

    def normalize(self) -> int:
        """Fold overflowing fields back into range and return the timestamp."""
        if self.utc:
            extra_years, month = divmod(self.mon, 12)
            try:
                first = date(self.year + 1900 + extra_years, month + 1, 1)
            except ValueError as exc:
                raise _Invalid from exc
            days = first.toordinal() - _EPOCH_ORDINAL + self.mday - 1
            timestamp = days * 86400 + self.hour * 3600 + self.minute * 60 + self.sec
        else:
            try:
                timestamp = int(
                    time.mktime(
                        (
                            self.year + 1900,
                            self.mon + 1,
                            self.mday,
                            self.hour,
                            self.minute,
                            self.sec,
                            0,
                            1,
                            self.isdst,
                        )
                    )
                )
            except (OverflowError, OSError, ValueError) as exc:
                raise _Invalid from exc
        if timestamp == _INVALID_INSTANT:
            raise _Invalid
        self._load(timestamp)
        return timestamp

    def _last_day_of_month(self) -> int:
        extra_years, month = divmod(self.mon, 12)
        year = self.year + 1900 + extra_years
        if not 1 <= year <= 9999:
            raise _Invalid
        return _calendar.monthrange(year, month + 1)[1]

    def add(self, field: _Field, amount: int) -> None:
        if field is _Field.SECOND:
            self.sec += amount
        elif field is _Field.MINUTE:
            self.minute += amount
        elif field is _Field.HOUR_OF_DAY:
            self.hour += amount
        elif field in (_Field.DAY_OF_WEEK, _Field.DAY_OF_MONTH):
            self.mday += amount
        elif field is _Field.MONTH:
            self.mon += amount
        else:
            self.year += amount
        self.normalize()

    def set(self, field: _Field, value: int) -> None:
        if field is _Field.SECOND:
            self.sec = value
        elif field is _Field.MINUTE:
            self.minute = value
        elif field is _Field.HOUR_OF_DAY:
            self.hour = value
        elif field is _Field.DAY_OF_WEEK:
            self.wday = value
        elif field is _Field.DAY_OF_MONTH:
            self.mday = value
        elif field is _Field.MONTH:
            self.mon = value
        else:
            self.year = value
        self.normalize()

    def reset_min(self, field: _Field) -> None:
        if field is _Field.SECOND:
            self.sec = 0
        elif field is _Field.MINUTE:
            self.minute = 0
        elif field is _Field.HOUR_OF_DAY:
            self.hour = 0
        elif field is _Field.DAY_OF_WEEK:
            self.wday = 0
        elif field is _Field.DAY_OF_MONTH:
            self.mday = 1
        elif field is _Field.MONTH:
            self.mon = 0
        else:
            self.year = 0
        self.normalize()

    def reset_max(self, field: _Field) -> None:
        if field is _Field.SECOND:
            self.sec = 59
        elif field is _Field.MINUTE:
            self.minute = 59
        elif field is _Field.HOUR_OF_DAY:
            self.hour = 23
        elif field is _Field.DAY_OF_WEEK:
            self.wday = 6
        elif field is _Field.DAY_OF_MONTH:
            self.mday = self._last_day_of_month()
        elif field is _Field.MONTH:
            self.mon = 11
        self.normalize()

    def reset_all_min(self, fields: list[_Field]) -> None:
        for field in fields:
            self.reset_min(field)

    def reset_all_max(self, fields: list[_Field]) -> None:
        for field in fields:
            self.reset_max(field)


def _push(fields: list[_Field], field: _Field) -> None:
    if field not in fields:
        fields.append(field)


def _next_set(values: frozenset[int], limit: int, start: int) -> int | None:
    return min((v for v in values if start <= v < limit), default=None)


def _prev_set(values: frozenset[int], start: int, stop: int) -> int | None:
    return max((v for v in values if stop <= v <= start), default=None)


def _find_next(
    values: frozenset[int],
    limit: int,
    value: int,
    cal: _Calendar,
    field: _Field,
    next_field: _Field,
    lower_orders: list[_Field],
) -> int:
    found = _next_set(values, limit, value)
    if found is None:
        cal.add(next_field, 1)
        cal.reset_min(field)
        found = _next_set(values, limit, 0)
    target = 0 if found is None else found
    if found is None or target != value:
        cal.set(field, target)
        cal.reset_all_min(lower_orders)
    return target


def _find_prev(
    values: frozenset[int],
    limit: int,
    value: int,
    cal: _Calendar,
    field: _Field,
    next_field: _Field,
    lower_orders: list[_Field],
) -> int:
    found = _prev_set(values, value, 0)
    if found is None:
        cal.add(next_field, -1)
        cal.reset_max(field)
        found = _prev_set(values, limit - 1, value)
    target = 0 if found is None else found
    if found is None or target != value:
        cal.set(field, target)
        cal.reset_all_max(lower_orders)
    return target


def _find_day(
    cal: _Calendar, expr: CronExpr, resets: list[_Field], step: int
) -> int:
    day_of_month, day_of_week = cal.mday, cal.wday
    steps = 0
    while day_of_month not in expr.days_of_month or day_of_week not in expr.days_of_week:
        if steps >= _MAX_DAY_STEPS:
            break
        steps += 1
        cal.add(_Field.DAY_OF_MONTH, step)
        day_of_month, day_of_week = cal.mday, cal.wday
        try:
            if step > 0:
                cal.reset_all_min(resets)
            else:
                cal.reset_all_max(resets)
        except _Invalid:
            pass
    return day_of_month


def _do_next(expr: CronExpr, cal: _Calendar, dot: int) -> None:
    resets: list[_Field] = []

    second = cal.sec
    if second == _find_next(
        expr.seconds, _MAX_SECONDS, second, cal, _Field.SECOND, _Field.MINUTE, []
    ):
        _push(resets, _Field.SECOND)

    minute = cal.minute
    if minute == _find_next(
        expr.minutes, _MAX_MINUTES, minute, cal, _Field.MINUTE, _Field.HOUR_OF_DAY, resets
    ):
        _push(resets, _Field.MINUTE)
    else:
        _do_next(expr, cal, dot)

    hour = cal.hour
    if hour == _find_next(
        expr.hours, _MAX_HOURS, hour, cal, _Field.HOUR_OF_DAY, _Field.DAY_OF_WEEK, resets
    ):
        _push(resets, _Field.HOUR_OF_DAY)
    else:
        _do_next(expr, cal, dot)

    day_of_month = cal.mday
    if day_of_month == _find_day(cal, expr, resets, 1):
        _push(resets, _Field.DAY_OF_MONTH)
    else:
        _do_next(expr, cal, dot)

    month = cal.mon
    if month != _find_next(
        expr.months, _MAX_MONTHS, month, cal, _Field.MONTH, _Field.YEAR, resets
    ):
        if cal.year - dot > _MAX_YEARS_DIFF:
            raise _Invalid
        _do_next(expr, cal, dot)


def _do_prev(expr: CronExpr, cal: _Calendar, dot: int) -> None:
    resets: list[_Field] = []

    second = cal.sec
    if second == _find_prev(
        expr.seconds, _MAX_SECONDS, second, cal, _Field.SECOND, _Field.MINUTE, []
    ):
        _push(resets, _Field.SECOND)

    minute = cal.minute
    if minute == _find_prev(
        expr.minutes, _MAX_MINUTES, minute, cal, _Field.MINUTE, _Field.HOUR_OF_DAY, resets
    ):
        _push(resets, _Field.MINUTE)
    else:
        _do_prev(expr, cal, dot)

    hour = cal.hour
    if hour == _find_prev(
        expr.hours, _MAX_HOURS, hour, cal, _Field.HOUR_OF_DAY, _Field.DAY_OF_WEEK, resets
    ):
        _push(resets, _Field.HOUR_OF_DAY)
    else:
        _do_prev(expr, cal, dot)

    day_of_month = cal.mday
    if day_of_month == _find_day(cal, expr, resets, -1):
        _push(resets, _Field.DAY_OF_MONTH)
    else:
        _do_prev(expr, cal, dot)

    month = cal.mon
    if month != _find_prev(
        expr.months, _MAX_MONTHS, month, cal, _Field.MONTH, _Field.YEAR, resets
    ):
        if dot - cal.year > _MAX_YEARS_DIFF:
            raise _Invalid
        _do_prev(expr, cal, dot)


def _fire(expr: CronExpr, timestamp: int, utc: bool, direction: int) -> int:
    search = _do_next if direction > 0 else _do_prev
    try:
        cal = _Calendar(int(timestamp), utc)
        original = cal.normalize()
        search(expr, cal, cal.year)
        if cal.normalize() == original:
            cal.add(_Field.SECOND, direction)
            search(expr, cal, cal.year)
        return cal.normalize()
    except (_Invalid, RecursionError) as exc:
        raise CronCalculationError(
            "No matching time found for the cron expression"
        ) from exc


def next_fire(expr: CronExpr, timestamp: int, *, utc: bool = False) -> int:
    """Return the first timestamp strictly after ``timestamp`` matching ``expr``.

    Fields are matched in local time unless ``utc`` is true.
    """
    return _fire(expr, timestamp, utc, 1)


def prev_fire(expr: CronExpr, timestamp: int, *, utc: bool = False) -> int:
    """Return the last timestamp strictly before ``timestamp`` matching ``expr``.

    Fields are matched in local time unless ``utc`` is true.
    """
    return _fire(expr, timestamp, utc, -1)