from datetime import datetime, timezone

import pytest

from cronkit.calculate import CronCalculationError, next_fire, prev_fire
from cronkit.expression import parse_expr

DATE_FORMAT = "%Y-%m-%d_%H:%M:%S"


def _ts(text: str) -> int:
    moment = datetime.strptime(text, DATE_FORMAT).replace(tzinfo=timezone.utc)
    return int(moment.timestamp())


def _fmt(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, timezone.utc).strftime(DATE_FORMAT)


@pytest.mark.parametrize(
    "pattern, initial, expected",
    [
        ("*/15 * 1-4 * * *", "2012-07-01_09:53:50", "2012-07-02_01:00:00"),
        ("*/15 * 1-4 * * *", "2012-07-01_09:53:00", "2012-07-02_01:00:00"),
        ("0 */2 1-4 * * *", "2012-07-01_09:00:00", "2012-07-02_01:00:00"),
        ("* * * * * *", "2012-07-01_09:00:00", "2012-07-01_09:00:01"),
        ("* * * * * *", "2012-12-01_09:00:58", "2012-12-01_09:00:59"),
        ("10 * * * * *", "2012-12-01_09:42:09", "2012-12-01_09:42:10"),
        ("11 * * * * *", "2012-12-01_09:42:10", "2012-12-01_09:42:11"),
        ("10 * * * * *", "2012-12-01_09:42:10", "2012-12-01_09:43:10"),
        ("10-15 * * * * *", "2012-12-01_09:42:09", "2012-12-01_09:42:10"),
        ("10-15 * * * * *", "2012-12-01_21:42:14", "2012-12-01_21:42:15"),
        ("0 * * * * *", "2012-12-01_21:10:42", "2012-12-01_21:11:00"),
        ("0 * * * * *", "2012-12-01_21:11:00", "2012-12-01_21:12:00"),
        ("0 11 * * * *", "2012-12-01_21:10:42", "2012-12-01_21:11:00"),
        ("0 10 * * * *", "2012-12-01_21:11:00", "2012-12-01_22:10:00"),
        ("0 0 * * * *", "2012-09-30_11:01:00", "2012-09-30_12:00:00"),
        ("0 0 * * * *", "2012-09-30_12:00:00", "2012-09-30_13:00:00"),
        ("0 0 * * * *", "2012-09-10_23:01:00", "2012-09-11_00:00:00"),
        ("0 0 * * * *", "2012-09-11_00:00:00", "2012-09-11_01:00:00"),
        ("0 0 0 * * *", "2012-09-01_14:42:43", "2012-09-02_00:00:00"),
        ("0 0 0 * * *", "2012-09-02_00:00:00", "2012-09-03_00:00:00"),
        ("* * * 10 * *", "2012-10-09_15:12:42", "2012-10-10_00:00:00"),
        ("* * * 10 * *", "2012-10-11_15:12:42", "2012-11-10_00:00:00"),
        ("0 0 0 * * *", "2012-09-30_15:12:42", "2012-10-01_00:00:00"),
        ("0 0 0 * * *", "2012-10-01_00:00:00", "2012-10-02_00:00:00"),
        ("0 0 0 * * *", "2012-08-30_15:12:42", "2012-08-31_00:00:00"),
        ("0 0 0 * * *", "2012-08-31_00:00:00", "2012-09-01_00:00:00"),
        ("0 0 0 * * *", "2012-10-30_15:12:42", "2012-10-31_00:00:00"),
        ("0 0 0 * * *", "2012-10-31_00:00:00", "2012-11-01_00:00:00"),
        ("0 0 0 1 * *", "2012-10-30_15:12:42", "2012-11-01_00:00:00"),
        ("0 0 0 1 * *", "2012-11-01_00:00:00", "2012-12-01_00:00:00"),
        ("0 0 0 1 * *", "2010-12-31_15:12:42", "2011-01-01_00:00:00"),
        ("0 0 0 1 * *", "2011-01-01_00:00:00", "2011-02-01_00:00:00"),
        ("0 0 0 31 * *", "2011-10-30_15:12:42", "2011-10-31_00:00:00"),
        ("0 0 0 1 * *", "2011-10-30_15:12:42", "2011-11-01_00:00:00"),
        ("* * * * * 2", "2010-10-25_15:12:42", "2010-10-26_00:00:00"),
        ("* * * * * 2", "2010-10-20_15:12:42", "2010-10-26_00:00:00"),
        ("* * * * * 2", "2010-10-27_15:12:42", "2010-11-02_00:00:00"),
        ("55 5 * * * *", "2010-10-27_15:04:54", "2010-10-27_15:05:55"),
        ("55 5 * * * *", "2010-10-27_15:05:55", "2010-10-27_16:05:55"),
        ("55 * 10 * * *", "2010-10-27_09:04:54", "2010-10-27_10:00:55"),
        ("55 * 10 * * *", "2010-10-27_10:00:55", "2010-10-27_10:01:55"),
        ("* 5 10 * * *", "2010-10-27_09:04:55", "2010-10-27_10:05:00"),
        ("* 5 10 * * *", "2010-10-27_10:05:00", "2010-10-27_10:05:01"),
        ("55 * * 3 * *", "2010-10-02_10:05:54", "2010-10-03_00:00:55"),
        ("55 * * 3 * *", "2010-10-03_00:00:55", "2010-10-03_00:01:55"),
        ("* * * 3 11 *", "2010-10-02_14:42:55", "2010-11-03_00:00:00"),
        ("* * * 3 11 *", "2010-11-03_00:00:00", "2010-11-03_00:00:01"),
        ("0 0 0 29 2 *", "2007-02-10_14:42:55", "2008-02-29_00:00:00"),
        ("0 0 0 29 2 *", "2008-02-29_00:00:00", "2012-02-29_00:00:00"),
        ("0 0 7 ? * MON-FRI", "2009-09-26_00:42:55", "2009-09-28_07:00:00"),
        ("0 0 7 ? * MON-FRI", "2009-09-28_07:00:00", "2009-09-29_07:00:00"),
        ("0 30 23 30 1/3 ?", "2010-12-30_00:00:00", "2011-01-30_23:30:00"),
        ("0 30 23 30 1/3 ?", "2011-01-30_23:30:00", "2011-04-30_23:30:00"),
        ("0 30 23 30 1/3 ?", "2011-04-30_23:30:00", "2011-07-30_23:30:00"),
    ],
)
def test_next_fire(pattern, initial, expected):
    expr = parse_expr(pattern)
    assert _fmt(next_fire(expr, _ts(initial), utc=True)) == expected


def test_next_fire_impossible_date_is_an_error():
    expr = parse_expr("0 0 0 31 6 *")
    with pytest.raises(CronCalculationError):
        next_fire(expr, _ts("2012-07-01_09:53:50"), utc=True)


def test_next_fire_every_second_in_local_time():
    expr = parse_expr("* * * * * *")
    assert next_fire(expr, 1530000000) == 1530000001


def test_next_fire_is_strictly_later_and_matches():
    expr = parse_expr("*/5 * * * * *")
    start = _ts("2018-06-26_08:00:03")
    result = next_fire(expr, start, utc=True)
    assert result > start
    assert _fmt(result) == "2018-06-26_08:00:05"


@pytest.mark.parametrize(
    "pattern, initial, expected",
    [
        ("* * * * * *", "2012-07-01_09:00:00", "2012-07-01_08:59:59"),
        ("0 0 0 * * *", "2012-09-01_14:42:43", "2012-09-01_00:00:00"),
        ("0 0 * * * *", "2012-09-30_11:01:00", "2012-09-30_11:00:00"),
        ("0 0 12 * * *", "2012-09-30_11:00:00", "2012-09-29_12:00:00"),
    ],
)
def test_prev_fire(pattern, initial, expected):
    expr = parse_expr(pattern)
    assert _fmt(prev_fire(expr, _ts(initial), utc=True)) == expected


def test_prev_fire_every_second_in_local_time():
    expr = parse_expr("* * * * * *")
    assert prev_fire(expr, 1530000000) == 1529999999