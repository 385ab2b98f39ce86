"""Tests for booking price calculation."""
from datetime import time

import pytest

from app.services.pricing import compute_price, hours_between, parse_hhmm


def test_parse_hhmm():
    assert parse_hhmm("06:00") == time(6, 0)
    assert parse_hhmm("23:59") == time(23, 59)


@pytest.mark.parametrize("value", ["6:00", "24:00", "12:60", "noon", "", "12:00:00"])
def test_parse_hhmm_rejects_malformed_times(value):
    with pytest.raises(ValueError):
        parse_hhmm(value)


def test_one_hour_at_45_per_hour_costs_45():
    assert compute_price("10:00", "11:00", 45) == 45


def test_fractional_hours_are_kept():
    assert hours_between("10:00", "10:30") == 0.5
    assert compute_price("10:00", "10:30", 45) == 22.5
    assert hours_between("09:15", "10:00") == 0.75


def test_price_is_not_rounded():
    # 20 minutes at 10/hr is a repeating decimal
    assert compute_price("10:00", "10:20", 10) == (20 / 60) * 10


@pytest.mark.parametrize(
    "start,end,rate",
    [
        ("06:00", "07:00", 45),
        ("06:00", "22:00", 45),
        ("10:00", "11:30", 120.5),
        ("13:45", "14:15", 999),
    ],
)
def test_price_is_duration_times_rate(start, end, rate):
    assert compute_price(start, end, rate) == hours_between(start, end) * rate


def test_end_not_after_start_gives_non_positive_duration():
    assert hours_between("10:00", "10:00") == 0
    assert hours_between("11:00", "10:00") == -1
