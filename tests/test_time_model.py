from datetime import datetime, timedelta, timezone

import pytest

from orrery.constants import DAY, J2000
from orrery.time_model import DateDisplay, TimeModel, epoch_time_of


def test_epoch_time_is_seconds_since_j2000():
    assert epoch_time_of(J2000) == 0.0
    assert epoch_time_of(J2000 + timedelta(days=1)) == DAY
    assert epoch_time_of(J2000 - timedelta(seconds=90)) == -90.0


def test_naive_dates_are_utc():
    naive = datetime(2000, 1, 2, 12, 0, 0)
    assert epoch_time_of(naive) == DAY


def test_reset_then_display_round_trips_to_the_millisecond():
    date = datetime(2031, 7, 4, 18, 30, 15, 123000, tzinfo=timezone.utc)
    clock = TimeModel()
    clock.reset_to(date)
    assert clock.display_date() == date


def test_sub_millisecond_precision_is_dropped():
    date = datetime(2031, 7, 4, 18, 30, 15, 123456, tzinfo=timezone.utc)
    clock = TimeModel()
    clock.reset_to(date)
    assert abs(clock.display_date() - date) < timedelta(milliseconds=1)


def test_advance_accumulates_from_start():
    clock = TimeModel()
    clock.reset_to(J2000 + timedelta(days=10))
    clock.advance(3600.0)
    clock.advance(1800.0)
    assert clock.epoch_time == 5400.0
    assert clock.current_time == 10 * DAY + 5400.0
    assert clock.display_date() == J2000 + timedelta(days=10, seconds=5400)


def test_reset_clears_accumulated_time():
    clock = TimeModel()
    clock.reset_to(J2000)
    clock.advance(1000.0)
    clock.reset_to(J2000 + timedelta(seconds=50))
    assert clock.epoch_time == 0.0
    assert clock.start_epoch_time == clock.current_time == 50.0


def test_reset_without_date_uses_now():
    clock = TimeModel()
    before = datetime.now(timezone.utc)
    clock.reset_to(None)
    assert clock.display_date() >= before - timedelta(seconds=1)


def test_date_display_holds_a_date():
    display = DateDisplay()
    assert display.get_date() is None
    display.set_date(J2000)
    assert display.get_date() == J2000
    display.set_date(None)
    assert display.get_date() is None


@pytest.mark.parametrize("seconds", [0.001, 0.5, 86399.999])
def test_fractional_seconds_survive_display(seconds):
    clock = TimeModel()
    clock.reset_to(J2000)
    clock.advance(seconds)
    assert clock.display_date() == J2000 + timedelta(milliseconds=round(seconds * 1000))
