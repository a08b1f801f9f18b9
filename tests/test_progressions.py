from datetime import date, datetime, timedelta, timezone

from cyclocartography.services import progressions
from cyclocartography.services.birth_data import parse_birth
from cyclocartography.services.ephemeris import positions_at


def test_years_elapsed_starts_at_zero():
    assert progressions.years_elapsed(date(1990, 6, 21), datetime(1990, 6, 21)) == 0.0


def test_progressed_date_adds_one_day_per_year():
    assert progressions.progressed_date(date(1990, 6, 21), datetime(2020, 6, 21, 12)) == date(1990, 7, 21)


def test_progressed_date_truncates_partial_years():
    # one day short of thirty years
    assert progressions.progressed_date(date(1990, 6, 21), datetime(2020, 6, 20)) == date(1990, 7, 20)


def test_progressed_chart_is_cast_at_birth_clock_time():
    birth = parse_birth("1990-06-21", "14:30", 40.7, -74.0)
    prog = progressions.progressed_positions(birth, datetime(2020, 6, 21, 12))
    expected = positions_at(datetime(1990, 7, 21, 14, 30), -74.0)
    assert prog == expected


def test_progressed_positions_accept_a_body_subset():
    birth = parse_birth("1990-06-21", "14:30", 40.7, -74.0)
    prog = progressions.progressed_positions(birth, datetime(2020, 6, 21), ["moon"])
    assert [p.body.value for p in prog] == ["moon"]


def test_progressed_date_before_birth_steps_back_a_day():
    # 0.36 years before birth: trunc(21 - 0.36) == 20
    assert progressions.progressed_date(date(1990, 6, 21), datetime(1990, 2, 10)) == date(1990, 6, 20)


def test_progressed_date_far_before_birth():
    # about -1.94 years from the 1st: trunc(1 - 1.94) == 0, one day back
    assert progressions.progressed_date(date(1990, 6, 1), datetime(1988, 6, 21)) == date(1990, 5, 31)


def test_aware_target_is_read_in_utc():
    aware = datetime(2020, 6, 21, 14, tzinfo=timezone(timedelta(hours=2)))
    naive = datetime(2020, 6, 21, 12)
    assert progressions.years_elapsed(date(1990, 6, 21), aware) == progressions.years_elapsed(
        date(1990, 6, 21), naive
    )
