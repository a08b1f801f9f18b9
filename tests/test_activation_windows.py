import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from cyclocartography.services import activation_windows as aw
from cyclocartography.services.bodies import CelestialBody as B
from cyclocartography.services.birth_data import parse_birth
from cyclocartography.services.config import DEFAULT_CONFIG
from cyclocartography.services.errors import ScanCancelled

BIRTH = parse_birth("1990-06-21", "14:30", 40.7, -74.0)
KEY = (B.PLUTO, B.SUN, "conjunction", "transit")


def _weekly(start, orbs):
    return [(start + timedelta(days=7 * i), orb) for i, orb in enumerate(orbs)]


def test_retrograde_pass_splits_into_two_windows():
    start = datetime(2024, 1, 1, 12)
    first = _weekly(start, [2.0, 1.0, 0.4, 1.5])
    second = _weekly(start + timedelta(days=140), [2.2, 0.9, 2.5])
    windows = aw.merge_hits(KEY, second + first, 7)

    assert len(windows) == 2
    assert windows[0].start_date.isoformat() == "2024-01-01"
    assert windows[0].end_date.isoformat() == "2024-01-22"
    assert windows[0].exact_date.isoformat() == "2024-01-15"
    assert windows[1].exact_date.isoformat() == "2024-05-27"


def test_gap_within_two_and_a_half_steps_keeps_one_window():
    start = datetime(2024, 1, 1, 12)
    hits = [(start, 1.0), (start + timedelta(days=14), 0.5), (start + timedelta(days=31), 1.2)]
    windows = aw.merge_hits(KEY, hits, 7)
    assert len(windows) == 1
    assert windows[0].exact_date.isoformat() == "2024-01-15"


def test_exact_date_is_first_minimum():
    start = datetime(2024, 1, 1, 12)
    windows = aw.merge_hits(KEY, _weekly(start, [1.0, 0.5, 0.5, 0.8]), 7)
    assert windows[0].exact_date.isoformat() == "2024-01-08"


def test_window_description_and_labels():
    start = datetime(2024, 1, 1, 12)
    w = aw.merge_hits((B.JUPITER, B.VENUS, "trine", "transit"), [(start, 0.5)], 7)[0]
    assert w.description == "Transiting Jupiter △ natal Venus (exact 2024-01-01)"
    assert w.window_type == "benefic"
    assert w.short_label == "Abundance Peak"
    assert w.start_date == w.end_date == w.exact_date


def test_intensity_is_monotone_in_orb():
    ranks = [aw.INTENSITY_ORDER[aw.intensity(orb / 10.0, 8.0)] for orb in range(0, 81)]
    assert ranks == sorted(ranks)
    assert aw.intensity(0.0, 8.0) == "exact"
    assert aw.intensity(8.0, 8.0) == "fading"


def test_outer_body_intensity_uses_tightened_orb():
    max_orb = DEFAULT_CONFIG.effective_max_orb(B.PLUTO, "transit")
    assert abs(max_orb - 2.8) < 1e-9
    assert aw.intensity(0.1, max_orb) == "exact"
    assert aw.intensity(0.8, max_orb) == "strong"
    assert aw.intensity(1.5, max_orb) == "moderate"
    assert aw.intensity(2.5, max_orb) == "fading"


def test_intensity_floor_on_max_orb():
    # max orb is never taken below half a degree
    assert aw.intensity(0.04, 0.1) == "exact"
    assert aw.intensity(0.3, 0.1) == "moderate"


@pytest.mark.parametrize(
    "moving,aspect,expected",
    [
        (B.JUPITER, "sextile", ("benefic", "Abundance Peak")),
        (B.VENUS, "conjunction", ("benefic", "Optimal Window for Flow")),
        (B.SATURN, "trine", ("evolutionary", "Structure Phase")),
        (B.PLUTO, "square", ("evolutionary", "Deep Transformation")),
        (B.JUPITER, "square", ("neutral", "Activation Window")),
        (B.NEPTUNE, "opposition", ("neutral", "Activation Window")),
    ],
)
def test_classify_window(moving, aspect, expected):
    assert aw.classify_window(moving, aspect) == expected


def test_sample_dates_include_both_ends():
    start = datetime(2024, 1, 1)
    samples = aw.sample_dates(start, start + timedelta(days=14), 7)
    assert len(samples) == 3
    assert samples[-1] == start + timedelta(days=14)


def test_scan_windows_are_ordered_and_contain_exact_date():
    windows = aw.find_activation_windows(BIRTH, datetime(2024, 1, 1), datetime(2024, 6, 30), 7)
    assert windows
    starts = [w.start_date for w in windows]
    assert starts == sorted(starts)
    for w in windows:
        assert w.start_date <= w.exact_date <= w.end_date


def test_threaded_scan_matches_serial_scan():
    args = (BIRTH, datetime(2024, 1, 1), datetime(2024, 3, 31), 7)
    assert aw.find_activation_windows(*args, max_workers=4) == aw.find_activation_windows(*args)


def test_scan_stops_when_cancelled():
    event = threading.Event()
    event.set()
    with pytest.raises(ScanCancelled) as exc:
        aw.find_activation_windows(
            BIRTH, datetime(2024, 1, 1), datetime(2024, 12, 31), 7, cancel_event=event
        )
    assert exc.value.reason == "cancelled"


def test_scan_stops_after_deadline():
    with pytest.raises(ScanCancelled) as exc:
        aw.find_activation_windows(
            BIRTH, datetime(2024, 1, 1), datetime(2024, 12, 31), 7, deadline=time.monotonic() - 1
        )
    assert exc.value.reason == "deadline"


@pytest.mark.parametrize(
    "aspect,quality",
    [("trine", "harmonious"), ("sextile", "harmonious"), ("square", "challenging"),
     ("opposition", "challenging"), ("conjunction", "neutral")],
)
def test_aspect_quality(aspect, quality):
    assert aw.aspect_quality(aspect) == quality


def test_aware_scan_bounds_match_utc_bounds():
    aware_start = datetime(2024, 1, 1, 14, tzinfo=timezone(timedelta(hours=2)))
    aware_end = datetime(2024, 3, 1, 14, tzinfo=timezone(timedelta(hours=2)))
    assert aw.find_activation_windows(BIRTH, aware_start, aware_end) == aw.find_activation_windows(
        BIRTH, datetime(2024, 1, 1, 12), datetime(2024, 3, 1, 12)
    )
