from datetime import date, datetime

import pytest

from cyclocartography.services import location_scoring as ls
from cyclocartography.services.activation_windows import ActivationWindow, INTENSITY_ORDER
from cyclocartography.services.bodies import CelestialBody as B, LineType as L
from cyclocartography.services.birth_data import parse_birth
from cyclocartography.services.config import DEFAULT_CONFIG
from cyclocartography.services.lines import AstroLine, meridian_points
from cyclocartography.services.proximity import NearbyLine

BIRTH = parse_birth("1990-06-21", "14:30", 40.7, -74.0)


def _window(moving, natal, aspect, source="transit", day=1):
    d = date(2024, 3, day)
    return ActivationWindow(
        natal_body=natal,
        moving_body=moving,
        aspect=aspect,
        source=source,
        start_date=d,
        end_date=d,
        exact_date=d,
        description="",
        window_type="neutral",
        short_label="",
    )


def _activation(intensity, orb=1.0):
    return ls.LineActivation(
        natal_body=B.SUN,
        moving_body=B.SATURN,
        aspect="square",
        source="transit",
        orb=orb,
        applying=True,
        intensity=intensity,
        summary="",
    )


def test_overall_strength_levels():
    assert ls.overall_strength([]) == "quiet"
    assert ls.overall_strength([_activation("fading")]) == "building"
    assert ls.overall_strength([_activation("moderate"), _activation("strong")]) == "active"
    assert ls.overall_strength([_activation("strong"), _activation("exact")]) == "peak"


def test_best_visit_window_picks_highest_score_above_threshold():
    good = _window(B.JUPITER, B.VENUS, "trine")
    hard = _window(B.SATURN, B.VENUS, "square")
    tone = {B.VENUS: 1}
    assert ls.visit_score(good, tone, DEFAULT_CONFIG) == pytest.approx(3.3)
    assert ls.best_visit_window([hard, good], tone, DEFAULT_CONFIG) is good


def test_best_visit_window_none_below_threshold():
    # 0.5 + 0.5 = 1.0, below the 1.2 threshold
    meh = _window(B.MOON, B.SUN, "conjunction")
    assert ls.best_visit_window([meh], {}, DEFAULT_CONFIG) is None


def test_progression_windows_get_visit_bonus():
    # 0.3 + 0.9 + 0.15
    w = _window(B.MERCURY, B.SUN, "sextile", source="progression")
    assert ls.visit_score(w, {}, DEFAULT_CONFIG) == pytest.approx(1.35)


def test_local_sentiment_keeps_strongest_magnitude():
    nearby = [
        NearbyLine(B.SATURN, L.MC, 10.0, "very strong", "on"),
        NearbyLine(B.SATURN, L.ASC, 50.0, "very strong", "east"),
        NearbyLine(B.VENUS, L.DSC, 60.0, "very strong", "east"),
    ]
    tone = ls.local_sentiment(nearby, ls.classify_line)
    assert tone == {B.SATURN: -1, B.VENUS: 1}


def _line_at(body, lon):
    return AstroLine(body, L.MC, tuple(meridian_points(lon)))


def test_score_city_splits_benefic_and_heavy():
    city = ls.Location("Testville", "TV", 1.0, 0.0)
    lines = [_line_at(B.VENUS, 0.0)]
    windows = [
        _window(B.JUPITER, B.VENUS, "trine"),
        _window(B.SATURN, B.VENUS, "square"),
        _window(B.JUPITER, B.MARS, "trine"),
    ]
    optimal, intense = ls.score_city(city, windows, lines, DEFAULT_CONFIG)
    assert optimal.score == pytest.approx(3.3)
    assert optimal.window_count == 1
    assert optimal.top_window is windows[0]
    assert intense.score == pytest.approx(3.0)
    assert intense.top_window is windows[1]


def test_score_city_decays_with_distance():
    windows = [_window(B.JUPITER, B.VENUS, "trine")]
    lines = [_line_at(B.VENUS, 0.0)]
    near, _ = ls.score_city(ls.Location("Near", "", 1.0, 0.0), windows, lines, DEFAULT_CONFIG)
    far, _ = ls.score_city(ls.Location("Far", "", 1.0, 5.0), windows, lines, DEFAULT_CONFIG)
    assert near.score > far.score
    distance = ls.find_nearest_lines(lines, 1.0, 5.0)[0].distance_km
    assert far.score == pytest.approx(3.3 * ls.proximity_factor(distance, DEFAULT_CONFIG))


def test_score_city_without_nearby_lines_is_none():
    windows = [_window(B.JUPITER, B.VENUS, "trine")]
    lines = [_line_at(B.VENUS, 90.0)]
    assert ls.score_city(ls.Location("Away", "", 1.0, 0.0), windows, lines, DEFAULT_CONFIG) == (None, None)


def test_proximity_halves_around_310_km():
    assert ls.proximity_factor(0.0, DEFAULT_CONFIG) == 1.0
    assert ls.proximity_factor(310.0, DEFAULT_CONFIG) == pytest.approx(0.5, abs=1e-3)


def test_current_activations_are_unique_and_ranked():
    acts = ls.get_current_activations(BIRTH, datetime(2024, 3, 1, 12))
    keys = [(a.moving_body, a.natal_body, a.aspect, a.source) for a in acts]
    assert len(keys) == len(set(keys))
    ranks = [(INTENSITY_ORDER[a.intensity], a.orb) for a in acts]
    assert ranks == sorted(ranks)
    for a in acts:
        assert a.summary


def test_city_activation_only_reports_nearby_natal_bodies():
    result = ls.get_city_activation("New York", 40.71, -74.0, BIRTH, datetime(2024, 3, 1, 12))
    assert result.city_name == "New York"
    assert result.overall_strength in {"peak", "active", "building", "quiet"}
    bodies = {n.body for n in result.nearby_lines}
    assert all(a.natal_body in bodies for a in result.active_aspects)
    if result.next_window is not None:
        assert result.next_window.natal_body in bodies
    if result.best_visit_window is not None:
        assert result.best_visit_window.natal_body in bodies


def test_transit_synthesis_ranks_cities():
    cities = [
        ls.Location("New York", "US", 40.71, -74.0),
        ls.Location("London", "GB", 51.5, -0.12),
        ls.Location("Tokyo", "JP", 35.68, 139.69),
        ls.Location("Sydney", "AU", -33.87, 151.2),
    ]
    result = ls.get_transit_synthesis(BIRTH, "1y", cities, start=datetime(2024, 1, 1))
    for ranked in (result.optimal, result.intense):
        scores = [c.score for c in ranked]
        assert scores == sorted(scores, reverse=True)
        assert all(s > 0 for s in scores)
        assert len(ranked) <= DEFAULT_CONFIG.synthesis_top_n


def test_transit_synthesis_threaded_matches_serial():
    cities = [ls.Location("New York", "US", 40.71, -74.0), ls.Location("Lima", "PE", -12.05, -77.04)]
    serial = ls.get_transit_synthesis(BIRTH, "3m", cities, start=datetime(2024, 1, 1))
    threaded = ls.get_transit_synthesis(BIRTH, "3m", cities, start=datetime(2024, 1, 1), max_workers=3)
    assert serial == threaded


def test_transit_synthesis_rejects_unknown_range():
    with pytest.raises(ValueError):
        ls.get_transit_synthesis(BIRTH, "5y", [ls.Location("X", "", 0.0, 0.0)])


def test_important_dates_are_capped_per_month():
    dates = ls.find_important_dates(
        BIRTH,
        datetime(2024, 1, 1),
        datetime(2025, 12, 31),
        [ls.Location("New York", "US", 40.71, -74.0)],
    )
    per_month = {}
    for d in dates:
        per_month.setdefault(d.date.isoformat()[:7], []).append(d)
        assert d.significance in {"major", "moderate", "minor"}
        assert d.category in {"love", "career", "growth", "caution", "travel"}
        assert len(d.affected_cities) <= 5
    for items in per_month.values():
        assert all(d.significance == "major" for d in items[3:])
