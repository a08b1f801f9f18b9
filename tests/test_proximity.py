from datetime import datetime

from cyclocartography.services.bodies import CelestialBody, LineType
from cyclocartography.services.ephemeris import positions_at
from cyclocartography.services.lines import AstroLine, generate_lines, meridian_points
from cyclocartography.services.sidereal import gst_at
from cyclocartography.services import proximity


def _meridian(body, line_type, lon):
    return AstroLine(body, line_type, tuple(meridian_points(lon)))


def test_city_on_a_meridian_line_is_on_and_very_strong():
    lines = [_meridian(CelestialBody.VENUS, LineType.MC, 30.0)]
    found = proximity.find_nearest_lines(lines, 1.0, 30.0)
    assert len(found) == 1
    hit = found[0]
    assert hit.body == CelestialBody.VENUS
    assert hit.line_type == LineType.MC
    assert hit.distance_km < 1e-6
    assert hit.side == "on"
    assert hit.influence == "very strong"


def test_side_is_east_or_west_of_line():
    lines = [_meridian(CelestialBody.MARS, LineType.IC, 30.0)]
    east = proximity.find_nearest_lines(lines, 1.0, 32.0)[0]
    west = proximity.find_nearest_lines(lines, 1.0, 28.0)[0]
    assert east.side == "east"
    assert west.side == "west"
    assert east.influence == "strong"


def test_side_wraps_across_antimeridian():
    assert proximity.side_of_line(-179.0, 179.0, 200.0) == "east"
    assert proximity.side_of_line(179.0, -179.0, 200.0) == "west"


def test_segments_of_the_same_line_are_merged():
    far = AstroLine(CelestialBody.SUN, LineType.ASC, ((0.0, 10.0), (1.0, 10.0)))
    near = AstroLine(CelestialBody.SUN, LineType.ASC, ((0.0, 1.0), (1.0, 1.0)))
    found = proximity.find_nearest_lines([far, near], 0.0, 0.0)
    assert len(found) == 1
    assert abs(found[0].distance_km - proximity.haversine_km(0.0, 0.0, 0.0, 1.0)) < 1e-9


def test_results_sorted_nearest_first_and_bounded():
    lines = [
        _meridian(CelestialBody.SATURN, LineType.MC, 8.0),
        _meridian(CelestialBody.SUN, LineType.MC, 2.0),
        _meridian(CelestialBody.MOON, LineType.MC, 5.0),
        _meridian(CelestialBody.PLUTO, LineType.MC, 40.0),
    ]
    found = proximity.find_nearest_lines(lines, 1.0, 0.0)
    assert [f.body for f in found] == [CelestialBody.SUN, CelestialBody.MOON, CelestialBody.SATURN]
    distances = [f.distance_km for f in found]
    assert distances == sorted(distances)


def test_influence_bands():
    assert proximity.influence_for(10) == "very strong"
    assert proximity.influence_for(150) == "strong"
    assert proximity.influence_for(500) == "moderate"
    assert proximity.influence_for(800) == "mild"


def test_hide_mild_impacts_drops_weak_lines():
    lines = [
        _meridian(CelestialBody.SUN, LineType.MC, 0.0),
        _meridian(CelestialBody.MOON, LineType.MC, 10.0),
    ]
    found = proximity.find_nearest_lines(lines, 1.0, 0.0)
    assert len(found) == 2
    kept = proximity.filter_nearby_by_impact(found, hide_mild_impacts=True)
    assert [k.body for k in kept] == [CelestialBody.SUN]
    assert proximity.filter_nearby_by_impact(found, hide_mild_impacts=False) == found


def test_haversine_quarter_meridian():
    d = proximity.haversine_km(0.0, 0.0, 90.0, 0.0)
    assert abs(d - 6371.0 * 3.141592653589793 / 2) < 1e-6


def test_city_on_a_generated_sun_mc_line():
    instant = datetime(1990, 6, 21, 14, 30)
    positions = positions_at(instant, -74.0)
    lines = generate_lines(positions, gst_at(instant, -74.0))
    sun_mc = next(
        line for line in lines if line.body == CelestialBody.SUN and line.line_type == LineType.MC
    )
    mc_lon = sun_mc.points[0][1]

    found = proximity.find_nearest_lines(lines, 1.0, mc_lon)
    hit = next(n for n in found if n.body == CelestialBody.SUN and n.line_type == LineType.MC)
    assert hit.side == "on"
    assert hit.influence == "very strong"
