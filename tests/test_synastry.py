import pytest

from cyclocartography.services import synastry
from cyclocartography.services.bodies import CelestialBody as B, LineType as L
from cyclocartography.services.birth_data import parse_birth
from cyclocartography.services.lines import AstroLine, meridian_points
from cyclocartography.services.natal import natal_gst, natal_positions

USER = parse_birth("1990-06-21", "14:30", 40.7, -74.0)
PARTNER = parse_birth("1988-11-03", "06:15", 51.5, -0.1)


def _meridian(body, line_type, lon, source):
    return AstroLine(body, line_type, tuple(meridian_points(lon)), source)


def _curve(body, line_type, lons, source):
    lats = (-60.0, -40.0, -20.0, 0.0, 20.0, 40.0, 60.0)
    return AstroLine(body, line_type, tuple(zip(lats, lons)), source)


def test_meridian_lines_within_ten_degrees_overlap():
    lines = [_meridian(B.VENUS, L.MC, 30.0, "user"), _meridian(B.VENUS, L.MC, 35.0, "partner")]
    found = synastry.find_overlaps(lines)
    assert len(found) == 1
    assert found[0].body == B.VENUS
    assert found[0].line_type == L.MC
    assert found[0].proximity_deg == pytest.approx(5.0)
    assert found[0].classification == "harmonious"


def test_distant_meridian_lines_do_not_overlap():
    lines = [_meridian(B.VENUS, L.MC, 30.0, "user"), _meridian(B.VENUS, L.MC, 45.0, "partner")]
    assert synastry.find_overlaps(lines) == []


def test_proximity_wraps_across_the_dateline():
    lines = [_meridian(B.MARS, L.IC, 179.0, "user"), _meridian(B.MARS, L.IC, -178.0, "partner")]
    found = synastry.find_overlaps(lines)
    assert found[0].proximity_deg == pytest.approx(3.0)


def test_horizon_curves_are_compared_at_sample_latitudes():
    user = _curve(B.SATURN, L.ASC, [10.0] * 7, "user")
    partner = _curve(B.SATURN, L.ASC, [14.0, 14.0, 14.0, 12.0, 14.0, 14.0, 14.0], "partner")
    assert synastry.line_proximity([user], [partner]) == pytest.approx(2.0)
    found = synastry.find_overlaps([user, partner])
    assert found[0].classification == "challenging"


def test_different_bodies_or_line_types_never_pair():
    lines = [
        _meridian(B.VENUS, L.MC, 30.0, "user"),
        _meridian(B.JUPITER, L.MC, 30.0, "partner"),
        _meridian(B.VENUS, L.IC, 30.0, "partner"),
    ]
    assert synastry.find_overlaps(lines) == []


def test_untagged_lines_are_ignored():
    lines = [_meridian(B.VENUS, L.MC, 30.0, None), _meridian(B.VENUS, L.MC, 30.0, "partner")]
    assert synastry.find_overlaps(lines) == []


def test_overlaps_are_sorted_closest_first():
    lines = [
        _meridian(B.SUN, L.MC, 0.0, "user"),
        _meridian(B.SUN, L.MC, 8.0, "partner"),
        _meridian(B.MOON, L.MC, 50.0, "user"),
        _meridian(B.MOON, L.MC, 51.0, "partner"),
    ]
    found = synastry.find_overlaps(lines)
    assert [o.body for o in found] == [B.MOON, B.SUN]


@pytest.mark.parametrize(
    "user,partner,label",
    [
        ("positive", "positive", "harmonious"),
        ("difficult", "difficult", "challenging"),
        ("positive", "difficult", "tension"),
        ("difficult", "positive", "tension"),
        ("positive", "neutral", "slightly_positive"),
        ("neutral", "difficult", "slightly_challenging"),
        ("neutral", "neutral", "neutral_overlap"),
    ],
)
def test_classify_overlap(user, partner, label):
    assert synastry.classify_overlap(user, partner) == label


def test_injected_classifier_labels_overlaps():
    lines = [_meridian(B.MERCURY, L.MC, 10.0, "user"), _meridian(B.MERCURY, L.MC, 12.0, "partner")]
    found = synastry.find_overlaps(lines, classifier=lambda body, line_type: "difficult")
    assert found[0].classification == "challenging"
    assert found[0].user_sentiment == "difficult"


def test_same_chart_twice_overlaps_on_every_line():
    lines = synastry.synastry_lines(USER, USER)
    found = synastry.find_overlaps(lines)
    keys = {(o.body, o.line_type): o for o in found}

    assert all(o.proximity_deg == 0 for o in found)
    assert keys[(B.VENUS, L.MC)].classification == "harmonious"
    assert keys[(B.MERCURY, L.MC)].classification == "neutral_overlap"
    assert {line.source_id for line in lines} == {"user", "partner"}


def test_synastry_lines_drop_minor_bodies_on_request():
    lines = synastry.synastry_lines(USER, PARTNER, include_minor=False)
    assert B.CHIRON not in {line.body for line in lines}


def test_composite_of_identical_charts_keeps_longitudes_and_gst():
    chart = synastry.composite_chart(USER, USER)
    natal = natal_positions(USER)
    assert chart.gst == pytest.approx(natal_gst(USER))
    assert [p.body for p in chart.positions] == [p.body for p in natal]
    for c, n in zip(chart.positions, natal):
        assert c.ecliptic_lon == pytest.approx(n.ecliptic_lon)
    assert all(line.source_id is None for line in chart.lines)


def test_composite_lines_sit_between_the_two_charts():
    chart = synastry.composite_chart(USER, PARTNER)
    assert chart.lines
    assert {line.body for line in chart.lines} == {p.body for p in chart.positions}
