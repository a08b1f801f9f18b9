"""Low-order ephemeris for the tracked bodies.

Every :class:`CelestialBody` maps to exactly one position strategy:

* ``SolarSeries`` / ``LunarSeries``: closed-form periodic series.
* ``KeplerianOrbit``: two-body propagation from :mod:`.orbital_elements`,
  made geocentric by subtracting Earth's heliocentric vector.
* ``LinearPoint`` / ``OffsetPoint``: mathematical points moving at a constant
  rate (lunar nodes, mean Lilith).

Strategies produce geocentric ecliptic longitude/latitude; the equatorial
conversion is shared. This is not a precision ephemeris: the formulas are kept
exactly as calibrated so downstream timing stays reproducible.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from .bodies import CelestialBody, lookup_body
from .orbital_elements import OrbitalElements, elements_at
from .sidereal import (
    DEG,
    RAD,
    CalendarParts,
    centuries_since_j2000,
    julian_day,
    julian_day_for,
    normalize_angle,
    obliquity_of_ecliptic,
)

KEPLER_MAX_ITERATIONS = 20
KEPLER_TOLERANCE_DEG = 1e-8

EARTH_ECCENTRICITY = 0.016709


@dataclass(frozen=True)
class PlanetPosition:
    body: CelestialBody
    ra: float
    dec: float
    ecliptic_lon: float


@dataclass(frozen=True)
class EphemerisContext:
    """Quantities shared by every strategy at one instant."""

    t: float
    obliquity: float
    earth_lon: float
    earth_r: float


def ecliptic_to_equatorial(lon: float, lat: float, obliquity: float) -> Tuple[float, float]:
    """Rotate ecliptic (lon, lat) into equatorial (ra, dec), all in degrees."""

    lon_rad = lon * DEG
    lat_rad = lat * DEG
    obl_rad = obliquity * DEG

    sin_dec = math.sin(lat_rad) * math.cos(obl_rad) + math.cos(lat_rad) * math.sin(
        obl_rad
    ) * math.sin(lon_rad)
    dec = math.asin(sin_dec) * RAD

    y = math.sin(lon_rad) * math.cos(obl_rad) - math.tan(lat_rad) * math.sin(obl_rad)
    x = math.cos(lon_rad)
    ra = normalize_angle(math.atan2(y, x) * RAD)
    return ra, dec


def solve_kepler(mean_anomaly: float, e: float) -> float:
    """Eccentric anomaly (degrees) by Newton refinement.

    Capped at 20 iterations with a 1e-8° step tolerance.
    """

    ecc = mean_anomaly
    for _ in range(KEPLER_MAX_ITERATIONS):
        d_e = (mean_anomaly - (ecc - e * math.sin(ecc * DEG) * RAD)) / (
            1 - e * math.cos(ecc * DEG)
        )
        ecc += d_e
        if abs(d_e) < KEPLER_TOLERANCE_DEG:
            break
    return ecc


def heliocentric_to_geocentric(
    planet_lon: float,
    planet_lat: float,
    planet_r: float,
    earth_lon: float,
    earth_r: float,
) -> Tuple[float, float]:
    xp = planet_r * math.cos(planet_lat * DEG) * math.cos(planet_lon * DEG)
    yp = planet_r * math.cos(planet_lat * DEG) * math.sin(planet_lon * DEG)
    zp = planet_r * math.sin(planet_lat * DEG)

    xe = earth_r * math.cos(earth_lon * DEG)
    ye = earth_r * math.sin(earth_lon * DEG)

    xg = xp - xe
    yg = yp - ye
    zg = zp

    lon = normalize_angle(math.atan2(yg, xg) * RAD)
    lat = math.atan2(zg, math.sqrt(xg * xg + yg * yg)) * RAD
    return lon, lat


def sun_series(t: float) -> Tuple[float, float]:
    """Geocentric solar longitude and Earth–Sun distance (AU)."""

    m = normalize_angle(357.5291 + 35999.0503 * t)
    c = (
        1.9146 * math.sin(m * DEG)
        + 0.02 * math.sin(2 * m * DEG)
        + 0.0003 * math.sin(3 * m * DEG)
    )
    lon = normalize_angle(m + c + 180 + 102.9372)
    v = m + c
    r = (
        1.000001018
        * (1 - EARTH_ECCENTRICITY * EARTH_ECCENTRICITY)
        / (1 + EARTH_ECCENTRICITY * math.cos(v * DEG))
    )
    return lon, r


class SolarSeries:
    def ecliptic(self, ctx: EphemerisContext) -> Tuple[float, float]:
        lon, _ = sun_series(ctx.t)
        return lon, 0.0


class LunarSeries:
    def ecliptic(self, ctx: EphemerisContext) -> Tuple[float, float]:
        t = ctx.t
        l0 = normalize_angle(218.3165 + 481267.8813 * t)
        m = normalize_angle(134.9634 + 477198.8676 * t)
        m_sun = normalize_angle(357.5291 + 35999.0503 * t)
        d = normalize_angle(297.8502 + 445267.1115 * t)
        f = normalize_angle(93.2720 + 483202.0175 * t)

        lon = (
            l0
            + 6.289 * math.sin(m * DEG)
            + 1.274 * math.sin((2 * d - m) * DEG)
            + 0.658 * math.sin(2 * d * DEG)
            + 0.214 * math.sin(2 * m * DEG)
            - 0.186 * math.sin(m_sun * DEG)
            - 0.114 * math.sin(2 * f * DEG)
        )
        lat = (
            5.128 * math.sin(f * DEG)
            + 0.281 * math.sin((m + f) * DEG)
            + 0.278 * math.sin((m - f) * DEG)
        )
        return normalize_angle(lon), lat


@dataclass(frozen=True)
class KeplerianOrbit:
    body: CelestialBody

    def heliocentric(self, el: OrbitalElements) -> Tuple[float, float, float]:
        m = normalize_angle(el.L - el.omega - el.Omega)
        ecc = solve_kepler(m, el.e)

        v = (
            2
            * math.atan2(
                math.sqrt(1 + el.e) * math.sin((ecc / 2) * DEG),
                math.sqrt(1 - el.e) * math.cos((ecc / 2) * DEG),
            )
            * RAD
        )
        r = el.a * (1 - el.e * math.cos(ecc * DEG))
        u = normalize_angle(v + el.omega)

        cos_node, sin_node = math.cos(el.Omega * DEG), math.sin(el.Omega * DEG)
        cos_u, sin_u = math.cos(u * DEG), math.sin(u * DEG)
        cos_i = math.cos(el.i * DEG)

        xh = r * (cos_node * cos_u - sin_node * sin_u * cos_i)
        yh = r * (sin_node * cos_u + cos_node * sin_u * cos_i)
        zh = r * sin_u * math.sin(el.i * DEG)

        helio_lon = normalize_angle(math.atan2(yh, xh) * RAD)
        helio_lat = math.atan2(zh, math.sqrt(xh * xh + yh * yh)) * RAD
        helio_r = math.sqrt(xh * xh + yh * yh + zh * zh)
        return helio_lon, helio_lat, helio_r

    def ecliptic(self, ctx: EphemerisContext) -> Tuple[float, float]:
        el = elements_at(self.body, ctx.t)
        if el is None:
            return 0.0, 0.0
        helio_lon, helio_lat, helio_r = self.heliocentric(el)
        return heliocentric_to_geocentric(
            helio_lon, helio_lat, helio_r, ctx.earth_lon, ctx.earth_r
        )


@dataclass(frozen=True)
class LinearPoint:
    epoch_lon: float
    rate_per_century: float

    def longitude(self, t: float) -> float:
        return normalize_angle(self.epoch_lon + self.rate_per_century * t)

    def ecliptic(self, ctx: EphemerisContext) -> Tuple[float, float]:
        return self.longitude(ctx.t), 0.0


@dataclass(frozen=True)
class OffsetPoint:
    """A point fixed at ``offset`` degrees from another linear point."""

    base: LinearPoint
    offset: float

    def ecliptic(self, ctx: EphemerisContext) -> Tuple[float, float]:
        return normalize_angle(self.base.longitude(ctx.t) + self.offset), 0.0


MEAN_NORTH_NODE = LinearPoint(125.0446, -1934.1363)
MEAN_LILITH = LinearPoint(263.3532, 4069.0137)

STRATEGIES: Dict[CelestialBody, object] = {
    CelestialBody.SUN: SolarSeries(),
    CelestialBody.MOON: LunarSeries(),
    CelestialBody.MERCURY: KeplerianOrbit(CelestialBody.MERCURY),
    CelestialBody.VENUS: KeplerianOrbit(CelestialBody.VENUS),
    CelestialBody.MARS: KeplerianOrbit(CelestialBody.MARS),
    CelestialBody.JUPITER: KeplerianOrbit(CelestialBody.JUPITER),
    CelestialBody.SATURN: KeplerianOrbit(CelestialBody.SATURN),
    CelestialBody.URANUS: KeplerianOrbit(CelestialBody.URANUS),
    CelestialBody.NEPTUNE: KeplerianOrbit(CelestialBody.NEPTUNE),
    CelestialBody.PLUTO: KeplerianOrbit(CelestialBody.PLUTO),
    CelestialBody.CHIRON: KeplerianOrbit(CelestialBody.CHIRON),
    CelestialBody.CERES: KeplerianOrbit(CelestialBody.CERES),
    CelestialBody.PALLAS: KeplerianOrbit(CelestialBody.PALLAS),
    CelestialBody.JUNO: KeplerianOrbit(CelestialBody.JUNO),
    CelestialBody.VESTA: KeplerianOrbit(CelestialBody.VESTA),
    CelestialBody.NORTH_NODE: MEAN_NORTH_NODE,
    CelestialBody.SOUTH_NODE: OffsetPoint(MEAN_NORTH_NODE, 180.0),
    CelestialBody.LILITH: MEAN_LILITH,
}


def context_for_jd(jd: float) -> EphemerisContext:
    t = centuries_since_j2000(jd)
    sun_lon, sun_r = sun_series(t)
    return EphemerisContext(
        t=t,
        obliquity=obliquity_of_ecliptic(t),
        earth_lon=normalize_angle(sun_lon + 180),
        earth_r=sun_r,
    )


def positions_for_jd(
    jd: float, bodies: Optional[Iterable[object]] = None
) -> List[PlanetPosition]:
    ctx = context_for_jd(jd)
    if bodies is None:
        selected = list(STRATEGIES)
    else:
        wanted = {lookup_body(b) for b in bodies}
        selected = [b for b in STRATEGIES if b in wanted]

    out: List[PlanetPosition] = []
    for body in selected:
        lon, lat = STRATEGIES[body].ecliptic(ctx)
        ra, dec = ecliptic_to_equatorial(lon, lat, ctx.obliquity)
        out.append(PlanetPosition(body=body, ra=ra, dec=dec, ecliptic_lon=lon))
    return out


def positions_at(
    instant: datetime,
    birth_longitude: Optional[float] = None,
    bodies: Optional[Iterable[object]] = None,
) -> List[PlanetPosition]:
    """Positions of the tracked bodies at a calendar instant.

    Args:
        instant: Wall-clock instant (seconds are ignored). Read as UTC unless
            ``birth_longitude`` is given, in which case it is local time shifted
            by the longitude-estimated offset.
            An aware instant is first converted to naive UTC.
        birth_longitude: Longitude used for the local-to-UTC estimate.
        bodies: Optional subset to compute. Names that are not tracked bodies
            produce no entry.

    Returns:
        One :class:`PlanetPosition` per selected body in canonical body order.
    """

    jd = julian_day_for(CalendarParts.from_datetime(instant), birth_longitude)
    return positions_for_jd(jd, bodies)


def position_of(
    positions: Iterable[PlanetPosition], body: object
) -> Optional[PlanetPosition]:
    target = lookup_body(body)
    for p in positions:
        if p.body == target:
            return p
    return None


def _shorter_arc_midpoint(a: float, b: float) -> float:
    mid = (a + b) / 2
    if abs(a - b) > 180:
        mid = math.fmod(mid + 180, 360)
    return normalize_angle(mid)


def composite_positions(
    positions1: List[PlanetPosition],
    positions2: List[PlanetPosition],
    gst1: float,
    gst2: float,
) -> Tuple[List[PlanetPosition], float]:
    """Midpoint (composite) chart of two position sets and their sidereal times.

    Only bodies present in both charts are kept. Equatorial coordinates are
    derived at the obliquity of 2000-06-21 12:00.
    """

    t = centuries_since_j2000(julian_day(2000, 6, 21, 12))
    obliquity = obliquity_of_ecliptic(t)
    by_body = {p.body: p for p in positions2}

    names: List[CelestialBody] = []
    for p in list(positions1) + list(positions2):
        if p.body not in names:
            names.append(p.body)

    first = {p.body: p for p in positions1}
    out: List[PlanetPosition] = []
    for body in names:
        p1, p2 = first.get(body), by_body.get(body)
        if p1 is None or p2 is None:
            continue
        mid_lon = _shorter_arc_midpoint(p1.ecliptic_lon, p2.ecliptic_lon)
        ra, dec = ecliptic_to_equatorial(mid_lon, 0, obliquity)
        out.append(PlanetPosition(body=body, ra=ra, dec=dec, ecliptic_lon=mid_lon))

    return out, _shorter_arc_midpoint(gst1, gst2)


__all__ = [
    "EphemerisContext",
    "KeplerianOrbit",
    "LinearPoint",
    "LunarSeries",
    "OffsetPoint",
    "PlanetPosition",
    "STRATEGIES",
    "SolarSeries",
    "composite_positions",
    "context_for_jd",
    "ecliptic_to_equatorial",
    "heliocentric_to_geocentric",
    "position_of",
    "positions_at",
    "positions_for_jd",
    "solve_kepler",
    "sun_series",
]
