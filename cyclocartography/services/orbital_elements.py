"""Keplerian element table for the propagated bodies.

Each element is a linear function ``c0 + c1 * T`` of Julian centuries since
J2000. Angles are in degrees, the semi-major axis in AU.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .bodies import CelestialBody
from .sidereal import normalize_angle

Linear = Tuple[float, float]


@dataclass(frozen=True)
class OrbitalElements:
    L: float  # mean longitude
    a: float  # semi-major axis
    e: float  # eccentricity
    i: float  # inclination
    omega: float  # argument of perihelion
    Omega: float  # longitude of the ascending node


@dataclass(frozen=True)
class ElementRates:
    L: Linear
    a: Linear
    e: Linear
    i: Linear
    omega: Linear
    Omega: Linear

    def at(self, t: float) -> OrbitalElements:
        return OrbitalElements(
            L=normalize_angle(self.L[0] + self.L[1] * t),
            a=self.a[0] + self.a[1] * t,
            e=self.e[0] + self.e[1] * t,
            i=self.i[0] + self.i[1] * t,
            omega=normalize_angle(self.omega[0] + self.omega[1] * t),
            Omega=normalize_angle(self.Omega[0] + self.Omega[1] * t),
        )


ELEMENTS: Dict[CelestialBody, ElementRates] = {
    CelestialBody.MERCURY: ElementRates(
        L=(252.2509, 149472.6746),
        a=(0.387098, 0),
        e=(0.205635, 0.000020),
        i=(7.0050, 0.0019),
        omega=(29.1241, 1.0148),
        Omega=(48.3313, -0.1254),
    ),
    CelestialBody.VENUS: ElementRates(
        L=(181.9798, 58517.8157),
        a=(0.723332, 0),
        e=(0.006773, -0.000048),
        i=(3.3947, 0.0010),
        omega=(54.8842, 0.5082),
        Omega=(76.6799, -0.2780),
    ),
    CelestialBody.MARS: ElementRates(
        L=(355.4330, 19140.2993),
        a=(1.523679, 0),
        e=(0.093405, 0.000090),
        i=(1.8497, -0.0006),
        omega=(286.5016, 0.7717),
        Omega=(49.5574, -0.2934),
    ),
    CelestialBody.JUPITER: ElementRates(
        L=(34.3515, 3034.9057),
        a=(5.202561, 0),
        e=(0.048498, 0.000163),
        i=(1.3033, -0.0019),
        omega=(273.8777, 0.3254),
        Omega=(100.4542, 0.1768),
    ),
    CelestialBody.SATURN: ElementRates(
        L=(49.9429, 1222.1138),
        a=(9.554747, 0),
        e=(0.055546, -0.000346),
        i=(2.4889, 0.0025),
        omega=(339.3939, 0.7372),
        Omega=(113.6634, -0.2507),
    ),
    CelestialBody.URANUS: ElementRates(
        L=(313.2318, 428.2011),
        a=(19.218446, 0),
        e=(0.046381, -0.000027),
        i=(0.7732, 0.0001),
        omega=(96.9310, 0.3670),
        Omega=(74.0005, 0.0747),
    ),
    CelestialBody.NEPTUNE: ElementRates(
        L=(304.8800, 218.4616),
        a=(30.110387, 0),
        e=(0.009456, 0.000007),
        i=(1.7700, -0.0093),
        omega=(276.3360, 0.3259),
        Omega=(131.7841, -0.0061),
    ),
    CelestialBody.PLUTO: ElementRates(
        L=(238.9290, 145.2078),
        a=(39.482, 0),
        e=(0.2488, 0),
        i=(17.14, 0),
        omega=(113.76, 0),
        Omega=(110.30, 0),
    ),
    CelestialBody.CHIRON: ElementRates(
        L=(309.8, 714.5),
        a=(13.699, 0),
        e=(0.378, 0),
        i=(6.92, 0),
        omega=(339.25, 0),
        Omega=(209.30, 0),
    ),
    CelestialBody.CERES: ElementRates(
        L=(231.36, 7809.0),
        a=(2.7658, 0),
        e=(0.0760, 0),
        i=(10.59, 0),
        omega=(73.60, 0),
        Omega=(80.39, 0),
    ),
    CelestialBody.PALLAS: ElementRates(
        L=(7.49, 7807.0),
        a=(2.7716, 0),
        e=(0.2313, 0),
        i=(34.83, 0),
        omega=(310.20, 0),
        Omega=(173.09, 0),
    ),
    CelestialBody.JUNO: ElementRates(
        L=(173.68, 8259.0),
        a=(2.6691, 0),
        e=(0.2562, 0),
        i=(12.99, 0),
        omega=(248.41, 0),
        Omega=(169.87, 0),
    ),
    CelestialBody.VESTA: ElementRates(
        L=(274.55, 9920.0),
        a=(2.3615, 0),
        e=(0.0887, 0),
        i=(7.14, 0),
        omega=(149.84, 0),
        Omega=(103.85, 0),
    ),
}


def elements_at(body: CelestialBody, t: float) -> Optional[OrbitalElements]:
    rates = ELEMENTS.get(body)
    if rates is None:
        return None
    return rates.at(t)


__all__ = ["ELEMENTS", "ElementRates", "OrbitalElements", "elements_at"]
