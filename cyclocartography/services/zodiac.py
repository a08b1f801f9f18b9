"""Tropical sign lookup for ecliptic longitudes."""

from .sidereal import normalize_angle

SIGN_NAMES = (
    "Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
    "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces",
)
SIGN_SPAN = 30.0


def sign_index_from_lon(lon: float) -> int:
    return int(normalize_angle(lon) // SIGN_SPAN) % 12


def sign_name_from_lon(lon: float) -> str:
    return SIGN_NAMES[sign_index_from_lon(lon)]


def degree_in_sign(lon: float) -> float:
    return normalize_angle(lon) % SIGN_SPAN


def fmt_deg(lon: float) -> str:
    # e.g. "Cancer 05°30′"
    within = degree_in_sign(lon)
    deg = int(within)
    mins = int((within - deg) * 60)
    return f"{sign_name_from_lon(lon)} {deg:02d}°{mins:02d}′"
