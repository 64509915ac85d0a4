"""Speed unit conversions and ETA display helpers."""

from math import floor, isfinite

from ..errors import InvalidArgument


def mps_to_kmh(mps: float) -> float:
    return mps * 3.6


def kmh_to_mps(kmh: float) -> float:
    return kmh / 3.6


def minutes_from_km(distance_km: float, speed_kmh: float) -> float:
    if not isfinite(speed_kmh) or speed_kmh <= 0:
        raise InvalidArgument(f"speed_kmh must be a positive number, got {speed_kmh!r}")
    if distance_km <= 0:
        return 0.0
    try:
        minutes = (distance_km / speed_kmh) * 60.0
    except OverflowError:
        minutes = float("inf")
    if not isfinite(minutes):
        raise InvalidArgument(f"travel time for {distance_km} km at {speed_kmh} km/h is not finite")
    return minutes


def format_eta(minutes: int) -> str:
    """Render whole minutes as '1h 5m' or '45m'."""
    hours, mins = divmod(int(minutes), 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (display rounding)."""
    return int(floor(value + 0.5))
