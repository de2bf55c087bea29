import math
import logging
from typing import Any, Callable, Tuple

from matchengine.errors import GeoCalculationError

logger = logging.getLogger(__name__)


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def clamp01(x: float) -> float:
    return clamp(x, 0.0, 1.0)


def round_half_up(x: float) -> int:
    """Round .5 up for non-negative values (84.5 -> 85)."""
    return int(math.floor(x + 0.5))


def is_missing(value: Any) -> bool:
    """None and empty collections count as missing data."""
    if value is None:
        return True
    if isinstance(value, (list, tuple, set, dict, str)) and len(value) == 0:
        return True
    return False


def resolve_or_neutral(
    name: str,
    compute: Callable[[], Tuple[float, str]],
    *operands: Any,
    neutral: float = 0.5
) -> Tuple[float, bool, str]:
    """
    Apply the neutral-default policy for one dimension.

    If any operand is missing the dimension takes the neutral score. Otherwise
    ``compute`` runs; a failure or a non-finite result also degrades to the
    neutral score instead of propagating.

    Returns: (score in [0, 1], is_default, detail)
    """
    if any(is_missing(op) for op in operands):
        return neutral, True, "insufficient data"

    try:
        score, detail = compute()
        score = float(score)
    except (GeoCalculationError, ArithmeticError, ValueError, TypeError, AttributeError) as e:
        logger.warning("%s calculation failed (%s); using neutral score %.2f", name, e, neutral)
        return neutral, True, f"calculation failed: {e}"

    if not math.isfinite(score):
        logger.warning("%s produced non-finite score %r; using neutral score %.2f", name, score, neutral)
        return neutral, True, "non-finite score"

    return clamp01(score), False, detail


def validate_coordinates(lat: float, lng: float) -> None:
    """Raise GeoCalculationError unless (lat, lng) is a finite point on the globe."""
    try:
        lat_f, lng_f = float(lat), float(lng)
    except (TypeError, ValueError) as e:
        raise GeoCalculationError(f"non-numeric coordinates ({lat!r}, {lng!r})") from e
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        raise GeoCalculationError(f"non-finite coordinates ({lat!r}, {lng!r})")
    if not (-90.0 <= lat_f <= 90.0 and -180.0 <= lng_f <= 180.0):
        raise GeoCalculationError(f"coordinates out of range ({lat!r}, {lng!r})")


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float, earth_radius_km: float = 6371.0) -> float:
    """Great-circle distance between two points in kilometers."""
    validate_coordinates(lat1, lng1)
    validate_coordinates(lat2, lng2)

    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    a = clamp01(a)  # float error can push antipodal points just past 1
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return earth_radius_km * c
