"""Proximity scoring from great-circle distance."""
import math
from typing import Optional

from src.matching.types import GeoPoint
from src.matching.utils import round_half_up

EARTH_RADIUS_KM = 6371.0

# Score when the job is remote, and when either side has no location
REMOTE_SCORE = 100
MISSING_LOCATION_SCORE = 50

# (upper distance km, score at segment start, score at segment end)
# Each segment starts where the previous one ended, so the curve is continuous.
DECAY_SEGMENTS = [
    (20.0, 100.0, 70.0),
    (50.0, 70.0, 40.0),
    (100.0, 40.0, 10.0),
]
FULL_SCORE_RADIUS_KM = 5.0


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in kilometers."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distance_to_score(distance_km: float) -> float:
    """
    Map a distance to a 0-100 score with a piecewise-linear decay.

    - <= 5 km: 100
    - 5..20 km: 100 -> 70
    - 20..50 km: 70 -> 40
    - 50..100 km: 40 -> 10
    - > 100 km: 0

    Returns the unrounded score so callers can check continuity.
    """
    if not math.isfinite(distance_km):
        return 0.0
    if distance_km <= FULL_SCORE_RADIUS_KM:
        return 100.0

    lower = FULL_SCORE_RADIUS_KM
    for upper, start_score, end_score in DECAY_SEGMENTS:
        if distance_km <= upper:
            fraction = (distance_km - lower) / (upper - lower)
            return start_score - fraction * (start_score - end_score)
        lower = upper
    return 0.0


def location_score(
    candidate_location: Optional[GeoPoint],
    job_location: Optional[GeoPoint],
    remote_option: bool = False,
) -> int:
    """
    Score how close a candidate is to a job.

    Remote jobs score 100 regardless of distance. A missing point on either
    side scores a neutral 50 so sparse location data never sinks a match.
    """
    if remote_option:
        return REMOTE_SCORE
    if candidate_location is None or job_location is None:
        return MISSING_LOCATION_SCORE

    distance = haversine_km(candidate_location, job_location)
    return round_half_up(distance_to_score(distance))
