"""
Great-circle distance helpers
"""

import math
from typing import Iterable, Sequence

from .config import EARTH_RADIUS_KM


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two coordinates.

    Args:
        lat1, lon1: First point in degrees
        lat2, lon2: Second point in degrees

    Returns:
        Distance in kilometers
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (math.sin(d_lat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(d_lon / 2) ** 2)

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def point_to_segment_distance(p_lat: float, p_lon: float,
                              a_lat: float, a_lon: float,
                              b_lat: float, b_lon: float) -> float:
    """
    Distance from point P to the segment AB.

    Works on the triangle PAB whose sides are great-circle distances.
    The perpendicular comes from Heron's area; when the foot of the
    perpendicular lands outside AB the nearer endpoint is used instead.
    """
    pa = haversine(p_lat, p_lon, a_lat, a_lon)
    pb = haversine(p_lat, p_lon, b_lat, b_lon)
    ab = haversine(a_lat, a_lon, b_lat, b_lon)

    if ab < 1:
        return min(pa, pb)

    # Obtuse angle at A or B puts the foot outside the segment
    if pa * pa + ab * ab <= pb * pb:
        return pa
    if pb * pb + ab * ab <= pa * pa:
        return pb

    s = (pa + pb + ab) / 2
    area = math.sqrt(max(0.0, s * (s - pa) * (s - pb) * (s - ab)))
    return min(2 * area / ab, pa, pb)


def polyline_proximity(points: Iterable[tuple[float, float]],
                       polyline: Sequence[Sequence[float]]) -> float:
    """
    Smallest distance from any of the (lat, lon) points to a polyline.

    Polyline vertices are (lon, lat) pairs, GeoJSON order.
    """
    points = list(points)
    best = math.inf

    for i in range(len(polyline) - 1):
        a_lon, a_lat = polyline[i][0], polyline[i][1]
        b_lon, b_lat = polyline[i + 1][0], polyline[i + 1][1]

        for p_lat, p_lon in points:
            dist = point_to_segment_distance(p_lat, p_lon, a_lat, a_lon, b_lat, b_lon)
            if dist < best:
                best = dist

    return best


def midpoint(lat1: float, lon1: float, lat2: float, lon2: float) -> tuple[float, float]:
    """Arithmetic midpoint in degrees, taking the short way across 180°"""
    if abs(lon1 - lon2) > 180:
        lon2 += 360 if lon2 < lon1 else -360
    lon = (lon1 + lon2) / 2
    if lon > 180:
        lon -= 360
    elif lon < -180:
        lon += 360
    return (lat1 + lat2) / 2, lon


def format_distance(km: float) -> str:
    """Format distance with units"""
    if km < 1:
        return f"{km * 1000:.0f} m"
    return f"{km:.2f} km"


def format_time(ms: float) -> str:
    """Format a duration given in milliseconds"""
    if ms < 1:
        return f"{ms * 1000:.2f} µs"
    if ms < 1000:
        return f"{ms:.2f} ms"
    return f"{ms / 1000:.2f} s"
