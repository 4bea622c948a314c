"""
Point-to-point and point-to-polyline distances for city-scale queries.

Accuracy model: every query is evaluated in one local equirectangular frame
anchored at the query point,

    dx = dlon * 111320 * cos(lat0)
    dy = dlat * 111320

and distances are Euclidean in that frame. Against haversine the relative
error stays near 0.1% for separations of a few kilometres, i.e. well under a
meter for typical "nearest road" distances. Not for long-haul geodesics.
"""

import math
from collections.abc import Sequence

import numpy as np

from roadsnap.domain.entities.geography import Coord

EARTH_RADIUS_M = 6371000.0
M_PER_DEG = 111320.0


def haversine_m(a: Coord, b: Coord) -> float:
    """Great-circle distance in meters between two (lon, lat) points."""
    lon1, lat1 = a
    lon2, lat2 = b
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def _haversine_many(p: Coord, lons: np.ndarray, lats: np.ndarray) -> np.ndarray:
    lon0, lat0 = p
    phi0 = math.radians(lat0)
    phi = np.radians(lats)
    dphi = phi - phi0
    dlmb = np.radians(lons - lon0)
    h = np.sin(dphi / 2) ** 2 + math.cos(phi0) * np.cos(phi) * np.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_M * np.arctan2(np.sqrt(h), np.sqrt(1 - h))


def _edge_distances_m(p: Coord, v: np.ndarray) -> np.ndarray:
    # distance from p to each edge v[i] -> v[i+1], in the frame centered on p
    lon0, lat0 = p
    kx = M_PER_DEG * math.cos(math.radians(lat0))
    x = (v[:, 0] - lon0) * kx
    y = (v[:, 1] - lat0) * M_PER_DEG

    ax, ay = x[:-1], y[:-1]
    dx, dy = x[1:] - ax, y[1:] - ay
    len2 = dx * dx + dy * dy
    degenerate = len2 == 0.0

    with np.errstate(invalid="ignore", divide="ignore"):
        t = np.clip(-(ax * dx + ay * dy) / len2, 0.0, 1.0)
    out = np.hypot(ax + t * dx, ay + t * dy)

    if degenerate.any():
        # zero-length edge: plain point-to-point distance to that vertex
        out[degenerate] = _haversine_many(p, v[:-1, 0][degenerate], v[:-1, 1][degenerate])
    return out


def point_to_segment_m(p: Coord, a: Coord, b: Coord) -> float:
    """Distance in meters from p to the closed segment a-b (clamped projection)."""
    v = np.array((a, b), dtype=float)
    return float(_edge_distances_m(p, v)[0])


def point_to_polyline_m(p: Coord, polyline: np.ndarray | Sequence[Coord]) -> float:
    """Minimum edge distance over the polyline; +inf when it has fewer than 2 vertices."""
    v = polyline if isinstance(polyline, np.ndarray) else np.asarray(polyline, dtype=float)
    if v.ndim != 2 or v.shape[0] < 2:
        return math.inf
    return float(_edge_distances_m(p, v).min())


def meters_to_deg(d_m: float, lat: float) -> float:
    """Degree radius whose square around a point at `lat` covers a circle of d_m meters."""
    c = max(math.cos(math.radians(lat)), 1e-6)
    return d_m / (M_PER_DEG * c)
