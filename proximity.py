"""
Nearby-resource filtering and radar projection.

All functions are pure. The observer coordinate is optional everywhere:
``None`` means no location fix yet, which yields empty results and a
centered projection rather than an error.
"""

from __future__ import annotations

from math import atan2, cos, radians, sin, sqrt
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from config import CONFIG
from models import Coordinate, ResourcePoint, ResourceStatus, ResourceType

EARTH_RADIUS_KM = 6371.0
GRID_CENTER = 50.0

NEARBY_COLUMNS = ['id', 'name', 'type', 'status', 'lat', 'lon', 'distance_km', 'distance', 'x', 'y']


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates (haversine).

    Loses precision for near-antipodal points; kept as-is so results match
    the values users have already seen on the grid.
    """
    dlat = radians(b.lat - a.lat)
    dlon = radians(b.lon - a.lon)
    h = sin(dlat / 2) ** 2 + cos(radians(a.lat)) * cos(radians(b.lat)) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * atan2(sqrt(h), sqrt(1 - h))


def filter_nearby(observer: Coordinate | None,
                  candidates: Iterable[ResourcePoint],
                  max_distance_km: float = 5.0) -> list[ResourcePoint]:
    """Points within ``max_distance_km`` (inclusive), in their original order."""
    if observer is None:
        return []
    return [p for p in candidates if distance_km(observer, p.coordinate) <= max_distance_km]


def project(observer: Coordinate | None, point: Coordinate) -> tuple[float, float]:
    """Map a coordinate onto the 0-100 radar grid centered on the observer.

    Linear and only meaningful for small offsets. Results are not clipped.
    """
    if observer is None:
        return (GRID_CENTER, GRID_CENTER)
    scale = CONFIG["MAP_SCALE"]
    x = GRID_CENTER + (point.lon - observer.lon) * scale
    y = GRID_CENTER - (point.lat - observer.lat) * scale
    return (x, y)


def unproject(observer: Coordinate, x: float, y: float) -> Coordinate:
    """Inverse of :func:`project`."""
    scale = CONFIG["MAP_SCALE"]
    return Coordinate(
        lat=observer.lat + (GRID_CENTER - y) / scale,
        lon=observer.lon + (x - GRID_CENTER) / scale,
    )


def format_distance(km: float) -> str:
    if km < 1:
        return f"{int(round(km * 1000))}m"
    return f"{km:.1f}km"


def nearby_frame(observer: Coordinate | None,
                 resources: Sequence[ResourcePoint],
                 max_distance_km: float = 5.0) -> pd.DataFrame:
    """Tabular view of the nearby resources with distance and grid position."""
    nearby = filter_nearby(observer, resources, max_distance_km)
    if not nearby:
        return pd.DataFrame(columns=NEARBY_COLUMNS)

    rows = []
    for res in nearby:
        km = distance_km(observer, res.coordinate)
        x, y = project(observer, res.coordinate)
        rows.append({
            'id': res.id,
            'name': res.name,
            'type': res.type.value,
            'status': res.status.value,
            'lat': res.coordinate.lat,
            'lon': res.coordinate.lon,
            'distance_km': km,
            'distance': format_distance(km),
            'x': x,
            'y': y,
        })
    return pd.DataFrame(rows, columns=NEARBY_COLUMNS)


# Offsets in degrees from the observer
_FIXED_NEARBY = [
    ('h1', 'Hospital A', ResourceType.MEDICAL, ResourceStatus.OPERATIONAL, 0.005, 0.003,
     'Emergency ward open'),
    ('h2', 'Hospital B', ResourceType.MEDICAL, ResourceStatus.CROWDED, -0.004, -0.002,
     'Long wait times'),
    ('d1', 'Danger Zone', ResourceType.DANGER, ResourceStatus.CRITICAL, 0.002, -0.004,
     'Avoid area'),
]


def generate_nearby_resources(observer: Coordinate, extra: int = 0) -> list[ResourcePoint]:
    """Simulated feed of resources around the observer.

    The same observer coordinate always produces the same points.
    """
    resources = [
        ResourcePoint(
            id=rid, name=name, type=rtype, status=status,
            coordinate=Coordinate(lat=observer.lat + dlat, lon=observer.lon + dlon),
            notes=notes, last_updated='Live',
        )
        for rid, name, rtype, status, dlat, dlon, notes in _FIXED_NEARBY
    ]
    if extra <= 0:
        return resources

    seed_value = abs(int(observer.lat * 1000 + observer.lon * 1000)) % (2**31)
    rng = np.random.default_rng(seed_value)
    types = list(ResourceType)
    statuses = list(ResourceStatus)

    for i in range(extra):
        # Stay inside the visible grid (+-0.01 deg is the grid edge at the default scale)
        dlat, dlon = rng.uniform(-0.009, 0.009, size=2)
        rtype = types[int(rng.integers(len(types)))]
        status = statuses[int(rng.integers(len(statuses)))]
        resources.append(ResourcePoint(
            id=f"sim{i + 1}",
            name=f"{rtype.value.title()} Point {i + 1}",
            type=rtype,
            status=status,
            coordinate=Coordinate(lat=observer.lat + float(dlat), lon=observer.lon + float(dlon)),
            notes='Reported by field sensors',
            last_updated='Live',
        ))
    return resources
