"""Nearby-report lookups for priority classification and the nearby feed.

The storage layer narrows candidates with a lat/lon bounding box and then
keeps only those whose great-circle (haversine) distance is within the
radius. The box is derived from the same sphere as the distance, widened
by a small margin, so nothing inside the radius is lost to the prefilter.
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from civic_triage.config import PROXIMITY_SETTINGS
from civic_triage.models.db import Report
from civic_triage.utils.time import as_utc, utc_now

# Relative widening of the prefilter box; the haversine check is exact.
_BOX_MARGIN = 1.001


def _earth_radius() -> float:
    return float(PROXIMITY_SETTINGS["earth_radius_meters"])


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two WGS84 points in meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * _earth_radius() * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1 - a)))


def bounding_box(latitude: float, longitude: float, radius_meters: float) -> tuple[float, float, float, float]:
    """Return (min_lat, max_lat, min_lon, max_lon) enclosing the radius.

    Longitudes are not normalized: a box crossing the antimeridian has
    min_lon < -180 or max_lon > 180 (see longitude_ranges). When the circle
    reaches a pole the full longitude range is returned.
    """
    angular = (radius_meters / _earth_radius()) * _BOX_MARGIN
    d_lat = math.degrees(angular)
    min_lat = max(-90.0, latitude - d_lat)
    max_lat = min(90.0, latitude + d_lat)

    # Widest longitude offset of a spherical cap: asin(sin(r) / cos(lat)).
    sin_angular = math.sin(min(angular, math.pi / 2))
    cos_lat = math.cos(math.radians(latitude))
    if sin_angular >= cos_lat:
        return min_lat, max_lat, -180.0, 180.0
    d_lon = math.degrees(math.asin(sin_angular / cos_lat))
    return min_lat, max_lat, longitude - d_lon, longitude + d_lon


def longitude_ranges(min_lon: float, max_lon: float) -> List[Tuple[float, float]]:
    """Split a longitude span into ranges inside [-180, 180]."""
    if max_lon - min_lon >= 360.0:
        return [(-180.0, 180.0)]
    if min_lon < -180.0:
        return [(min_lon + 360.0, 180.0), (-180.0, max_lon)]
    if max_lon > 180.0:
        return [(min_lon, 180.0), (-180.0, max_lon - 360.0)]
    return [(min_lon, max_lon)]


def _box_filter(latitude: float, longitude: float, radius_meters: float):
    min_lat, max_lat, min_lon, max_lon = bounding_box(latitude, longitude, radius_meters)
    lon_clauses = [Report.longitude.between(lo, hi) for lo, hi in longitude_ranges(min_lon, max_lon)]
    return and_(
        Report.latitude.is_not(None),
        Report.longitude.is_not(None),
        Report.latitude.between(min_lat, max_lat),
        or_(*lon_clauses),
    )


def count_nearby_unresolved(
    db: Session,
    latitude: Optional[float],
    longitude: Optional[float],
    *,
    radius_meters: Optional[float] = None,
    window_days: Optional[float] = None,
    now: Optional[datetime] = None,
    exclude_report_id: Optional[int] = None,
) -> int:
    """Count unresolved reports near a point within the recency window.

    Returns 0 when coordinates are absent. Database errors propagate to the
    caller, which owns the fallback policy.
    """
    if latitude is None or longitude is None:
        return 0
    radius = float(radius_meters if radius_meters is not None else PROXIMITY_SETTINGS["radius_meters"])
    days = float(window_days if window_days is not None else PROXIMITY_SETTINGS["window_days"])
    since = (now or utc_now()) - timedelta(days=days)

    stmt = select(Report.id, Report.latitude, Report.longitude).where(
        Report.is_resolved.is_(False),
        Report.created_at >= since,
        _box_filter(latitude, longitude, radius),
    )
    if exclude_report_id is not None:
        stmt = stmt.where(Report.id != exclude_report_id)

    return sum(
        1
        for _, lat, lon in db.execute(stmt)
        if haversine_meters(latitude, longitude, lat, lon) <= radius
    )


def find_nearby_reports(
    db: Session,
    latitude: float,
    longitude: float,
    radius_meters: float,
    *,
    limit: int,
    offset: int = 0,
) -> List[Tuple[Report, float]]:
    """Reports (resolved or not) within the radius as (report, meters) pairs.

    Ordered by distance ascending, then most recent first.
    """
    candidates = db.execute(
        select(Report).where(_box_filter(latitude, longitude, radius_meters))
    ).scalars()

    within: List[Tuple[Report, float]] = []
    for report in candidates:
        distance = haversine_meters(latitude, longitude, report.latitude, report.longitude)
        if distance <= radius_meters:
            within.append((report, distance))

    def recency(report: Report) -> float:
        created = as_utc(report.created_at)
        return -created.timestamp() if created is not None else float("inf")

    within.sort(key=lambda pair: (pair[1], recency(pair[0])))
    return within[offset:offset + limit]


__all__ = [
    "haversine_meters",
    "bounding_box",
    "longitude_ranges",
    "count_nearby_unresolved",
    "find_nearby_reports",
]
