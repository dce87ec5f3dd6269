# spurilo/analyze/filter.py
"""
Waypoint noise filter.

GPS receivers report small position and elevation jitter even when standing
still. Summing that jitter inflates distance and climb, so each candidate
waypoint is compared with the last *kept* waypoint and dropped unless it moved
far enough, horizontally or vertically.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from spurilo.analyze.geodesic import DistanceFunction, distance_function
from spurilo.config import FilterSettings
from spurilo.errors import StructuralError
from spurilo.formats.gpx import GpxDocument, Waypoint


def elevation_delta(previous: Waypoint, current: Waypoint) -> Optional[float]:
    """Signed elevation change, or None unless both waypoints carry elevation."""
    if previous.ele is None or current.ele is None:
        return None
    return current.ele - previous.ele


def is_significant(
        previous: Waypoint, current: Waypoint, settings: FilterSettings,
        distance: DistanceFunction,
) -> bool:
    if distance(previous, current) > settings.distance_threshold_m:
        return True
    delta = elevation_delta(previous, current)
    return delta is not None and abs(delta) > settings.elevation_threshold_m


def filter_segment(
        points: Sequence[Waypoint], settings: FilterSettings, *,
        distance: Optional[DistanceFunction] = None,
) -> tuple[Waypoint, ...]:
    """
    Return the kept waypoints of one segment.

    The first waypoint is always kept and is never tested itself.
    """
    if not points:
        return ()
    if distance is None:
        distance = distance_function(settings.distance_method)

    previous = points[0]
    kept = [previous]
    for current in points[1:]:
        if is_significant(previous, current, settings, distance):
            kept.append(current)
            previous = current
    return tuple(kept)


def filter_segments(
        segments: Iterable[Sequence[Waypoint]], settings: FilterSettings, *,
        distance: Optional[DistanceFunction] = None,
) -> tuple[tuple[Waypoint, ...], ...]:
    """Filter every segment independently, dropping empty ones."""
    if distance is None:
        distance = distance_function(settings.distance_method)
    return tuple(
        filter_segment(points, settings, distance=distance)
        for points in segments
        if points
    )


def filter_document(
        doc: GpxDocument, settings: FilterSettings, *,
        distance: Optional[DistanceFunction] = None,
) -> tuple[tuple[Waypoint, ...], ...]:
    """
    Filter all segments of all tracks, in document order.

    Raises:
      StructuralError if the document holds no waypoint at all.
    """
    if not doc.tracks:
        raise StructuralError("GPX contains no track")
    segments = [seg.points for trk in doc.tracks for seg in trk.segments]
    if not segments:
        raise StructuralError("GPX tracks contain no segment")
    kept = filter_segments(segments, settings, distance=distance)
    if not kept:
        raise StructuralError("GPX segments contain no waypoint")
    return kept
