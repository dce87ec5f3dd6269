# spurilo/analyze/simplify.py
"""
Elevation profile simplification (Visvalingam-Whyatt).

The profile is treated as a 2-D curve, x = cumulative distance and
y = elevation. Each interior point is weighted by the area of the triangle it
forms with its two neighbours; the smallest triangle is removed and its
neighbours are re-weighted, until every remaining triangle is at least
`epsilon` square units.

The input profile is never modified; a new, shorter tuple is returned.
"""

from __future__ import annotations

import heapq
import math
from typing import Sequence

from spurilo.analyze.profile import ElevationProfile, ElevationSample
from spurilo.config import SimplifySettings
from spurilo.errors import ConfigurationError


def triangle_area(a: ElevationSample, b: ElevationSample, c: ElevationSample) -> float:
    """Unsigned area of the triangle a-b-c."""
    cross = ((b.distance - a.distance) * (c.elevation - a.elevation)
             - (c.distance - a.distance) * (b.elevation - a.elevation))
    return abs(cross) / 2.0


def derived_epsilon(uphill: float, distance: float, base_distance: float = 5.0) -> float:
    """
    Epsilon scaled to how hilly the track is.

    A triangle of `base_distance` meters whose height is the track's average
    climb over that base:
        0.5 * base * (uphill / (distance / 2) * base)

    A track with no distance gets epsilon 0 (nothing is removed).
    """
    if distance <= 0:
        return 0.0
    return 0.5 * base_distance * (uphill / (distance / 2.0) * base_distance)


def resolve_epsilon(settings: SimplifySettings, uphill: float, distance: float) -> float:
    if settings.epsilon is not None:
        return settings.epsilon
    return derived_epsilon(uphill, distance, settings.base_distance)


# ---------------------------------------------------------------------------
# Segment intersection (topology check)
# ---------------------------------------------------------------------------
def _orientation(p: ElevationSample, q: ElevationSample, r: ElevationSample) -> int:
    v = ((q.distance - p.distance) * (r.elevation - p.elevation)
         - (q.elevation - p.elevation) * (r.distance - p.distance))
    if v > 0:
        return 1
    if v < 0:
        return -1
    return 0


def _on_segment(p: ElevationSample, q: ElevationSample, r: ElevationSample) -> bool:
    """True if r, known to be collinear with p-q, lies within the p-q bounding box."""
    return (min(p.distance, q.distance) <= r.distance <= max(p.distance, q.distance)
            and min(p.elevation, q.elevation) <= r.elevation <= max(p.elevation, q.elevation))


def segments_intersect(a: ElevationSample, b: ElevationSample,
                       c: ElevationSample, d: ElevationSample) -> bool:
    """True if segment a-b touches or crosses segment c-d."""
    o1 = _orientation(a, b, c)
    o2 = _orientation(a, b, d)
    o3 = _orientation(c, d, a)
    o4 = _orientation(c, d, b)

    if o1 != o2 and o3 != o4:
        return True
    if o1 == 0 and _on_segment(a, b, c):
        return True
    if o2 == 0 and _on_segment(a, b, d):
        return True
    if o3 == 0 and _on_segment(c, d, a):
        return True
    if o4 == 0 and _on_segment(c, d, b):
        return True
    return False


def _would_cross(points: Sequence[ElevationSample], prev: list[int], nxt: list[int],
                 p: int, q: int) -> bool:
    """
    Would the shortcut p-q cross another live segment of the curve?

    Profile distances never decrease, so only segments whose x-range overlaps
    [x_p, x_q] can be hit; those sit right before p and right after q.
    Segments sharing p or q as an endpoint are not tested.
    """
    a, b = points[p], points[q]

    j = prev[p]
    while j != -1 and prev[j] != -1 and points[j].distance >= a.distance:
        if segments_intersect(a, b, points[prev[j]], points[j]):
            return True
        j = prev[j]

    j = nxt[q]
    while j != -1 and nxt[j] != -1 and points[j].distance <= b.distance:
        if segments_intersect(a, b, points[j], points[nxt[j]]):
            return True
        j = nxt[j]

    return False


# ---------------------------------------------------------------------------
# Visvalingam-Whyatt
# ---------------------------------------------------------------------------
def simplify_vw(profile: Sequence[ElevationSample], epsilon: float, *,
                preserve_topology: bool = True) -> ElevationProfile:
    """
    Remove every point whose triangle area stays below `epsilon`.

    - The first and last samples are always kept.
    - Points are eliminated smallest area first, ties broken by position, so
      a larger epsilon never keeps more points than a smaller one.
    - With preserve_topology, a point is kept if dropping it would make the
      curve cross itself. Distances never decrease along a profile, so this
      can only happen where several samples share a distance; on ordinary
      profiles both variants give the same result.
    """
    if epsilon < 0 or math.isnan(epsilon):
        raise ConfigurationError(f"epsilon must be a non-negative number, got {epsilon!r}")

    points = tuple(ElevationSample(*s) for s in profile)
    n = len(points)
    if n < 3 or epsilon == 0:
        return points

    prev = list(range(-1, n - 1))
    nxt = list(range(1, n + 1))
    nxt[-1] = -1
    removed = [False] * n
    areas = [math.inf] * n

    heap: list[tuple[float, int]] = []
    for i in range(1, n - 1):
        areas[i] = triangle_area(points[i - 1], points[i], points[i + 1])
        heap.append((areas[i], i))
    heapq.heapify(heap)

    while heap:
        area, i = heapq.heappop(heap)
        if removed[i] or area != areas[i]:
            continue  # stale
        if area >= epsilon:
            break

        p, q = prev[i], nxt[i]
        if preserve_topology and _would_cross(points, prev, nxt, p, q):
            # re-weighted only if a neighbour goes away later
            areas[i] = math.inf
            continue

        removed[i] = True
        nxt[p] = q
        prev[q] = p

        for j in (p, q):
            if prev[j] != -1 and nxt[j] != -1:
                areas[j] = triangle_area(points[prev[j]], points[j], points[nxt[j]])
                heapq.heappush(heap, (areas[j], j))

    return tuple(pt for pt, gone in zip(points, removed) if not gone)

