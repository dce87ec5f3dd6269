# spurilo/analyze/accumulate.py
"""
Distance / climb accumulation over kept waypoints.

The running totals are an explicit, immutable state record folded over the
waypoint stream with `step()`; nothing is mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence

from spurilo.analyze.filter import elevation_delta
from spurilo.analyze.geodesic import DistanceFunction, geodesic_distance
from spurilo.analyze.profile import ElevationProfile, ElevationSample
from spurilo.formats.gpx import Waypoint


@dataclass(frozen=True)
class AccumulatorState:
    distance: float = 0.0
    uphill: float = 0.0
    downhill: float = 0.0
    previous: Optional[Waypoint] = None


@dataclass(frozen=True)
class Accumulation:
    distance: float
    uphill: float
    downhill: float
    profile: ElevationProfile


def step(
        state: AccumulatorState, current: Waypoint,
        distance: DistanceFunction = geodesic_distance,
) -> tuple[AccumulatorState, Optional[ElevationSample]]:
    """
    Advance `state` by one kept waypoint.

    Returns the new state and the profile sample emitted for `current`
    (None when it has no elevation).
    """
    total = state.distance
    uphill = state.uphill
    downhill = state.downhill

    if state.previous is not None:
        total += distance(state.previous, current)
        delta = elevation_delta(state.previous, current)
        if delta is not None:
            if delta >= 0:
                uphill += delta
            else:
                downhill -= delta

    sample = ElevationSample(total, current.ele) if current.ele is not None else None
    new_state = AccumulatorState(distance=total, uphill=uphill, downhill=downhill, previous=current)
    return new_state, sample


def accumulate(
        segments: Iterable[Sequence[Waypoint]],
        distance: DistanceFunction = geodesic_distance,
) -> Accumulation:
    """
    Fold `step` over kept segments.

    Pairing restarts at every segment boundary: the gap between two recorded
    segments adds neither distance nor climb.
    """
    state = AccumulatorState()
    profile: list[ElevationSample] = []
    for points in segments:
        state = replace(state, previous=None)
        for wp in points:
            state, sample = step(state, wp, distance)
            if sample is not None:
                profile.append(sample)

    return Accumulation(
        distance=state.distance,
        uphill=state.uphill,
        downhill=state.downhill,
        profile=tuple(profile),
    )
