# spurilo/analyze/profile.py
"""
Elevation profile samples and the climb statistics derived from them.
"""

from __future__ import annotations

from typing import NamedTuple, Sequence


class ElevationSample(NamedTuple):
    distance: float   # cumulative meters from the track start
    elevation: float  # meters


ElevationProfile = tuple[ElevationSample, ...]


def elevation_changes(profile: Sequence[ElevationSample]) -> tuple[float, float]:
    """Return (uphill, downhill) summed over consecutive samples of `profile`."""
    uphill = 0.0
    downhill = 0.0
    for s0, s1 in zip(profile, profile[1:]):
        diff = s1.elevation - s0.elevation
        if diff >= 0:
            uphill += diff
        else:
            downhill -= diff
    return uphill, downhill
