# spurilo/analyze/summary.py
"""
Track metadata merge and the final, immutable analysis result.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable, Optional, TypeVar

from spurilo.analyze.profile import ElevationProfile, elevation_changes
from spurilo.formats.gpx import GpxDocument, Waypoint

T = TypeVar("T")


def first_present(*candidates: Optional[T]) -> Optional[T]:
    """
    Return the first candidate that is set.

    Strings must also be non-blank. Candidates are given highest priority first.
    """
    for value in candidates:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


@dataclass(frozen=True)
class TrackMetadata:
    name: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[dt.datetime] = None
    location: Optional[str] = None


def build_metadata(
        doc: GpxDocument,
        kept: Iterable[Iterable[Waypoint]],
        location: Optional[str] = None,
) -> TrackMetadata:
    """
    Merge descriptive fields.

    Precedence for name and description: file-level <metadata> first, then the
    first track. The start time is the first timestamp found among kept
    waypoints, in track order.
    """
    first_trk = doc.tracks[0] if doc.tracks else None
    start_time = next((wp.time for seg in kept for wp in seg if wp.time is not None), None)

    return TrackMetadata(
        name=first_present(doc.name, first_trk.name if first_trk else None),
        description=first_present(doc.description, first_trk.description if first_trk else None),
        start_time=start_time,
        location=first_present(location),
    )


@dataclass(frozen=True)
class TrackSummary:
    """
    Result of one analysis run.

    `uphill` / `downhill` are accumulated over the filtered waypoints.
    The same statistics recomputed on the raw or simplified profile are
    distinct numbers, available as properties.
    """

    metadata: TrackMetadata
    distance: float
    uphill: float
    downhill: float
    profile: ElevationProfile
    simplified_profile: ElevationProfile
    epsilon: float = 0.0

    @property
    def name(self) -> Optional[str]:
        return self.metadata.name

    @property
    def description(self) -> Optional[str]:
        return self.metadata.description

    @property
    def start_time(self) -> Optional[dt.datetime]:
        return self.metadata.start_time

    @property
    def location(self) -> Optional[str]:
        return self.metadata.location

    @property
    def profile_uphill(self) -> float:
        return elevation_changes(self.profile)[0]

    @property
    def profile_downhill(self) -> float:
        return elevation_changes(self.profile)[1]

    @property
    def simplified_uphill(self) -> float:
        return elevation_changes(self.simplified_profile)[0]

    @property
    def simplified_downhill(self) -> float:
        return elevation_changes(self.simplified_profile)[1]


def assemble_summary(
        metadata: TrackMetadata, *,
        distance: float, uphill: float, downhill: float,
        profile: ElevationProfile, simplified_profile: ElevationProfile,
        epsilon: float = 0.0,
) -> TrackSummary:
    return TrackSummary(
        metadata=metadata,
        distance=distance,
        uphill=uphill,
        downhill=downhill,
        profile=tuple(profile),
        simplified_profile=tuple(simplified_profile),
        epsilon=epsilon,
    )
