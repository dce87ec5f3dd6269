# spurilo/analyze/track.py
"""
Track analysis pipeline for spurilo

raw waypoints -> filter -> accumulate -> simplify -> summary

The start location lookup is done once, apart from the accumulation pass,
because it only depends on the first kept waypoint.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from spurilo.analyze.accumulate import accumulate
from spurilo.analyze.filter import filter_document
from spurilo.analyze.geodesic import distance_function
from spurilo.analyze.simplify import resolve_epsilon, simplify_vw
from spurilo.analyze.summary import TrackSummary, assemble_summary, build_metadata
from spurilo.config import SpuriloConfig
from spurilo.formats.gpx import GpxDocument, read_gpx
from spurilo.geocode.photon import lookup_location


def analyze_document(doc: GpxDocument, config: Optional[SpuriloConfig] = None, *,
                     geocoder: Any = None) -> TrackSummary:
    """
    Compute the TrackSummary of a parsed GPX document.

    Raises:
      StructuralError if the document has no waypoint.
    """
    cfg = config if config is not None else SpuriloConfig()
    distance = distance_function(cfg.filter.distance_method)

    kept = filter_document(doc, cfg.filter, distance=distance)
    location = lookup_location(kept[0][0], cfg.geocode, geocoder=geocoder)

    acc = accumulate(kept, distance)
    epsilon = resolve_epsilon(cfg.simplify, acc.uphill, acc.distance)
    simplified = simplify_vw(acc.profile, epsilon,
                             preserve_topology=cfg.simplify.preserve_topology)

    return assemble_summary(
        build_metadata(doc, kept, location),
        distance=acc.distance,
        uphill=acc.uphill,
        downhill=acc.downhill,
        profile=acc.profile,
        simplified_profile=simplified,
        epsilon=epsilon,
    )


def analyze_track(gpx_path: Path, config: Optional[SpuriloConfig] = None, *,
                  geocoder: Any = None) -> TrackSummary:
    return analyze_document(read_gpx(gpx_path), config, geocoder=geocoder)
