# spurilo/formats/gpx.py
"""
GPX reader for spurilo

This module is intentionally format-focused:
- GPX 1.0 / 1.1 namespace handling
- safely reading an ElementTree
- turning <trk>/<trkseg>/<trkpt> into immutable records

Key design principle:
  Keep statistics (filtering, accumulation, simplification) in spurilo.analyze,
  separate from GPX parsing (here).
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from spurilo.errors import InvalidGpxError

GPX_NAMESPACES = (
    "http://www.topografix.com/GPX/1/1",
    "http://www.topografix.com/GPX/1/0",
)


def _parse_gpx_time(text: str) -> Optional[_dt.datetime]:
    """
    Parse an ISO-8601 timestamp commonly found in GPX <time> nodes.

    Expected examples:
      - "2026-01-02T21:14:44Z"
      - "2026-01-02T21:14:44.123Z"
      - "2026-01-02T21:14:44+00:00"
    """
    if not text:
        return None
    s = text.strip()
    if not s:
        return None

    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    try:
        dt = _dt.datetime.fromisoformat(s)
    except ValueError:
        return None

    # Ensure tz-aware; if naive, assume UTC (conservative for GPX sources)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)

    return dt.astimezone(_dt.timezone.utc)


@dataclass(frozen=True)
class Waypoint:
    lat: float
    lon: float
    ele: float | None = None
    time: _dt.datetime | None = None


@dataclass(frozen=True)
class TrackSegment:
    points: tuple[Waypoint, ...] = ()


@dataclass(frozen=True)
class Track:
    name: Optional[str] = None
    description: Optional[str] = None
    segments: tuple[TrackSegment, ...] = ()


@dataclass(frozen=True)
class GpxDocument:
    """
    A parsed GPX file: file-level metadata plus ordered tracks.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    tracks: tuple[Track, ...] = ()


def _namespace(root: ET.Element) -> str:
    """Return the "{uri}" prefix of the root tag, or "" for un-namespaced GPX."""
    if root.tag.startswith("{"):
        return root.tag[: root.tag.index("}") + 1]
    return ""


def _text(elem: Optional[ET.Element]) -> Optional[str]:
    if elem is None or elem.text is None:
        return None
    s = elem.text.strip()
    return s or None


def _parse_waypoint(trkpt: ET.Element, ns: str) -> Waypoint:
    try:
        lat = float(trkpt.get("lat"))
        lon = float(trkpt.get("lon"))
    except (TypeError, ValueError) as e:
        raise InvalidGpxError(f"trkpt without valid lat/lon: {trkpt.attrib}") from e

    ele_text = _text(trkpt.find(f"{ns}ele"))
    try:
        ele = float(ele_text) if ele_text else None
    except ValueError:
        ele = None

    time = _parse_gpx_time(_text(trkpt.find(f"{ns}time")) or "")
    return Waypoint(lat=lat, lon=lon, ele=ele, time=time)


def parse_gpx(root: ET.Element) -> GpxDocument:
    """
    Build a GpxDocument from a GPX root element.

    File-level name/description come from <metadata> (GPX 1.1) or from the
    root element itself (GPX 1.0).
    """
    ns = _namespace(root)
    if root.tag != f"{ns}gpx" or (ns and ns[1:-1] not in GPX_NAMESPACES):
        raise InvalidGpxError(f"not a GPX document (root element {root.tag!r})")

    md = root.find(f"{ns}metadata")
    holder = md if md is not None else root
    name = _text(holder.find(f"{ns}name"))
    description = _text(holder.find(f"{ns}desc"))

    tracks = []
    for trk in root.findall(f"{ns}trk"):
        segments = tuple(
            TrackSegment(points=tuple(_parse_waypoint(p, ns) for p in seg.findall(f"{ns}trkpt")))
            for seg in trk.findall(f"{ns}trkseg")
        )
        tracks.append(Track(
            name=_text(trk.find(f"{ns}name")),
            description=_text(trk.find(f"{ns}desc")),
            segments=segments,
        ))

    return GpxDocument(name=name, description=description, tracks=tuple(tracks))


def read_gpx(path: Path) -> GpxDocument:
    """
    Read and parse a GPX file.

    Raises:
      InvalidGpxError, OSError
    """
    try:
        tree = ET.parse(path)
    except ET.ParseError as e:
        raise InvalidGpxError(f"{path}: {e}") from e
    return parse_gpx(tree.getroot())


def loads_gpx(text: str) -> GpxDocument:
    """Parse GPX content held in memory."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise InvalidGpxError(str(e)) from e
    return parse_gpx(root)
