# spurilo/geocode/photon.py
"""
Start location lookup via the Photon reverse geocoder (OpenStreetMap data).

The lookup is a best-effort enrichment: any failure is reported as a warning
and the location is left unset.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from geopy.exc import GeopyError
from geopy.geocoders import Photon

from spurilo.config import GeocodeSettings
from spurilo.errors import EnrichmentError
from spurilo.formats.gpx import Waypoint
from spurilo.util.logging import warn

LOCATION_FIELDS = ("name", "street", "city", "country")


def format_location(properties: Mapping[str, Any]) -> Optional[str]:
    """Join name, street, city and country, skipping empty fields and quotes."""
    parts = []
    for key in LOCATION_FIELDS:
        value = properties.get(key)
        if value is None:
            continue
        s = str(value).replace('"', "").strip()
        if s:
            parts.append(s)
    return ", ".join(parts) or None


def make_geocoder(settings: GeocodeSettings) -> Photon:
    return Photon(
        domain=settings.domain,
        timeout=settings.timeout_s,
        user_agent=settings.user_agent,
    )


def reverse_geocode(lon: float, lat: float, settings: GeocodeSettings, *,
                    geocoder: Any = None) -> Optional[Mapping[str, Any]]:
    """
    Return the properties of the closest Photon feature, or None.

    Raises:
      EnrichmentError when the service is unreachable or the answer is malformed.
    """
    if geocoder is None:
        geocoder = make_geocoder(settings)
    try:
        found = geocoder.reverse((lat, lon), exactly_one=True, language=settings.language)
    except GeopyError as e:
        raise EnrichmentError(f"reverse geocoding failed: {e}") from e
    except (KeyError, TypeError, ValueError) as e:
        # geopy parses the JSON body without checking its shape
        raise EnrichmentError(f"malformed reverse geocoding response: {e!r}") from e

    if found is None:
        return None
    raw = getattr(found, "raw", None)
    props = raw.get("properties") if isinstance(raw, Mapping) else None
    if not isinstance(props, Mapping):
        raise EnrichmentError(f"unexpected reverse geocoding payload: {raw!r}")
    return props


def lookup_location(waypoint: Waypoint, settings: GeocodeSettings, *,
                    geocoder: Any = None) -> Optional[str]:
    """One attempt, no retry. Failures become a warning and None."""
    if not settings.enabled:
        return None
    try:
        props = reverse_geocode(waypoint.lon, waypoint.lat, settings, geocoder=geocoder)
    except EnrichmentError as e:
        warn(f"{e}; location left unset")
        return None
    return format_location(props) if props is not None else None
