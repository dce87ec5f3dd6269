from pathlib import Path
from types import SimpleNamespace

import pytest

from spurilo.config import GeocodeSettings, SpuriloConfig


@pytest.fixture
def sample_gpx_path() -> Path:
    return Path(__file__).parent / "data" / "sample.gpx"


@pytest.fixture
def offline_config() -> SpuriloConfig:
    """Default settings with the network lookup switched off."""
    return SpuriloConfig(geocode=GeocodeSettings(enabled=False))


class FakeGeocoder:
    """Stands in for geopy's Photon geocoder."""

    def __init__(self, properties=None, error=None):
        self.properties = properties
        self.error = error
        self.calls = []

    def reverse(self, query, exactly_one=True, language=None):
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        if self.properties is None:
            return None
        return SimpleNamespace(raw={"type": "Feature", "properties": self.properties})


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder
