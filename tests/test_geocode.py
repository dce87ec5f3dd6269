import pytest
from geopy.exc import GeocoderTimedOut, GeocoderUnavailable
from geopy.geocoders import Photon

from spurilo.config import GeocodeSettings
from spurilo.errors import EnrichmentError
from spurilo.formats.gpx import Waypoint
from spurilo.geocode import photon
from spurilo.geocode.photon import format_location, lookup_location, reverse_geocode

START = Waypoint(45.9, 6.12, ele=450)
SETTINGS = GeocodeSettings()


def test_format_location_joins_known_fields():
    props = {"name": "Le Pâquier", "street": "Avenue d'Albigny", "city": "Annecy",
             "country": "France", "postcode": "74000"}
    assert format_location(props) == "Le Pâquier, Avenue d'Albigny, Annecy, France"


def test_format_location_trims_empty_fields_and_quotes():
    props = {"name": '"Col"', "street": "", "city": None, "country": " France "}
    assert format_location(props) == "Col, France"


def test_format_location_nothing_usable():
    assert format_location({}) is None
    assert format_location({"name": '""'}) is None


def test_lookup_queries_lat_lon_once(fake_geocoder):
    geo = fake_geocoder(properties={"city": "Annecy", "country": "France"})
    assert lookup_location(START, SETTINGS, geocoder=geo) == "Annecy, France"
    assert geo.calls == [(45.9, 6.12)]


def test_lookup_without_result(fake_geocoder):
    assert lookup_location(START, SETTINGS, geocoder=fake_geocoder()) is None


@pytest.mark.parametrize("error", [GeocoderTimedOut("slow"), GeocoderUnavailable("down")])
def test_lookup_failure_is_a_warning(fake_geocoder, capsys, error):
    geo = fake_geocoder(error=error)
    assert lookup_location(START, SETTINGS, geocoder=geo) is None
    assert len(geo.calls) == 1
    assert "Warning:" in capsys.readouterr().err


def test_reverse_geocode_raises_enrichment_error(fake_geocoder):
    with pytest.raises(EnrichmentError):
        reverse_geocode(6.12, 45.9, SETTINGS, geocoder=fake_geocoder(error=GeocoderTimedOut()))


def test_malformed_payload():
    class Odd:
        raw = ["not", "a", "feature"]

    class OddGeocoder:
        def reverse(self, query, exactly_one=True, language=None):
            return Odd()

    with pytest.raises(EnrichmentError):
        reverse_geocode(6.12, 45.9, SETTINGS, geocoder=OddGeocoder())
    assert lookup_location(START, SETTINGS, geocoder=OddGeocoder()) is None


def test_error_body_from_photon_is_a_warning(monkeypatch, capsys):
    # the service answers 200 with an error object instead of a FeatureCollection
    geo = Photon(user_agent="spurilo-tests")
    monkeypatch.setattr(geo, "_call_geocoder",
                        lambda url, callback, **kwargs: callback({"message": "oops"}))

    with pytest.raises(EnrichmentError):
        reverse_geocode(6.12, 45.9, SETTINGS, geocoder=geo)
    capsys.readouterr()

    assert lookup_location(START, SETTINGS, geocoder=geo) is None
    assert "Warning:" in capsys.readouterr().err


def test_disabled_lookup_does_not_call_the_service(fake_geocoder):
    geo = fake_geocoder(properties={"city": "Annecy"})
    assert lookup_location(START, GeocodeSettings(enabled=False), geocoder=geo) is None
    assert geo.calls == []


def test_default_geocoder_is_photon(monkeypatch):
    created = {}

    class FakePhoton:
        def __init__(self, **kwargs):
            created.update(kwargs)

        def reverse(self, query, exactly_one=True, language=None):
            created["language"] = language
            return None

    monkeypatch.setattr(photon, "Photon", FakePhoton)
    assert reverse_geocode(6.12, 45.9, GeocodeSettings(timeout_s=2.0)) is None
    assert created == {"domain": "photon.komoot.io", "timeout": 2.0,
                       "user_agent": "spurilo", "language": "fr"}
