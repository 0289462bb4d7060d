import pytest
import requests

from berlin_schools import utils
from berlin_schools.cache import TTLCache
from berlin_schools.exceptions import FetchError
from berlin_schools.sources import api, geojson

from conftest import FakeResponse, school_feature


def _patch_get(monkeypatch, response):
    calls = []

    def fake_get(url, timeout=None, **kwargs):
        calls.append(url)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(utils.requests, "get", fake_get)
    return calls


def test_fetch_berlin_schools_maps_properties(monkeypatch):
    payload = {
        "type": "FeatureCollection",
        "features": [
            school_feature("01B01", lon=13.38, lat=52.53, internet="https://example.org"),
            school_feature("02G03", traeger="privat", bezirk="Friedrichshain-Kreuzberg"),
        ],
    }
    calls = _patch_get(monkeypatch, FakeResponse(payload))

    schools = geojson.fetch_berlin_schools()

    assert len(calls) == 1
    assert "TYPENAMES=fis%3Aschulen" in calls[0]
    first = schools[0]
    assert first.school_number == "01B01"
    assert first.id == "schulen.01B01"
    assert (first.longitude, first.latitude) == (13.38, 52.53)
    assert first.bbox == (13.38, 52.53, 13.38, 52.53)
    assert first.website == "https://example.org"
    assert first.accepts_after_4th_grade is False
    assert first.construction_history is None
    assert schools[1].operator == "privat"


def test_fetch_berlin_schools_uses_typenames_env(monkeypatch):
    monkeypatch.setenv("WFS_TYPENAMES", "fis:other")
    calls = _patch_get(monkeypatch, FakeResponse({"features": []}))

    assert geojson.fetch_berlin_schools() == []
    assert "TYPENAMES=fis%3Aother" in calls[0]


def test_fetch_berlin_schools_skips_features_without_bsn(monkeypatch, caplog):
    feature = school_feature("01B01")
    feature["properties"]["bsn"] = "  "
    _patch_get(monkeypatch, FakeResponse({"features": [feature, school_feature("03K01")]}))

    schools = geojson.fetch_berlin_schools()

    assert [s.school_number for s in schools] == ["03K01"]
    assert "without bsn" in caplog.text


def test_missing_features_array_is_fetch_error(monkeypatch):
    _patch_get(monkeypatch, FakeResponse({"type": "FeatureCollection", "features": "nope"}))

    with pytest.raises(FetchError) as excinfo:
        geojson.fetch_berlin_schools()

    assert excinfo.value.source == "schools"
    assert "features" in excinfo.value.reason


def test_http_error_is_fetch_error_with_status(monkeypatch):
    _patch_get(monkeypatch, FakeResponse(status_code=503, reason="Service Unavailable"))

    with pytest.raises(FetchError) as excinfo:
        api.fetch_construction_projects()

    assert excinfo.value.status == 503
    assert excinfo.value.source == "construction-projects"
    assert "503 Service Unavailable" in str(excinfo.value)


def test_transport_error_is_not_retried(monkeypatch):
    calls = _patch_get(monkeypatch, requests.ConnectionError("boom"))

    with pytest.raises(FetchError):
        geojson.fetch_berlin_schools()

    assert len(calls) == 1


def test_invalid_json_is_fetch_error(monkeypatch):
    _patch_get(monkeypatch, FakeResponse(ValueError("Expecting value")))

    with pytest.raises(FetchError, match="invalid JSON"):
        api.fetch_construction_projects()


def test_fetch_is_served_from_cache_while_fresh(monkeypatch):
    now = [0.0]
    cache = TTLCache(60, clock=lambda: now[0])
    calls = _patch_get(monkeypatch, FakeResponse({"features": [school_feature("01B01")]}))

    geojson.fetch_berlin_schools(cache=cache)
    geojson.fetch_berlin_schools(cache=cache)
    assert len(calls) == 1

    now[0] = 61.0
    geojson.fetch_berlin_schools(cache=cache)
    assert len(calls) == 2


def test_fetch_schools_by_district(monkeypatch):
    payload = {
        "features": [
            school_feature("01B01", bezirk="Mitte"),
            school_feature("04G01", bezirk="Charlottenburg-Wilmersdorf"),
        ]
    }
    _patch_get(monkeypatch, FakeResponse(payload))

    schools = geojson.fetch_schools_by_district("Charlottenburg-Wilmersdorf")

    assert [s.school_number for s in schools] == ["04G01"]


def test_fetch_construction_projects_parses_index(monkeypatch):
    payload = {
        "index": [
            {
                "id": "17",
                "schulnummer": "01B01",
                "schulname": "Schule 01B01",
                "strasse": "Teststraße 1",
                "plz": "10115",
                "ort": "Berlin",
                "handover_date": "2024/2025",
                "total_costs": "12 Mio. €",
            },
            {"id": 18, "schulnummer": "", "school_name": "Neubau Nord", "street": "Nordweg 2"},
            {"id": "x"},
            "garbage",
        ]
    }
    _patch_get(monkeypatch, FakeResponse(payload))

    projects = api.fetch_construction_projects()

    assert [p.id for p in projects] == [17, 18]
    assert projects[0].school_number == "01B01"
    assert projects[0].address == "Teststraße 1, 10115 Berlin"
    assert projects[0].total_costs == "12 Mio. €"
    assert projects[1].school_number is None
    assert projects[1].school_name == "Neubau Nord"
    assert projects[1].street == "Nordweg 2"


def test_missing_index_array_is_fetch_error(monkeypatch):
    _patch_get(monkeypatch, FakeResponse({"items": []}))

    with pytest.raises(FetchError, match="index"):
        api.fetch_construction_projects()
