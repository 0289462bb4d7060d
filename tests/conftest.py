import pytest

from berlin_schools.schema import ConstructionProject, SchoolRecord


class FakeResponse:
    def __init__(self, payload=None, *, status_code=200, reason="OK", text=None):
        self._payload = payload
        self.status_code = status_code
        self.reason = reason
        self.text = text if text is not None else ""
        self.encoding = "utf-8"

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class NoSleepQueue:
    """Stand-in for RateLimitedQueue that records calls and never waits."""

    def __init__(self):
        self.calls = []

    def map(self, func, items):
        for item in items:
            self.calls.append(item)
            yield item, func(item)


def school_feature(bsn, lon=13.4, lat=52.5, **props):
    properties = {
        "bsn": bsn,
        "schulname": f"Schule {bsn}",
        "schulart": "Gymnasium",
        "schultyp": "Gymnasium",
        "traeger": "öffentlich",
        "bezirk": "Mitte",
        "ortsteil": "Mitte",
        "plz": "10115",
        "strasse": "Teststraße",
        "hausnr": "1",
        "schuljahr": "2025/26",
    }
    properties.update(props)
    return {
        "type": "Feature",
        "id": f"schulen.{bsn}",
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
        "geometry_name": "geom",
        "properties": properties,
        "bbox": [lon, lat, lon, lat],
    }


def school(bsn, **fields):
    fields.setdefault("name", f"Schule {bsn}")
    fields.setdefault("operator", "öffentlich")
    fields.setdefault("district", "Mitte")
    return SchoolRecord(school_number=bsn, id=f"schulen.{bsn}", longitude=13.4, latitude=52.5, **fields)


def project(project_id, school_number=None, **fields):
    fields.setdefault("street", "Neue Straße 5")
    fields.setdefault("zip", "10117")
    fields.setdefault("city", "Berlin")
    fields.setdefault("school_name", f"Neubau {project_id}")
    fields.setdefault("school_type", "Grundschule")
    return ConstructionProject(id=project_id, school_number=school_number, **fields)


@pytest.fixture
def queue():
    return NoSleepQueue()
