"""Berlin school locations from the GDI WFS GeoJSON endpoint."""

import logging
import os
import urllib.parse

import requests

from berlin_schools.cache import TTLCache
from berlin_schools.schema import SchoolRecord
from berlin_schools.utils import fetch_json, parse_geojson_features, require_list, safe_strip

logger = logging.getLogger(__name__)

SOURCE = "schools"
WFS_BASE_URL = "https://gdi.berlin.de/services/wfs/schulen"
WFS_VERSION = "2.0.0"
DEFAULT_TYPENAMES = "fis:schulen"


def schools_url(typenames: str | None = None) -> str:
    typenames = typenames or os.environ.get("WFS_TYPENAMES") or DEFAULT_TYPENAMES
    return (
        f"{WFS_BASE_URL}?SERVICE=WFS&VERSION={WFS_VERSION}&REQUEST=GetFeature"
        f"&TYPENAMES={urllib.parse.quote(typenames, safe='')}"
        "&SRSNAME=EPSG:4326&OUTPUTFORMAT=application/json"
    )


def _to_float(value) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _bbox(value, lon: float | None, lat: float | None):
    if isinstance(value, (list, tuple)) and len(value) == 4:
        try:
            return tuple(float(v) for v in value)
        except (TypeError, ValueError):
            pass
    if lon is None or lat is None:
        return None
    return (lon, lat, lon, lat)


def parse_school_features(features: list) -> list[SchoolRecord]:
    """Turn raw WFS features into SchoolRecords. Features without a BSN are skipped."""
    schools = []
    for f in parse_geojson_features(features):
        bsn = safe_strip(f.get("bsn"))
        if bsn is None:
            logger.warning("Skipping school feature without bsn: %s", f.get("_id"))
            continue

        lon, lat = _to_float(f.get("lon")), _to_float(f.get("lat"))
        schools.append(SchoolRecord(
            id=f.get("_id") or f"schulen.{bsn}",
            school_number=bsn,
            name=f.get("schulname"),
            school_type=f.get("schulart"),
            school_category=f.get("schultyp"),
            operator=f.get("traeger"),
            district=f.get("bezirk"),
            neighborhood=f.get("ortsteil"),
            zip=f.get("plz"),
            street=f.get("strasse"),
            house_number=f.get("hausnr"),
            phone=f.get("telefon"),
            fax=f.get("fax"),
            email=f.get("email"),
            website=f.get("internet"),
            school_year=f.get("schuljahr"),
            longitude=lon,
            latitude=lat,
            bbox=_bbox(f.get("_bbox"), lon, lat),
        ))
    return schools


def fetch_berlin_schools(
    *,
    typenames: str | None = None,
    cache: TTLCache | None = None,
    session: requests.Session | None = None,
) -> list[SchoolRecord]:
    """Fetch all Berlin schools.

    Raises:
        FetchError: If the request fails or the payload has no features array.
    """
    data = fetch_json(
        schools_url(typenames),
        source=SOURCE,
        cache=cache,
        session=session,
        headers={"Accept": "application/json"},
    )
    features = require_list(data, "features", source=SOURCE)
    return parse_school_features(features)


def fetch_schools_by_district(district: str | None = None, **kwargs) -> list[SchoolRecord]:
    """Fetch Berlin schools, keeping only those in ``district`` if given."""
    schools = fetch_berlin_schools(**kwargs)
    if not district:
        return schools
    return [s for s in schools if s.district == district]
