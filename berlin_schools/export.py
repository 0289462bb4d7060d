"""Serialize an enriched collection for the map frontend."""

import json
from collections.abc import Iterable

from berlin_schools.schema import SchoolRecord

_GEOMETRY_FIELDS = ("longitude", "latitude", "bbox", "id")


def to_records(records: Iterable[SchoolRecord]) -> list[dict]:
    return [record.to_dict() for record in records]


def to_feature(record: SchoolRecord) -> dict:
    properties = {k: v for k, v in record.to_dict().items() if k not in _GEOMETRY_FIELDS}
    geometry = None
    if record.longitude is not None and record.latitude is not None:
        geometry = {"type": "Point", "coordinates": [record.longitude, record.latitude]}
    feature = {
        "type": "Feature",
        "id": record.id,
        "geometry": geometry,
        "properties": properties,
    }
    if record.bbox is not None:
        feature["bbox"] = list(record.bbox)
    return feature


def to_feature_collection(records: Iterable[SchoolRecord]) -> dict:
    features = [to_feature(record) for record in records]
    return {"type": "FeatureCollection", "features": features, "numberReturned": len(features)}


def dump_json(data, *, indent: int | None = 2) -> str:
    """Deterministic JSON: keys sorted, non-ASCII kept as-is."""
    return json.dumps(data, sort_keys=True, ensure_ascii=False, indent=indent)
