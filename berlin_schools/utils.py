"""Shared utilities for berlin_schools sources."""

import re
from pathlib import Path

import requests

from berlin_schools.cache import TTLCache
from berlin_schools.exceptions import FetchError

DEFAULT_TIMEOUT = 30

_LEADING_INT_RE = re.compile(r"^[+-]?\d+")


def fetch(
    url: str,
    *,
    source: str,
    timeout: int = DEFAULT_TIMEOUT,
    session: requests.Session | None = None,
    **kwargs,
) -> requests.Response:
    """GET a URL once. Any transport error or non-2xx status is a FetchError."""
    client = session or requests
    try:
        response = client.get(url, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        raise FetchError(source, str(e)) from e

    if not response.ok:
        raise FetchError(source, response.reason or "request failed", status=response.status_code)
    return response


def fetch_json(
    url: str,
    *,
    source: str,
    cache: TTLCache | None = None,
    session: requests.Session | None = None,
    **kwargs,
):
    """Fetch and decode a JSON document, serving it from ``cache`` while fresh."""

    def load():
        response = fetch(url, source=source, session=session, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(source, f"invalid JSON: {e}", status=response.status_code) from e

    if cache is None:
        return load()
    return cache.get_or_set(("json", url), load)


def read_text(
    location: str | Path,
    *,
    source: str,
    cache: TTLCache | None = None,
    session: requests.Session | None = None,
) -> str:
    """Read a text file from a local path or an http(s) URL."""
    location = str(location)

    def load() -> str:
        if location.startswith(("http://", "https://")):
            response = fetch(location, source=source, session=session)
            response.encoding = "utf-8"
            return response.text
        try:
            return Path(location).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FetchError(source, f"cannot read {location}: {e}") from e

    if cache is None:
        return load()
    return cache.get_or_set(("text", location), load)


def require_list(data, key: str, *, source: str) -> list:
    """Return ``data[key]`` if it is a list, otherwise fail the fetch."""
    if not isinstance(data, dict) or not isinstance(data.get(key), list):
        raise FetchError(source, f"invalid response format: missing {key} array")
    return data[key]


def safe_strip(value) -> str | None:
    """Strip whitespace, return None if empty."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_count(value: str | None) -> int:
    """Parse a count field leniently: blanks, "k.A." and junk become 0."""
    if value is None:
        return 0
    text = value.strip()
    if not text or text == "k.A.":
        return 0
    match = _LEADING_INT_RE.match(text)
    return int(match.group()) if match else 0


def parse_geojson_features(features: list) -> list[dict]:
    """Flatten GeoJSON point features into property dicts with lon/lat/id/bbox."""
    results = []
    for feature in features:
        if not isinstance(feature, dict):
            continue
        props = dict(feature.get("properties") or {})
        coords = (feature.get("geometry") or {}).get("coordinates") or []
        if len(coords) >= 2:
            props["lon"] = coords[0]
            props["lat"] = coords[1]
        props["_id"] = feature.get("id")
        props["_bbox"] = feature.get("bbox")
        results.append(props)
    return results
