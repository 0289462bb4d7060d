"""JSON API source: Berlin school construction projects (Schulbaukarte)."""

import logging

import requests

from berlin_schools.cache import TTLCache
from berlin_schools.schema import ConstructionProject
from berlin_schools.utils import fetch_json, require_list, safe_strip

logger = logging.getLogger(__name__)

SOURCE = "construction-projects"
CONSTRUCTION_API_URL = (
    "https://www.berlin.de/sen/bildung/schule/bauen-und-sanieren/"
    "schulbaukarte/index.php/index/all.json?q="
)

# Field name in our record -> candidate keys in the feed, first hit wins.
_FIELDS = {
    "school_number": ("schulnummer", "school_number", "bsn"),
    "school_name": ("schulname", "school_name"),
    "school_type": ("schulart", "school_type"),
    "district": ("bezirk", "district"),
    "street": ("strasse", "street"),
    "zip": ("plz", "zip"),
    "city": ("ort", "city"),
    "construction_measure": ("baumassnahme", "construction_measure"),
    "description": ("beschreibung", "description"),
    "total_costs": ("gesamtkosten", "total_costs"),
    "handover_date": ("handover_date", "uebergabe"),
    "places_after_construction": ("places_after_construction", "plaetze_nach_baumassnahme"),
    "class_tracks_after_construction": ("class_tracks_after_construction", "zuege_nach_baumassnahme"),
}


def _first(item: dict, keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = safe_strip(item.get(key))
        if value is not None:
            return value
    return None


def parse_construction_projects(entries: list) -> list[ConstructionProject]:
    """Build ConstructionProjects from feed entries, skipping unusable ones."""
    projects = []
    for item in entries:
        if not isinstance(item, dict):
            logger.warning("Skipping non-object construction entry: %r", item)
            continue
        try:
            project_id = int(item.get("id"))
        except (TypeError, ValueError):
            logger.warning("Skipping construction entry without numeric id: %r", item.get("id"))
            continue

        projects.append(ConstructionProject(
            id=project_id,
            **{name: _first(item, keys) for name, keys in _FIELDS.items()},
        ))
    return projects


def fetch_construction_projects(
    *,
    cache: TTLCache | None = None,
    session: requests.Session | None = None,
) -> list[ConstructionProject]:
    """Fetch all construction projects.

    Raises:
        FetchError: If the request fails or the payload has no index array.
    """
    data = fetch_json(
        CONSTRUCTION_API_URL,
        source=SOURCE,
        cache=cache,
        session=session,
        headers={"Accept": "application/json"},
    )
    entries = require_list(data, "index", source=SOURCE)
    return parse_construction_projects(entries)
