"""Enrichers that join secondary datasets onto school records by school number."""

import logging
from collections.abc import Collection, Iterable, Mapping, Sequence

from berlin_schools.geocode import Geocoder, RateLimitedQueue
from berlin_schools.schema import (
    ConstructionProject,
    SchoolRecord,
    StatisticsRow,
    with_construction_history,
    with_eligibility,
    with_stats,
)

logger = logging.getLogger(__name__)

PUBLIC_OPERATOR = "öffentlich"
CONSTRUCTION_ID_PREFIX = "construction"
DEFAULT_MAX_PROJECTS = 100


# --- Construction ---

def partition_projects(
    schools: Iterable[SchoolRecord], projects: Iterable[ConstructionProject]
) -> tuple[dict[str, list[ConstructionProject]], list[ConstructionProject]]:
    """Split projects into those owned by a known school and standalone ones.

    A project with a school number that is not in ``schools`` is standalone.
    """
    known = {school.school_number for school in schools}
    by_school: dict[str, list[ConstructionProject]] = {}
    standalone: list[ConstructionProject] = []

    for project in projects:
        bsn = project.school_number
        if bsn and bsn in known:
            by_school.setdefault(bsn, []).append(project)
        else:
            if bsn:
                logger.debug("Project %s references unknown school %s", project.id, bsn)
            standalone.append(project)
    return by_school, standalone


def attach_construction_history(
    schools: Iterable[SchoolRecord], by_school: Mapping[str, Sequence[ConstructionProject]]
) -> tuple[SchoolRecord, ...]:
    return tuple(
        with_construction_history(school, by_school.get(school.school_number, ()))
        for school in schools
    )


def construction_record(
    project: ConstructionProject, coords: tuple[float, float]
) -> SchoolRecord:
    """School-shaped record for a school that is still being built."""
    lon, lat = coords
    return SchoolRecord(
        id=f"{CONSTRUCTION_ID_PREFIX}.{project.id}",
        school_number=f"{CONSTRUCTION_ID_PREFIX}-{project.id}",
        name=project.school_name,
        school_type=project.school_type,
        operator=PUBLIC_OPERATOR,
        district=project.district,
        zip=project.zip,
        street=project.street,
        longitude=lon,
        latitude=lat,
        bbox=(lon, lat, lon, lat),
        is_construction_project=True,
        construction_project=project,
    )


def build_construction_records(
    projects: Sequence[ConstructionProject],
    geocoder: Geocoder,
    *,
    queue: RateLimitedQueue | None = None,
    max_projects: int = DEFAULT_MAX_PROJECTS,
) -> tuple[SchoolRecord, ...]:
    """Geocode standalone projects and turn the hits into records.

    Projects whose address cannot be resolved are logged and dropped.
    """
    queue = queue or RateLimitedQueue()
    if len(projects) > max_projects:
        logger.warning(
            "Geocoding only %d of %d standalone projects", max_projects, len(projects)
        )
    selected = projects[:max_projects]

    def locate(project: ConstructionProject):
        try:
            return geocoder(project.address)
        except Exception as e:
            logger.warning("Failed to geocode project %s (%s): %s", project.id, project.address, e)
            return None

    records = []
    for project, coords in queue.map(locate, selected):
        if coords is None:
            logger.warning("No location for project %s (%s), dropping", project.id, project.address)
            continue
        records.append(construction_record(project, coords))

    logger.info("Geocoded %d of %d standalone projects", len(records), len(selected))
    return tuple(records)


def enrich_with_construction(
    schools: Sequence[SchoolRecord],
    projects: Sequence[ConstructionProject],
    geocoder: Geocoder,
    *,
    queue: RateLimitedQueue | None = None,
    max_projects: int = DEFAULT_MAX_PROJECTS,
) -> tuple[SchoolRecord, ...]:
    """Attach construction history to schools and append standalone projects.

    Returns the enriched schools followed by one record per geocoded
    standalone project.
    """
    by_school, standalone = partition_projects(schools, projects)
    enriched = attach_construction_history(schools, by_school)
    new_schools = build_construction_records(
        standalone, geocoder, queue=queue, max_projects=max_projects
    )
    return enriched + new_schools


# --- Statistics ---

def enrich_with_stats(
    records: Iterable[SchoolRecord], stats: Mapping[str, StatisticsRow]
) -> tuple[SchoolRecord, ...]:
    records = tuple(records)
    enriched = []
    matched = 0
    for record in records:
        row = stats.get(record.school_number)
        if row is not None:
            matched += 1
            record = with_stats(record, row)
        enriched.append(record)

    logger.info("Enriched %d schools with statistics out of %d total", matched, len(records))
    return tuple(enriched)


# --- After 4th grade ---

def enrich_with_eligibility(
    records: Iterable[SchoolRecord], eligible: Collection[str]
) -> tuple[SchoolRecord, ...]:
    return tuple(
        with_eligibility(record, record.school_number in eligible) for record in records
    )
