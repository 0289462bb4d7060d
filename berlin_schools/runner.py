"""Runner: fetches all sources in parallel and runs the enrichers."""

import logging
import time
from collections.abc import Callable, Collection, Mapping, Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path

from berlin_schools.cache import FEED_TTL, GEOCODE_TTL, TTLCache
from berlin_schools.enrich import (
    DEFAULT_MAX_PROJECTS,
    enrich_with_construction,
    enrich_with_eligibility,
    enrich_with_stats,
)
from berlin_schools.geocode import Geocoder, NominatimGeocoder, RateLimitedQueue
from berlin_schools.schema import ConstructionProject, SchoolRecord, StatisticsRow
from berlin_schools.sources.api import fetch_construction_projects
from berlin_schools.sources.csv_sources import load_eligible_school_numbers, load_school_stats
from berlin_schools.sources.geojson import fetch_berlin_schools

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sources:
    """One snapshot of the four inputs."""

    schools: list[SchoolRecord]
    projects: list[ConstructionProject]
    stats: dict[str, StatisticsRow]
    eligible: frozenset[str]


def _timed(name: str, func: Callable):
    def run():
        start = time.time()
        try:
            result = func()
        except Exception as e:
            logger.error("%s: FAILED after %.1fs: %s", name, time.time() - start, e)
            raise
        size = len(result) if hasattr(result, "__len__") else "?"
        logger.info("%s: %s records (%.1fs)", name, size, time.time() - start)
        return result

    return run


def fetch_sources(
    *,
    stats_source: str | Path | None = None,
    eligibility_source: str | Path | None = None,
    cache: TTLCache | None = None,
) -> Sources:
    """Fetch all four sources concurrently.

    Raises:
        FetchError: From the first source that fails; pending fetches are cancelled.
    """
    tasks: dict[str, Callable] = {
        "schools": lambda: fetch_berlin_schools(cache=cache),
        "projects": lambda: fetch_construction_projects(cache=cache),
        "stats": lambda: load_school_stats(stats_source, cache=cache),
        "eligible": lambda: load_eligible_school_numbers(eligibility_source, cache=cache),
    }

    with ThreadPoolExecutor(max_workers=len(tasks)) as pool:
        futures = {name: pool.submit(_timed(name, func)) for name, func in tasks.items()}
        done, pending = wait(futures.values(), return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()
        # Raises the failure, if any, before touching the remaining results.
        for future in done:
            future.result()
        results = {name: future.result() for name, future in futures.items()}

    return Sources(**results)


def enrich_schools(
    schools: Sequence[SchoolRecord],
    projects: Sequence[ConstructionProject],
    stats: Mapping[str, StatisticsRow],
    eligible: Collection[str],
    geocoder: Geocoder,
    *,
    queue: RateLimitedQueue | None = None,
    max_projects: int = DEFAULT_MAX_PROJECTS,
) -> tuple[SchoolRecord, ...]:
    """Run construction, statistics and eligibility enrichment in order."""
    records = enrich_with_construction(
        schools, projects, geocoder, queue=queue, max_projects=max_projects
    )
    records = enrich_with_stats(records, stats)
    return enrich_with_eligibility(records, eligible)


def build_enriched_schools(
    *,
    stats_source: str | Path | None = None,
    eligibility_source: str | Path | None = None,
    geocoder: Geocoder | None = None,
    queue: RateLimitedQueue | None = None,
    cache: TTLCache | None = None,
    max_projects: int = DEFAULT_MAX_PROJECTS,
) -> tuple[SchoolRecord, ...]:
    """Fetch every source and return the fully enriched collection.

    Args:
        stats_source: Path or URL of the statistics file.
        eligibility_source: Path or URL of the after-4th-grade list.
        geocoder: Address lookup; defaults to Nominatim with a 24h cache.
        queue: Rate limiter for the geocoder.
        cache: Freshness cache for the source fetches.
        max_projects: Upper bound on standalone projects to geocode.

    Raises:
        FetchError: If any source cannot be fetched. No partial result is returned.
    """
    start = time.time()
    cache = cache if cache is not None else TTLCache(FEED_TTL)
    sources = fetch_sources(
        stats_source=stats_source,
        eligibility_source=eligibility_source,
        cache=cache,
    )

    geocoder = geocoder or NominatimGeocoder(cache=TTLCache(GEOCODE_TTL))
    records = enrich_schools(
        sources.schools,
        sources.projects,
        sources.stats,
        sources.eligible,
        geocoder,
        queue=queue,
        max_projects=max_projects,
    )

    logger.info(
        "Total: %d records (%d schools, %d projects) in %.1fs",
        len(records), len(sources.schools), len(sources.projects), time.time() - start,
    )
    return records
