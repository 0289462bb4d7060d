"""
berlin_schools: enriched Berlin school data for the schools map.

Joins the GDI school locations with construction projects, yearly
statistics and the list of schools accepting pupils after grade 4.

Usage:
    from berlin_schools import build_enriched_schools

    records = build_enriched_schools(
        stats_source="data/school-stats.csv",
        eligibility_source="data/berlin_5th-gymnasium.csv",
    )
"""

from berlin_schools.exceptions import FetchError, GeocodeError, ParseError
from berlin_schools.runner import build_enriched_schools, enrich_schools, fetch_sources
from berlin_schools.schema import ConstructionProject, SchoolRecord, StatisticsRow

__all__ = [
    "build_enriched_schools",
    "enrich_schools",
    "fetch_sources",
    "ConstructionProject",
    "SchoolRecord",
    "StatisticsRow",
    "FetchError",
    "GeocodeError",
    "ParseError",
]
