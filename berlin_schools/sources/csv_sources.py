"""Delimited-file sources: yearly school statistics and the after-4th-grade list."""

import csv
import logging
import os
from pathlib import Path

import requests

from berlin_schools.cache import TTLCache
from berlin_schools.exceptions import ParseError
from berlin_schools.schema import FifthGradeSchool, StatisticsRow
from berlin_schools.utils import parse_count, read_text

logger = logging.getLogger(__name__)

STATS_SOURCE = "school-stats"
ELIGIBILITY_SOURCE = "fifth-grade-schools"
STATS_FILENAME = "school-stats.csv"
ELIGIBILITY_FILENAME = "berlin_5th-gymnasium.csv"

# Schuljahr;BSN;NAME;Schüler (m/w/d);Schüler (w);Schüler (m);Lehrkräfte (m,w,d);Lehrkräfte (w);Lehrkräfte (m)
STATS_COLUMNS = 9
ELIGIBILITY_COLUMNS = 3


def data_dir() -> Path:
    return Path(os.environ.get("BERLIN_SCHOOLS_DATA_DIR", "data"))


def _split(line: str, delimiter: str) -> list[str]:
    """Split one line; quote characters are kept as plain text."""
    try:
        return next(csv.reader([line], delimiter=delimiter, quoting=csv.QUOTE_NONE))
    except csv.Error as e:
        raise ParseError(line, str(e)) from e


def _lines(text: str):
    """Yield every non-blank line after the header."""
    for line in text.splitlines()[1:]:
        if line.strip():
            yield line


# --- Statistics ---

def _parse_stats_row(line: str) -> StatisticsRow:
    fields = _split(line, ";")
    if len(fields) < STATS_COLUMNS:
        raise ParseError(line, f"expected {STATS_COLUMNS} fields, got {len(fields)}")
    year, bsn, name, *counts = fields[:STATS_COLUMNS]
    if not bsn.strip():
        raise ParseError(line, "missing school number")
    (
        students_total, students_female, students_male,
        teachers_total, teachers_female, teachers_male,
    ) = (parse_count(c) for c in counts)
    return StatisticsRow(
        school_year=year.strip(),
        school_number=bsn.strip(),
        name=name.strip(),
        students_total=students_total,
        students_female=students_female,
        students_male=students_male,
        teachers_total=teachers_total,
        teachers_female=teachers_female,
        teachers_male=teachers_male,
    )


def parse_school_stats(text: str) -> dict[str, StatisticsRow]:
    """Parse the semicolon-separated statistics file.

    Malformed rows are skipped with a warning. When a school number appears
    more than once the last row in file order wins.
    """
    stats: dict[str, StatisticsRow] = {}
    for line in _lines(text):
        try:
            row = _parse_stats_row(line)
        except ParseError as e:
            logger.warning("Skipping invalid statistics line: %s", e)
            continue
        if row.school_number in stats:
            logger.debug("Replacing statistics for %s with later row", row.school_number)
        stats[row.school_number] = row

    logger.info("Loaded statistics for %d schools", len(stats))
    return stats


def load_school_stats(
    source: str | Path | None = None,
    *,
    cache: TTLCache | None = None,
    session: requests.Session | None = None,
) -> dict[str, StatisticsRow]:
    """Read and parse the statistics file from a path or URL.

    Raises:
        FetchError: If the file cannot be read.
    """
    location = source or data_dir() / STATS_FILENAME
    return parse_school_stats(read_text(location, source=STATS_SOURCE, cache=cache, session=session))


# --- After 4th grade ---

def parse_fifth_grade_schools(text: str) -> dict[str, FifthGradeSchool]:
    """Parse the comma-separated list of schools accepting pupils after grade 4."""
    schools: dict[str, FifthGradeSchool] = {}
    for line in _lines(text):
        try:
            fields = _split(line, ",")
        except ParseError as e:
            logger.warning("Skipping invalid eligibility line: %s", e)
            continue
        values = [f.strip() for f in fields[:ELIGIBILITY_COLUMNS]]
        if len(values) < ELIGIBILITY_COLUMNS or not all(values):
            logger.warning("Skipping invalid eligibility line: %r", line)
            continue
        bsn, name, school_type = values
        schools[bsn] = FifthGradeSchool(school_number=bsn, name=name, type=school_type)
    return schools


def load_fifth_grade_schools(
    source: str | Path | None = None,
    *,
    cache: TTLCache | None = None,
    session: requests.Session | None = None,
) -> dict[str, FifthGradeSchool]:
    location = source or data_dir() / ELIGIBILITY_FILENAME
    return parse_fifth_grade_schools(
        read_text(location, source=ELIGIBILITY_SOURCE, cache=cache, session=session)
    )


def load_eligible_school_numbers(
    source: str | Path | None = None, **kwargs
) -> frozenset[str]:
    return frozenset(load_fifth_grade_schools(source, **kwargs))
