"""Filtering and counting over an enriched collection, as the map applies them."""

from collections.abc import Collection, Iterable

from berlin_schools.enrich import PUBLIC_OPERATOR
from berlin_schools.schema import SchoolRecord

PRIVATE_OPERATOR = "privat"


def matches(
    record: SchoolRecord,
    *,
    query: str | None = None,
    school_types: Collection[str] | None = None,
    operators: Collection[str] | None = None,
    districts: Collection[str] | None = None,
    after_4th_grade_only: bool = False,
) -> bool:
    """Return True if ``record`` passes every active filter.

    Empty collections and an empty query count as "no filter".
    """
    if query:
        needle = query.lower()
        haystack = (record.name or "", record.street or "", record.district or "")
        if not any(needle in text.lower() for text in haystack):
            return False

    if school_types and (record.school_type or "") not in school_types:
        return False
    if operators and (record.operator or PUBLIC_OPERATOR) not in operators:
        return False
    if districts and (record.district or "") not in districts:
        return False
    if after_4th_grade_only and not record.accepts_after_4th_grade:
        return False
    return True


def filter_records(records: Iterable[SchoolRecord], **criteria) -> list[SchoolRecord]:
    return [record for record in records if matches(record, **criteria)]


def summarize(records: Iterable[SchoolRecord]) -> dict[str, int]:
    counts = {"total": 0, "public": 0, "private": 0, "construction": 0, "after_4th_grade": 0}
    for record in records:
        counts["total"] += 1
        if record.is_construction_project:
            counts["construction"] += 1
        if record.operator == PUBLIC_OPERATOR:
            counts["public"] += 1
        elif record.operator == PRIVATE_OPERATOR:
            counts["private"] += 1
        if record.accepts_after_4th_grade:
            counts["after_4th_grade"] += 1
    return counts
