"""Normalized records for Berlin schools and the data joined onto them."""

from dataclasses import dataclass, asdict, field, replace


@dataclass(frozen=True)
class StatisticsRow:
    school_year: str
    school_number: str
    name: str
    students_total: int = 0
    students_female: int = 0
    students_male: int = 0
    teachers_total: int = 0
    teachers_female: int = 0
    teachers_male: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class FifthGradeSchool:
    school_number: str
    name: str
    type: str


@dataclass(frozen=True)
class ConstructionProject:
    id: int
    school_number: str | None = None
    school_name: str | None = None
    school_type: str | None = None
    district: str | None = None
    street: str | None = None
    zip: str | None = None
    city: str | None = None
    construction_measure: str | None = None
    description: str | None = None
    total_costs: str | None = None
    handover_date: str | None = None
    places_after_construction: str | None = None
    class_tracks_after_construction: str | None = None

    @property
    def address(self) -> str:
        """Free-text address handed to the geocoder."""
        return f"{self.street or ''}, {self.zip or ''} {self.city or ''}".strip()

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SchoolRecord:
    school_number: str
    id: str | None = None
    name: str | None = None
    school_type: str | None = None
    school_category: str | None = None
    operator: str | None = None
    district: str | None = None
    neighborhood: str | None = None
    zip: str | None = None
    street: str | None = None
    house_number: str | None = None
    phone: str | None = None
    fax: str | None = None
    email: str | None = None
    website: str | None = None
    school_year: str | None = None
    longitude: float | None = None
    latitude: float | None = None
    bbox: tuple[float, float, float, float] | None = None
    construction_history: tuple[ConstructionProject, ...] | None = None
    stats: StatisticsRow | None = None
    accepts_after_4th_grade: bool = False
    is_construction_project: bool = False
    construction_project: ConstructionProject | None = field(default=None, repr=False)

    def to_dict(self) -> dict:
        return asdict(self)


# Builders. Each returns a new record; the base record is never touched.

def with_construction_history(
    record: SchoolRecord, projects: list[ConstructionProject] | tuple[ConstructionProject, ...]
) -> SchoolRecord:
    """Attach projects, or leave the slot absent when there are none."""
    return replace(record, construction_history=tuple(projects) if projects else None)


def with_stats(record: SchoolRecord, stats: StatisticsRow | None) -> SchoolRecord:
    return replace(record, stats=stats)


def with_eligibility(record: SchoolRecord, eligible: bool) -> SchoolRecord:
    return replace(record, accepts_after_4th_grade=bool(eligible))
