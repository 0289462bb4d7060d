"""Construction project status derived from the free-text handover date."""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

from berlin_schools.schema import ConstructionProject

UNKNOWN_DATE = "k.A."

_YEAR_RE = re.compile(r"\d{4}")


class ProjectStatus(Enum):
    COMPLETED = "completed"
    ONGOING = "ongoing"
    FUTURE = "future"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ProjectStatusInfo:
    status: ProjectStatus
    completion_year: int | None = None

    @property
    def is_completed(self) -> bool:
        return self.status is ProjectStatus.COMPLETED


def project_status(
    project: ConstructionProject, current_year: int | None = None
) -> ProjectStatusInfo:
    """Classify a project against the current calendar year.

    The latest 4-digit year in ``handover_date`` is taken as the completion
    year, so "2024/2025" counts as 2025.
    """
    text = (project.handover_date or "").strip()
    if not text or text == UNKNOWN_DATE:
        return ProjectStatusInfo(ProjectStatus.UNKNOWN)

    years = [int(y) for y in _YEAR_RE.findall(text)]
    if not years:
        return ProjectStatusInfo(ProjectStatus.UNKNOWN)

    completion_year = max(years)
    current_year = current_year or date.today().year
    if completion_year < current_year:
        status = ProjectStatus.COMPLETED
    elif completion_year == current_year:
        status = ProjectStatus.ONGOING
    else:
        status = ProjectStatus.FUTURE
    return ProjectStatusInfo(status, completion_year)


def status_label(info: ProjectStatusInfo) -> str:
    if info.status is ProjectStatus.COMPLETED:
        return f"Completed {info.completion_year}"
    if info.status is ProjectStatus.ONGOING:
        return f"In Progress {info.completion_year}"
    if info.status is ProjectStatus.FUTURE:
        return f"Planned {info.completion_year}"
    return "Status Unknown"
