# line_kpi/sheets/models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


CellValue = str | int | float | None
Grid = list[list[CellValue]]


class Status(str, Enum):
    """Outcome of comparing an actual figure against its plan"""

    EQUAL = "equal"
    OVER = "over"
    LACK = "lack"


@dataclass
class ServiceAccountInfo:
    """Resolved service account identity"""

    client_email: str
    private_key: str
    token_uri: str = "https://oauth2.googleapis.com/token"
    extra: dict[str, Any] = field(default_factory=dict)

    def as_info(self) -> dict[str, Any]:
        """Return the mapping google-auth expects for a service account"""
        info = {"type": "service_account", **self.extra}
        info.update(
            client_email=self.client_email,
            private_key=self.private_key,
            token_uri=self.token_uri,
        )
        return info


@dataclass
class ConfigEntry:
    """Row of the config sheet mapping a date to the range holding its KPI block"""

    date: str
    range: str


@dataclass
class HourRecord:
    """Cumulative plan vs actual for one line at one hour mark"""

    hour: str
    line: str
    plan: float
    actual: float
    diff: float
    status: Status
    message: str


@dataclass
class LineSummary:
    """Day totals for one line compared against the target efficiency"""

    line: str
    plan_total: float
    actual_total: float
    efficiency_pct: float
    target_pct: float
    status: Status


@dataclass
class KpiComparison:
    hour_records: list[HourRecord]
    line_summaries: list[LineSummary]


class DayStatus(str, Enum):
    """Whether a line reached its daily quota"""

    REACHED = "reached"
    NOT_REACHED = "not_reached"
    NO_QUOTA = "no_quota"


@dataclass
class MarkResult:
    """Actual output at an hour mark against the pro-rated daily quota"""

    mark: str
    actual: float
    expected: float
    diff: float
    status: Status | None


@dataclass
class LineAnalysis:
    """One production line of a KPI block with its hour marks and day outcome"""

    line: str
    item_code: str
    daily_quota: float
    hourly_quota: float
    target_pct: float
    achievement_pct: float | None
    day_status: DayStatus
    marks: list[MarkResult] = field(default_factory=list)


@dataclass
class BlockAnalysis:
    marks: list[str]
    lines: list[LineAnalysis]
