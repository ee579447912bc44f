import logging
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from line_kpi.api.dependencies import get_kpi_checker
from line_kpi.errors import AuthError, NotFoundError, UpstreamError
from line_kpi.kpi.checker import KpiChecker
from line_kpi.kpi.line_block import SUMMARY_LINE, normalize_line
from line_kpi.sheets.models import DayStatus, Status


logger = logging.getLogger(__name__)

router = APIRouter(tags=["kpi"])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckKpiResponse(CamelModel):
    ok: bool = True
    date: str
    range: str
    values: list[list[Any]]


class KpiDatesResponse(CamelModel):
    ok: bool = True
    dates: list[str]


class KpiRangeMapResponse(CamelModel):
    ok: bool = True
    map: dict[str, str]


class HourAlert(CamelModel):
    hour: str
    line: str
    plan: float
    actual: float
    diff: float
    status: Status
    message: str


class DayAlert(CamelModel):
    line: str
    plan_total: float
    actual_total: float
    efficiency_pct: float
    target_pct: float
    status: Status


class MarkReport(CamelModel):
    mark: str
    actual: float
    expected: float
    diff: float
    status: Status | None


class LineReport(CamelModel):
    line: str
    item_code: str
    daily_quota: float
    hourly_quota: float
    target_pct: float
    achievement_pct: float | None
    day_status: DayStatus
    marks: list[MarkReport]


class LineAnalysisResponse(CamelModel):
    ok: bool = True
    date: str
    range: str
    marks: list[str]
    lines: list[LineReport]


class KpiRequest(BaseModel):
    date: str = ""


class KpiReportResponse(CamelModel):
    status: str = "success"
    date: str
    range: str
    hour_alerts: list[HourAlert]
    day_alerts: list[DayAlert]


class InputAlertsResponse(CamelModel):
    status: str = "success"
    alerts: list[str]


@router.get("/check-kpi")
def check_kpi(
    date: str = "",
    checker: KpiChecker = Depends(get_kpi_checker),
) -> CheckKpiResponse:
    """Return the raw values of the KPI block configured for a date."""
    try:
        date, range_a1, values = checker.check(date)
    except NotFoundError as e:
        if e.code == NotFoundError.code:
            raise
        raise UpstreamError(e.message, code="CHECK_KPI_ERROR") from e
    except (AuthError, UpstreamError) as e:
        raise type(e)(e.message, code="CHECK_KPI_ERROR") from e
    return CheckKpiResponse(date=date, range=range_a1, values=values)


@router.get("/kpi-config")
def kpi_config(
    list_dates: str | None = Query(default=None, alias="list"),
    checker: KpiChecker = Depends(get_kpi_checker),
) -> KpiDatesResponse | KpiRangeMapResponse:
    """Return the configured dates, or the full date to range map."""
    if list_dates and list_dates.lower() not in ("0", "false"):
        return KpiDatesResponse(dates=checker.list_dates())
    return KpiRangeMapResponse(map=checker.range_map())


def _build_report(checker: KpiChecker, date: str) -> KpiReportResponse:
    date, range_a1, comparison = checker.report(date)
    logger.info(f"KPI report for {date} from {range_a1}")
    return KpiReportResponse(
        date=date,
        range=range_a1,
        hour_alerts=[HourAlert(**asdict(record)) for record in comparison.hour_records],
        day_alerts=[DayAlert(**asdict(summary)) for summary in comparison.line_summaries],
    )


@router.get("/kpi-v2")
def kpi_report(
    date: str = "",
    checker: KpiChecker = Depends(get_kpi_checker),
) -> KpiReportResponse:
    """Compare plan against actual for the KPI block of a date."""
    return _build_report(checker, date)


@router.post("/kpi-v2")
def kpi_report_post(
    payload: KpiRequest | None = None,
    checker: KpiChecker = Depends(get_kpi_checker),
) -> KpiReportResponse:
    """Same as the GET variant with the date in a JSON body."""
    return _build_report(checker, payload.date if payload else "")


@router.post("/input")
def input_alerts(checker: KpiChecker = Depends(get_kpi_checker)) -> InputAlertsResponse:
    """Compare the plan table with the actual output table cell by cell."""
    return InputAlertsResponse(alerts=checker.input_alerts())


@router.get("/kpi-lines")
def kpi_lines(
    date: str = "",
    line: str = "",
    checker: KpiChecker = Depends(get_kpi_checker),
) -> LineAnalysisResponse:
    """Rate each production line at every hour mark and for the whole day.

    ``line`` narrows the answer to one line; the summary row name keeps them all.
    """
    date, range_a1, analysis = checker.analyze(date)
    selected = normalize_line(line) if line.strip() else SUMMARY_LINE
    lines = analysis.lines
    if selected != SUMMARY_LINE:
        lines = [item for item in lines if item.line == selected]
    return LineAnalysisResponse(
        date=date,
        range=range_a1,
        marks=analysis.marks,
        lines=[LineReport(**asdict(item)) for item in lines],
    )
