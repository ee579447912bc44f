import logging
import math
from collections.abc import Iterable

from line_kpi.sheets.models import CellValue, Grid, HourRecord, KpiComparison, LineSummary, Status


logger = logging.getLogger(__name__)

TARGET_EFFICIENCY_PCT = 90.0

# Positional columns of a KPI block
COL_HOUR = 0
COL_LINE = 1
COL_PLAN = 2
COL_ACTUAL = 3
COL_DIFF = 4


def parse_number(value: CellValue) -> float | None:
    """Parse a sheet cell as a number.

    Thousands separators and percent signs are stripped. Empty cells read as 0,
    text that still isn't numeric returns None.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value) if math.isfinite(value) else 0.0

    text = str(value).replace("\u00a0", " ").strip().replace(",", "").replace("%", "")
    if not text:
        return 0.0
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def to_number(value: CellValue) -> float:
    """Parse a sheet cell as a number, reading anything non-numeric as 0"""
    number = parse_number(value)
    return 0.0 if number is None else number


def status_for(delta: float) -> Status:
    if delta > 0:
        return Status.OVER
    if delta < 0:
        return Status.LACK
    return Status.EQUAL


def format_number(value: float) -> str:
    """Render whole numbers without a decimal part"""
    if value == int(value):
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _cell(row: list[CellValue], index: int) -> CellValue:
    return row[index] if index < len(row) else None


def _label(value: CellValue) -> str:
    return "" if value is None else str(value).strip()


def _hour_message(status: Status, diff: float) -> str:
    if status is Status.OVER:
        return f"Over by {format_number(diff)}"
    if status is Status.LACK:
        return f"Short by {format_number(abs(diff))}"
    return "On plan"


def build_hour_records(grid: Grid) -> list[HourRecord]:
    """Turn a KPI block into one record per hour mark and line.

    Row 0 is the header. Columns are hour, line, cumulative plan, cumulative actual
    and an optional diff. Rows missing an hour or line label are skipped.
    """
    records = []
    for row in grid[1:]:
        row = row or []
        hour = _label(_cell(row, COL_HOUR))
        line = _label(_cell(row, COL_LINE))
        if not hour or not line:
            continue

        plan = to_number(_cell(row, COL_PLAN))
        actual = to_number(_cell(row, COL_ACTUAL))
        diff = to_number(_cell(row, COL_DIFF))
        if diff == 0 and (plan or actual):
            diff = actual - plan

        status = status_for(diff)
        records.append(
            HourRecord(
                hour=hour,
                line=line,
                plan=plan,
                actual=actual,
                diff=diff,
                status=status,
                message=_hour_message(status, diff),
            )
        )
    return records


def summarize_lines(
    records: Iterable[HourRecord], target_pct: float = TARGET_EFFICIENCY_PCT
) -> list[LineSummary]:
    """Aggregate hour records per line and rate the day's efficiency.

    Lines keep the order in which they first appear. A line with no plan gets an
    efficiency of 0, which reads the same as a line that produced nothing.
    """
    totals: dict[str, list[float]] = {}
    for record in records:
        plan_actual = totals.setdefault(record.line, [0.0, 0.0])
        plan_actual[0] += record.plan
        plan_actual[1] += record.actual

    summaries = []
    for line, (plan_total, actual_total) in totals.items():
        efficiency = round(actual_total / plan_total * 100, 2) if plan_total > 0 else 0.0
        summaries.append(
            LineSummary(
                line=line,
                plan_total=plan_total,
                actual_total=actual_total,
                efficiency_pct=efficiency,
                target_pct=target_pct,
                status=status_for(efficiency - target_pct),
            )
        )
    return summaries


def compare(grid: Grid, target_pct: float = TARGET_EFFICIENCY_PCT) -> KpiComparison:
    """Compare plan against actual for every hour mark and every line of a KPI block"""
    hour_records = build_hour_records(grid)
    line_summaries = summarize_lines(hour_records, target_pct)
    logger.info(f"Compared {len(hour_records)} hour records across {len(line_summaries)} lines")
    return KpiComparison(hour_records=hour_records, line_summaries=line_summaries)


def compare_grids(plan_grid: Grid, actual_grid: Grid) -> list[str]:
    """Compare a plan grid with an actual grid cell by cell.

    Row 0 and column 0 hold labels. Each compared cell yields one message; cells
    holding non-numeric text on either side are skipped. Rows and columns are
    reported 1-based, as the sheet shows them.
    """
    alerts = []
    for row_idx in range(1, len(plan_grid)):
        plan_row = plan_grid[row_idx] or []
        actual_row = (actual_grid[row_idx] if row_idx < len(actual_grid) else None) or []

        for col_idx in range(1, max(len(plan_row), len(actual_row))):
            plan = parse_number(_cell(plan_row, col_idx))
            actual = parse_number(_cell(actual_row, col_idx))
            if plan is None or actual is None:
                continue

            where = f"row {row_idx + 1}, column {col_idx + 1}"
            status = status_for(actual - plan)
            if status is Status.LACK:
                alerts.append(f"Shortfall at {where}: short by {format_number(plan - actual)}")
            elif status is Status.OVER:
                alerts.append(f"Excess at {where}: over by {format_number(actual - plan)}")
            else:
                alerts.append(f"On target at {where}")
    return alerts
