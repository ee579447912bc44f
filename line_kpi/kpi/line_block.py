"""Per-line analysis of a KPI block laid out the way the floor sheets are.

A block has one or two header rows (the lower one carries the ``ĐM/ngày`` and
``ĐM/h`` quota columns), then one row per production line with cumulative output
under each hour mark column (``->9h`` ... ``->16h30``).
"""

import logging
import re
import unicodedata

from line_kpi.sheets.models import BlockAnalysis, CellValue, DayStatus, Grid, LineAnalysis, MarkResult, Status

from .comparator import TARGET_EFFICIENCY_PCT, status_for, to_number


logger = logging.getLogger(__name__)

# Hour marks of the working day and the hours worked when each is reached
MARKS = (
    ("->9h", 0.5),
    ("->10h", 1.5),
    ("->11h", 2.5),
    ("->12h30", 4.0),
    ("->13h30", 5.0),
    ("->14h30", 6.0),
    ("->15h30", 7.0),
    ("->16h30", 8.0),
)
WORKDAY_HOURS = 8.0

SUMMARY_LINE = "TỔNG HỢP"
DEPARTMENT_LINES = {"CAT", "KCS", "HOANTAT", "NM"}

# Fallback columns when the header has no matching title
LINE_COL = 0
ITEM_CODE_COL = 5

_HEADER_SCAN_ROWS = 6
_LINE_PATTERN = re.compile(r"^C\s*0*(\d+)$")
_WHITESPACE = re.compile(r"\s+")


def fold_label(value: CellValue) -> str:
    """Uppercase a label with accents and whitespace removed, so ``Chuyền`` reads ``CHUYEN``"""
    text = str(value if value is not None else "").replace("Đ", "D").replace("đ", "d")
    text = "".join(ch for ch in unicodedata.normalize("NFD", text) if not unicodedata.combining(ch))
    return _WHITESPACE.sub("", text.upper())


def is_line_name(value: CellValue) -> bool:
    folded = fold_label(value)
    return bool(re.match(r"^C\d+$", folded)) or folded in DEPARTMENT_LINES or folded == "TONGHOP"


def normalize_line(value: CellValue) -> str:
    """``c 02`` becomes ``C2`` and any spelling of the summary row becomes ``TỔNG HỢP``"""
    text = str(value if value is not None else "").replace("\u00a0", " ").strip().upper()
    if fold_label(text) == "TONGHOP":
        return SUMMARY_LINE
    match = _LINE_PATTERN.match(text)
    if match:
        return f"C{int(match.group(1))}"
    return text


def line_sort_key(line: str) -> tuple[int, int, str]:
    """Summary row first, then sewing lines by number, then departments by name"""
    name = normalize_line(line)
    if name == SUMMARY_LINE:
        return (0, 0, "")
    match = _LINE_PATTERN.match(name)
    if match:
        return (1, int(match.group(1)), "")
    return (2, 0, fold_label(name))


def find_header_index(grid: Grid) -> int:
    """Index of the header row holding the quota titles, 1 when none is found"""
    for idx, row in enumerate(grid[:_HEADER_SCAN_ROWS]):
        joined = " ".join(fold_label(cell) for cell in row or [])
        if any(key in joined for key in ("DM/NGAY", "DMNGAY", "DM/H", "DMH")):
            return idx
    return 1


def build_headers(grid: Grid, top_idx: int, sub_idx: int) -> list[str]:
    """Fold the two header rows into one title per column"""
    top = grid[top_idx] if top_idx < len(grid) else []
    sub = grid[sub_idx] if sub_idx < len(grid) else []
    top, sub = top or [], sub or []
    headers = []
    for col in range(max(len(top), len(sub))):
        upper = top[col] if col < len(top) else ""
        lower = sub[col] if col < len(sub) else ""
        headers.append(fold_label(f"{upper or ''} {lower or ''}"))
    return headers


def find_column(headers: list[str], keys: tuple[str, ...], fallback: int = -1) -> int:
    for idx, header in enumerate(headers):
        if header and any(key in header for key in keys):
            return idx
    return fallback


def _cell(row: list[CellValue], index: int) -> CellValue:
    return row[index] if 0 <= index < len(row) else None


def _mark_columns(headers: list[str]) -> dict[str, int]:
    columns = {}
    for mark, _ in MARKS:
        key = fold_label(mark)
        columns[mark] = find_column(headers, (key, key.removeprefix("->")))
    return columns


def _analyze_line(
    row: list[CellValue], line: str, columns: dict[str, int], mark_columns: dict[str, int], target_pct: float
) -> LineAnalysis:
    daily_quota = to_number(_cell(row, columns["daily_quota"]))
    hourly_quota = to_number(_cell(row, columns["hourly_quota"]))

    results = []
    latest_actual = 0.0
    for mark, hours in MARKS:
        cell = _cell(row, mark_columns[mark])
        actual = to_number(cell)
        if str(cell if cell is not None else "").strip():
            latest_actual = actual

        expected = daily_quota * hours / WORKDAY_HOURS if daily_quota > 0 else 0.0
        diff = actual - expected
        if daily_quota <= 0:
            status = None
        elif abs(diff) < 1e-9:
            status = Status.EQUAL
        else:
            status = status_for(diff)
        results.append(MarkResult(mark=mark, actual=actual, expected=expected, diff=diff, status=status))

    if daily_quota > 0:
        achievement = round(latest_actual / daily_quota * 100, 2)
        day_status = DayStatus.REACHED if achievement >= 100 else DayStatus.NOT_REACHED
    else:
        achievement = None
        day_status = DayStatus.NO_QUOTA

    return LineAnalysis(
        line=line,
        item_code=str(_cell(row, columns["item_code"]) or "").strip(),
        daily_quota=daily_quota,
        hourly_quota=hourly_quota,
        target_pct=target_pct,
        achievement_pct=achievement,
        day_status=day_status,
        marks=results,
    )


def analyze_block(grid: Grid, target_pct: float = TARGET_EFFICIENCY_PCT) -> BlockAnalysis:
    """Rate every production line of a KPI block at each hour mark and for the day.

    The expected output at a mark is the daily quota pro-rated over an eight hour
    day. A line without a daily quota gets no status at its marks and no day
    outcome. The day outcome uses the output at the latest filled mark. Rows whose
    first column is not a line name (notes, blank rows, footers) are skipped.
    """
    marks = [mark for mark, _ in MARKS]
    if not grid:
        return BlockAnalysis(marks=marks, lines=[])

    sub_idx = find_header_index(grid)
    headers = build_headers(grid, max(0, sub_idx - 1), sub_idx)
    columns = {
        "line": find_column(headers, ("CHUYEN",), LINE_COL),
        "item_code": find_column(headers, ("MAHANG", "MH"), ITEM_CODE_COL),
        "daily_quota": find_column(headers, ("DM/NGAY", "DMNGAY")),
        "hourly_quota": find_column(headers, ("DM/H", "DMH")),
    }
    mark_columns = _mark_columns(headers)

    lines = []
    for row in grid[sub_idx + 1:]:
        row = row or []
        label = _cell(row, columns["line"])
        if not is_line_name(label):
            continue
        lines.append(_analyze_line(row, normalize_line(label), columns, mark_columns, target_pct))

    lines.sort(key=lambda analysis: line_sort_key(analysis.line))
    logger.info(f"Analyzed {len(lines)} lines across {len(marks)} hour marks")
    return BlockAnalysis(marks=marks, lines=lines)
