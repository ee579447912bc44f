import logging
import re
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from line_kpi.errors import NotFoundError
from line_kpi.sheets.models import CellValue, ConfigEntry, Grid


logger = logging.getLogger(__name__)

# Day zero of Google Sheets date serials
SERIAL_EPOCH = date(1899, 12, 30)
DATE_FORMAT = "%d/%m/%Y"

_SERIAL_PATTERN = re.compile(r"^\d+(\.\d+)?$")
# Optional sheet prefix, then a cell, column or row span such as A19:AZ37 or A:B
_A1_PATTERN = re.compile(r"^(?:.+!)?\$?[A-Za-z]{0,3}\$?\d*(?::\$?[A-Za-z]{0,3}\$?\d*)?$")


def serial_to_date_str(serial: float | str) -> str:
    """Convert a spreadsheet date serial to dd/mm/yyyy"""
    days = int(float(serial))
    return (SERIAL_EPOCH + timedelta(days=days)).strftime(DATE_FORMAT)


def normalize_date_cell(value: CellValue) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, int | float):
        return serial_to_date_str(value)

    text = str(value).strip()
    if _SERIAL_PATTERN.match(text):
        return serial_to_date_str(text)
    return text


def looks_like_a1_range(text: str) -> bool:
    return bool(_A1_PATTERN.match(text.strip()))


def _is_header(row: list[CellValue]) -> bool:
    """A first row whose second cell is not an A1 range holds column titles"""
    if len(row) < 2:
        return False
    return not looks_like_a1_range(str(row[1] or ""))


def parse_config_rows(grid: Grid) -> list[ConfigEntry]:
    """Read (date, range) pairs out of the config sheet's first two columns"""
    rows = grid[1:] if grid and _is_header(grid[0] or []) else grid

    entries = []
    for row in rows:
        row = row or []
        if len(row) < 2:
            continue
        entry_date = normalize_date_cell(row[0])
        entry_range = str(row[1] or "").strip()
        if entry_date and entry_range:
            entries.append(ConfigEntry(date=entry_date, range=entry_range))
    return entries


def resolve_range(target_date: str, entries: Iterable[ConfigEntry]) -> str:
    """Return the range configured for a date; the first matching row wins"""
    target = (target_date or "").strip()
    for entry in entries:
        if entry.date == target:
            return entry.range

    logger.info(f"No range configured for {target}")
    raise NotFoundError(f"No range found for date {target}")


def build_range_map(entries: Iterable[ConfigEntry]) -> dict[str, str]:
    """Map every configured date to its range, keeping the first row per date"""
    range_map: dict[str, str] = {}
    for entry in entries:
        range_map.setdefault(entry.date, entry.range)
    return range_map


def _date_sort_key(value: str) -> tuple[int, date, str]:
    try:
        return (0, datetime.strptime(value, DATE_FORMAT).date(), value)
    except ValueError:
        return (1, date.min, value)


def list_dates(entries: Iterable[ConfigEntry]) -> list[str]:
    """Configured dates in calendar order, anything unparsable last"""
    return sorted({entry.date for entry in entries}, key=_date_sort_key)


def qualify_range(range_a1: str, sheet_name: str) -> str:
    """Prefix a bare A1 range with the default KPI sheet"""
    if "!" in range_a1:
        return range_a1
    return f"'{sheet_name}'!{range_a1}"
