"""Tests for the date to range lookup."""

import pytest

from line_kpi.errors import NotFoundError
from line_kpi.kpi.config_lookup import (
    build_range_map,
    list_dates,
    normalize_date_cell,
    parse_config_rows,
    qualify_range,
    resolve_range,
    serial_to_date_str,
)
from line_kpi.sheets.models import ConfigEntry

from .sheet_fixtures import CONFIG_GRID


def test_serial_to_date_str():
    assert serial_to_date_str(1) == "31/12/1899"
    assert serial_to_date_str(45000) == "15/03/2023"
    assert serial_to_date_str("46016") == "25/12/2025"
    assert serial_to_date_str(45000.75) == "15/03/2023"


def test_normalize_date_cell():
    assert normalize_date_cell(" 23/12/2025 ") == "23/12/2025"
    assert normalize_date_cell(46016) == "25/12/2025"
    assert normalize_date_cell("46016") == "25/12/2025"
    assert normalize_date_cell(None) == ""


def test_resolve_range_without_header():
    entries = parse_config_rows([["23/12/2025", "KPI!A19:AZ37"]])

    assert resolve_range("23/12/2025", entries) == "KPI!A19:AZ37"
    with pytest.raises(NotFoundError) as exc_info:
        resolve_range("01/01/2099", entries)
    assert exc_info.value.code == "DATE_NOT_FOUND"


def test_parse_config_rows_skips_header_and_incomplete_rows():
    entries = parse_config_rows(CONFIG_GRID)
    assert entries == [
        ConfigEntry("23/12/2025", "KPI!A19:AZ37"),
        ConfigEntry("24/12/2025", "KPI!A4:AJ18"),
        ConfigEntry("25/12/2025", "A40:AJ55"),
        ConfigEntry("23/12/2025", "KPI!A60:AJ75"),
    ]


def test_duplicate_dates_first_row_wins():
    entries = parse_config_rows(CONFIG_GRID)
    assert resolve_range(" 23/12/2025", entries) == "KPI!A19:AZ37"
    assert build_range_map(entries)["23/12/2025"] == "KPI!A19:AZ37"


def test_list_dates_sorted_by_calendar():
    entries = [
        ConfigEntry("02/01/2026", "r"),
        ConfigEntry("someday", "r"),
        ConfigEntry("24/12/2025", "r"),
        ConfigEntry("02/01/2026", "r"),
    ]
    assert list_dates(entries) == ["24/12/2025", "02/01/2026", "someday"]


def test_qualify_range():
    assert qualify_range("KPI!A1:B2", "Other") == "KPI!A1:B2"
    assert qualify_range("A1:B2", "KPI") == "'KPI'!A1:B2"


@pytest.mark.parametrize(
    "header",
    [["Ngày", "Phạm vi"], ["date", "range"], ["NGÀY", "VÙNG DỮ LIỆU"]],
)
def test_any_title_row_is_skipped(header):
    entries = parse_config_rows([header, ["23/12/2025", "KPI!A19:AZ37"]])
    assert entries == [ConfigEntry("23/12/2025", "KPI!A19:AZ37")]


@pytest.mark.parametrize("range_a1", ["KPI!A19:AZ37", "'Bảng KPI'!A4:AJ18", "A40:AJ55", "A:B", "$A$1:$B$9"])
def test_first_row_with_a_range_is_data(range_a1):
    entries = parse_config_rows([["23/12/2025", range_a1]])
    assert entries == [ConfigEntry("23/12/2025", range_a1)]
