import logging
from typing import Protocol

from line_kpi.errors import ValidationError
from line_kpi.sheets.models import BlockAnalysis, ConfigEntry, Grid, KpiComparison

from . import comparator, config_lookup, line_block


logger = logging.getLogger(__name__)


class RangeReader(Protocol):
    def read_range(self, range_a1: str, value_render_option: str = "FORMATTED_VALUE") -> Grid: ...


class KpiChecker:
    """Main class for checking KPI blocks against their plan"""

    def __init__(
        self,
        sheets_client: RangeReader,
        config_sheet_name: str = "CONFIG_KPI",
        kpi_sheet_name: str = "KPI",
        plan_range: str = "Bảng KPI theo giờ!A1:G6",
        actual_range: str = "Bảng sản lượng thực tế!A1:G6",
        target_pct: float = comparator.TARGET_EFFICIENCY_PCT,
    ) -> None:
        self.sheets_client = sheets_client
        self.config_sheet_name = config_sheet_name
        self.kpi_sheet_name = kpi_sheet_name
        self.plan_range = plan_range
        self.actual_range = actual_range
        self.target_pct = target_pct

    def config_entries(self) -> list[ConfigEntry]:
        """Read the date to range mapping from the config sheet"""
        grid = self.sheets_client.read_range(f"'{self.config_sheet_name}'!A:B")
        entries = config_lookup.parse_config_rows(grid)
        logger.info(f"Loaded {len(entries)} config entries from {self.config_sheet_name}")
        return entries

    def range_for_date(self, date: str) -> str:
        date = self._require_date(date)
        range_a1 = config_lookup.resolve_range(date, self.config_entries())
        return config_lookup.qualify_range(range_a1, self.kpi_sheet_name)

    def check(self, date: str) -> tuple[str, str, Grid]:
        """Return the date, its range and the raw values of that range"""
        date = self._require_date(date)
        range_a1 = self.range_for_date(date)
        logger.info(f"Checking KPI for {date} in {range_a1}")
        return date, range_a1, self.sheets_client.read_range(range_a1)

    def report(self, date: str) -> tuple[str, str, KpiComparison]:
        """Compare the KPI block configured for a date"""
        date, range_a1, values = self.check(date)
        return date, range_a1, comparator.compare(values, self.target_pct)

    def analyze(self, date: str) -> tuple[str, str, BlockAnalysis]:
        """Rate each production line of the block configured for a date"""
        date, range_a1, values = self.check(date)
        return date, range_a1, line_block.analyze_block(values, self.target_pct)

    def input_alerts(self) -> list[str]:
        """Compare the fixed plan range with the fixed actual range"""
        plan_grid = self.sheets_client.read_range(self.plan_range)
        actual_grid = self.sheets_client.read_range(self.actual_range)
        alerts = comparator.compare_grids(plan_grid, actual_grid)
        logger.info(f"Input comparison produced {len(alerts)} alerts")
        return alerts

    def list_dates(self) -> list[str]:
        return config_lookup.list_dates(self.config_entries())

    def range_map(self) -> dict[str, str]:
        return config_lookup.build_range_map(self.config_entries())

    @staticmethod
    def _require_date(date: str | None) -> str:
        date = (date or "").strip()
        if not date:
            raise ValidationError("Missing date (expected dd/mm/yyyy)", code="MISSING_DATE")
        return date
