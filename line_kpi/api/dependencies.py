from line_kpi.config import AppConfig, load_config
from line_kpi.kpi.checker import KpiChecker
from line_kpi.sheets.client import get_sheets_client
from line_kpi.sheets.models import Grid


class SharedSheetsClient:
    """Reads through the process-wide client, authenticating on the first read"""

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def read_range(self, range_a1: str, value_render_option: str = "FORMATTED_VALUE") -> Grid:
        return get_sheets_client(self.config).read_range(range_a1, value_render_option)


def get_kpi_checker() -> KpiChecker:
    config = load_config()
    return KpiChecker(
        sheets_client=SharedSheetsClient(config),
        config_sheet_name=config["CONFIG_KPI_SHEET_NAME"],
        kpi_sheet_name=config["KPI_SHEET_NAME"],
        plan_range=config["KPI_PLAN_RANGE"],
        actual_range=config["KPI_ACTUAL_RANGE"],
    )
