import os
from typing import TypedDict

from dotenv import load_dotenv


class AppConfig(TypedDict):
    """Configuration for the application"""

    SPREADSHEET_ID: str | None
    CONFIG_KPI_SHEET_NAME: str
    KPI_SHEET_NAME: str
    KPI_PLAN_RANGE: str
    KPI_ACTUAL_RANGE: str
    HOST: str
    PORT: int


def _first_env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return None


def load_config() -> AppConfig:
    """Load configuration from environment variables

    Nothing here is required at startup. Credentials are resolved separately on the
    first spreadsheet read, and a missing spreadsheet id fails that read.
    """
    load_dotenv()

    return {
        "SPREADSHEET_ID": _first_env("GOOGLE_SHEET_ID", "SPREADSHEET_ID", "GOOGLE_SPREADSHEET_ID", "SHEET_ID"),
        "CONFIG_KPI_SHEET_NAME": _first_env("CONFIG_KPI_SHEET_NAME") or "CONFIG_KPI",
        "KPI_SHEET_NAME": _first_env("KPI_SHEET_NAME") or "KPI",
        "KPI_PLAN_RANGE": _first_env("KPI_PLAN_RANGE") or "Bảng KPI theo giờ!A1:G6",
        "KPI_ACTUAL_RANGE": _first_env("KPI_ACTUAL_RANGE") or "Bảng sản lượng thực tế!A1:G6",
        "HOST": _first_env("HOST") or "0.0.0.0",
        "PORT": int(_first_env("PORT") or 8000),
    }
