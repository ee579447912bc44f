import logging

import uvicorn

from line_kpi.config import load_config
from line_kpi.logging_config.logging_config import setup_logging


# ruff: noqa: D103
def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Starting Line KPI API")

    config = load_config()
    if not config["SPREADSHEET_ID"]:
        logger.warning("GOOGLE_SHEET_ID is not set; sheet reads will fail until it is")

    uvicorn.run(
        "line_kpi.api.main:app",
        host=config["HOST"],
        port=config["PORT"],
        log_config=None,
    )


if __name__ == "__main__":
    main()
