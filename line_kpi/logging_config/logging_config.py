import logging
import logging.handlers
import os
from pathlib import Path


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_BYTES = 10_000_000  # 10MB


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(app_name: str = "line-kpi") -> None:
    """Configure application logging

    Logs go to the console, to ``<LOG_DIR>/<app_name>.log`` and, for errors, to
    ``<LOG_DIR>/<app_name>-error.log``. Calling it again replaces the handlers.

    Args:
        app_name: Name to use for log files

    """
    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    os.makedirs(log_dir, exist_ok=True)
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    root_logger.addHandler(_rotating_handler(log_dir / f"{app_name}.log", level, formatter))
    root_logger.addHandler(_rotating_handler(log_dir / f"{app_name}-error.log", logging.ERROR, formatter))

    # Route uvicorn's loggers through the handlers above
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True

    # googleapiclient logs every discovery lookup at INFO
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)
