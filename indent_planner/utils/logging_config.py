"""
Logging setup for indent-planner runs.

Every module logs through logging.getLogger(__name__), so a single handler
pair on the package logger collects the whole engine:
- rotating file under the logs directory (warnings and errors)
- stderr at console_level (critical only unless the CLI asks for more)
"""
import logging
import logging.handlers
from pathlib import Path
from datetime import datetime

APP_LOGGER_NAME = "indent_planner"

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3


def setup_logging(
    log_dir: "str | Path | None" = None,
    app_name: str = APP_LOGGER_NAME,
    console_level: int = logging.CRITICAL,
) -> logging.Logger:
    """
    Attach the file and console handlers to the package logger (once).

    Args:
        log_dir: Directory for the daily log file; get_logs_dir() when None
        app_name: Logger name and log file prefix
        console_level: Minimum level echoed to stderr

    Returns:
        The package logger
    """
    if log_dir is None:
        from .paths import get_logs_dir  # noqa: PLC0415
        log_path = get_logs_dir()
    else:
        log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(app_name)
    logger.setLevel(logging.DEBUG)
    if logger.handlers:
        return logger

    file_handler = logging.handlers.RotatingFileHandler(
        log_path / f"{app_name}_{datetime.now().strftime('%Y%m%d')}.log",
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding='utf-8',
    )
    file_handler.setLevel(logging.WARNING)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    ))
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    return logger
