"""Process-wide logging configuration."""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from app.config import settings


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Configure the root logger to write to stdout.

    JSON lines are emitted when json_output (or LOG_JSON) is on, plain text
    otherwise.
    """
    level = (level or settings.log_level).upper()
    json_output = settings.log_json if json_output is None else json_output

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Prevent duplicate logs by removing existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    log_handler = logging.StreamHandler(sys.stdout)
    if json_output:
        formatter: logging.Formatter = JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
    log_handler.setFormatter(formatter)
    root_logger.addHandler(log_handler)

    # Noise reduction for transport and driver layers
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    root_logger.debug("Logging configured (level=%s, json=%s)", level, json_output)
