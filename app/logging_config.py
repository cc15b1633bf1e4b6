# =============================================================================
# app/logging_config.py - Logging Setup
# =============================================================================
# Configures the stdlib logging tree once at startup.
#
# - Console output always
# - error.log (ERROR and above) and combined.log (everything) when LOG_DIR is set
#
# Usage:
#   from app.logging_config import configure_logging
#   logger = configure_logging(settings)
# =============================================================================

import logging
from pathlib import Path

from app.config import Settings

LOGGER_NAME = "acquisitions"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Configure root logging and return the application logger.

    Calling this more than once replaces the handlers installed by the
    previous call (basicConfig with force=True).
    """
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if settings.LOG_DIR:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)

        error_handler = logging.FileHandler(log_dir / "error.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)

        handlers.append(logging.FileHandler(log_dir / "combined.log", encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    return logger
