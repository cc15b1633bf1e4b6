# =============================================================================
# app/context.py - Process-wide Application Context
# =============================================================================
# Holds the state shared by every request: settings, the application logger,
# and the process start time used for uptime.
#
# The start time is read once when this module is imported, so every app
# built in the process reports the same uptime.
#
# Created once in create_app() and stored on app.state.context.
# Stages receive it in their constructor; route handlers use get_context().
# =============================================================================

import logging
import time
from dataclasses import dataclass

from fastapi import Request

from app.config import Settings
from app.logging_config import configure_logging

PROCESS_STARTED = time.monotonic()


@dataclass(frozen=True)
class AppContext:
    """
    Read-only process context shared by stages and handlers.

    Attributes:
        settings: Validated application settings
        logger: The application logger
        started_monotonic: Monotonic clock reading at process start
    """
    settings: Settings
    logger: logging.Logger
    started_monotonic: float = PROCESS_STARTED

    @classmethod
    def initialize(cls, settings: Settings) -> "AppContext":
        """Configure logging and build the context."""
        logger = configure_logging(settings)
        return cls(settings=settings, logger=logger)

    def uptime(self) -> float:
        """Seconds since the process started."""
        return max(0.0, time.monotonic() - self.started_monotonic)


def get_context(request: Request) -> AppContext:
    """
    FastAPI dependency returning the context of the running app.

    Usage:
        @router.get("/health")
        async def health(context: AppContext = Depends(get_context)):
            ...
    """
    return request.app.state.context
