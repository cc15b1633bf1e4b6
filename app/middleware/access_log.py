"""
Access Log Stage

Writes one Apache "combined" line per completed request through the
application logger:

    127.0.0.1 - - [10/Oct/2025:13:55:36 +0000] "GET /api HTTP/1.1" 200 44 "-" "curl/8.4.0"

Usage:
    stages.append(AccessLogStage(context))
"""

import base64
import binascii
from datetime import datetime, timezone
from typing import Callable, Optional

from starlette.requests import Request
from starlette.responses import Response

from app.context import AppContext
from app.pipeline import Exchange, Stage

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def clf_date(moment: datetime) -> str:
    """Format a datetime as a Common Log Format timestamp (UTC)."""
    moment = moment.astimezone(timezone.utc)
    return (
        f"{moment.day:02d}/{MONTHS[moment.month - 1]}/{moment.year}:"
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d} +0000"
    )


def remote_user(request: Request) -> Optional[str]:
    """User name from HTTP Basic credentials, if any."""
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "basic" or not credentials:
        return None
    try:
        decoded = base64.b64decode(credentials.strip()).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    user, sep, _ = decoded.partition(":")
    return user if sep else None


def original_url(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def format_combined(request: Request, response: Response, now: Optional[datetime] = None) -> str:
    """Build a combined-format access log line for one exchange."""
    now = now or datetime.now(timezone.utc)
    remote_addr = request.client.host if request.client else None
    http_version = request.scope.get("http_version", "1.1")
    referrer = request.headers.get("referer") or request.headers.get("referrer")

    return (
        f'{remote_addr or "-"} - {remote_user(request) or "-"} [{clf_date(now)}] '
        f'"{request.method} {original_url(request)} HTTP/{http_version}" '
        f'{response.status_code} {response.headers.get("content-length", "-")} '
        f'"{referrer or "-"}" "{request.headers.get("user-agent", "-")}"'
    )


class AccessLogStage(Stage):
    """Log every request that reaches this stage once its response is ready."""

    name = "access-log"

    def __init__(
        self,
        context: AppContext,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self.logger = context.logger
        self.clock = clock

    async def handle(self, exchange: Exchange) -> Optional[Response]:
        request = exchange.request

        def write(response: Response) -> None:
            self.logger.info(format_combined(request, response, self.clock()).strip())

        exchange.on_finish(write)
        return None
