# =============================================================================
# app/middleware/security.py - Application Security Stage
# =============================================================================
# Runs after parsing and logging, right before route dispatch.
#
# - Rejects deny-listed User-Agents (403)
# - Sliding-window rate limit per client IP and role (429)
#
# The role comes from request.state.user when an upstream collaborator
# authenticated the request; anonymous clients are "guest".
# =============================================================================

import time
from collections import deque
from typing import Any, Callable, Mapping, Optional, Sequence

from fastapi.responses import JSONResponse
from starlette.requests import Request
from starlette.responses import Response

from app.context import AppContext
from app.pipeline import Exchange, Stage

DEFAULT_ROLE = "guest"


class SlidingWindowRateLimiter:
    """
    In-memory sliding-window limiter.

    Each key keeps the timestamps of its accepted hits inside the window.
    Not thread-safe; shared by requests on a single event loop.
    """

    def __init__(self, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.window = window_seconds
        self.clock = clock
        self._hits: dict[Any, deque] = {}
        self._last_sweep = clock()

    def hit(self, key: Any, limit: int) -> tuple[bool, float]:
        """
        Record a hit for key.

        Returns:
            (allowed, retry_after_seconds); retry_after is 0 when allowed
        """
        now = self.clock()
        if now - self._last_sweep >= self.window:
            self.sweep(now)

        hits = self._hits.setdefault(key, deque())
        self._evict(hits, now)

        if len(hits) >= limit:
            return False, hits[0] + self.window - now

        hits.append(now)
        return True, 0.0

    def _evict(self, hits: deque, now: float) -> None:
        while hits and hits[0] <= now - self.window:
            hits.popleft()

    def sweep(self, now: float) -> None:
        """Forget every key whose hits have all left the window."""
        for key in list(self._hits):
            self._evict(self._hits[key], now)
            if not self._hits[key]:
                del self._hits[key]
        self._last_sweep = now

    def __len__(self) -> int:
        return len(self._hits)


def client_ip(request: Request, trust_proxy_headers: bool = False) -> str:
    """
    Address used as the rate limit key.

    The first X-Forwarded-For entry is used only when trust_proxy_headers
    is set; otherwise the socket peer address.
    """
    forwarded = request.headers.get("x-forwarded-for") if trust_proxy_headers else None
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def resolve_role(request: Request, known_roles: Sequence[str]) -> str:
    """Role of the authenticated user on request.state, or guest."""
    user = getattr(request.state, "user", None)
    if isinstance(user, Mapping):
        role = user.get("role")
    else:
        role = getattr(user, "role", None)
    return role if role in known_roles else DEFAULT_ROLE


class SecurityStage(Stage):
    """Bot blocking and per-role rate limiting."""

    name = "security"

    def __init__(
        self,
        context: AppContext,
        limiter: Optional[SlidingWindowRateLimiter] = None
    ):
        settings = context.settings
        self.logger = context.logger
        self.enabled = settings.SECURITY_ENABLED
        self.limits = settings.rate_limits
        self.blocked_user_agents = settings.blocked_user_agents_list
        self.exempt_paths = settings.rate_limit_exempt_paths
        self.trust_proxy_headers = settings.TRUST_PROXY_HEADERS
        self.limiter = limiter or SlidingWindowRateLimiter(settings.RATE_LIMIT_WINDOW_SECONDS)

    def is_blocked_agent(self, user_agent: str) -> bool:
        user_agent = user_agent.lower()
        return any(blocked in user_agent for blocked in self.blocked_user_agents)

    async def handle(self, exchange: Exchange) -> Optional[Response]:
        if not self.enabled:
            return None

        request = exchange.request
        ip = client_ip(request, self.trust_proxy_headers)

        if self.is_blocked_agent(request.headers.get("user-agent", "")):
            self.logger.warning(f"Bot request blocked: {ip} {request.method} {request.url.path}")
            return JSONResponse(
                status_code=403,
                content={"error": "Forbidden", "message": "Automated requests are not allowed"},
            )

        if request.url.path in self.exempt_paths:
            return None

        role = resolve_role(request, list(self.limits))
        allowed, retry_after = self.limiter.hit((role, ip), self.limits[role])

        if not allowed:
            self.logger.warning(f"Rate limit exceeded for {ip} ({role}) on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"error": "Forbidden", "message": "Too many requests"},
                headers={"Retry-After": str(int(retry_after) + 1)},
            )

        return None
