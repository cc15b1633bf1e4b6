# =============================================================================
# app/pipeline/exchange.py - Per-request Exchange State
# =============================================================================
# An Exchange pairs one request with the state stages build up for it:
# parsed body, cookies, queued response headers and completion callbacks.
# One instance per request; discarded when the response is complete.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Callable

from starlette.requests import Request
from starlette.responses import Response

from app.context import AppContext

FinishCallback = Callable[[Response], None]


@dataclass
class Exchange:
    """
    Mutable state for a single request as it moves through the pipeline.

    Attributes:
        request: The incoming Starlette request
        context: Process-wide application context
        body: Parsed body ({} until a body parser fills it)
        cookies: Parsed Cookie header
        signed_cookies: Verified signed cookies (False for bad signatures)
    """
    request: Request
    context: AppContext
    body: Any = field(default_factory=dict)
    cookies: dict[str, Any] = field(default_factory=dict)
    signed_cookies: dict[str, Any] = field(default_factory=dict)
    body_parsed: bool = False
    _headers: dict[str, str] = field(default_factory=dict, repr=False)
    _vary: list[str] = field(default_factory=list, repr=False)
    _finish_callbacks: list[FinishCallback] = field(default_factory=list, repr=False)

    # -------------------------------------------------------------------------
    # Request helpers
    # -------------------------------------------------------------------------

    async def read_body(self) -> bytes:
        """Read the raw body. Starlette caches it for later readers."""
        return await self.request.body()

    def publish(self) -> None:
        """Expose parsed values to route handlers via request.state."""
        state = self.request.state
        state.body = self.body
        state.cookies = self.cookies
        state.signed_cookies = self.signed_cookies

    # -------------------------------------------------------------------------
    # Response helpers
    # -------------------------------------------------------------------------

    def set_header(self, name: str, value: str) -> None:
        """Queue a header for whatever response ends the exchange."""
        self._headers[name] = value

    def add_vary(self, header_name: str) -> None:
        if header_name.lower() not in (v.lower() for v in self._vary):
            self._vary.append(header_name)

    def apply_headers(self, response: Response) -> None:
        """
        Copy queued headers onto the response.

        Headers the handler set itself take precedence. Vary values are merged.
        """
        for name, value in self._headers.items():
            if name not in response.headers:
                response.headers[name] = value

        if self._vary:
            existing = [v.strip() for v in response.headers.get("vary", "").split(",") if v.strip()]
            known = {v.lower() for v in existing}
            merged = existing + [v for v in self._vary if v.lower() not in known]
            response.headers["Vary"] = ", ".join(merged)

    def on_finish(self, callback: FinishCallback) -> None:
        """Register a callback to run once the response is produced."""
        self._finish_callbacks.append(callback)

    def finish(self, response: Response) -> None:
        for callback in self._finish_callbacks:
            callback(response)
