"""Cross-origin resource sharing stage."""
import logging
from typing import Optional, Sequence

from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from app.pipeline import Exchange, Stage

logger = logging.getLogger(__name__)

DEFAULT_METHODS = ("GET", "HEAD", "PUT", "PATCH", "POST", "DELETE")

# Entity headers of Starlette's preflight body; the 204 carries none
_PREFLIGHT_BODY_HEADERS = {"content-length", "content-type"}


class CorsStage(Stage):
    """
    Add CORS headers and answer preflight requests.

    The origin rules and preflight headers come from Starlette's
    CORSMiddleware, used here as a policy object so the stage keeps its
    place in the pipeline order.

    With "*" in the allow-list every origin is accepted and
    Access-Control-Allow-Origin is "*". Otherwise an allowed Origin is
    reflected back and Vary: Origin is added.

    OPTIONS requests are treated as preflight and end with 204.
    """

    name = "cors"

    def __init__(self, origins: Sequence[str] = ("*",), methods: Sequence[str] = DEFAULT_METHODS):
        self.cors = CORSMiddleware(
            app=None,
            allow_origins=list(origins),
            allow_methods=list(methods),
            allow_headers=["*"],
        )

    async def handle(self, exchange: Exchange) -> Optional[Response]:
        request = exchange.request
        origin = request.headers.get("origin")

        for name, value in self.cors.simple_headers.items():
            exchange.set_header(name, value)

        if not self.cors.allow_all_origins:
            if origin and self.cors.is_allowed_origin(origin=origin):
                exchange.set_header("Access-Control-Allow-Origin", origin)
            exchange.add_vary("Origin")

        if request.method != "OPTIONS":
            return None

        return self.preflight(exchange)

    def preflight(self, exchange: Exchange) -> Response:
        """
        Answer an OPTIONS request with 204.

        Disallowed origins still get 204, just without an
        Access-Control-Allow-Origin header; the browser enforces the rest.
        """
        request = exchange.request
        headers = request.headers

        if "origin" in headers and "access-control-request-method" in headers:
            checked = self.cors.preflight_response(request_headers=headers)
            if checked.status_code != 200:
                logger.debug(f"{checked.body.decode()} for {request.url.path}")
            preflight_headers = {
                name: value for name, value in checked.headers.items()
                if name not in _PREFLIGHT_BODY_HEADERS
            }
        else:
            preflight_headers = dict(self.cors.preflight_headers)

        requested_headers = headers.get("access-control-request-headers")
        if requested_headers:
            preflight_headers.setdefault("access-control-allow-headers", requested_headers)
            exchange.add_vary("Access-Control-Request-Headers")

        logger.debug(f"Answered CORS preflight for {request.url.path} from {headers.get('origin', '-')}")
        return Response(status_code=204, headers={**preflight_headers, "Content-Length": "0"})
