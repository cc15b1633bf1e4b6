# =============================================================================
# app/pipeline/runner.py - Request Pipeline Runner
# =============================================================================
# Runs an ordered list of stages in front of the route handlers.
#
# For each request:
# 1. Walk the stages in registration order
#    - No pending error: stage.handle(); a Response short-circuits,
#      a raised PipelineError becomes the pending error
#    - Pending error: stage.handle_error(); a Response short-circuits
# 2. An error still pending after the last stage goes to the default handler
# 3. Otherwise dispatch to the routes; an exception from a route becomes
#    the generic 500
# 4. Apply queued headers and run completion callbacks on the final response
#
# Usage:
#   app.add_middleware(RequestPipeline, stages=stages, context=context)
# =============================================================================

import logging
from typing import Optional, Sequence

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.context import AppContext
from app.exceptions import PipelineError, error_response, internal_error_response
from app.pipeline.exchange import Exchange
from app.pipeline.stage import Stage

logger = logging.getLogger(__name__)


class RequestPipeline(BaseHTTPMiddleware):
    """
    Starlette middleware that drives the stage list for every request.
    """

    def __init__(self, app, stages: Sequence[Stage], context: AppContext):
        super().__init__(app)
        self.stages = list(stages)
        self.context = context

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        exchange = Exchange(request=request, context=self.context)

        response = await self.run(exchange)
        if response is None:
            exchange.publish()
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.exception(f"Unexpected error: {exc}")
                response = internal_error_response()

        exchange.apply_headers(response)
        exchange.finish(response)
        return response

    async def run(self, exchange: Exchange) -> Optional[Response]:
        """
        Run every stage for one exchange.

        Returns:
            The short-circuit response, or None when the request should
            proceed to route dispatch.
        """
        error: Optional[PipelineError] = None

        for stage in self.stages:
            try:
                if error is None:
                    response = await stage.handle(exchange)
                else:
                    response = await stage.handle_error(error, exchange)
            except PipelineError as exc:
                logger.debug(f"{stage.name} raised {exc.kind}: {exc.message}")
                error = exc
                continue

            if response is not None:
                return response

        if error is not None:
            return self.default_error_handler(error, exchange)

        return None

    def default_error_handler(self, error: PipelineError, exchange: Exchange) -> Response:
        """Render an error no stage handled."""
        request = exchange.request
        logger.warning(
            f"Unhandled {error.kind} on {request.method} {request.url.path}: {error.message}"
        )
        return error_response(error)
