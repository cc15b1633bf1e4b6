# =============================================================================
# app/pipeline/stage.py - Stage Base Class
# =============================================================================
# A Stage is one step of request processing. The runner calls:
#   handle(exchange)              while no error is pending
#   handle_error(error, exchange) once a stage has raised a PipelineError
#
# Both return None to forward, or a Response to end the exchange.
# =============================================================================

from typing import Optional

from starlette.responses import Response

from app.exceptions import PipelineError
from app.pipeline.exchange import Exchange


class Stage:
    """Base class for pipeline stages. Both hooks forward by default."""

    name = "stage"

    async def handle(self, exchange: Exchange) -> Optional[Response]:
        return None

    async def handle_error(
        self,
        error: PipelineError,
        exchange: Exchange
    ) -> Optional[Response]:
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
