"""Error stage that turns malformed JSON bodies into a friendly 400."""
from typing import Optional

from fastapi.responses import JSONResponse
from starlette.responses import Response

from app.context import AppContext
from app.exceptions import BodyParseError, PipelineError
from app.pipeline import Exchange, Stage

INVALID_JSON_PAYLOAD = {
    "error": "Invalid JSON format",
    "message": "Please check your request body format",
}


class JsonErrorStage(Stage):
    """
    Answer body syntax errors with a fixed payload.

    Only BodyParseError with status 400 is handled. Everything else is
    forwarded unchanged.
    """

    name = "json-errors"

    def __init__(self, context: AppContext):
        self.logger = context.logger

    @staticmethod
    def matches(error: PipelineError) -> bool:
        return (
            isinstance(error, BodyParseError)
            and error.kind == BodyParseError.kind
            and error.status == 400
        )

    async def handle_error(
        self,
        error: PipelineError,
        exchange: Exchange
    ) -> Optional[Response]:
        if not self.matches(error):
            return None

        self.logger.error(f"JSON parsing error: {error.message}")
        return JSONResponse(status_code=400, content=INVALID_JSON_PAYLOAD)
