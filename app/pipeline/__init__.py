# =============================================================================
# app/pipeline/ - Request Pipeline
# =============================================================================
# Ordered request stages run in front of the route handlers:
# - exchange.py: Per-request state shared between stages
# - stage.py: Stage base class (handle / handle_error)
# - runner.py: RequestPipeline middleware that drives the stages
#
# The concrete stages live in app/middleware/.
# =============================================================================

from app.pipeline.exchange import Exchange
from app.pipeline.runner import RequestPipeline
from app.pipeline.stage import Stage

__all__ = [
    "Exchange",
    "RequestPipeline",
    "Stage",
]
