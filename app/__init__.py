# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the Acquisitions web application:
# - main.py: create_app(), exception handlers, root endpoints
# - config.py: Environment variable loading and settings
# - context.py: Process-wide context (settings, logger, start time)
# - pipeline/: Stage base class and the RequestPipeline runner
# - middleware/: The concrete request stages, in registration order
# - auth/, routers/: Route groups mounted under /api
# =============================================================================
