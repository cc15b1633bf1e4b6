# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Acquisitions API:
# - test_app.py: Root, health and route group endpoints
# - test_pipeline.py: Stage ordering, short-circuits and error flow
# - test_body_parsers.py: JSON and urlencoded parsing, malformed JSON
# - test_cookies.py: Cookie, JSON cookie and signed cookie parsing
# - test_security.py: Security headers, CORS, bot blocking, rate limits
# - test_access_log.py: Combined-format access log lines
# - test_config.py: Settings parsing and computed properties
#
# Run tests with: pytest
# =============================================================================
