"""Security headers stage."""
from typing import Dict, Optional

from starlette.responses import Response

from app.pipeline import Exchange, Stage

DEFAULT_CSP = (
    "default-src 'self';"
    "base-uri 'self';"
    "font-src 'self' https: data:;"
    "form-action 'self';"
    "frame-ancestors 'self';"
    "img-src 'self' data:;"
    "object-src 'none';"
    "script-src 'self';"
    "script-src-attr 'none';"
    "style-src 'self' https: 'unsafe-inline';"
    "upgrade-insecure-requests"
)


class SecurityHeadersStage(Stage):
    """
    Add hardening headers to every response.

    - X-Content-Type-Options: nosniff
    - X-Frame-Options: SAMEORIGIN
    - Strict-Transport-Security: max-age=31536000; includeSubDomains
    - Content-Security-Policy
    - Referrer-Policy, cross-origin isolation and legacy browser headers
    """

    name = "security-headers"

    DEFAULT_HEADERS = {
        "Cross-Origin-Opener-Policy": "same-origin",
        "Cross-Origin-Resource-Policy": "same-origin",
        "Origin-Agent-Cluster": "?1",
        "Referrer-Policy": "no-referrer",
        "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
        "X-Content-Type-Options": "nosniff",
        "X-DNS-Prefetch-Control": "off",
        "X-Download-Options": "noopen",
        "X-Frame-Options": "SAMEORIGIN",
        "X-Permitted-Cross-Domain-Policies": "none",
        "X-XSS-Protection": "0",
    }

    def __init__(
        self,
        csp_policy: Optional[str] = None,
        custom_headers: Optional[Dict[str, str]] = None
    ):
        """
        Args:
            csp_policy: Content Security Policy (or None for default)
            custom_headers: Additional headers, overriding defaults by name
        """
        self.csp_policy = csp_policy or DEFAULT_CSP
        self.custom_headers = custom_headers or {}

    def get_security_headers(self) -> Dict[str, str]:
        """
        Get all security headers as a dictionary.

        Returns:
            Dict of header name -> value
        """
        headers = {"Content-Security-Policy": self.csp_policy}
        headers.update(self.DEFAULT_HEADERS)
        headers.update(self.custom_headers)
        return headers

    async def handle(self, exchange: Exchange) -> Optional[Response]:
        for header, value in self.get_security_headers().items():
            exchange.set_header(header, value)
        return None
