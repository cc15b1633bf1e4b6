# =============================================================================
# app/middleware/cookies.py - Cookie Parsing Stage
# =============================================================================
# Parses the Cookie header into exchange.cookies.
#
# - First occurrence of a name wins
# - Values are percent-decoded, surrounding quotes stripped
# - "j:" values are decoded as JSON cookies
# - With a secret, "s:" values are verified and moved to signed_cookies
#   (False when the signature does not match)
# =============================================================================

import base64
import hashlib
import hmac
import json
from typing import Any, Optional
from urllib.parse import unquote

from starlette.responses import Response

from app.pipeline import Exchange, Stage


def parse_cookie_header(header: Optional[str]) -> dict[str, str]:
    """
    Split a Cookie header into a name -> value mapping.

    Example:
        "a=1; b=2" -> {"a": "1", "b": "2"}
    """
    cookies: dict[str, str] = {}
    if not header:
        return cookies

    for pair in header.split(";"):
        if "=" not in pair:
            continue

        name, value = pair.split("=", 1)
        name = name.strip()
        if not name or name in cookies:
            continue

        value = value.strip()
        if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
            value = value[1:-1]

        cookies[name] = unquote(value) if "%" in value else value

    return cookies


# =============================================================================
# Signed cookies
# =============================================================================

def _signature(value: str, secret: str) -> str:
    digest = hmac.new(secret.encode(), value.encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode().rstrip("=")


def sign_cookie(value: str, secret: str) -> str:
    """
    Sign a cookie value. The result is what a client sends back.

    Example:
        sign_cookie("abc", "secret") -> "s:abc.<signature>"
    """
    return f"s:{value}.{_signature(value, secret)}"


def unsign_cookie(signed: str, secret: str) -> Optional[str]:
    """
    Verify "<value>.<signature>" and return the value, or None if tampered.
    """
    if "." not in signed:
        return None

    value = signed[:signed.rindex(".")]
    expected = f"{value}.{_signature(value, secret)}"
    if hmac.compare_digest(expected.encode(), signed.encode()):
        return value
    return None


def decode_json_cookie(value: Any) -> Any:
    """Decode "j:" JSON cookies. Other values are returned unchanged."""
    if not isinstance(value, str) or not value.startswith("j:"):
        return value
    try:
        return json.loads(value[2:])
    except ValueError:
        return value


class CookieStage(Stage):
    """Populate exchange.cookies (and signed_cookies when a secret is set)."""

    name = "cookies"

    def __init__(self, secret: Optional[str] = None):
        self.secret = secret

    async def handle(self, exchange: Exchange) -> Optional[Response]:
        cookies: dict[str, Any] = parse_cookie_header(exchange.request.headers.get("cookie"))
        signed: dict[str, Any] = {}

        if self.secret:
            for name in [n for n, v in cookies.items() if v.startswith("s:")]:
                value = unsign_cookie(cookies.pop(name)[2:], self.secret)
                signed[name] = value if value is not None else False

        exchange.cookies = {name: decode_json_cookie(value) for name, value in cookies.items()}
        exchange.signed_cookies = {name: decode_json_cookie(value) for name, value in signed.items()}
        return None
