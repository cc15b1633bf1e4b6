"""Request pipeline stages and the default stage order."""
from app.context import AppContext
from app.middleware.access_log import AccessLogStage
from app.middleware.body_parsers import JsonBodyStage, UrlEncodedBodyStage
from app.middleware.cookies import CookieStage
from app.middleware.cors import CorsStage
from app.middleware.json_errors import JsonErrorStage
from app.middleware.security import SecurityStage
from app.middleware.security_headers import SecurityHeadersStage
from app.pipeline import Stage


def build_default_stages(context: AppContext) -> list[Stage]:
    """
    Stages in registration order. Each stage sees the effects of the
    ones before it; the access log only covers requests that get past
    the JSON error stage.
    """
    settings = context.settings
    return [
        SecurityHeadersStage(),
        JsonBodyStage(limit=settings.body_limit_bytes),
        CorsStage(origins=settings.cors_origins_list),
        UrlEncodedBodyStage(
            limit=settings.body_limit_bytes,
            parameter_limit=settings.URLENCODED_PARAMETER_LIMIT,
        ),
        CookieStage(secret=settings.COOKIE_SECRET),
        JsonErrorStage(context),
        AccessLogStage(context),
        SecurityStage(context),
    ]


__all__ = [
    "AccessLogStage",
    "CookieStage",
    "CorsStage",
    "JsonBodyStage",
    "JsonErrorStage",
    "SecurityHeadersStage",
    "SecurityStage",
    "UrlEncodedBodyStage",
    "build_default_stages",
]
