# =============================================================================
# app/middleware/body_parsers.py - Request Body Parsing Stages
# =============================================================================
# Two stages that parse request bodies into exchange.body:
# - JsonBodyStage: application/json (strict: top level must be object/array)
# - UrlEncodedBodyStage: application/x-www-form-urlencoded with nested keys
#
# Failures are raised as PipelineError subclasses so error stages can
# decide what the client sees.
# =============================================================================

import json
import logging
import re
from typing import Any, Optional
from urllib.parse import parse_qsl

from starlette.responses import Response

from app.exceptions import (
    BodyParseError,
    ParameterLimitError,
    PayloadTooLargeError,
    UnsupportedCharsetError,
)
from app.pipeline import Exchange, Stage

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100 * 1024
JSON_WHITESPACE = " \t\n\r"

# Numeric bracket indices above this stay as dict keys
ARRAY_INDEX_LIMIT = 20

_KEY_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


# =============================================================================
# Content-Type helpers
# =============================================================================

def parse_content_type(header: Optional[str]) -> tuple[str, dict[str, str]]:
    """
    Split a Content-Type header into media type and parameters.

    Example:
        "application/json; charset=UTF-8" -> ("application/json", {"charset": "utf-8"})
    """
    if not header:
        return "", {}

    media_type, *raw_params = header.split(";")
    params = {}
    for raw in raw_params:
        if "=" not in raw:
            continue
        key, value = raw.split("=", 1)
        params[key.strip().lower()] = value.strip().strip('"').lower()

    return media_type.strip().lower(), params


class BodyStage(Stage):
    """Shared behavior for body parsers: media type match, limit, decoding."""

    media_type = ""
    decode_errors = "strict"

    def __init__(self, limit: int = DEFAULT_LIMIT):
        self.limit = limit

    def matches(self, exchange: Exchange) -> bool:
        media_type, _ = parse_content_type(exchange.request.headers.get("content-type"))
        return media_type == self.media_type

    def is_charset_supported(self, charset: str) -> bool:
        return charset == "utf-8"

    async def read_text(self, exchange: Exchange) -> str:
        """Read, size-check and decode the raw body."""
        _, params = parse_content_type(exchange.request.headers.get("content-type"))
        charset = params.get("charset", "utf-8")

        if not self.is_charset_supported(charset):
            raise UnsupportedCharsetError(charset)

        raw = await exchange.read_body()
        if len(raw) > self.limit:
            raise PayloadTooLargeError(len(raw), self.limit)

        try:
            return raw.decode(charset, self.decode_errors)
        except LookupError:
            raise UnsupportedCharsetError(charset)
        except UnicodeDecodeError as e:
            raise BodyParseError(f"Invalid {charset} body: {e}")

    async def handle(self, exchange: Exchange) -> Optional[Response]:
        if exchange.body_parsed or not self.matches(exchange):
            return None

        text = await self.read_text(exchange)
        exchange.body = self.parse(text) if text else {}
        exchange.body_parsed = True
        return None

    def parse(self, text: str) -> Any:
        raise NotImplementedError


# =============================================================================
# JSON
# =============================================================================

def _reject_constant(name: str) -> Any:
    raise ValueError(f"Unexpected token {name[0]} in JSON")


class JsonBodyStage(BodyStage):
    """
    Parse application/json bodies.

    Only top-level objects and arrays are accepted. NaN and Infinity are
    rejected, matching standard JSON.
    """

    name = "json-body"
    media_type = "application/json"

    def is_charset_supported(self, charset: str) -> bool:
        return charset.startswith("utf-")

    def parse(self, text: str) -> Any:
        stripped = text.lstrip(JSON_WHITESPACE)
        if not stripped:
            return {}

        first = stripped[0]
        if first not in "{[":
            position = len(text) - len(stripped)
            raise BodyParseError(
                f"Unexpected token {first} in JSON at position {position}",
                body=text,
            )

        try:
            return json.loads(text, parse_constant=_reject_constant)
        except ValueError as e:
            logger.debug(f"Rejected JSON body: {e}")
            raise BodyParseError(str(e), body=text)


# =============================================================================
# URL-encoded forms
# =============================================================================

def split_key(key: str) -> list[str]:
    """
    Split a bracketed form key into its path.

    Examples:
        "user[name]"    -> ["user", "name"]
        "tags[]"        -> ["tags", ""]
        "a[b][c]"       -> ["a", "b", "c"]
        "plain"         -> ["plain"]
        "broken[x"      -> ["broken[x"]
    """
    bracket = key.find("[")
    if bracket <= 0:
        return [key]

    root, rest = key[:bracket], key[bracket:]
    segments = _KEY_SEGMENT.findall(rest)
    if "".join(f"[{segment}]" for segment in segments) != rest:
        return [key]
    return [root, *segments]


def _set_leaf(container: dict, key: str, value: Any) -> None:
    if key not in container:
        container[key] = value
    elif isinstance(container[key], list):
        container[key].append(value)
    else:
        container[key] = [container[key], value]


def _as_dict(value: Any) -> dict:
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        return {str(index): item for index, item in enumerate(value)}
    if value is None:
        return {}
    return {"0": value}


def _assign(container: dict, path: list[str], value: Any) -> None:
    head, rest = path[0], path[1:]

    if not rest:
        _set_leaf(container, head, value)
        return

    if rest == [""]:
        current = container.get(head)
        if current is None:
            container[head] = [value]
        elif isinstance(current, list):
            current.append(value)
        elif isinstance(current, dict):
            current[str(len(current))] = value
        else:
            container[head] = [current, value]
        return

    if rest[0] == "":
        # a[][b]=1 starts a new object in the list
        current = container.get(head)
        items = current if isinstance(current, list) else ([] if current is None else [current])
        child: dict = {}
        _assign(child, rest[1:], value)
        items.append(child)
        container[head] = items
        return

    child = _as_dict(container.get(head))
    container[head] = child
    _assign(child, rest, value)


def _compact(value: Any) -> Any:
    """Turn dicts keyed only by small integers into lists, recursively."""
    if isinstance(value, list):
        return [_compact(item) for item in value]
    if not isinstance(value, dict):
        return value

    value = {key: _compact(item) for key, item in value.items()}
    if value and all(key.isdigit() and int(key) <= ARRAY_INDEX_LIMIT for key in value):
        return [value[key] for key in sorted(value, key=int)]
    return value


def parse_urlencoded(text: str, parameter_limit: int = 1000) -> dict[str, Any]:
    """
    Parse a urlencoded body into a nested dict.

    Examples:
        "a=1&b=2"            -> {"a": "1", "b": "2"}
        "a=1&a=2"            -> {"a": ["1", "2"]}
        "user[name]=Ann"     -> {"user": {"name": "Ann"}}
        "ids[]=1&ids[]=2"    -> {"ids": ["1", "2"]}
        "ids[0]=x&ids[1]=y"  -> {"ids": ["x", "y"]}

    Raises:
        ParameterLimitError: If the body has more than parameter_limit pairs
    """
    if text.count("&") + 1 > parameter_limit:
        raise ParameterLimitError(parameter_limit)

    result: dict[str, Any] = {}
    for key, value in parse_qsl(text, keep_blank_values=True):
        if not key:
            continue
        _assign(result, split_key(key), value)

    return {key: _compact(item) for key, item in result.items()}


class UrlEncodedBodyStage(BodyStage):
    """Parse application/x-www-form-urlencoded bodies with nested keys."""

    name = "urlencoded-body"
    media_type = "application/x-www-form-urlencoded"
    # Undecodable bytes become U+FFFD, as parse_qsl does for escapes
    decode_errors = "replace"

    def __init__(self, limit: int = DEFAULT_LIMIT, parameter_limit: int = 1000):
        super().__init__(limit)
        self.parameter_limit = parameter_limit

    def parse(self, text: str) -> Any:
        return parse_urlencoded(text, self.parameter_limit)
