# =============================================================================
# tests/test_cookies.py - Cookie Parsing Tests
# =============================================================================
# Tests for Cookie header parsing, JSON cookies and signed cookies.
# =============================================================================

from fastapi.testclient import TestClient

from app.main import create_app
from app.middleware.cookies import (
    decode_json_cookie,
    parse_cookie_header,
    sign_cookie,
    unsign_cookie,
)
from tests.conftest import make_echo_router, make_settings

SECRET = "test-cookie-secret"


class TestParseCookieHeader:
    """Tests for parse_cookie_header."""

    def test_two_cookies(self):
        assert parse_cookie_header("a=1; b=2") == {"a": "1", "b": "2"}

    def test_missing_header(self):
        assert parse_cookie_header(None) == {}
        assert parse_cookie_header("") == {}

    def test_first_occurrence_wins(self):
        assert parse_cookie_header("a=1; a=2") == {"a": "1"}

    def test_quoted_and_encoded_values(self):
        assert parse_cookie_header('q="hello"; e=a%40b.com') == {"q": "hello", "e": "a@b.com"}

    def test_pairs_without_equals_skipped(self):
        assert parse_cookie_header("flag; a=1") == {"a": "1"}

    def test_value_may_contain_equals(self):
        assert parse_cookie_header("token=abc==") == {"token": "abc=="}


class TestJsonCookies:
    """Tests for "j:" JSON cookies."""

    def test_decodes_json(self):
        assert decode_json_cookie('j:{"cart":[1,2]}') == {"cart": [1, 2]}

    def test_invalid_json_left_as_is(self):
        assert decode_json_cookie("j:{broken") == "j:{broken"

    def test_plain_value_untouched(self):
        assert decode_json_cookie("plain") == "plain"


class TestSignedCookies:
    """Tests for sign_cookie / unsign_cookie."""

    def test_round_trip(self):
        signed = sign_cookie("session-1", SECRET)

        assert signed.startswith("s:session-1.")
        assert not signed.endswith("=")
        assert unsign_cookie(signed[2:], SECRET) == "session-1"

    def test_tampered_value(self):
        signed = sign_cookie("session-1", SECRET)[2:]
        tampered = signed.replace("session-1", "session-2")

        assert unsign_cookie(tampered, SECRET) is None

    def test_wrong_secret(self):
        signed = sign_cookie("session-1", SECRET)[2:]

        assert unsign_cookie(signed, "other-secret") is None

    def test_missing_signature(self):
        assert unsign_cookie("no-signature", SECRET) is None


class TestCookiePipeline:
    """Cookies through the full default pipeline."""

    def test_cookies_visible_to_handlers(self, echo_client):
        response = echo_client.get("/api/users/echo", headers={"Cookie": "a=1; b=2"})

        assert response.status_code == 200
        assert response.json()["cookies"] == {"a": "1", "b": "2"}

    def test_no_cookie_header(self, echo_client):
        response = echo_client.get("/api/users/echo")

        assert response.json()["cookies"] == {}
        assert response.json()["signed_cookies"] == {}

    def test_signed_cookies_with_secret(self):
        client = TestClient(create_app(
            make_settings(COOKIE_SECRET=SECRET),
            users_router=make_echo_router(),
        ))
        good = sign_cookie("user-42", SECRET)
        bad = sign_cookie("user-42", "wrong")

        response = client.get(
            "/api/users/echo",
            headers={"Cookie": f"sid={good}; forged={bad}; theme=dark"},
        )

        data = response.json()
        assert data["cookies"] == {"theme": "dark"}
        assert data["signed_cookies"] == {"sid": "user-42", "forged": False}

    def test_signed_prefix_kept_without_secret(self, echo_client):
        response = echo_client.get("/api/users/echo", headers={"Cookie": "sid=s:abc.def"})

        assert response.json()["cookies"] == {"sid": "s:abc.def"}
