"""
Tests for the login/dashboard redirects.
"""

from fastapi.testclient import TestClient

from main import create_app
from utils.auth import get_access_token


def _client(user, seen=None):
    async def resolver(request):
        if seen is not None:
            seen.append(request.url.path)
        return user

    return TestClient(create_app(session_resolver=resolver), follow_redirects=False)


def test_anonymous_dashboard_request_redirects_to_login():
    client = _client(None)

    for path in ["/dashboard", "/dashboard/sell", "/dashboard/reports/pdf"]:
        resp = client.get(path)
        assert resp.status_code == 307
        assert resp.headers["location"] == "/"


def test_signed_in_login_request_redirects_to_dashboard():
    client = _client({"id": "u-1", "email": "a@depozit.mx"})

    resp = client.get("/")

    assert resp.status_code == 307
    assert resp.headers["location"] == "/dashboard"


def test_anonymous_login_page_is_served():
    resp = _client(None).get("/")

    assert resp.status_code == 200


def test_other_paths_skip_the_session_lookup():
    seen = []
    client = _client(None, seen)

    resp = client.get("/openapi.json")

    assert resp.status_code == 200
    assert seen == []


def test_access_token_prefers_bearer_header():
    from starlette.requests import Request

    scope = {
        "type": "http",
        "headers": [
            (b"authorization", b"Bearer header-token"),
            (b"cookie", b"depozit-access-token=cookie-token"),
        ],
    }
    assert get_access_token(Request(scope)) == "header-token"

    scope["headers"] = [(b"cookie", b"depozit-access-token=cookie-token")]
    assert get_access_token(Request(scope)) == "cookie-token"
