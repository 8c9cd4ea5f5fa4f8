"""
Pytest fixtures: the app wired to an in-memory hosted backend.

Routes talk to the real BackendClient/AdminClient; only the HTTP transport is
replaced by httpx.MockTransport, so every upstream call is recorded.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from main import create_app
from utils.auth import get_admin_backend, get_backend
from utils.backend_client import AdminClient, BackendClient

BASE_URL = "http://backend.test"

ADMIN_USER = {"id": "admin-1", "email": "admin@depozit.mx"}
EMPLOYEE_USER = {"id": "emp-1", "email": "cajero@depozit.mx"}


class FakeBackend:
    """Records requests and answers them from a (method, path) table."""

    def __init__(self):
        self.requests = []
        self.responses = {}
        self.session_user = ADMIN_USER
        self.role = "admin"

    def respond(self, method, path, json=None, status=200):
        self.responses[(method.upper(), path)] = (status, json)

    def fail(self, method, path, message="boom", status=500, code=None):
        body = {"message": message}
        if code:
            body["code"] = code
        self.respond(method, path, body, status=status)

    def sign_in_as(self, user, role):
        self.session_user = user
        self.role = role

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key in self.responses:
            status, body = self.responses[key]
            if callable(body):
                return body(request)
        elif key == ("GET", "/auth/v1/user"):
            if self.session_user is None:
                status, body = 401, {"msg": "invalid JWT"}
            else:
                status, body = 200, self.session_user
        elif key == ("GET", "/rest/v1/profiles"):
            status, body = 200, [{"role": self.role}] if self.role else []
        else:
            status, body = 200, []
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def calls(self, method, path=None, prefix=None):
        return [
            r for r in self.requests
            if r.method == method.upper()
            and (path is None or r.url.path == path)
            and (prefix is None or r.url.path.startswith(prefix))
        ]

    @staticmethod
    def body(request):
        return json.loads(request.content) if request.content else None


@pytest.fixture
def fake():
    return FakeBackend()


@pytest.fixture
def app(fake):
    async def resolver(request):
        return fake.session_user

    application = create_app(session_resolver=resolver)

    async def _backend():
        client = BackendClient(
            BASE_URL, "anon-key", access_token="test-token", transport=httpx.MockTransport(fake.handler)
        )
        try:
            yield client
        finally:
            await client.aclose()

    async def _admin_backend():
        client = AdminClient(BASE_URL, "service-key", transport=httpx.MockTransport(fake.handler))
        try:
            yield client
        finally:
            await client.aclose()

    application.dependency_overrides[get_backend] = _backend
    application.dependency_overrides[get_admin_backend] = _admin_backend
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def as_employee(fake):
    fake.sign_in_as(EMPLOYEE_USER, "employee")
    return fake
