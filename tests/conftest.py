import copy

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel

from gym_portal.core.dependencies import get_api_client, get_now
from gym_portal.main import app
from gym_portal.services.api_client import parse_numeric_strings, to_payload

from factories import NOW


class FakeBackend:
    """In-memory stand-in for ``BackendClient``.

    Responses are registered per (method, path). A registered exception is
    raised, a callable is called with the request payload, anything else is
    returned after the same numeric normalisation the real client applies.
    Unregistered paths answer 404.
    """

    def __init__(self):
        self.responses = {}
        self.calls = []

    def on(self, method, path, value):
        self.responses[(method, path)] = value
        return self

    def request(self, method, path, payload=None, params=None):
        if isinstance(payload, BaseModel):
            payload = to_payload(payload)
        self.calls.append((method, path, payload, params))

        if (method, path) not in self.responses:
            raise HTTPException(status_code=404, detail="Not found")

        value = self.responses[(method, path)]
        if isinstance(value, Exception):
            raise value
        if callable(value):
            value = value(payload)
        return parse_numeric_strings(copy.deepcopy(value))

    def get(self, path, params=None):
        return self.request("GET", path, params=params)

    def post(self, path, payload=None):
        return self.request("POST", path, payload=payload)

    def patch(self, path, payload=None):
        return self.request("PATCH", path, payload=payload)

    def delete(self, path):
        return self.request("DELETE", path)

    def close(self):
        pass

    def sent(self, method, path):
        return [call[2] for call in self.calls if call[0] == method and call[1] == path]


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    app.dependency_overrides[get_api_client] = lambda: backend
    app.dependency_overrides[get_now] = lambda: NOW
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client():
    app.dependency_overrides.clear()
    return TestClient(app)
