"""
Gedeelde fixtures: een nep Ollama backend via httpx.MockTransport.
"""
import json

import httpx
import pytest

from rerank_schemas import Document

BASE_URL = "http://ollama.test"


def json_route(data, status_code=200):
    """Route die altijd dezelfde JSON response geeft."""
    def route(request):
        return httpx.Response(status_code, json=data)
    return route


def request_json(request: httpx.Request):
    return json.loads(request.content)


class MockBackend:
    """Fake backend: routes per URL path, onthoudt elke request."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        return route(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def calls_to(self, path):
        return [c for c in self.calls if c.url.path == path]


@pytest.fixture
def make_backend():
    return MockBackend


@pytest.fixture
def docs():
    def _docs(*contents, **kwargs):
        return [Document(content=c, original_index=i, **kwargs) for i, c in enumerate(contents)]
    return _docs
