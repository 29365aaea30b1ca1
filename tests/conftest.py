"""Shared fixtures: a fake HTTP backend and helpers to drive async adapters."""

import asyncio
import json
from datetime import datetime

import httpx
import pytest

from aic2.cli.utils import collect_items
from aic2.config import ProviderConfig


class FakeBackend:
    """httpx.MockTransport handler with canned responses per (method, path).

    A route's value is an httpx.Response, an exception to raise, or a
    callable taking the request.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": {"message": f"no route for {request.url.path}"}})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        # Fresh copy so a route can be hit more than once
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def bodies(self, method="POST") -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.method == method]

    def paths(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]


def chat_response(content) -> httpx.Response:
    if not isinstance(content, str):
        content = json.dumps(content)
    return httpx.Response(200, json={"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]})


def models_response(*ids) -> httpx.Response:
    return httpx.Response(200, json={"object": "list", "data": [{"id": i, "object": "model"} for i in ids]})


def run_items(stream):
    return asyncio.run(collect_items(stream))


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 9, 14, 5, 7)


@pytest.fixture
def provider_config():
    return ProviderConfig(key="sk-test", timeout=5)
