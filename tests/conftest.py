"""Pytest configuration and shared fixtures.

The backend is simulated in memory and served to the real BackendClient
through ``httpx.MockTransport``, so services exercise the full HTTP path.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio

from webmarker.config import AppConfig, BackendConfig, RuntimeConfig, SyncConfig
from webmarker.di import Container

BACKEND_URL = "http://backend.test"

FailurePredicate = Callable[[httpx.Request], bool]


class InMemoryBackend:
    """Minimal stand-in for the bookmark/mark/tag REST backend."""

    def __init__(self) -> None:
        self.resources: dict[str, dict[str, dict[str, Any]]] = {"bookmarks": {}, "marks": {}}
        self.tags: dict[str, dict[str, Any]] = {}
        self.users: dict[str, str] = {"user@example.com": "secret"}
        self.token = "token-123"
        self.requests: list[httpx.Request] = []
        self.failures: list[FailurePredicate] = []

    # Test helpers

    def seed(self, resource: str, *items: dict[str, Any]) -> None:
        for item in items:
            body = dict(item)
            body["tags"] = self._register_tags(body.get("tags", []))
            self.resources[resource][body["id"]] = body

    def seed_tags(self, *names: str) -> None:
        self._register_tags([{"name": name} for name in names])

    def fail_on(self, method: str, path: str, body_id: str | None = None) -> None:
        """Answer matching requests with 503."""

        def _matches(request: httpx.Request) -> bool:
            if request.method != method or request.url.path != path:
                return False
            if body_id is None:
                return True
            return json.loads(request.content or b"{}").get("id") == body_id

        self.failures.append(_matches)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # Request handling

    def _register_tags(self, tags: list[Any]) -> list[dict[str, Any]]:
        registered: list[dict[str, Any]] = []
        for tag in tags:
            name = tag if isinstance(tag, str) else tag["name"]
            existing = next(
                (t for t in self.tags.values() if t["name"].casefold() == name.casefold()), None
            )
            if existing is None:
                existing = {"id": uuid.uuid4().hex, "name": name}
                self.tags[existing["id"]] = existing
            registered.append({"id": existing["id"], "name": name})
        return registered

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if any(predicate(request) for predicate in self.failures):
            return httpx.Response(503, json={"error": "unavailable"})

        parts = request.url.path.strip("/").split("/")
        resource = parts[0]
        if resource == "users" and parts[1:] == ["login"]:
            return self._login(request)
        if resource == "tags":
            return self._tags(request, parts)
        if resource in self.resources:
            return self._aggregates(request, resource, parts)
        return httpx.Response(404)

    def _login(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if self.users.get(body.get("email")) != body.get("password"):
            return httpx.Response(401, json={"error": "invalid credentials"})
        return httpx.Response(200, json={"jwt": self.token})

    def _tags(self, request: httpx.Request, parts: list[str]) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=list(self.tags.values()))
        if request.method == "POST":
            body = json.loads(request.content)
            return httpx.Response(201, json=self._register_tags([body])[0])
        if request.method == "DELETE" and len(parts) == 2:
            if self.tags.pop(parts[1], None) is None:
                return httpx.Response(404)
            return httpx.Response(204)
        return httpx.Response(405)

    def _aggregates(
        self, request: httpx.Request, resource: str, parts: list[str]
    ) -> httpx.Response:
        items = self.resources[resource]
        if request.method == "GET":
            if len(parts) == 1:
                return httpx.Response(200, json=list(items.values()))
            if parts[1] == "url":
                url = request.url.params.get("url")
                matches = [item for item in items.values() if item["url"] == url]
                if resource == "marks":
                    return httpx.Response(200, json=matches)
                if not matches:
                    return httpx.Response(404)
                return httpx.Response(200, json=matches[0])
            if parts[1] not in items:
                return httpx.Response(404)
            return httpx.Response(200, json=items[parts[1]])

        if request.method in ("POST", "PUT"):
            body = json.loads(request.content)
            if request.method == "PUT" and body["id"] not in items:
                return httpx.Response(404)
            body["tags"] = self._register_tags(body.get("tags", []))
            items[body["id"]] = body
            return httpx.Response(201 if request.method == "POST" else 200, json=body)

        if request.method == "DELETE" and len(parts) == 2:
            if items.pop(parts[1], None) is None:
                return httpx.Response(404)
            return httpx.Response(204)
        return httpx.Response(405)


def make_config(**sync: Any) -> AppConfig:
    return AppConfig(
        backend=BackendConfig(api_url=BACKEND_URL, max_retries=0, retry_base_delay=0),
        sync=SyncConfig(**sync),
        runtime=RuntimeConfig(),
    )


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def container_factory(backend: InMemoryBackend) -> Callable[..., Container]:
    """Build unopened containers wired to ``backend`` with custom sync settings."""

    def _build(**sync: Any) -> Container:
        return Container(make_config(**sync), transport=backend.transport())

    return _build


@pytest_asyncio.fixture
async def container(container_factory):
    async with container_factory() as built:
        yield built


@pytest_asyncio.fixture
async def rollback_container(container_factory):
    async with container_factory(rollback_on_failure=True) as built:
        yield built
