"""Fixtures for HTTP action API tests (FastAPI)."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from claim_registry.api import create_app
from claim_registry.config import default_config
from claim_registry.types import RegistryConfig
from tests._fake_github import FakeGitHub

REGISTRY_HOST = "registry.example"
REGISTRY_ITEMS = [
    {"name": "hacky", "category": "cli", "status": "active", "repository": "acme/infra", "template": "cli-claim"},
    {"name": "web", "category": "apps", "status": "active", "repository": "acme/apps"},
]


def api_config(**overrides: str) -> RegistryConfig:
    config = default_config()
    config["github_token"] = "test-token"
    config["registry_url"] = f"https://{REGISTRY_HOST}"
    config.update(overrides)  # type: ignore[typeddict-item]
    return config


def combined_transport(repo: FakeGitHub) -> httpx.MockTransport:
    """Serve the registry host from a canned listing and everything else from *repo*."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == REGISTRY_HOST:
            return httpx.Response(200, json={"items": REGISTRY_ITEMS})
        return repo.handler(request)

    return httpx.MockTransport(handler)


async def _client_for(config: RegistryConfig, transport: httpx.BaseTransport) -> AsyncIterator[AsyncClient]:
    app = create_app(config, transport=transport)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
async def client(hacky_repo: FakeGitHub) -> AsyncIterator[AsyncClient]:
    """Action API wired to the in-memory hacky_repo and the canned registry."""
    async for c in _client_for(api_config(), combined_transport(hacky_repo)):
        yield c


@pytest.fixture
async def tokenless_client(hacky_repo: FakeGitHub) -> AsyncIterator[AsyncClient]:
    """Action API with no github_token configured (and none in the env)."""
    async for c in _client_for(api_config(github_token=""), combined_transport(hacky_repo)):
        yield c
