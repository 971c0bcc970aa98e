"""Fixtures for CLI interface tests."""

from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import httpx
import pytest
from click.testing import CliRunner

import claim_registry.cli as cli_module
from claim_registry.cli import cli
from claim_registry.config import resolve_token
from claim_registry.github import GitHubStore
from claim_registry.locator import ClaimRef
from claim_registry.registry import ClaimRegistryClient
from claim_registry.types import RegistryConfig
from tests._fake_github import FakeGitHub


@pytest.fixture
def cli_in_project(tmp_path: Path, cli_runner: CliRunner) -> Generator[tuple[CliRunner, Path], None, None]:
    """Initialize .claim-registry/ in tmp_path and return (runner, project_root)."""
    original_cwd = os.getcwd()
    os.chdir(str(tmp_path))
    result = cli_runner.invoke(cli, ["init", "--registry-url", "https://registry.example"])
    assert result.exit_code == 0
    yield cli_runner, tmp_path
    os.chdir(original_cwd)


@pytest.fixture
def fake_store(hacky_repo: FakeGitHub, monkeypatch: pytest.MonkeyPatch) -> FakeGitHub:
    """Route the CLI's GitHub calls to the in-memory hacky_repo."""

    def _open_store(config: RegistryConfig, claim: ClaimRef, token: str | None = None) -> GitHubStore:
        return GitHubStore(claim.owner, claim.repo, resolve_token(config, token), transport=hacky_repo.transport)

    monkeypatch.setattr(cli_module, "open_store", _open_store)
    return hacky_repo


@pytest.fixture
def fake_registry(monkeypatch: pytest.MonkeyPatch) -> list[httpx.Request]:
    """Route the CLI's registry calls to a canned listing; returns the seen requests."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"items": [{"name": "hacky", "category": "cli", "status": "active", "repository": "acme/infra"}]},
        )

    def _open_registry(registry_url: str) -> ClaimRegistryClient:
        return ClaimRegistryClient(registry_url, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(cli_module, "open_registry", _open_registry)
    return seen
