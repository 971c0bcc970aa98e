"""Shared pytest fixtures for claim-registry tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest
from click.testing import CliRunner

from claim_registry.github import GitHubStore
from claim_registry.locator import ClaimRef
from tests._fake_github import FakeGitHub

HACKY_MANIFEST = "resources:\n- hacky\n- other\n"


@pytest.fixture
def hacky_repo() -> FakeGitHub:
    """acme/infra with two claims in the cli category.

    - claims/cli/hacky/resource.yaml  (the claim under test)
    - claims/cli/other/resource.yaml
    - claims/cli/kustomization.yaml   registering both
    - README.md
    """
    return FakeGitHub(
        {
            "README.md": "# infra\n",
            "claims/cli/hacky/resource.yaml": "kind: Claim\nmetadata:\n  name: hacky\n",
            "claims/cli/other/resource.yaml": "kind: Claim\nmetadata:\n  name: other\n",
            "claims/cli/kustomization.yaml": HACKY_MANIFEST,
        }
    )


@pytest.fixture
def store(hacky_repo: FakeGitHub) -> Generator[GitHubStore, None, None]:
    s = GitHubStore("acme", "infra", "test-token", transport=hacky_repo.transport)
    yield s
    s.close()


@pytest.fixture
def hacky_claim() -> ClaimRef:
    return ClaimRef(name="hacky", category="cli", repository="acme/infra")


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def _no_ambient_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """Tests must never pick up a real token from the environment."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
