"""Shared CLI helpers.

Provides config access, store construction and error reporting so that
``cli.py`` commands stay thin.
"""

from __future__ import annotations

import json as json_mod
import sys
from typing import NoReturn

import click

from claim_registry.config import resolve_token
from claim_registry.errors import ClaimRegistryError
from claim_registry.github import DEFAULT_API_URL, GitHubStore
from claim_registry.locator import ClaimRef
from claim_registry.registry import ClaimRegistryClient
from claim_registry.types import RegistryConfig


def get_config(ctx: click.Context) -> RegistryConfig:
    config: RegistryConfig = ctx.obj["config"]
    return config


def open_store(config: RegistryConfig, claim: ClaimRef, token: str | None = None) -> GitHubStore:
    """Build an authenticated store for the claim's repository."""
    return GitHubStore(
        claim.owner,
        claim.repo,
        resolve_token(config, token),
        api_url=config.get("api_url", DEFAULT_API_URL),
    )


def fail(exc: ClaimRegistryError | str, *, as_json: bool, code: str = "INVALID_INPUT") -> NoReturn:
    """Report an error in the requested format and exit 1."""
    message = str(exc)
    if isinstance(exc, ClaimRegistryError):
        code = exc.code
    if as_json:
        click.echo(json_mod.dumps({"error": message, "code": code}))
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def open_registry(registry_url: str) -> ClaimRegistryClient:
    return ClaimRegistryClient(registry_url)
