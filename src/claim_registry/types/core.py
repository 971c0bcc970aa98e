"""Foundational TypedDicts for config files and GitHub wire payloads."""

from __future__ import annotations

from typing import NotRequired, TypedDict


class RegistryConfig(TypedDict, total=False):
    """Shape of .claim-registry/config.json."""

    api_url: str
    github_token: str
    registry_url: str
    target_branch: str
    version: int


class ClaimDescriptorDict(TypedDict, total=False):
    """Serialized claim descriptor produced by the registry picker.

    Only ``name``, ``path``, ``category`` and ``repository`` feed claim
    resolution; the rest rides along for display.
    """

    name: str
    path: str
    category: str
    repository: str
    template: str
    namespace: str
    createdBy: str
    status: str


class ClaimEntryDict(TypedDict):
    """One item of the registry listing ``items`` array."""

    name: str
    template: str
    category: str
    namespace: str
    createdAt: str
    createdBy: str
    source: str
    repository: str
    path: str
    status: str


class TreeItemPayload(TypedDict):
    """Item of the ``tree`` array sent to ``POST git/trees``.

    ``sha: None`` deletes the path; ``content`` replaces the blob inline.
    """

    path: str
    mode: str
    type: str
    sha: NotRequired[str | None]
    content: NotRequired[str]

