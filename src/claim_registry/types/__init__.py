# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
# NEVER import from orchestrator.py, github.py, or any other runtime module.
"""Typed payload contracts for the GitHub client, registry client and HTTP API."""

from __future__ import annotations

from claim_registry.types.api import DeleteClaimRequest, DeleteClaimResponse, ErrorBody, ErrorResponse
from claim_registry.types.core import (
    ClaimDescriptorDict,
    ClaimEntryDict,
    RegistryConfig,
    TreeItemPayload,
)

__all__ = [
    "ClaimDescriptorDict",
    "ClaimEntryDict",
    "DeleteClaimRequest",
    "DeleteClaimResponse",
    "ErrorBody",
    "ErrorResponse",
    "RegistryConfig",
    "TreeItemPayload",
]
