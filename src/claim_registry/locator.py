"""Claim identity resolution and the registry path conventions.

A claim is identified by a serialized descriptor from the registry picker,
optionally overridden field by field. Resolution happens in two stages:
``parse_claim_data`` turns the descriptor into a tagged result, then
``locate`` merges explicit overrides over it (override wins when present
and non-empty) and validates the outcome.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from claim_registry.errors import InvalidInput
from claim_registry.types import ClaimDescriptorDict
from claim_registry.validation import parse_repository, sanitize_field

logger = logging.getLogger(__name__)

CLAIMS_ROOT = "claims"
MANIFEST_FILENAME = "kustomization.yaml"
BRANCH_PREFIX = "delete-claim"

_IDENTITY_FIELDS = ("name", "path", "category", "repository")


# ---------------------------------------------------------------------------
# Descriptor parsing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Parsed:
    record: ClaimDescriptorDict


@dataclass(frozen=True)
class Unparsed:
    reason: str


ParseResult = Parsed | Unparsed


def parse_claim_data(claim_data: str | None) -> ParseResult:
    """Best-effort parse of a picker descriptor. Never raises."""
    if not claim_data:
        return Unparsed("no claim data")
    try:
        raw = json.loads(claim_data)
    except (json.JSONDecodeError, TypeError) as exc:
        return Unparsed(f"not valid JSON: {exc}")
    if not isinstance(raw, dict):
        return Unparsed(f"expected a JSON object, got {type(raw).__name__}")
    record = ClaimDescriptorDict()
    for key, value in raw.items():
        if isinstance(value, str):
            record[key] = value  # type: ignore[literal-required]
    return Parsed(record)


# ---------------------------------------------------------------------------
# ClaimRef
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClaimRef:
    name: str
    category: str
    repository: str
    path: str = ""
    owner: str = field(init=False)
    repo: str = field(init=False)

    def __post_init__(self) -> None:
        owner, repo, error = parse_repository(self.repository)
        if error:
            raise InvalidInput(error)
        object.__setattr__(self, "owner", owner)
        object.__setattr__(self, "repo", repo)

    @property
    def claim_dir(self) -> str:
        return f"{CLAIMS_ROOT}/{self.category}/{self.name}"

    @property
    def manifest_path(self) -> str:
        return f"{CLAIMS_ROOT}/{self.category}/{MANIFEST_FILENAME}"

    @property
    def branch_name(self) -> str:
        """Deterministic per claim so re-runs move the same branch."""
        return f"{BRANCH_PREFIX}-{self.category}-{self.name}"


def locate(
    claim_data: str | None,
    *,
    name: str | None = None,
    path: str | None = None,
    category: str | None = None,
    repository: str | None = None,
) -> ClaimRef:
    """Resolve a ClaimRef from a descriptor plus explicit overrides.

    Raises InvalidInput when the name or repository is missing, when the
    repository is not ``owner/repo``, or when a field holds control characters.
    """
    result = parse_claim_data(claim_data)
    base: ClaimDescriptorDict
    if isinstance(result, Parsed):
        base = result.record
    else:
        if claim_data:
            logger.warning("Could not parse claimData as JSON (%s), using individual input fields", result.reason)
        base = ClaimDescriptorDict()

    overrides = {"name": name, "path": path, "category": category, "repository": repository}
    resolved: dict[str, str] = {}
    for key in _IDENTITY_FIELDS:
        override, error = sanitize_field(overrides[key], key)
        if error:
            raise InvalidInput(error)
        parsed, error = sanitize_field(base.get(key), key)
        if error:
            raise InvalidInput(error)
        resolved[key] = override or parsed

    if not resolved["name"]:
        raise InvalidInput("claimName is required: provide it via claimData JSON or the name override")
    if not resolved["repository"]:
        raise InvalidInput("repository is required: provide it via claimData JSON or the repository override")
    if not resolved["category"]:
        logger.warning("Claim %r has no category; resolving under %s//", resolved["name"], CLAIMS_ROOT)

    return ClaimRef(
        name=resolved["name"],
        category=resolved["category"],
        repository=resolved["repository"],
        path=resolved["path"],
    )
