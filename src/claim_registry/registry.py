"""Client for the claim registry listing service.

The registry knows which claims exist and where they live; its entries are
the descriptors the picker serializes into ``claimData`` for deletion.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any

import httpx

from claim_registry.errors import UpstreamError
from claim_registry.types import ClaimDescriptorDict, ClaimEntryDict

logger = logging.getLogger(__name__)

CLAIMS_ENDPOINT = "/api/v1/claims"
_DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)


@dataclass(frozen=True)
class ClaimEntry:
    name: str
    template: str = ""
    category: str = ""
    namespace: str = ""
    createdAt: str = ""  # noqa: N815
    createdBy: str = ""  # noqa: N815
    source: str = ""
    repository: str = ""
    path: str = ""
    status: str = ""

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> ClaimEntry:
        values = {key: str(item.get(key) or "") for key in cls.__dataclass_fields__}
        return cls(**values)

    def to_dict(self) -> ClaimEntryDict:
        return ClaimEntryDict(**asdict(self))  # type: ignore[typeddict-item]

    def to_claim_data(self) -> str:
        """Serialize the picker descriptor consumed by ``locate``."""
        descriptor = ClaimDescriptorDict(
            name=self.name,
            path=self.path,
            category=self.category,
            repository=self.repository,
            template=self.template,
            namespace=self.namespace,
            createdBy=self.createdBy,
            status=self.status,
        )
        return json.dumps(descriptor)


class ClaimRegistryClient:
    def __init__(self, base_url: str, *, transport: httpx.BaseTransport | None = None) -> None:
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Accept": "application/json"},
            timeout=_DEFAULT_TIMEOUT,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ClaimRegistryClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def list_claims(
        self,
        *,
        status: str | None = None,
        category: str | None = None,
        template: str | None = None,
    ) -> list[ClaimEntry]:
        """List registered claims, optionally filtered."""
        params = {k: v for k, v in (("status", status), ("category", category), ("template", template)) if v}
        try:
            response = self._client.get(CLAIMS_ENDPOINT, params=params or None)
        except httpx.RequestError as exc:
            raise UpstreamError("ListClaims", None, str(exc)) from exc
        if not response.is_success:
            raise UpstreamError("ListClaims", response.status_code, response.text)
        items = response.json().get("items") or []
        entries = []
        for item in items:
            if not isinstance(item, dict) or not item.get("name"):
                logger.warning("Skipping malformed registry entry: %r", item)
                continue
            entries.append(ClaimEntry.from_api(item))
        return entries
