"""Plan which blobs a claim deletion removes and whether the manifest changes."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from claim_registry.types import TreeItemPayload

BLOB_MODE = "100644"


@dataclass(frozen=True)
class TreeEntry:
    """One record of a recursive tree listing."""

    path: str
    mode: str
    type: str
    sha: str | None = None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> TreeEntry:
        return cls(path=item["path"], mode=item["mode"], type=item["type"], sha=item.get("sha"))

    def deletion(self) -> TreeItemPayload:
        """Tree payload item that removes this path from the base tree."""
        return TreeItemPayload(path=self.path, mode=self.mode, type="blob", sha=None)


@dataclass(frozen=True)
class ManifestRewrite:
    path: str
    content: str

    def payload(self) -> TreeItemPayload:
        return TreeItemPayload(path=self.path, mode=BLOB_MODE, type="blob", content=self.content)


@dataclass(frozen=True)
class PlanResult:
    deletions: tuple[TreeEntry, ...]
    used_directory_match: bool


@dataclass(frozen=True)
class MutationPlan:
    """Deletions plus an optional manifest rewrite, relative to one base tree."""

    deletions: tuple[TreeEntry, ...] = ()
    manifest_rewrite: ManifestRewrite | None = None
    used_directory_match: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.deletions and self.manifest_rewrite is None

    @property
    def deleted_paths(self) -> list[str]:
        return [entry.path for entry in self.deletions]

    def tree_items(self) -> list[TreeItemPayload]:
        items = [entry.deletion() for entry in self.deletions]
        if self.manifest_rewrite is not None:
            items.append(self.manifest_rewrite.payload())
        return items


def plan(tree_snapshot: Iterable[TreeEntry], claim_dir: str, claim_path: str | None = None) -> PlanResult:
    """Select the blobs under *claim_dir* for deletion.

    Claims that predate the directory layout live in a single file; when the
    directory holds nothing and *claim_path* is given, that file alone is
    deleted. An empty result means the claim is already absent.
    """
    prefix = f"{claim_dir}/"
    matched: Sequence[TreeEntry] = tuple(
        entry for entry in tree_snapshot if entry.type == "blob" and entry.path.startswith(prefix)
    )
    if matched:
        return PlanResult(deletions=tuple(matched), used_directory_match=True)
    if claim_path:
        return PlanResult(deletions=(TreeEntry(path=claim_path, mode=BLOB_MODE, type="blob"),), used_directory_match=False)
    return PlanResult(deletions=(), used_directory_match=False)
