"""Claim deletion engine.

Deletes a claim from a registry repository purely through the GitHub
git-data API, then opens a pull request. The steps run strictly in order,
each consuming the previous step's result:

    ResolveRef -> ReadCommit -> ReadTree -> ReadManifest (optional)
    -> BuildPlan -> CreateTree -> CreateCommit -> PublishBranch -> CreatePR

Every step fails fast except ReadManifest, which degrades to "no rewrite".
Nothing is retried. One ``Deadline`` bounds the whole sequence; objects
created before a failure or timeout are left for the remote to collect.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from claim_registry.deadline import Deadline
from claim_registry.errors import NothingToDelete, UpstreamError
from claim_registry.github import GitHubStore, PullRequest
from claim_registry.locator import ClaimRef
from claim_registry.manifest import rewrite
from claim_registry.planner import ManifestRewrite, MutationPlan, TreeEntry, plan

logger = logging.getLogger(__name__)

DEFAULT_TARGET_BRANCH = "main"


@dataclass(frozen=True)
class Snapshot:
    """What the engine read from the target branch before planning."""

    base_sha: str
    base_tree_sha: str
    entries: tuple[TreeEntry, ...]
    manifest_text: str | None


@dataclass
class DeletionResult:
    pull_request_url: str
    pull_request_number: int
    branch: str
    commit_sha: str
    deleted_paths: list[str] = field(default_factory=list)
    manifest_updated: bool = False
    reused_pull_request: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "pullRequestUrl": self.pull_request_url,
            "pullRequestNumber": self.pull_request_number,
            "branch": self.branch,
            "commitSha": self.commit_sha,
            "deletedPaths": self.deleted_paths,
            "manifestUpdated": self.manifest_updated,
            "reusedPullRequest": self.reused_pull_request,
        }


@contextmanager
def _step(name: str, claim: ClaimRef) -> Iterator[None]:
    t0 = time.monotonic()
    try:
        yield
    except Exception as exc:
        logger.error("step_failed", extra={"step": name, "claim": claim.name, "error": str(exc)})
        raise
    duration_ms = round((time.monotonic() - t0) * 1000, 1)
    logger.info("step_done", extra={"step": name, "claim": claim.name, "duration_ms": duration_ms})


# ---------------------------------------------------------------------------
# Message builders
# ---------------------------------------------------------------------------


def commit_message(claim: ClaimRef) -> str:
    return f'Delete claim "{claim.name}" from {claim.category}'


def pull_request_title(claim: ClaimRef) -> str:
    return f"Delete claim - {claim.name}"


def pull_request_body(claim: ClaimRef) -> str:
    return "\n".join(
        [
            "## Claim Deletion via Claim Registry",
            "",
            f"**Claim Name**: {claim.name}",
            f"**Category**: {claim.category}",
            f"**Repository**: {claim.repository}",
            "",
            "### Changes",
            f"- Removed claim directory: `{claim.claim_dir}/`",
            f"- Updated `{claim.manifest_path}` to remove resource entry",
            "",
            "Created automatically via the claim-registry delete action.",
        ]
    )


# ---------------------------------------------------------------------------
# Read + plan
# ---------------------------------------------------------------------------


def read_snapshot(store: GitHubStore, claim: ClaimRef, target_branch: str, deadline: Deadline) -> Snapshot:
    """Resolve the branch tip once, then read its tree and the category manifest.

    Every later read is pinned to the resolved commit so the plan comes from
    one snapshot even if the branch moves meanwhile.
    """
    logger.info("Deleting claim %r from %s (path: %s, category: %s)", claim.name, claim.repository, claim.path, claim.category)

    with _step("ResolveRef", claim):
        base_sha = store.get_branch_sha(target_branch, deadline=deadline)
    logger.info("Base commit SHA for %s: %s", target_branch, base_sha)

    with _step("ReadCommit", claim):
        base_tree_sha = store.get_commit_tree_sha(base_sha, deadline=deadline)

    with _step("ReadTree", claim):
        entries = tuple(store.get_tree(base_tree_sha, deadline=deadline))

    manifest_text: str | None = None
    with _step("ReadManifest", claim):
        try:
            manifest_text = store.get_file_text(claim.manifest_path, base_sha, deadline=deadline)
        except UpstreamError as exc:
            logger.warning("Could not fetch %s: %s", claim.manifest_path, exc.status)

    return Snapshot(base_sha=base_sha, base_tree_sha=base_tree_sha, entries=entries, manifest_text=manifest_text)


def build_plan(snapshot: Snapshot, claim: ClaimRef) -> MutationPlan:
    """Combine tree deletions and the manifest rewrite into one plan.

    An unchanged manifest is not a rewrite, so a re-run after the deletion
    merged yields an empty plan.
    """
    result = plan(snapshot.entries, claim.claim_dir, claim.path or None)
    if not result.used_directory_match:
        logger.warning("No files found in %s/, trying single file at %s", claim.claim_dir, claim.path or "(none)")

    manifest_rewrite = None
    if snapshot.manifest_text is not None:
        updated = rewrite(snapshot.manifest_text, claim.name)
        if updated != snapshot.manifest_text:
            manifest_rewrite = ManifestRewrite(path=claim.manifest_path, content=updated)
        else:
            logger.info("%s does not register %r; leaving it unchanged", claim.manifest_path, claim.name)

    mutation = MutationPlan(
        deletions=result.deletions,
        manifest_rewrite=manifest_rewrite,
        used_directory_match=result.used_directory_match,
    )
    if mutation.is_empty:
        logger.warning("Nothing to delete for claim %r under %s/", claim.name, claim.claim_dir)
        raise NothingToDelete(claim.claim_dir)
    logger.info("Files to delete: %s", ", ".join(mutation.deleted_paths) or "(none)")
    return mutation


def plan_claim_deletion(
    store: GitHubStore,
    claim: ClaimRef,
    *,
    target_branch: str = DEFAULT_TARGET_BRANCH,
    deadline: Deadline | None = None,
) -> MutationPlan:
    """Dry run: read and plan without any write call."""
    deadline = deadline or Deadline()
    snapshot = read_snapshot(store, claim, target_branch, deadline)
    with _step("BuildPlan", claim):
        return build_plan(snapshot, claim)


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------


def publish_branch(store: GitHubStore, branch: str, sha: str, deadline: Deadline) -> None:
    """Create *branch* at *sha*, or force-move it there if creation fails.

    Attempting the create first (instead of checking existence) avoids a
    read-then-write race; a re-run for the same claim moves the branch
    forward rather than failing.
    """
    try:
        store.create_ref(branch, sha, deadline=deadline)
        logger.info("Created branch %s at %s", branch, sha)
    except UpstreamError as exc:
        logger.info("Branch %s could not be created (%s); force-updating", branch, exc.status)
        store.update_ref(branch, sha, force=True, deadline=deadline)
        logger.info("Force-updated branch %s to %s", branch, sha)


def delete_claim(
    store: GitHubStore,
    claim: ClaimRef,
    *,
    target_branch: str = DEFAULT_TARGET_BRANCH,
    deadline: Deadline | None = None,
    reuse_open_pr: bool = False,
) -> DeletionResult:
    """Open a pull request that deletes *claim* from *target_branch*.

    Raises RefNotFound, UpstreamError, NothingToDelete or DeletionTimeout.
    With *reuse_open_pr*, an open PR for the same head and base is
    returned instead of opening a duplicate.
    """
    deadline = deadline or Deadline()
    snapshot = read_snapshot(store, claim, target_branch, deadline)

    with _step("BuildPlan", claim):
        mutation = build_plan(snapshot, claim)

    logger.info("Creating new tree with %d changes", len(mutation.tree_items()))
    with _step("CreateTree", claim):
        tree_sha = store.create_tree(snapshot.base_tree_sha, mutation.tree_items(), deadline=deadline)

    with _step("CreateCommit", claim):
        commit_sha = store.create_commit(tree_sha, commit_message(claim), [snapshot.base_sha], deadline=deadline)

    branch = claim.branch_name
    with _step("PublishBranch", claim):
        publish_branch(store, branch, commit_sha, deadline)

    existing: PullRequest | None = None
    if reuse_open_pr:
        with _step("FindPR", claim):
            existing = store.find_open_pull_request(branch, target_branch, deadline=deadline)

    if existing is not None:
        logger.info("Reusing open pull request #%d: %s", existing.number, existing.url)
        pull_request = existing
    else:
        with _step("CreatePR", claim):
            pull_request = store.create_pull_request(
                branch, target_branch, pull_request_title(claim), pull_request_body(claim), deadline=deadline
            )
        logger.info("Pull request created: %s", pull_request.url)

    return DeletionResult(
        pull_request_url=pull_request.url,
        pull_request_number=pull_request.number,
        branch=branch,
        commit_sha=commit_sha,
        deleted_paths=mutation.deleted_paths,
        manifest_updated=mutation.manifest_rewrite is not None,
        reused_pull_request=existing is not None,
    )
