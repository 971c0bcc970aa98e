"""Failure values for claim deletion.

Every error carries a stable ``code`` used by the CLI ``--json`` output and
the HTTP error envelope.
"""

from __future__ import annotations


class ClaimRegistryError(Exception):
    """Base class for every failure surfaced to a caller."""

    code = "CLAIM_REGISTRY_ERROR"


class InvalidInput(ClaimRegistryError, ValueError):
    """Raised when claim identity fields are missing or malformed."""

    code = "INVALID_INPUT"


class MissingCredentials(ClaimRegistryError):
    """Raised when no GitHub token is configured."""

    code = "MISSING_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__("GitHub token not found. Set github_token in .claim-registry/config.json or the GITHUB_TOKEN env var.")


class UpstreamError(ClaimRegistryError):
    """Raised when a remote call fails or answers with a non-2xx status.

    ``status`` is ``None`` for transport failures where no response arrived.
    """

    code = "UPSTREAM_ERROR"

    def __init__(self, step: str, status: int | None, body: str = "", message: str | None = None) -> None:
        self.step = step
        self.status = status
        self.body = body
        if message is None:
            status_text = status if status is not None else "no response"
            message = f"{step} failed: {status_text} {body}".rstrip()
        super().__init__(message)


class RefNotFound(UpstreamError):
    """Raised when the target branch does not exist."""

    code = "REF_NOT_FOUND"

    def __init__(self, branch: str, status: int, body: str = "") -> None:
        self.branch = branch
        super().__init__("ResolveRef", status, body, message=f"Branch not found: {branch} ({status} {body})".rstrip())


class NothingToDelete(ClaimRegistryError):
    """Raised when the computed plan is empty; the claim is already gone."""

    code = "NOTHING_TO_DELETE"

    def __init__(self, claim_dir: str) -> None:
        self.claim_dir = claim_dir
        super().__init__(f"No files to modify under {claim_dir}/, nothing to delete")


class DeletionTimeout(ClaimRegistryError, TimeoutError):
    """Raised when the overall deadline expires.

    Remote objects created before expiry (tree, commit, branch) are left in
    place.
    """

    code = "TIMEOUT"

    def __init__(self, step: str, seconds: float) -> None:
        self.step = step
        self.seconds = seconds
        super().__init__(f"Request timed out after {seconds:g} seconds (during {step})")
