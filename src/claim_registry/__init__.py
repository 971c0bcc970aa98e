"""claim-registry: delete registry claims through GitHub pull requests."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("claim-registry")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from claim_registry.locator import ClaimRef, locate
from claim_registry.orchestrator import DeletionResult, delete_claim

__all__ = ["ClaimRef", "DeletionResult", "__version__", "delete_claim", "locate"]
