"""HTTP action API for claim deletion.

Exposes the delete workflow to a scaffolder-style host over HTTP, with the
action's input and output field names, plus a claim listing proxy.

Handlers are plain ``def`` so FastAPI runs their blocking httpx calls in
its threadpool; each request gets its own store client.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, cast

import httpx
from fastapi import APIRouter, Body, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from claim_registry.config import default_config, resolve_token
from claim_registry.errors import (
    ClaimRegistryError,
    DeletionTimeout,
    InvalidInput,
    MissingCredentials,
    NothingToDelete,
    RefNotFound,
)
from claim_registry.github import DEFAULT_API_URL, GitHubStore
from claim_registry.locator import locate
from claim_registry.orchestrator import delete_claim
from claim_registry.registry import ClaimRegistryClient
from claim_registry.types import (
    DeleteClaimRequest,
    DeleteClaimResponse,
    ErrorBody,
    ErrorResponse,
    RegistryConfig,
)

logger = logging.getLogger(__name__)

DELETE_ACTION_PATH = "/actions/claim-registry/delete"

_STATUS_BY_ERROR: tuple[tuple[type[ClaimRegistryError], int], ...] = (
    (InvalidInput, 400),
    (MissingCredentials, 400),
    (RefNotFound, 404),
    (NothingToDelete, 409),
    (DeletionTimeout, 504),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error_response(
    message: str,
    code: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Return a structured error response and log the error."""
    logger.warning("API error [%s] %s: %s", status_code, code, message)
    payload = ErrorResponse(error=ErrorBody(message=message, code=code, details=details or {}))
    return JSONResponse(payload, status_code=status_code)


def _claim_error_response(exc: ClaimRegistryError) -> JSONResponse:
    status_code = next((status for kind, status in _STATUS_BY_ERROR if isinstance(exc, kind)), 502)
    details: dict[str, Any] = {}
    for attr in ("step", "status", "claim_dir"):
        if hasattr(exc, attr):
            details[attr] = getattr(exc, attr)
    return _error_response(str(exc), exc.code, status_code, details)


def _optional_str(body: Mapping[str, object], key: str) -> str | None:
    value = body.get(key)
    return value if isinstance(value, str) else None


# ---------------------------------------------------------------------------
# Router factory
# ---------------------------------------------------------------------------


def create_router(config: RegistryConfig, transport: httpx.BaseTransport | None = None) -> APIRouter:
    router = APIRouter()

    @router.post(DELETE_ACTION_PATH)
    def api_delete_claim(body: Any = Body(default=None)) -> JSONResponse:  # noqa: B008
        """Open a pull request that deletes a claim."""
        if not isinstance(body, dict):
            return _error_response("Request body must be a JSON object", "VALIDATION_ERROR", 400)
        fields = cast(DeleteClaimRequest, body)
        target_branch = _optional_str(fields, "targetBranch") or config.get("target_branch", "main")
        try:
            claim = locate(
                _optional_str(fields, "claimData"),
                name=_optional_str(fields, "claimName"),
                path=_optional_str(fields, "claimPath"),
                category=_optional_str(fields, "claimCategory"),
                repository=_optional_str(fields, "repository"),
            )
            token = resolve_token(config)
            with GitHubStore(
                claim.owner,
                claim.repo,
                token,
                api_url=config.get("api_url", DEFAULT_API_URL),
                transport=transport,
            ) as store:
                result = delete_claim(
                    store,
                    claim,
                    target_branch=target_branch,
                    reuse_open_pr=fields.get("reuseOpenPr") is True,
                )
        except ClaimRegistryError as exc:
            return _claim_error_response(exc)
        except Exception:
            logger.exception("BUG: Unexpected error deleting claim")
            return _error_response("Internal error deleting claim", "INTERNAL_ERROR", 500)
        return JSONResponse(
            DeleteClaimResponse(pullRequestUrl=result.pull_request_url, pullRequestNumber=result.pull_request_number)
        )

    @router.get("/claims")
    def api_list_claims(request: Request) -> JSONResponse:
        """List registry claims, filtered by status/category/template query params."""
        registry_url = config.get("registry_url")
        if not registry_url:
            return _error_response("No registry_url configured", "REGISTRY_NOT_CONFIGURED", 503)
        params = request.query_params
        try:
            with ClaimRegistryClient(registry_url, transport=transport) as registry:
                entries = registry.list_claims(
                    status=params.get("status"),
                    category=params.get("category"),
                    template=params.get("template"),
                )
        except ClaimRegistryError as exc:
            return _claim_error_response(exc)
        return JSONResponse({"items": [entry.to_dict() for entry in entries]})

    return router


def create_app(config: RegistryConfig | None = None, *, transport: httpx.BaseTransport | None = None) -> Any:
    """Create the FastAPI application.

    *transport* replaces the network for both the GitHub and registry
    clients; tests pass an ``httpx.MockTransport``.
    """
    app = FastAPI(title="Claim Registry", docs_url=None, redoc_url=None)
    app.include_router(create_router(config or default_config(), transport), prefix="/api")

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response("Invalid JSON body", "VALIDATION_ERROR", 400, {"errors": jsonable_encoder(exc.errors())})

    return app
