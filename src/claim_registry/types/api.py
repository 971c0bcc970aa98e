"""TypedDicts for the HTTP action API request and response bodies."""

from __future__ import annotations

from typing import Any, TypedDict


class DeleteClaimRequest(TypedDict, total=False):
    """Body of ``POST /api/actions/claim-registry/delete``.

    Field names follow the scaffolder action inputs so existing templates
    can call the endpoint unchanged.
    """

    claimData: str
    claimName: str
    claimPath: str
    claimCategory: str
    repository: str
    targetBranch: str
    reuseOpenPr: bool


class DeleteClaimResponse(TypedDict):
    pullRequestUrl: str
    pullRequestNumber: int


class ErrorBody(TypedDict):
    message: str
    code: str
    details: dict[str, Any]


class ErrorResponse(TypedDict):
    """Standard error envelope returned by every API error path."""

    error: ErrorBody
