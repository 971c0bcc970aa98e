"""GitHub git-data and pulls client.

Thin request layer over httpx: every method maps to one documented REST
endpoint, takes the invocation ``Deadline`` and a step name, and turns
non-2xx answers into ``UpstreamError`` carrying status and body.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from claim_registry.deadline import Deadline
from claim_registry.errors import DeletionTimeout, RefNotFound, UpstreamError
from claim_registry.planner import TreeEntry
from claim_registry.types import TreeItemPayload

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
_ACCEPT = "application/vnd.github.v3+json"


@dataclass(frozen=True)
class PullRequest:
    number: int
    url: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PullRequest:
        return cls(number=int(data["number"]), url=data["html_url"])


class GitHubStore:
    """Authenticated client for one ``owner/repo``.

    Use as a context manager or call ``close()``; a caller-supplied
    *transport* (e.g. ``httpx.MockTransport``) replaces the network.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self._client = httpx.Client(
            base_url=f"{api_url.rstrip('/')}/repos/{owner}/{repo}/",
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": _ACCEPT,
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GitHubStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # -- transport ----------------------------------------------------------

    def _request(
        self,
        method: str,
        url: str,
        *,
        step: str,
        deadline: Deadline,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request bounded by what is left of *deadline*.

        httpx timeouts apply per phase (connect, each read), so the body is
        streamed and the deadline re-checked after every chunk; a response
        that trickles in past expiry raises DeletionTimeout.

        Returns the response whatever its status; callers decide what a
        non-2xx means for their step.
        """
        deadline.check(step)
        request = self._client.build_request(
            method,
            url,
            json=json,
            params=params,
            timeout=httpx.Timeout(deadline.remaining()),
        )
        try:
            response = self._client.send(request, stream=True)
            try:
                chunks: list[bytes] = []
                for chunk in response.iter_raw():
                    if deadline.expired():
                        raise DeletionTimeout(step, deadline.seconds)
                    chunks.append(chunk)
            finally:
                response.close()
        except httpx.TimeoutException as exc:
            raise DeletionTimeout(step, deadline.seconds) from exc
        except httpx.RequestError as exc:
            raise UpstreamError(step, None, str(exc)) from exc
        return httpx.Response(
            response.status_code,
            headers=response.headers,
            content=b"".join(chunks),
            request=request,
        )

    def _expect_ok(self, response: httpx.Response, step: str) -> dict[str, Any]:
        if not response.is_success:
            raise UpstreamError(step, response.status_code, response.text)
        data: dict[str, Any] = response.json()
        return data

    # -- reads --------------------------------------------------------------

    def get_branch_sha(self, branch: str, *, deadline: Deadline, step: str = "ResolveRef") -> str:
        response = self._request("GET", f"git/ref/heads/{branch}", step=step, deadline=deadline)
        if response.status_code == 404:
            raise RefNotFound(branch, response.status_code, response.text)
        sha: str = self._expect_ok(response, step)["object"]["sha"]
        return sha

    def get_commit_tree_sha(self, commit_sha: str, *, deadline: Deadline, step: str = "ReadCommit") -> str:
        response = self._request("GET", f"git/commits/{commit_sha}", step=step, deadline=deadline)
        sha: str = self._expect_ok(response, step)["tree"]["sha"]
        return sha

    def get_tree(self, tree_sha: str, *, deadline: Deadline, step: str = "ReadTree") -> list[TreeEntry]:
        response = self._request("GET", f"git/trees/{tree_sha}", params={"recursive": "1"}, step=step, deadline=deadline)
        data = self._expect_ok(response, step)
        if data.get("truncated"):
            logger.warning("Tree %s listing was truncated by GitHub; deletions may be incomplete", tree_sha)
        return [TreeEntry.from_api(item) for item in data.get("tree", [])]

    def get_file_text(self, path: str, ref: str, *, deadline: Deadline, step: str = "ReadManifest") -> str:
        """Text of the file at *path* as of *ref* (a branch or commit sha).

        A directory listing, an undecodable payload or non-UTF-8 content is
        reported as UpstreamError like any other unusable answer.
        """
        response = self._request("GET", f"contents/{path}", params={"ref": ref}, step=step, deadline=deadline)
        if not response.is_success:
            raise UpstreamError(step, response.status_code, response.text)
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(step, response.status_code, f"invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise UpstreamError(step, response.status_code, f"{path} is not a file")
        content = data.get("content") or ""
        try:
            if data.get("encoding") == "base64":
                return base64.b64decode(content).decode("utf-8")
            return str(content)
        except (ValueError, TypeError) as exc:
            raise UpstreamError(step, response.status_code, f"undecodable content: {exc}") from exc

    def find_open_pull_request(self, head: str, base: str, *, deadline: Deadline, step: str = "FindPR") -> PullRequest | None:
        response = self._request(
            "GET",
            "pulls",
            params={"state": "open", "head": f"{self.owner}:{head}", "base": base},
            step=step,
            deadline=deadline,
        )
        if not response.is_success:
            raise UpstreamError(step, response.status_code, response.text)
        pulls = response.json()
        if not pulls:
            return None
        return PullRequest.from_api(pulls[0])

    # -- writes -------------------------------------------------------------

    def create_tree(
        self, base_tree: str, items: list[TreeItemPayload], *, deadline: Deadline, step: str = "CreateTree"
    ) -> str:
        response = self._request(
            "POST", "git/trees", json={"base_tree": base_tree, "tree": items}, step=step, deadline=deadline
        )
        sha: str = self._expect_ok(response, step)["sha"]
        return sha

    def create_commit(
        self, tree_sha: str, message: str, parents: list[str], *, deadline: Deadline, step: str = "CreateCommit"
    ) -> str:
        response = self._request(
            "POST",
            "git/commits",
            json={"message": message, "tree": tree_sha, "parents": parents},
            step=step,
            deadline=deadline,
        )
        sha: str = self._expect_ok(response, step)["sha"]
        return sha

    def create_ref(self, branch: str, sha: str, *, deadline: Deadline, step: str = "PublishBranch") -> None:
        response = self._request(
            "POST", "git/refs", json={"ref": f"refs/heads/{branch}", "sha": sha}, step=step, deadline=deadline
        )
        self._expect_ok(response, step)

    def update_ref(
        self, branch: str, sha: str, *, force: bool = True, deadline: Deadline, step: str = "PublishBranch"
    ) -> None:
        response = self._request(
            "PATCH", f"git/refs/heads/{branch}", json={"sha": sha, "force": force}, step=step, deadline=deadline
        )
        self._expect_ok(response, step)

    def create_pull_request(
        self, head: str, base: str, title: str, body: str, *, deadline: Deadline, step: str = "CreatePR"
    ) -> PullRequest:
        response = self._request(
            "POST",
            "pulls",
            json={"title": title, "body": body, "head": head, "base": base},
            step=step,
            deadline=deadline,
        )
        return PullRequest.from_api(self._expect_ok(response, step))
