"""
github_client.py

Responsibility: Isolate all direct GitHub REST API interaction.

This module must be the only place that:
- Constructs GitHub REST endpoints (users, repos, Git Data API)
- Sends HTTP requests to api.github.com
- Interprets GitHub API responses / error payloads

Every public method returns a `Result`; nothing here raises for remote failures.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any

import requests

from pushtree import results
from pushtree.results import Err, Ok, Result

_STATUS_KINDS = {
    401: results.AUTH,
    403: results.AUTH,
    404: results.NOT_FOUND,
    409: results.CONFLICT,
    422: results.VALIDATION,
}


@dataclass(frozen=True)
class RepoInfo:
    owner: str
    name: str
    html_url: str
    default_branch: str


@dataclass(frozen=True)
class BlobRef:
    """A created blob, shaped as a Git Data API tree entry."""

    path: str
    sha: str
    mode: str = "100644"
    type: str = "blob"

    def as_tree_entry(self) -> dict[str, str]:
        return {"path": self.path, "mode": self.mode, "type": self.type, "sha": self.sha}


def _field(payload: dict[str, Any], *keys: str) -> Result[Any]:
    """Walk nested keys of a response body; a missing key is a validation error."""
    value: Any = payload
    for key in keys:
        if not isinstance(value, dict) or value.get(key) is None:
            return Err(results.VALIDATION, f"GitHub API response is missing `{'.'.join(keys)}`", payload)
        value = value[key]
    return Ok(value)


class GitHubClient:
    def __init__(self, token: str, api_base: str = "https://api.github.com", timeout: float = 30) -> None:
        self._token = token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "pushtree",
        }

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Result[Any]:
        url = f"{self._api_base}{path}"
        try:
            r = requests.request(
                method, url, headers=self._headers(), json=json_body, params=params, timeout=self._timeout
            )
        except requests.RequestException as e:
            return Err(results.NETWORK, f"{method} {path} failed: {e}")
        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            message = payload.get("message", payload) if isinstance(payload, dict) else payload
            kind = _STATUS_KINDS.get(r.status_code, results.HTTP)
            return Err(kind, f"GitHub API error {r.status_code} {method} {path}: {message}", payload)
        if r.status_code == 204:
            return Ok(None)
        try:
            payload = r.json()
        except ValueError:
            return Err(
                results.HTTP, f"GitHub API returned an invalid JSON response {r.status_code} {method} {path}", r.text
            )
        if not isinstance(payload, dict):
            return Err(
                results.HTTP, f"GitHub API returned an unexpected response {r.status_code} {method} {path}", payload
            )
        return Ok(payload)

    def get_authenticated_user(self) -> Result[str]:
        """Return the login of the token's owner."""
        if not self._token.strip():
            return Err(results.AUTH, "GitHub token is required (use --github-token or set GITHUB_TOKEN)")
        res = self._request("GET", "/user")
        if isinstance(res, Err):
            return res
        login = str((res.value or {}).get("login") or "")
        if not login:
            return Err(results.AUTH, "GitHub did not return a login for this token", res.value)
        return Ok(login)

    def create_repo(self, *, name: str, private: bool, description: str = "") -> Result[RepoInfo]:
        """
        Create a repository for the authenticated user.

        The repo is auto-initialized so its default branch already has a commit
        to parent the upload on.
        """
        body = {
            "name": name,
            "private": private,
            "description": description,
            "auto_init": True,
        }
        res = self._request("POST", "/user/repos", json_body=body)
        if isinstance(res, Err):
            return res
        data = res.value
        html_url = _field(data, "html_url")
        if isinstance(html_url, Err):
            return html_url
        owner = data.get("owner")
        return Ok(
            RepoInfo(
                owner=str(owner.get("login") or "") if isinstance(owner, dict) else "",
                name=data.get("name") or name,
                html_url=html_url.value,
                default_branch=data.get("default_branch") or "main",
            )
        )

    def get_ref(self, repo: RepoInfo, branch: str) -> Result[str]:
        """Return the commit SHA the branch head points at."""
        res = self._request("GET", f"/repos/{repo.owner}/{repo.name}/git/ref/heads/{branch}")
        if isinstance(res, Err):
            return res
        return _field(res.value, "object", "sha")

    def get_commit(self, repo: RepoInfo, sha: str) -> Result[str]:
        """Return the tree SHA of a commit."""
        res = self._request("GET", f"/repos/{repo.owner}/{repo.name}/git/commits/{sha}")
        if isinstance(res, Err):
            return res
        return _field(res.value, "tree", "sha")

    def create_blob(self, repo: RepoInfo, content: str) -> Result[str]:
        encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
        res = self._request(
            "POST",
            f"/repos/{repo.owner}/{repo.name}/git/blobs",
            json_body={"content": encoded, "encoding": "base64"},
        )
        if isinstance(res, Err):
            return res
        return _field(res.value, "sha")

    def create_tree(self, repo: RepoInfo, base_tree: str, entries: list[BlobRef]) -> Result[str]:
        res = self._request(
            "POST",
            f"/repos/{repo.owner}/{repo.name}/git/trees",
            json_body={"base_tree": base_tree, "tree": [e.as_tree_entry() for e in entries]},
        )
        if isinstance(res, Err):
            return res
        return _field(res.value, "sha")

    def create_commit(self, repo: RepoInfo, *, message: str, tree: str, parents: list[str]) -> Result[str]:
        res = self._request(
            "POST",
            f"/repos/{repo.owner}/{repo.name}/git/commits",
            json_body={"message": message, "tree": tree, "parents": parents},
        )
        if isinstance(res, Err):
            return res
        return _field(res.value, "sha")

    def update_ref(self, repo: RepoInfo, branch: str, sha: str) -> Result[None]:
        # Non-force: GitHub rejects anything that is not a fast-forward.
        res = self._request(
            "PATCH",
            f"/repos/{repo.owner}/{repo.name}/git/refs/heads/{branch}",
            json_body={"sha": sha, "force": False},
        )
        if isinstance(res, Err):
            return res
        return Ok(None)

    def get_tree(self, repo: RepoInfo, sha: str) -> Result[dict[str, str]]:
        """Return `{path: blob_sha}` for every blob in a tree, recursively."""
        res = self._request(
            "GET", f"/repos/{repo.owner}/{repo.name}/git/trees/{sha}", params={"recursive": "1"}
        )
        if isinstance(res, Err):
            return res
        entries = (res.value or {}).get("tree") or []
        return Ok(
            {
                e["path"]: e["sha"]
                for e in entries
                if isinstance(e, dict) and e.get("type") == "blob" and e.get("path") and e.get("sha")
            }
        )

    def get_blob(self, repo: RepoInfo, sha: str) -> Result[bytes]:
        res = self._request("GET", f"/repos/{repo.owner}/{repo.name}/git/blobs/{sha}")
        if isinstance(res, Err):
            return res
        data = res.value or {}
        if data.get("encoding") == "base64":
            try:
                return Ok(base64.b64decode(data.get("content") or ""))
            except binascii.Error as e:
                return Err(results.VALIDATION, f"GitHub API returned an undecodable blob {sha}: {e}", data)
        return Ok(str(data.get("content", "")).encode("utf-8"))
