from __future__ import annotations

import base64
import hashlib
import logging
import threading
import time

import pytest

from pushtree import results
from pushtree.github_client import BlobRef, RepoInfo
from pushtree.results import Err, Ok


def _sha(*parts: str) -> str:
    return hashlib.sha1("\0".join(parts).encode("utf-8")).hexdigest()


class FakeForge:
    """
    In-memory stand-in for GitHubClient.

    Repos are created with one auto-init commit containing README.md. Failures
    are injected through `fail_blob_for` (blob content -> Err) and
    `fail_step` (method name -> Err). `blob_delay` slows successful blob
    uploads. `ref_not_ready` makes the first N `get_ref` calls return not_found.
    """

    def __init__(self, login: str = "octocat") -> None:
        self.login = login
        self.calls: list[str] = []
        self.blobs: dict[str, bytes] = {}
        self.trees: dict[str, dict[str, str]] = {}
        self.commits: dict[str, dict] = {}
        self.refs: dict[str, str] = {}
        self.fail_blob_for: dict[str, Err] = {}
        self.fail_step: dict[str, Err] = {}
        self.ref_not_ready = 0
        self.blob_delay = 0.0
        self._lock = threading.Lock()

    def _record(self, name: str) -> Err | None:
        with self._lock:
            self.calls.append(name)
        return self.fail_step.get(name)

    def get_authenticated_user(self):
        err = self._record("get_authenticated_user")
        return err or Ok(self.login)

    def create_repo(self, *, name, private, description=""):
        err = self._record("create_repo")
        if err:
            return err
        readme = _sha("blob", "# " + name)
        self.blobs[readme] = ("# " + name).encode("utf-8")
        tree = _sha("tree", readme)
        self.trees[tree] = {"README.md": readme}
        commit = _sha("commit", tree)
        self.commits[commit] = {"tree": tree, "parents": [], "message": "Initial commit"}
        self.refs["main"] = commit
        self.repo = RepoInfo(
            owner=self.login,
            name=name,
            html_url=f"https://github.com/{self.login}/{name}",
            default_branch="main",
        )
        self.private = private
        self.description = description
        return Ok(self.repo)

    def get_ref(self, repo, branch):
        err = self._record("get_ref")
        if err:
            return err
        if self.ref_not_ready:
            self.ref_not_ready -= 1
            return Err(results.NOT_FOUND, "Git Repository is empty.", {"message": "Git Repository is empty."})
        return Ok(self.refs[branch])

    def get_commit(self, repo, sha):
        err = self._record("get_commit")
        return err or Ok(self.commits[sha]["tree"])

    def create_blob(self, repo, content):
        err = self._record("create_blob")
        if err:
            return err
        if content in self.fail_blob_for:
            return self.fail_blob_for[content]
        if self.blob_delay:
            time.sleep(self.blob_delay)
        sha = _sha("blob", content)
        with self._lock:
            self.blobs[sha] = content.encode("utf-8")
        return Ok(sha)

    def create_tree(self, repo, base_tree, entries: list[BlobRef]):
        err = self._record("create_tree")
        if err:
            return err
        merged = dict(self.trees[base_tree])
        merged.update({e.path: e.sha for e in entries})
        sha = _sha("tree", *sorted(f"{p}:{s}" for p, s in merged.items()))
        self.trees[sha] = merged
        return Ok(sha)

    def create_commit(self, repo, *, message, tree, parents):
        err = self._record("create_commit")
        if err:
            return err
        sha = _sha("commit", tree, *parents, message)
        self.commits[sha] = {"tree": tree, "parents": list(parents), "message": message}
        return Ok(sha)

    def update_ref(self, repo, branch, sha):
        err = self._record("update_ref")
        if err:
            return err
        if self.refs[branch] not in self.commits[sha]["parents"]:
            return Err(results.VALIDATION, "Update is not a fast forward", {"message": "Update is not a fast forward"})
        self.refs[branch] = sha
        return Ok(None)

    def get_tree(self, repo, sha):
        err = self._record("get_tree")
        return err or Ok(dict(self.trees[sha]))

    def get_blob(self, repo, sha):
        err = self._record("get_blob")
        if err:
            return err
        # Round-trip through base64 like the real API does.
        return Ok(base64.b64decode(base64.b64encode(self.blobs[sha])))


@pytest.fixture
def forge() -> FakeForge:
    return FakeForge()


@pytest.fixture
def logger() -> logging.Logger:
    log = logging.getLogger("tests.pushtree")
    log.setLevel(logging.DEBUG)
    return log
