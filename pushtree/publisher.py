"""
publisher.py

Responsibility: Publish collected files to a new GitHub repository as one commit.

High-level flow:
1) Resolve the authenticated login
2) Create an auto-initialized repository
3) Poll the default branch head until it exists, then read its tree
4) Create one blob per file on a bounded thread pool
5) Create a tree layered on the base tree, then a commit parented on the head
6) Fast-forward the branch ref to the new commit

Every step consumes the previous step's output; the first `Err` ends the run.
Nothing created remotely is rolled back.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, replace
from typing import Callable, Sequence

from pushtree import results
from pushtree.collector import FileRecord
from pushtree.config import DEFAULT_COMMIT_MESSAGE
from pushtree.github_client import BlobRef, GitHubClient, RepoInfo
from pushtree.results import Err, Ok, Result
from pushtree.templating import render_text

# Errors a freshly created repo returns while its default branch is being set up.
_NOT_READY = (results.NOT_FOUND, results.CONFLICT)


@dataclass(frozen=True)
class RepoRequest:
    """What to create and how to describe the upload."""

    name: str
    description: str = ""
    private: bool = False
    commit_message: str = DEFAULT_COMMIT_MESSAGE


@dataclass(frozen=True)
class PublishResult:
    repo: RepoInfo
    commit_sha: str
    tree_sha: str
    parent_sha: str
    blobs: tuple[BlobRef, ...]

    @property
    def file_count(self) -> int:
        return len(self.blobs)


class Publisher:
    def __init__(
        self,
        client: GitHubClient,
        logger: logging.Logger,
        *,
        concurrency: int = 8,
        ref_attempts: int = 6,
        ref_backoff: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._log = logger
        self._concurrency = concurrency
        self._ref_attempts = ref_attempts
        self._ref_backoff = ref_backoff
        self._sleep = sleep

    def publish(self, files: Sequence[FileRecord], request: RepoRequest) -> Result[PublishResult]:
        if not files:
            return Err(results.EMPTY, "No files to publish")

        login = self._client.get_authenticated_user()
        if isinstance(login, Err):
            return login
        self._log.info("Connected as %s", login.value)

        # Rendered before any remote mutation so a bad template creates nothing.
        message = render_text(
            request.commit_message,
            {"repo_name": request.name, "owner": login.value, "file_count": len(files)},
        )

        self._log.info("Creating repository: %s", request.name)
        created = self._client.create_repo(
            name=request.name, private=request.private, description=request.description
        )
        if isinstance(created, Err):
            return created
        repo = created.value
        if not repo.owner:
            repo = replace(repo, owner=login.value)
        self._log.info("Repository created: %s", repo.html_url)

        head = self._resolve_head(repo)
        if isinstance(head, Err):
            return head
        base_tree = self._client.get_commit(repo, head.value)
        if isinstance(base_tree, Err):
            return base_tree

        self._log.info("Uploading %d files to %s", len(files), repo.name)
        blobs = self._create_blobs(repo, files)
        if isinstance(blobs, Err):
            return blobs

        tree = self._client.create_tree(repo, base_tree.value, blobs.value)
        if isinstance(tree, Err):
            return tree

        commit = self._client.create_commit(repo, message=message, tree=tree.value, parents=[head.value])
        if isinstance(commit, Err):
            return commit

        updated = self._client.update_ref(repo, repo.default_branch, commit.value)
        if isinstance(updated, Err):
            return updated

        return Ok(
            PublishResult(
                repo=repo,
                commit_sha=commit.value,
                tree_sha=tree.value,
                parent_sha=head.value,
                blobs=tuple(blobs.value),
            )
        )

    def _resolve_head(self, repo: RepoInfo) -> Result[str]:
        """Read the default branch head, backing off while the repo initializes."""
        attempt = 0
        while True:
            head = self._client.get_ref(repo, repo.default_branch)
            attempt += 1
            if not isinstance(head, Err) or head.kind not in _NOT_READY or attempt >= self._ref_attempts:
                return head
            delay = self._ref_backoff * (2 ** (attempt - 1))
            self._log.debug(
                "Branch %s not ready (attempt %d/%d), retrying in %.2fs",
                repo.default_branch,
                attempt,
                self._ref_attempts,
                delay,
            )
            self._sleep(delay)

    def _create_blobs(self, repo: RepoInfo, files: Sequence[FileRecord]) -> Result[list[BlobRef]]:
        """
        Create every blob, at most `concurrency` at a time.

        On the first failure the uploads that have not started yet are
        cancelled and that failure is returned; in-flight requests finish but
        their results are discarded.
        """
        blobs: list[BlobRef] = []
        failure: Err | None = None
        with ThreadPoolExecutor(max_workers=self._concurrency, thread_name_prefix="pushtree-blob") as pool:
            futures = {pool.submit(self._client.create_blob, repo, f.content): f for f in files}
            for future in as_completed(futures):
                record = futures[future]
                try:
                    res = future.result()
                except Exception:
                    for pending in futures:
                        pending.cancel()
                    raise
                if isinstance(res, Err):
                    failure = Err(res.kind, f"Blob upload failed for {record.path}: {res.message}", res.body)
                    for pending in futures:
                        pending.cancel()
                    break
                self._log.debug("Created blob %s for %s", res.value, record.path)
                blobs.append(BlobRef(path=record.path, sha=res.value))
        if failure is not None:
            return failure
        blobs.sort(key=lambda b: b.path)
        return Ok(blobs)

    def verify(self, published: PublishResult, files: Sequence[FileRecord]) -> Result[None]:
        """Read the committed tree back and compare each blob with the local content."""
        tree = self._client.get_tree(published.repo, published.tree_sha)
        if isinstance(tree, Err):
            return tree
        mismatched: list[str] = []
        for record in files:
            sha = tree.value.get(record.path)
            if sha is None:
                mismatched.append(record.path)
                continue
            blob = self._client.get_blob(published.repo, sha)
            if isinstance(blob, Err):
                return blob
            if blob.value != record.content.encode("utf-8"):
                mismatched.append(record.path)
        if mismatched:
            return Err(results.VALIDATION, f"Published content differs for: {', '.join(sorted(mismatched))}")
        self._log.info("Verified %d files against the published tree", len(files))
        return Ok(None)
