"""Document store kept on a git branch, one YAML blob per document.

Commits are assembled in a scratch index and published with a
compare-and-swap on the branch ref, so each batch is one atomic commit
and the working tree is never touched. Changes made by other processes
(or pulled in by a fetch) are picked up by poll() / watch().
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
import threading
from pathlib import Path
from typing import Any

import yaml
from git import Repo

from trellis.errors import BatchConflict, DocumentNotFound, StoreError
from trellis.git import (
    changed_files,
    commit_tree,
    compare_and_swap_ref,
    get_ref,
    hash_blob,
    run_git,
    scratch_index,
)
from trellis.paths import split
from trellis.store.base import Document, DocumentStore, Op

logger = logging.getLogger(__name__)

SUFFIX = ".yaml"


def _encode(fields: dict[str, Any]) -> str:
    return yaml.safe_dump(fields, sort_keys=True, allow_unicode=True)


def _decode(text: str) -> dict[str, Any]:
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


def _message(ops: list[Op]) -> str:
    if len(ops) == 1:
        return f"{ops[0].kind} {ops[0].path}"
    kinds = sorted({op.kind for op in ops})
    return f"batch: {len(ops)} operations ({', '.join(kinds)})"


class GitStore(DocumentStore):
    def __init__(self, repo_path: str | Path, branch: str = "trellis"):
        super().__init__()
        self.repo_path = Path(repo_path)
        self.branch = branch
        self.ref = f"refs/heads/{branch}"
        self._lock = threading.Lock()
        self._seen = get_ref(self.repo_path, self.ref)

    @property
    def tip(self) -> str | None:
        return get_ref(self.repo_path, self.ref)

    # --- sync side (runs in worker threads) ---

    def read_sync(self, path: str, at: str | None = None) -> dict[str, Any] | None:
        split(path)
        commit = at or self.tip
        if commit is None:
            return None
        with Repo(self.repo_path) as repo:
            try:
                blob = repo.commit(commit).tree / (path + SUFFIX)
            except KeyError:
                return None
            return _decode(blob.data_stream.read().decode("utf-8"))

    def query_sync(self, collection_path: str) -> list[Document]:
        commit = self.tip
        if commit is None:
            return []
        with Repo(self.repo_path) as repo:
            try:
                tree = repo.commit(commit).tree / collection_path
            except KeyError:
                return []
            if tree.type != "tree":
                return []
            docs = []
            for blob in tree.blobs:
                if not blob.name.endswith(SUFFIX):
                    continue
                doc_id = blob.name[: -len(SUFFIX)]
                fields = _decode(blob.data_stream.read().decode("utf-8"))
                docs.append(Document(id=doc_id, path=f"{collection_path}/{doc_id}", fields=fields))
            return docs

    def commit_sync(self, ops: list[Op]) -> list[str]:
        """Apply ops as one commit. Returns every document path that changed
        since the last commit or poll, including changes made elsewhere."""
        with self._lock:
            tip = self.tip
            try:
                with scratch_index(self.repo_path) as env:
                    run_git(self.repo_path, ["read-tree", tip] if tip else ["read-tree", "--empty"], env=env)
                    staged: dict[str, dict[str, Any] | None] = {}
                    for op in ops:
                        filename = op.path + SUFFIX
                        if op.kind == "require":
                            current = staged[op.path] if op.path in staged else self.read_sync(op.path, at=tip)
                            if current is None:
                                raise DocumentNotFound(op.path)
                            continue
                        if op.kind == "delete":
                            run_git(self.repo_path, ["update-index", "--force-remove", filename], env=env)
                            staged[op.path] = None
                            continue
                        fields = op.fields
                        if op.kind == "update":
                            current = staged[op.path] if op.path in staged else self.read_sync(op.path, at=tip)
                            if current is None:
                                raise DocumentNotFound(op.path)
                            fields = {**current, **op.fields}
                        blob = hash_blob(self.repo_path, _encode(fields))
                        run_git(
                            self.repo_path,
                            ["update-index", "--add", "--cacheinfo", f"100644,{blob},{filename}"],
                            env=env,
                        )
                        staged[op.path] = fields
                    tree = run_git(self.repo_path, ["write-tree"], env=env)
                commit = commit_tree(self.repo_path, tree, tip, _message(ops))
            except subprocess.CalledProcessError as exc:
                raise StoreError(exc.stderr.decode("utf-8", "replace").strip()) from exc

            if not compare_and_swap_ref(self.repo_path, self.ref, commit, tip):
                raise BatchConflict(f"{self.branch} moved during commit")

            changed = self._written(ops)
            if self._seen != tip and tip is not None:
                changed += self._doc_paths(changed_files(self.repo_path, self._seen, tip))
            self._seen = commit
            return changed

    def poll_sync(self) -> list[str]:
        """Document paths changed by commits nobody here has seen yet."""
        with self._lock:
            tip = self.tip
            if tip == self._seen:
                return []
            files = changed_files(self.repo_path, self._seen, tip) if tip else []
            self._seen = tip
            return self._doc_paths(files)

    @staticmethod
    def _doc_paths(files: list[str]) -> list[str]:
        return [f[: -len(SUFFIX)] for f in files if f.endswith(SUFFIX)]

    # --- async side ---

    async def read(self, path: str) -> dict[str, Any] | None:
        return await asyncio.to_thread(self.read_sync, path)

    async def query(self, collection_path: str) -> list[Document]:
        return await asyncio.to_thread(self.query_sync, collection_path)

    async def _commit(self, ops: list[Op]) -> None:
        changed = await asyncio.to_thread(self.commit_sync, ops)
        self._notify(changed)

    async def poll(self) -> list[str]:
        """Notify subscribers about external commits. Returns the changed paths."""
        changed = await asyncio.to_thread(self.poll_sync)
        self._notify(changed)
        return changed

    async def watch(self, interval: float = 2.0) -> None:
        """Poll forever; run as a task and cancel it to stop."""
        while True:
            try:
                await self.poll()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning("polling %s failed: %s", self.branch, exc)
            await asyncio.sleep(interval)
