"""In-process document store."""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Callable

from trellis.errors import DocumentNotFound, StoreError
from trellis.paths import split
from trellis.store.base import Document, DocumentStore, Op


class MemoryStore(DocumentStore):
    """Dict-backed store. Every commit yields to the event loop first,
    so writes interleave with other tasks the way a remote store's would.

    fail_next() and fail_on() make upcoming commits raise StoreError.
    """

    def __init__(self) -> None:
        super().__init__()
        self._docs: dict[str, dict[str, Any]] = {}
        self._fail_budget = 0
        self._fail_predicate: Callable[[list[Op]], bool] | None = None
        self.commits = 0

    def fail_next(self, count: int = 1) -> None:
        self._fail_budget = count

    def fail_on(self, predicate: Callable[[list[Op]], bool] | None) -> None:
        """Reject every commit whose operations match predicate (None clears)."""
        self._fail_predicate = predicate

    def paths(self) -> list[str]:
        return sorted(self._docs)

    async def read(self, path: str) -> dict[str, Any] | None:
        split(path)
        await asyncio.sleep(0)
        fields = self._docs.get(path)
        return copy.deepcopy(fields) if fields is not None else None

    async def query(self, collection_path: str) -> list[Document]:
        await asyncio.sleep(0)
        prefix = collection_path + "/"
        docs = []
        for path, fields in self._docs.items():
            rest = path[len(prefix) :] if path.startswith(prefix) else None
            if rest and "/" not in rest:
                docs.append(Document(id=rest, path=path, fields=copy.deepcopy(fields)))
        return docs

    async def _commit(self, ops: list[Op]) -> None:
        await asyncio.sleep(0)
        if self._fail_budget:
            self._fail_budget -= 1
            raise StoreError("commit rejected")
        if self._fail_predicate is not None and self._fail_predicate(ops):
            raise StoreError("commit rejected")

        staged = dict(self._docs)
        for op in ops:
            if op.kind == "set":
                staged[op.path] = copy.deepcopy(op.fields)
            elif op.kind == "update":
                if op.path not in staged:
                    raise DocumentNotFound(op.path)
                staged[op.path] = {**staged[op.path], **copy.deepcopy(op.fields)}
            elif op.kind == "delete":
                staged.pop(op.path, None)
            elif op.kind == "require":
                if op.path not in staged:
                    raise DocumentNotFound(op.path)
            else:
                raise StoreError(f"unknown operation {op.kind!r}")

        self._docs = staged
        self.commits += 1
        self._notify(self._written(ops))
