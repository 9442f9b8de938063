"""Document store contract shared by every backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, NamedTuple

from trellis.errors import StoreError
from trellis.ids import new_id
from trellis.paths import is_under, join, split

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[list[str]], None]


@dataclass(frozen=True)
class Document:
    id: str
    path: str
    fields: dict[str, Any]


class Op(NamedTuple):
    kind: str  # "set" | "update" | "delete" | "require"
    path: str
    fields: dict[str, Any] | None = None


class Batch:
    """Queue of writes committed together: all of them land or none do."""

    def __init__(self, store: DocumentStore):
        self._store = store
        self._ops: list[Op] = []
        self._committed = False

    def set(self, path: str, fields: dict[str, Any]) -> Batch:
        split(path)
        self._ops.append(Op("set", path, dict(fields)))
        return self

    def update(self, path: str, fields: dict[str, Any]) -> Batch:
        split(path)
        self._ops.append(Op("update", path, dict(fields)))
        return self

    def delete(self, path: str) -> Batch:
        split(path)
        self._ops.append(Op("delete", path))
        return self

    def require(self, path: str) -> Batch:
        """Reject the whole batch unless path exists when it is applied."""
        split(path)
        self._ops.append(Op("require", path))
        return self

    def __len__(self) -> int:
        return len(self._ops)

    async def commit(self) -> None:
        if self._committed:
            raise StoreError("batch already committed")
        self._committed = True
        if self._ops:
            await self._store._commit(list(self._ops))


class DocumentStore:
    """Keyed, hierarchical document collections with change subscriptions.

    Subclasses implement read(), query() and _commit(); single-document
    writes are one-operation commits.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[int, tuple[str, ChangeCallback]] = {}
        self._next_token = 0

    async def read(self, path: str) -> dict[str, Any] | None:
        raise NotImplementedError

    async def query(self, collection_path: str) -> list[Document]:
        raise NotImplementedError

    async def _commit(self, ops: list[Op]) -> None:
        raise NotImplementedError

    async def create(self, collection_path: str, fields: dict[str, Any]) -> str:
        """Write a new document under a generated id and return the id."""
        doc_id = new_id()
        await self.set(join(collection_path, doc_id), fields)
        return doc_id

    async def set(self, path: str, fields: dict[str, Any]) -> None:
        split(path)
        await self._commit([Op("set", path, dict(fields))])

    async def update(self, path: str, fields: dict[str, Any]) -> None:
        split(path)
        await self._commit([Op("update", path, dict(fields))])

    async def delete(self, path: str) -> None:
        split(path)
        await self._commit([Op("delete", path)])

    def batch(self) -> Batch:
        return Batch(self)

    def subscribe(self, path: str, on_change: ChangeCallback) -> Callable[[], None]:
        """Call on_change(paths) whenever documents at or under path change.

        Returns an unsubscribe callable; calling it more than once is harmless.
        """
        token = self._next_token
        self._next_token += 1
        self._subscriptions[token] = (path, on_change)

        def unsubscribe() -> None:
            self._subscriptions.pop(token, None)

        return unsubscribe

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    @staticmethod
    def _written(ops: list[Op]) -> list[str]:
        return [op.path for op in ops if op.kind != "require"]

    def _notify(self, changed: Iterable[str]) -> None:
        changed = sorted(set(changed))
        if not changed:
            return
        for token, (prefix, callback) in list(self._subscriptions.items()):
            if token not in self._subscriptions:
                continue
            hits = [p for p in changed if is_under(p, prefix)]
            if not hits:
                continue
            try:
                callback(hits)
            except Exception:
                logger.exception("change callback for %s failed", prefix)
