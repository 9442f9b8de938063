"""Document store backends."""

from trellis.store.base import Batch, Document, DocumentStore, Op
from trellis.store.gitstore import GitStore
from trellis.store.memory import MemoryStore

__all__ = [
    "Batch",
    "Document",
    "DocumentStore",
    "GitStore",
    "MemoryStore",
    "Op",
]
