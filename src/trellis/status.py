"""Session status node: what a banner or spinner in the UI watches."""

from trellis.model.node import Node

LOADING = "loading"
READY = "ready"
FAILED = "failed"


def new_status() -> Node:
    return Node(state=LOADING, pending=0, failures=0)


def record_failure(status: Node, action: str, exc: BaseException) -> None:
    """Remember the latest failure so it can be surfaced; fires watchers."""
    status.error = f"{action} failed: {exc}"
    status.failures = (status.failures or 0) + 1
