"""Exceptions raised by trellis stores and models."""


class TrellisError(Exception):
    """Base class for trellis errors."""


class StoreError(TrellisError):
    """A document store operation was rejected."""


class DocumentNotFound(StoreError):
    """An update targeted a document that does not exist."""

    def __init__(self, path: str):
        super().__init__(f"no document at {path}")
        self.path = path


class BatchConflict(StoreError):
    """The store moved underneath a batch commit; nothing was applied."""


class InvalidPath(TrellisError):
    """A path does not address a collection or a document as required."""


class ConcurrentMutation(TrellisError):
    """A hierarchy mutation started while another was still being applied."""
