"""Hierarchical document paths for boards, lists and cards."""

from trellis.errors import InvalidPath
from trellis.ids import is_valid_id

DEFAULT_APP_ID = "default-app-id"


def join(*parts: str) -> str:
    """Join path segments, validating each id-like segment."""
    for part in parts:
        if not part or part.startswith("/") or part.endswith("/"):
            raise InvalidPath(f"bad path segment {part!r}")
    return "/".join(parts)


def split(path: str) -> tuple[str, str]:
    """Split a document path into (collection_path, doc_id)."""
    collection, sep, doc_id = path.rpartition("/")
    if not sep or not is_valid_id(doc_id):
        raise InvalidPath(f"not a document path: {path!r}")
    return collection, doc_id


def is_under(path: str, prefix: str) -> bool:
    """True if path equals prefix or lies below it."""
    return path == prefix or path.startswith(prefix + "/")


class Paths:
    """Build store paths inside one application namespace.

    Layout::

        <ns>/users/<uid>/boards/<boardId>
        <ns>/boards/<boardId>/lists/<listId>
        <ns>/lists/<listId>/cards/<cardId>
    """

    def __init__(self, app_id: str = DEFAULT_APP_ID):
        if not is_valid_id(app_id):
            raise InvalidPath(f"bad app id {app_id!r}")
        self.root = f"artifacts/{app_id}"

    def boards(self, owner: str) -> str:
        return join(self.root, "users", _checked(owner), "boards")

    def board(self, owner: str, board_id: str) -> str:
        return join(self.boards(owner), _checked(board_id))

    def lists(self, board_id: str) -> str:
        return join(self.root, "boards", _checked(board_id), "lists")

    def list(self, board_id: str, list_id: str) -> str:
        return join(self.lists(board_id), _checked(list_id))

    def cards(self, list_id: str) -> str:
        return join(self.root, "lists", _checked(list_id), "cards")

    def card(self, list_id: str, card_id: str) -> str:
        return join(self.cards(list_id), _checked(card_id))


def _checked(doc_id: str) -> str:
    if not is_valid_id(doc_id):
        raise InvalidPath(f"bad id {doc_id!r}")
    return doc_id
