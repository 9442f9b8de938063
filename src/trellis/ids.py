"""Document id generation."""

import secrets
import string

ID_ALPHABET = string.ascii_letters + string.digits
ID_LENGTH = 20


def new_id() -> str:
    """Generate a random 20-character alphanumeric document id."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def is_valid_id(s: str) -> bool:
    """Check an id is usable as a path segment.

    "abc" → True, "" → False, "a/b" → False
    """
    return bool(s) and "/" not in s and s not in (".", "..")
