"""Observable tree nodes: the in-memory projection the presentation layer reads."""

from __future__ import annotations

from typing import Any, Callable

Callback = Callable[["Node | ListNode", str, Any, Any], None]


def _adopt(value: Any, parent: Node | ListNode, key: str) -> Any:
    """Wrap plain dicts as Nodes and reparent existing tree nodes."""
    if isinstance(value, dict):
        return Node(_parent=parent, _key=key, **value)
    if isinstance(value, (Node, ListNode)):
        object.__setattr__(value, "_parent", parent)
        object.__setattr__(value, "_key", key)
    return value


def _emit(node: Node | ListNode, key: str, old: Any, new: Any) -> None:
    """Fire watchers on node for key, then on every ancestor for the branch key."""
    for cb in list(node._watchers.get(key, ())):
        cb(node, key, old, new)
    child = node
    while child._parent is not None:
        parent = child._parent
        for cb in list(parent._watchers.get(child._key, ())):
            cb(node, key, old, new)
        child = parent


def _unwatcher(watchers: dict[str, list[Callback]], key: str, callback: Callback) -> Callable[[], None]:
    def unwatch() -> None:
        callbacks = watchers.get(key, [])
        if callback in callbacks:
            callbacks.remove(callback)

    return unwatch


def _path(node: Node | ListNode) -> str:
    parts: list[str] = []
    current: Node | ListNode | None = node
    while current is not None and current._key is not None:
        parts.append(current._key)
        current = current._parent
    return ".".join(reversed(parts))


class Node:
    """Attribute-style mapping that notifies watchers on change.

    Assigning None removes a key. Dict values become child Nodes.
    Change events bubble to every ancestor, keyed by the child's
    name in that ancestor.
    """

    def __init__(
        self,
        _parent: Node | ListNode | None = None,
        _key: str | None = None,
        **data: Any,
    ) -> None:
        object.__setattr__(self, "_children", {})
        object.__setattr__(self, "_watchers", {})
        object.__setattr__(self, "_parent", None)
        object.__setattr__(self, "_key", _key)
        for k, v in data.items():
            setattr(self, k, v)
        object.__setattr__(self, "_parent", _parent)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._children.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        old = self._children.get(name)
        if value is None:
            self._children.pop(name, None)
        else:
            value = _adopt(value, parent=self, key=name)
            self._children[name] = value
        if old != value:
            _emit(self, name, old, value)

    def __contains__(self, key: str) -> bool:
        return key in self._children

    def watch(self, key: str, callback: Callback) -> Callable[[], None]:
        """Watch a key (or a child branch). Returns an unwatch callable."""
        self._watchers.setdefault(key, []).append(callback)
        return _unwatcher(self._watchers, key, callback)

    def keys(self):
        return self._children.keys()

    def items(self):
        return self._children.items()

    def values(self):
        return self._children.values()

    @property
    def path(self) -> str:
        """Dotted path from root to this node."""
        return _path(self)

    def update(self, other: Node) -> None:
        """Make this node equal to other in place, keeping watchers attached."""
        for key in set(self.keys()) - set(other.keys()):
            setattr(self, key, None)
        for key, new_value in other.items():
            old_value = self._children.get(key)
            if isinstance(old_value, Node) and isinstance(new_value, Node):
                old_value.update(new_value)
            elif isinstance(old_value, ListNode) and isinstance(new_value, ListNode):
                old_value.update(new_value)
            elif old_value != new_value:
                setattr(self, key, new_value)

    def clear(self) -> None:
        """Remove every key, firing a removal event for each."""
        for key in list(self.keys()):
            setattr(self, key, None)

    def __repr__(self) -> str:
        p = self.path
        keys = ", ".join(self._children.keys())
        label = f"Node({p})" if p else "Node"
        return f"<{label} [{keys}]>"


class ListNode:
    """Ordered collection of Nodes keyed by string id.

    Assigning None to an id removes it. A reorder of existing ids
    fires a single "*" event carrying the old and new key order.
    """

    def __init__(
        self,
        _parent: Node | None = None,
        _key: str | None = None,
    ) -> None:
        object.__setattr__(self, "_items", [])
        object.__setattr__(self, "_by_id", {})
        object.__setattr__(self, "_watchers", {})
        object.__setattr__(self, "_parent", _parent)
        object.__setattr__(self, "_key", _key)

    @classmethod
    def of(cls, pairs) -> ListNode:
        """Build a ListNode from (id, value) pairs, preserving their order."""
        node = cls()
        for key, value in pairs:
            node[key] = value
        return node

    def __getitem__(self, key: str) -> Any:
        return self._by_id.get(str(key))

    def _position(self, key: str) -> int:
        for i, k in enumerate(self._by_id):
            if k == key:
                return i
        raise KeyError(key)

    def __setitem__(self, key: str, value: Any) -> None:
        key = str(key)
        old = self._by_id.get(key)
        if value is None:
            if old is None:
                return
            del self._items[self._position(key)]
            del self._by_id[key]
            _emit(self, key, old, None)
            return
        value = _adopt(value, parent=self, key=key)
        if old is not None:
            self._items[self._position(key)] = value
        else:
            self._items.append(value)
        self._by_id[key] = value
        if old != value:
            _emit(self, key, old, value)

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return str(key) in self._by_id

    def watch(self, key: str, callback: Callback) -> Callable[[], None]:
        """Watch an id, or "*" for reorders. Returns an unwatch callable."""
        key = str(key)
        self._watchers.setdefault(key, []).append(callback)
        return _unwatcher(self._watchers, key, callback)

    @property
    def path(self) -> str:
        """Dotted path from root to this node."""
        return _path(self)

    def keys(self) -> list[str]:
        return list(self._by_id.keys())

    def items(self) -> list[tuple[str, Any]]:
        return list(zip(self._by_id.keys(), self._items))

    def update(self, other: ListNode) -> None:
        """Make this list equal to other in place, keeping watchers attached."""
        for key in set(self._by_id) - set(other._by_id):
            self[key] = None
        for key, new_value in other.items():
            old_value = self._by_id.get(key)
            if old_value is None:
                self[key] = new_value
            elif isinstance(old_value, Node) and isinstance(new_value, Node):
                old_value.update(new_value)
            elif isinstance(old_value, ListNode) and isinstance(new_value, ListNode):
                old_value.update(new_value)
            elif old_value != new_value:
                self[key] = new_value
        self.reorder(other.keys())

    def reorder(self, keys) -> None:
        """Rearrange existing items into the given key order."""
        new_keys = [str(k) for k in keys]
        if sorted(new_keys) != sorted(self._by_id):
            raise KeyError(f"reorder keys do not match {self.keys()}")
        old_keys = self.keys()
        if old_keys == new_keys:
            return
        by_id = {k: self._by_id[k] for k in new_keys}
        object.__setattr__(self, "_by_id", by_id)
        object.__setattr__(self, "_items", list(by_id.values()))
        _emit(self, "*", old_keys, new_keys)

    def __repr__(self) -> str:
        p = self.path
        ids = ", ".join(self._by_id.keys())
        label = f"ListNode({p})" if p else "ListNode"
        return f"<{label} [{ids}]>"
