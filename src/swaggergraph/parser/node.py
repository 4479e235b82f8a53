"""Raw decode adapter over a loaded JSON/YAML tree.

:class:`RawNode` wraps one decoded value (mapping, sequence or scalar)
together with its JSON Pointer location in the document.  The decode pass
only talks to documents through this interface: keyed lookup, presence
checks, ordered key enumeration, sequence iteration and scalar coercion.
The location is threaded into every error so a failure deep inside a large
document can be traced back to its node.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any, Optional

from swaggergraph.exceptions import MalformedNodeError, TypeCoercionError


def escape_segment(segment: str) -> str:
    """Escape a key for use in a JSON Pointer (RFC 6901)."""
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_segment(segment: str) -> str:
    """Reverse :func:`escape_segment` (``~1`` before ``~0``, per RFC 6901)."""
    return segment.replace("~1", "/").replace("~0", "~")


class RawNode:
    """One node of a raw document tree.

    Args:
        value: The decoded value (``dict``, ``list`` or scalar).
        path: JSON Pointer of the node, ``"#"`` for the document root.
    """

    __slots__ = ("value", "path")

    def __init__(self, value: Any, path: str = "#"):
        self.value = value
        self.path = path

    def __repr__(self) -> str:
        return f"RawNode({self.path!r})"

    @property
    def is_mapping(self) -> bool:
        return isinstance(self.value, Mapping)

    @property
    def is_sequence(self) -> bool:
        return isinstance(self.value, Sequence) and not isinstance(self.value, (str, bytes))

    def _mapping(self) -> Mapping[Any, Any]:
        if not self.is_mapping:
            raise MalformedNodeError(
                f"Expected an object, got {type(self.value).__name__}", path=self.path
            )
        return self.value

    def __contains__(self, key: str) -> bool:
        return self.is_mapping and key in self.value

    def get(self, key: str) -> Optional[RawNode]:
        """Return the child under *key*, or ``None`` when absent."""
        mapping = self._mapping()
        if key not in mapping:
            return None
        return RawNode(mapping[key], f"{self.path}/{escape_segment(str(key))}")

    def child(self, key: str) -> RawNode:
        """Return the child under *key*.

        Raises:
            MalformedNodeError: If the key is absent.
        """
        node = self.get(key)
        if node is None:
            raise MalformedNodeError(f"Missing required keyword '{key}'", path=self.path)
        return node

    def _named_items(self) -> list[tuple[str, Any]]:
        named: list[tuple[str, Any]] = []
        seen: set[str] = set()
        for key, value in self._mapping().items():
            name = str(key)
            if name in seen:
                raise MalformedNodeError(f"Duplicate key '{name}'", path=self.path)
            seen.add(name)
            named.append((name, value))
        return named

    def keys(self) -> list[str]:
        """Return the node's keys in source order.

        Keys are stringified because YAML allows non-string keys (``200:``).

        Raises:
            MalformedNodeError: If two keys stringify to the same name
                (YAML ``1`` next to ``"1"``).
        """
        return [name for name, _ in self._named_items()]

    def items(self) -> Iterator[tuple[str, RawNode]]:
        for name, value in self._named_items():
            yield name, RawNode(value, f"{self.path}/{escape_segment(name)}")

    def sequence(self) -> list[RawNode]:
        """Return the node's elements as child nodes.

        Raises:
            MalformedNodeError: If the node is not a sequence.
        """
        if not self.is_sequence:
            raise MalformedNodeError(
                f"Expected an array, got {type(self.value).__name__}", path=self.path
            )
        return [RawNode(item, f"{self.path}/{index}") for index, item in enumerate(self.value)]

    # --- Scalar coercion ---

    def as_str(self) -> str:
        if not isinstance(self.value, str):
            raise TypeCoercionError(
                f"Expected a string, got {type(self.value).__name__}", path=self.path
            )
        return self.value

    def as_bool(self) -> bool:
        if not isinstance(self.value, bool):
            raise TypeCoercionError(
                f"Expected a boolean, got {type(self.value).__name__}", path=self.path
            )
        return self.value

    def as_number(self) -> float | int:
        # bool is an int subclass but never a valid number here
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise TypeCoercionError(
                f"Expected a number, got {type(self.value).__name__}", path=self.path
            )
        return self.value
