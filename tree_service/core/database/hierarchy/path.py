"""Value object for dot-terminated materialized paths.

A materialized path lists the identifiers of every ancestor of a node,
root first, followed by the node's own identifier. Each identifier is
terminated by a dot:

- "7."       root node 7
- "7.12."    node 12, child of 7
- "7.12.40." node 40, grandchild of 7

Keeping the terminating dot means a plain string prefix test can never
confuse node 1 with node 12: "7.1." is not a prefix of "7.12.".

``MaterializedPath`` holds the parsed identifiers so that ancestry checks
compare integers instead of substrings. Conversion to and from the stored
string happens only at the persistence boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from typing import Self

SEPARATOR = "."


class MaterializedPath:
    """Immutable sequence of node identifiers from root to leaf.

    Example:
        >>> path = MaterializedPath.parse("1.2.3.")
        >>> path.level
        2
        >>> path.parent
        MaterializedPath('1.2.')
        >>> path.contains(2)
        True
        >>> MaterializedPath.root(1) / 2
        MaterializedPath('1.2.')

    An empty path (``MaterializedPath.parse("")``) represents a node whose
    path has not been assigned yet; its level is -1.
    """

    __slots__ = ("_ids",)
    _ids: tuple[int, ...]

    def __init__(self, ids: Iterable[int] = ()) -> None:
        """Initialize from identifiers ordered root first.

        Args:
            ids: Node identifiers, root first

        Raises:
            ValueError: If any identifier is not a positive integer or an
                identifier appears twice
        """
        self._ids = tuple(ids)
        self._validate()

    def _validate(self) -> None:
        for node_id in self._ids:
            if isinstance(node_id, bool) or not isinstance(node_id, int) or node_id <= 0:
                msg = f"Invalid path segment: {node_id!r}. Segments must be positive integers."
                raise ValueError(msg)
        if len(set(self._ids)) != len(self._ids):
            msg = f"Path {self.format()!r} repeats a node identifier"
            raise ValueError(msg)

    # ──────────────────────────────────────────────────────────────
    # Construction
    # ──────────────────────────────────────────────────────────────

    @classmethod
    def parse(cls, text: str | None) -> Self:
        """Parse a stored path string.

        Args:
            text: Dot-terminated path such as "1.2.3.", or "" / None for
                an unassigned path

        Returns:
            Parsed path

        Raises:
            ValueError: If the string is not a dot-terminated list of
                positive integers
        """
        if not text:
            return cls()
        if not text.endswith(SEPARATOR):
            msg = f"Invalid materialized path {text!r}: must end with '{SEPARATOR}'"
            raise ValueError(msg)

        segments = text[:-1].split(SEPARATOR)
        if not all(segment.isdigit() for segment in segments):
            msg = f"Invalid materialized path {text!r}: segments must be numeric"
            raise ValueError(msg)
        return cls(int(segment) for segment in segments)

    @classmethod
    def root(cls, node_id: int) -> Self:
        """Path of a root node."""
        return cls((node_id,))

    def child(self, node_id: int) -> MaterializedPath:
        """Path of a direct child of the node this path points at."""
        return MaterializedPath((*self._ids, node_id))

    # ──────────────────────────────────────────────────────────────
    # Navigation
    # ──────────────────────────────────────────────────────────────

    @property
    def ids(self) -> tuple[int, ...]:
        """Identifiers from root to leaf."""
        return self._ids

    @property
    def level(self) -> int:
        """Zero-based depth; the root is level 0 and an empty path is -1."""
        return len(self._ids) - 1

    @property
    def leaf(self) -> int | None:
        """Identifier of the node the path points at."""
        return self._ids[-1] if self._ids else None

    @property
    def root_id(self) -> int | None:
        """Identifier of the tree's root node."""
        return self._ids[0] if self._ids else None

    @property
    def parent(self) -> MaterializedPath | None:
        """Path one level up, or None for roots and empty paths."""
        if len(self._ids) <= 1:
            return None
        return MaterializedPath(self._ids[:-1])

    @property
    def ancestors(self) -> list[MaterializedPath]:
        """Ancestor paths from root to parent, excluding self."""
        return [MaterializedPath(self._ids[:i]) for i in range(1, len(self._ids))]

    def contains(self, node_id: int) -> bool:
        """Whether the node is on this path (as an ancestor or the leaf)."""
        return node_id in self._ids

    def is_ancestor_of(self, other: str | MaterializedPath) -> bool:
        """Whether this path is a proper prefix of ``other``."""
        other_path = _coerce(other)
        if len(self._ids) >= len(other_path._ids):
            return False
        return other_path._ids[: len(self._ids)] == self._ids

    def is_descendant_of(self, other: str | MaterializedPath) -> bool:
        """Whether ``other`` is a proper prefix of this path."""
        return _coerce(other).is_ancestor_of(self)

    def is_within(self, other: str | MaterializedPath) -> bool:
        """Whether this path lies in the subtree rooted at ``other`` (inclusive)."""
        other_path = _coerce(other)
        return self == other_path or self.is_descendant_of(other_path)

    # ──────────────────────────────────────────────────────────────
    # Serialization
    # ──────────────────────────────────────────────────────────────

    def format(self) -> str:
        """Render the stored string form, e.g. "1.2.3."."""
        return "".join(f"{node_id}{SEPARATOR}" for node_id in self._ids)

    def __truediv__(self, node_id: int) -> MaterializedPath:
        return self.child(node_id)

    def __iter__(self) -> Iterator[int]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"MaterializedPath({self.format()!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MaterializedPath):
            return self._ids == other._ids
        if isinstance(other, str):
            return self.format() == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._ids)


def _coerce(value: str | MaterializedPath) -> MaterializedPath:
    if isinstance(value, MaterializedPath):
        return value
    return MaterializedPath.parse(value)


def level_of(path: str | None) -> int:
    """Level encoded by a stored path string.

    Counts separators instead of parsing, so it is safe to call on every
    row read. The root is level 0; an unassigned path is -1.
    """
    return (path or "").count(SEPARATOR) - 1


__all__ = [
    "SEPARATOR",
    "MaterializedPath",
    "level_of",
]
