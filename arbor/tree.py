"""
Arbor command tree.

Overview
- Node: one addressable point of the command hierarchy. It optionally holds
  Contents (runner + local flags + description) and a read-only mapping of
  named children. A node without contents is a pure routing node.
- Contents / CommandInput / Stub: small named tuples for the executable unit,
  the per-call input handed to a runner, and a declarative registration record.

Insertion
- Node.insert(path, contents) sanitizes the path (see utils.sanitize) and
  rebuilds only the nodes along that path (copy-on-write). The receiver is
  never modified, so an old root stays valid after an insert.
- Intermediate segments without a node get an empty routing node.
- Inserting at an existing path replaces its contents (last write wins) and
  keeps its children.

Lookup
- Node.lookup(segment) is an exact child lookup; no prefix or fuzzy matching.
"""
from types import MappingProxyType
from typing import Any, Callable, NamedTuple

from .flags import Flags
from .utils import Unset, coalesce, sanitize


class CommandInput(NamedTuple):
    """what a runner receives: remaining positional args and resolved flags."""
    args: tuple[str, ...]
    flags: Flags


class Contents(NamedTuple):
    """the executable unit bound to a node."""
    runner: Callable[[CommandInput], Any]
    flags: Flags
    descr: str


class Stub(NamedTuple):
    """a pre-bundled command registration (see Program.add_stub)."""
    path: tuple[str, ...]
    runner: Callable[[CommandInput], Any]
    flags: tuple = ()
    descr: str = ""


def contents(runner, /, flags=(), descr=Unset):
    """
    build validated Contents.

    raises
    - TypeError: runner not callable, flags not Flag definitions, descr not a string.
    """
    if not callable(runner):
        raise TypeError("command runner must be callable")
    if not isinstance(descr, str | Unset):
        raise TypeError("command description must be a string")
    return Contents(runner, Flags(flags), coalesce(descr, "").strip())


class Node:
    """
    immutable command node.

    attributes
    - contents: Contents | None
    - children: Mapping[str, Node] (read-only view)
    """
    __slots__ = ("_contents", "_children")

    def __init__(self, contents=None, children=None, /):
        if not isinstance(contents, Contents | None):
            raise TypeError("node contents must be Contents or None")
        self._contents = contents
        self._children = dict(children or {})

    @property
    def contents(self):
        return self._contents

    @property
    def children(self):
        return MappingProxyType(self._children)

    def lookup(self, segment, /):
        """return the child named `segment`, or None."""
        return self._children.get(segment)

    def find(self, path, /):
        """walk a (sanitized) path from this node; None when any segment is missing."""
        node = self
        for segment in sanitize(path):
            if (node := node.lookup(segment)) is None:
                return None
        return node

    def insert(self, path, contents, /):
        """return a new tree with `contents` registered at `path`."""
        if not isinstance(contents, Contents):
            raise TypeError("insert() contents must be Contents")
        return self._insert(sanitize(path), contents)

    def _insert(self, path, contents):
        if not path:
            return Node(contents, self._children)
        head, *tail = path
        child = self._children.get(head) or Node()
        return Node(self._contents, self._children | {head: child._insert(tail, contents)})

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return self._contents == other._contents and self._children == other._children

    __hash__ = None

    def __rich_repr__(self):
        yield "contents", self._contents
        yield "children", self._children

    def __repr__(self):
        return "node(contents=%r, children=%r)" % (self._contents, sorted(self._children))


__all__ = (
    "CommandInput",
    "Contents",
    "Stub",
    "Node",
    "contents",
)
