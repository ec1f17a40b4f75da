"""
Arbor utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the flags, tree and commands layers.

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided”, kept apart from None so that
    descriptions and program names can distinguish “omitted” from “empty”.
  • Falsey, printable as "Unset", non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; legitimate falsey values survive.

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated closures.

- sanitize(path)
  • Normalize a command path: every segment trimmed, empty segments dropped.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> sanitize(["", " ", " cmd", "subcmd\\t"])
    ('cmd', 'subcmd')
"""
import builtins
import functools
from collections.abc import Iterable
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and "".
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a singleton per process.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns `object` unless it is Unset, in which case `default` is returned.
    None, 0, "" and [] are preserved as-is.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name) -> decorator

    Keeps generated closures (constraints, runner wrappers) readable in
    tracebacks and reprs.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            callable.__qualname__ = name
            callable.__name__ = name
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def sanitize(path, /):
    """
    Normalize a command path into a tuple of clean segments.

    Rules
    - a single string is treated as a one-segment path.
    - each segment is stripped of surrounding whitespace.
    - segments that are empty after stripping are discarded.

    Raises
    - TypeError: when the path is not an iterable of strings.
    """
    if isinstance(path, str):
        path = (path,)
    elif not isinstance(path, Iterable):
        raise TypeError("sanitize() argument must be a string or an iterable of strings")

    segments = []
    for segment in path:
        if not isinstance(segment, str):
            raise TypeError("sanitize() path segments must be strings")
        if segment := segment.strip():
            segments.append(segment)
    return tuple(segments)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Typical pattern: value = coalesce(user_value, default) to materialize a
fallback only when user_value is Unset.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "sanitize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
