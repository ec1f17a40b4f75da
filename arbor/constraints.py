"""
Value constraints for flags.

A constraint is any callable that receives a coerced flag value and either
returns it unchanged or raises ConstraintError. Flags run their constraints
after a command-line value has been coerced; defaults are trusted.

Shipped constraints
- one_of(allowed): the value must be one of the allowed values.
- none_of(disallowed): the value must not be any of the disallowed values.
- each(constraint): lift a scalar constraint over every element of a list value.

Example
    >>> from arbor.flags import string, integers
    >>> string("mode", default="fast", constraints=[one_of(["fast", "slow"])])
    >>> integers("ports", constraints=[each(none_of([0]))])
"""
from .faults import ConstraintError
from .utils import rename


def _freeze(cls, values, /):
    if isinstance(values, str) or not hasattr(values, "__iter__"):
        raise TypeError(f"{cls}() argument must be an iterable of values")
    if not (values := tuple(values)):
        raise ValueError(f"{cls}() argument cannot be empty")
    return values


def one_of(allowed, /):
    """
    accept only values contained in `allowed`.

    raises
    - TypeError/ValueError at definition time for a non-iterable or empty `allowed`.
    - ConstraintError at parse time, with a hint listing the accepted values.
    """
    allowed = _freeze("one_of", allowed)

    @rename("one_of")
    def constraint(value):
        if value not in allowed:
            raise ConstraintError(
                "invalid value %r, must be one of %s" % (value, ", ".join(map(repr, allowed))),
                value=value,
                allowed=allowed,
                hint="choose one of: %s" % ", ".join(map(str, allowed)),
            )
        return value

    return constraint


def none_of(disallowed, /):
    """reject values contained in `disallowed`."""
    disallowed = _freeze("none_of", disallowed)

    @rename("none_of")
    def constraint(value):
        if value in disallowed:
            raise ConstraintError(
                "invalid value %r, must not be one of %s" % (value, ", ".join(map(repr, disallowed))),
                value=value,
                disallowed=disallowed,
                hint="any value except: %s" % ", ".join(map(str, disallowed)),
            )
        return value

    return constraint


def each(inner, /):
    """apply `inner` to every element of a list value; the first violation wins."""
    if not callable(inner):
        raise TypeError("each() argument must be a constraint (callable)")

    @rename("each")
    def constraint(values):
        return tuple(inner(value) for value in values)

    return constraint


__all__ = (
    "one_of",
    "none_of",
    "each",
)
