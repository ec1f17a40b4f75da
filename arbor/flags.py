r"""
Arbor typed flags and the flag registry.

Overview
- FlagKind
  • Closed set of supported kinds: BOOL, INT, FLOAT, STRING and the list forms
    INT_LIST, FLOAT_LIST, STRING_LIST. Every kind has a coercer, a type check
    and a help label (e.g. <INT_LIST>); all three are exhaustive matches.

- Flag
  • Immutable, typed definition: name, kind, default, current value, descr and
    constraints. Parsing a value returns a new Flag; the original is untouched.
  • Factories: boolean, integer, floating, string, integers, floats, strings.

- Flags
  • Immutable mapping name → Flag (duplicates in the input: last one wins).
  • merge()/|: right-biased union used to put command flags over globals.
  • parse()/parse_all(): apply '--name[=value]' tokens, all-or-nothing.
  • help()/usage(): lexicographically sorted renderings for the help page.
  • value()/get_*(): typed lookups for runners.

Wire syntax
- '--name'          → boolean switch, sets True (non-boolean kinds fail).
- '--name=value'    → value coerced per kind; booleans accept true/t/false/f.
- '--name=a,b,c'    → list kinds split on ',' and coerce every element.

Faults
- UnknownFlagError, InvalidValueError, MissingValueError, ConstraintError
  (parse time); FlagNotFoundError, FlagKindError (lookups).
- Misuse at definition time (bad names, defaults of the wrong type) raises
  TypeError/ValueError immediately.

Quick example
    >>> flags = Flags([integer("port", default=8080), boolean("debug")])
    >>> flags = flags.parse_all(["--port=9000", "--debug"])
    >>> flags.get_int("port"), flags.get_bool("debug")
    (9000, True)
"""
import difflib
import logging
import re
from collections.abc import Iterable, Mapping
from enum import Enum

from .faults import (
    ConstraintError,
    FlagKindError,
    FlagNotFoundError,
    InvalidValueError,
    MissingValueError,
    UnknownFlagError,
)
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

PREFIX = "--"
ASSIGNMENT = "="
DELIMITER = ","


class FlagKind(Enum):
    """the closed set of value kinds a flag can carry."""
    BOOL = "BOOL"
    INT = "INT"
    FLOAT = "FLOAT"
    STRING = "STRING"
    INT_LIST = "INT_LIST"
    FLOAT_LIST = "FLOAT_LIST"
    STRING_LIST = "STRING_LIST"

    @property
    def label(self):
        """help label, e.g. '<INT_LIST>'."""
        return "<%s>" % self.value

    @property
    def element(self):
        """scalar kind of a list kind; scalar kinds return themselves."""
        match self:
            case FlagKind.INT_LIST:
                return FlagKind.INT
            case FlagKind.FLOAT_LIST:
                return FlagKind.FLOAT
            case FlagKind.STRING_LIST:
                return FlagKind.STRING
            case _:
                return self

    @property
    def listed(self):
        return self.element is not self

    @property
    def empty(self):
        """the default used when a flag is declared without one."""
        match self:
            case FlagKind.BOOL:
                return False
            case FlagKind.INT:
                return 0
            case FlagKind.FLOAT:
                return 0.0
            case FlagKind.STRING:
                return ""
            case FlagKind.INT_LIST | FlagKind.FLOAT_LIST | FlagKind.STRING_LIST:
                return ()


def _scalar(kind, raw, /):
    # ValueError on bad input; callers turn it into a fault
    match kind:
        case FlagKind.BOOL:
            match raw.strip().lower():
                case "true" | "t":
                    return True
                case "false" | "f":
                    return False
            raise ValueError(raw)
        case FlagKind.INT:
            return int(raw)
        case FlagKind.FLOAT:
            return float(raw)
        case FlagKind.STRING:
            return raw
    raise AssertionError("unreachable: %r is not a scalar kind" % kind)


def _typed(kind, value, /):
    """
    validate a python value against a kind and return its normalized form.

    rules
    - BOOL accepts bool only; INT accepts int but not bool.
    - FLOAT accepts int or float (ints are promoted), not bool.
    - STRING accepts str only.
    - list kinds accept any non-string iterable; elements follow the scalar
      rules and the result is a tuple.
    """
    if kind.listed:
        if isinstance(value, str) or not isinstance(value, Iterable):
            raise TypeError("%s value must be an iterable, got %r" % (kind.label, value))
        return tuple(_typed(kind.element, element) for element in value)

    match kind:
        case FlagKind.BOOL if isinstance(value, bool):
            return value
        case FlagKind.INT if isinstance(value, int) and not isinstance(value, bool):
            return value
        case FlagKind.FLOAT if isinstance(value, int | float) and not isinstance(value, bool):
            return float(value)
        case FlagKind.STRING if isinstance(value, str):
            return value
    raise TypeError("%s value expected, got %r" % (kind.label, value))


class Flag:
    """
    typed, immutable flag definition.

    fields
    - name: str, without the '--' prefix; no whitespace, '=' or leading '-'.
    - kind: FlagKind.
    - default: kind-typed default (the kind's empty value when omitted).
    - value: current value, equal to default until a token is parsed.
    - descr: str, empty when omitted.
    - constraints: tuple of callables run on every parsed value.
    """
    __slots__ = ("_name", "_kind", "_default", "_value", "_descr", "_constraints")

    def __init__(self, name, kind, /, default=Unset, descr=Unset, constraints=(), *, value=Unset):
        if not isinstance(name, str):
            raise TypeError("flag name must be a string")
        elif not (name := name.strip()):
            raise ValueError("flag name cannot be empty")
        elif not re.fullmatch(r"[^\s=,\-][^\s=,]*", name):
            raise ValueError("flag name %r cannot start with '-' or contain whitespace, '=' or ','" % name)

        if not isinstance(kind, FlagKind):
            raise TypeError("flag %r kind must be a FlagKind" % name)

        if not isinstance(descr, str | Unset):
            raise TypeError("flag %r description must be a string" % name)

        if isinstance(constraints, str) or not isinstance(constraints, Iterable):
            raise TypeError("flag %r constraints must be an iterable of callables" % name)
        elif not all(map(callable, constraints := tuple(constraints))):
            raise TypeError("flag %r constraints must be callables" % name)

        try:
            default = _typed(kind, coalesce(default, kind.empty))
            value = _typed(kind, coalesce(value, default))
        except TypeError as error:
            raise TypeError("flag %r: %s" % (name, error)) from None

        self._name = name
        self._kind = kind
        self._default = default
        self._value = value
        self._descr = coalesce(descr, "").strip()
        self._constraints = constraints

    name = property(lambda self: self._name)
    kind = property(lambda self: self._kind)
    default = property(lambda self: self._default)
    value = property(lambda self: self._value)
    descr = property(lambda self: self._descr)
    constraints = property(lambda self: self._constraints)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {
            "default": self._default,
            "descr": self._descr,
            "constraints": self._constraints,
            "value": self._value,
        } | overrides
        return type(self)(self._name, self._kind, **fields)

    def constrained(self, *constraints):
        """return a copy with `constraints` appended to the existing ones."""
        return self.__replace__(constraints=self._constraints + constraints)

    def coerce(self, raw, /):
        """
        turn a raw command-line value into a kind-typed value.

        parameters
        - raw: str | None. None means the token carried no '=value'.

        raises
        - MissingValueError for a non-boolean flag without a value.
        - InvalidValueError when raw (or any list element) does not coerce.
        - ConstraintError when a constraint rejects the coerced value.
        """
        if raw is None:
            if self._kind is not FlagKind.BOOL:
                raise MissingValueError(
                    "flag %r requires a value of type %s" % (self._name, self._kind.label),
                    name=self._name,
                    raw=raw,
                    kind=self._kind,
                    hint="pass it as %s=%s" % (PREFIX + self._name, self._kind.label),
                )
            value = True
        elif self._kind.listed:
            value = []
            for item in (raw.split(DELIMITER) if raw else ()):
                try:
                    value.append(_scalar(self._kind.element, item))
                except ValueError:
                    raise InvalidValueError(
                        "invalid value %r for flag %r: element %r is not %s" % (
                            raw, self._name, item, self._kind.element.label
                        ),
                        name=self._name,
                        raw=raw,
                        kind=self._kind,
                        element=item,
                        hint="separate %s values with '%s'" % (self._kind.element.label, DELIMITER),
                    ) from None
            value = tuple(value)
        else:
            try:
                value = _scalar(self._kind, raw)
            except ValueError:
                raise InvalidValueError(
                    "invalid value %r for flag %r, expected %s" % (raw, self._name, self._kind.label),
                    name=self._name,
                    raw=raw,
                    kind=self._kind,
                    hint="pass it as %s=%s" % (PREFIX + self._name, self._kind.label),
                ) from None

        for constraint in self._constraints:
            try:
                value = constraint(value)
            except ConstraintError as error:
                raise ConstraintError(
                    "flag %r: %s" % (self._name, error.message),
                    **(dict(error.options) | {"name": self._name, "raw": raw, "kind": self._kind}),
                ) from None
        return value

    def parse(self, raw, /):
        """return a copy of this flag holding the coerced `raw` value."""
        return self.__replace__(value=self.coerce(raw))

    def usage(self):
        """'--name=<KIND>'"""
        return "%s%s%s%s" % (PREFIX, self._name, ASSIGNMENT, self._kind.label)

    def help(self):
        """'--name=<KIND>\t\tdescr'"""
        return "%s\t\t%s" % (self.usage(), self._descr)

    def __eq__(self, other):
        if not isinstance(other, Flag):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    def __hash__(self):
        return hash((self._name, self._kind, self._default, self._value))

    def __rich_repr__(self):
        yield "name", self._name
        yield "kind", self._kind
        yield "default", self._default
        yield "value", self._value
        yield "descr", self._descr
        yield "constraints", self._constraints

    def __repr__(self):
        return "flag(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def boolean(name, /, default=False, descr=Unset, constraints=()):
    """a presence switch; '--name' sets True, '--name=false' sets False."""
    return Flag(name, FlagKind.BOOL, default, descr, constraints)


def integer(name, /, default=0, descr=Unset, constraints=()):
    return Flag(name, FlagKind.INT, default, descr, constraints)


def floating(name, /, default=0.0, descr=Unset, constraints=()):
    return Flag(name, FlagKind.FLOAT, default, descr, constraints)


def string(name, /, default="", descr=Unset, constraints=()):
    return Flag(name, FlagKind.STRING, default, descr, constraints)


def integers(name, /, default=(), descr=Unset, constraints=()):
    return Flag(name, FlagKind.INT_LIST, default, descr, constraints)


def floats(name, /, default=(), descr=Unset, constraints=()):
    return Flag(name, FlagKind.FLOAT_LIST, default, descr, constraints)


def strings(name, /, default=(), descr=Unset, constraints=()):
    return Flag(name, FlagKind.STRING_LIST, default, descr, constraints)


class Flags(Mapping):
    """
    immutable registry of flags keyed by name.

    construction
    - Flags(iterable_of_flags): later duplicates replace earlier ones.
    - Flags(other_registry): shallow copy.

    every operation that changes a value returns a new registry.
    """
    __slots__ = ("_flags",)

    def __init__(self, flags=(), /):
        if isinstance(flags, Flags):
            self._flags = dict(flags._flags)
            return
        if isinstance(flags, str) or not isinstance(flags, Iterable):
            raise TypeError("flags must be an iterable of Flag")
        self._flags = {}
        for flag in flags:
            if not isinstance(flag, Flag):
                raise TypeError("flags must be an iterable of Flag, got %r" % (flag,))
            self._flags[flag.name] = flag

    def __getitem__(self, name):
        return self._flags[name]

    def __iter__(self):
        return iter(self._flags)

    def __len__(self):
        return len(self._flags)

    def __eq__(self, other):
        if not isinstance(other, Flags):
            return NotImplemented
        return self._flags == other._flags

    __hash__ = None

    def __repr__(self):
        return "flags(%s)" % ", ".join(map(repr, self._flags.values()))

    def merge(self, overlay, /):
        """right-biased union: every flag of `overlay` replaces the same name here."""
        if not isinstance(overlay, Flags):
            overlay = Flags(overlay)
        merged = Flags()
        merged._flags = self._flags | overlay._flags
        return merged

    def __or__(self, other):
        if not isinstance(other, Flags):
            return NotImplemented
        return self.merge(other)

    def _suggest(self, name):
        suggestions = difflib.get_close_matches(name, self._flags.keys(), 3)
        if suggestions:
            return suggestions, "did you mean %r? run with --help to see all flags" % (PREFIX + suggestions[0])
        return suggestions, "run with --help to see all flags"

    def parse(self, token, /):
        """
        apply one '--name[=value]' token and return the updated registry.

        raises
        - ValueError when the token does not start with '--'.
        - UnknownFlagError, InvalidValueError and its subclasses on bad input.
        """
        if not isinstance(token, str):
            raise TypeError("flag token must be a string")
        elif not token.startswith(PREFIX):
            raise ValueError("flag token %r must start with %r" % (token, PREFIX))

        name, assignment, raw = token[len(PREFIX):].partition(ASSIGNMENT)
        try:
            flag = self._flags[name]
        except KeyError:
            suggestions, hint = self._suggest(name)
            raise UnknownFlagError(
                "unknown flag %r" % (PREFIX + name),
                name=name,
                suggestions=suggestions,
                hint=hint,
            ) from None

        parsed = Flags()
        parsed._flags = self._flags | {name: flag.parse(raw if assignment else None)}
        logger.debug("parsed flag %r as %r", name, parsed._flags[name].value)
        return parsed

    def parse_all(self, tokens, /):
        """fold parse() over `tokens`; the first fault propagates, nothing is applied."""
        flags = self
        for token in tokens:
            flags = flags.parse(token)
        return flags

    def usage(self):
        return sorted(flag.usage() for flag in self._flags.values())

    def help(self):
        return sorted(flag.help() for flag in self._flags.values())

    def value(self, name, /):
        """current value of flag `name`; FlagNotFoundError when absent."""
        return self._lookup(name).value

    def _lookup(self, name, kind=None):
        try:
            flag = self._flags[name]
        except KeyError:
            suggestions, hint = self._suggest(name)
            raise FlagNotFoundError(
                "flag %r is not defined" % name,
                name=name,
                suggestions=suggestions,
                hint=hint,
            ) from None
        if kind is not None and flag.kind is not kind:
            raise FlagKindError(
                "flag %r is %s, not %s" % (name, flag.kind.label, kind.label),
                name=name,
                kind=flag.kind,
                expected=kind,
            )
        return flag

    def get_bool(self, name, /):
        return self._lookup(name, FlagKind.BOOL).value

    def get_int(self, name, /):
        return self._lookup(name, FlagKind.INT).value

    def get_float(self, name, /):
        return self._lookup(name, FlagKind.FLOAT).value

    def get_string(self, name, /):
        return self._lookup(name, FlagKind.STRING).value

    def get_ints(self, name, /):
        return self._lookup(name, FlagKind.INT_LIST).value

    def get_floats(self, name, /):
        return self._lookup(name, FlagKind.FLOAT_LIST).value

    def get_strings(self, name, /):
        return self._lookup(name, FlagKind.STRING_LIST).value


def build(flags=(), /):
    """build a registry from flag definitions (last duplicate wins)."""
    return Flags(flags)


__all__ = (
    "FlagKind",
    "Flag",
    "Flags",
    "boolean",
    "integer",
    "floating",
    "string",
    "integers",
    "floats",
    "strings",
    "build",
)
