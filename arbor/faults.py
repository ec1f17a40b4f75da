"""
Arbor faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault.
  Codes are grouped by domain to keep copy consistent and logs searchable.
- ArborError: base type that carries a message + read-only options and knows
  how to render itself (plain chain or rich renderable).
- chain()/pretty(): walk and render the context chain built by the execution
  engine (“failed to run command” → underlying fault).

Layers
- Resolution faults (CommandNotFoundError, UnknownFlagError, InvalidValueError
  and its children) are raised by the tree/flag layers.
- ExecutionError is the single context wrapper the engine puts on top of a
  resolution fault; the fault is kept as __cause__.
- Anything a runner raises is not a fault and is never wrapped.

Integration
- Program.execute raises the chain; Program.run renders it via rich on stderr.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text


class FaultCode(IntEnum):
    """
    canonical fault codes used across arbor (stable identifiers).

    grouping (by high-level domain)
    - routing (101xx)
      • COMMAND_NOT_FOUND
    - flag parsing (102xx)
      • UNKNOWN_FLAG, INVALID_VALUE, MISSING_VALUE, VIOLATED_CONSTRAINT
    - flag lookups from runners (103xx)
      • FLAG_NOT_FOUND, FLAG_KIND
    - execution context (109xx)
      • EXECUTION_FAILED
    """
    # --- routing ---
    COMMAND_NOT_FOUND   = 10101

    # --- flag parsing ---
    UNKNOWN_FLAG        = 10201
    INVALID_VALUE       = 10202
    MISSING_VALUE       = 10203
    VIOLATED_CONSTRAINT = 10204

    # --- flag lookups ---
    FLAG_NOT_FOUND      = 10301
    FLAG_KIND           = 10302

    # --- execution context ---
    EXECUTION_FAILED    = 10901


class ArborError(Exception):
    """
    base class for every fault raised by arbor.

    contract
    - message: one lowercased sentence describing what went wrong.
    - options: read-only mapping of structured context (flag name, raw value,
      expected kind, hint, ...). Subclasses document the keys they carry.
    - code: class-level FaultCode.
    """
    code = FaultCode.EXECUTION_FAILED

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def hint(self):
        return self.options.get("hint")

    def __rich__(self):
        styles = defaultdict(str, {
            "error-label": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "code": "bold #00E5FF",
            "cause-label": "bold #E6E6F0",
            "cause-index": "#6B6F7A",
            "cause": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

        def style(name):
            return styles[name] if self.options.get("colorful", True) else ""

        causes = chain(self)[1:]
        renders = [Text.assemble(
            ("error", style("error-label")),
            ": ",
            (self.message, style("error-message")),
            " ",
            ("[%d]" % getattr(innermost(self), "code", self.code), style("code")),
        )]
        if causes:
            renders.append(Text(""))
            renders.append(Text("cause:", style("cause-label")))
            for index, message in enumerate(causes):
                renders.append(Text.assemble(
                    ("  %d: " % index, style("cause-index")),
                    (message, style("cause")),
                ))
        if hint := getattr(innermost(self), "hint", None):
            renders.append(Text.assemble((" → ", style("hint-arrow")), (hint, style("hint"))))
        return Group(*renders)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandNotFoundError(ArborError):
    """the resolved node has no runner; options: path."""
    code = FaultCode.COMMAND_NOT_FOUND


class UnknownFlagError(ArborError):
    """a flag token names a flag absent from the registry; options: name, suggestions."""
    code = FaultCode.UNKNOWN_FLAG


class InvalidValueError(ArborError):
    """a flag value cannot be coerced to its kind; options: name, raw, kind."""
    code = FaultCode.INVALID_VALUE


class MissingValueError(InvalidValueError):
    """a value-bearing flag was given without '=value'; options: name, kind."""
    code = FaultCode.MISSING_VALUE


class ConstraintError(InvalidValueError):
    """a coerced value was rejected by a constraint; options: value (plus name/raw/kind once bound to a flag)."""
    code = FaultCode.VIOLATED_CONSTRAINT


class FlagNotFoundError(ArborError):
    code = FaultCode.FLAG_NOT_FOUND


class FlagKindError(ArborError):
    code = FaultCode.FLAG_KIND


class ExecutionError(ArborError):
    """context wrapper raised by the engine; the underlying fault is __cause__."""
    code = FaultCode.EXECUTION_FAILED


def chain(error, /):
    """
    return the messages of an exception and all of its causes, outermost first.

    arbor faults contribute their message; foreign exceptions contribute str().
    """
    if not isinstance(error, BaseException):
        raise TypeError("chain() argument must be an exception")
    messages = []
    while error is not None:
        messages.append(error.message if isinstance(error, ArborError) else str(error))
        error = error.__cause__
    return messages


def innermost(error, /):
    """return the deepest exception reachable through __cause__ links."""
    while error.__cause__ is not None:
        error = error.__cause__
    return error


def pretty(error, /):
    """
    render a context chain as a multi-line string.

    layout
        error: failed to run command

        cause:
          0: unknown flag 'verbose'
    """
    outer, *causes = chain(error)
    lines = ["error: " + outer]
    if causes:
        lines += ["", "cause:"]
        lines += ["  %d: %s" % (index, message) for index, message in enumerate(causes)]
    return "\n".join(lines)


__all__ = (
    "FaultCode",
    "ArborError",
    "CommandNotFoundError",
    "UnknownFlagError",
    "InvalidValueError",
    "MissingValueError",
    "ConstraintError",
    "FlagNotFoundError",
    "FlagKindError",
    "ExecutionError",
    "chain",
    "innermost",
    "pretty",
)
