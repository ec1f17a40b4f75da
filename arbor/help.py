r"""
Arbor help pages.

What this module provides
- PrettyHelp: the three heading colours (usage, flags, subcommands). Colours are
  anything rich understands ("cyan", "#FF4D94", "rgb(182,255,234)") and are
  validated on construction.
- Config: help configuration carried by a Program: optional PrettyHelp, the
  program invocation token and the heading styler hook.
- style_heading(text, color): default hook; bold + underline + italic +
  foreground colour rendered to ANSI through rich.
- render(path, node, config, globals): the help document for one node.

Layout
    db migrate
    apply pending migrations

    USAGE:
    	prog db migrate [ ARGS ] [ --dry=<BOOL> --steps=<INT> ]

    FLAGS:
    	--dry=<BOOL>		only print the plan
    	--help			Print help information
    	--steps=<INT>		how many to apply

    SUBCOMMANDS:
    	status	show applied migrations

Sections are separated by one blank line; empty sections are omitted. Flags
and subcommands are sorted lexicographically by their rendered line.
"""
import os
import sys

from rich.color import Color, ColorParseError
from rich.style import Style

from .flags import Flags
from .utils import Unset, coalesce

HELP_FLAG = "--help"
HELP_LINE = HELP_FLAG + "\t\t\tPrint help information"

USAGE_HEADING = "USAGE:"
FLAGS_HEADING = "FLAGS:"
SUBCOMMANDS_HEADING = "SUBCOMMANDS:"


def _color(name, value, /):
    if not isinstance(value, str):
        raise TypeError("pretty help %r colour must be a string" % name)
    try:
        Color.parse(value)
    except ColorParseError:
        raise ValueError("pretty help %r colour %r is not a valid colour" % (name, value)) from None
    return value


class PrettyHelp:
    """heading colours used when help styling is enabled."""
    __slots__ = ("_usage", "_flags", "_subcommands")

    def __init__(self, usage="rgb(182,255,234)", flags="rgb(255,175,243)", subcommands="rgb(252,226,174)"):
        self._usage = _color("usage", usage)
        self._flags = _color("flags", flags)
        self._subcommands = _color("subcommands", subcommands)

    usage = property(lambda self: self._usage)
    flags = property(lambda self: self._flags)
    subcommands = property(lambda self: self._subcommands)

    def __eq__(self, other):
        if not isinstance(other, PrettyHelp):
            return NotImplemented
        return (self._usage, self._flags, self._subcommands) == (other._usage, other._flags, other._subcommands)

    def __hash__(self):
        return hash((self._usage, self._flags, self._subcommands))

    def __repr__(self):
        return "pretty-help(usage=%r, flags=%r, subcommands=%r)" % (self._usage, self._flags, self._subcommands)


def style_heading(text, color, /):
    """
    default heading styler: bold, underlined, italic and coloured.

    returns the ANSI-decorated string; rich picks the escape codes for the colour.
    """
    return Style(bold=True, underline=True, italic=True, color=color).render(text)


class Config:
    """
    help configuration.

    fields
    - pretty: PrettyHelp | None. None renders plain headings.
    - prog: program invocation token shown in the usage line (defaults to the
      basename of sys.argv[0]).
    - styler: callable(heading, color) -> str used for headings when pretty is set.
    """
    __slots__ = ("_pretty", "_prog", "_styler")

    def __init__(self, pretty=None, prog=Unset, styler=style_heading):
        if not isinstance(pretty, PrettyHelp | None):
            raise TypeError("config 'pretty' must be a PrettyHelp or None")
        if not isinstance(prog, str | Unset):
            raise TypeError("config 'prog' must be a string")
        if not callable(styler):
            raise TypeError("config 'styler' must be callable")
        self._pretty = pretty
        self._prog = coalesce(prog, os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "")
        self._styler = styler

    pretty = property(lambda self: self._pretty)
    prog = property(lambda self: self._prog)
    styler = property(lambda self: self._styler)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {"pretty": self._pretty, "prog": self._prog, "styler": self._styler} | overrides
        return type(self)(**fields)

    def heading(self, text, color, /):
        return self._styler(text, color) if self._pretty is not None else text

    def __repr__(self):
        return "config(pretty=%r, prog=%r, styler=%r)" % (self._pretty, self._prog, self._styler)


def _section(heading, lines):
    return "\n".join([heading, *("\t" + line for line in lines)])


def render(path, node, config, globals=Flags(), /):
    """
    render the help document for `node`, reached through `path`.

    parameters
    - path: sequence of segments consumed to reach the node.
    - node: tree.Node.
    - config: Config.
    - globals: registry merged under the node's own flags.
    """
    pretty = config.pretty
    contents = node.contents
    flags = globals | contents.flags if contents is not None else globals
    command = " ".join(path)

    header = "\n".join(part for part in (command, contents.descr if contents is not None else "") if part)

    usage = " ".join(part for part in (config.prog, command, "[ ARGS ]") if part)
    if flags:
        usage += " [ %s ]" % " ".join(flags.usage())
    usage = _section(config.heading(USAGE_HEADING, pretty and pretty.usage), [usage])

    options = _section(config.heading(FLAGS_HEADING, pretty and pretty.flags), sorted([HELP_LINE, *flags.help()]))

    subcommands = ""
    if node.children:
        subcommands = _section(
            config.heading(SUBCOMMANDS_HEADING, pretty and pretty.subcommands),
            sorted(
                "%s\t%s" % (name, child.contents.descr if child.contents is not None else "")
                for name, child in node.children.items()
            ),
        )

    return "\n\n".join(section for section in (header, usage, options, subcommands) if section)


__all__ = (
    "PrettyHelp",
    "Config",
    "style_heading",
    "render",
    "HELP_FLAG",
)
