"""
Arbor command layer: build, route and run hierarchical CLIs.

What this module provides
- Program: the root container. It owns the help Config, the root tree Node
  and the global Flags, and exposes the construction and execution API.
- Value / Help: the two outcomes of a successful execution.
- new(prog): create an empty Program.
- invoke(object, prompt): convenience runner for anything with __invoke__.

Routing (Program.execute)
1. the first literal '--help' is removed and remembered.
2. tokens starting with '--' are flag tokens, everything else is positional.
3. positional tokens are consumed as child names from the root:
   • exhausted → the current node is the target.
   • unmatched token → the walk stops; the current node is the target and
     the unmatched token plus everything after it become its args.
4. with '--help' the target's help page is returned as Help(text).
   otherwise the target runs with Flags = globals | local flags, updated by
   every flag token, and its return value comes back as Value(value).

Faults
- CommandNotFoundError / flag faults are wrapped in ExecutionError
  ("failed to run command") with the fault kept as __cause__.
- Exceptions raised by a runner propagate untouched.

Quick start
    from arbor import new, integer, boolean

    program = new("tool").with_global_flags([boolean("verbose")])

    @program.add_command(["db", "migrate"], flags=[integer("steps", default=1)])
    def migrate(input):
        \"\"\"apply pending migrations\"\"\"
        return input.flags.get_int("steps")

    program.run(["db", "migrate", "--steps=3"])
"""
import inspect
import logging
import shlex
import sys
from collections.abc import Iterable
from typing import Any, NamedTuple

from rich.console import Console
from rich.text import Text

from .faults import ArborError, CommandNotFoundError, ExecutionError
from .flags import PREFIX, Flags
from .help import HELP_FLAG, Config, PrettyHelp, render
from .tree import CommandInput, Node, Stub, contents
from .utils import Unset, coalesce, rename

logger = logging.getLogger(__name__)

console = Console(stderr=True)
stdout = Console()


class Value(NamedTuple):
    """a runner's return value, passed through untouched."""
    value: Any


class Help(NamedTuple):
    """a rendered help page."""
    text: str


def _tokens(prompt, /):
    """
    normalize a prompt into a list of tokens.

    - Unset: sys.argv[1:].
    - str: shell-like string, split with shlex.split.
    - Iterable[str]: used as-is (each element must be a string).
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("execute() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("execute() argument must be a string or an iterable of strings")


class Program:
    """
    root container of a command tree.

    attributes
    - config: help.Config (pretty help colours, program name, heading styler).
    - root: tree.Node, the root of the command tree.
    - globals: flags.Flags merged under every command's local flags.

    construction methods return the program itself, so calls can be chained.
    registration must be finished before the program is executed.
    """
    __slots__ = ("_config", "_root", "_globals")

    def __init__(self, config=Unset, /):
        if not isinstance(config := coalesce(config, Config()), Config):
            raise TypeError("program config must be a Config")
        self._config = config
        self._root = Node()
        self._globals = Flags()

    config = property(lambda self: self._config)
    root = property(lambda self: self._root)
    globals = property(lambda self: self._globals)

    def add_command(self, path, runner=Unset, /, flags=(), descr=Unset):
        """
        register `runner` at `path`.

        forms
        - program.add_command(["db", "migrate"], runner, flags=[...], descr="...")
        - @program.add_command(["db", "migrate"], flags=[...])  (decorator)

        notes
        - path segments are trimmed and empty ones dropped; [] is the root.
        - registering the same path again replaces the previous runner.
        - when descr is omitted, a plain function's docstring is used.
        """
        if runner is Unset:
            @rename("add_command")
            def wrapper(runner, /):
                self.add_command(path, runner, flags, descr)
                return runner
            return wrapper

        if descr is Unset and inspect.isfunction(runner):
            descr = inspect.getdoc(runner) or Unset

        self._root = self._root.insert(path, unit := contents(runner, flags, descr))
        logger.debug("registered command %r with flags %s", list(path), sorted(unit.flags))
        return self

    def add_stub(self, stub, /):
        """register a Stub (path, runner, flags, descr)."""
        if not isinstance(stub, Stub):
            raise TypeError("add_stub() argument must be a Stub")
        return self.add_command(stub.path, stub.runner, stub.flags, stub.descr)

    def with_global_flags(self, flags, /):
        """merge `flags` into the global registry (last write wins)."""
        self._globals = self._globals.merge(flags)
        return self

    def with_config(self, config, /):
        if not isinstance(config, Config):
            raise TypeError("with_config() argument must be a Config")
        self._config = config
        return self

    def with_pretty_help(self, pretty=Unset, /):
        """enable styled help headings (default colours when omitted)."""
        self._config = self._config.__replace__(pretty=coalesce(pretty, PrettyHelp()))
        return self

    def without_pretty_help(self):
        self._config = self._config.__replace__(pretty=None)
        return self

    def _resolve(self, args):
        node, path = self._root, []
        for index, arg in enumerate(args):
            if (child := node.lookup(arg)) is None:
                logger.debug("no subcommand %r under %r, handing %r over as args", arg, path, args[index:])
                return node, path, args[index:]
            node = child
            path.append(arg)
        return node, path, []

    def execute(self, prompt=Unset, /):
        """
        route and run `prompt`.

        returns
        - Help(text) when '--help' is present.
        - Value(result) with whatever the selected runner returned.

        raises
        - ExecutionError chained to CommandNotFoundError or a flag fault.
        - anything the runner itself raises.
        """
        tokens = _tokens(prompt)

        if help := HELP_FLAG in tokens:
            tokens.remove(HELP_FLAG)

        switches = [token for token in tokens if token.startswith(PREFIX)]
        node, path, args = self._resolve([token for token in tokens if not token.startswith(PREFIX)])

        if help:
            logger.debug("rendering help for %r", path)
            return Help(render(path, node, self._config, self._globals))

        try:
            if node.contents is None:
                raise CommandNotFoundError(
                    "command %r not found" % " ".join(path) if path else "command not found",
                    path=tuple(path),
                    children=tuple(sorted(node.children)),
                    hint="run '%s --help' to see the available subcommands" % " ".join(
                        part for part in (self._config.prog, *path) if part
                    ),
                )
            flags = (self._globals | node.contents.flags).parse_all(switches)
        except ArborError as error:
            raise ExecutionError("failed to run command", path=tuple(path), args=tuple(args)) from error

        logger.debug("running %r with args %r", path, args)
        return Value(node.contents.runner(CommandInput(tuple(args), flags)))

    def run(self, prompt=Unset, /):
        """
        execute `prompt` and report the outcome.

        - help pages are printed to stdout.
        - ExecutionError chains are rendered to stderr.
        - returns the runner's value, or None after help or a fault.
        """
        try:
            outcome = self.execute(prompt)
        except ExecutionError as error:
            console.print(error)
            return None

        match outcome:
            case Help(text):
                stdout.print(Text.from_ansi(text), soft_wrap=True)
                return None
            case Value(value):
                return value

    def __invoke__(self, prompt=Unset):
        return self.run(prompt)

    def __rich_repr__(self):
        yield "config", self._config
        yield "root", self._root
        yield "globals", self._globals

    def __repr__(self):
        return "program(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def new(prog=Unset, /):
    """an empty Program with default configuration (plain help)."""
    return Program(Config(prog=prog))


def invoke(object, prompt=Unset, /):
    """
    convenience runner for anything that implements __invoke__(prompt).

    raises
    - TypeError when `object` does not implement __invoke__.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method")


__all__ = (
    "Program",
    "Value",
    "Help",
    "new",
    "invoke",
)
