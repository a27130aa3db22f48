"""
Argosy command layer: build, compose, and run CLI commands.

What this module provides
- Command: wraps a Python callable into an executable CLI node with:
  • Argument discovery from the callable’s defaults (Cardinal, Option, Flag).
  • Hierarchies (parent/child) to model subcommands, with an optional default child.
  • Help/usage and completion renderers (see argosy.helps and argosy.completions).
  • Dispatch: parse, validate, run and map the outcome to an exit code.

- Factories and helpers:
  • command(...): create a Command or a decorator that produces one.
  • group(name, ...): create a command without run behavior (shows its help).
  • invoke(obj, prompt): convenience runner returning the exit code.

Core ideas
- Signature-driven declarations: the wrapped function’s parameters define the
  CLI surface. Cardinals are positional-only, options are standard parameters
  and flags are keyword-only.
- A pure entry point: Command.execute(argv) returns Result(stdout, stderr, code)
  and never exits the process; Command.main(argv) prints it and returns the code.

Quick start
    from argosy import group, Cardinal, Flag

    math = group("math", descr="A utility for performing maths.", version="1.0.0", default="add")

    @math.command(descr="Print the sum of the values.")
    def add(
        values=Cardinal(type=int, nargs="*", descr="A group of integers to operate on."),
        /,
        *,
        hex_output=Flag("--hex-output", "-x", descr="Use hexadecimal notation for the result."),
    ):
        return format(sum(values), "x" if hex_output else "d")

    if __name__ == "__main__":
        raise SystemExit(math.main())
"""
import collections
import contextlib
import functools
import inspect
import io
import logging
import operator
import os
import re
import shlex
import sys
import threading
from collections.abc import Iterable
from inspect import Parameter
from types import SimpleNamespace

from rich.console import Console
from rich.logging import RichHandler

from . import completions, helps, parser
from .arguments import Cardinal, Option, Flag
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)

# sys.stdout is process-wide; one capture at a time, reentrant for nested runs.
_capturing = threading.RLock()

Result = collections.namedtuple("Result", ("stdout", "stderr", "code"))
Result.__doc__ = """
    Outcome of one run, as a process would report it.

    - stdout: text for the standard output (no trailing newline).
    - stderr: text for the standard error (no trailing newline).
    - code: process exit code.
"""

# Switch names owned by the library on every command.
RESERVED = ("-h", "--help", "--version", "--generate-completion")


class CommandType(type):
    """
    Metaclass that gives Command its introspection surface.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.
    - Expose selected fields as read-only properties using mirror() for all names
      listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - command(name='add', descr='Print the sum of the values.', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _process_source(cls, metadata):
    """
    Introspect the command callback and materialize argument specs.

    Responsibilities
    - Resolve each parameter's default into a concrete spec (Cardinal, Option, or Flag).
    - Enforce placement/kind rules: Cardinal must be positional-only, Option must be
      standard, Flag must be keyword-only.
    - Enforce cardinal ordering: a repeating cardinal is the last one, and a required
      cardinal cannot follow an optional one.
    - Build, in metadata:
      • cardinals: mapping[param_name -> Cardinal] in positional order
      • switches: mapping[option_or_flag_name -> (param_name, Option|Flag)]
      • arguments: mapping[param_name -> spec], flags first, then options, then cardinals
      • metavars: mapping[param_name -> placeholder name]

    Errors
    - Raises TypeError/ValueError on non-callable or non-inspectable callbacks,
      invalid parameter kinds, or duplicate/reserved switch names.
    """
    cardinals = metadata["cardinals"] = {}
    switches = metadata["switches"] = {}
    metavars = metadata["metavars"] = {}
    flags, options = {}, {}

    try:
        signature = inspect.signature(metadata["callback"])
    except TypeError:
        raise TypeError(f"{cls.__typename__} 'callback' must be callable") from None
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'callback' must be an inspectable callable") from None

    def _resolve_argument(x):
        """
        Return the concrete spec (Cardinal|Option|Flag) from a parameter default.
        """
        for hook, kind in (("__cardinal__", Cardinal), ("__option__", Option), ("__flag__", Flag)):
            if hasattr(x, hook) and callable(getattr(x, hook)):
                if not isinstance(argument := getattr(x, hook)(), kind):
                    raise TypeError(f"{hook}() non-{kind.__typename__} returned")
                return argument
        raise TypeError(f"{cls.__typename__} 'callback' parameter {name!r} default must be argument-resoluble")

    repeating = None
    optional = None

    for name, parameter in signature.parameters.items():
        if parameter.default is Parameter.empty:
            raise TypeError(f"{cls.__typename__} 'callback' parameter {name!r} must have a default")

        argument = _resolve_argument(parameter.default)

        if isinstance(argument, Cardinal):
            if parameter.kind is not Parameter.POSITIONAL_ONLY:
                raise TypeError(f"{cls.__typename__} 'callback' cardinal at parameter {name!r}, parameter must be positional-only")
            if repeating:
                raise TypeError(f"{cls.__typename__} 'callback' repeating cardinal at parameter {repeating!r}, must be the last cardinal")
            if optional and argument.required:
                raise TypeError(f"{cls.__typename__} 'callback' required cardinal at parameter {name!r}, cannot follow an optional one")
            repeating = name if argument.repeating else None
            optional = optional or (name if not argument.required else None)
            cardinals[name] = argument
            metavars[name] = coalesce(argument.metavar, kebab(name))
            continue

        if isinstance(argument, Option) and parameter.kind is not Parameter.POSITIONAL_OR_KEYWORD:
            raise TypeError(f"{cls.__typename__} 'callback' option at parameter {name!r}, parameter must be standard")
        if isinstance(argument, Flag) and parameter.kind is not Parameter.KEYWORD_ONLY:
            raise TypeError(f"{cls.__typename__} 'callback' flag at parameter {name!r}, parameter must be keyword-only")

        for switch in argument.names:
            if switch in RESERVED:
                raise ValueError(f"{cls.__typename__} 'callback' name {switch!r} is reserved")
            if switch in switches:
                raise ValueError(f"{cls.__typename__} 'callback' name {switch!r} is already in use")
            switches[switch] = (name, argument)

        if isinstance(argument, Option):
            longs = [switch[2:] for switch in argument.names if switch.startswith("--")]
            metavars[name] = coalesce(argument.metavar, longs[0] if longs else kebab(name))
            options[name] = argument
        else:
            flags[name] = argument

    metadata["arguments"] = flags | options | cardinals


def _process_strings(cls, metadata):
    """
    Normalize scalar string metadata fields.

    - Validates type: each value must be str | Unset.
    - Trims strings; empty strings are rejected.
    - Resolves Unset to None.
    - 'name' and 'default' must be valid command names (letters, digits and
      inner single dashes).
    """
    for name in ("name", "descr", "epilog", "version", "default"):
        if not isinstance(object := metadata[name], str | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        if name in ("name", "default") and object and not re.fullmatch(r"[^\W_](-?[^\W_]+)*", object):
            raise ValueError(f"{cls.__typename__} {name!r} must be a valid command name")
        metadata[name] = coalesce(object)


def _process_options(cls, metadata):
    """
    Validate runtime options (already inherited from the parent where Unset).
    """
    if not isinstance(metadata["width"], int) or metadata["width"] < 40:
        raise ValueError(f"{cls.__typename__} 'width' must be an integer of at least 40")
    if metadata["abbreviations"] not in ("exact", "prefix"):
        raise ValueError(f"{cls.__typename__} 'abbreviations' must be one of 'exact' or 'prefix'")


def _attach_to_parent(self, parent):
    """
    Register this command under its parent, enforcing unique names.

    Parents route tokens to children, so a parent cannot declare arguments.
    """
    if not parent:
        return
    if parent.arguments:
        raise ValueError(f"{type(self).__typename__} 'parent' command cannot declare any arguments")
    if parent._children.setdefault(name := self.name, self) is self:
        return
    typeof = "subcommand" if parent.parent else "command"
    raise ValueError(f"{type(self).__typename__} {typeof} name {name!r} is already in use")


def _check_defaults(command):
    """
    Ensure every default subcommand below `command` names one of its children.
    """
    if command.children and command.default and command.default not in command.children:
        raise ValueError(
            f"{type(command).__typename__} default {command.default!r} of {command.name!r} is not one of its children"
        )
    for child in command.children.values():
        _check_defaults(child)


def _summary(callback):
    """
    First paragraph of a callback docstring, joined into one line.
    """
    if not (doc := inspect.getdoc(callback)):
        return Unset
    return " ".join(doc.split("\n\n", 1)[0].split())


class Command(metaclass=CommandType):
    """
    High-level command object that wraps a Python callable and provides CLI behavior.

    Responsibilities
    - Introspection: exposes metadata (name, descr, version, arguments, ...) as read-only properties.
    - Composition: supports parent/child hierarchies to model subcommands.
    - Rendering: help/usage text and completion scripts.
    - Invocation: callable like the wrapped function; executable via execute()/main().

    Lifecycle
    - Constructed from a callback; the signature is inspected and defaults are
      resolved to argument specs (Cardinal/Option/Flag).
    - Metadata is sanitized and runtime options are inherited from the parent.
    - Attached to its parent (unique child names).
    """

    __introspectable__ = (
        "name",
        "descr",
        "epilog",
        "version",
        "default",
        "cardinals",
        "switches",
        "arguments",
        "metavars",
        "parent",
        "children",
        "colorful",
        "width",
        "abbreviations",
    )

    # parent/children are left out: they refer to each other.
    __displayable__ = (
        "name",
        "descr",
        "version",
        "default",
        "arguments",
    )

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def usage(self):
        """
        Usage line of this command (what follows "USAGE: " in its help).
        """
        return helps.usage(self)

    @property
    def help(self):
        """
        Full help text of this command.
        """
        return helps.render(self)

    def completion(self, shell="zsh", /):
        """
        Completion script for the whole tree this command belongs to.
        """
        return completions.render(self.root, shell)

    def __new__(
            cls,
            source,
            /,
            parent=Unset,
            name=Unset,
            descr=Unset,
            epilog=Unset,
            version=Unset,
            default=Unset,
            *,
            colorful=Unset,
            width=Unset,
            abbreviations=Unset,
    ):
        """
        Construct a Command from a callback.

        Parameters
        - source: Callable
          Run behavior. Its parameter defaults declare the arguments; it is called
          with the coerced values and a non-None return value is written to stdout.
        - parent: Command | Unset
          Parent under which to attach this command. If Unset, remains top-level.
        - name: str | Unset
          Command name; defaults to the callback name with dashes for underscores.
        - descr, epilog: str | Unset
          Help overview (defaults to the docstring's first paragraph) and footer.
        - version: str | Unset
          Version printed by --version for this command and its descendants.
        - default: str | Unset
          Name of the child used when no child name matches the input.
        - colorful, width, abbreviations:
          Runtime options. If Unset, values inherit from parent (or defaults:
          False, 80, "exact").

        Raises
        - TypeError/ValueError on invalid parent, metadata types, duplicate switch
          names, invalid callback/defaults, or name conflicts upon attachment.
        """
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a command")
        if not callable(source):
            raise TypeError(f"{cls.__typename__} 'source' must be callable")

        metadata = {
            "callback": source,
            "name": coalesce(name, kebab(getattr(source, "__name__", os.path.basename(sys.argv[0])))),
            "descr": coalesce(descr, _summary(source)),
            "epilog": epilog,
            "version": version,
            "default": default,
            # Runtime options (inherit from parent when Unset)
            "colorful": bool(coalesce(colorful, getattr(parent, "colorful", False))),
            "width": coalesce(width, getattr(parent, "width", 80)),
            "abbreviations": coalesce(abbreviations, getattr(parent, "abbreviations", "exact")),
            # Parent/children wiring
            "parent": parent,
            "children": {},
        }
        _process_source(cls, metadata)
        _process_strings(cls, metadata)
        _process_options(cls, metadata)

        self = super().__new__(cls)
        self._callback = metadata.pop("callback")
        self._validator = Unset
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))

        _attach_to_parent(self, self.parent)
        return self

    def __call__(self, *args, **kwargs):
        """
        Call the wrapped callback directly, bypassing parsing.
        """
        return self._callback(*args, **kwargs)

    def validate(self, validator, /):
        """
        Register the command-level validator (decorator-friendly).

        The validator runs after every value was coerced and every argument
        validator passed. It receives a SimpleNamespace with one attribute per
        parameter and may raise ValidationError (reported with usage), Exit or
        CleanExit.
        """
        if not callable(validator):
            raise TypeError(f"{type(self).__typename__} validator must be callable")
        if self._validator is not Unset:
            raise TypeError(f"{type(self).__typename__} validator cannot be overridden")
        self._validator = validator
        return validator

    def command(self, source=Unset, /, *args, **kwargs):
        """
        Create or attach a subcommand under this command (decorator-friendly).
        """
        return command(source, self, *args, **kwargs)

    def group(self, name, /, *args, **kwargs):
        """
        Create a subcommand without run behavior under this command.
        """
        return group(name, self, *args, **kwargs)

    def trigger(self, fault, /, **options):
        """
        Raise a fault with this command attached as its context.
        """
        trigger(fault, command=self, **options)

    def _bind(self, values):
        """
        Map a values dict (param name -> value) to callback (args, kwargs).
        """
        args = []
        kwargs = {}
        for name, parameter in inspect.signature(self._callback).parameters.items():
            if parameter.kind is Parameter.KEYWORD_ONLY:
                kwargs[name] = values[name]
            else:
                args.append(values[name])
        return args, kwargs

    def _run(self, invocation):
        """
        Validate a parsed invocation and run the resolved command's callback.
        """
        command = invocation.command
        parser.validate(invocation)
        if command._validator:
            logger.debug("validating %r with the command validator", command.name)
            try:
                command._validator(SimpleNamespace(**invocation.values))
            except ValidationError as exception:
                if exception.command is None:
                    command.trigger(exception)
                raise
        args, kwargs = command._bind(invocation.values)
        logger.debug("running %r", " ".join(step.name for step in command.path))
        try:
            return command._callback(*args, **kwargs)
        except HelpRequest:
            raise CleanExit(command.help, command=command, kind="help") from None
        except ValidationError as exception:
            if exception.command is None:
                command.trigger(exception)
            raise

    def _dispatch(self, tokens):
        """
        Run the tokens against this command and return (Result, fault).

        The fault is the exception that ended the run (None when the callback
        returned); main() uses it to render styled help and error reports.
        Declaration mistakes in the tree raise instead of being reported.
        """
        _check_defaults(self)
        stdout = io.StringIO()
        fault = None
        try:
            with _capturing, contextlib.redirect_stdout(stdout):
                output = self._run(parser.parse(self, tokens))
            if output is not None:
                stdout.write(str(output) + "\n")
            result = Result(stdout.getvalue().rstrip("\n"), "", ExitCode.SUCCESS)
        except CleanExit as exception:
            fault = exception
            result = Result((stdout.getvalue() + exception.text).rstrip("\n"), "", ExitCode.SUCCESS)
        except Exit as exception:
            result = Result(stdout.getvalue().rstrip("\n"), "", exception.code)
        except CommandException as exception:
            fault = exception
            result = Result(stdout.getvalue().rstrip("\n"), "\n".join(exception.lines()), exception.exit_code)
        except Exception as exception:
            logger.debug("command failed", exc_info=True)
            fault = CommandError(str(exception) or type(exception).__name__)
            result = Result(stdout.getvalue().rstrip("\n"), "\n".join(fault.lines()), fault.exit_code)
        logger.debug("exit code %d", result.code)
        return result, fault

    def execute(self, argv=Unset, /):
        """
        Run the command against an argument vector and return a Result.

        Parameters
        - argv:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.

        Never raises for user input or run failures and never exits the process.
        Runs from several threads are captured one at a time.
        """
        return self._dispatch(_tokenize(argv))[0]

    def main(self, argv=Unset, /):
        """
        Execute, print the outcome and return the exit code.

        Standard output is written verbatim; errors are rendered through Rich
        (styled when colorful is set). Setting ARGOSY_DEBUG in the environment
        routes debug logs to a Rich handler on stderr.
        """
        if os.environ.get("ARGOSY_DEBUG"):
            logging.basicConfig(
                level=logging.DEBUG,
                format="%(message)s",
                handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
            )
        result, fault = self._dispatch(_tokenize(argv))
        if result.stdout:
            console = Console(soft_wrap=True)
            if self.colorful and isinstance(fault, CleanExit) and fault.options.get("kind") == "help":
                console.print(helps.styled(fault.options["command"]))
            else:
                console.out(result.stdout, highlight=False)
        if result.stderr:
            console = Console(stderr=True, soft_wrap=True)
            if self.colorful and isinstance(fault, CommandException):
                console.print(fault)
            else:
                console.out(result.stderr, highlight=False)
        return result.code


def _tokenize(prompt):
    """
    Normalize a prompt (Unset, str, or iterable of str) into a list of tokens.
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if any(not isinstance(token, str) for token in tokens):
            raise TypeError("execute() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("execute() argument must be a string or an iterable of strings")


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct callback:
        cmd = command(func, name="x")
    - Decorator:
        @command(name="x")
        def func(...): ...

    Returns
    - Command | Callable[[Callable], Command]
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


def group(name, /, parent=Unset, *args, **kwargs):
    """
    Create a command that has no run behavior of its own.

    Running it without a subcommand (and without a default child) renders its
    help. The name is required because there is no callback to derive it from.
    """
    if not isinstance(name, str):
        raise TypeError("group() first argument must be a string")

    @rename(kebab(name).replace("-", "_") or "group")
    def callback():
        raise HelpRequest()

    return Command(callback, parent, name, *args, **kwargs)


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for commands or callables; returns the exit code.

    A plain callable is wrapped as a Command first.
    """
    if isinstance(object, Command):
        return object.main(prompt)
    if callable(object):
        return invoke(command(object), prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must be a command or a callable")


__all__ = (
    "Command",
    "Result",
    "command",
    "group",
    "invoke",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del CommandType
