r"""
Argosy argument specifications and decorators.

Overview
- Specs
  • Cardinal[_T]: positional, value-bearing argument (single, optional or repeating).
  • Option[_T]: named, value-bearing option with one or more aliases (e.g., -o/--output).
  • Flag: named, presence-only switch (no payload), e.g., -x/--hex-output.
  • Completion: shell-completion hint for value-bearing specs (files, directories, words).

- Decorators
  • @cardinal(...): build a Cardinal and bind the decorated function as its validator.
  • @option(...): build an Option and bind the decorated function as its validator.
  • @flag(...): build a Flag and bind the decorated function as its validator.
  Each decorator returns the configured spec; calling the spec forwards the coerced
  value(s) to the bound validator (or does nothing when none is bound).

- Introspection & representation
  • ArgumentType metaclass provides a stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ via read-only properties.

Metadata (sanitized on construction)
- Shared (all specs)
  • descr: Unset | str (short help), non-empty when provided.
  • hidden: bool (suppressed from help and usage, still completed).
- Cardinal/Option only (value-bearing)
  • metavar: Unset | str (placeholder name rendered as <metavar>).
  • type: Callable (converter); an Enum subclass also provides the choices.
  • nargs: Unset | "?" | "*" | "+" (Cardinal), Unset | "*" (Option, repeatable).
  • choices: Iterable (duplicates rejected).
  • completion: Unset | Completion.
- Named (Option/Flag)
  • names: ordered shell-style names, "-x" or "--long-name"; duplicates rejected.

Example
    >>> @cardinal(type=float, nargs="*", descr="A group of floating-point values to operate on.")
    ... def values(*values): ...
"""
import enum
import functools
import operator
import re
from collections.abc import Iterable

from .utils import *


class Completion:
    """
    Shell-completion hint attached to a value-bearing argument.

    Kinds
    - Completion.file(*extensions): complete file names (optionally filtered).
    - Completion.directory(): complete directory names.
    - Completion.list(*words): complete from a fixed list of words.

    Instances are immutable and compare by value, so two commands sharing an
    argument always render the same completion stanza.
    """
    __slots__ = ("_kind", "_words")

    def __init__(self, kind, words=(), /):
        if kind not in ("file", "directory", "list"):
            raise ValueError("completion kind must be one of 'file', 'directory', or 'list'")
        words = tuple(words)
        if any(not isinstance(word, str) or not word for word in words):
            raise TypeError("completion words must be non-empty strings")
        object.__setattr__(self, "_kind", kind)
        object.__setattr__(self, "_words", words)

    @classmethod
    def file(cls, *extensions):
        return cls("file", (extension.lstrip(".") for extension in extensions))

    @classmethod
    def directory(cls):
        return cls("directory")

    @classmethod
    def list(cls, *words):
        if not words:
            raise TypeError("list completion requires at least one word")
        return cls("list", words)

    @property
    def kind(self):
        return self._kind

    @property
    def words(self):
        return self._words

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__!r} object is read-only")

    def __eq__(self, other):
        if not isinstance(other, Completion):
            return NotImplemented
        return (self.kind, self.words) == (other.kind, other.words)

    def __hash__(self):
        return hash((self.kind, self.words))

    def __repr__(self):
        return f"completion.{self.kind}({", ".join(map(repr, self.words))})"


class ArgumentType(type):
    """
    Metaclass that turns specs into callable, introspectable descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """

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
            - flag(names=('--hex-output', '-x'), descr='...', hidden=False)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate shared argument metadata.

    - descr: optional short description. If omitted (Unset), it becomes None.
      If provided, it must be a non-empty string after trimming.

    Raises
    - TypeError: if 'descr' is not a string or Unset.
    - ValueError: if 'descr' is a string but empty after trimming.
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

    metadata["descr"] = coalesce(descr)


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: validate and normalize metadata for named specs (Option, Flag).

    names: required. Each name must be a non-empty string of one of the forms
      - short: "-x" (a single letter or digit)
      - long:  "--long", "--long-name"
    Unicode letters are allowed. Duplicates are rejected. Declaration order is
    preserved: completion scripts list the names in the order they were given.
    """
    names = []
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not re.fullmatch(r"-[^\W_]|--[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"{cls.__typename__} names must be valid shell-style option names (unicodes are allowed)")
        elif name in names:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        names.append(name)

    metadata["names"] = tuple(names)


def _sanitize_parametric_metadata(cls, metadata, /):
    """
    Internal: validate and normalize metadata for value-bearing arguments.

    - metavar: must be Unset or a non-empty string after trimming; surrounding
      angle brackets are dropped ("<file>" and "file" are the same placeholder).
    - type: must be callable. An Enum subclass contributes its member values as
      choices when no explicit choices were given.
    - nargs: Cardinal accepts Unset, "?", "*" and "+"; Option accepts Unset and
      "*" (the option may be repeated, each occurrence adds one value).
    - choices: must be iterable, duplicates rejected, normalized to a tuple.
    - completion: must be Unset or a Completion.
    """
    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip().removeprefix("<").removesuffix(">")):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")

    allowed = ("?", "*", "+") if issubclass(cls, Cardinal) else ("*",)
    if not isinstance(nargs := metadata["nargs"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'nargs' must be a string")
    if isinstance(nargs, str) and nargs not in allowed:
        raise ValueError(f"{cls.__typename__} 'nargs' must be one of {", ".join(map(repr, allowed))}")
    metadata["nargs"] = coalesce(nargs)

    if not isinstance(choices := metadata["choices"], Iterable) or isinstance(choices, str):
        raise TypeError(f"{cls.__typename__} 'choices' must be iterable")
    sanitized = []
    for choice in choices:
        if choice in sanitized:
            raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
        sanitized.append(choice)
    if not sanitized and isinstance(metadata["type"], type) and issubclass(metadata["type"], enum.Enum):
        sanitized = [member.value for member in metadata["type"]]
    metadata["choices"] = tuple(sanitized)

    if not isinstance(metadata["completion"], Completion | Unset):
        raise TypeError(f"{cls.__typename__} 'completion' must be a completion")
    metadata["completion"] = coalesce(metadata["completion"])


class Cardinal[_T](metaclass=ArgumentType):
    """
    Positional, value-bearing argument specification.

    Cardinal[_T] declares how a positional value is converted, validated and
    rendered in help. Cardinals are filled in declaration order; a repeating
    cardinal ("*" or "+") must come last and absorbs every remaining positional.

    Arity
    - Unset: exactly one value, required.
    - "?":   zero or one value.
    - "*":   zero or more values (defaults to an empty list).
    - "+":   one or more values.
    """

    __introspectable__ = (
        "metavar",
        "type",
        "nargs",
        "default",
        "choices",
        "descr",
        "completion",
        "hidden",
    )

    def __new__(
            cls,
            metavar=Unset,
            /,
            type=str,
            nargs=Unset,
            default=None,
            choices=(),
            descr=Unset,
            *,
            completion=Unset,
            hidden=False,
    ):
        metadata = {
            "metavar": metavar,
            "type": type,
            "nargs": nargs,
            "default": default,
            "choices": choices,
            "descr": descr,
            "completion": completion,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_parametric_metadata(cls, metadata)

        self = super().__new__(cls)
        self._callback = Unset  # Bound by @cardinal(...)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        if self.nargs in ("*", "+") and self.default is not None:
            raise TypeError(f"repeating {cls.__typename__} cannot specify a 'default'")

        return self

    @property
    def repeating(self):
        return self.nargs in ("*", "+")

    @property
    def required(self):
        return self.nargs in (None, "+") and self.default is None

    def __call__(self, *values):
        """
        Forward coerced value(s) to the bound validator, if any.
        """
        if self._callback is Unset:
            return
        return self._callback(*values)

    def __cardinal__(self):
        """
        Introspection hook: identify this spec as a Cardinal.
        """
        return self


class Option[_T](metaclass=ArgumentType):
    """
    Named, value-bearing option specification.

    Option[_T] declares how a named option (e.g., --kind <kind>) is parsed,
    converted, validated and rendered in help.

    Highlights
    - Aliases via 'names' (e.g., "-o", "--output"); the first long name gives
      the default placeholder in help.
    - Spaced (--name value) and inline (--name=value) forms are both accepted.
    - nargs="*" makes the option repeatable: each occurrence appends one value.
    - required=True makes the option mandatory; otherwise 'default' is used.
    """

    __introspectable__ = (
        "names",
        "metavar",
        "type",
        "nargs",
        "default",
        "choices",
        "descr",
        "required",
        "completion",
        "hidden",
    )

    def __new__(
            cls,
            *names,
            metavar=Unset,
            type=str,
            nargs=Unset,
            default=None,
            choices=(),
            descr=Unset,
            required=False,
            completion=Unset,
            hidden=False,
    ):
        metadata = {
            "names": names,
            "metavar": metavar,
            "type": type,
            "nargs": nargs,
            "default": default,
            "choices": choices,
            "descr": descr,
            "required": bool(required),
            "completion": completion,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)
        _sanitize_parametric_metadata(cls, metadata)

        self = super().__new__(cls)
        self._callback = Unset  # Bound by @option(...)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        if self.required and self.default is not None:
            raise TypeError(f"required {cls.__typename__} cannot specify a 'default'")
        if self.repeating and self.default is not None:
            raise TypeError(f"repeating {cls.__typename__} cannot specify a 'default'")

        return self

    @property
    def repeating(self):
        return self.nargs == "*"

    def __call__(self, *values):
        if self._callback is Unset:
            return
        return self._callback(*values)

    def __option__(self):
        """
        Introspection hook: identify this spec as an Option.
        """
        return self


class Flag(metaclass=ArgumentType):
    """
    Named, presence-only option specification.

    A Flag does not carry a payload value; its presence is the signal and the
    run callback receives True or False.
    """

    __introspectable__ = (
        "names",
        "descr",
        "hidden",
    )

    def __new__(cls, *names, descr=Unset, hidden=False):
        metadata = {
            "names": names,
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)

        self = super().__new__(cls)
        self._callback = Unset  # Bound by @flag(...)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        return self

    @property
    def default(self):
        return False

    def __call__(self, *values):
        if self._callback is Unset:
            return
        return self._callback(*values)

    def __flag__(self):
        """
        Introspection hook: identify this spec as a Flag.
        """
        return self


def _binder(factory, typename):
    """
    Build a decorator factory that binds a validator to a freshly built spec.

    The returned decorator validates that it decorates a callable and that the
    spec is bound only once, then returns the spec itself.
    """
    @rename(typename)
    def decorator(*args, **kwargs):
        spec = factory(*args, **kwargs)

        @rename(typename)
        def wrapper(callback, /):
            if not callable(callback):
                raise TypeError(f"@{typename}() must be applied to a callable")
            if spec._callback is not Unset:
                raise TypeError(f"@{typename}() must be applied only once")
            spec._callback = callback
            return spec

        return wrapper

    return decorator


cardinal = _binder(Cardinal, "cardinal")
cardinal.__doc__ = """
    Decorator/factory for a positional argument with a validator.

    Usage
        @cardinal(type=float, nargs="*")
        def values(*values):
            if any(value < 0 for value in values):
                raise ValidationError("Values must be positive.")

    The decorated function becomes the validator; the decorator returns the
    Cardinal, ready to be used as a parameter default.
"""

option = _binder(Option, "option")
option.__doc__ = """
    Decorator/factory for a named option with a validator.

    Usage
        @option("--port", type=int, default=8080)
        def port(port):
            if not 0 < port < 65536:
                raise ValidationError("The port must be between 1 and 65535.")
"""

flag = _binder(Flag, "flag")
flag.__doc__ = """
    Decorator/factory for a presence-only flag with a validator.

    The validator receives True when the flag is present and is not called
    otherwise.
"""


__all__ = (
    # Classes (specifications)
    "Cardinal",
    "Option",
    "Flag",
    "Completion",

    # Decorators (bind validators)
    "cardinal",
    "option",
    "flag",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
