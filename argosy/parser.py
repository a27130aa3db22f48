"""
Argosy parser: route an argument vector through a command tree, match its
tokens against the resolved command's arguments and coerce the values.

Stages
- parse(command, tokens) -> Invocation
  1. Descent: leading tokens naming children select them, greedily. A branch
     whose input names no child continues into its default child, if any.
  2. Global tokens: -h/--help, --version and --generate-completion end the run
     with a CleanExit carrying the text to print.
  3. Matching: switches (long, short, combined short flags, inline values) and
     cardinals (in declaration order, a repeating one absorbs the rest).
  4. Coercion: raw strings are converted with each argument's type, checked
     against its choices, and missing values take their defaults.
- validate(invocation): runs the argument validators of every argument the
  user supplied, in declaration order.

Every input error is raised through trigger(..., command=<resolved command>) so
its report carries the usage line of that command. The first failure wins.
"""
import collections
import enum
import logging
import re

from . import completions, helps
from .arguments import Cardinal, Option, Flag
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)

Invocation = collections.namedtuple("Invocation", ("command", "values", "supplied"))
Invocation.__doc__ = """
    Result of parsing: the resolved command, the coerced values by parameter
    name (every parameter present) and the names the user actually supplied.
"""

HELP_SWITCHES = ("-h", "--help")
VERSION_SWITCH = "--version"
COMPLETION_SWITCH = "--generate-completion"


def label(command, name, /):
    """
    Label of an argument as it appears in error messages and usage.

    - cardinal: <metavar>
    - option: --long <metavar> (first long name, or first name)
    - flag: --long
    """
    argument = command.arguments[name]
    if isinstance(argument, Cardinal):
        return f"<{command.metavars[name]}>"
    longs = [switch for switch in argument.names if switch.startswith("--")]
    preferred = longs[0] if longs else argument.names[0]
    if isinstance(argument, Option):
        return f"{preferred} <{command.metavars[name]}>"
    return preferred


def _switch_like(command, token):
    """
    Whether a token reads as a switch; numbers like -5 or -2.5 are values unless
    the command declares them as switch names.
    """
    if token.partition("=")[0] in command.switches:
        return True
    return len(token) > 1 and token.startswith("-") and not re.fullmatch(r"-\d[\d.]*", token)


def _descend(command, tokens):
    """
    Follow leading child names (and default children) down the tree.
    """
    while True:
        while tokens and tokens[0] in command.children:
            command = command.children[tokens.popleft()]
            logger.debug("descended into %r", command.name)
        _scan_globals(command, tokens)
        if command.children and command.default:
            try:
                command = command.children[command.default]
            except KeyError:
                raise ValueError(f"default subcommand {command.default!r} of {command.name!r} is not one of its children") from None
            logger.debug("routed to default subcommand %r", command.name)
            continue
        return command


def _scan_globals(command, tokens):
    """
    Handle the first library-owned switch found before '--', if any.
    """
    for token in tokens:
        if token == "--":
            return
        if token in HELP_SWITCHES:
            raise CleanExit(helps.render(command), command=command, kind="help")
        if token == VERSION_SWITCH:
            for step in reversed(command.path):
                if step.version:
                    raise CleanExit(step.version)
        name, _, shell = token.partition("=")
        if name == COMPLETION_SWITCH:
            shell = shell or "zsh"
            if shell not in completions.SHELLS:
                command.trigger(InvalidValueError(
                    f"The value '{shell}' is invalid for '{COMPLETION_SWITCH} <shell>'",
                    code=FaultCode.INVALID_VALUE,
                ))
            raise CleanExit(completions.render(command.root, shell))


def _help_path(root, tokens):
    """
    Resolve 'help <path...>' and raise the help of the named command.
    """
    command = root
    while tokens:
        if (token := tokens.popleft()) in HELP_SWITCHES:
            continue
        try:
            command = command.children[token]
        except KeyError:
            command.trigger(UnknownSubcommandError(
                f"Unknown subcommand '{token}'", code=FaultCode.UNKNOWN_SUBCOMMAND, token=token,
            ))
    raise CleanExit(helps.render(command), command=command, kind="help")


def _resolve_switch(command, name):
    """
    Return (param name, spec) for a switch name, honoring the abbreviation policy.
    """
    if name in command.switches:
        return command.switches[name]
    if command.abbreviations == "prefix" and name.startswith("--") and len(name) > 2:
        matches = {
            command.switches[switch][0]: command.switches[switch]
            for switch in command.switches
            if switch.startswith("--") and switch.startswith(name)
        }
        if len(matches) == 1:
            return next(iter(matches.values()))
    return None


def _expand(command, token):
    """
    Expand a switch token into [(param, spec, name, inline value | Unset)].

    A cluster of declared flags that also holds -h is a help request.
    """
    name, equal, value = token.partition("=")
    inline = value if equal else Unset
    if (match := _resolve_switch(command, name)) is not None:
        return [(*match, name, inline)]
    letters = token[1:]
    if not token.startswith("--") and not equal and len(letters) > 1:
        matches = [command.switches.get("-" + letter) for letter in letters if "-" + letter != HELP_SWITCHES[0]]
        if all(match is not None and isinstance(match[1], Flag) for match in matches):
            if len(matches) < len(letters):
                raise CleanExit(helps.render(command), command=command, kind="help")
            return [(*match, "-" + letter, Unset) for match, letter in zip(matches, letters)]
    command.trigger(UnknownSwitchError(
        f"Unknown option '{name if token.startswith("--") else token}'",
        code=FaultCode.UNKNOWN_SWITCH, token=token,
    ))


def _match(command, tokens):
    """
    Split the command's tokens into raw values by parameter name.

    Repeating arguments collect a list of raw strings, the others a single
    string; flags collect True.
    """
    raw = {}
    pending = collections.deque(command.cardinals)
    terminated = False

    while tokens:
        token = tokens.popleft()

        if not terminated and token == "--":
            terminated = True
            continue

        if terminated or not _switch_like(command, token):
            if not pending:
                command.trigger(UnexpectedCardinalError(
                    f"Unexpected argument '{token}'", code=FaultCode.UNEXPECTED_CARDINAL, token=token,
                ))
            name = pending[0]
            if command.cardinals[name].repeating:
                raw.setdefault(name, []).append(token)
            else:
                raw[name] = token
                pending.popleft()
            continue

        for name, argument, switch, inline in _expand(command, token):
            if isinstance(argument, Flag):
                if inline is not Unset:
                    command.trigger(FlagAssignmentError(
                        f"The flag '{switch}' does not take a value", code=FaultCode.FLAG_ASSIGNMENT, token=token,
                    ))
                if name in raw:
                    command.trigger(DuplicatedSwitchError(
                        f"The option '{switch}' was given more than once", code=FaultCode.DUPLICATED_SWITCH, token=token,
                    ))
                raw[name] = True
                continue

            if inline is Unset:
                if not tokens or _switch_like(command, tokens[0]):
                    command.trigger(OptionValueRequiredError(
                        f"Missing value for '{label(command, name)}'", code=FaultCode.OPTION_VALUE_REQUIRED, token=token,
                    ))
                inline = tokens.popleft()

            if argument.repeating:
                raw.setdefault(name, []).append(inline)
            elif name in raw:
                command.trigger(DuplicatedSwitchError(
                    f"The option '{switch}' was given more than once", code=FaultCode.DUPLICATED_SWITCH, token=token,
                ))
            else:
                raw[name] = inline

    return raw


def _convert(command, name, token):
    argument = command.arguments[name]
    try:
        value = argument.type(token)
    except (ValueError, TypeError):
        command.trigger(InvalidValueError(
            f"The value '{token}' is invalid for '{label(command, name)}'",
            code=FaultCode.INVALID_VALUE, token=token,
        ))
    plain = value.value if isinstance(value, enum.Enum) else value
    if argument.choices and plain not in argument.choices:
        command.trigger(InvalidValueError(
            f"The value '{token}' is invalid for '{label(command, name)}'",
            code=FaultCode.INVALID_VALUE, token=token,
        ))
    return value


def _coerce(command, raw):
    """
    Convert raw strings, then fill in defaults and report missing arguments.
    """
    values = {}
    for name, argument in command.arguments.items():
        if name not in raw:
            continue
        if isinstance(argument, Flag):
            values[name] = True
        elif argument.repeating:
            values[name] = [_convert(command, name, token) for token in raw[name]]
        else:
            values[name] = _convert(command, name, raw[name])

    for name, argument in command.arguments.items():
        if name in values:
            continue
        if getattr(argument, "required", False):
            command.trigger(MissingArgumentError(
                f"Missing expected argument '{label(command, name)}'", code=FaultCode.MISSING_ARGUMENT,
            ))
        values[name] = [] if getattr(argument, "repeating", False) else argument.default

    return values


def parse(command, tokens, /):
    """
    Parse tokens against a command tree rooted at `command`.

    Returns an Invocation; raises CleanExit for help/version/completion
    requests and a ValidationError subclass for malformed input.
    """
    tokens = collections.deque(tokens)
    logger.debug("parsing %r from %r", list(tokens), command.name)

    if command.children and "help" not in command.children and tokens and tokens[0] == "help":
        tokens.popleft()
        _help_path(command, tokens)

    command = _descend(command, tokens)

    if command.children and tokens and not _switch_like(command, tokens[0]) and tokens[0] != "--":
        command.trigger(UnknownSubcommandError(
            f"Unknown subcommand '{tokens[0]}'", code=FaultCode.UNKNOWN_SUBCOMMAND, token=tokens[0],
        ))

    raw = _match(command, tokens)
    values = _coerce(command, raw)
    return Invocation(command, values, tuple(name for name in command.arguments if name in raw))


def validate(invocation, /):
    """
    Run the validators bound to the arguments the user supplied.

    A flag's validator receives True, a repeating argument's validator receives
    each value as a separate positional parameter, the others the single value.
    A ValidationError raised without a command gets the resolved one attached.
    """
    command = invocation.command
    for name in invocation.supplied:
        argument = command.arguments[name]
        value = invocation.values[name]
        try:
            if isinstance(argument, Flag):
                argument(True)
            elif argument.repeating:
                argument(*value)
            else:
                argument(value)
        except ValidationError as exception:
            if exception.command is None:
                command.trigger(exception)
            raise


__all__ = (
    "Invocation",
    "label",
    "parse",
    "validate",
)
