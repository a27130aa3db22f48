"""
Argosy faults (outcomes, errors and exit codes) and rendering.

Scope
- ExitCode: the small set of process exit codes a run maps to.
- FaultCode: canonical, stable numeric identifiers for every user-facing input
  error. Codes are grouped by domain to keep logs and searches predictable.
- CommandException: base type carrying message + options, rendered as
  "Error: <message>" (plain text or Rich).
  • CommandError: the command's own logic failed (exit 1, no usage).
  • ValidationError: the user's input was rejected (exit 64, usage attached).
- Exit: terminate with a literal exit code and no output.
- CleanExit / HelpRequest: terminal successes that print text (help, version,
  completion scripts) instead of running the command.
- trigger(): attach context to a fault and raise it.

Integration
- The parser and the commands raise faults through trigger(fault, command=...),
  so every ValidationError knows which command's usage line belongs to it.
- Command.execute() catches all of them and turns them into a Result.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.text import Text

from .utils import Unset, coalesce


class ExitCode(IntEnum):
    """
    process exit codes produced by a run.

    VALIDATION_FAILURE follows the BSD sysexits EX_USAGE value so scripts can
    tell "bad input" apart from "the operation failed".
    """
    SUCCESS            = 0
    FAILURE            = 1
    VALIDATION_FAILURE = 64


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_SUBCOMMAND
    - switches (options/flags) (1111x/1112x)
      • UNKNOWN_SWITCH, FLAG_ASSIGNMENT, DUPLICATED_SWITCH,
        OPTION_VALUE_REQUIRED, INVALID_VALUE, MISSING_ARGUMENT
    - positionals (cardinals) (11121)
      • UNEXPECTED_CARDINAL
    - delegated (11131)
      • DELEGATED_ERROR (raised by validators and run callbacks)
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_SUBCOMMAND    = 11102

    # --- switch/flag/option errors (11xxx) ---
    UNKNOWN_SWITCH        = 11112
    FLAG_ASSIGNMENT       = 11113
    DUPLICATED_SWITCH     = 11115
    OPTION_VALUE_REQUIRED = 11117
    INVALID_VALUE         = 11124
    MISSING_ARGUMENT      = 11125

    # --- positional/cardinal errors (11xxx) ---
    UNEXPECTED_CARDINAL   = 11121

    # --- delegated errors (11xxx) ---
    DELEGATED_ERROR       = 11131


class CommandException(Exception):
    """
    Base for faults that end a run with an "Error: ..." report.

    Options are free-form context (command, code, token, argument, ...) kept in a
    read-only mapping; use copy.replace(fault, **options) to add more.
    """
    exit_code = ExitCode.FAILURE

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def command(self):
        return self.options.get("command")

    @property
    def code(self):
        return self.options.get("code", FaultCode.DELEGATED_ERROR)

    def lines(self):
        """
        Return the plain-text lines of the report (no trailing newline).
        """
        return ["Error: " + self.message]

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "error-label": "bold #FF4DA6",  # friendly pinky label
            "error-message": "#C8C8D0",  # soft light gray message
            "usage-label": "bold #00E6FF",  # cyan signature label
            "usage-section": "#36C5F0",  # sky-blue usage body
        } | getattr(main, "__styles__", {}))

        text = Text()
        for index, line in enumerate(self.lines()):
            label, _, body = line.partition(": ")
            if index:
                text.append("\n")
            text.append(label + ":", styles[label.lower() + "-label"])
            text.append(" ")
            text.append(body, styles[label.lower() + ("-message" if label == "Error" else "-section")])
        return text

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandError(CommandException):
    """
    The command's own logic failed; reported without usage, exit code 1.
    """


class ValidationError(CommandException):
    """
    The user's input was rejected; reported with the command's usage line.

    Raise it from argument validators, command validators or run callbacks to
    report a problem with the provided values.
    """
    exit_code = ExitCode.VALIDATION_FAILURE

    def lines(self):
        lines = super().lines()
        if self.command is not None:
            lines.append("Usage: " + self.command.usage)
        return lines


class UnknownSwitchError(ValidationError): ...
class UnknownSubcommandError(ValidationError): ...
class FlagAssignmentError(ValidationError): ...
class DuplicatedSwitchError(ValidationError): ...
class OptionValueRequiredError(ValidationError): ...
class InvalidValueError(ValidationError): ...
class MissingArgumentError(ValidationError): ...
class UnexpectedCardinalError(ValidationError): ...


class Exit(Exception):
    """
    End the run with a literal exit code and no output.

    Not an error: Exit(0) is a success, Exit(ExitCode.VALIDATION_FAILURE) exits
    with 64 without printing anything.
    """

    def __init__(self, code=ExitCode.SUCCESS, /):
        if not isinstance(code, int):
            raise TypeError("Exit() argument must be an integer")
        super().__init__(int(code))
        self.code = int(code)

    def __repr__(self):
        return f"Exit({self.code})"


class CleanExit(Exception):
    """
    End the run successfully, printing `text` on stdout.
    """

    def __init__(self, text=Unset, /, **options):
        super().__init__(coalesce(text, ""))
        self.text = coalesce(text, "")
        self.options = MappingProxyType(options)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.text, **{**self.options, **overrides})


class HelpRequest(CleanExit):
    """
    Ask for the help of the running command instead of a result.

    Run callbacks of commands that have nothing to do raise this; the
    dispatcher renders the help of the command that was resolved.
    """


def trigger(fault, /, **options):
    """
    Attach context to a fault and raise it.

    contract
    - fault must provide a __replace__ method (see base classes).
    - options are merged into the fault via copy.replace(fault, **options).
    """
    if not hasattr(fault, "__replace__") or not callable(fault.__replace__):
        raise TypeError("trigger() argument must have a __replace__ method")
    raise copy.replace(fault, **options) from None


__all__ = (
    "ExitCode",
    "FaultCode",
    "CommandException",
    "CommandError",
    "ValidationError",
    "UnknownSwitchError",
    "UnknownSubcommandError",
    "FlagAssignmentError",
    "DuplicatedSwitchError",
    "OptionValueRequiredError",
    "InvalidValueError",
    "MissingArgumentError",
    "UnexpectedCardinalError",
    "Exit",
    "CleanExit",
    "HelpRequest",
    "trigger",
)
