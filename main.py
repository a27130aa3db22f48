"""
A utility for performing maths, built on argosy.

    $ python main.py 1 2 3 4 5
    15
    $ python main.py multiply -x 4 4
    10
    $ python main.py stats average --kind median 1 2 10
    2.0
"""
import enum
import functools
import operator
import statistics
import sys

from argosy import *

math = group("math", descr="A utility for performing maths.", version="1.0.0", default="add")

hex_output = Flag("--hex-output", "-x", descr="Use hexadecimal notation for the result.")


def _integers():
    return Cardinal(type=int, nargs="*", descr="A group of integers to operate on.")


def _floats():
    return Cardinal(type=float, nargs="*", descr="A group of floating-point values to operate on.")


def _render(result, hex_output):
    return format(result, "x") if hex_output else str(result)


@math.command
def add(values=_integers(), /, *, hex_output=hex_output):
    """
    Print the sum of the values.
    """
    return _render(sum(values), hex_output)


@math.command
def multiply(values=_integers(), /, *, hex_output=hex_output):
    """
    Print the product of the values.
    """
    return _render(functools.reduce(operator.mul, values, 1), hex_output)


stats = math.group("stats", descr="Calculate descriptive statistics.")


class Kind(enum.Enum):
    MEAN = "mean"
    MEDIAN = "median"
    MODE = "mode"


@stats.command(version="1.5.0-alpha")
def average(
        values=_floats(),
        /,
        kind=Option("--kind", type=Kind, default=Kind.MEAN, descr="The kind of average to provide."),
):
    """
    Print the average of the values.
    """
    if not values:
        return 0.0
    match kind:
        case Kind.MEAN:
            return statistics.fmean(values)
        case Kind.MEDIAN:
            return statistics.median(values)
        case Kind.MODE:
            return statistics.mode(values)


@average.validate
def _(namespace):
    if namespace.kind is Kind.MODE and not namespace.values:
        raise ValidationError("Please provide at least one value to calculate the mode.")


@stats.command
def stdev(values=_floats(), /):
    """
    Print the standard deviation of the values.
    """
    return statistics.pstdev(values) if values else 0.0


@stats.command
def quantiles(
        values=_floats(),
        /,
        test_custom_exit_code=Option("--test-custom-exit-code", type=int, hidden=True),
        file=Option("--file", completion=Completion.file(), hidden=True),
        directory=Option("--directory", completion=Completion.directory(), hidden=True),
        *,
        test_success_exit_code=Flag("--test-success-exit-code", hidden=True),
        test_failure_exit_code=Flag("--test-failure-exit-code", hidden=True),
        test_validation_exit_code=Flag("--test-validation-exit-code", hidden=True),
):
    """
    Print the quantiles of the values (TBD).
    """
    raise HelpRequest()


@quantiles.validate
def _(namespace):
    if namespace.test_success_exit_code:
        raise Exit(ExitCode.SUCCESS)
    if namespace.test_failure_exit_code:
        raise Exit(ExitCode.FAILURE)
    if namespace.test_validation_exit_code:
        raise Exit(ExitCode.VALIDATION_FAILURE)
    if namespace.test_custom_exit_code is not None:
        raise Exit(namespace.test_custom_exit_code)


if __name__ == '__main__':
    sys.exit(math.main())
