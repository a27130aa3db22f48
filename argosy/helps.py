"""
Argosy help and usage rendering.

Layout
    OVERVIEW: <descr>

    USAGE: <path> [--flag] [--option <value>] <cardinal> [<subcommand>]

    ARGUMENTS:
      <cardinal>              Description. (default: value)

    OPTIONS:
      -x, --flag              Description.
      --version               Show the version.
      -h, --help              Show help information.

    SUBCOMMANDS:
      child                   Description.

    <epilog>

Rows use a two-space indent and a fixed label column; a label that does not
fit moves its description to the next line. Descriptions wrap at the command's
width with a hanging indent on the label column.

The document is assembled as rich Text so the same layout serves plain output
(render) and styled output (styled), the latter honoring a __styles__ mapping
defined in __main__.
"""
import enum
import textwrap
from collections import defaultdict

from rich.text import Text

from .arguments import Cardinal, Option, Flag

INDENT = 2
COLUMN = 26

VERSION_ROW = ("--version", "Show the version.")
HELP_ROW = ("-h, --help", "Show help information.")


def _program(command):
    """
    Names of the command path, with the root renamed by __main__.__prog__.
    """
    names = [step.name for step in command.path]
    prog = getattr(__import__("__main__"), "__prog__", None)
    if isinstance(prog, str) and prog.strip():
        names[0] = prog.strip()
    return names


def _preferred(argument):
    longs = [name for name in argument.names if name.startswith("--")]
    return longs[0] if longs else argument.names[0]


def _names(argument):
    """
    Row label names: short names first, then long names, declaration order kept.
    """
    shorts = [name for name in argument.names if not name.startswith("--")]
    longs = [name for name in argument.names if name.startswith("--")]
    return ", ".join(shorts + longs)


def display(value):
    """
    Text of a default value in help, or None when it is not worth showing.
    """
    if value is None or value is False or value == [] or value == ():
        return None
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, list | tuple):
        return " ".join(map(str, value))
    return str(value)


def usage(command):
    """
    Return the usage line of a command (without the "USAGE: " label).
    """
    parts = _program(command)
    for name, argument in command.arguments.items():
        if argument.hidden:
            continue
        metavar = f"<{command.metavars[name]}>"
        match argument:
            case Flag():
                parts.append(f"[{_preferred(argument)}]")
            case Option():
                item = f"{_preferred(argument)} {metavar}"
                if argument.repeating:
                    item += " ..."
                parts.append(item if argument.required else f"[{item}]")
            case Cardinal(nargs="?"):
                parts.append(f"[{metavar}]")
            case Cardinal(nargs="*"):
                parts.append(f"[{metavar} ...]")
            case Cardinal(nargs="+"):
                parts.append(f"{metavar} ...")
            case Cardinal():
                parts.append(metavar if argument.required else f"[{metavar}]")
    if command.children:
        parts.append("<subcommand>")
    return " ".join(parts)


def _row(label, descr, width, styler, style):
    """
    Two-column row: indented label, description on the label column.
    """
    row = Text(" " * INDENT).append(label, styler(style))
    if not descr:
        return row
    lines = textwrap.wrap(descr, max(width - COLUMN, 20)) or [""]
    if INDENT + len(label) < COLUMN:
        row.append(" " * (COLUMN - INDENT - len(label)))
    else:
        row.append("\n" + " " * COLUMN)
    row.append(lines[0], styler("description"))
    for line in lines[1:]:
        row.append("\n" + " " * COLUMN).append(line, styler("description"))
    return row


def _section(title, rows, styler):
    return Text("\n").join([Text(title + ":", styler("section-label")), *rows])


def _describe(argument):
    descr = argument.descr or ""
    if isinstance(argument, Flag) or (shown := display(argument.default)) is None:
        return descr
    return f"{descr} (default: {shown})".strip()


def document(command, styler=lambda style: ""):
    """
    Assemble the help of a command as rich Text.

    `styler` maps a palette key to a style; the default yields unstyled text.
    """
    width = command.width
    blocks = []

    if command.descr:
        overview = textwrap.fill("OVERVIEW: " + command.descr, width)
        blocks.append(Text(overview[:9], styler("section-label")).append(overview[9:], styler("overview")))

    blocks.append(Text("USAGE:", styler("section-label")).append(" ").append(usage(command), styler("usage")))

    cardinals = [
        _row(f"<{command.metavars[name]}>", _describe(argument), width, styler, "metavar")
        for name, argument in command.cardinals.items()
        if not argument.hidden
    ]
    if cardinals:
        blocks.append(_section("ARGUMENTS", cardinals, styler))

    options = []
    for name, argument in command.arguments.items():
        if isinstance(argument, Cardinal) or argument.hidden:
            continue
        label = _names(argument)
        if isinstance(argument, Option):
            label += f" <{command.metavars[name]}>"
        options.append(_row(label, _describe(argument), width, styler, "option-name"))
    if any(step.version for step in command.path):
        options.append(_row(*VERSION_ROW, width, styler, "option-name"))
    options.append(_row(*HELP_ROW, width, styler, "option-name"))
    blocks.append(_section("OPTIONS", options, styler))

    if command.children:
        blocks.append(_section("SUBCOMMANDS", [
            _row(name, child.descr or "", width, styler, "subcommand")
            for name, child in command.children.items()
        ], styler))

    if command.epilog:
        blocks.append(Text(textwrap.fill(command.epilog, width), styler("epilog")))

    return Text("\n\n").join(blocks)


def render(command):
    """
    Return the plain help text of a command (no leading/trailing whitespace).
    """
    return document(command).plain.strip()


def styled(command):
    """
    Return the help of a command styled with the palette (see __styles__).
    """
    styles = defaultdict(str, {
        "section-label": "bold #FFFFFF",  # Pure white headers
        "overview": "italic #A3A3A3",  # Neutral gray
        "usage": "bold #36C5F0",  # SKY-BLUE signature
        "metavar": "bold #FFD600",  # AMBER for parameters
        "option-name": "bold #00E6FF",  # CYAN for options
        "subcommand": "bold #36C5F0",
        "description": "#9CA3AF",  # Muted gray
        "epilog": "#737373",  # Dim footer gray
    } | getattr(__import__("__main__"), "__styles__", {}))
    return document(command, styles.__getitem__)


__all__ = (
    "display",
    "document",
    "render",
    "styled",
    "usage",
)
