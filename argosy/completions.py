"""
Argosy shell-completion scripts.

render(root, shell) walks a command tree and returns the completion script for
`zsh` (the default) or `bash`. Generation is pure: the same tree always yields
the same bytes.

zsh
- One `_<path>` function per command, depth-first in declaration order, the
  root function called last.
- Switches are listed flags first, then options, in their declared name order;
  hidden switches keep an empty description.
- Option values complete from their choices "(a b c)", files "_files" or
  directories "_files -/".
- Branches describe their children as modes; the root also offers the `help`
  pseudo-subcommand.

bash
- One function per command using `compgen`; the root registers itself with
  `complete -F`.
"""
import re

from .arguments import Option

SHELLS = ("zsh", "bash")

HELP_DESCR = "Print help information."
HELP_MODE = ("help", "Show subcommand help information.")


def _function(names):
    return "_" + "_".join(re.sub(r"\W", "_", name) for name in names)


def _quote(text):
    """
    Escape text for a single-quoted zsh _arguments spec.
    """
    return text.replace("'", "'\\''").replace("[", "\\[").replace("]", "\\]")


def _switches(command):
    """
    Distinct switch specs of a command as (param name, spec), in argument order.
    """
    return [
        (name, argument)
        for name, argument in command.arguments.items()
        if hasattr(argument, "names")
    ]


def _children(command):
    """
    Children as (name, command | None); None stands for the help pseudo-subcommand.
    """
    children = list(command.children.items())
    if command.children and not command.parent and "help" not in command.children:
        children.append((HELP_MODE[0], None))
    return children


def _zsh_action(argument):
    completion = argument.completion
    if completion is not None:
        match completion.kind:
            case "file" if completion.words:
                pattern = completion.words[0] if len(completion.words) == 1 else f"({"|".join(completion.words)})"
                return f'_files -g "*.{pattern}"'
            case "file":
                return "_files"
            case "directory":
                return "_files -/"
            case "list":
                return f"({" ".join(completion.words)})"
    if argument.choices:
        return f"({" ".join(map(str, argument.choices))})"
    return ""


def _zsh_arguments(command):
    lines = []
    for name, argument in _switches(command):
        descr = "" if argument.hidden else _quote(argument.descr or "")
        names = argument.names
        repeat = "*" if isinstance(argument, Option) and argument.repeating else ""
        if len(names) > 1:
            exclusion = repeat or f"({" ".join(names)})"
            line = f"'{exclusion}'{{{",".join(names)}}}'[{descr}]"
        else:
            line = f"'{repeat}{names[0]}[{descr}]"
        if isinstance(argument, Option):
            line += f":{command.metavars[name]}:" + _zsh_action(argument).replace("'", "'\\''")
        lines.append(line + "'")
    lines.append(f"'(-h --help)'{{-h,--help}}'[{HELP_DESCR}]'")
    return lines


def _zsh(names, command):
    children = _children(command) if command is not None else []
    lines = [
        f"{_function(names)}() {{",
        "    integer ret=1",
        "    local -a args",
        "    args+=(",
    ]
    arguments = _zsh_arguments(command) if command is not None else [f"'(-h --help)'{{-h,--help}}'[{HELP_DESCR}]'"]
    lines.extend(" " * 8 + argument for argument in arguments)
    if children:
        lines.append("        '(-): :->command'")
        lines.append("        '(-)*:: :->arg'")
    lines.append("    )")
    lines.append("    _arguments -w -s -S $args[@] && ret=0")
    script = "\n".join(lines) + "\n"

    if children:
        stanza = [
            "        case $state in",
            "            (command)",
            "                local modes",
            "                modes=(",
        ]
        for name, child in children:
            descr = HELP_MODE[1] if child is None else (child.descr or "")
            stanza.append(f"                    '{name}:{_quote(descr)}'")
        stanza += [
            "                )",
            '                _describe "mode" modes',
            "                ;;",
            "            (arg)",
            "                case ${words[1]} in",
        ]
        for name, child in children:
            stanza += [
                f"                    ({name})",
                f"                        {_function([*names, name])}",
                "                        ;;",
            ]
        stanza += [
            "                esac",
            "                ;;",
            "        esac",
        ]
        script += "\n".join(stanza)

    script += "    return ret\n}\n\n"
    for name, child in children:
        script += _zsh([*names, name], child)
    return script


def zsh(root):
    """
    Return the zsh completion script of a command tree.
    """
    return "\n".join([
        f"#compdef {root.name}",
        "local context state state_descr line",
        "typeset -A opt_args",
        "",
        _zsh([root.name], root),
    ]) + "\n" + _function([root.name])


def _bash_action(argument):
    completion = argument.completion
    if completion is not None:
        match completion.kind:
            case "file":
                return 'COMPREPLY=( $(compgen -f -- "$cur") )'
            case "directory":
                return 'COMPREPLY=( $(compgen -d -- "$cur") )'
            case "list":
                return f'COMPREPLY=( $(compgen -W "{" ".join(completion.words)}" -- "$cur") )'
    if argument.choices:
        return f'COMPREPLY=( $(compgen -W "{" ".join(map(str, argument.choices))}" -- "$cur") )'
    return "COMPREPLY=()"


def _bash(names, command):
    root = len(names) == 1
    index = "1" if root else "$1"
    children = _children(command) if command is not None else []
    words = [name for name, _ in children]
    cases = []
    if command is not None:
        for name, argument in _switches(command):
            words.extend(argument.names)
            if isinstance(argument, Option):
                cases += [
                    f"        {"|".join(argument.names)})",
                    f"            {_bash_action(argument)}",
                    "            return",
                    "            ;;",
                ]
    words += ["-h", "--help"]

    lines = [f"{_function(names)}() {{"]
    if root:
        lines += [
            '    declare -a cur prev',
            '    cur="${COMP_WORDS[COMP_CWORD]}"',
            '    prev="${COMP_WORDS[COMP_CWORD-1]}"',
            "    COMPREPLY=()",
        ]
    lines += [
        f'    opts="{" ".join(words)}"',
        f'    if [[ $COMP_CWORD == "{index}" ]]; then',
        '        COMPREPLY=( $(compgen -W "$opts" -- "$cur") )',
        "        return",
        "    fi",
    ]
    if cases:
        lines += ["    case $prev in", *cases, "    esac"]
    if children:
        lines.append(f"    case ${{COMP_WORDS[{index}]}} in")
        for name, _ in children:
            lines += [
                f"        ({name})",
                f"            {_function([*names, name])} $(({index}+1))",
                "            return",
                "            ;;",
            ]
        lines.append("    esac")
    lines += [
        '    COMPREPLY=( $(compgen -W "$opts" -- "$cur") )',
        "}",
        "",
    ]
    script = "\n".join(lines)
    for name, child in children:
        script += _bash([*names, name], child)
    return script


def bash(root):
    """
    Return the bash completion script of a command tree.
    """
    return "#!/bin/bash\n\n" + _bash([root.name], root) + f"\ncomplete -F {_function([root.name])} {root.name}\n"


def render(root, shell="zsh", /):
    """
    Return the completion script of the tree rooted at `root` for `shell`.
    """
    match shell:
        case "zsh":
            return zsh(root)
        case "bash":
            return bash(root)
        case _:
            raise ValueError(f"completion shell must be one of {", ".join(map(repr, SHELLS))}")


__all__ = (
    "SHELLS",
    "bash",
    "render",
    "zsh",
)
