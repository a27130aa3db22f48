"""
Help renderer behavioral tests (layout, usage synthesis, styling).

Conventions
- Test method names follow CamelCase per project convention.
"""

import enum
import textwrap
import unittest
from unittest import TestCase

from rich.text import Text

from argosy import Cardinal, Option, Flag, command, group
from argosy import helps


class Level(enum.Enum):
    LOW = "low"
    HIGH = "high"


@command(epilog="See the manual for more.")
def tune(
        inputs=Cardinal("file", nargs="+", descr="Input files."),
        /,
        level=Option("--level", "-l", type=Level, default=Level.LOW, descr="How hard to tune."),
        passes=Option("--pass", type=int, required=True),
        *,
        dry_run=Flag("-n", "--dry-run", descr="Show what would be done."),
        secret=Flag("--secret", hidden=True),
):
    """
    Tune the given files.
    """


class TestUsage(TestCase):

    def testUsage(self):
        self.assertEqual(
            helps.usage(tune),
            "tune [--dry-run] [--level <level>] --pass <pass> <file> ...",
        )

    def testUsageOfBranch(self):
        root = group("tool")
        root.group("sub")
        self.assertEqual(helps.usage(root), "tool <subcommand>")

    def testUsageCardinalWithDefault(self):
        @command
        def greet(name=Cardinal(default="world"), /):
            pass

        self.assertEqual(greet.usage, "greet [<name>]")


class TestRender(TestCase):

    def testFullLayout(self):
        self.assertEqual(tune.help, textwrap.dedent("""\
            OVERVIEW: Tune the given files.

            USAGE: tune [--dry-run] [--level <level>] --pass <pass> <file> ...

            ARGUMENTS:
              <file>                  Input files.

            OPTIONS:
              -n, --dry-run           Show what would be done.
              -l, --level <level>     How hard to tune. (default: low)
              --pass <pass>
              -h, --help              Show help information.

            See the manual for more."""))

    def testLongLabelMovesDescription(self):
        @command
        def tool(x=Option("--a-really-long-option-name", descr="Described below.")):
            pass

        self.assertIn(
            "  --a-really-long-option-name <a-really-long-option-name>\n"
            "                          Described below.",
            tool.help,
        )

    def testDescriptionsWrap(self):
        @command(width=60)
        def tool(*, x=Flag("--x", descr="word " * 20)):
            pass

        rows = tool.help.split("OPTIONS:\n")[1].splitlines()
        self.assertTrue(rows[0].startswith("  --x                     word"))
        self.assertTrue(rows[1].startswith(" " * 26 + "word"))
        self.assertTrue(all(len(row) <= 60 for row in rows))

    def testDisplay(self):
        self.assertIsNone(helps.display(None))
        self.assertIsNone(helps.display(False))
        self.assertIsNone(helps.display([]))
        self.assertEqual(helps.display(Level.HIGH), "high")
        self.assertEqual(helps.display(0), "0")
        self.assertEqual(helps.display(["a", "b"]), "a b")

    def testStyledMatchesPlain(self):
        styled = helps.styled(tune)
        self.assertIsInstance(styled, Text)
        self.assertEqual(styled.plain.strip(), tune.help)
        self.assertTrue(styled.spans)


if __name__ == '__main__':
    unittest.main()
