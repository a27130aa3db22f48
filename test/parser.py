"""
Parser behavioral tests (routing, matching, coercion, faults).

Scope
- Validate subcommand descent and default routing.
- Validate switch forms: long, short, inline values, combined short flags, terminator.
- Validate abbreviation policies.
- Validate every input fault and its message.

Conventions
- Test method names follow CamelCase per project convention.
- Faults are asserted on parser.parse() directly; messages through Command.execute().
"""

import unittest
from unittest import TestCase

from argosy import (
    Cardinal,
    Option,
    Flag,
    CleanExit,
    DuplicatedSwitchError,
    FlagAssignmentError,
    InvalidValueError,
    MissingArgumentError,
    OptionValueRequiredError,
    UnexpectedCardinalError,
    UnknownSubcommandError,
    UnknownSwitchError,
    command,
    group,
)
from argosy.parser import parse


@command
def copy(
        source=Cardinal(),
        target=Cardinal(nargs="?"),
        /,
        mode=Option("--mode", "-m", type=int, default=644),
        tags=Option("--tag", "-t", nargs="*"),
        *,
        force=Flag("--force", "-f"),
        verbose=Flag("--verbose", "-v"),
        recursive=Flag("--recursive", "-r"),
):
    return source, target, mode, tags, force, verbose, recursive


class TestMatching(TestCase):

    def testPositionalsAndDefaults(self):
        invocation = parse(copy, ["a"])
        self.assertIs(invocation.command, copy)
        self.assertEqual(invocation.values, {
            "force": False,
            "verbose": False,
            "recursive": False,
            "mode": 644,
            "tags": [],
            "source": "a",
            "target": None,
        })
        self.assertEqual(invocation.supplied, ("source",))

    def testOptionForms(self):
        for tokens in (["--mode", "600", "a"], ["--mode=600", "a"], ["-m", "600", "a"], ["-m=600", "a"]):
            with self.subTest(tokens=tokens):
                self.assertEqual(parse(copy, tokens).values["mode"], 600)

    def testRepeatableOption(self):
        values = parse(copy, ["-t", "x", "a", "--tag=y"]).values
        self.assertEqual(values["tags"], ["x", "y"])

    def testCombinedShortFlags(self):
        values = parse(copy, ["-fvr", "a"]).values
        self.assertTrue(values["force"] and values["verbose"] and values["recursive"])

    def testCombinedShortWithOptionIsUnknown(self):
        with self.assertRaises(UnknownSwitchError):
            parse(copy, ["-fm", "a"])

    def testTerminator(self):
        values = parse(copy, ["--", "-f", "--mode"]).values
        self.assertEqual((values["source"], values["target"]), ("-f", "--mode"))
        self.assertFalse(values["force"])

    def testSingleDashIsPositional(self):
        self.assertEqual(parse(copy, ["-"]).values["source"], "-")

    def testNegativeNumberIsValue(self):
        @command
        def shift(offset=Cardinal(type=int), /, by=Option("--by", type=int, default=1)):
            pass

        values = parse(shift, ["-5", "--by", "-2"]).values
        self.assertEqual((values["offset"], values["by"]), (-5, -2))

    def testDeclaredDigitSwitch(self):
        @command
        def fetch(depth=Cardinal(type=int, nargs="?"), /, *, single=Flag("-1", "--single")):
            pass

        values = parse(fetch, ["-1", "-3"]).values
        self.assertEqual((values["single"], values["depth"]), (True, -3))
        self.assertFalse(parse(fetch, ["-2"]).values["single"])

    def testHelpInsideCombinedShortFlags(self):
        with self.assertRaises(CleanExit) as context:
            parse(copy, ["-fh", "a"])
        self.assertIs(context.exception.options["command"], copy)
        self.assertEqual(context.exception.text, copy.help)
        with self.assertRaises(UnknownSwitchError):
            parse(copy, ["-fxh", "a"])


class TestFaults(TestCase):

    def testUnknownOption(self):
        with self.assertRaises(UnknownSwitchError) as context:
            parse(copy, ["--nope", "a"])
        self.assertIs(context.exception.options["command"], copy)
        self.assertEqual(context.exception.message, "Unknown option '--nope'")

    def testUnknownInlineOptionNamesTheSwitch(self):
        self.assertEqual(copy.execute(["--nope=1"]).stderr.splitlines()[0], "Error: Unknown option '--nope'")

    def testUnexpectedArgument(self):
        with self.assertRaises(UnexpectedCardinalError):
            parse(copy, ["a", "b", "c"])
        self.assertEqual(copy.execute("a b c").stderr.splitlines()[0], "Error: Unexpected argument 'c'")

    def testMissingValue(self):
        with self.assertRaises(OptionValueRequiredError):
            parse(copy, ["a", "--mode"])
        with self.assertRaises(OptionValueRequiredError):
            parse(copy, ["--mode", "--force", "a"])
        self.assertEqual(copy.execute("a --mode").stderr.splitlines()[0], "Error: Missing value for '--mode <mode>'")

    def testDuplicateOption(self):
        with self.assertRaises(DuplicatedSwitchError):
            parse(copy, ["-f", "--force", "a"])
        with self.assertRaises(DuplicatedSwitchError):
            parse(copy, ["--mode", "1", "-m", "2", "a"])

    def testMissingRequiredArgument(self):
        with self.assertRaises(MissingArgumentError):
            parse(copy, [])
        self.assertEqual(copy.execute([]), (
            "",
            "Error: Missing expected argument '<source>'\n"
            "Usage: copy [--force] [--verbose] [--recursive] [--mode <mode>] [--tag <tag> ...] <source> [<target>]",
            64,
        ))

    def testMissingRequiredOption(self):
        @command
        def login(user=Option("--user", required=True)):
            return user

        with self.assertRaises(MissingArgumentError):
            parse(login, [])
        self.assertEqual(login.execute("--user me").stdout, "me")

    def testFlagWithValue(self):
        with self.assertRaises(FlagAssignmentError):
            parse(copy, ["--force=yes", "a"])

    def testInvalidValue(self):
        with self.assertRaises(InvalidValueError):
            parse(copy, ["--mode", "rw", "a"])
        self.assertEqual(copy.execute("--mode rw a").stderr.splitlines()[0], "Error: The value 'rw' is invalid for '--mode <mode>'")

    def testChoices(self):
        @command
        def paint(color=Cardinal(choices=("red", "blue")), /):
            return color

        self.assertEqual(paint.execute("red").stdout, "red")
        with self.assertRaises(InvalidValueError):
            parse(paint, ["green"])

    def testFirstFailureWins(self):
        self.assertEqual(copy.execute("--nope --mode rw").stderr.splitlines()[0], "Error: Unknown option '--nope'")


class TestRouting(TestCase):

    def setUp(self):
        self.root = group("tool", version="1.0", default="run")

        @self.root.command
        def run(target=Cardinal(nargs="?"), /):
            return f"run {target}"

        @self.root.command(version="2.0")
        def build(*, release=Flag("--release")):
            return f"build {release}"

        self.leaf = run
        self.build = build

    def testChildByName(self):
        self.assertIs(parse(self.root, ["build"]).command, self.build)

    def testDefaultChild(self):
        self.assertIs(parse(self.root, ["x"]).command, self.leaf)
        self.assertIs(parse(self.root, []).command, self.leaf)
        self.assertEqual(self.root.execute([]).stdout, "run None")

    def testHelpAndVersion(self):
        with self.assertRaises(CleanExit) as context:
            parse(self.root, ["build", "--version"])
        self.assertEqual(context.exception.text, "2.0")
        self.assertEqual(self.root.execute("run --version").stdout, "1.0")
        self.assertTrue(self.root.execute("build -h").stdout.startswith("USAGE: tool build [--release]"))

    def testVersionWithoutVersionIsUnknown(self):
        @command
        def bare():
            pass

        with self.assertRaises(UnknownSwitchError):
            parse(bare, ["--version"])

    def testHelpAfterTerminatorIsPositional(self):
        self.assertEqual(self.root.execute("run -- -h").stdout, "run -h")

    def testHelpPseudoSubcommand(self):
        self.assertEqual(self.root.execute("help build").stdout, self.build.help)
        with self.assertRaises(UnknownSubcommandError):
            parse(self.root, ["help", "nope"])

    def testUnknownCompletionShell(self):
        with self.assertRaises(InvalidValueError):
            parse(self.root, ["--generate-completion=fish"])

    def testInvalidDefault(self):
        root = group("tool", default="missing")
        root.group("present")
        with self.assertRaises(ValueError):
            parse(root, [])


class TestAbbreviations(TestCase):

    def build(self, abbreviations):
        @command(abbreviations=abbreviations)
        def serve(port=Option("--port", type=int, default=80), *, portable=Flag("--portable"), verbose=Flag("--verbose")):
            return port

        return serve

    def testExactRejectsPrefixes(self):
        with self.assertRaises(UnknownSwitchError):
            parse(self.build("exact"), ["--verb"])

    def testPrefixAcceptsUnambiguous(self):
        serve = self.build("prefix")
        self.assertTrue(parse(serve, ["--verb"]).values["verbose"])
        self.assertEqual(parse(serve, ["--port", "8"]).values["port"], 8)

    def testPrefixRejectsAmbiguous(self):
        with self.assertRaises(UnknownSwitchError):
            parse(self.build("prefix"), ["--po", "8"])


if __name__ == '__main__':
    unittest.main()
