"""
Arguments module behavioral tests.

Scope
- Validate public specs (Cardinal, Option, Flag): construction, normalization, arities.
- Validate decorator/factory helpers (cardinal/option/flag): single binding and forwarding.
- Validate metadata constraints (descr, names, choices, enum types, completions).

Conventions
- Test method names follow CamelCase per project convention.
"""

import enum
import unittest
from unittest import TestCase

from argosy import Cardinal, Option, Flag, Completion, cardinal, option, flag


class Kind(enum.Enum):
    MEAN = "mean"
    MEDIAN = "median"


class TestCardinal(TestCase):
    """Behavioral tests for Cardinal (positional) specifications."""

    def testCardinalDefaults(self):
        c = Cardinal()
        self.assertIsNone(c.metavar)
        self.assertIs(c.type, str)
        self.assertIsNone(c.nargs)
        self.assertIsNone(c.descr)
        self.assertTrue(c.required)
        self.assertFalse(c.repeating)

    def testCardinalDescrExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            Cardinal(descr=None)

    def testCardinalDescrBlankRejected(self):
        with self.assertRaises(ValueError):
            Cardinal(descr="   ")

    def testCardinalMetavarAngleBracketsDropped(self):
        self.assertEqual(Cardinal("<file>").metavar, "file")

    def testCardinalMetavarMustBeNonEmpty(self):
        with self.assertRaises(ValueError):
            Cardinal("<>")

    def testCardinalArities(self):
        self.assertFalse(Cardinal(nargs="?").required)
        self.assertTrue(Cardinal(nargs="*").repeating)
        self.assertFalse(Cardinal(nargs="*").required)
        self.assertTrue(Cardinal(nargs="+").repeating)
        self.assertTrue(Cardinal(nargs="+").required)

    def testCardinalUnknownArityRejected(self):
        with self.assertRaises(ValueError):
            Cardinal(nargs="...")
        with self.assertRaises(TypeError):
            Cardinal(nargs=2)

    def testCardinalSingleWithDefaultIsOptional(self):
        self.assertFalse(Cardinal(default="x").required)

    def testCardinalRepeatingDefaultRejected(self):
        with self.assertRaises(TypeError):
            Cardinal(nargs="*", default=["a"])

    def testCardinalTypeMustBeCallable(self):
        with self.assertRaises(TypeError):
            Cardinal(type="int")

    def testCardinalEnumTypeProvidesChoices(self):
        self.assertEqual(Cardinal(type=Kind).choices, ("mean", "median"))

    def testCardinalDuplicateChoicesRejected(self):
        with self.assertRaises(ValueError):
            Cardinal(choices=("a", "a"))

    def testCardinalStringChoicesRejected(self):
        with self.assertRaises(TypeError):
            Cardinal(choices="abc")

    def testCardinalValidatorForwarding(self):
        received = []

        @cardinal(type=int, nargs="*")
        def values(*values):
            received.append(values)

        self.assertIsInstance(values, Cardinal)
        values(1, 2, 3)
        self.assertEqual(received, [(1, 2, 3)])

    def testCardinalWithoutValidatorIsNoop(self):
        self.assertIsNone(Cardinal()("anything"))

    def testCardinalRepr(self):
        self.assertTrue(repr(Cardinal("file")).startswith("cardinal(metavar='file', "))


class TestOption(TestCase):
    """Behavioral tests for Option (named, valued) specifications."""

    def testOptionNamesKeepDeclarationOrder(self):
        self.assertEqual(Option("--output", "-o").names, ("--output", "-o"))

    def testOptionRequiresName(self):
        with self.assertRaises(TypeError):
            Option()

    def testOptionInvalidNamesRejected(self):
        for name in ("output", "-oo", "---x", "--_x", "--x-", "-"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                Option(name)

    def testOptionDuplicateNamesRejected(self):
        with self.assertRaises(ValueError):
            Option("--kind", "--kind")

    def testOptionRepeatable(self):
        self.assertTrue(Option("--tag", nargs="*").repeating)
        with self.assertRaises(ValueError):
            Option("--tag", nargs="?")

    def testOptionRequiredWithDefaultRejected(self):
        with self.assertRaises(TypeError):
            Option("--kind", required=True, default="x")

    def testOptionEnumDefault(self):
        o = Option("--kind", type=Kind, default=Kind.MEAN)
        self.assertIs(o.default, Kind.MEAN)
        self.assertEqual(o.choices, ("mean", "median"))

    def testOptionCompletionMustBeCompletion(self):
        with self.assertRaises(TypeError):
            Option("--file", completion="file")
        self.assertEqual(Option("--file", completion=Completion.file()).completion, Completion.file())

    def testOptionDecoratorBindsOnce(self):
        @option("--port", type=int)
        def port(value):
            return value * 2

        self.assertEqual(port(21), 42)

        bind = option("--port")
        bind(lambda value: None)
        with self.assertRaises(TypeError):
            bind(lambda value: None)


class TestFlag(TestCase):
    """Behavioral tests for Flag (presence-only) specifications."""

    def testFlagDefaultIsFalse(self):
        self.assertIs(Flag("--verbose").default, False)

    def testFlagHidden(self):
        self.assertTrue(Flag("--debug", hidden=True).hidden)

    def testFlagDecorator(self):
        seen = []

        @flag("--verbose", "-v", descr="Talk more.")
        def verbose(value):
            seen.append(value)

        self.assertEqual(verbose.names, ("--verbose", "-v"))
        self.assertEqual(verbose.descr, "Talk more.")
        verbose(True)
        self.assertEqual(seen, [True])

    def testFlagDecoratorRequiresCallable(self):
        with self.assertRaises(TypeError):
            flag("--verbose")(1)

    def testSpecsAreReadOnly(self):
        with self.assertRaises(AttributeError):
            Flag("--verbose").names = ("--loud",)


class TestCompletion(TestCase):

    def testKinds(self):
        self.assertEqual(Completion.file("txt", ".md").words, ("txt", "md"))
        self.assertEqual(Completion.directory().kind, "directory")
        self.assertEqual(Completion.list("a", "b").words, ("a", "b"))

    def testListRequiresWords(self):
        with self.assertRaises(TypeError):
            Completion.list()

    def testImmutable(self):
        with self.assertRaises(AttributeError):
            Completion.directory().kind = "file"

    def testEquality(self):
        self.assertEqual(Completion.file(), Completion.file())
        self.assertNotEqual(Completion.file(), Completion.directory())
        self.assertEqual(len({Completion.file(), Completion.file()}), 1)


if __name__ == '__main__':
    unittest.main()
