"""
Tests for the Unset sentinel and the small helpers of argosy.utils.

This module verifies:
- Singleton identity, falsy semantics and representation of `Unset`.
- Copying, deep copying and finality of `UnsetType`.
- PEP 604 unions with the sentinel in isinstance checks.
- coalesce(), rename(), mirror() and kebab() contracts.
"""
import copy
import unittest
from unittest import TestCase

from argosy.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def setUp(self) -> None:
        self.unset: UnsetType = UnsetType()

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(self.unset, UnsetType())
        self.assertIs(self.unset, Unset)

    def testFalsy(self) -> None:
        self.assertFalse(self.unset)
        self.assertIsNot(self.unset, None)
        self.assertNotEqual(self.unset, 0)

    def testRepr(self) -> None:
        self.assertEqual(repr(self.unset), "Unset")

    def testCopyPreservesIdentity(self) -> None:
        self.assertIs(copy.copy(self.unset), self.unset)
        self.assertIs(copy.deepcopy(self.unset), self.unset)
        self.assertIs(copy.deepcopy([self.unset])[0], self.unset)

    def testUnion(self) -> None:
        """
        `str | Unset` can be used in isinstance checks.
        """
        self.assertIsInstance("text", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(1, str | Unset)

    def testFinal(self) -> None:
        """
        Subclassing the sentinel type raises TypeError.
        """
        with self.assertRaises(TypeError):
            class _(UnsetType):  # type: ignore[misc]
                pass


class CoalesceTest(TestCase):

    def testUnsetResolvesToDefault(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testFalseyValuesArePreserved(self):
        for value in (None, 0, "", []):
            self.assertIs(coalesce(value, "fallback"), value)


class RenameTest(TestCase):

    def testFunctionForm(self):
        def f():
            pass

        self.assertIs(rename(f, "g"), f)
        self.assertEqual(f.__name__, "g")
        self.assertEqual(f.__qualname__, "g")

    def testDecoratorForm(self):
        @rename("renamed")
        def f():
            pass

        self.assertEqual(f.__name__, "renamed")

    def testRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            rename(1, "x")

    def testRejectsWrongArity(self):
        with self.assertRaises(TypeError):
            rename()


class MirrorTest(TestCase):

    def testReadOnlyCopy(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = {"a": 1}

        holder = Holder()
        holder.items["b"] = 2
        self.assertEqual(holder.items, {"a": 1})
        with self.assertRaises(AttributeError):
            holder.items = {}


class KebabTest(TestCase):

    def testIdentifiers(self):
        self.assertEqual(kebab("hex_output"), "hex-output")
        self.assertEqual(kebab("_private__name_"), "private-name")
        self.assertEqual(kebab("Values"), "values")

    def testRejectsNonString(self):
        with self.assertRaises(TypeError):
            kebab(1)


if __name__ == '__main__':
    unittest.main()
