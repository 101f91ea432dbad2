# python
"""
Utilities tests.

Scope
- rename (decorator form), mirror (frozen and verbatim views), ordinal.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from types import MappingProxyType
from unittest import TestCase

from argmatch.utils import rename, mirror, ordinal


class TestRename(TestCase):
    def testDecoratorSetsNames(self):
        @rename("h")
        def f():
            pass

        self.assertEqual(f.__name__, "h")
        self.assertEqual(f.__qualname__, "h")

    def testRejectsNonString(self):
        with self.assertRaises(TypeError):
            rename(1)


class Holder:
    items = mirror("items")
    mapping = mirror("mapping")
    raw = mirror("raw", frozen=False)

    def __init__(self):
        self._items = [1, 2]
        self._mapping = {"a": 1}
        self._raw = [3]


class TestMirror(TestCase):
    def testSequenceFrozenToTuple(self):
        self.assertEqual(Holder().items, (1, 2))

    def testMappingIsReadOnlyView(self):
        holder = Holder()
        self.assertIsInstance(holder.mapping, MappingProxyType)
        with self.assertRaises(TypeError):
            holder.mapping["b"] = 2  # type: ignore[index]

    def testVerbatimKeepsIdentity(self):
        holder = Holder()
        self.assertIs(holder.raw, holder._raw)

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            Holder().items = ()

    def testRejectsNonString(self):
        with self.assertRaises(TypeError):
            mirror(1)


class TestOrdinal(TestCase):
    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(112), "112th")


if __name__ == "__main__":
    unittest.main()
