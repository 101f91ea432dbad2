# python
"""
Namespace tests: attribute storage, equality, membership and representation.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argmatch import Namespace


class TestNamespace(TestCase):
    def testKeywordsBecomeAttributes(self):
        namespace = Namespace(foo=1, bar="x")
        self.assertEqual(namespace.foo, 1)
        self.assertEqual(namespace.bar, "x")

    def testEquality(self):
        self.assertEqual(Namespace(a=1), Namespace(a=1))
        self.assertNotEqual(Namespace(a=1), Namespace(a=2))
        self.assertNotEqual(Namespace(a=1), {"a": 1})

    def testContains(self):
        namespace = Namespace(a=1)
        self.assertIn("a", namespace)
        self.assertNotIn("b", namespace)

    def testNonIdentifierKeys(self):
        namespace = Namespace()
        setattr(namespace, "foo-bar", 1)
        self.assertIn("foo-bar", namespace)
        self.assertEqual(vars(namespace), {"foo-bar": 1})

    def testReprIsSorted(self):
        self.assertEqual(repr(Namespace(b="x", a=1)), "namespace(a=1, b='x')")

    def testUnhashable(self):
        with self.assertRaises(TypeError):
            hash(Namespace())


if __name__ == "__main__":
    unittest.main()
