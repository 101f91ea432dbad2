# python
"""
Arity fragment grammar tests.

Scope
- Fragment sources per nargs (positional and optional flavours), including rejection of
  invalid markers.
- Single-fragment matching and the shorten-from-the-end partial matcher.
- Arity expectation texts and the negative-number heuristic.

Conventions
- Test method names follow CamelCase per project convention.
- Patterns are written directly over the {O, A, -} alphabet.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argmatch.patterns import fragment, match, match_partial, expectation, looks_like_negative_number


class TestFragment(TestCase):
    def testSingleArgument(self):
        self.assertEqual(fragment(None), "(-*A-*)")
        self.assertEqual(fragment(None, optional=True), "(A)")

    def testOptionalFragmentsNeverContainSeparator(self):
        for nargs in (None, "?", "*", "+", "...", "A...", 0, 3):
            with self.subTest(nargs=nargs):
                self.assertNotIn("-", fragment(nargs, optional=True))

    def testFixedCountUsesQuantifier(self):
        self.assertEqual(fragment(3, optional=True), "(A{3})")
        self.assertEqual(fragment(3), "(-*(?:A-*){3})")

    def testInvalidMarkersRejected(self):
        for nargs in ("x", -1, True, 1.5):
            with self.subTest(nargs=nargs):
                with self.assertRaises(ValueError):
                    fragment(nargs)


class TestMatch(TestCase):
    def testSingleArgumentConsumesOne(self):
        self.assertEqual(match(None, "AA"), 1)

    def testSingleArgumentRejectsOption(self):
        self.assertIsNone(match(None, "O"))

    def testZeroOrMoreStopsAtOption(self):
        self.assertEqual(match("*", "AAO", optional=True), 2)

    def testZeroOrMoreMatchesNothing(self):
        self.assertEqual(match("*", "O", optional=True), 0)

    def testOneOrMoreNeedsArgument(self):
        self.assertIsNone(match("+", "O"))

    def testRemainderSwallowsOptions(self):
        self.assertEqual(match("...", "AOA", optional=True), 3)

    def testParserTailNeedsHead(self):
        self.assertIsNone(match("A...", "OA"))
        self.assertEqual(match("A...", "AOA"), 3)

    def testPositionalFixedCountSkipsSeparators(self):
        self.assertEqual(match(2, "A-A"), 3)

    def testOptionalFixedCountRejectsSeparators(self):
        self.assertIsNone(match(2, "A-A", optional=True))

    def testZeroCountMatchesEmpty(self):
        self.assertEqual(match(0, "A", optional=True), 0)


class TestMatchPartial(TestCase):
    def testGreedyLastSplit(self):
        self.assertEqual(match_partial([("*", False), ("+", False)], "AAA"), [2, 1])

    def testShortensFromTheEnd(self):
        self.assertEqual(match_partial([(None, False), (None, False)], "AO"), [1])

    def testNothingFits(self):
        self.assertEqual(match_partial([(None, False)], "O"), [])

    def testEmptyChain(self):
        self.assertEqual(match_partial([], "AAA"), [])

    def testOptionalPositionalYieldsToRequired(self):
        self.assertEqual(match_partial([("?", False), (None, False)], "A"), [0, 1])


class TestExpectation(TestCase):
    def testTexts(self):
        self.assertEqual(expectation(None), "expected one argument")
        self.assertEqual(expectation("?"), "expected at most one argument")
        self.assertEqual(expectation("+"), "expected at least one argument")
        self.assertEqual(expectation("A..."), "expected at least one argument")
        self.assertEqual(expectation(2), "expected 2 argument(s)")


class TestNegativeNumbers(TestCase):
    def testNumbers(self):
        for token in ("-1", "-12", "-.5", "-1.5"):
            with self.subTest(token=token):
                self.assertTrue(looks_like_negative_number(token))

    def testNotNumbers(self):
        for token in ("-x", "--1", "-1e", "-", "1"):
            with self.subTest(token=token):
                self.assertFalse(looks_like_negative_number(token))


if __name__ == "__main__":
    unittest.main()
