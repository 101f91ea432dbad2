# python
"""
Faults tests: structured exceptions, warnings, trigger() and rendering.

Scope
- ParserException carries a message plus a read-only options mapping.
- trigger(): raises in non-shell mode, prints usage + fault and exits(2) in shell mode;
  warnings go through the warnings module or the console.
- copy.replace() merges options and keeps the message.
- FaultCode normalization and getdoc() fallbacks.

Conventions
- Test method names follow CamelCase per project convention.
- Console output is captured with contextlib.redirect_stderr.
"""

from __future__ import annotations

import contextlib
import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

from argmatch import ArgumentParser
from argmatch.faults import (
    FaultCode,
    ParserException,
    ArityError,
    RequiredGroupError,
    DeprecatedArgumentWarning,
    trigger,
    getdoc,
)


def render(renderable):
    console = Console(file=io.StringIO(), width=100)
    console.print(renderable)
    return console.file.getvalue()


class TestParserException(TestCase):
    def testMessageAndOptions(self):
        fault = ArityError("argument --x: expected one argument", code=FaultCode.ARITY_MISMATCH)
        self.assertEqual(str(fault), "argument --x: expected one argument")
        self.assertIs(fault.options["code"], FaultCode.ARITY_MISMATCH)

    def testOptionsAreReadOnly(self):
        fault = ParserException("boom")
        with self.assertRaises(TypeError):
            fault.options["hint"] = "x"  # type: ignore[index]

    def testArgumentProperty(self):
        self.assertIsNone(ParserException("boom").argument)
        self.assertEqual(ParserException("boom", argument="a").argument, "a")

    def testReplaceMergesOptions(self):
        fault = RequiredGroupError("one of the arguments -a -b is required", title="required group")
        replica = copy.replace(fault, hint="pick one")
        self.assertIsInstance(replica, RequiredGroupError)
        self.assertEqual(str(replica), str(fault))
        self.assertEqual(replica.options["hint"], "pick one")
        self.assertEqual(replica.options["title"], "required group")

    def testRenderIncludesTitleMessageAndHint(self):
        fault = ArityError("expected one argument", title="wrong number", hint="give it one", colorful=False)
        output = render(fault)
        self.assertIn("Wrong Number", output)
        self.assertIn("expected one argument", output)
        self.assertIn("give it one", output)

    def testFancyRenderKeepsMessage(self):
        output = render(ArityError("expected one argument", fancy=True, colorful=False))
        self.assertIn("expected one argument", output)


class TestTrigger(TestCase):
    def testRaisesOutsideShell(self):
        with self.assertRaises(ArityError):
            trigger(ArityError("boom"))

    def testRaisedFaultCarriesOptions(self):
        with self.assertRaises(ArityError) as context:
            trigger(ArityError("boom"), hint="try again")
        self.assertEqual(context.exception.options["hint"], "try again")

    def testShellPrintsUsageAndExits(self):
        parser = ArgumentParser(prog="tool")
        buffer = io.StringIO()
        with contextlib.redirect_stderr(buffer):
            with self.assertRaises(SystemExit) as context:
                trigger(ArityError("boom"), parser=parser, shell=True, colorful=False)
        self.assertEqual(context.exception.code, 2)
        self.assertIn("usage: tool", buffer.getvalue())
        self.assertIn("boom", buffer.getvalue())

    def testWarningOutsideShell(self):
        with self.assertWarns(DeprecatedArgumentWarning):
            trigger(DeprecatedArgumentWarning("old"))

    def testWarningInShellPrints(self):
        buffer = io.StringIO()
        with contextlib.redirect_stderr(buffer):
            trigger(DeprecatedArgumentWarning("option '--old' is deprecated"), shell=True, colorful=False)
        self.assertIn("option '--old' is deprecated", buffer.getvalue())

    def testRejectsNonTriggerable(self):
        with self.assertRaises(TypeError):
            trigger(object())


class TestFaultCode(TestCase):
    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.ARITY_MISMATCH.normalize(), "21101")

    def testGetdocFallsBackToNone(self):
        self.assertIsNone(getdoc(FaultCode.INVALID_CHOICE))

    def testGetdocRejectsPlainIntegers(self):
        with self.assertRaises(TypeError):
            getdoc(21101)

    def testCodesAreUnique(self):
        self.assertEqual(len({code.value for code in FaultCode}), len(FaultCode))


if __name__ == "__main__":
    unittest.main()
