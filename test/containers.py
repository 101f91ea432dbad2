# python
"""
Containers module behavioral tests.

Scope
- add_argument(): positional/optional split, dest inference, required rules, registries.
- Conflict policies ("error" and "resolve"), including full removal of a stripped action.
- Defaults (set_defaults/get_default/argument_default).
- Groups: back-references into the container, mutual exclusion constraints.
- Parents: actions, groups and defaults copied into a child parser.

Conventions
- Test method names follow CamelCase per project convention.
- Configuration mistakes raise ValueError/TypeError at declaration time.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argmatch import ActionsContainer, ArgumentParser, MutualExclusionError, Namespace, Store, StoreTrue


class TestAddArgument(TestCase):
    def testLongOptionDest(self):
        container = ActionsContainer()
        self.assertEqual(container.add_argument("--foo-bar").dest, "foo_bar")

    def testShortOptionDest(self):
        self.assertEqual(ActionsContainer().add_argument("-x").dest, "x")

    def testFirstLongOptionPreferred(self):
        self.assertEqual(ActionsContainer().add_argument("-x", "--long", "--other").dest, "long")

    def testExplicitDest(self):
        self.assertEqual(ActionsContainer().add_argument("-x", dest="target").dest, "target")

    def testEmptyDestRejected(self):
        with self.assertRaises(ValueError):
            ActionsContainer().add_argument("--")

    def testInvalidOptionString(self):
        with self.assertRaises(ValueError):
            ActionsContainer().add_argument("foo", "bar")

    def testPositionalDestSuppliedTwice(self):
        with self.assertRaises(ValueError):
            ActionsContainer().add_argument("foo", dest="bar")

    def testPositionalRequiredComputed(self):
        container = ActionsContainer()
        self.assertTrue(container.add_argument("a").required)
        self.assertFalse(container.add_argument("b", nargs="?").required)
        self.assertFalse(container.add_argument("c", nargs="*").required)
        self.assertTrue(container.add_argument("d", nargs="+").required)

    def testPositionalRequiredKeywordRejected(self):
        with self.assertRaises(TypeError):
            ActionsContainer().add_argument("a", required=False)

    def testUnknownAction(self):
        with self.assertRaises(ValueError):
            ActionsContainer().add_argument("--x", action="explode")

    def testUnknownType(self):
        with self.assertRaises(ValueError):
            ActionsContainer().add_argument("--x", type="hex")

    def testRegisteredType(self):
        container = ActionsContainer()
        container.register("type", "hex", lambda x: int(x, 16))
        self.assertEqual(container.add_argument("--x", type="hex").type("ff"), 255)

    def testRegisteredAction(self):
        class Upper(Store):
            def __call__(self, parser, namespace, values, option_string=None):
                setattr(namespace, self.dest, values.upper())

        container = ActionsContainer()
        container.register("action", "upper", Upper)
        self.assertIsInstance(container.add_argument("--x", action="upper"), Upper)

    def testActionClassAccepted(self):
        self.assertIsInstance(ActionsContainer().add_argument("--x", action=StoreTrue), StoreTrue)

    def testMetavarTupleMustFitNargs(self):
        container = ActionsContainer()
        with self.assertRaises(ValueError):
            container.add_argument("--p", nargs=2, metavar=("A",))
        self.assertEqual(container.add_argument("--q", nargs="+", metavar=("A", "B")).metavar, ("A", "B"))

    def testDeclarationOrderKept(self):
        container = ActionsContainer()
        actions = [container.add_argument(name) for name in ("a", "--b", "c")]
        self.assertEqual(container.actions, tuple(actions))


class TestConflicts(TestCase):
    def testErrorPolicy(self):
        container = ActionsContainer()
        container.add_argument("-x")
        with self.assertRaises(ValueError) as context:
            container.add_argument("-x", "--other")
        self.assertIn("-x", str(context.exception))

    def testResolvePolicyStripsStrings(self):
        container = ActionsContainer(conflict_handler="resolve")
        old = container.add_argument("-x", "--xx")
        new = container.add_argument("-x")
        self.assertEqual(old.option_strings, ("--xx",))
        self.assertEqual(container.actions, (old, new))

    def testResolvePolicyRemovesEmptiedAction(self):
        container = ActionsContainer(conflict_handler="resolve")
        group = container.add_argument_group("g")
        old = group.add_argument("--xx")
        new = container.add_argument("--xx")
        self.assertNotIn(old, container.actions)
        self.assertNotIn(old, group.actions)
        self.assertIn(new, container.actions)

    def testUnknownPolicy(self):
        with self.assertRaises(ValueError):
            ActionsContainer(conflict_handler="ignore")


class TestDefaults(TestCase):
    def testSetDefaultsRewritesActions(self):
        container = ActionsContainer()
        action = container.add_argument("--x", default=1)
        container.set_defaults(x=2)
        self.assertEqual(action.default, 2)
        self.assertEqual(container.get_default("x"), 2)

    def testDefaultsApplyToLaterArguments(self):
        container = ActionsContainer()
        container.set_defaults(x=3)
        self.assertEqual(container.add_argument("--x").default, 3)

    def testGetDefaultWithoutAction(self):
        container = ActionsContainer()
        container.set_defaults(func="handler")
        self.assertEqual(container.get_default("func"), "handler")
        self.assertIsNone(container.get_default("missing"))

    def testArgumentDefault(self):
        container = ActionsContainer(argument_default=5)
        self.assertEqual(container.add_argument("--n").default, 5)
        self.assertEqual(container.add_argument("--m", default=6).default, 6)


class TestGroups(TestCase):
    def testGroupForwardsToContainer(self):
        container = ActionsContainer()
        group = container.add_argument_group("inputs", "where data comes from")
        action = group.add_argument("--src")
        self.assertEqual(group.title, "inputs")
        self.assertEqual(group.description, "where data comes from")
        self.assertIs(group.container, container)
        self.assertIn(action, group.actions)
        self.assertIn(action, container.actions)

    def testGroupSharesConflictIndex(self):
        container = ActionsContainer()
        container.add_argument("--src")
        with self.assertRaises(ValueError):
            container.add_argument_group("g").add_argument("--src")

    def testMutexRejectsRequiredMembers(self):
        group = ActionsContainer().add_mutually_exclusive_group()
        with self.assertRaises(ValueError):
            group.add_argument("--x", required=True)
        with self.assertRaises(ValueError):
            group.add_argument("positional")

    def testMutexAcceptsOptionalPositional(self):
        group = ActionsContainer().add_mutually_exclusive_group(required=True)
        action = group.add_argument("positional", nargs="?")
        self.assertTrue(group.required)
        self.assertIn(action, group.actions)

    def testMutexInsideGroup(self):
        container = ActionsContainer()
        group = container.add_argument_group("g")
        mutex = group.add_mutually_exclusive_group()
        action = mutex.add_argument("--x")
        self.assertIn(action, mutex.actions)
        self.assertIn(action, group.actions)
        self.assertIn(action, container.actions)


class TestParents(TestCase):
    def testActionsAndDefaultsCopied(self):
        parent = ArgumentParser(add_help=False)
        parent.add_argument("--p")
        parent.set_defaults(extra=1)
        child = ArgumentParser(parents=[parent])
        self.assertEqual(child.parse_args(["--p", "x"]), Namespace(p="x", extra=1))

    def testGroupsCopiedByTitle(self):
        parent = ArgumentParser(add_help=False)
        parent.add_argument_group("io").add_argument("--src")
        child = ArgumentParser(parents=[parent])
        titles = [group.title for group in child.groups]
        self.assertEqual(titles.count("io"), 1)

    def testMutexGroupsCopied(self):
        parent = ArgumentParser(add_help=False)
        mutex = parent.add_mutually_exclusive_group()
        mutex.add_argument("-a", action="store_true")
        mutex.add_argument("-b", action="store_true")
        child = ArgumentParser(parents=[parent])
        self.assertEqual(len(child.exclusive_groups), 1)
        with self.assertRaises(MutualExclusionError):
            child.parse_args(["-a", "-b"])

    def testHelpConflictWithParent(self):
        parent = ArgumentParser()
        with self.assertRaises(ValueError):
            ArgumentParser(parents=[parent])


if __name__ == "__main__":
    unittest.main()
