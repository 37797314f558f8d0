# python
"""
Patterns module behavioral tests (groups, patterns, matcher).

Scope
- Validate group and pattern construction faults.
- Validate usage rendering.
- Validate the matcher: empty identity, bounded greedy repetition, tail
  absorption by a final text slot, absent trailing groups, under-filled
  groups.

Conventions
- Test method names follow CamelCase per project convention.
- Token kinds are produced with classify() from realistic inputs.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argshape import (
    Group,
    Pattern,
    Cursor,
    match,
    argument,
    classify,
    DefinitionError,
    FaultCode,
)


def kinds(prompt):
    return tuple(map(classify, prompt.split()))


ARGUMENTS = (
    argument("user", "str"),
    argument("amount", "int"),
    argument("unit", "str"),
    argument("ratio", "dbl"),
    argument("loud", "bool"),
    argument("note", "str"),
)


class TestGroup(TestCase):
    """Behavioral tests for Group."""

    def testEmptyGroupRejected(self):
        with self.assertRaises(DefinitionError) as context:
            Group()
        self.assertEqual(context.exception.code, FaultCode.INVALID_GROUP)

    def testRepeatMustBePositive(self):
        with self.assertRaises(DefinitionError):
            Group("amount", repeat=0)
        with self.assertRaises(TypeError):
            Group("amount", repeat="2")

    def testNamesMustBeWords(self):
        with self.assertRaises(DefinitionError):
            Group("amount unit")
        with self.assertRaises(TypeError):
            Group(1)

    def testRendering(self):
        self.assertEqual(str(Group("amount")), "[amount]")
        self.assertEqual(str(Group("amount", "unit", repeat=3)), "{[amount] [unit] x3}")


class TestPattern(TestCase):
    """Behavioral tests for Pattern construction and rendering."""

    def testUnknownSlotRejected(self):
        with self.assertRaises(DefinitionError) as context:
            Pattern("user", "missing", arguments=ARGUMENTS)
        self.assertEqual(context.exception.code, FaultCode.UNRESOLVED_SLOT)

    def testSlotNamesResolveIgnoringCase(self):
        pattern = Pattern("USER", Group("Amount"), arguments=ARGUMENTS)
        self.assertEqual(pattern.names, ("user", "amount"))
        self.assertEqual(pattern.slots(1), (ARGUMENTS[1],))

    def testNamesAreUnique(self):
        pattern = Pattern("amount", "amount", arguments=ARGUMENTS)
        self.assertEqual(pattern.names, ("amount",))

    def testUsageRendering(self):
        pattern = Pattern("user", Group("amount", "unit", repeat=3), "note", arguments=ARGUMENTS)
        self.assertEqual(str(pattern), "[user] {[amount] [unit] x3} [note]")
        self.assertEqual(pattern.usage("pay"), "pay [user] {[amount] [unit] x3} [note]")

    def testEmptyPatternUsage(self):
        self.assertEqual(Pattern(arguments=ARGUMENTS).usage("ping"), "ping")

    def testNonGroupRejected(self):
        with self.assertRaises(TypeError):
            Pattern(3, arguments=ARGUMENTS)

    def testArgumentsMustBeSpecs(self):
        with self.assertRaises(TypeError):
            Pattern("user", arguments=("user",))


class TestMatch(TestCase):
    """Behavioral tests for the matcher."""

    def testEmptyPatternMatchesEmptyInput(self):
        self.assertEqual(match(Pattern(arguments=ARGUMENTS), ()), ())

    def testEmptyPatternRejectsInput(self):
        self.assertIsNone(match(Pattern(arguments=ARGUMENTS), kinds("hello")))

    def testEmptyInputRejectsNonEmptyPattern(self):
        self.assertIsNone(match(Pattern("user", arguments=ARGUMENTS), ()))

    def testRepetitionUpToLimit(self):
        pattern = Pattern(Group("amount", repeat=3), arguments=ARGUMENTS)
        self.assertEqual(match(pattern, kinds("1")), ("amount",))
        self.assertEqual(match(pattern, kinds("1 2 3")), ("amount", "amount", "amount"))

    def testRepetitionBeyondLimitFails(self):
        pattern = Pattern(Group("amount", repeat=3), arguments=ARGUMENTS)
        self.assertIsNone(match(pattern, kinds("1 2 3 4")))

    def testRepetitionBeforeNextGroup(self):
        pattern = Pattern(Group("amount", repeat=3), "loud", arguments=ARGUMENTS)
        self.assertEqual(match(pattern, kinds("1 2 true")), ("amount", "amount", "loud"))

    def testMultiSlotGroupRepeats(self):
        pattern = Pattern(Group("amount", "unit", repeat=2), arguments=ARGUMENTS)
        self.assertEqual(match(pattern, kinds("5 kg 3 g")), ("amount", "unit", "amount", "unit"))

    def testUnderFilledGroupFailsWithoutRepeating(self):
        arguments = (argument("x", "int"), argument("y", "int"), argument("z", "int"))
        pattern = Pattern(Group("x", repeat=3), Group("y", "z"), arguments=arguments)
        self.assertIsNone(match(pattern, kinds("1 2")))
        self.assertEqual(match(pattern, kinds("1 2 3")), ("x", "y", "z"))

    def testEarlyRejectionInGroupStillRepeats(self):
        arguments = (argument("x", "int"), argument("w", "str"), argument("z", "int"))
        pattern = Pattern(Group("x", repeat=3), Group("w", "z"), arguments=arguments)
        self.assertEqual(match(pattern, kinds("1 2 a 3")), ("x", "x", "w", "z"))
        self.assertIsNone(match(pattern, kinds("1 2 a")))

    def testTrailingTextSlotAbsorbsTail(self):
        pattern = Pattern("amount", "note", arguments=ARGUMENTS)
        self.assertEqual(match(pattern, kinds("3 for the pizza")), ("amount", "note"))

    def testTrailingNonTextSlotRejectsTail(self):
        pattern = Pattern("user", "amount", arguments=ARGUMENTS)
        self.assertIsNone(match(pattern, kinds("alice 3 4")))

    def testTrailingGroupsMayBeAbsent(self):
        pattern = Pattern("amount", "loud", "note", arguments=ARGUMENTS)
        self.assertEqual(match(pattern, kinds("3")), ("amount",))

    def testRealSlotAcceptsInteger(self):
        pattern = Pattern("ratio", arguments=ARGUMENTS)
        self.assertEqual(match(pattern, kinds("2")), ("ratio",))
        self.assertEqual(match(pattern, kinds("2.5")), ("ratio",))

    def testKindMismatchFails(self):
        self.assertIsNone(match(Pattern("loud", arguments=ARGUMENTS), kinds("3")))
        self.assertIsNone(match(Pattern("amount", arguments=ARGUMENTS), kinds("2.5")))

    def testNonPatternRejected(self):
        with self.assertRaises(TypeError):
            match("amount", ())


class TestCursor(TestCase):
    """Behavioral tests for the matcher state."""

    def testStartsAtOrigin(self):
        self.assertEqual(Cursor(), (0, 0, 0, -1))

    def testRetreatAnchorsPreviousGroup(self):
        self.assertEqual(Cursor(2, 5, 0, -1).retreat(), Cursor(1, 5, 1, 1))


if __name__ == "__main__":
    unittest.main()
