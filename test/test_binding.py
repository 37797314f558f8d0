# python
"""
Binding module behavioral tests (coercion, validation, bound values).

Scope
- Validate per-kind coercion (strict booleans, whole integers, reals, choices).
- Validate bound inclusivity and rounding-before-bounds.
- Validate fault details carried by validation errors.
- Validate the Value views.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argshape import (
    Value,
    bind,
    coerce,
    significant,
    argument,
    FaultCode,
    ValidationError,
    UnparsableValueError,
    NonIntegralValueError,
    BoundViolationError,
    InvalidChoiceError,
)


class TestNumbers(TestCase):
    """Behavioral tests for integer and real coercion."""

    def testIntegerLiterals(self):
        spec = argument("count", "int")
        self.assertEqual(coerce("42", spec), 42)
        self.assertEqual(coerce("-3", spec), -3)
        self.assertEqual(coerce("1e3", spec), 1000)
        self.assertIsInstance(coerce("2.0", spec), int)

    def testFractionalIntegerRejected(self):
        with self.assertRaises(NonIntegralValueError) as context:
            coerce("2.5", argument("count", "int"))
        self.assertEqual(context.exception.code, FaultCode.NON_INTEGRAL_VALUE)
        self.assertEqual(context.exception.slot, "count")
        self.assertEqual(context.exception.value, "2.5")

    def testUnparsableNumberRejected(self):
        for spec in (argument("count", "int"), argument("ratio", "dbl")):
            with self.subTest(kind=spec.kind):
                with self.assertRaises(UnparsableValueError):
                    coerce("abc", spec)

    def testRealLiterals(self):
        spec = argument("ratio", "dbl")
        self.assertEqual(coerce("0.25", spec), 0.25)
        self.assertEqual(coerce("3", spec), 3.0)
        self.assertIsInstance(coerce("3", spec), float)

    def testFloorInclusiveCeilingExclusive(self):
        spec = argument("level", "int", floor=0, ceiling=10, ceiling_inclusive=False)
        self.assertEqual(coerce("0", spec), 0)
        self.assertEqual(coerce("9", spec), 9)

        with self.assertRaises(BoundViolationError) as context:
            coerce("10", spec)
        self.assertEqual(context.exception.bound, "ceiling")
        self.assertEqual(context.exception.limit, 10)
        self.assertFalse(context.exception.inclusive)

        with self.assertRaises(BoundViolationError) as context:
            coerce("-1", spec)
        self.assertEqual(context.exception.bound, "floor")
        self.assertTrue(context.exception.inclusive)

    def testExclusiveFloor(self):
        spec = argument("ratio", "dbl", floor=0, floor_inclusive=False)
        self.assertEqual(coerce("0.001", spec), 0.001)
        with self.assertRaises(BoundViolationError):
            coerce("0", spec)

    def testRoundingHappensBeforeBounds(self):
        spec = argument("ratio", "dbl", ceiling=1.0, precision=2)
        self.assertEqual(coerce("0.999999", spec), 1.0)

    def testRoundingCanCauseViolation(self):
        spec = argument("ratio", "dbl", ceiling=1.0, ceiling_inclusive=False, precision=2)
        with self.assertRaises(BoundViolationError):
            coerce("0.999999", spec)

    def testIntegerPrecision(self):
        self.assertEqual(coerce("12345", argument("count", "int", precision=2)), 12000)


class TestSignificant(TestCase):
    """Behavioral tests for significant-figure rounding."""

    def testRoundsHalfAwayFromZero(self):
        self.assertEqual(significant(1.25, 2), 1.3)
        self.assertEqual(significant(-2.55, 2), -2.6)

    def testKeepsType(self):
        self.assertEqual(significant(12345, 2), 12000)
        self.assertIsInstance(significant(12345, 2), int)

    def testLongIntegersBeyondDecimalContext(self):
        spec = argument("serial", "int", precision=29)
        self.assertEqual(coerce("123456789012345678901234567890", spec), 123456789012345678901234567890)
        self.assertEqual(coerce("123456789012345678901234567895", spec), 123456789012345678901234567900)

    def testShortValuesUntouched(self):
        self.assertEqual(significant(0.5, 30), 0.5)
        self.assertEqual(significant(0, 2), 0)


class TestBooleans(TestCase):
    """Behavioral tests for strict boolean coercion."""

    def testTrueAndFalseIgnoreCase(self):
        spec = argument("loud", "bool")
        self.assertIs(coerce("TRUE", spec), True)
        self.assertIs(coerce("false", spec), False)

    def testAnythingElseRejected(self):
        spec = argument("loud", "bool")
        for raw in ("yes", "1", "t", ""):
            with self.subTest(raw=raw):
                with self.assertRaises(UnparsableValueError):
                    coerce(raw, spec)


class TestText(TestCase):
    """Behavioral tests for text coercion."""

    def testFreeTextUnchanged(self):
        self.assertEqual(coerce("  spaced  out ", argument("note", "str")), "  spaced  out ")

    def testChoicesAreCaseSensitive(self):
        spec = argument("mode", "str", choices=("fast", "safe"))
        self.assertEqual(coerce("fast", spec), "fast")
        with self.assertRaises(InvalidChoiceError) as context:
            coerce("FAST", spec)
        self.assertEqual(context.exception.choices, ("fast", "safe"))
        self.assertEqual(context.exception.code, FaultCode.INVALID_CHOICE)

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            coerce(3, argument("note", "str"))


class TestValue(TestCase):
    """Behavioral tests for bound values."""

    def testBindForcesCoercion(self):
        with self.assertRaises(ValidationError):
            bind("count", "many", argument("count", "int"))

    def testViews(self):
        value = bind("count", "5", argument("count", "int"))
        self.assertEqual(value.name, "count")
        self.assertEqual(value.raw, "5")
        self.assertEqual(value.payload, 5)
        self.assertEqual(value.text, "5")
        self.assertEqual(value.integer, 5)
        self.assertEqual(value.real, 5.0)
        self.assertIsNone(value.boolean)

    def testTextValueHasNoNumericView(self):
        value = bind("note", "hi", argument("note", "str"))
        self.assertIsNone(value.integer)
        self.assertIsNone(value.real)
        self.assertEqual(value.text, "hi")

    def testValueIsLazy(self):
        value = Value("count", "many", argument("count", "int"))
        self.assertEqual(value.raw, "many")
        with self.assertRaises(UnparsableValueError):
            value.payload

    def testEquality(self):
        spec = argument("count", "int")
        self.assertEqual(Value("count", "5", spec), Value("count", "5", spec))
        self.assertNotEqual(Value("count", "5", spec), Value("count", "6", spec))


if __name__ == "__main__":
    unittest.main()
