"""
Argshape value binding.

Turns the raw text captured for a slot into a typed payload, enforcing the
argument spec's constraints. Every failure is a ValidationError subclass
carrying the slot name and the offending text; nothing here knows about
patterns or commands.

Rules per kind
- TEXT:    the raw text itself; must equal one of the choices when declared.
- BOOLEAN: "true"/"false" in any letter case; anything else is unparsable.
- INTEGER: a decimal literal with a whole value ("7", "1e3", "2.0").
- REAL:    any decimal literal.

Numbers are rounded to the declared precision (significant figures, half
away from zero) before the floor/ceiling checks, so a value that only
reaches a bound after rounding is judged by its rounded form.
"""
import functools
from decimal import Decimal, ROUND_HALF_UP, localcontext

from .faults import (
    FaultCode,
    UnparsableValueError,
    NonIntegralValueError,
    BoundViolationError,
    InvalidChoiceError,
)
from .kinds import Kind, number
from .utils import mirror


class Value:
    """
    A bound slot value.

    - name: the slot name the value was bound to.
    - raw: the exact text the value came from.
    - argument: the spec the text is validated against (kind comes from it).
    - payload: the coerced value (str, bool, int or float), computed once.

    The integer/real/boolean views return None when the value's kind cannot
    express the requested type; text is always the raw text.
    """
    def __init__(self, name, raw, argument, /):
        if not isinstance(name, str):
            raise TypeError("Value() first argument must be a string")
        if not isinstance(raw, str):
            raise TypeError("Value() second argument must be a string")
        self._name = name
        self._raw = raw
        self._argument = argument

    name = mirror("name")
    raw = mirror("raw")
    argument = mirror("argument")

    @property
    def kind(self):
        return self._argument.kind

    @functools.cached_property
    def payload(self):
        return coerce(self._raw, self._argument)

    @property
    def text(self):
        return self._raw

    @property
    def integer(self):
        return int(self.payload) if self.kind.numeric else None

    @property
    def real(self):
        return float(self.payload) if self.kind.numeric else None

    @property
    def boolean(self):
        return self.payload if self.kind is Kind.BOOLEAN else None

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return (self._name, self._raw, self._argument) == (other._name, other._raw, other._argument)

    def __hash__(self):
        return hash((self._name, self._raw, self._argument))

    def __repr__(self):
        return f"value(name={self._name!r}, raw={self._raw!r}, kind={self.kind!r})"

    def __rich_repr__(self):
        yield "name", self._name
        yield "raw", self._raw
        yield "kind", self.kind


def significant(value, digits, /):
    """
    Round a number to 'digits' significant figures, half away from zero.

    The result keeps the input's type: 12345 -> 12000 (int), 0.999999 -> 1.0.
    """
    if not value:
        return value
    decimal = Decimal(repr(value))
    if (length := len(decimal.as_tuple().digits)) <= digits:
        return value
    exponent = decimal.adjusted() - digits + 1
    # quantize() fails once the coefficient exceeds the context precision
    with localcontext() as context:
        context.prec = max(context.prec, length)
        return type(value)(decimal.quantize(Decimal(1).scaleb(exponent), rounding=ROUND_HALF_UP))


def _parse_number(raw, argument, /):
    if (value := number(raw)) is None:
        raise UnparsableValueError(
            f"{argument.name!r} expects {'a number' if argument.kind.decimal else 'an integer'}, got {raw!r}",
            code=FaultCode.UNPARSABLE_VALUE,
            title="unparsable value",
            hint="use a plain decimal number such as 42 or 3.5",
            slot=argument.name,
            value=raw,
        )

    if not argument.kind.decimal:
        if not value.is_integer():
            raise NonIntegralValueError(
                f"{argument.name!r} expects a whole number, got {raw!r}",
                code=FaultCode.NON_INTEGRAL_VALUE,
                title="non-integral value",
                hint="drop the fractional part",
                slot=argument.name,
                value=raw,
            )
        return int(Decimal(raw.strip()))

    return value


def _check_bounds(value, raw, argument, /):
    floor, ceiling = argument.floor, argument.ceiling

    if floor is not None and (value < floor or value == floor and not argument.floor_inclusive):
        raise BoundViolationError(
            f"{argument.name!r} must be {'at least' if argument.floor_inclusive else 'greater than'} {floor}, got {raw!r}",
            code=FaultCode.BOUND_VIOLATION,
            title="value too small",
            hint=f"{'the smallest accepted value is' if argument.floor_inclusive else 'values must stay above'} {floor}",
            slot=argument.name,
            value=raw,
            bound="floor",
            limit=floor,
            inclusive=argument.floor_inclusive,
        )

    if ceiling is not None and (value > ceiling or value == ceiling and not argument.ceiling_inclusive):
        raise BoundViolationError(
            f"{argument.name!r} must be {'at most' if argument.ceiling_inclusive else 'less than'} {ceiling}, got {raw!r}",
            code=FaultCode.BOUND_VIOLATION,
            title="value too large",
            hint=f"{'the largest accepted value is' if argument.ceiling_inclusive else 'values must stay below'} {ceiling}",
            slot=argument.name,
            value=raw,
            bound="ceiling",
            limit=ceiling,
            inclusive=argument.ceiling_inclusive,
        )


def coerce(raw, argument, /):
    """
    Convert raw text into the payload an argument spec demands.

    Raises a ValidationError subclass when the text is not a legal value.
    """
    if not isinstance(raw, str):
        raise TypeError("coerce() first argument must be a string")

    match argument.kind:
        case Kind.TEXT:
            if argument.choices is not None and raw not in argument.choices:
                raise InvalidChoiceError(
                    f"{argument.name!r} must be one of {', '.join(map(repr, argument.choices))}, got {raw!r}",
                    code=FaultCode.INVALID_CHOICE,
                    title="invalid choice",
                    hint="choices are case-sensitive",
                    slot=argument.name,
                    value=raw,
                    choices=argument.choices,
                )
            return raw

        case Kind.BOOLEAN:
            match raw.strip().lower():
                case "true":
                    return True
                case "false":
                    return False
            raise UnparsableValueError(
                f"{argument.name!r} expects a boolean, got {raw!r}",
                code=FaultCode.UNPARSABLE_VALUE,
                title="unparsable value",
                hint="use true or false",
                slot=argument.name,
                value=raw,
            )

        case Kind.INTEGER | Kind.REAL:
            value = _parse_number(raw, argument)
            if argument.precision is not None:
                value = significant(value, argument.precision)
            _check_bounds(value, raw, argument)
            return value

    raise TypeError("coerce() second argument must be an argument spec")


def bind(name, raw, argument, /):
    """
    Bind raw text to a slot and force its coercion.

    Any ValidationError surfaces here rather than on first access.
    """
    value = Value(name, raw, argument)
    value.payload
    return value


__all__ = (
    "Value",
    "significant",
    "coerce",
    "bind",
)
