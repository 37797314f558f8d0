r"""
Argshape argument specifications.

Overview
- Specs
  • TextArgument: free text, optionally restricted to an exact set of choices.
  • BooleanArgument: "true"/"false" (case-insensitive).
  • NumberArgument: integer or real number with optional floor/ceiling (each
    independently inclusive or exclusive) and significant-figure precision.
  • argument(name, kind, **metadata): pick the right spec from a Kind or a
    kind name ("int", "dbl", "bool", "str", ...).

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes
    the fields listed in __introspectable__ as read-only properties.

Metadata (sanitized on construction)
- Shared (all specs)
  • name: non-empty, whitespace-free string; matched case-insensitively.
  • descr: Unset | str (short help), non-empty when provided.
  • default: Unset | str | bool | int | float; stored as raw text and checked
    against the spec itself, so a broken default fails at definition time.
- Text only
  • choices: Iterable[str]; exact, case-sensitive membership; no duplicates.
- Number only
  • kind: Kind.INTEGER or Kind.REAL.
  • floor/ceiling: int | float; floor <= ceiling.
  • floor_inclusive/ceiling_inclusive: bool (default True).
  • precision: int >= 1 (maximum significant figures, applied before bounds).

Errors
- TypeError for Python-type misuse (a non-string name, a non-number bound).
- DefinitionError for semantic declaration faults (inverted bounds, empty
  names, illegal defaults, metadata a kind cannot carry).

Quick example:
    >>> from argshape.arguments import argument, NumberArgument
    >>> count = NumberArgument("count", "int", floor=1, ceiling=100, default=1)
    >>> mode = argument("mode", "str", choices=("fast", "safe"))
"""
import functools
import math
import operator
import re
from collections.abc import Iterable, Set

from rich.text import Text

from .faults import DefinitionError, FaultCode, ValidationError
from .kinds import Kind
from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns spec classes into introspectable descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and usage output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - number-argument(name='count', kind=<Kind.INTEGER: 'integer'>, ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate metadata shared by every spec.

    - name: must be a string; trimmed; non-empty and free of whitespace.
    - descr: Unset or a non-empty string/Text (trimmed); Unset becomes None.

    Mutates the metadata dict in place.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()) or re.search(r"\s", name):
        raise DefinitionError(
            f"{cls.__typename__} 'name' must be a non-empty word, got {metadata['name']!r}",
            code=FaultCode.INVALID_NAME
        )
    metadata["name"] = name

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise DefinitionError(f"{cls.__typename__} 'descr' cannot be empty", code=FaultCode.INVALID_METADATA)
    metadata["descr"] = coalesce(descr)


def _sanitize_default(cls, metadata, /):
    """
    Internal: normalize the declared default into raw text.

    Booleans become "true"/"false", numbers their decimal spelling. Unset
    (no default declared) becomes None. The text itself is validated later,
    once the spec is complete (see _check_default).
    """
    match default := metadata["default"]:
        case UnsetType():
            metadata["default"] = None
        case bool():
            metadata["default"] = "true" if default else "false"
        case int() | float():
            metadata["default"] = repr(default)
        case str():
            metadata["default"] = default
        case _:
            raise TypeError(f"{cls.__typename__} 'default' must be a string, a boolean or a number")


def _sanitize_textual_metadata(cls, metadata, /):
    """
    Internal: validate 'choices' for text specs.

    - Unset means any text is legal (stored as None).
    - Otherwise an iterable of strings without duplicates; sets are sorted
      for stable display, other iterables keep their order.
    """
    if (choices := metadata["choices"]) is Unset:
        metadata["choices"] = None
        return

    if isinstance(choices, str) or not isinstance(choices, Iterable):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")

    sanitized = []
    for choice in sorted(choices) if isinstance(choices, Set) else choices:
        if not isinstance(choice, str):
            raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
        if choice in sanitized:
            raise DefinitionError(
                f"{cls.__typename__} 'choices' cannot contain duplicates ({choice!r})",
                code=FaultCode.INVALID_METADATA
            )
        sanitized.append(choice)

    if not sanitized:
        raise DefinitionError(f"{cls.__typename__} 'choices' cannot be empty", code=FaultCode.INVALID_METADATA)
    metadata["choices"] = tuple(sanitized)


def _sanitize_numeric_metadata(cls, metadata, /):
    """
    Internal: validate kind, bounds and precision for number specs.

    - kind: INTEGER or REAL (parsed from a name when given as a string).
    - floor/ceiling: Unset or a finite-comparable int/float (not bool);
      floor must not exceed ceiling.
    - precision: Unset or an int >= 1.
    """
    try:
        kind = Kind.parse(metadata["kind"])
    except ValueError as exception:
        raise DefinitionError(f"{cls.__typename__} {exception}", code=FaultCode.INVALID_METADATA) from None
    if not kind.numeric:
        raise DefinitionError(
            f"{cls.__typename__} 'kind' must be a number kind, got {kind}",
            code=FaultCode.MISPLACED_METADATA
        )
    metadata["kind"] = kind

    for bound in ("floor", "ceiling"):
        if (value := metadata[bound]) is Unset:
            metadata[bound] = None
            continue
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise TypeError(f"{cls.__typename__} '{bound}' must be a number")
        if math.isnan(value):
            raise DefinitionError(f"{cls.__typename__} '{bound}' cannot be NaN", code=FaultCode.INVALID_METADATA)

    if None not in (floor := metadata["floor"], ceiling := metadata["ceiling"]) and floor > ceiling:
        raise DefinitionError(
            f"{cls.__typename__} 'floor' ({floor!r}) cannot exceed 'ceiling' ({ceiling!r})",
            code=FaultCode.INVERTED_BOUNDS
        )

    if (precision := metadata["precision"]) is Unset:
        metadata["precision"] = None
    elif isinstance(precision, bool) or not isinstance(precision, int):
        raise TypeError(f"{cls.__typename__} 'precision' must be an integer")
    elif precision < 1:
        raise DefinitionError(
            f"{cls.__typename__} 'precision' must be a positive integer",
            code=FaultCode.INVALID_METADATA
        )


def _check_default(self, /):
    """
    Internal: run a declared default through the spec's own coercion so an
    illegal default fails loudly at definition time instead of at call time.
    """
    if self.default is None:
        return

    from .binding import coerce

    try:
        coerce(self.default, self)
    except ValidationError as exception:
        raise DefinitionError(
            f"{type(self).__typename__} {self.name!r} has an illegal default: {exception.message}",
            code=FaultCode.INVALID_DEFAULT
        ) from exception


class Argument(metaclass=ArgumentType):
    """
    Base of every argument spec.

    Do not instantiate directly; use TextArgument, BooleanArgument,
    NumberArgument or the argument() factory.
    """
    __metadata__ = ()

    def __new__(cls, *args, **kwargs):
        if cls is Argument:
            raise TypeError("Argument cannot be instantiated directly; use argument() or a concrete spec")
        return super().__new__(cls)

    @property
    def key(self):
        """Case-insensitive lookup key of the spec's name."""
        return self.name.casefold()

    def matches(self, name, /):
        """
        Return True when 'name' designates this spec (case-insensitive).
        """
        return isinstance(name, str) and name.strip().casefold() == self.key

    def _build(self, metadata, /):
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        _check_default(self)
        return self


class TextArgument(Argument):
    """
    Free-text argument.

    When choices are declared, the bound value must equal one of them exactly
    (case-sensitive); otherwise any text is legal. A text slot placed last in
    a pattern also absorbs every trailing token of the input.
    """

    __introspectable__ = (
        "name",
        "kind",
        "default",
        "choices",
        "descr",
    )
    __metadata__ = ("default", "choices", "descr")

    def __init__(self, name, /, default=Unset, choices=Unset, descr=Unset):
        metadata = {
            "name": name,
            "kind": Kind.TEXT,
            "default": default,
            "choices": choices,
            "descr": descr,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_default(type(self), metadata)
        _sanitize_textual_metadata(type(self), metadata)
        self._build(metadata)


class BooleanArgument(Argument):
    """
    Boolean argument; accepts "true"/"false" in any letter case.
    """

    __introspectable__ = (
        "name",
        "kind",
        "default",
        "descr",
    )
    __metadata__ = ("default", "descr")

    def __init__(self, name, /, default=Unset, descr=Unset):
        metadata = {
            "name": name,
            "kind": Kind.BOOLEAN,
            "default": default,
            "descr": descr,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_default(type(self), metadata)
        self._build(metadata)


class NumberArgument(Argument):
    """
    Integer or real argument with optional bounds and precision.

    Parameters
    - name: argument name (case-insensitive identifier within a command).
    - kind: Kind.INTEGER / Kind.REAL or a kind name ("int", "dbl", ...).
    - default: raw default (number or text), validated against this spec.
    - floor, ceiling: optional limits; each inclusive unless the matching
      *_inclusive flag is False.
    - precision: maximum significant figures; values are rounded to it
      (half away from zero) before the bound checks.
    - descr: short description.
    """

    __introspectable__ = (
        "name",
        "kind",
        "default",
        "floor",
        "ceiling",
        "floor_inclusive",
        "ceiling_inclusive",
        "precision",
        "descr",
    )
    __metadata__ = (
        "default",
        "floor",
        "ceiling",
        "floor_inclusive",
        "ceiling_inclusive",
        "precision",
        "descr",
    )

    def __init__(
            self,
            name,
            kind=Kind.REAL,
            /,
            default=Unset,
            floor=Unset,
            ceiling=Unset,
            *,
            floor_inclusive=True,
            ceiling_inclusive=True,
            precision=Unset,
            descr=Unset
    ):
        metadata = {
            "name": name,
            "kind": kind,
            "default": default,
            "floor": floor,
            "ceiling": ceiling,
            "floor_inclusive": bool(floor_inclusive),
            "ceiling_inclusive": bool(ceiling_inclusive),
            "precision": precision,
            "descr": descr,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_default(type(self), metadata)
        _sanitize_numeric_metadata(type(self), metadata)
        self._build(metadata)


def argument(name, kind, /, **metadata):
    """
    Build the spec matching a kind.

    Usage
    - argument("count", "int", floor=1, ceiling=6)
    - argument("mode", Kind.TEXT, choices=("fast", "safe"))
    - argument("loud", "bool", default=False)

    Behavior
    - kind may be a Kind or any name accepted by Kind.parse().
    - metadata the kind cannot carry (bounds on text, choices on numbers, ...)
      is rejected with a DefinitionError instead of being silently ignored.

    Returns
    - TextArgument | BooleanArgument | NumberArgument
    """
    try:
        kind = Kind.parse(kind)
    except ValueError as exception:
        raise DefinitionError(f"argument {name!r}: {exception}", code=FaultCode.INVALID_METADATA) from None

    match kind:
        case Kind.TEXT:
            cls = TextArgument
        case Kind.BOOLEAN:
            cls = BooleanArgument
        case Kind.INTEGER | Kind.REAL:
            cls = NumberArgument

    for option in metadata:
        if option not in cls.__metadata__:
            raise DefinitionError(
                f"{kind} argument {name!r} cannot declare {option!r}",
                code=FaultCode.MISPLACED_METADATA
            )

    if cls is NumberArgument:
        return NumberArgument(name, kind, **metadata)
    return cls(name, **metadata)


__all__ = (
    # Classes (specifications)
    "Argument",
    "TextArgument",
    "BooleanArgument",
    "NumberArgument",

    # Factory
    "argument",
)
