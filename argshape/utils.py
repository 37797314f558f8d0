"""
Argshape utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the specs, the matcher and the resolver.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level arguments/patterns/resolution layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent "value not provided" without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated accessors for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) as an
    immutable view (tuple/MappingProxyType/frozenset) for containers.

- ordinal(number)
  • Human-friendly ordinal label ("first", "second", ..., "11th") for token positions.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> ordinal(3)
    'third'
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate value, but the API needs a way
    to distinguish "not provided" from "provided as None". A single instance,
    Unset, is exposed for use as the default in parameters and as the
    "absent" answer of explicit lookups (see ResolvedCall.lookup).

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when Unset appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns the given object unless it is Unset, in which case the provided
    default is returned. Falsey values like None, 0, "" or () are preserved.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator

    Raises
    - TypeError when the target is not callable, the name is not a string,
      or the arity is wrong.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The property reads "_{name}" from the instance and returns an immutable
    view for containers:
    - Sequence (non-str) → tuple
    - Mapping            → MappingProxyType
    - Set                → frozenset
    - anything else      → returned as-is

    Example
    - Given self._groups, declare groups = mirror("groups").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        value = getattr(self, "_" + name)
        if isinstance(value, Sequence) and not isinstance(value, str):
            return tuple(value)
        if isinstance(value, Mapping):
            return MappingProxyType(value)
        if isinstance(value, Set):
            return frozenset(value)
        return value

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


Unset = UnsetType()
"""
Internal sentinel for "not provided".

Notes
- Singleton: there is only one Unset instance.
- Distinct from None: equality and identity checks must not treat it as None.
- Falsey: bool(Unset) is False, but it is not equivalent to None or 0.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
