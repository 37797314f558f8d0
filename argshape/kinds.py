"""
Argshape data kinds and token classification.

Overview
- Kind: the closed set of data kinds a slot may declare (text, boolean,
  integer, real). Every kind-dependent behaviour in the package is a match
  statement over these four members.
- classify(token): provisional kind of a raw input token. Used only to filter
  candidate patterns quickly; legality of the value is decided by binding.
- accepts(slot, token): the slot-kind vs token-kind compatibility rule.

Classification order
1. INTEGER  a decimal numeric literal whose value is whole ("7", "-3", "1e3", "2.0")
2. REAL     any other decimal numeric literal ("0.5", "-1.25e-3", ".5")
3. BOOLEAN  "true"/"false", case-insensitively
4. TEXT     anything else (including "nan", "inf" and "1_000")

Compatibility
- TEXT slots accept every token kind.
- BOOLEAN slots accept BOOLEAN tokens only.
- INTEGER slots accept INTEGER tokens only.
- REAL slots accept INTEGER and REAL tokens (an integer literal is a valid real).
"""
import math
import re
from enum import Enum

# Plain decimal literals only: no underscores, no hex, no nan/inf spellings.
NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


class Kind(Enum):
    """
    closed set of argument data kinds.

    each member's value is its display name, as used in usage lines and
    fault messages.
    """
    TEXT = "text"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    REAL = "real"

    @classmethod
    def parse(cls, name, /):
        """
        Resolve a kind from a member or a case-insensitive name.

        Accepted names
        - text:    "str", "string", "text"
        - boolean: "bool", "boolean"
        - integer: "int", "integer"
        - real:    "dbl", "double", "float", "real"

        Raises
        - TypeError: when name is neither a Kind nor a string.
        - ValueError: when the name is not recognized.
        """
        if isinstance(name, Kind):
            return name
        if not isinstance(name, str):
            raise TypeError("Kind.parse() argument must be a kind or a string")
        match name.strip().lower():
            case "str" | "string" | "text":
                return cls.TEXT
            case "bool" | "boolean":
                return cls.BOOLEAN
            case "int" | "integer":
                return cls.INTEGER
            case "dbl" | "double" | "float" | "real":
                return cls.REAL
            case _:
                raise ValueError(f"unknown argument kind {name!r}")

    @property
    def numeric(self):
        """True for INTEGER and REAL."""
        return self in (Kind.INTEGER, Kind.REAL)

    @property
    def decimal(self):
        """True for kinds carrying decimal precision (REAL)."""
        return self is Kind.REAL

    def __str__(self):
        return self.value


def number(token, /):
    """
    Parse a plain decimal literal into a float, or return None.

    Only literals matching NUMBER are accepted, so spellings Python's float()
    would otherwise take ("nan", "inf", "1_000") stay non-numeric. Literals
    overflowing to infinity are rejected as well.
    """
    if not NUMBER.fullmatch(token := token.strip()):
        return None
    value = float(token)
    return value if math.isfinite(value) else None


def classify(token, /):
    """
    Return the provisional Kind of a raw token. Never fails.
    """
    if not isinstance(token, str):
        raise TypeError("classify() argument must be a string")
    if (value := number(token)) is not None:
        return Kind.INTEGER if value.is_integer() else Kind.REAL
    if token.strip().lower() in ("true", "false"):
        return Kind.BOOLEAN
    return Kind.TEXT


def accepts(slot, token, /):
    """
    Decide whether a slot of kind 'slot' can take a token classified as 'token'.
    """
    match slot:
        case Kind.TEXT:
            return True
        case Kind.BOOLEAN:
            return token is Kind.BOOLEAN
        case Kind.INTEGER:
            return token is Kind.INTEGER
        case Kind.REAL:
            return token in (Kind.INTEGER, Kind.REAL)
    raise TypeError("accepts() first argument must be a kind")


__all__ = (
    "Kind",
    "number",
    "classify",
    "accepts",
)
