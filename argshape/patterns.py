"""
Argshape patterns: ordered slot groups and the matcher that fits token kinds
onto them.

Shape
- Group: one or more slot names matched contiguously as a unit, repeatable
  up to 'repeat' consecutive times.
- Pattern: an ordered sequence of groups whose slot names are resolved
  (case-insensitively) against a command's argument specs at construction.
- match(pattern, kinds): the matcher. Returns the slot names in matched order,
  or None when the pattern cannot produce the token kinds.

Rendering
    >>> str(pattern)
    '[user] {[amount] [unit] x3} [note]'

Matching rules (left to right, no backtracking past one repeat step)
- Groups are tried in order; a group fits when enough tokens remain and every
  slot accepts its token's kind.
- When a slot rejects its token, or every group is used up while tokens
  remain, the previous group is tried once more if its repeat budget allows.
- A group whose slots all accept the remaining tokens but lacks tokens for
  its last slots ends the match as a failure; no repeat is attempted.
- Tokens left over after the final group are absorbed by that group's last
  slot when it is a text slot; otherwise the pattern fails.
- Groups left over after the tokens run out are simply absent.
"""
import re
from collections.abc import Iterable
from typing import NamedTuple

from .arguments import Argument
from .faults import DefinitionError, FaultCode
from .kinds import Kind, accepts
from .utils import *


class Group:
    """
    Contiguous slot names, optionally repeatable.

    Parameters
    - *names: one or more slot names (whitespace-free strings).
    - repeat: maximum number of consecutive occurrences (>= 1).
    """

    def __init__(self, *names, repeat=1):
        if not names:
            raise DefinitionError("group must name at least one slot", code=FaultCode.INVALID_GROUP)
        sanitized = []
        for name in names:
            if not isinstance(name, str):
                raise TypeError("group slot names must be strings")
            if not (name := name.strip()) or re.search(r"\s", name):
                raise DefinitionError(f"group slot name {name!r} is not a single word", code=FaultCode.INVALID_GROUP)
            sanitized.append(name)

        if isinstance(repeat, bool) or not isinstance(repeat, int):
            raise TypeError("group 'repeat' must be an integer")
        if repeat < 1:
            raise DefinitionError(f"group 'repeat' must be at least 1, got {repeat}", code=FaultCode.INVALID_GROUP)

        self._names = tuple(sanitized)
        self._repeat = repeat

    names = mirror("names")
    repeat = mirror("repeat")

    def __len__(self):
        return len(self._names)

    def __iter__(self):
        return iter(self._names)

    def __str__(self):
        rendered = " ".join(f"[{name}]" for name in self._names)
        return f"{{{rendered} x{self._repeat}}}" if self._repeat > 1 else rendered

    def __repr__(self):
        return f"group({', '.join(map(repr, self._names))}, repeat={self._repeat})"

    def __rich_repr__(self):
        yield "names", self._names
        yield "repeat", self._repeat


class Pattern:
    """
    An ordered list of groups bound to argument specs.

    Parameters
    - *groups: Group instances; a bare string stands for a one-slot group.
    - arguments: the specs slot names resolve against (case-insensitive).
    - index: 1-based position among the owning command's patterns (display only).

    Raises
    - DefinitionError: a slot name matches no argument (UNRESOLVED_SLOT).
    - TypeError: groups or arguments of the wrong Python type.
    """

    def __init__(self, *groups, arguments, index=1):
        if isinstance(arguments, Argument) or not isinstance(arguments, Iterable):
            raise TypeError("pattern 'arguments' must be an iterable of argument specs")
        lookup = {}
        for argument in arguments:
            if not isinstance(argument, Argument):
                raise TypeError("pattern 'arguments' must be an iterable of argument specs")
            lookup.setdefault(argument.key, argument)

        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError("pattern 'index' must be an integer")

        sanitized = []
        slots = []
        for group in groups:
            match group:
                case Group():
                    pass
                case str():
                    group = Group(group)
                case _:
                    raise TypeError("pattern groups must be groups or slot names")
            resolved = []
            for name in group:
                if (argument := lookup.get(name.casefold())) is None:
                    raise DefinitionError(
                        f"the {ordinal(index)} pattern refers to unknown argument {name!r}",
                        code=FaultCode.UNRESOLVED_SLOT
                    )
                resolved.append(argument)
            sanitized.append(group)
            slots.append(tuple(resolved))

        self._groups = tuple(sanitized)
        self._slots = tuple(slots)
        self._index = index

    groups = mirror("groups")
    index = mirror("index")

    def slots(self, group, /):
        """
        Return the argument specs of the group at position 'group'.
        """
        return self._slots[group]

    @property
    def arguments(self):
        """Argument specs used by this pattern, unique, in first-use order."""
        return tuple({id(argument): argument for slots in self._slots for argument in slots}.values())

    @property
    def names(self):
        """Canonical slot names, unique, in first-use order."""
        return tuple(argument.name for argument in self.arguments)

    def usage(self, prog, /):
        """
        Render a usage line: the program name followed by the pattern shape.
        """
        return f"{prog} {self}".rstrip()

    def __len__(self):
        return len(self._groups)

    def __str__(self):
        return " ".join(
            str(Group(*(argument.name for argument in slots), repeat=group.repeat))
            for group, slots in zip(self._groups, self._slots)
        )

    def __repr__(self):
        return f"pattern({str(self)!r}, index={self._index})"

    def __rich_repr__(self):
        yield "groups", self._groups
        yield "index", self._index


class Cursor(NamedTuple):
    """
    Matcher state threaded through each step.

    - group: index of the next group to try.
    - token: index of the next unconsumed token.
    - repeat: extra occurrences already spent on the anchored group.
    - anchor: index of the group currently being repeated (-1 for none).
    """
    group: int = 0
    token: int = 0
    repeat: int = 0
    anchor: int = -1

    def retreat(self):
        return Cursor(self.group - 1, self.token, self.repeat + 1, self.group - 1)


def _fits(slots, kinds, start, /):
    """
    Check a group's slots against the tokens from 'start', slot by slot.

    Returns True (every slot accepts its token), False (a slot rejects its
    token) or None (the tokens ran out before a rejection).
    """
    for offset, slot in enumerate(slots, start):
        if offset >= len(kinds):
            return None
        if not accepts(slot.kind, kinds[offset]):
            return False
    return True


def match(pattern, kinds, /):
    """
    Fit token kinds onto a pattern.

    Returns
    - tuple[str, ...]: canonical slot names in matched order (one per
      consumed token; fewer than the tokens when the last text slot absorbs
      the tail).
    - None: the pattern cannot accept these kinds.

    Never raises on a mismatch.
    """
    if not isinstance(pattern, Pattern):
        raise TypeError("match() first argument must be a pattern")
    kinds = tuple(kinds)

    if not kinds and not len(pattern):
        return ()
    if not kinds or not len(pattern):
        return None

    names = []
    cursor = Cursor()
    while cursor.token < len(kinds):
        repeatable = cursor.group > 0 and pattern.groups[cursor.group - 1].repeat > cursor.repeat + 1

        if cursor.group >= len(pattern):
            if repeatable:
                cursor = cursor.retreat()
                continue
            if pattern.slots(-1)[-1].kind is Kind.TEXT:
                return tuple(names)
            return None

        if (fits := _fits(slots := pattern.slots(cursor.group), kinds, cursor.token)) is None:
            return None
        if fits:
            names.extend(slot.name for slot in slots)
            cursor = Cursor(
                cursor.group + 1,
                cursor.token + len(slots),
                cursor.repeat if cursor.anchor == cursor.group else 0,
                cursor.anchor
            )
        elif repeatable:
            cursor = cursor.retreat()
        else:
            return None

    return tuple(names)


__all__ = (
    "Group",
    "Pattern",
    "Cursor",
    "match",
)
