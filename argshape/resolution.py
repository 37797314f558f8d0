"""
Argshape resolution: pick the first pattern that both matches and validates.

Flow
1. Split the prompt on whitespace and classify every token once.
2. Try the patterns strictly in declaration order:
   - match() the token kinds; skip the pattern on None.
   - bind every matched slot. When the last slot absorbs the tail, it receives
     the original text from its token onward, inner spacing and line breaks
     kept, outer whitespace trimmed.
   - the first pattern whose slots all bind wins; later ones are never tried.
3. Nothing succeeded:
   - raise the first ValidationError met (stamped with its pattern), or
   - raise ShapeMismatchError when no pattern even matched.

ResolvedCall accessors
- lookup(name): the payload, or Unset when the slot was not bound.
- text/integer/real/boolean(name): first bound value, else the declared
  default, else None/0/0.0/False. Never raise.
- texts/integers/reals/booleans(name): every bound value of that slot in
  order (repeated groups); defaults are never used.
"""
import re
from collections.abc import Iterable

from .arguments import Argument
from .binding import Value, bind
from .faults import FaultCode, ShapeMismatchError, ValidationError
from .kinds import classify
from .patterns import Pattern, match
from .utils import *


def _tail(source, index, /):
    """
    Return the source text starting at the index-th whitespace-separated word.
    """
    skipped = re.match(r"\s*(?:\S+\s+){%d}" % index, source)
    return source[skipped.end() if skipped else 0:].strip()


def _tokenize(prompt, source, /):
    if isinstance(prompt, str):
        return prompt.split(), coalesce(source, prompt)
    if isinstance(prompt, Iterable):
        tokens = []
        for token in prompt:
            if not isinstance(token, str):
                raise TypeError("resolve() prompt must be a string or an iterable of strings")
            tokens.extend(token.split())
        return tokens, coalesce(source, " ".join(tokens))
    raise TypeError("resolve() prompt must be a string or an iterable of strings")


class ResolvedCall:
    """
    The outcome of a successful resolution.

    - pattern: the Pattern that produced the values.
    - values: bound Value objects in matched order.
    - arguments: the specs defaults are read from (usually the command's).
    """

    def __init__(self, pattern, values, arguments, /):
        self._pattern = pattern
        self._values = tuple(values)
        self._arguments = tuple(arguments)

    pattern = mirror("pattern")
    values = mirror("values")
    arguments = mirror("arguments")

    def argument(self, name, /):
        """
        Return the spec named 'name' (case-insensitive), or Unset.
        """
        for argument in self._arguments:
            if argument.matches(name):
                return argument
        return Unset

    def _bound(self, name):
        key = name.strip().casefold() if isinstance(name, str) else None
        return [value for value in self._values if value.name.casefold() == key]

    def _first(self, name, view, fallback):
        if bound := self._bound(name):
            result = getattr(bound[0], view)
        elif (argument := self.argument(name)) and argument.default is not None:
            try:
                result = getattr(Value(argument.name, argument.default, argument), view)
            except ValidationError:
                result = None
        else:
            result = None
        return fallback if result is None else result

    def _every(self, name, view):
        return tuple(
            result for value in self._bound(name) if (result := getattr(value, view)) is not None
        )

    def lookup(self, name, /):
        """
        Return the payload bound to 'name', or Unset when the slot is absent.

        Defaults are not consulted; the caller decides what absence means.
        """
        if bound := self._bound(name):
            return bound[0].payload
        return Unset

    def text(self, name, /):
        return self._first(name, "text", None)

    def integer(self, name, /):
        return self._first(name, "integer", 0)

    def real(self, name, /):
        return self._first(name, "real", 0.0)

    def boolean(self, name, /):
        return self._first(name, "boolean", False)

    def texts(self, name, /):
        return self._every(name, "text")

    def integers(self, name, /):
        return self._every(name, "integer")

    def reals(self, name, /):
        return self._every(name, "real")

    def booleans(self, name, /):
        return self._every(name, "boolean")

    def __contains__(self, name):
        return bool(self._bound(name))

    def __len__(self):
        return len(self._values)

    def __iter__(self):
        return iter(self._values)

    def __repr__(self):
        return f"resolved-call(pattern={self._pattern!r}, values={self._values!r})"

    def __rich_repr__(self):
        yield "pattern", self._pattern
        yield "values", self._values


def _mismatch(patterns, kinds, /):
    match len(patterns):
        case 0 | 1:
            target = "the command pattern"
        case 2:
            target = "either of the patterns"
        case _:
            target = "any of the patterns"
    return ShapeMismatchError(
        f"the given argument types do not match {target}",
        code=FaultCode.SHAPE_MISMATCH,
        title="shape mismatch",
        hint="check the usage: " + "; ".join(map(str, patterns)) if any(map(len, patterns)) else None,
        pattern=None,
        kinds=kinds,
    )


def resolve(patterns, prompt, /, *, source=Unset, arguments=Unset):
    """
    Resolve a prompt against patterns, in order.

    Parameters
    - patterns: a Pattern or an iterable of Patterns, tried in order.
    - prompt: a string (split on whitespace) or an iterable of tokens.
    - source: the original text the tail slot is cut from; defaults to the
      prompt itself (or the tokens joined by single spaces).
    - arguments: specs the defaults come from; defaults to every spec the
      patterns use.

    Returns
    - ResolvedCall

    Raises
    - ValidationError: the first value failure of a matching pattern.
    - ShapeMismatchError: no pattern matches the token kinds.
    """
    if isinstance(patterns, Pattern):
        patterns = (patterns,)
    elif isinstance(patterns, Iterable):
        patterns = tuple(patterns)
        if not all(isinstance(pattern, Pattern) for pattern in patterns):
            raise TypeError("resolve() first argument must be a pattern or an iterable of patterns")
    else:
        raise TypeError("resolve() first argument must be a pattern or an iterable of patterns")

    if not isinstance(source, str | Unset):
        raise TypeError("resolve() 'source' must be a string")

    if arguments is Unset:
        arguments = {id(argument): argument for pattern in patterns for argument in pattern.arguments}.values()
    elif isinstance(arguments, Argument) or not isinstance(arguments, Iterable):
        raise TypeError("resolve() 'arguments' must be an iterable of argument specs")

    tokens, source = _tokenize(prompt, source)
    kinds = tuple(map(classify, tokens))
    failure = None

    for pattern in patterns:
        if (names := match(pattern, kinds)) is None:
            continue

        specs = {argument.name: argument for argument in pattern.arguments}
        values = []
        try:
            for index, name in enumerate(names):
                if index == len(names) - 1 and index < len(tokens) - 1:
                    raw = _tail(source, index)
                else:
                    raw = tokens[index]
                values.append(bind(name, raw, specs[name]))
        except ValidationError as error:
            if failure is None:
                failure = error.__replace__(pattern=pattern)
            continue

        return ResolvedCall(pattern, values, arguments)

    if failure is not None:
        raise failure
    raise _mismatch(patterns, kinds)


__all__ = (
    "ResolvedCall",
    "resolve",
)
