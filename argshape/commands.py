"""
Argshape command layer: own argument specs and patterns, resolve prompts,
run callbacks.

What this module provides
- Command: wraps a Python callable together with its argument specs and its
  ordered patterns. Resolving a prompt yields a ResolvedCall that is handed
  to the callable.
- command(...): create a Command or a decorator that produces one.
- invoke(obj, prompt): resolve a prompt and run the command, surfacing any
  fault through trigger() with the command's runtime flags.

Quick start
    from argshape import command, invoke, argument, Group

    @command(
        arguments=(
            argument("user", "str"),
            argument("amount", "int", floor=1),
            argument("note", "str", default="no note"),
        ),
        patterns=(
            ("user", Group("amount", repeat=3), "note"),
            ("user",),
        ),
        shell=True,
    )
    def pay(call):
        print(call.text("user"), call.integers("amount"), call.text("note"))

    if __name__ == "__main__":
        invoke(pay, "alice 5 10 for the  pizza")

Declaration rules
- Argument names are unique per command (case-insensitive).
- Patterns may be given as Pattern objects or as sequences of groups/names;
  they are rebound to the command's arguments and numbered from 1.
- With no patterns, a single pattern takes every argument once, in order.
- Arguments no pattern uses still work for defaults but emit an
  UnusedArgumentWarning.
"""
import functools
import inspect
import operator
import re
import sys
from collections.abc import Iterable

from .arguments import Argument
from .faults import *
from .patterns import Group, Pattern
from .resolution import resolve
from .utils import *


class CommandType(type):
    """
    Metaclass giving commands read-only introspection and stable reprs.

    - __introspectable__ names become read-only properties (see mirror()).
    - __displayable__ (if set) narrows what __rich_repr__ shows.
    - __typename__ is the hyphenated lower-case class name.
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _process_strings(cls, metadata):
    """
    Normalize the command name and description.

    - name defaults to the callback's __name__; it must be a single word.
    - descr defaults to the first line of the callback's docstring.
    """
    if not isinstance(name := coalesce(metadata["name"], getattr(metadata["callback"], "__name__", None)), str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    if not (name := name.strip()) or re.search(r"\s", name):
        raise DefinitionError(f"{cls.__typename__} 'name' must be a non-empty word", code=FaultCode.INVALID_NAME)
    metadata["name"] = name

    if (descr := metadata["descr"]) is Unset:
        descr = next(iter((inspect.getdoc(metadata["callback"]) or "").splitlines()), "") or None
    elif not isinstance(descr, str):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    metadata["descr"] = descr.strip() if descr else None


def _process_arguments(cls, metadata):
    """
    Collect argument specs and reject case-insensitive duplicates.
    """
    if isinstance(arguments := metadata["arguments"], Argument) or not isinstance(arguments, Iterable):
        raise TypeError(f"{cls.__typename__} 'arguments' must be an iterable of argument specs")

    seen = {}
    for argument in (arguments := tuple(arguments)):
        if not isinstance(argument, Argument):
            raise TypeError(f"{cls.__typename__} 'arguments' must be an iterable of argument specs")
        if argument.key in seen:
            raise DefinitionError(
                f"{cls.__typename__} {metadata['name']!r} declares argument {argument.name!r} more than once",
                code=FaultCode.DUPLICATE_ARGUMENT
            )
        seen[argument.key] = argument
    metadata["arguments"] = arguments


def _process_patterns(cls, metadata):
    """
    Bind every pattern to the command's arguments and number them from 1.

    Accepted shapes per entry: Pattern, Group, a slot name, or a sequence of
    groups/slot names.
    """
    if isinstance(patterns := metadata["patterns"], str | Pattern | Group) or not isinstance(patterns, Iterable):
        raise TypeError(f"{cls.__typename__} 'patterns' must be an iterable of patterns")

    if not (patterns := tuple(patterns)):
        patterns = (tuple(argument.name for argument in metadata["arguments"]),)

    sanitized = []
    for index, pattern in enumerate(patterns, 1):
        match pattern:
            case Pattern():
                groups = pattern.groups
            case str() | Group():
                groups = (pattern,)
            case Iterable():
                groups = tuple(pattern)
            case _:
                raise TypeError(f"{cls.__typename__} 'patterns' must be an iterable of patterns")
        sanitized.append(Pattern(*groups, arguments=metadata["arguments"], index=index))
    metadata["patterns"] = tuple(sanitized)


def _process_flags(cls, metadata):
    for flag in ("shell", "fancy", "colorful"):
        if not isinstance(metadata[flag], bool):
            raise TypeError(f"{cls.__typename__} {flag!r} must be a boolean")


class Command(metaclass=CommandType):
    """
    A callable bound to its argument specs and ordered patterns.

    Parameters
    - callback: called with the ResolvedCall once a prompt resolves.
    - name: command name (defaults to callback.__name__).
    - arguments: iterable of argument specs.
    - patterns: iterable of patterns (see module docstring for shapes).
    - descr: short description (defaults to the docstring's first line).
    - shell: print faults to stderr instead of raising them.
    - fancy: render faults inside a panel.
    - colorful: style fault output.
    """

    __introspectable__ = (
        "name",
        "descr",
        "arguments",
        "patterns",
        "shell",
        "fancy",
        "colorful",
    )

    __displayable__ = (
        "name",
        "descr",
        "patterns",
    )

    def __init__(
            self,
            callback,
            /,
            name=Unset,
            arguments=(),
            patterns=(),
            descr=Unset,
            *,
            shell=False,
            fancy=False,
            colorful=False
    ):
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} callback must be callable")

        metadata = {
            "callback": callback,
            "name": name,
            "descr": descr,
            "arguments": arguments,
            "patterns": patterns,
            "shell": shell,
            "fancy": fancy,
            "colorful": colorful,
        }
        _process_strings(type(self), metadata)
        _process_arguments(type(self), metadata)
        _process_patterns(type(self), metadata)
        _process_flags(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        used = {id(argument) for pattern in self._patterns for argument in pattern.arguments}
        for argument in self._arguments:
            if id(argument) not in used:
                self.trigger(UnusedArgumentWarning(
                    f"argument {argument.name!r} is not used by any pattern",
                    code=FaultCode.UNUSED_ARGUMENT,
                    title="unused argument",
                    hint="add it to a pattern or remove it",
                    argument=argument,
                ))

    @property
    def usage(self):
        """
        One usage line per pattern, in declaration order.
        """
        return "\n".join(pattern.usage(self._name) for pattern in self._patterns)

    def argument(self, name, /):
        """
        Return the argument spec named 'name' (case-insensitive), or Unset.
        """
        for argument in self._arguments:
            if argument.matches(name):
                return argument
        return Unset

    def resolve(self, prompt, /, *, source=Unset):
        """
        Resolve a prompt against this command's patterns.

        Raises ResolutionError (ValidationError / ShapeMismatchError).
        """
        return resolve(self._patterns, prompt, source=source, arguments=self._arguments)

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this command's runtime flags attached.
        """
        trigger(
            fault,
            **options,
            command=self,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful
        )

    def __call__(self, *args, **kwargs):
        return self._callback(*args, **kwargs)

    def __invoke__(self, prompt=Unset):
        """
        Resolve a prompt and run the callback with the result.

        Parameters
        - prompt:
          • Unset: use sys.argv[1:].
          • str: the raw input (split on whitespace, tail text preserved).
          • Iterable[str]: pre-tokenized input.

        Returns
        - the callback's return value, or None when a fault was printed in
          shell mode.
        """
        if prompt is Unset:
            prompt = sys.argv[1:]
        try:
            call = self.resolve(prompt)
        except ResolutionError as fault:
            self.trigger(fault)
            return None
        return self._callback(call)


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct:    cmd = command(func, name="x", arguments=..., patterns=...)
    - Decorator: @command(arguments=..., patterns=...)

    Returns
    - Command | Callable[[Callable], Command]
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for commands or callables.

    - If 'object' implements __invoke__, call it with prompt.
    - If 'object' is a plain callable, wrap it as a Command and then invoke.
    - Otherwise, raise TypeError.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if callable(object):
        return invoke(command(object), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Command",
    "command",
    "invoke",
)

del CommandType
