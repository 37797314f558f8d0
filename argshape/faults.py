"""
Argshape faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue the engine
  can report. Codes are grouped by domain to keep logs/searches predictable.
- DefinitionError: broken declarations (specs, groups, patterns, commands).
  Always raised immediately; never cached, never rendered as user feedback.
- ResolutionError family: the structured outcome of a failed resolution.
  • ShapeMismatchError: no declared pattern accepts the token kinds.
  • ValidationError (+ subclasses): a pattern matched but a value was illegal.
- ArgumentWarning family: definition-time smells that do not stop a command.
- trigger(): central entry point to surface any resolution fault or warning
  (respecting shell/fancy/colorful).

Fault shape
- Every fault carries a message and a read-only mapping of options (code,
  title, hint, plus fault-specific details such as slot/value/bound).
- __replace__(**overrides) re-stamps options (the resolver uses it to attach
  the pattern a cached failure belongs to; trigger uses it for runtime flags).
- __rich__ renders a compact header/message/hint block, or a panel when fancy.
- __trigger__ raises (or warns) outside shell mode, prints to stderr inside it.

Integration
- Hosts may relabel codes through a __codes__ mapping, restyle output through
  a __styles__ mapping and rename the header through __prog__, all read from
  the __main__ module.
"""
import inspect
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce, rename

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - definitions (21xxx)
      • UNRESOLVED_SLOT, DUPLICATE_ARGUMENT, INVALID_NAME, INVALID_GROUP,
        INVERTED_BOUNDS, MISPLACED_METADATA, INVALID_METADATA, INVALID_DEFAULT
    - resolution (22xxx)
      • SHAPE_MISMATCH, UNPARSABLE_VALUE, NON_INTEGRAL_VALUE,
        BOUND_VIOLATION, INVALID_CHOICE
    - warnings (23xxx)
      • UNUSED_ARGUMENT

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- definition errors (21xxx) ---
    UNRESOLVED_SLOT     = 21101
    DUPLICATE_ARGUMENT  = 21102
    INVALID_NAME        = 21103
    INVALID_GROUP       = 21104
    INVERTED_BOUNDS     = 21111
    MISPLACED_METADATA  = 21112
    INVALID_METADATA    = 21113
    INVALID_DEFAULT     = 21114

    # --- resolution errors (22xxx) ---
    SHAPE_MISMATCH      = 22101
    UNPARSABLE_VALUE    = 22111
    NON_INTEGRAL_VALUE  = 22112
    BOUND_VIOLATION     = 22113
    INVALID_CHOICE      = 22114

    # --- warnings (23xxx) ---
    UNUSED_ARGUMENT     = 23101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _detail(name, /):
    """
    Read-only property exposing one entry of a fault's options (None when absent).
    """
    @rename(name)
    def getter(self):
        return self.options.get(name)

    return property(getter)


def _render(fault, palette, /):
    """
    Build the rich renderable shared by every fault.

    Layout
    - header: "[ <prog> — <code> | <Title> ]"
    - body:   the message
    - hint:   " → <hint>" (omitted when the fault has no hint)

    Options honoured: colorful (apply palette), fancy (wrap in a Panel),
    command (its name labels the header unless __main__.__prog__ is set).
    """
    main = __import__("__main__")
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    command = fault.options.get("command", Unset)
    code = fault.options.get("code")

    header = Text.assemble(
        "[ ",
        text(getattr(main, "__prog__", getattr(command, "name", "argshape")), "prog-name"),
        " — ",
        text(code.normalize() if code is not None else "?", "code"),
        " | ",
        text(str(fault.options.get("title", "")).title(), "title"),
        " ]"
    )
    message = text(fault.message, "message")
    hint = Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")) if (hint := fault.options.get("hint")) else Text("")

    if fault.options.get("fancy", False):
        return Panel(Group(message, hint), title=header, title_align="left")

    return Group(header, message, hint)


class DefinitionError(ValueError):
    """
    A malformed declaration: unresolved slot name, inverted bounds, metadata
    on the wrong kind, duplicate names, an illegal default, ...

    These are fatal at definition time and must prevent the owning command
    from being built at all; they are never cached by the resolver.
    """
    def __init__(self, message, /, **options):
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    code = _detail("code")


class ResolutionError(Exception):
    """
    Base of every terminal resolution failure.

    Always attributable to a pattern for display purposes through the
    'pattern' option (None when the failure concerns every pattern).
    """
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    code = _detail("code")
    title = _detail("title")
    hint = _detail("hint")
    pattern = _detail("pattern")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title

            # body
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ShapeMismatchError(ResolutionError): ...


class ValidationError(ResolutionError):
    """
    A pattern matched the token kinds but one value failed coercion or
    validation. Carries the slot name and the offending raw text.
    """
    slot = _detail("slot")
    value = _detail("value")


class UnparsableValueError(ValidationError): ...
class NonIntegralValueError(ValidationError): ...


class BoundViolationError(ValidationError):
    bound = _detail("bound")
    limit = _detail("limit")
    inclusive = _detail("inclusive")


class InvalidChoiceError(ValidationError):
    choices = _detail("choices")


class ArgumentWarning(Warning):
    """
    Base of definition-time warnings (the declaration works but smells).
    """
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    code = _detail("code")
    title = _detail("title")
    hint = _detail("hint")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnusedArgumentWarning(ArgumentWarning):
    argument = _detail("argument")


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise errors
      are raised and warnings go through the warnings module.

    typical options
    - command, shell, fancy, colorful, and any context the renderer may show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "DefinitionError",
    "ResolutionError",
    "ShapeMismatchError",
    "ValidationError",
    "UnparsableValueError",
    "NonIntegralValueError",
    "BoundViolationError",
    "InvalidChoiceError",
    "ArgumentWarning",
    "UnusedArgumentWarning",
    "trigger",
)
