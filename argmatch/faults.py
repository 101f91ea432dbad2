"""
Argmatch faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- ParserException / ParserWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- ArgumentTypeError: raised by user 'type' callables to supply their own message.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Integration
- The matching engine raises faults as soon as the first problem is found; one
  failed parse surfaces exactly one fault.
- ArgumentParser routes the fault through trigger(fault, **ctx): in non-shell mode
  the exception is raised to the caller, in shell mode it is rendered via rich
  and the process exits with status 2.
"""
import copy
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text


console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - matching (2110x): arity and leftovers
      • ARITY_MISMATCH, TOO_FEW_ARGUMENTS, UNRECOGNIZED_ARGUMENTS
    - values (2111x): conversion and validation
      • CONVERSION_FAILED, INVALID_CHOICE
    - options (2112x): resolution of option strings
      • AMBIGUOUS_OPTION, IGNORED_EXPLICIT_ARGUMENT, UNKNOWN_PARSER
    - constraints (2113x): post-pass bookkeeping
      • MUTUAL_EXCLUSION, REQUIRED_ARGUMENT, REQUIRED_GROUP
    - input (2114x): argument files
      • ARGUMENT_FILE
    - warnings (22xxx)
      • DEPRECATED_ARGUMENT

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired.
    """
    # --- matching errors (21xxx) ---
    ARITY_MISMATCH              = 21101
    TOO_FEW_ARGUMENTS           = 21102
    UNRECOGNIZED_ARGUMENTS      = 21103

    # --- value errors (21xxx) ---
    CONVERSION_FAILED           = 21111
    INVALID_CHOICE              = 21112

    # --- option resolution errors (21xxx) ---
    AMBIGUOUS_OPTION            = 21121
    IGNORED_EXPLICIT_ARGUMENT   = 21122
    UNKNOWN_PARSER              = 21123

    # --- constraint errors (21xxx) ---
    MUTUAL_EXCLUSION            = 21131
    REQUIRED_ARGUMENT           = 21132
    REQUIRED_GROUP              = 21133

    # --- input errors (21xxx) ---
    ARGUMENT_FILE               = 21141

    # --- warnings (22xxx) ---
    DEPRECATED_ARGUMENT         = 22111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _renderer(self, palette):
    """
    build the (styler, text) pair shared by the rich renderers below.
    """
    main = __import__("__main__")
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if self.options.get("colorful", True) else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        if not self.options.get("colorful", True):
            return Text(str(fragment))
        return Text(str(fragment), style)

    return styler, text


def _progname(self):
    main = __import__("__main__")
    return getattr(main, "__prog__", getattr(self.options.get("parser"), "prog", None) or "argmatch")


class ParserException(Exception):
    """
    base type for every user-input error produced while matching tokens.

    the message is complete and user-facing (e.g., "argument --foo: expected one
    argument"); structured context travels in 'options' (code, title, hint,
    argument, token, ...), frozen into a read-only mapping.
    """

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    @property
    def argument(self):
        """the action the fault is about, when one is known."""
        return self.options.get("argument")

    def __rich__(self):
        styler, text = _renderer(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

        prog = text(_progname(self), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if code else "error", styler("code")),
            " | ",
            text(str(self.options.get("title", "error")).title(), styler("error-title")),
            " ]"
        )
        message = text(self, styler("error-message"))
        parts = [message]
        if hint := self.options.get("hint"):
            parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if self.options.get("fancy", False):
            return Panel(Group(*parts), title=header, title_align="left")

        return Group(header, *parts)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        parser = self.options.get("parser")
        if parser is not None:
            parser.print_usage(sys.stderr)
        console.print(self)
        sys.exit(2)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replica = type(self)(self.message, **{**self.options, **overrides})
        replica.__traceback__ = self.__traceback__
        return replica


class ArityError(ParserException): ...
class ConversionError(ParserException): ...
class InvalidChoiceError(ParserException): ...
class AmbiguousOptionError(ParserException): ...
class ExplicitArgumentError(ParserException): ...
class UnknownParserError(ParserException): ...
class MutualExclusionError(ParserException): ...
class RequiredArgumentError(ParserException): ...
class RequiredGroupError(ParserException): ...
class TooFewArgumentsError(ParserException): ...
class UnrecognizedArgumentsError(ParserException): ...
class ArgumentFileError(ParserException): ...


class ArgumentTypeError(Exception):
    """
    raise from a 'type' callable to replace the generic "invalid <type> value" message.
    """


class ParserWarning(Warning):
    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        styler, text = _renderer(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })

        prog = text(_progname(self), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if code else "warning", styler("code")),
            " | ",
            text(str(self.options.get("title", "warning")).title(), styler("warning-title")),
            " ]"
        )
        message = text(self, styler("warning-message"))
        parts = [message]
        if hint := self.options.get("hint"):
            parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if self.options.get("fancy", False):
            return Panel(Group(*parts), title=header, title_align="left")

        return Group(header, *parts)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DeprecatedArgumentWarning(ParserWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are
      raised and warnings are emitted through the warnings module.

    typical options
    - parser, shell, fancy, colorful, title, code, hint, docs.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ParserException",
    "ArityError",
    "ConversionError",
    "InvalidChoiceError",
    "AmbiguousOptionError",
    "ExplicitArgumentError",
    "UnknownParserError",
    "MutualExclusionError",
    "RequiredArgumentError",
    "RequiredGroupError",
    "TooFewArgumentsError",
    "UnrecognizedArgumentsError",
    "ArgumentFileError",
    "ArgumentTypeError",
    "ParserWarning",
    "DeprecatedArgumentWarning",
    "trigger",
    "getdoc",
)
