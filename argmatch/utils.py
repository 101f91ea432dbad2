"""
Argmatch utilities (internal helpers, carefully exposed)

Scope
- Core building blocks used across the package for consistent semantics and UX.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the actions/containers/parsers layers.

Overview
- @rename("name")
  • Assign stable __name__/__qualname__ to generated functions for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr); containers
    are handed out as frozen, shallow views.

- ordinal(number)
  • Human-friendly ordinal ("first", "second", "11th") used in fault messages.

Arity and display constants
- OPTIONAL ("?"), ZERO_OR_MORE ("*"), ONE_OR_MORE ("+"): the classic arity markers.
- REMAINDER ("..."): swallow everything that follows, options included.
- PARSER ("A..."): one sub-command name followed by everything else.
- SUPPRESS: marks a dest/default/help that must not surface anywhere.
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType

OPTIONAL = "?"
ZERO_OR_MORE = "*"
ONE_OR_MORE = "+"
REMAINDER = "..."
PARSER = "A..."
SUPPRESS = "==SUPPRESS=="


def rename(name, /):
    """
    Decorator giving a generated function a stable __name__/__qualname__.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _freeze(object):
    """
    Shallow read-only view of a container value.

    - Mapping → MappingProxyType (live, read-only)
    - Set → frozenset
    - Sequence (non-string) → tuple
    - Anything else → returned as-is
    """
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    elif isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray, tuple, range)):
        return tuple(object)
    return object


def mirror(name, /, *, frozen=True):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads from an attribute named "_{name}" on the
    instance. With frozen=True (the default) container values are handed out
    as shallow read-only views; frozen=False returns the stored object itself,
    which matters for values compared by identity (defaults, constants).

    Example
    - Given self._option_strings, declare option_strings = mirror("option_strings").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        object = getattr(self, "_" + name)
        return _freeze(object) if frozen else object

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

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


__all__ = (
    # Functions
    "rename",
    "mirror",
    "ordinal",

    # Constants
    "OPTIONAL",
    "ZERO_OR_MORE",
    "ONE_OR_MORE",
    "REMAINDER",
    "PARSER",
    "SUPPRESS",
)
