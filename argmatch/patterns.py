r"""
Arity fragment grammar over the token-pattern alphabet.

Every raw token of one parse is classified into a single letter:
- 'O': something that is (or looks like) an option string,
- 'A': a plain argument,
- '-': the literal separator '--' (everything after it is 'A').

The concatenation of those letters is the token pattern. Each action arity
(nargs) maps to a regular-expression fragment over that alphabet holding a
single capturing group; the length of what the group captures is how many raw
tokens the action consumes.

    nargs          positional          optional
    -------------  ------------------  ------------
    None           (-*A-*)             (A)
    '?'            (-*A?-*)            (A?)
    '*'            (-*[A-]*)           (A*)
    '+'            (-*A[A-]*)          (A+)
    '...'          ([-AO]*)            ([AO]*)
    'A...'         (-*A[-AO]*)         (A[AO]*)
    n (int >= 0)   (-*(?:A-*){n})      (A{n})

Optionals never see '-' in their fragment: '--' cannot appear in the middle of
an option's arguments. Fixed counts use a bounded quantifier instead of a
repeated literal so patterns stay linear in size.
"""
import functools
import re


@functools.lru_cache(maxsize=None, typed=True)
def fragment(nargs, /, *, optional=False):
    """
    Return the regex source for one action's arity.

    Parameters
    - nargs: None | '?' | '*' | '+' | '...' | 'A...' | int
    - optional: bool (keyword-only)
      True for actions with option strings; strips every '-' from the fragment.

    Raises
    - ValueError: when nargs is not one of the supported arity markers.
    """
    match nargs:
        case None:
            return "(A)" if optional else "(-*A-*)"
        case "?":
            return "(A?)" if optional else "(-*A?-*)"
        case "*":
            return "(A*)" if optional else "(-*[A-]*)"
        case "+":
            return "(A+)" if optional else "(-*A[A-]*)"
        case "...":
            return "([AO]*)" if optional else "([-AO]*)"
        case "A...":
            return "(A[AO]*)" if optional else "(-*A[-AO]*)"
        case bool():
            raise ValueError("invalid nargs value: %r" % nargs)
        case int() if nargs >= 0:
            return "(A{%d})" % nargs if optional else "(-*(?:A-*){%d})" % nargs
    raise ValueError("invalid nargs value: %r" % nargs)


@functools.cache
def _compile(source, /):
    return re.compile(source)


def match(nargs, pattern, /, *, optional=False):
    """
    Match one arity fragment against the start of a token pattern.

    Returns
    - int: the number of tokens the fragment consumed.
    - None: when the fragment does not match.
    """
    found = _compile(fragment(nargs, optional=optional)).match(pattern)
    return len(found.group(1)) if found else None


def match_partial(arities, pattern, /):
    """
    Match as many leading arities as possible against a token pattern.

    arities is an ordered sequence of (nargs, optional) pairs. The whole chain is
    tried first; on failure the last arity is dropped and the shorter chain is
    retried, down to the empty chain.

    Returns
    - list[int]: one consumed-token count per matched arity (possibly empty).
    """
    for stop in range(len(arities), 0, -1):
        source = "".join(fragment(nargs, optional=optional) for nargs, optional in arities[:stop])
        if found := _compile(source).match(pattern):
            return [len(group) for group in found.groups()]
    return []


def expectation(nargs, /):
    """
    Human-readable arity expectation used in arity errors.
    """
    match nargs:
        case None:
            return "expected one argument"
        case "?":
            return "expected at most one argument"
        case "+" | "A...":
            return "expected at least one argument"
    return "expected %s argument(s)" % nargs


def looks_like_negative_number(token, /):
    """
    True for tokens shaped like '-1', '-12' or '-.5'/'-1.5'.
    """
    return re.fullmatch(r"-\d+|-\d*\.\d+", token) is not None


__all__ = (
    "fragment",
    "match",
    "match_partial",
    "expectation",
    "looks_like_negative_number",
)
