r"""
Argmatch actions: declarations of named arguments and what they do when matched.

Overview
- Action: the shared declaration (identity, arity, conversion, default, constraints).
  It is created once at registration time and stored by reference in exactly one
  container; after construction only its owning container touches it (conflict
  resolution and set_defaults()).
- Kinds (each a variant of one capability: receive already-converted values and
  update the namespace)
  • Store / StoreConst / StoreTrue / StoreFalse
  • Append / AppendConst
  • Count
  • Help / Version (print, then exit through the parser)
  • SubParsers (delegate the tail of the input to a nested parser)

- Introspection & representation
  • ActionType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ as read-only properties (see utils.mirror).
  • Containers are handed out frozen (option strings, choices); fields listed in
    __verbatim__ (default, const, type) are handed out as-is because the engine
    compares them by identity.

Validation highlights (raised at construction, never during a parse)
- nargs must be None | '?' | '*' | '+' | '...' | 'A...' | int >= 0.
- Value-storing kinds reject nargs == 0 and accept const only with nargs == '?'.
- type must be callable (or None), metavar must be a string or a tuple of strings.

Quick example:
    >>> from argmatch.actions import Store
    >>> action = Store(["-t", "--threads"], "threads", type=int)
    >>> action.option_strings
    ('-t', '--threads')
"""
import builtins
import functools
import operator
import re
from collections.abc import Container, Iterable
from types import MappingProxyType

from .faults import FaultCode, UnknownParserError, getdoc
from .utils import *

_UNRECOGNIZED_ARGS_ATTR = "_unrecognized_args"


class ActionType(type):
    """
    Metaclass that turns action classes into introspectable declarations.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__ (frozen unless listed in __verbatim__).
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in configuration error messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = None

    def __new__(cls, name, bases, namespace, **options):
        verbatim = namespace.get("__verbatim__", ())
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name, frozen=name not in verbatim) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - store(option_strings=('-v', '--verbose'), dest='verbose', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield a sequence of (name, object) pairs for pretty printers.
            """
            for name in type(self).__displayable__ or type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_nargs(cls, nargs, /):
    """
    Internal: validate an arity marker.

    Raises
    - TypeError: when nargs is not None, a string or an integer.
    - ValueError: when a string is not a known marker or an integer is negative.
    """
    if isinstance(nargs, bool) or not isinstance(nargs, str | int | None):
        raise TypeError(f"{cls.__typename__} 'nargs' must be a string or an integer")
    if isinstance(nargs, str) and nargs not in (OPTIONAL, ZERO_OR_MORE, ONE_OR_MORE, REMAINDER, PARSER):
        raise ValueError(f"{cls.__typename__} 'nargs' must be one of '?', '*', '+', '...' or 'A...'")
    if isinstance(nargs, int) and nargs < 0:
        raise ValueError(f"{cls.__typename__} 'nargs' must be a non-negative integer")
    return nargs


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the shared declaration fields in place.

    Responsibilities
    - option_strings: iterable of non-empty strings, duplicates rejected; kept as a list
      so the owning container can drop strings on conflict resolution.
    - dest: non-empty string (SUPPRESS allowed).
    - nargs: see _sanitize_nargs.
    - type: None or callable.
    - choices: None or a container; one-shot iterables are materialized to a tuple.
    - metavar: None, a non-empty string, or a tuple of non-empty strings.
    """
    option_strings = []
    for option_string in metadata["option_strings"]:
        if not isinstance(option_string, str):
            raise TypeError(f"{cls.__typename__} option strings must be strings")
        elif not option_string:
            raise ValueError(f"{cls.__typename__} option strings cannot be empty")
        elif option_string in option_strings:
            raise ValueError(f"{cls.__typename__} option strings cannot contain duplicates")
        option_strings.append(option_string)
    metadata["option_strings"] = option_strings

    if not isinstance(dest := metadata["dest"], str):
        raise TypeError(f"{cls.__typename__} 'dest' must be a string")
    elif not dest:
        raise ValueError(f"{cls.__typename__} 'dest' cannot be empty")

    metadata["nargs"] = _sanitize_nargs(cls, metadata["nargs"])

    if metadata["type"] is not None and not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")

    if (choices := metadata["choices"]) is not None and not isinstance(choices, Container):
        if not isinstance(choices, Iterable):
            raise TypeError(f"{cls.__typename__} 'choices' must be a container")
        metadata["choices"] = tuple(choices)

    match metadata["metavar"]:
        case None:
            pass
        case str(metavar) if metavar:
            pass
        case tuple(metavar) if metavar and all(isinstance(item, str) and item for item in metavar):
            pass
        case _:
            raise TypeError(f"{cls.__typename__} 'metavar' must be a non-empty string or tuple of strings")


class Action(metaclass=ActionType):
    """
    Declaration of one named argument.

    Fields
    - option_strings: prefix-marked strings ('-x', '--long'); empty for positionals.
    - dest: Namespace key the value is stored under.
    - nargs: arity marker (see argmatch.patterns).
    - const/default: fallback values used depending on arity and presence.
    - type: converter applied per raw token (None means identity).
    - choices: closed set converted values must belong to.
    - required: positionals compute it from nargs, optionals declare it.
    - help/metavar: display-only.
    - deprecated: usage emits a DeprecatedArgumentWarning.

    Subclasses implement __call__(parser, namespace, values, option_string=None).
    """

    __introspectable__ = (
        "option_strings",
        "dest",
        "nargs",
        "const",
        "default",
        "type",
        "choices",
        "required",
        "help",
        "metavar",
        "deprecated",
    )
    __verbatim__ = (
        "const",
        "default",
        "type",
    )

    def __init__(
            self,
            option_strings,
            dest,
            nargs=None,
            const=None,
            default=None,
            type=None,
            choices=None,
            required=False,
            help=None,
            metavar=None,
            deprecated=False
    ):
        metadata = {
            "option_strings": option_strings,
            "dest": dest,
            "nargs": nargs,
            "const": const,
            "default": default,
            "type": type,
            "choices": choices,
            "required": bool(required),
            "help": help,
            "metavar": metavar,
            "deprecated": bool(deprecated),
        }
        _sanitize_metadata(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def __call__(self, parser, namespace, values, option_string=None):
        raise NotImplementedError(f"{type(self).__typename__} must implement __call__")


def _check_store_arity(cls, nargs, const, /):
    if nargs == 0:
        raise ValueError(
            f"{cls.__typename__} 'nargs' must be != 0; if you have nothing to store, "
            "actions such as store_true or store_const may be more appropriate"
        )
    if const is not None and nargs != OPTIONAL:
        raise ValueError(f"{cls.__typename__} 'nargs' must be {OPTIONAL!r} to supply 'const'")


class Store(Action):
    """
    Store the converted value(s) under dest, replacing what was there.
    """

    def __init__(
            self,
            option_strings,
            dest,
            nargs=None,
            const=None,
            default=None,
            type=None,
            choices=None,
            required=False,
            help=None,
            metavar=None,
            deprecated=False
    ):
        _check_store_arity(builtins.type(self), nargs, const)
        super().__init__(
            option_strings=option_strings,
            dest=dest,
            nargs=nargs,
            const=const,
            default=default,
            type=type,
            choices=choices,
            required=required,
            help=help,
            metavar=metavar,
            deprecated=deprecated,
        )

    def __call__(self, parser, namespace, values, option_string=None):
        setattr(namespace, self.dest, values)


class StoreConst(Action):
    """
    Store a constant under dest; consumes no tokens.
    """

    def __init__(
            self,
            option_strings,
            dest,
            const,
            default=None,
            required=False,
            help=None,
            metavar=None,
            deprecated=False
    ):
        super().__init__(
            option_strings=option_strings,
            dest=dest,
            nargs=0,
            const=const,
            default=default,
            required=required,
            help=help,
            metavar=metavar,
            deprecated=deprecated,
        )

    def __call__(self, parser, namespace, values, option_string=None):
        setattr(namespace, self.dest, self.const)


class StoreTrue(StoreConst):
    def __init__(self, option_strings, dest, default=False, required=False, help=None, deprecated=False):
        super().__init__(
            option_strings=option_strings,
            dest=dest,
            const=True,
            default=default,
            required=required,
            help=help,
            deprecated=deprecated,
        )


class StoreFalse(StoreConst):
    def __init__(self, option_strings, dest, default=True, required=False, help=None, deprecated=False):
        super().__init__(
            option_strings=option_strings,
            dest=dest,
            const=False,
            default=default,
            required=required,
            help=help,
            deprecated=deprecated,
        )


def _copy_items(items, /):
    # the default (or a value seeded by the caller) is never mutated in place
    if items is None:
        return []
    return list(items)


class Append(Action):
    """
    Append the converted value(s) to a list under dest.
    """

    def __init__(
            self,
            option_strings,
            dest,
            nargs=None,
            const=None,
            default=None,
            type=None,
            choices=None,
            required=False,
            help=None,
            metavar=None,
            deprecated=False
    ):
        _check_store_arity(builtins.type(self), nargs, const)
        super().__init__(
            option_strings=option_strings,
            dest=dest,
            nargs=nargs,
            const=const,
            default=default,
            type=type,
            choices=choices,
            required=required,
            help=help,
            metavar=metavar,
            deprecated=deprecated,
        )

    def __call__(self, parser, namespace, values, option_string=None):
        items = _copy_items(getattr(namespace, self.dest, None))
        items.append(values)
        setattr(namespace, self.dest, items)


class AppendConst(Action):
    """
    Append a constant to a list under dest; consumes no tokens.
    """

    def __init__(
            self,
            option_strings,
            dest,
            const,
            default=None,
            required=False,
            help=None,
            metavar=None,
            deprecated=False
    ):
        super().__init__(
            option_strings=option_strings,
            dest=dest,
            nargs=0,
            const=const,
            default=default,
            required=required,
            help=help,
            metavar=metavar,
            deprecated=deprecated,
        )

    def __call__(self, parser, namespace, values, option_string=None):
        items = _copy_items(getattr(namespace, self.dest, None))
        items.append(self.const)
        setattr(namespace, self.dest, items)


class Count(Action):
    """
    Count occurrences (e.g., -vvv → 3).
    """

    def __init__(self, option_strings, dest, default=None, required=False, help=None, deprecated=False):
        super().__init__(
            option_strings=option_strings,
            dest=dest,
            nargs=0,
            default=default,
            required=required,
            help=help,
            deprecated=deprecated,
        )

    def __call__(self, parser, namespace, values, option_string=None):
        count = getattr(namespace, self.dest, None)
        setattr(namespace, self.dest, (0 if count is None else count) + 1)


class Help(Action):
    """
    Print the parser's help, then exit through the parser.
    """

    def __init__(self, option_strings, dest=SUPPRESS, default=SUPPRESS, help=None):
        super().__init__(
            option_strings=option_strings,
            dest=dest,
            default=default,
            nargs=0,
            help=help,
        )

    def __call__(self, parser, namespace, values, option_string=None):
        parser.print_help()
        parser.exit()


class Version(Action):
    """
    Print a version string ('%(prog)s' is expanded), then exit through the parser.
    """

    def __init__(
            self,
            option_strings,
            version=None,
            dest=SUPPRESS,
            default=SUPPRESS,
            help="show program's version number and exit"
    ):
        super().__init__(
            option_strings=option_strings,
            dest=dest,
            default=default,
            nargs=0,
            help=help,
        )
        self._version = version

    @property
    def version(self):
        return self._version

    def __call__(self, parser, namespace, values, option_string=None):
        parser.print_version(self.version)
        parser.exit()


class SubParsers(Action):
    """
    Sub-command dispatch.

    The first token selects a parser by name (or alias); every following token is
    handed to that parser. Its values are copied into the parent namespace and its
    unrecognized tokens are forwarded to the parent's extras.
    """

    def __init__(
            self,
            option_strings,
            prog,
            parser_class,
            dest=SUPPRESS,
            required=False,
            help=None,
            metavar=None,
            **defaults
    ):
        self._prog_prefix = prog
        self._parser_class = parser_class
        self._parser_defaults = defaults
        self._name_parser_map = {}
        self._choices_help = {}

        super().__init__(
            option_strings=option_strings,
            dest=dest,
            nargs=PARSER,
            choices=self._name_parser_map,
            required=required,
            help=help,
            metavar=metavar,
        )

    @property
    def choices_help(self):
        """read-only mapping of parser name → help text (aliases excluded)."""
        return MappingProxyType(self._choices_help)

    def add_parser(self, name, /, *, aliases=(), help=None, **options):
        """
        Create, register and return a nested parser.

        Notes
        - prog defaults to "<parent prog> <name>".
        - runtime flags of the parent (shell/fancy/colorful/prefix_chars) are inherited
          unless given explicitly.
        - a name or alias already in use is a configuration error.
        """
        if isinstance(aliases, str):
            raise TypeError("add_parser() 'aliases' must be an iterable of strings")
        aliases = tuple(aliases)
        for alias in (name, *aliases):
            if alias in self._name_parser_map:
                raise ValueError("conflicting subparser: %s" % alias)

        options.setdefault("prog", "%s %s" % (self._prog_prefix, name))
        for key, object in self._parser_defaults.items():
            options.setdefault(key, object)

        parser = self._parser_class(**options)
        if help is not None:
            self._choices_help[name] = help
        for alias in (name, *aliases):
            self._name_parser_map[alias] = parser
        return parser

    def __call__(self, parser, namespace, values, option_string=None):
        parser_name, *arg_strings = values

        if self.dest is not SUPPRESS:
            setattr(namespace, self.dest, parser_name)

        try:
            subparser = self._name_parser_map[parser_name]
        except KeyError:
            choices = ", ".join(self._name_parser_map)
            raise UnknownParserError(
                "unknown parser %r (choices: %s)" % (parser_name, choices),
                title="unknown parser",
                code=FaultCode.UNKNOWN_PARSER,
                argument=self,
                token=parser_name,
                hint="use one of: %s" % choices,
                docs=getdoc(FaultCode.UNKNOWN_PARSER),
            ) from None

        subnamespace, arg_strings = subparser._parse_known(arg_strings, None)
        for key, object in vars(subnamespace).items():
            setattr(namespace, key, object)

        if arg_strings:
            vars(namespace).setdefault(_UNRECOGNIZED_ARGS_ATTR, [])
            getattr(namespace, _UNRECOGNIZED_ARGS_ATTR).extend(arg_strings)


def action_name(action, /):
    """
    Name an action for messages: joined option strings, else metavar, else dest,
    else its choices in braces.
    """
    if action is None:
        return None
    elif action.option_strings:
        return "/".join(action.option_strings)
    elif action.metavar not in (None, SUPPRESS):
        metavar = action.metavar
        return "/".join(metavar) if isinstance(metavar, tuple) else metavar
    elif action.dest not in (None, SUPPRESS):
        return action.dest
    elif action.choices is not None:
        return "{%s}" % ",".join(map(str, action.choices))
    return None


# Built-in kinds, keyed the way add_argument(action=...) spells them.
KINDS = MappingProxyType({
    None: Store,
    "store": Store,
    "store_const": StoreConst,
    "store_true": StoreTrue,
    "store_false": StoreFalse,
    "append": Append,
    "append_const": AppendConst,
    "count": Count,
    "help": Help,
    "version": Version,
    "parsers": SubParsers,
})


__all__ = (
    "Action",
    "Store",
    "StoreConst",
    "StoreTrue",
    "StoreFalse",
    "Append",
    "AppendConst",
    "Count",
    "Help",
    "Version",
    "SubParsers",
    "KINDS",
    "action_name",
)
