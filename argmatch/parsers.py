r"""
Argmatch parser: the matching engine and its public entry points.

How a parse runs
1. Optional file expansion: tokens starting with one of fromfile_prefix_chars are
   replaced by the arguments read from that file (recursively).
2. Classification: every token becomes one letter of the token pattern
   ('O' option, 'A' argument, '-' for the literal '--'; everything after '--' is 'A').
   Option tokens are resolved to (action, option_string, explicit_argument) through
   exact lookup, '=' splitting, long-option abbreviation and short-option bundling.
3. Interleaving: while there are option tokens ahead of the cursor, consume as many
   positionals as fit before the next option (shortening the positional chain from
   the end until it matches), then consume that option. Remaining positionals are
   matched against the tail; whatever nobody claimed becomes an extra.
4. Post-pass: required arguments, lazily converted string defaults and required
   mutually exclusive groups.

Every user-input problem surfaces as exactly one ParserException (see argmatch.faults),
routed through trigger(): raised to the caller, or rendered and exit(2) in shell mode.

Quick example:
    >>> from argmatch import ArgumentParser
    >>> parser = ArgumentParser(prog="tool")
    >>> parser.add_argument("-v", "--verbose", action="count")
    >>> parser.add_argument("paths", nargs="+")
    >>> parser.parse_args(["-vv", "a", "b"])
    namespace(paths=['a', 'b'], verbose=2)
"""
import functools
import io
import logging
import operator
import os.path
import sys
from collections import defaultdict

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .actions import _UNRECOGNIZED_ARGS_ATTR, SubParsers, action_name
from .containers import ActionsContainer
from .faults import *
from .faults import trigger as _trigger
from .namespace import Namespace
from .patterns import expectation, looks_like_negative_number, match, match_partial
from .utils import *

logger = logging.getLogger(__name__)


class ArgumentParser(ActionsContainer):
    """
    Object for parsing command line tokens into a Namespace.

    Parameters
    - prog: program name (default: basename of sys.argv[0])
    - usage: explicit usage line ('%(prog)s' is expanded); synthesized otherwise
    - description / epilog: text shown before / after the argument groups
    - version: enables -v/--version with this string
    - parents: parsers whose actions, groups and defaults are copied into this one
    - prefix_chars: characters that mark option strings
    - fromfile_prefix_chars: characters that mark argument files (None disables)
    - argument_default: default for actions that do not give one
    - conflict_handler: "error" | "resolve"
    - add_help: adds -h/--help
    - allow_abbrev: accept unambiguous prefixes of long options

    Runtime flags (keyword-only)
    - shell: render faults (after the usage line) and exit(2) instead of raising
    - fancy: wrap help and fault output in rich panels
    - colorful: style output; plain text when False
    """

    def __init__(
            self,
            prog=None,
            usage=None,
            description=None,
            epilog=None,
            version=None,
            parents=(),
            prefix_chars="-",
            fromfile_prefix_chars=None,
            argument_default=None,
            conflict_handler="error",
            add_help=True,
            allow_abbrev=True,
            *,
            shell=False,
            fancy=False,
            colorful=True
    ):
        super().__init__(
            description=description,
            prefix_chars=prefix_chars,
            argument_default=argument_default,
            conflict_handler=conflict_handler,
        )

        if prog is None:
            prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "argmatch"

        self._prog = prog
        self._usage = usage
        self._epilog = epilog
        self._version = version
        self._fromfile_prefix_chars = fromfile_prefix_chars
        self._add_help = bool(add_help)
        self._allow_abbrev = bool(allow_abbrev)
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

        self._positionals = self.add_argument_group("positional arguments")
        self._optionals = self.add_argument_group("optional arguments")
        self._subparsers = None

        # '-' wins when available so that -h/--help keeps its usual spelling
        default_prefix = "-" if "-" in prefix_chars else prefix_chars[0]
        if self.add_help:
            self.add_argument(
                default_prefix + "h", default_prefix * 2 + "help",
                action="help",
                default=SUPPRESS,
                help="show this help message and exit",
            )
        if self.version:
            self.add_argument(
                default_prefix + "v", default_prefix * 2 + "version",
                action="version",
                default=SUPPRESS,
                version=self.version,
                help="show program's version number and exit",
            )

        for parent in parents:
            self._add_container_actions(parent)
            self._defaults.update(parent._defaults)

    prog = mirror("prog")
    usage = mirror("usage")
    epilog = mirror("epilog")
    version = mirror("version")
    fromfile_prefix_chars = mirror("fromfile_prefix_chars")
    add_help = mirror("add_help")
    allow_abbrev = mirror("allow_abbrev")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    @property
    def groups(self):
        """argument groups in declaration order (default groups first)."""
        return tuple(self._action_groups)

    @property
    def exclusive_groups(self):
        return tuple(self._mutually_exclusive_groups)

    def __rich_repr__(self):
        yield "prog", self.prog
        yield "usage", self.usage
        yield "description", self.description
        yield "version", self.version
        yield "prefix_chars", self.prefix_chars
        yield "conflict_handler", self.conflict_handler
        yield "add_help", self.add_help

    def __repr__(self):
        return f"{type(self).__name__}({
            ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
        })"

    # ----------------------------------------------------------------------
    # declarations
    # ----------------------------------------------------------------------

    def add_subparsers(self, **kwargs):
        """
        Add the sub-command dispatcher (at most one per parser).

        Keywords
        - title/description: put the dispatcher in its own help group
        - prog: prefix used for the sub-parsers' prog (default: prog + positionals)
        - action/parser_class/dest/required/help/metavar: forwarded to the action
        - shell/fancy/colorful/prefix_chars: inherited by every add_parser() unless given

        Returns
        - the SubParsers action; call add_parser(name, aliases=(), help=None, ...) on it.
        """
        if self._subparsers is not None:
            raise ValueError("cannot have multiple subparser arguments")

        kwargs.setdefault("parser_class", type(self))

        if "title" in kwargs or "description" in kwargs:
            title = kwargs.pop("title", "subcommands")
            description = kwargs.pop("description", None)
            self._subparsers = self.add_argument_group(title, description)
        else:
            self._subparsers = self._positionals

        if kwargs.get("prog") is None:
            kwargs["prog"] = " ".join([self.prog, *self._usage_parts(self._get_positional_actions())])

        for name in ("shell", "fancy", "colorful", "prefix_chars"):
            kwargs.setdefault(name, getattr(self, name))

        parsers_class = self._pop_action_class(kwargs, "parsers")
        action = parsers_class(option_strings=[], **kwargs)
        self._subparsers._add_action(action)
        return action

    def _add_action(self, action):
        if action.option_strings:
            self._optionals._add_action(action)
        else:
            self._positionals._add_action(action)
        return action

    def _get_optional_actions(self):
        return [action for action in self._actions if action.option_strings]

    def _get_positional_actions(self):
        return [action for action in self._actions if not action.option_strings]

    # ----------------------------------------------------------------------
    # entry points
    # ----------------------------------------------------------------------

    def parse_args(self, args=None, namespace=None):
        """
        Strict parse: any unrecognized token is a fault.

        Returns
        - Namespace
        """
        namespace, extras = self.parse_known_args(args, namespace)
        if extras:
            self.trigger(self._fault(
                UnrecognizedArgumentsError,
                "unrecognized arguments: %s" % " ".join(extras),
                code=FaultCode.UNRECOGNIZED_ARGUMENTS,
                title="unrecognized arguments",
                tokens=tuple(extras),
                hint="run '%s --help' for the accepted arguments" % self.prog if self.add_help else None,
            ))
        return namespace

    def parse_known_args(self, args=None, namespace=None):
        """
        Lenient parse.

        Parameters
        - args: token sequence (default: sys.argv[1:])
        - namespace: object to fill (default: a new Namespace); values already
          present take precedence over defaults

        Returns
        - (Namespace, extras) where extras lists unclaimed tokens in input order.
        """
        try:
            return self._parse_known(args, namespace)
        except ParserException as fault:
            self.trigger(fault)

    def _parse_known(self, args, namespace):
        """
        Internal: parse without routing faults; sub-parsers are driven through here.
        """
        if args is None:
            args = sys.argv[1:]
        else:
            args = list(args)

        if namespace is None:
            namespace = Namespace()

        # defaults never overwrite what the caller seeded
        for action in self._actions:
            if action.dest is not SUPPRESS and action.default is not SUPPRESS:
                if not hasattr(namespace, action.dest):
                    setattr(namespace, action.dest, action.default)

        for dest, object in self._defaults.items():
            if not hasattr(namespace, dest):
                setattr(namespace, dest, object)

        namespace, args = self._parse_known_args(args, namespace)

        if hasattr(namespace, _UNRECOGNIZED_ARGS_ATTR):
            args.extend(getattr(namespace, _UNRECOGNIZED_ARGS_ATTR))
            delattr(namespace, _UNRECOGNIZED_ARGS_ATTR)

        return namespace, args

    # ----------------------------------------------------------------------
    # the matching engine
    # ----------------------------------------------------------------------

    def _parse_known_args(self, arg_strings, namespace):
        if self.fromfile_prefix_chars is not None:
            arg_strings = self._read_args_from_files(arg_strings)

        # every member of a mutually exclusive group conflicts with all the others
        action_conflicts = defaultdict(list)
        for mutex_group in self._mutually_exclusive_groups:
            group_actions = mutex_group._group_actions
            for index, mutex_action in enumerate(group_actions):
                action_conflicts[mutex_action].extend(group_actions[:index])
                action_conflicts[mutex_action].extend(group_actions[index + 1:])

        # classify tokens: 'O' for options, 'A' for arguments, '-' for '--'
        option_string_indices = {}
        arg_string_pattern_parts = []
        arg_strings_iter = iter(arg_strings)
        for index, arg_string in enumerate(arg_strings_iter):
            if arg_string == "--":
                arg_string_pattern_parts.append("-")
                for arg_string in arg_strings_iter:
                    arg_string_pattern_parts.append("A")
            elif (option_tuple := self._parse_optional(arg_string)) is None:
                arg_string_pattern_parts.append("A")
            else:
                option_string_indices[index] = option_tuple
                arg_string_pattern_parts.append("O")

        arg_strings_pattern = "".join(arg_string_pattern_parts)
        logger.debug("token pattern %r for %r", arg_strings_pattern, arg_strings)

        seen_actions = set()
        seen_non_default_actions = set()
        warned_actions = set()

        def take_action(action, argument_strings, argument_pattern, option_string=None):
            seen_actions.add(action)
            argument_values = self._get_values(action, argument_strings, argument_pattern)

            # identity, not equality: an explicit value equal to the default still counts
            if argument_values is not action.default:
                seen_non_default_actions.add(action)
                for conflict_action in action_conflicts.get(action, ()):
                    if conflict_action in seen_non_default_actions:
                        raise self._fault(
                            MutualExclusionError,
                            "not allowed with argument %s" % action_name(conflict_action),
                            action=action,
                            code=FaultCode.MUTUAL_EXCLUSION,
                            title="mutually exclusive arguments",
                            conflict=conflict_action,
                            hint="use either %s or %s, not both" % (
                                action_name(action),
                                action_name(conflict_action),
                            ),
                        )

            if action.deprecated and action not in warned_actions:
                warned_actions.add(action)
                self._warn_deprecated(action, option_string)

            if argument_values is not SUPPRESS:
                action(self, namespace, argument_values, option_string)

        def consume_optional(start_index):
            action, option_string, explicit_arg = option_string_indices[start_index]
            chars = self.prefix_chars

            # bundled short flags ('-xyz') expand into several action tuples
            action_tuples = []
            while True:
                if action is None:
                    extras.append(arg_strings[start_index])
                    logger.debug("unknown option %r goes to extras", arg_strings[start_index])
                    return start_index + 1

                if explicit_arg is not None:
                    arg_count = self._match_argument(action, "A")

                    if arg_count == 0 and option_string[1] not in chars and explicit_arg:
                        action_tuples.append((action, [], "", option_string))
                        option_string = option_string[0] + explicit_arg[0]
                        if option_string in self._option_string_actions:
                            action = self._option_string_actions[option_string]
                            explicit_arg = explicit_arg[1:] or None
                        else:
                            raise self._explicit_fault(action, explicit_arg)
                    elif arg_count == 1:
                        stop = start_index + 1
                        action_tuples.append((action, [explicit_arg], "A", option_string))
                        break
                    else:
                        raise self._explicit_fault(action, explicit_arg)
                else:
                    start = start_index + 1
                    arg_count = self._match_argument(action, arg_strings_pattern[start:])
                    stop = start + arg_count
                    action_tuples.append(
                        (action, arg_strings[start:stop], arg_strings_pattern[start:stop], option_string)
                    )
                    break

            for action, args, pattern, option_string in action_tuples:
                logger.debug("option %r consumed %r", option_string, args)
                take_action(action, args, pattern, option_string)
            return stop

        positionals = self._get_positional_actions()

        def consume_positionals(start_index):
            arg_counts = self._match_arguments_partial(positionals, arg_strings_pattern[start_index:])

            for action, arg_count in zip(positionals, arg_counts):
                end_index = start_index + arg_count
                args = arg_strings[start_index:end_index]
                pattern = arg_strings_pattern[start_index:end_index]
                start_index = end_index
                logger.debug("positional %r consumed %r", action.dest, args)
                take_action(action, args, pattern)

            # matched positionals are done for this parse
            positionals[:] = positionals[len(arg_counts):]
            return start_index

        extras = []
        start_index = 0
        max_option_string_index = max(option_string_indices, default=-1)
        while start_index <= max_option_string_index:
            next_option_string_index = min(index for index in option_string_indices if index >= start_index)

            if start_index != next_option_string_index:
                positionals_end_index = consume_positionals(start_index)

                # positionals took something: re-evaluate from the new cursor
                if positionals_end_index > start_index:
                    start_index = positionals_end_index
                    continue
                start_index = positionals_end_index

            # the gap up to the next option is nobody's
            if start_index not in option_string_indices:
                extras.extend(arg_strings[start_index:next_option_string_index])
                start_index = next_option_string_index

            start_index = consume_optional(start_index)

        stop_index = consume_positionals(start_index)
        extras.extend(arg_strings[stop_index:])
        logger.debug("extras %r", extras)

        if positionals:
            position = self._get_positional_actions().index(positionals[0]) + 1
            raise self._fault(
                TooFewArgumentsError,
                "too few arguments",
                code=FaultCode.TOO_FEW_ARGUMENTS,
                title="too few arguments",
                missing=tuple(positionals),
                hint="%s is missing from %s position" % (action_name(positionals[0]), ordinal(position)),
            )

        for action in self._actions:
            if action in seen_actions:
                continue
            if action.required:
                raise self._fault(
                    RequiredArgumentError,
                    "argument %s is required" % action_name(action),
                    code=FaultCode.REQUIRED_ARGUMENT,
                    title="required argument",
                    argument=action,
                )
            # string defaults are converted lazily, once, and only when never overridden
            if (
                isinstance(action.default, str) and
                hasattr(namespace, action.dest) and
                action.default is getattr(namespace, action.dest)
            ):
                setattr(namespace, action.dest, self._get_value(action, action.default))

        for group in self._mutually_exclusive_groups:
            if not group.required:
                continue
            if not any(action in seen_non_default_actions for action in group._group_actions):
                names = [action_name(action) for action in group._group_actions if action.help is not SUPPRESS]
                raise self._fault(
                    RequiredGroupError,
                    "one of the arguments %s is required" % " ".join(names),
                    code=FaultCode.REQUIRED_GROUP,
                    title="required group",
                    group=group,
                    hint="pick one of: %s" % ", ".join(names),
                )

        return namespace, extras

    def _parse_optional(self, arg_string):
        """
        Internal: classify one token.

        Returns
        - None: the token is an argument ('A').
        - (action, option_string, explicit_arg): the token is an option ('O');
          action is None for option-shaped tokens nobody registered.
        """
        if not arg_string or arg_string[0] not in self.prefix_chars:
            return None

        if arg_string in self._option_string_actions:
            return self._option_string_actions[arg_string], arg_string, None

        # a lone prefix character ('-' usually means stdin)
        if len(arg_string) == 1:
            return None

        if "=" in arg_string:
            option_string, explicit_arg = arg_string.split("=", 1)
            if option_string in self._option_string_actions:
                return self._option_string_actions[option_string], option_string, explicit_arg

        option_tuples = self._get_option_tuples(arg_string)
        if len(option_tuples) > 1:
            candidates = ", ".join(option_string for _, option_string, _ in option_tuples)
            raise self._fault(
                AmbiguousOptionError,
                "ambiguous option: %s could match %s" % (arg_string, candidates),
                code=FaultCode.AMBIGUOUS_OPTION,
                title="ambiguous option",
                token=arg_string,
                candidates=tuple(option_string for _, option_string, _ in option_tuples),
                hint="spell out one of: %s" % candidates,
            )
        elif len(option_tuples) == 1:
            return option_tuples[0]

        if looks_like_negative_number(arg_string) and not self._has_negative_number_optionals:
            return None

        if any(map(str.isspace, arg_string)):
            return None

        return None, arg_string, None

    def _get_option_tuples(self, option_string):
        """
        Internal: candidate resolutions for an option token that is not an exact match.

        - long form ('--fo', '--fo=x'): every registered option string the prefix starts
          (only when allow_abbrev is set).
        - short form ('-xyz'): the option '-x' with explicit argument 'yz', plus (when
          allow_abbrev is set) every registered option string starting with the token.
        """
        result = []
        chars = self.prefix_chars

        if option_string[0] in chars and option_string[1] in chars:
            if self.allow_abbrev:
                if "=" in option_string:
                    option_prefix, explicit_arg = option_string.split("=", 1)
                else:
                    option_prefix, explicit_arg = option_string, None
                for candidate, action in self._option_string_actions.items():
                    if candidate.startswith(option_prefix):
                        result.append((action, candidate, explicit_arg))

        elif option_string[0] in chars:
            short_option_prefix = option_string[:2]
            short_explicit_arg = option_string[2:]
            for candidate, action in self._option_string_actions.items():
                if candidate == short_option_prefix:
                    result.append((action, candidate, short_explicit_arg))
                elif self.allow_abbrev and candidate.startswith(option_string):
                    result.append((action, candidate, None))

        return result

    def _match_argument(self, action, arg_strings_pattern):
        arg_count = match(action.nargs, arg_strings_pattern, optional=bool(action.option_strings))
        if arg_count is None:
            raise self._fault(
                ArityError,
                expectation(action.nargs),
                action=action,
                code=FaultCode.ARITY_MISMATCH,
                title="wrong number of arguments",
                expected=action.nargs,
            )
        return arg_count

    def _match_arguments_partial(self, actions, arg_strings_pattern):
        return match_partial([(action.nargs, bool(action.option_strings)) for action in actions], arg_strings_pattern)

    def _get_values(self, action, arg_strings, arg_pattern=None):
        """
        Internal: turn the tokens an action consumed into the value it receives.

        arg_pattern holds the token pattern letters of arg_strings; only a token
        classified '-' is the separator, a later literal '--' is plain data.
        """
        arg_strings = list(arg_strings)
        if arg_pattern is None:
            arg_pattern = "A" * len(arg_strings)

        # tails only lose a leading separator
        if action.nargs in (PARSER, REMAINDER):
            if arg_pattern[:1] == "-":
                del arg_strings[0]
        elif "-" in arg_pattern:
            del arg_strings[arg_pattern.index("-")]

        if not arg_strings and action.nargs == OPTIONAL:
            value = action.const if action.option_strings else action.default
            if isinstance(value, str) and value is not SUPPRESS:
                value = self._get_value(action, value)
                self._check_value(action, value)

        elif not arg_strings and action.nargs == ZERO_OR_MORE and not action.option_strings:
            value = action.default if action.default is not None else []

        elif len(arg_strings) == 1 and action.nargs in (None, OPTIONAL):
            value = self._get_value(action, arg_strings[0])
            self._check_value(action, value)

        elif action.nargs == REMAINDER:
            value = [self._get_value(action, arg_string) for arg_string in arg_strings]

        elif action.nargs == PARSER:
            value = [self._get_value(action, arg_string) for arg_string in arg_strings]
            self._check_value(action, value[0])

        else:
            value = [self._get_value(action, arg_string) for arg_string in arg_strings]
            for item in value:
                self._check_value(action, item)

        return value

    def _get_value(self, action, arg_string):
        if (type_func := action.type) is None:
            return arg_string

        try:
            return type_func(arg_string)
        except ArgumentTypeError as error:
            raise self._fault(
                ConversionError,
                str(error),
                action=action,
                code=FaultCode.CONVERSION_FAILED,
                title="invalid value",
                token=arg_string,
            ) from error
        except Exception as error:
            name = getattr(type_func, "__name__", repr(type_func))
            raise self._fault(
                ConversionError,
                "invalid %s value: %r" % (name, arg_string),
                action=action,
                code=FaultCode.CONVERSION_FAILED,
                title="invalid value",
                token=arg_string,
            ) from error

    def _check_value(self, action, value):
        if action.choices is not None and value not in action.choices:
            choices = ", ".join(map(repr, action.choices))
            raise self._fault(
                InvalidChoiceError,
                "invalid choice: %r (choose from %s)" % (value, choices),
                action=action,
                code=FaultCode.INVALID_CHOICE,
                title="invalid choice",
                value=value,
                hint="choose from %s" % choices,
            )

    def _read_args_from_files(self, arg_strings):
        """
        Internal: expand '@file' tokens, depth first, preserving order.
        """
        new_arg_strings = []
        for arg_string in arg_strings:
            if not arg_string or arg_string[0] not in self.fromfile_prefix_chars:
                new_arg_strings.append(arg_string)
                continue

            try:
                with open(
                    arg_string[1:],
                    encoding=sys.getfilesystemencoding(),
                    errors=sys.getfilesystemencodeerrors(),
                ) as args_file:
                    file_arg_strings = []
                    for arg_line in args_file.read().splitlines():
                        file_arg_strings.extend(self.convert_arg_line_to_args(arg_line))
            except OSError as error:
                raise self._fault(
                    ArgumentFileError,
                    "can't open %r: %s" % (arg_string[1:], error.strerror or error),
                    code=FaultCode.ARGUMENT_FILE,
                    title="argument file",
                    token=arg_string,
                ) from error

            logger.debug("expanded %r into %d argument(s)", arg_string, len(file_arg_strings))
            new_arg_strings.extend(self._read_args_from_files(file_arg_strings))

        return new_arg_strings

    def convert_arg_line_to_args(self, arg_line):
        """
        One argument per line; override to split lines differently.
        """
        return [arg_line]

    # ----------------------------------------------------------------------
    # faults
    # ----------------------------------------------------------------------

    def _fault(self, cls, message, /, *, action=None, code, title, **options):
        """
        Internal: build a fault, prefixing "argument <name>: " when the action is known.
        """
        if (name := action_name(action)) is not None:
            message = "argument %s: %s" % (name, message)
        options.setdefault("argument", action)
        return cls(message, parser=self, code=code, title=title, docs=getdoc(code), **options)

    def _explicit_fault(self, action, explicit_arg):
        return self._fault(
            ExplicitArgumentError,
            "ignored explicit argument %r" % explicit_arg,
            action=action,
            code=FaultCode.IGNORED_EXPLICIT_ARGUMENT,
            title="ignored explicit argument",
            token=explicit_arg,
        )

    def _warn_deprecated(self, action, option_string):
        if option_string is not None:
            message = "option %r is deprecated" % option_string
        else:
            message = "argument %r is deprecated" % action.dest
        self.trigger(DeprecatedArgumentWarning(
            message,
            parser=self,
            argument=action,
            code=FaultCode.DEPRECATED_ARGUMENT,
            title="deprecated argument",
            docs=getdoc(FaultCode.DEPRECATED_ARGUMENT),
        ))

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this parser's runtime flags.

        Faults built by a sub-parser keep pointing at it, so shell mode prints
        the usage of the parser that actually failed.
        """
        _trigger(fault, **(
            {"parser": self} |
            dict(fault.options) |
            {"shell": self.shell, "fancy": self.fancy, "colorful": self.colorful} |
            options
        ))

    def error(self, message):
        """
        Report a custom user-input error through the same channel as parse faults.
        """
        self.trigger(ParserException(message, parser=self, title="error"))

    def exit(self, status=0, message=None):
        if message:
            Console(file=sys.stderr, highlight=False).print(Text(message), end="")
        sys.exit(status)

    # ----------------------------------------------------------------------
    # usage, help and version
    # ----------------------------------------------------------------------

    def _metavar(self, action, default_metavar, size):
        if action.metavar is not None:
            result = action.metavar
        elif action.choices is not None:
            result = "{%s}" % ",".join(map(str, action.choices))
        else:
            result = default_metavar
        return result if isinstance(result, tuple) else (result,) * size

    def _format_args(self, action, default_metavar):
        metavar = functools.partial(self._metavar, action, default_metavar)
        match action.nargs:
            case None:
                return "%s" % metavar(1)
            case "?":
                return "[%s]" % metavar(1)
            case "*":
                if len(names := metavar(1)) == 2:
                    return "[%s [%s ...]]" % names
                return "[%s ...]" % names
            case "+":
                return "%s [%s ...]" % metavar(2)
            case "...":
                return "..."
            case "A...":
                return "%s ..." % metavar(1)
            case int(nargs):
                return " ".join(["%s"] * nargs) % metavar(nargs)

    def _format_action_invocation(self, action):
        if not action.option_strings:
            return self._metavar(action, action.dest, 1)[0]
        if action.nargs == 0:
            return ", ".join(action.option_strings)
        args = self._format_args(action, action.dest.upper())
        return ", ".join("%s %s" % (option_string, args) for option_string in action.option_strings)

    def _usage_part(self, action):
        if action.option_strings:
            part = action.option_strings[0]
            if action.nargs != 0:
                part = "%s %s" % (part, self._format_args(action, action.dest.upper()))
            return part
        return self._format_args(action, action.dest)

    def _usage_parts(self, actions):
        """
        Internal: usage fragments, one per visible action or mutually exclusive group.
        """
        parts = []
        grouped = set()
        for action in actions:
            if action.help is SUPPRESS or action in grouped:
                continue

            group = next(
                (group for group in self._mutually_exclusive_groups if action in group._group_actions), None
            )
            if group is not None:
                members = [member for member in group._group_actions if member.help is not SUPPRESS]
                grouped.update(group._group_actions)
                if len(members) > 1:
                    part = " | ".join(map(self._usage_part, members))
                    parts.append(("(%s)" if group.required else "[%s]") % part)
                    continue

            part = self._usage_part(action)
            if action.option_strings and not action.required:
                part = "[%s]" % part
            parts.append(part)
        return parts

    def format_usage(self):
        if self.usage is not None:
            usage = self.usage % {"prog": self.prog}
        else:
            usage = " ".join([
                self.prog,
                *self._usage_parts([*self._get_optional_actions(), *self._get_positional_actions()])
            ])
        return "usage: %s\n" % usage

    def _expand_help(self, action):
        params = {name: getattr(action, name) for name in type(action).__introspectable__}
        params = {name: object for name, object in params.items() if object is not SUPPRESS}
        if params.get("choices") is not None:
            params["choices"] = ", ".join(map(str, params["choices"]))
        return action.help % (params | {"prog": self.prog})

    def _help_renderable(self):
        """
        Build the help screen as a rich renderable.

        Palette keys
        - usage-label, usage-section, description-section, epilog-section
        - group-label, option-name, metavar, argument-description, choice
        - panel-title

        Define a mapping named __styles__ in __main__ to override any palette entry.
        """
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "usage-section": "bold #36C5F0",
            "description-section": "italic #A3A3A3",
            "epilog-section": "#737373",
            "group-label": "bold #FFFFFF",
            "option-name": "bold #00E6FF",
            "metavar": "bold #FFD600",
            "argument-description": "#9CA3AF",
            "choice": "bold #FF4D94",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        def text(fragment, style=""):
            return Text(str(fragment), styler(style))

        renders = [Text.assemble(
            text("usage", "usage-label"), ": ",
            text(self.format_usage().removeprefix("usage: ").rstrip("\n"), "usage-section"),
        )]

        if self.description:
            renders.append(Text(""))
            renders.append(text(self.description % {"prog": self.prog}, "description-section"))

        for group in self._action_groups:
            actions = [action for action in group._group_actions if action.help is not SUPPRESS]
            if not actions:
                continue

            renders.append(Text(""))
            renders.append(Text.assemble(text(group.title, "group-label"), ":"))
            if group.description:
                renders.append(text("  %s" % group.description, "description-section"))

            table = Table.grid(padding=(0, 2), pad_edge=True)
            table.add_column(no_wrap=True)
            table.add_column()
            for action in actions:
                style = "option-name" if action.option_strings else "metavar"
                table.add_row(
                    text(self._format_action_invocation(action), style),
                    text(self._expand_help(action) if action.help else "", "argument-description"),
                )
                if isinstance(action, SubParsers):
                    for name, help in action.choices_help.items():
                        table.add_row(
                            text("  %s" % name, "choice"),
                            text(help % {"prog": self.prog}, "argument-description"),
                        )
            renders.append(table)

        if self.epilog:
            renders.append(Text(""))
            renders.append(text(self.epilog % {"prog": self.prog}, "epilog-section"))

        renderable = Group(*renders)
        if self.fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", "%s HELP" % self.prog.upper(), " ]", style=styler("panel-title")),
                title_align="left",
            )
        return renderable

    def format_help(self):
        # a file-backed console never emits terminal escapes
        console = Console(file=io.StringIO(), highlight=False)
        console.print(self._help_renderable())
        return console.file.getvalue()

    def format_version(self, version=None):
        if (version := version if version is not None else self.version) is None:
            return ""
        if "%(prog)" in version:
            version = version % {"prog": self.prog}
        return version + "\n"

    def print_usage(self, file=None):
        self._print_message(self.format_usage(), file)

    def print_help(self, file=None):
        Console(file=file or sys.stdout, highlight=False).print(self._help_renderable())

    def print_version(self, version=None, file=None):
        self._print_message(self.format_version(version), file)

    def _print_message(self, message, file=None):
        if message:
            Console(file=file or sys.stdout, highlight=False, soft_wrap=True).print(Text(message), end="")


__all__ = ("ArgumentParser",)
