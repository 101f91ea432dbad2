"""
Argmatch containers: registration of actions, option-string index, and groups.

ActionsContainer
- Owns the canonical, ordered action list (declaration order is both display order
  and positional-matching order) and the option string → action index.
- Resolves add_argument(...) into a concrete action kind once, at registration
  time, through the "action" and "type" registries.
- Applies the conflict policy when an option string is registered twice:
  • "error": configuration fails immediately, naming the conflicting strings.
  • "resolve": the existing action loses those strings (and is dropped entirely
    once it has none left), then the new action is indexed normally.

ArgumentGroup / MutuallyExclusiveGroup
- Groups never own actions: they hold back-references into their container and
  a list of member actions; every registration is forwarded to the root container.
- A mutually exclusive group only accepts optional (not required) members.

Configuration mistakes raise ValueError/TypeError right here; nothing in this
module is involved once a parse is running.
"""
import logging

from .actions import KINDS, action_name
from .patterns import looks_like_negative_number
from .utils import *

logger = logging.getLogger(__name__)


def _metavar_sizes(nargs, /):
    """
    Internal: the tuple-metavar lengths an arity can display.
    """
    match nargs:
        case None | "?" | "A...":
            return (1,)
        case "*":
            return (1, 2)
        case "+":
            return (2,)
        case "...":
            return None
        case int():
            return (nargs,)


class ActionsContainer:
    """
    Registration surface shared by parsers and groups.

    Parameters
    - description: str | None
    - prefix_chars: str (characters that mark option strings)
    - argument_default: default applied to actions that do not give one
    - conflict_handler: "error" | "resolve"
    """

    def __init__(self, description=None, prefix_chars="-", argument_default=None, conflict_handler="error"):
        if not isinstance(prefix_chars, str) or not prefix_chars:
            raise ValueError("prefix_chars must be a non-empty string")

        self._description = description
        self._prefix_chars = prefix_chars
        self._argument_default = argument_default
        self._conflict_handler = conflict_handler

        self._registries = {}
        for name, kind in KINDS.items():
            self.register("action", name, kind)

        # raise early for an unknown conflict policy
        self._get_handler()

        self._actions = []
        self._option_string_actions = {}
        self._action_groups = []
        self._mutually_exclusive_groups = []
        self._defaults = {}
        self._has_negative_number_optionals = False

    description = mirror("description")
    prefix_chars = mirror("prefix_chars")
    argument_default = mirror("argument_default", frozen=False)
    conflict_handler = mirror("conflict_handler")
    actions = mirror("actions")

    @property
    def _root(self):
        return self

    # ----------------------------------------------------------------------
    # registries
    # ----------------------------------------------------------------------

    def register(self, registry_name, value, object):
        """
        Map a key to a factory in one registry ("action" or "type").

        Later registrations override earlier ones with the same key.
        """
        self._root._registries.setdefault(registry_name, {})[value] = object

    def _registry_get(self, registry_name, value, default=None):
        return self._root._registries.get(registry_name, {}).get(value, default)

    # ----------------------------------------------------------------------
    # defaults
    # ----------------------------------------------------------------------

    def set_defaults(self, **kwargs):
        """
        Set parser-level defaults; also rewrites the default of matching actions.

        Defaults for dests with no action still land in the namespace of every parse.
        """
        root = self._root
        root._defaults.update(kwargs)

        for action in root._actions:
            if action.dest in kwargs:
                action._default = kwargs[action.dest]

    def get_default(self, dest):
        root = self._root
        for action in root._actions:
            if action.dest == dest and action.default is not None:
                return action.default
        return root._defaults.get(dest, None)

    # ----------------------------------------------------------------------
    # adding arguments
    # ----------------------------------------------------------------------

    def add_argument(self, *args, **kwargs):
        """
        add_argument(dest, ..., name=value, ...)
        add_argument(option_string, option_string, ..., name=value, ...)

        Positional when a single name is given that does not start with a prefix
        character; optional otherwise.

        Returns
        - the registered Action.

        Raises
        - ValueError/TypeError on any configuration mistake (unknown action key,
          invalid option string, non-callable type, metavar/nargs mismatch, conflicts).
        """
        root = self._root
        chars = root.prefix_chars

        if not args or len(args) == 1 and args[0][:1] not in chars:
            if args and "dest" in kwargs:
                raise ValueError("dest supplied twice for positional argument")
            kwargs = self._get_positional_kwargs(*args, **kwargs)
        else:
            kwargs = self._get_optional_kwargs(*args, **kwargs)

        if "default" not in kwargs:
            if (dest := kwargs["dest"]) in root._defaults:
                kwargs["default"] = root._defaults[dest]
            elif root.argument_default is not None:
                kwargs["default"] = root.argument_default

        action_class = self._pop_action_class(kwargs)
        if not callable(action_class):
            raise ValueError("unknown action %r" % (action_class,))

        if kwargs.get("type") is not None:
            kwargs["type"] = self._registry_get("type", kwargs["type"], kwargs["type"])
            if not callable(kwargs["type"]):
                raise ValueError("%r is not callable" % (kwargs["type"],))

        action = action_class(**kwargs)

        if isinstance(action.metavar, tuple):
            sizes = _metavar_sizes(action.nargs)
            if sizes is not None and len(action.metavar) not in sizes:
                raise ValueError("length of metavar tuple does not match nargs")

        return self._add_action(action)

    def add_argument_group(self, title=None, description=None):
        group = ArgumentGroup(self, title=title, description=description)
        self._root._action_groups.append(group)
        return group

    def add_mutually_exclusive_group(self, required=False):
        group = MutuallyExclusiveGroup(self, required=required)
        self._root._mutually_exclusive_groups.append(group)
        return group

    def _add_action(self, action):
        return self._register(action)

    def _register(self, action):
        """
        Internal: index an action on the root container.

        Conflicts are checked first; negative-number-like option strings flip the
        classification heuristic for the whole container.
        """
        root = self._root
        root._check_conflict(action)

        root._actions.append(action)
        for option_string in action.option_strings:
            root._option_string_actions[option_string] = action
            if looks_like_negative_number(option_string):
                root._has_negative_number_optionals = True

        logger.debug("registered %r as %s", action_name(action), type(action).__typename__)
        return action

    def _remove_action(self, action):
        """
        Internal: drop an action from the root and from every group it belongs to.
        """
        root = self._root
        root._actions.remove(action)
        for group in (*root._action_groups, *root._mutually_exclusive_groups):
            if action in group._group_actions:
                group._group_actions.remove(action)

    def _add_container_actions(self, container):
        """
        Internal: copy a parent's actions, groups and mutually exclusive groups.

        Groups are matched by title; a parent group with an unknown title is
        recreated here. Mutually exclusive groups are always recreated.
        """
        title_group_map = {}
        for group in self._root._action_groups:
            if group.title in title_group_map:
                raise ValueError("cannot merge actions - two groups are named %r" % group.title)
            title_group_map[group.title] = group

        group_map = {}
        for group in container._action_groups:
            if group.title not in title_group_map:
                title_group_map[group.title] = self.add_argument_group(
                    title=group.title,
                    description=group.description,
                )
            for action in group._group_actions:
                group_map[action] = title_group_map[group.title]

        for group in container._mutually_exclusive_groups:
            mutex_group = self.add_mutually_exclusive_group(required=group.required)
            for action in group._group_actions:
                group_map[action] = mutex_group

        for action in container._actions:
            group_map.get(action, self)._add_action(action)

    def _get_positional_kwargs(self, dest=None, **kwargs):
        if dest is None:
            dest = kwargs.pop("dest", None)
        if not dest:
            raise ValueError("dest is required for positional arguments")

        if "required" in kwargs:
            raise TypeError("'required' is an invalid argument for positionals")

        # a positional is optional only when its arity tolerates zero tokens
        kwargs["required"] = kwargs.get("nargs") not in (OPTIONAL, ZERO_OR_MORE)

        return kwargs | {"dest": dest, "option_strings": []}

    def _get_optional_kwargs(self, *args, **kwargs):
        chars = self._root.prefix_chars
        option_strings = []
        long_option_strings = []

        for option_string in args:
            if not isinstance(option_string, str) or not option_string or option_string[0] not in chars:
                raise ValueError(
                    "invalid option string %r: must start with a character %r" % (option_string, chars)
                )
            option_strings.append(option_string)
            if len(option_string) > 1 and option_string[1] in chars:
                long_option_strings.append(option_string)

        # '--foo-bar' -> 'foo_bar', '-x' -> 'x'
        if (dest := kwargs.pop("dest", None)) is None:
            dest = (long_option_strings or option_strings)[0].lstrip(chars)
            if not dest:
                raise ValueError("dest= is required for options like %r" % option_strings[0])
            dest = dest.replace("-", "_")

        return kwargs | {"dest": dest, "option_strings": option_strings}

    def _pop_action_class(self, kwargs, default=None):
        action = kwargs.pop("action", default)
        return self._registry_get("action", action, action)

    # ----------------------------------------------------------------------
    # conflicts
    # ----------------------------------------------------------------------

    def _get_handler(self):
        match self._root.conflict_handler:
            case "error":
                return self._handle_conflict_error
            case "resolve":
                return self._handle_conflict_resolve
        raise ValueError("invalid conflict_resolution value: %r" % self._root.conflict_handler)

    def _check_conflict(self, action):
        index = self._root._option_string_actions
        conflicts = [
            (option_string, index[option_string]) for option_string in action.option_strings if option_string in index
        ]
        if conflicts:
            self._get_handler()(action, conflicts)

    def _handle_conflict_error(self, action, conflicts):
        raise ValueError("argument %s: conflicting option string%s: %s" % (
            action_name(action),
            "s" if len(conflicts) > 1 else "",
            ", ".join(option_string for option_string, _ in conflicts),
        ))

    def _handle_conflict_resolve(self, action, conflicts):
        root = self._root
        for option_string, existing in conflicts:
            existing._option_strings.remove(option_string)
            root._option_string_actions.pop(option_string, None)
            logger.debug("option string %r moved from %r", option_string, existing.dest)

            if not existing.option_strings:
                root._remove_action(existing)


class ArgumentGroup(ActionsContainer):
    """
    Display group: a titled subset of a container's actions.

    Every registration is forwarded to the root container; the group only keeps
    the list of its own members.
    """

    def __init__(self, container, title=None, description=None):
        self._container = container
        self._title = title
        self._description = description
        self._group_actions = []

    title = mirror("title")
    actions = mirror("group_actions")

    @property
    def container(self):
        return self._container

    @property
    def _root(self):
        return self._container._root

    @property
    def prefix_chars(self):
        return self._root.prefix_chars

    @property
    def argument_default(self):
        return self._root.argument_default

    @property
    def conflict_handler(self):
        return self._root.conflict_handler

    def _add_action(self, action):
        action = self._root._register(action)
        self._group_actions.append(action)
        return action


class MutuallyExclusiveGroup(ArgumentGroup):
    """
    Constraint group: at most one member may fire with a non-default value per
    parse; with required=True at least one must.
    """

    def __init__(self, container, required=False):
        super().__init__(container)
        self._required = bool(required)

    required = mirror("required")

    def _add_action(self, action):
        if action.required:
            raise ValueError("mutually exclusive arguments must be optional")
        action = self._container._add_action(action)
        self._group_actions.append(action)
        return action


__all__ = (
    "ActionsContainer",
    "ArgumentGroup",
    "MutuallyExclusiveGroup",
)
