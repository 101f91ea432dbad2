"""
The mutable record produced by a parse.

A Namespace maps each action's dest to its value through plain attribute
access, so any string is a valid key (getattr/setattr handle dests that are
not identifiers, e.g. "foo-bar"). It is pre-seeded with defaults before the
matching engine runs and overwritten as actions fire.
"""
import functools
import operator


class Namespace:
    """
    Simple attribute holder with equality, membership and rich-friendly repr.

    Example
        >>> namespace = Namespace(foo=1)
        >>> namespace.bar = [2]
        >>> "bar" in namespace
        True
    """

    def __init__(self, **values):
        for name, object in values.items():
            setattr(self, name, object)

    def __eq__(self, other):
        if not isinstance(other, Namespace):
            return NotImplemented
        return vars(self) == vars(other)

    def __contains__(self, name):
        return name in self.__dict__

    def __rich_repr__(self):
        yield from sorted(vars(self).items())

    def __repr__(self):
        return f"namespace({
            ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
        })"

    __hash__ = None


__all__ = ("Namespace",)
