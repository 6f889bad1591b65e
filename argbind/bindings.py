r"""
Argbind binding specifications.

Overview
- Specs
  • Flag: boolean property; a bare switch sets it to True, an attached value is
    parsed with `boolean` (or a custom converter).
  • Option[_T]: scalar property with a converter (`type`) from string to value.
  • Multiple: list-of-string property; every occurrence of the switch appends.
  • Cardinals: list-of-string property that also collects positional tokens
    (the record's positional sink; at most one per record type).

- Declaration
  Specs are declared as class attributes of the destination record, where they
  act as data descriptors holding per-instance values:

    >>> class Settings:
    ...     verbose = Flag("v")
    ...     level = Option("l", "level", type=int, default=0)
    ...     include = Multiple("I")
    ...     files = Cardinals()

  Records that cannot carry descriptors (dataclasses, namespaces) attach the
  same bindings through argbind.schema.register(); in that case the binding is pure
  metadata and the record stores its own values.

Metadata (sanitized on construction)
- short / long: optional aliases matched case-insensitively; they must be
  non-empty strings without ':' or '=' (those characters end a switch name).
- type: callable converter, str -> value.
- default: value returned before anything was bound (Flag: False, Option: None,
  list kinds: a fresh list per instance, seeded from `default`).

Immutability
- Specs are frozen after construction; the property name is assigned exactly
  once (by __set_name__ or by registration).
"""
import builtins
import re
from enum import StrEnum

from .utils import *


class Kind(StrEnum):
    BOOLEAN = "boolean"
    SCALAR = "scalar"
    LIST = "list"


def boolean(value, /):
    """
    Standard boolean parse used by Flag.

    Accepts "true" and "false" in any letter case, surrounding whitespace ignored.
    Anything else raises ValueError.
    """
    if not isinstance(value, str):
        raise TypeError("boolean() argument must be a string")
    match value.strip().casefold():
        case "true":
            return True
        case "false":
            return False
    raise ValueError(f"string was not recognized as a valid boolean: {value!r}")


def _sanitize_alias(cls, alias, role, /):
    """
    Internal: validate one alias and normalize it (trimmed string or None).

    Raises
    - TypeError: alias is neither Unset nor a string.
    - ValueError: alias is empty after trimming or contains ':' / '='.
    """
    if not isinstance(alias, str | UnsetType):
        raise TypeError(f"{cls.__typename__} {role} alias must be a string")
    elif isinstance(alias, str) and not (alias := alias.strip()):
        raise ValueError(f"{cls.__typename__} {role} alias cannot be empty")
    elif isinstance(alias, str) and re.search(r"[:=]", alias):
        raise ValueError(f"{cls.__typename__} {role} alias cannot contain ':' or '='")
    return coalesce(alias)


class Binding:
    """
    Base of every bindable property spec.

    Subclasses fix `kind` and `positional`; instances carry the aliases, the
    converter and the default. See the module docstring for declaration forms.
    """
    __slots__ = ("_name", "_short", "_long", "_type", "_default")

    __typename__ = "binding"

    kind = Kind.SCALAR
    positional = False

    def __init_subclass__(cls, **options):
        super().__init_subclass__(**options)
        cls.__typename__ = cls.__name__.lower()

    def __init__(self, short=Unset, long=Unset, /, *, type=str, default=None):
        cls = builtins.type(self)
        if not callable(type):
            raise TypeError(f"{cls.__typename__} 'type' must be callable")
        self._name = None
        self._short = _sanitize_alias(cls, short, "short")
        self._long = _sanitize_alias(cls, long, "long")
        self._type = type
        self._default = default

    @property
    def name(self):
        return self._name

    @property
    def short(self):
        return self._short

    @property
    def long(self):
        return self._long

    @property
    def type(self):
        return self._type

    @property
    def default(self):
        return self._default

    @property
    def names(self):
        """
        Switch names in resolution order: property name, short alias, long alias.
        """
        return tuple(name for name in (self._name, self._short, self._long) if name is not None)

    def attach(self, name, /):
        """
        Assign the property name this binding targets (once).

        Re-attaching under the same name is a no-op; any other name raises TypeError.
        """
        if not isinstance(name, str) or not name.isidentifier():
            raise TypeError(f"{builtins.type(self).__typename__} name must be an identifier")
        if self._name is not None and self._name != name:
            raise TypeError(f"{builtins.type(self).__typename__} is already bound to {self._name!r}")
        self._name = name
        return self

    def convert(self, value, /):
        return self._type(value)

    def initial(self):
        """
        Value a fresh record holds for this property.
        """
        return self._default

    def __set_name__(self, owner, name):
        self.attach(name)

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        try:
            return instance.__dict__[self._name]
        except KeyError:
            # list kinds must hand out the stored object so appends persist
            return instance.__dict__.setdefault(self._name, self.initial())

    def __set__(self, instance, value):
        instance.__dict__[self._name] = value

    def __delete__(self, instance):
        instance.__dict__.pop(self._name, None)

    def __rich_repr__(self):
        yield "name", self._name
        yield "short", self._short
        yield "long", self._long
        if self.kind is not Kind.LIST:
            yield "type", getattr(self._type, "__name__", self._type)
        yield "default", self._default

    def __repr__(self):
        return "%s(%s)" % (builtins.type(self).__typename__, ", ".join(
            "%s=%r" % (key, value) for key, value in self.__rich_repr__()
        ))


class Flag(Binding):
    __slots__ = ()

    kind = Kind.BOOLEAN

    def __init__(self, short=Unset, long=Unset, /, *, type=boolean, default=False):
        super().__init__(short, long, type=type, default=default)


class Option(Binding):
    __slots__ = ()

    kind = Kind.SCALAR

    def __init__(self, short=Unset, long=Unset, /, *, type=str, default=None):
        super().__init__(short, long, type=type, default=default)


class Multiple(Binding):
    __slots__ = ()

    kind = Kind.LIST

    def __init__(self, short=Unset, long=Unset, /, *, default=()):
        if not isinstance(default, str):
            default = tuple(default)
        if isinstance(default, str) or not all(isinstance(item, str) for item in default):
            raise TypeError(f"{builtins.type(self).__typename__} 'default' must be an iterable of strings")
        super().__init__(short, long, type=str, default=default)

    def initial(self):
        return list(self._default)


class Cardinals(Multiple):
    """
    Positional sink: collects every token that is neither a switch nor the value
    of a pending switch. It is still addressable as a switch by name or alias.
    """
    __slots__ = ()

    positional = True


__all__ = (
    "Kind",
    "boolean",
    "Binding",
    "Flag",
    "Option",
    "Multiple",
    "Cardinals",
)
