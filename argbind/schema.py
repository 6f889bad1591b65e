"""
Argbind schema: the property catalog of a record type.

A Catalog is the binder's view of one destination record type: the ordered
bindings declared for it, the positional sink (if any) and a case-insensitive
switch-name resolver. It is a pure projection of the type's declarations, so
catalog() builds it once per type and caches it for the life of the process.

Sources (walked base classes first, so subclasses can redeclare a property)
- Binding descriptors declared in the class body.
- Bindings attached with register(), for records that keep their own storage
  (dataclasses, namespaces, __slots__ classes).

Resolution order (resolve)
- For each binding in declaration order: its property name, then its short
  alias, then its long alias, compared with str.casefold(). First match wins.
"""
import functools
from types import MappingProxyType

from .bindings import Binding
from .utils import *

# register() bookkeeping, keyed by record type
_registry = {}
# record types whose catalog was already built
_owners = set()


class Catalog:
    """
    Immutable, ordered collection of the bindings of one record type.
    """
    __slots__ = ("_owner", "_bindings", "_sink")

    def __init__(self, owner, bindings, /):
        sink = None
        for binding in bindings:
            if not binding.positional:
                continue
            if sink is not None:
                raise TypeError(
                    f"{owner.__qualname__} declares more than one positional sink "
                    f"({sink.name!r} and {binding.name!r})"
                )
            sink = binding
        self._owner = owner
        self._bindings = MappingProxyType({binding.name: binding for binding in bindings})
        self._sink = sink

    @property
    def owner(self):
        return self._owner

    @property
    def sink(self):
        return self._sink

    def resolve(self, name, /):
        """
        Return the binding a switch name refers to, or None.
        """
        folded = name.casefold()
        for binding in self._bindings.values():
            for candidate in binding.names:
                if candidate.casefold() == folded:
                    return binding
        return None

    def __getitem__(self, name, /):
        return self._bindings[name]

    def __contains__(self, name, /):
        return name in self._bindings

    def __iter__(self):
        return iter(self._bindings.values())

    def __len__(self):
        return len(self._bindings)

    def __rich_repr__(self):
        yield "owner", self._owner.__qualname__
        yield "bindings", tuple(self._bindings.values())

    def __repr__(self):
        return f"catalog(owner={self._owner.__qualname__}, bindings={tuple(self._bindings)!r})"


@functools.cache
def catalog(cls, /):
    """
    Build (once per type) the catalog of a destination record type.

    Raises
    - TypeError: cls is not a class, or it declares more than one positional sink.
    """
    if not isinstance(cls, type):
        raise TypeError("catalog() argument must be a class")

    bindings, registered = {}, set()
    for base in reversed(cls.__mro__):
        for name, value in vars(base).items():
            if isinstance(value, Binding):
                bindings.pop(name, None)
                bindings[name] = value
                registered.discard(name)
            elif name in bindings and name not in registered:
                # a plain attribute in a subclass hides an inherited descriptor;
                # registered records keep their values in plain attributes
                del bindings[name]
        for name, value in _registry.get(base, {}).items():
            bindings.pop(name, None)
            bindings[name] = value
            registered.add(name)

    self = Catalog(cls, tuple(bindings.values()))
    _owners.add(cls)
    return self


def register(source=Unset, /, **bindings):
    """
    Attach bindings to a record type that stores its own values.

    Invocation modes
    - Direct:    register(Settings, verbose=Flag("v"), files=Cardinals())
    - Decorator: @register(verbose=Flag("v"), files=Cardinals())

    The keyword names are the record's attribute names; the binder reads and
    writes them with getattr()/setattr(), so the record (not the binding) owns the
    defaults. List-kind attributes must already hold a mutable list.

    Raises
    - TypeError: the target is not a class, a value is not a Binding, or the
      catalog of the class (or of a subclass) was already built.
    """
    for name, binding in bindings.items():
        if not isinstance(binding, Binding):
            raise TypeError(f"register() value for {name!r} must be a binding")

    @rename("register")
    def wrapper(source, /):
        if not isinstance(source, type):
            raise TypeError("register() must be applied to a class")
        if any(issubclass(owner, source) for owner in _owners):
            raise TypeError(f"register() called after the catalog of {source.__qualname__} was built")
        for name, binding in bindings.items():
            binding.attach(name)
        _registry.setdefault(source, {}).update(bindings)
        return source

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Catalog",
    "catalog",
    "register",
)
