"""
Argbind utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the bindings, catalog and binder layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level modules.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks.

- ordinal(number)
  • Human-friendly position labels ("first", "second", ..., "11th", "21st") for fault messages.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> ordinal(3), ordinal(22)
    ('third', '22nd')
"""
import functools
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Used where None is a legitimate user value (an Option default, for example)
    but the API still needs to tell “not provided” apart from “provided as None”.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a singleton per process.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator
    """
    match len(parameters):
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("rename() name must be a string")

            def decorator(callable, /):
                return rename(callable, name)

            return decorator
        case 2:
            callable, name = parameters
            if not isinstance(name, str):
                raise TypeError("rename() name must be a string")
            callable.__name__ = name
            callable.__qualname__ = name
            return callable
        case _:
            raise TypeError(f"rename() takes 1 or 2 positional arguments but {len(parameters)} were given")


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

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "ordinal",
)
