"""
Argbind faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue
  the binder can report. Codes are grouped by domain so logs and searches stay
  predictable.
- BindException / BindWarning: base types that carry message + options and
  know how to render themselves in a short, lowercased, actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Taxonomy
- UnknownOptionError: a switch (or a positional token when the record has no
  positional sink) does not resolve to any bindable property.
- MissingValueForOptionError: a switch waiting for a space-separated value was
  followed by another switch.
- ConversionError: a value could not be converted to the property's type.
- DanglingOptionWarning: the tokens ended while a switch was still waiting for
  its value; the property keeps its previous value.

A None token sequence or record is a programming error and is reported as a
plain TypeError by the binder, never as a fault.

Integration
- The binder raises faults directly; bind() routes them through trigger() so
  that in shell mode they are rendered with rich on stderr instead of raised.
"""
import copy
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used by the binder (stable identifiers).

    grouping
    - switches (1111x)
      • UNKNOWN_OPTION, MISSING_VALUE_FOR_OPTION
    - conversion (1113x)
      • CONVERSION_FAILURE
    - warnings (12xxx)
      • DANGLING_OPTION

    normalize() allows host remapping to custom labels while keeping the codes stable.
    """
    # --- switch errors (111xx) ---
    UNKNOWN_OPTION              = 11112
    MISSING_VALUE_FOR_OPTION    = 11117

    # --- conversion errors (111xx) ---
    CONVERSION_FAILURE          = 11131

    # --- warnings (12xxx) ---
    DANGLING_OPTION             = 12117

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


# palettes per fault family; hosts override entries through __main__.__styles__
_PALETTES = {
    "error": {
        "prog-name": "bold #E6E6F0",
        "code": "bold #00E5FF",
        "title": "bold #FF4DA6",
        "message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    },
    "warning": {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",
        "title": "bold #FFC2E0",
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    },
}


def _render(fault, family):
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)
    fancy = options.get("fancy", False)

    styles = defaultdict(str, _PALETTES[family] | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), styles[style] if colorful else "")

    prog = getattr(main, "__prog__", None) or options.get("prog") or "argbind"

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(options["code"].normalize() if "code" in options else "", "code"),
        " | ",
        text(options.get("title", family).title(), "title"),
        " ]"
    )
    message = text(fault.message, "message")
    hint = Text.assemble(text(" → ", "hint-arrow"), text(options.get("hint", ""), "hint"))

    if fancy:
        return Panel(Group(message, hint), title=header, title_align="left", width=console.width - 4)
    return Group(header, message, hint)


class BindException(Exception):
    """
    base for every parse fault raised by the binder.

    the message is kept lowercased and position-first ("... at third position");
    everything else travels in the read-only `options` mapping (code, title,
    hint, index and the fault-specific payload).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if isinstance(self.message, str) else ""

    def __rich__(self):
        return _render(self, "error")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replaced = type(self)(self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced

    @property
    def code(self):
        return self.options.get("code")

    @property
    def index(self):
        return self.options.get("index")


class UnknownOptionError(BindException):
    @property
    def token(self):
        return self.options.get("token")


class MissingValueForOptionError(BindException):
    @property
    def option(self):
        return self.options.get("option")


class ConversionError(BindException):
    @property
    def value(self):
        return self.options.get("value")

    @property
    def type(self):
        return self.options.get("type")


class BindWarning(Warning):
    """
    base for non-fatal binder notices (issued through the warnings module).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if isinstance(self.message, str) else ""

    def __rich__(self):
        return _render(self, "warning")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 2))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DanglingOptionWarning(BindWarning):
    @property
    def option(self):
        return self.options.get("option")


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - in shell mode, rendering happens via the rich console; otherwise errors
      are raised and warnings go through warnings.warn().
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

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "BindException",
    "UnknownOptionError",
    "MissingValueForOptionError",
    "ConversionError",
    "BindWarning",
    "DanglingOptionWarning",
    "trigger",
    "getdoc",
)
