r"""
Argbind binder: maps raw command-line tokens onto a destination record.

Token classification
- A token is a switch when it fully matches SWITCH:
    (--|-|/)<name>[(:|=)<value>]
  • <name> is anything but ':' and '='.
  • <value> is either bare (no quote characters at all) or wrapped in a pair of
    matching quotes; the pair is stripped and quotes of the other kind inside
    are kept as-is:  --title:"it's"  ->  it's
  • an opening quote may also go unclosed, or be closed by the other quote
    kind, when the value holds no quotes:  --title:"draft  ->  draft
  • a closing quote without an opening one makes the token positional.
- Anything else is a positional candidate.

State machine (one call, one pending slot)
- switch, boolean property     → True, or the attached value parsed by its converter.
- switch, other property       → attached value applied now; without one the
                                 property becomes *pending* and the next token,
                                 when it is not a switch, is its value
                                 (`--out file` is the same as `--out:file`).
- switch while pending         → MissingValueForOptionError (a switch is never a value).
- positional while pending     → value of the pending property.
- positional otherwise         → appended to the positional sink, or
                                 UnknownOptionError when the record has none.
- end of tokens while pending  → the property keeps its previous value and a
                                 DanglingOptionWarning is issued.

Value setting
- list properties append the raw string (repeats accumulate in order).
- other properties get converter(value); a converter failure becomes a
  ConversionError chained to the original exception.

A blank attached value (`--out:` or `--out=""`) counts as no value at all.

Every fault aborts the call immediately. Properties bound by earlier tokens stay
bound, so a record whose parse failed should be discarded by the caller.
"""
import re
import sys
from collections.abc import Iterable

from .bindings import Kind
from .schema import catalog
from .environ import split
from .faults import *
from .utils import *

SWITCH = re.compile(r"""
    (?:--?|/)
    (?P<switch>[^:=]*)
    (?:
        [:=]
        (?:
            (?P<quote>["'])(?P<quoted>(?:(?!(?P=quote)).)*)(?P=quote)
          | (?P<opened>["'])(?P<loose>[^"']*)["']?
          | (?P<value>[^"']*)
        )
    )?
""", re.VERBOSE | re.DOTALL)


def _classify(token):
    """
    Split a switch token into (name, value); None when the token is positional.

    The value is None when nothing (or only whitespace) is attached.
    """
    if not (match := SWITCH.fullmatch(token)):
        return None
    if match["quote"]:
        value = match["quoted"]
    elif match["opened"]:
        value = match["loose"]
    else:
        value = match["value"]
    if value is not None and not value.strip():
        value = None
    return match["switch"], value


def _assign(target, binding, value, index):
    """
    Apply a raw string value to a resolved, non-boolean binding.
    """
    if binding.kind is Kind.LIST:
        getattr(target, binding.name).append(value)
        return
    setattr(target, binding.name, _convert(binding, value, index))


def _convert(binding, value, index):
    try:
        return binding.convert(value)
    except Exception as exception:
        typename = getattr(binding.type, "__name__", "value")
        raise ConversionError(
            "value %r for option %r at %s position cannot be converted to %s" % (
                value, binding.name, ordinal(index), typename
            ),
            title="conversion error",
            code=FaultCode.CONVERSION_FAILURE,
            hint="use a valid %s for %r" % (typename, binding.name),
            docs=getdoc(FaultCode.CONVERSION_FAILURE),
            index=index,
            option=binding.name,
            value=value,
            type=typename,
        ) from exception


def parse(tokens, target, /, **options):
    """
    Bind tokens onto target in place and return target.

    Parameters
    - tokens: Iterable[str]
      already-split command-line tokens (without the program name).
    - target: object
      destination record; its type declares the bindings (see argbind.bindings
      and argbind.schema.register).
    - **options: runtime flags (shell, fancy, colorful) forwarded to warnings.

    Raises
    - TypeError: tokens or target is None, tokens is a bare string or holds a
      non-string item, or the record type declares two positional sinks.
    - UnknownOptionError, MissingValueForOptionError, ConversionError.
    """
    if tokens is None:
        raise TypeError("parse() tokens cannot be None")
    if target is None:
        raise TypeError("parse() target cannot be None")
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError("parse() tokens must be an iterable of strings")

    props = catalog(type(target))
    pending = None

    for index, token in enumerate(tokens, 1):
        if not isinstance(token, str):
            raise TypeError("parse() tokens must be an iterable of strings")

        if (switch := _classify(token)) is None:
            if pending is not None:
                _assign(target, pending, token, index)
            elif props.sink is not None:
                getattr(target, props.sink.name).append(token)
            else:
                raise UnknownOptionError(
                    "unexpected positional %r at %s position" % (token, ordinal(index)),
                    title="unknown option",
                    code=FaultCode.UNKNOWN_OPTION,
                    hint="this program takes no positional arguments; pass values as --name=value",
                    docs=getdoc(FaultCode.UNKNOWN_OPTION),
                    index=index,
                    token=token,
                )
            pending = None
            continue

        # a switch cannot serve as the value of the previous one
        if pending is not None:
            raise MissingValueForOptionError(
                "missing value for option %r before %r at %s position" % (pending.name, token, ordinal(index)),
                title="missing value for option",
                code=FaultCode.MISSING_VALUE_FOR_OPTION,
                hint="pass a value right after it (--%s <value>) or attach one (--%s=<value>)" % (
                    pending.name, pending.name
                ),
                docs=getdoc(FaultCode.MISSING_VALUE_FOR_OPTION),
                index=index - 1,
                option=pending.name,
            )

        name, value = switch
        if (binding := props.resolve(name)) is None:
            raise UnknownOptionError(
                "unknown option %r at %s position" % (name, ordinal(index)),
                title="unknown option",
                code=FaultCode.UNKNOWN_OPTION,
                hint="check the spelling of %r" % token,
                docs=getdoc(FaultCode.UNKNOWN_OPTION),
                index=index,
                token=name,
            )

        if binding.kind is Kind.BOOLEAN:
            setattr(target, binding.name, True if value is None else _convert(binding, value, index))
        elif value is not None:
            _assign(target, binding, value, index)
        else:
            pending = binding

    if pending is not None:
        # the property keeps whatever it held before the call
        trigger(DanglingOptionWarning(
            "option %r at the last position has no value and was left unchanged" % pending.name,
            title="dangling option",
            code=FaultCode.DANGLING_OPTION,
            hint="pass a value after it (--%s <value>) or attach one (--%s=<value>)" % (
                pending.name, pending.name
            ),
            docs=getdoc(FaultCode.DANGLING_OPTION),
            option=pending.name,
        ), stacklevel=4, **options)

    return target


def bind(record, prompt=Unset, /, *, shell=False, fancy=False, colorful=True):
    """
    Convenience runner: build or take a record, parse a prompt into it, surface faults.

    Parameters
    - record: a record instance, or a record class instantiated with no arguments.
    - prompt:
      • Unset: read tokens from sys.argv[1:].
      • str: a raw command line, split with argbind.environ.split (nothing skipped).
        The splitter removes quotes before classification, so `--name:"it's"`
        reaches the binder as `--name:it's` and is taken as a positional; pass
        such values as a pre-tokenized sequence instead.
      • Iterable[str]: pre-tokenized sequence.
    - shell: when True, faults are rendered on stderr with rich (errors exit with
      status 1); otherwise errors are raised and warnings issued.
    - fancy / colorful: rendering flags for shell mode.

    Returns
    - the bound record.
    """
    if record is None:
        raise TypeError("bind() record cannot be None")
    if isinstance(record, type):
        record = record()

    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = split(prompt, skip=False)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
    else:
        raise TypeError("bind() prompt must be a string or an iterable of strings")

    options = {"shell": shell, "fancy": fancy, "colorful": colorful}
    try:
        return parse(tokens, record, **options)
    except BindException as exception:
        fault = exception
    trigger(fault, **options)


__all__ = (
    "SWITCH",
    "parse",
    "bind",
)
