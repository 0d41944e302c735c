"""
``litprint.text``: Literal forms
================================

The printers in this module turn the nodes visited by
:func:`~litprint.base.reduce_value` into python source text. Every value comes
out on a single line; the result can be read back with :func:`ast.literal_eval`
(or :func:`eval` for special floats and registered types).

Strings are always delimited by single quotes and use backslash escapes::

    >>> print(show("it's"))
    'it\\'s'
    >>> print(show(["a", 44, {"k": (1.5, None)}]))
    ['a', 44, {'k': (1.5, None)}]

"""

from __future__ import annotations

import decimal
import enum
import math
from typing import Any, ClassVar, Collection, Final, Iterable, Iterator

from . import base

__all__ = (
    "show",
    "escape_str",
    "escape_bytes",
    "LiteralPrinter",
    "EvalPrinter",
    "Format",
)


class Format(enum.Enum):
    """Which format to use for :func:`show`"""

    #: Special floats print as ``nan``, ``inf`` and ``-inf``.
    LITERAL = enum.auto()

    #: Special floats print as expressions :func:`eval` can read back.
    EVAL = enum.auto()


LITERAL: Final = Format.LITERAL
EVAL: Final = Format.EVAL

DELIMITER: Final = "'"

_ESCAPES: Final = {
    "\\": "\\\\",
    DELIMITER: "\\" + DELIMITER,
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_BYTE_ESCAPES: Final = {ord(k): v for k, v in _ESCAPES.items()}


def _escape_char(ch: str) -> str:
    code = ord(ch)
    if code < 0x100:
        return f"\\x{code:02x}"
    if code < 0x10000:
        return f"\\u{code:04x}"
    return f"\\U{code:08x}"


def escape_str(s: str) -> str:
    """Escape *s* so it can be put between two delimiters.

    >>> print(escape_str("tab\\there"))
    tab\\there
    >>> print(escape_str("\\x00\\u2028é"))
    \\x00\\u2028é
    """
    if s.isprintable() and "\\" not in s and DELIMITER not in s:
        return s
    out: list[str] = []
    for ch in s:
        escaped = _ESCAPES.get(ch)
        if escaped is not None:
            out.append(escaped)
        elif ch.isprintable():
            out.append(ch)
        else:
            out.append(_escape_char(ch))
    return "".join(out)


def escape_bytes(b: bytes) -> str:
    out: list[str] = []
    for code in b:
        escaped = _BYTE_ESCAPES.get(code)
        if escaped is not None:
            out.append(escaped)
        elif 0x20 <= code < 0x7F:
            out.append(chr(code))
        else:
            out.append(f"\\x{code:02x}")
    return "".join(out)


def _format_int(i: int) -> str:
    try:
        return repr(i)
    except ValueError:
        # Past `sys.get_int_max_str_digits()` digits. Decimal does the
        # conversion without going through `int.__str__`.
        return str(decimal.Decimal(i))


class LiteralPrinter(base.Accumulator[str, str]):
    "Serialize a value as its literal form."

    NAN: ClassVar[str] = "nan"
    INFINITY: ClassVar[str] = "inf"

    def format_list(
        self,
        docs: Iterable[str],
        *,
        sep: str = ", ",
        opar: str = "(",
        cpar: str = ")",
    ) -> str:
        return opar + sep.join(docs) + cpar

    def constant(self, constant: base.Constant) -> str:
        match constant:
            case bool() | None:
                return repr(constant)
            case int():
                return _format_int(constant)
            case float():
                if math.isnan(constant):
                    return self.NAN
                if math.isinf(constant):
                    if constant > 0:
                        return self.INFINITY
                    return "-" + self.INFINITY
                return repr(constant)
            case str():
                return DELIMITER + escape_str(constant) + DELIMITER
            case bytes():
                return "b" + DELIMITER + escape_bytes(constant) + DELIMITER
        assert False, constant  # pragma: no cover

    def sequence(self, size: int, items: Iterator[str]) -> str:
        return self.format_list(items, opar="[", cpar="]")

    def tuple_(self, size: int, items: Iterator[str]) -> str:
        if size == 1:
            [item] = items
            return f"({item},)"
        return self.format_list(items)

    def set_(self, frozen: bool, size: int, items: Iterator[str]) -> str:
        # Iteration order of sets depends on the hashes of their elements.
        # Sorting the printed elements gives the same output on every run.
        if size == 0:
            res = "set()"
        else:
            res = self.format_list(sorted(items), opar="{", cpar="}")
        if frozen:
            if size == 0:
                return "frozenset()"
            return f"frozenset({res})"
        return res

    def mapping(self, size: int, items: Iterator[tuple[str, str]]) -> str:
        return self.format_list(
            (f"{k}: {v}" for k, v in items), opar="{", cpar="}"
        )

    def custom(
        self,
        constructor: str,
        size: int,
        kwnames: Collection[str],
        values: Iterator[str],
    ) -> str:
        return self.format_list(
            (
                value if name is None else f"{name}={value}"
                for name, value in base.label_args(size, kwnames, values)
            ),
            opar=f"{constructor}(",
            cpar=")",
        )

    def root(self, doc: str) -> str:
        return doc


class EvalPrinter(LiteralPrinter):
    """Like :class:`LiteralPrinter` but special floats can be evaluated

    >>> print(show([math.nan, -math.inf], format=EVAL))
    [float('nan'), -float('inf')]
    """

    NAN: ClassVar[str] = "float('nan')"
    INFINITY: ClassVar[str] = "float('inf')"


def accumulator(format: Format = Format.LITERAL) -> LiteralPrinter:
    if format == Format.LITERAL:
        return LiteralPrinter()
    assert format == Format.EVAL, format
    return EvalPrinter()


def show(
    obj: Any,
    *,
    format: Format = Format.LITERAL,
    max_depth: int | None = base.DEFAULT_MAX_DEPTH,
) -> str:
    """Get the literal form of *obj*

    Numbers are printed as plain tokens, strings between single quotes:

      >>> print(show(44))
      44
      >>> print(show('a'))
      'a'
      >>> print(show(''))
      ''

    Containers print each of their elements with the same rules. Sets are
    sorted by the literal form of their elements:

      >>> print(show({3, 1, 2}))
      {1, 2, 3}
      >>> print(show((1,)))
      (1,)

    Special floats have a fixed spelling that depends on *format*:

      >>> print(show([math.inf, -0.0]))
      [inf, -0.0]

    Args:
      obj: The value to print
      format: One of :const:`~litprint.LITERAL` or :const:`~litprint.EVAL`.
      max_depth(int | None): How deep containers can be nested inside each
        other, :const:`None` means there is no limit.

    Raises:
      Unprintable: *obj* contains a value of a type that isn't supported.
      CyclicValue: *obj* contains itself.
      NestingTooDeep: *obj* is nested more than *max_depth* levels deep.
    """
    return base.reduce_value(obj, accumulator(format), max_depth=max_depth)
