"""Print python values as their literal form

:func:`show` converts a value into python source text that reads back as an
equivalent value. It is very explicit: out of the box it only handles a small
set of types, we don't rely on inheritance or ``__repr__`` to handle anything
that isn't of a supported type. Support for new types can be added via
:func:`register`.

Supported types
---------------

+ :class:`str`, :class:`bytes`, :class:`int`, :class:`float`, :class:`bool`, \
    :const:`None`: Basic python primitives
+ :class:`list`, :class:`tuple`: where all the elements are printable
+ :class:`dict`: where all the keys and values are printable
+ :class:`set`, :class:`frozenset`: where all the elements are printable
+ **shared references**: but not recursive values

"""
from __future__ import annotations

from importlib import metadata
from typing import Final

from .base import (
    DEFAULT_MAX_DEPTH,
    Accumulator,
    CyclicValue,
    InvalidReduction,
    NestingTooDeep,
    ShowError,
    Unprintable,
    reduce_value,
    register,
)
from .text import EvalPrinter, Format, LiteralPrinter, show

# https://packaging.python.org/en/latest/guides/single-sourcing-package-version/
__version__ = metadata.version(__name__)

#: Special floats print as ``nan``, ``inf`` and ``-inf``.
LITERAL: Final = Format.LITERAL

#: Special floats print as python expressions.
EVAL: Final = Format.EVAL

__all__ = (
    "show",
    "register",
    "reduce_value",
    "Accumulator",
    "LiteralPrinter",
    "EvalPrinter",
    "Format",
    "LITERAL",
    "EVAL",
    "DEFAULT_MAX_DEPTH",
    "ShowError",
    "Unprintable",
    "CyclicValue",
    "NestingTooDeep",
    "InvalidReduction",
)
