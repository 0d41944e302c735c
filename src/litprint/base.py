from __future__ import annotations

import abc
import inspect
import keyword
import logging
import pydoc
import types
import typing
import weakref
from typing import (
    Any,
    Callable,
    Collection,
    Final,
    Generic,
    Iterable,
    Iterator,
    Type,
    TypeAlias,
    TypeVar,
)

T = TypeVar("T")
V = TypeVar("V")

logger = logging.getLogger(__name__)

Constant: TypeAlias = int | float | None | str | bytes | bool

Reduced: TypeAlias = tuple[Callable[..., T], tuple[Any, ...], dict[str, Any]]

Reducer: TypeAlias = Callable[[T], Reduced[T]]

#: How many containers deep :func:`reduce_value` goes before giving up.
DEFAULT_MAX_DEPTH: Final = 100

_CONSTANT_TYPES: Final = (int, float, types.NoneType, bool, str, bytes)
_BUILTIN_TYPES: Final = (*_CONSTANT_TYPES, list, tuple, dict, set, frozenset)


def _format_path(path: Iterable[str]) -> str:
    return "root" + "".join(path)


def _format_step(kind: str, step: Any) -> str:
    match kind:
        case "item":
            return f"[{step}]"
        case "member":
            return f"{{{pydoc.cram(step, 40)}}}"
        case "key":
            return f".keys()[{step}]"
        case "value":
            return f"[{pydoc.cram(repr(step), 40)}]"
        case "kwarg":
            return f".{step}"
    assert False, kind  # pragma: no cover


def _format_steps(path: Iterable[tuple[str, Any]]) -> list[str]:
    return [_format_step(kind, step) for kind, step in path]


class ShowError(Exception):
    """Base class for the errors raised while printing a value."""

    path: tuple[str, ...]


class Unprintable(ShowError, TypeError):
    """There is no printing rule for a value's type."""

    shape: type

    def __init__(self, shape: type, path: Iterable[str] = ()) -> None:
        self.shape = shape
        self.path = tuple(path)
        super().__init__(
            f"Object of type {shape.__name__} cannot be printed by "
            f"`litprint.show` (at {_format_path(self.path)})"
        )


class CyclicValue(ShowError, ValueError):
    """The value contains itself."""

    def __init__(self, path: Iterable[str]) -> None:
        self.path = tuple(path)
        super().__init__(f"Recursive value found at {_format_path(self.path)}")


class NestingTooDeep(ShowError, ValueError):
    """Containers are nested deeper than we are willing to walk.

    *max_depth* is the limit that was passed to :func:`reduce_value`, or
    :const:`None` if the interpreter's stack ran out first.
    """

    max_depth: int | None

    def __init__(self, max_depth: int | None, path: Iterable[str]) -> None:
        self.max_depth = max_depth
        self.path = tuple(path)
        if max_depth is None:
            msg = "Value nested too deep for the interpreter's stack"
        else:
            msg = f"Value nested more than {max_depth} levels deep"
        super().__init__(f"{msg} at {_format_path(self.path)}")


class InvalidReduction(ShowError, ValueError):
    """A registered reducer returned something that cannot be printed."""

    reducer: Callable[..., Any]
    shape: type

    def __init__(
        self,
        reducer: Callable[..., Any],
        shape: type,
        problem: str,
        path: Iterable[str],
    ) -> None:
        self.reducer = reducer
        self.shape = shape
        self.path = tuple(path)
        name = getattr(reducer, "__qualname__", repr(reducer))
        super().__init__(
            f"The reducer {name} registered for {shape.__name__} {problem} "
            f"(at {_format_path(self.path)})"
        )


DISPATCH_TABLE = weakref.WeakKeyDictionary[Type[Any], Reducer[Any]]()


def _infer_reducer_type(f: Reducer[T]) -> Type[T]:
    values = list(inspect.signature(f, eval_str=True).parameters.values())
    if len(values) != 1:
        raise ValueError(
            "The registered function should take only one argument"
        )
    [arg] = values
    ty: Type[T] | None = arg.annotation
    if ty is inspect.Parameter.empty:
        raise ValueError(
            f"Cannot infer the type to register {f.__name__!r} for: the "
            "argument has no annotation"
        )
    origin = typing.get_origin(ty)
    if origin is not None:
        ty = origin
    assert ty is not None
    return ty


@typing.overload
def register(function: Reducer[T], /) -> Reducer[T]:  # pragma: no cover
    ...


@typing.overload
def register(
    *, type: Type[T] | None = None
) -> Callable[[Reducer[T]], Reducer[T]]:  # pragma: no cover
    ...


def register(
    function: Reducer[T] | None = None,
    /,
    *,
    type: Type[T] | None = None,
) -> Reducer[T] | Callable[[Reducer[T]], Reducer[T]]:
    """Register a function to use while printing objects of a given type.

    *function* is expected to take objects of type *T* and to return a tuple
    describing how to recreate the object: a constructor, the positional
    arguments and the keyword arguments to call it with. The value is then
    printed as a call to the constructor, every argument being printed with
    the same rules as any other value.

    If *type* is not specified, :func:`register` uses the type annotation on
    the first argument to deduce which type register *function* for.

    If :func:`register` is used as a simple decorator (with no arguments) it
    acts as though the default values for all of it parameters.

    Here are three equivalent ways to add support for the :class:`complex`
    type::

        >>> @register
        ... def _reduce_complex(c: complex):
        ...   return complex, (c.real, c.imag), {}

        >>> @register()
        ... def _reduce_complex(c: complex):
        ...   return complex, (c.real, c.imag), {}

        >>> @register(type=complex)
        ... def _reduce_complex(c: complex):
        ...   return complex, (c.real, c.imag), {}

    Args:

      function: The reduction we are registering

      type: The type we are registering the function for

    """

    def wrapper(function: Reducer[T]) -> Reducer[T]:
        cls = _infer_reducer_type(function) if type is None else type
        if cls in _BUILTIN_TYPES:
            raise ValueError(
                f"Cannot override how {cls.__name__} values are printed"
            )
        logger.debug(
            "Registering %s to print values of type %s",
            getattr(function, "__qualname__", function),
            cls.__qualname__,
        )
        DISPATCH_TABLE[cls] = function
        return function

    if function is None:
        return wrapper
    return wrapper(function)


def _get_custom(
    ty: Type[T], path: Iterable[tuple[str, Any]]
) -> Reducer[T]:
    """Get the custom reducer for a given type."""
    reducer = DISPATCH_TABLE.get(ty)
    if reducer is None:
        raise Unprintable(ty, _format_steps(path))
    return reducer


def _iter_labels(size: int, kwnames: Collection[str]) -> Iterator[str | None]:
    for i in range(size - len(kwnames)):
        yield None
    yield from kwnames


def label_args(
    size: int, kwnames: Collection[str], args: Iterable[T]
) -> Iterator[tuple[str | None, T]]:
    """
    >>> list(label_args(7, ('a', 'b'), range(7)))
    [(None, 0), (None, 1), (None, 2), (None, 3), (None, 4), ('a', 5), ('b', 6)]
    """
    yield from zip(_iter_labels(size, kwnames), args, strict=True)


class Accumulator(Generic[T, V], abc.ABC):
    """Callbacks invoked by :func:`reduce_value`, one per node of a value.

    Children are passed in as iterators: the sub-values are only visited when
    the accumulator consumes them.
    """

    @abc.abstractmethod
    def constant(self, constant: Constant) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def sequence(self, size: int, items: Iterator[T]) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def tuple_(self, size: int, items: Iterator[T]) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def set_(
        self, frozen: bool, size: int, items: Iterator[T]
    ) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def mapping(
        self, size: int, items: Iterator[tuple[T, T]]
    ) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def custom(
        self,
        constructor: str,
        size: int,
        kwnames: Collection[str],
        values: Iterator[T],
    ) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def root(self, value: T) -> V:  # pragma: no cover
        ...


def reduce_value(
    obj: Any,
    acc: Accumulator[T, V],
    max_depth: int | None = DEFAULT_MAX_DEPTH,
) -> V:
    """Walk *obj* and feed every node to *acc*.

    Raises:
      Unprintable: a value has a type we have no rule for.
      CyclicValue: a container is reached again from inside itself.
      NestingTooDeep: containers are nested more than *max_depth* deep.
    """
    # ids of the containers we are currently inside of. They are all kept
    # alive by the call stack so their ids cannot be reused.
    visiting: set[int] = set()
    path: list[tuple[str, Any]] = []

    constant = acc.constant
    sequence = acc.sequence
    tuple_ = acc.tuple_
    set_ = acc.set_
    mapping = acc.mapping
    custom = acc.custom

    def child(kind: str, step: Any, v: Any) -> T:
        path.append((kind, step))
        res = reduce(v)
        path.pop()
        return res

    def _gen_items(v: Iterable[Any]) -> Iterator[T]:
        for idx, x in enumerate(v):
            yield child("item", idx, x)

    def _gen_members(v: Iterable[Any]) -> Iterator[T]:
        # Set iteration order changes with the hash seed; walking the members
        # by repr makes errors point at the same member on every run.
        for key, x in sorted(((repr(x), x) for x in v), key=lambda kx: kx[0]):
            yield child("member", key, x)

    def _gen_kv(v: dict[Any, Any]) -> Iterator[tuple[T, T]]:
        for idx, (key, value) in enumerate(v.items()):
            ek = child("key", idx, key)
            ev = child("value", key, value)
            yield (ek, ev)

    def _gen_args(
        args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> Iterator[T]:
        for idx, arg in enumerate(args):
            yield child("item", idx, arg)
        for name, arg in kwargs.items():
            yield child("kwarg", name, arg)

    def reduce(v: Any) -> T:
        ty = type(v)
        # We do exact type comparisons instead of calls to `isinstance` to
        # avoid running into problems with inheritance
        if ty in _CONSTANT_TYPES:
            return constant(v)
        addr = id(v)
        if addr in visiting:
            raise CyclicValue(_format_steps(path))
        if max_depth is not None and len(visiting) >= max_depth:
            raise NestingTooDeep(max_depth, _format_steps(path))
        visiting.add(addr)
        res: T
        if ty is list:
            res = sequence(len(v), _gen_items(v))
        elif ty is tuple:
            res = tuple_(len(v), _gen_items(v))
        elif ty is dict:
            res = mapping(len(v), _gen_kv(v))
        elif ty is set or ty is frozenset:
            res = set_(ty is frozenset, len(v), _gen_members(v))
        else:
            deconstructor = _get_custom(ty, path)
            fn, args, kwargs = deconstructor(v)
            name = constructor_name(fn)
            problem = _check_reduction(fn, name, kwargs)
            if problem is not None:
                raise InvalidReduction(
                    deconstructor, ty, problem, _format_steps(path)
                )
            res = custom(
                name,
                size=len(args) + len(kwargs),
                kwnames=list(kwargs),
                values=_gen_args(args, kwargs),
            )
        visiting.remove(addr)
        return res

    try:
        return acc.root(reduce(obj))
    except RecursionError:
        # `path` still describes where we were when the stack ran out.
        raise NestingTooDeep(None, _format_steps(path)) from None


def constructor_name(fn: Callable[..., Any]) -> str | None:
    """The dotted name a registered constructor is printed under.

    Builtins are printed without their module:

    >>> constructor_name(complex)
    'complex'
    >>> import fractions
    >>> constructor_name(fractions.Fraction)
    'fractions.Fraction'

    Returns :const:`None` if *fn* cannot be found again by that name.
    """
    qualname = getattr(fn, "__qualname__", None)
    module = getattr(fn, "__module__", None)
    if not isinstance(qualname, str) or not isinstance(module, str):
        return None
    name = qualname if module == "builtins" else f"{module}.{qualname}"
    if pydoc.locate(name) != fn:
        return None
    return name


def _check_reduction(
    fn: Callable[..., Any], name: str | None, kwargs: dict[str, Any]
) -> str | None:
    """Describe what's wrong with a reduction, :const:`None` if it's fine."""
    if not callable(fn):
        return f"returned {fn!r} as a constructor, which is not callable"
    if getattr(fn, "__name__", None) == "<lambda>":
        return "returned a lambda as a constructor"
    if ".<locals>." in getattr(fn, "__qualname__", ""):
        return (
            f"returned {fn.__qualname__}, a constructor defined inside of a "
            "function"
        )
    if name is None:
        return f"returned {fn!r}, which cannot be imported by its name"
    for kwname in kwargs:
        if (
            not isinstance(kwname, str)
            or not kwname.isidentifier()
            or keyword.iskeyword(kwname)
        ):
            return f"returned {kwname!r} as a keyword argument name"
    return None

