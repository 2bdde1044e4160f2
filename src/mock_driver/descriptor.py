"""Call descriptors and per-interface dispatch tables."""

import inspect
import types
import typing
from collections.abc import Mapping
from functools import cache
from typing import Any

import attrs

from .interfaces import Category, SqlInterface

# Dunder methods that take part in interception; every other underscored name is private.
INTERCEPTED_DUNDERS = frozenset({"__enter__", "__exit__"})

_TYPED_DEFAULTS: dict[type, object] = {
    bool: False,
    int: 0,
    float: 0.0,
}


def format_annotation(annotation: Any) -> str:
    if annotation is None or annotation is type(None):
        return "None"
    if isinstance(annotation, type):
        return annotation.__name__
    return repr(annotation).replace("typing.", "")


def _unwrap_optional(annotation: Any) -> Any:
    """`X | None` has the return shape of `X`."""
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


@attrs.define(frozen=True, slots=True)
class CallDescriptor:
    """Identity of one interface method: name, parameter types and the two categories.

    `declaring_type` is the interface class that defines the method and
    `return_type` its return annotation with any `| None` removed.
    """

    name: str
    parameter_types: tuple[Any, ...]
    declaring_type: type
    return_type: Any

    @property
    def declaring_category(self) -> Category | None:
        return Category.of(self.declaring_type)

    @property
    def return_category(self) -> Category | None:
        return Category.of(self.return_type)

    @property
    def signature(self) -> str:
        params = ", ".join(format_annotation(p) for p in self.parameter_types)
        return f"{self.name}({params})"

    @property
    def qualified_name(self) -> str:
        return f"{self.declaring_type.__qualname__}.{self.name}"

    def __str__(self) -> str:
        return f"{self.declaring_type.__qualname__}.{self.signature} -> {format_annotation(self.return_type)}"


def default_value(return_type: Any) -> object:
    """Value returned for calls the engine cannot answer meaningfully.

    Examples
    --------
    >>> default_value(bool), default_value(int), default_value(float)
    (False, 0, 0.0)
    >>> default_value(str) is None
    True
    """
    return _TYPED_DEFAULTS.get(return_type)


def parameter_types_of(fn: Any) -> tuple[Any, ...]:
    """Annotated parameter types of `fn`, `self` excluded. Missing annotations read as `Any`."""
    hints = typing.get_type_hints(fn)
    params = list(inspect.signature(fn).parameters.values())
    if params and params[0].name == "self":
        params = params[1:]
    return tuple(hints.get(p.name, Any) for p in params)


def _is_intercepted(name: str, member: object) -> bool:
    if not inspect.isfunction(member):
        return False
    return not name.startswith("_") or name in INTERCEPTED_DUNDERS


@cache
def describe_interface(interface: type[SqlInterface]) -> Mapping[str, CallDescriptor]:
    """Build the dispatch table of `interface`.

    Every public method (plus the context manager protocol) found on the
    interface classes of the MRO gets one descriptor; the most derived
    definition wins and becomes the declaring type.
    """
    if not (isinstance(interface, type) and issubclass(interface, SqlInterface)):
        raise TypeError(f"{interface!r} is not an interface and cannot be intercepted")

    table: dict[str, CallDescriptor] = {}
    for klass in interface.__mro__:
        if not issubclass(klass, SqlInterface) or klass is SqlInterface:
            continue
        for name, member in vars(klass).items():
            if name in table or not _is_intercepted(name, member):
                continue
            hints = typing.get_type_hints(member)
            table[name] = CallDescriptor(
                name=name,
                parameter_types=parameter_types_of(member),
                declaring_type=klass,
                return_type=_unwrap_optional(hints.get("return")),
            )
    return types.MappingProxyType(table)
