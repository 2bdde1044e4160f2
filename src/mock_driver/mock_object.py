"""Mock objects: the data behind result set stand-ins."""

import inspect
from collections.abc import Callable, Iterator, Sequence
from typing import Any, Self

from .descriptor import parameter_types_of
from .provider import NO_MOCK_OBJECT

type Signature = tuple[str, tuple[Any, ...]]


class MockObject:
    """Explicit table of mock methods keyed by name and parameter types.

    A result set call is answered by the entry whose name and parameter
    types equal those of the interface method, e.g. `ResultSet.get_value`
    is answered by the entry registered as ``("get_value", (str,))``::

        rows = MockObject("users")

        @rows.method("get_value", str)
        def get_value(column: str) -> str:
            return "mockName"

    Plain objects work too: `from_instance` registers their annotated
    public methods up front.
    """

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        self._methods: dict[Signature, Callable[..., Any]] = {}

    def register(
        self,
        name: str,
        parameter_types: Sequence[Any],
        fn: Callable[..., Any],
    ) -> Self:
        self._methods[(name, tuple(parameter_types))] = fn
        return self

    def method[F: Callable[..., Any]](self, name: str, *parameter_types: Any) -> Callable[[F], F]:
        """Decorator form of `register`."""

        def decorator(fn: F) -> F:
            self.register(name, parameter_types, fn)
            return fn

        return decorator

    def lookup(self, name: str, parameter_types: Sequence[Any]) -> Callable[..., Any] | None:
        return self._methods.get((name, tuple(parameter_types)))

    def signatures(self) -> Iterator[Signature]:
        yield from self._methods

    def __repr__(self) -> str:
        if self.name:
            return f"<MockObject {self.name}>"
        return f"<MockObject with {len(self._methods)} method(s)>"

    @classmethod
    def from_instance(cls, obj: object) -> Self:
        """Register every annotated public method of `obj`.

        Parameter annotations must match the interface method exactly;
        an unannotated parameter is registered as `Any` and will only
        match an interface parameter annotated `Any`.
        """
        mock = cls(repr(obj))
        for name in dir(type(obj)):
            if name.startswith("_"):
                continue
            member = inspect.getattr_static(obj, name)
            if isinstance(member, staticmethod) and inspect.isfunction(member.__func__):
                mock.register(name, parameter_types_of(member.__func__), getattr(obj, name))
            elif inspect.isfunction(member):
                mock.register(name, parameter_types_of(member), getattr(obj, name))
        return mock

    @classmethod
    def adapt(cls, obj: object) -> object:
        """Turn whatever a provider returned into something a handler can bind."""
        if obj is None or obj is NO_MOCK_OBJECT or isinstance(obj, MockObject):
            return obj
        return cls.from_instance(obj)
