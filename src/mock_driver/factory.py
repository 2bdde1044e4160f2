"""Stand-in classes and the factory that builds them."""

import inspect
import logging
import types
from collections.abc import Callable, Mapping
from functools import cache
from typing import Any

from expression.contract import contract

from .descriptor import CallDescriptor, describe_interface
from .errors import UnboundCategoryError
from .handler import DispatchContext, InterceptionHandler
from .interfaces import Category, SqlInterface
from .mock_object import MockObject

logger = logging.getLogger(__name__)


class StandIn:
    """Base class of every generated stand-in.

    A stand-in is the tagged variant ``(category, bound mock object,
    dispatch table)``; its interface methods do nothing but hand the call
    to the handler.
    """

    dispatch_table: Mapping[str, CallDescriptor] = types.MappingProxyType({})

    def __init__(self, handler: InterceptionHandler) -> None:
        self._handler = handler

    @property
    def category(self) -> Category | None:
        return Category.of(self._handler.interface)

    @property
    def bound_mock_object(self) -> object:
        return self._handler.mock_object

    def __repr__(self) -> str:
        text = f"<{type(self).__name__}"
        if self._handler.mock_object is not None:
            text += f" bound to {self._handler.mock_object!r}"
        return text + ">"


def _intercepted(descriptor: CallDescriptor, signature: inspect.Signature) -> Callable[..., Any]:
    def method(self: StandIn, *args: Any, **kwargs: Any) -> Any:
        bound = signature.bind(self, *args, **kwargs)
        bound.apply_defaults()
        return self._handler.invoke(self, descriptor, bound.args[1:])  # noqa: SLF001

    method.__name__ = descriptor.name
    method.__qualname__ = descriptor.qualified_name
    return method


@cache
def stand_in_class(interface: type[SqlInterface]) -> type[StandIn]:
    """Generate (once) the stand-in class implementing `interface`."""
    table = describe_interface(interface)
    namespace: dict[str, Any] = {
        name: _intercepted(descriptor, inspect.signature(getattr(interface, name)))
        for name, descriptor in table.items()
    }
    namespace["dispatch_table"] = table
    namespace["__module__"] = __name__
    return types.new_class(
        f"{interface.__name__}StandIn",
        (StandIn, interface),
        exec_body=lambda ns: ns.update(namespace),
    )


class StandInFactory:
    """Build stand-ins against the class binding table of a dispatch context."""

    def __init__(self, context: DispatchContext) -> None:
        self.context = context

    @contract(known_err=(UnboundCategoryError,))
    def build(self, category: type[SqlInterface], mock_object: object = None) -> StandIn:
        """Build a stand-in for `category`, optionally bound to `mock_object`.

        Raises
        ------
        UnboundCategoryError
            If `category` has no class binding.
        ContractViolationError
            If the bound type cannot be turned into a stand-in.
        """
        subtype = self.context.bindings.get(category)
        if subtype is None:
            raise UnboundCategoryError(category)
        handler = InterceptionHandler(self, subtype, MockObject.adapt(mock_object))
        return stand_in_class(subtype)(handler)
