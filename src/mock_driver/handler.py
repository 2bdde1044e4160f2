"""Dispatch of intercepted calls."""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, cast

import attrs

from .bindings import ClassBindingTable
from .descriptor import CallDescriptor, default_value
from .errors import NoBoundMockObjectError, NoMatchingMockMethodError
from .interfaces import Category
from .mock_object import MockObject
from .provider import NO_MOCK_OBJECT, ResultSetProvider
from .recorder import CallRecorder

if TYPE_CHECKING:
    from .factory import StandIn, StandInFactory

logger = logging.getLogger(__name__)


@attrs.define
class DispatchContext:
    """State shared by every handler of one engine.

    Handlers read it and never own it; the engine swaps the provider or
    the bindings in place and every existing stand-in sees the change.
    """

    bindings: ClassBindingTable
    provider: ResultSetProvider
    recorder: CallRecorder
    typed_defaults: bool = True


class InterceptionHandler:
    """Decide what an intercepted call returns.

    One handler serves one stand-in. Result set stand-ins get a handler
    bound to the mock object that answers their data calls; every other
    stand-in gets an unbound one.
    """

    LOCAL_METHODS = frozenset({"__enter__", "__exit__"})

    def __init__(
        self,
        factory: "StandInFactory",
        interface: type,
        mock_object: object = None,
    ) -> None:
        self._factory = factory
        self.interface = interface
        self.mock_object = mock_object

    @property
    def context(self) -> DispatchContext:
        return self._factory.context

    def invoke(self, proxy: "StandIn", descriptor: CallDescriptor, args: Sequence[Any]) -> Any:
        """Answer one call, first matching rule wins:

        1. record the call on the active run;
        2. a connection return type gets a fresh connection stand-in;
        3. a statement return type gets a fresh statement stand-in;
        4. a result set return type gets a stand-in bound to the next mock object;
        5. a method declared by a result set interface is answered by the bound mock object;
        6. the context manager protocol is answered locally;
        7. anything else returns the default value of its return type.
        """
        recorder = self.context.recorder
        if recorder.active is not None:
            recorder.record(recorder.active, descriptor)

        match descriptor.return_category:
            case Category.CONNECTION | Category.STATEMENT:
                logger.info(f"returning {descriptor.return_type.__qualname__} stand-in for {descriptor.name}")
                return self._factory.build(descriptor.return_type)
            case Category.ROW_SOURCE:
                mock_object = self.context.provider.next()
                logger.info(f"returning {descriptor.return_type.__qualname__} stand-in bound to {mock_object!r}")
                return self._factory.build(descriptor.return_type, mock_object)

        if descriptor.declaring_category is Category.ROW_SOURCE:
            return self._invoke_mock_object(descriptor, args)

        if descriptor.name in self.LOCAL_METHODS:
            return self._invoke_locally(proxy, descriptor, args)

        logger.debug(f"Stand-in cannot invoke {descriptor}")
        if self.context.typed_defaults:
            return default_value(descriptor.return_type)
        return None

    def _invoke_mock_object(self, descriptor: CallDescriptor, args: Sequence[Any]) -> Any:
        mock_object = self.mock_object
        if mock_object is None or mock_object is NO_MOCK_OBJECT:
            raise NoBoundMockObjectError(descriptor, exhausted=mock_object is NO_MOCK_OBJECT)
        mock = cast("MockObject", mock_object)
        method = mock.lookup(descriptor.name, descriptor.parameter_types)
        if method is None:
            overloads = [types for name, types in mock.signatures() if name == descriptor.name]
            raise NoMatchingMockMethodError(descriptor, mock_object, overloads)

        logger.debug(f"Invocation on mock object {mock_object!r}: {descriptor.signature}")
        return method(*args)

    def _invoke_locally(self, proxy: "StandIn", descriptor: CallDescriptor, args: Sequence[Any]) -> Any:  # noqa: ARG002
        if descriptor.name == "__enter__":
            return proxy
        # __exit__ never suppresses the exception
        return None
