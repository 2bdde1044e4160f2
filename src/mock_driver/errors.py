"""Errors raised by the mock driver engine.

Every error here is meant to fail the enclosing test run loudly. Nothing is
retried or recovered inside the engine.
"""

from collections.abc import Sequence
from typing import Any

from .descriptor import CallDescriptor, format_annotation


class MockDriverError(Exception):
    """Base class for engine errors."""


class UnboundCategoryError(MockDriverError):
    """The class binding table has no entry for a requested interface."""

    def __init__(self, category: type) -> None:
        super().__init__(f"No class binding for {category.__qualname__}")
        self.category = category


class NoBoundMockObjectError(MockDriverError):
    """A result set call reached a stand-in that has no mock object."""

    def __init__(self, descriptor: CallDescriptor, *, exhausted: bool) -> None:
        reason = (
            "the result set provider was exhausted when this result set was created"
            if exhausted
            else "no mock object is bound to this stand-in"
        )
        super().__init__(f"Cannot answer {descriptor.signature}: {reason}")
        self.descriptor = descriptor
        self.exhausted = exhausted


class NoMatchingMockMethodError(MockDriverError):
    """The bound mock object does not implement the requested method."""

    def __init__(
        self,
        descriptor: CallDescriptor,
        mock_object: object,
        overloads: Sequence[tuple[Any, ...]] = (),
    ) -> None:
        message = f"Mock object {mock_object!r} does not implement {descriptor.signature}"
        if overloads:
            registered = ", ".join(
                f"{descriptor.name}({', '.join(format_annotation(p) for p in types)})" for types in overloads
            )
            message += f"; registered under that name: {registered}"
        super().__init__(message)
        self.descriptor = descriptor
        self.mock_object = mock_object
        self.overloads = tuple(overloads)


class ResultSetProviderExhaustedError(MockDriverError):
    """A strict provider was asked for more mock objects than it was given."""

    def __init__(self, supplied: int) -> None:
        super().__init__(f"Result set provider exhausted after {supplied} mock object(s)")
        self.supplied = supplied


class RunAlreadyActiveError(MockDriverError):
    """A test run was started while another one was still active."""
