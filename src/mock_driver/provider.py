"""Suppliers of mock objects for newly vended result sets."""

import logging
from collections.abc import Iterable
from typing import Final, Protocol, final

from .errors import ResultSetProviderExhaustedError

logger = logging.getLogger(__name__)


@final
class _NoMockObject:
    """Type of the `NO_MOCK_OBJECT` sentinel."""

    _instance: "_NoMockObject | None" = None

    def __new__(cls) -> "_NoMockObject":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_MOCK_OBJECT"

    def __bool__(self) -> bool:
        return False


NO_MOCK_OBJECT: Final = _NoMockObject()
"""Returned by a provider that has run out of mock objects."""


class ResultSetProvider(Protocol):
    def next(self) -> object:
        """Return the mock object for the next result set, or `NO_MOCK_OBJECT`."""
        ...

    def supply(self, mock_objects: Iterable[object]) -> None:
        """Replace the mock objects and start over from the first one."""
        ...


class DefaultResultSetProvider:
    """Hand out mock objects one at a time, in the order they were supplied.

    The cursor only moves forward. Once every object has been handed out,
    `next` keeps returning `NO_MOCK_OBJECT`, or raises
    `ResultSetProviderExhaustedError` when the provider is `strict`.

    Examples
    --------
    >>> provider = DefaultResultSetProvider(["a", "b"])
    >>> provider.next(), provider.next(), provider.next()
    ('a', 'b', NO_MOCK_OBJECT)
    """

    def __init__(self, mock_objects: Iterable[object] = (), *, strict: bool = False) -> None:
        self.strict = strict
        self._mock_objects: tuple[object, ...] = ()
        self._position = 0
        self.supply(mock_objects)

    def supply(self, mock_objects: Iterable[object]) -> None:
        self._mock_objects = tuple(mock_objects)
        self._position = 0

    def next(self) -> object:
        if self._position >= len(self._mock_objects):
            if self.strict:
                raise ResultSetProviderExhaustedError(len(self._mock_objects))
            logger.info("Result set provider exhausted, returning NO_MOCK_OBJECT")
            return NO_MOCK_OBJECT
        current = self._mock_objects[self._position]
        self._position += 1
        return current

    @property
    def position(self) -> int:
        """Number of mock objects handed out so far."""
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._mock_objects) - self._position
