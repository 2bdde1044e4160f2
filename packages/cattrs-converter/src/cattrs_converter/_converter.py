import copy
from collections.abc import Callable
from typing import Any, Self, TypeGuard

from cattrs.converters import Converter


class ImmutableConverter[C: Converter, R]:
    """
    Wrap a cattrs Converter and check every unstructured value against R.

    Registering a hook never mutates the wrapper; it returns a new wrapper
    around a copy of the underlying converter, so a shared instance can be
    specialised per use site.

    Type Parameters
    ---------------
    C : Converter
        The wrapped converter type
    R : type
        The type every unstructured value must satisfy

    Examples
    --------
    >>> from cattrs import Converter
    >>> def is_str(value) -> TypeGuard[str]:
    ...     return isinstance(value, str)
    >>> names = ImmutableConverter(Converter(), is_str)
    >>> names.unstructure("get_value")
    'get_value'
    """

    def __init__(
        self,
        converter: C,
        type_guard: Callable[[Any], TypeGuard[R]],
    ) -> None:
        self._converter = converter
        self._type_guard = type_guard

    def unstructure(self, value: Any) -> R:
        """
        Unstructure `value` and verify the result.

        Raises
        ------
        ValueError
            If the unstructured value does not satisfy the type guard
        """
        unstructured = self._converter.unstructure(value)
        if self._type_guard(unstructured):
            return unstructured
        raise ValueError(f"unstructured value of {type(value).__name__} is not of the expected type")

    def register_unstructure_hook[T](
        self,
        cls: type[T],
        hook: Callable[[T], R],
    ) -> Self:
        """
        Return a new converter with `hook` registered for `cls`.

        The receiver keeps its hooks unchanged.
        """
        newer_converter = self._converter.copy()
        newer_converter.register_unstructure_hook(cls, hook)

        newer = copy.copy(self)
        newer._converter = newer_converter  # noqa: SLF001
        return newer
