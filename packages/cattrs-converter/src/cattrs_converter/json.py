"""
JSON conversion built on the cattrs JSON preconf converter.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, TypeGuard
from uuid import UUID

from cattrs.preconf.json import JsonConverter, make_converter

from ._converter import ImmutableConverter

Jsonable = None | bool | int | float | str | list["Jsonable"] | dict[str, "Jsonable"]


class JsonImmutableConverter(ImmutableConverter[JsonConverter, Jsonable]):
    """
    ImmutableConverter whose output is always JSON-compatible.

    Pre-registered hooks:
    - Decimal: float
    - UUID: str
    - Enum: the member name
    - datetime: ISO 8601 string (cattrs preconf default)

    Examples
    --------
    >>> converter = JsonImmutableConverter()
    >>> converter.unstructure({"rows": [1, 2]})
    {'rows': [1, 2]}
    >>> converter.unstructure(Decimal("1.5"))
    1.5
    """

    def __init__(self) -> None:
        converter = make_converter()
        converter.register_unstructure_hook(Decimal, float)
        converter.register_unstructure_hook(UUID, str)
        converter.register_unstructure_hook_func(
            lambda cls: isinstance(cls, type) and issubclass(cls, Enum),
            _enum_name,
        )
        super().__init__(converter, is_json_compatible_type)

    def unstructure_safely(self, value: Any) -> Jsonable:
        """
        Unstructure `value`, falling back to a placeholder string.

        Examples
        --------
        >>> converter = JsonImmutableConverter()
        >>> converter.unstructure_safely("mockName")
        'mockName'
        >>> converter.unstructure_safely(object())
        '<unsupported_type: object>'
        """
        unstructured = self._converter.unstructure(value)
        if self._type_guard(unstructured):
            return unstructured
        return f"<unsupported_type: {type(value).__name__}>"


def _enum_name(member: Enum) -> str:
    return member.name


def is_json_compatible_type(value: Any) -> TypeGuard[Jsonable]:
    """
    Check whether `value` is made only of JSON types.

    Examples
    --------
    >>> is_json_compatible_type({"calls": ["next()", "get_value(str)"]})
    True
    >>> is_json_compatible_type({1: "non-string key"})
    False
    >>> is_json_compatible_type(("tuples", "are", "not", "lists"))
    False
    """
    if value is None:
        return True
    if isinstance(value, bool | int | float | str):
        return True
    if isinstance(value, list):
        return all(is_json_compatible_type(item) for item in value)
    if isinstance(value, dict):
        return all(isinstance(key, str) for key in value) and all(
            is_json_compatible_type(val) for val in value.values()
        )
    return False
