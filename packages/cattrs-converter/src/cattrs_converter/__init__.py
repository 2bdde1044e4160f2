from ._converter import ImmutableConverter
from .json import Jsonable, JsonImmutableConverter, is_json_compatible_type

__all__ = [
    "ImmutableConverter",
    "JsonImmutableConverter",
    "Jsonable",
    "is_json_compatible_type",
]
