from .property_path import define_property_at_path, get_at_path, set_at_path
from .string_utils import camel_to_snake

__all__ = [
    "define_property_at_path",
    "get_at_path",
    "set_at_path",
    "camel_to_snake",
]
