from types import UnionType
from typing import Any, Dict, Union, get_args, get_origin

from pydantic.fields import FieldInfo


def unpack_extra(field_info: FieldInfo) -> dict[str, Any]:
    extra_json = field_info.json_schema_extra
    extra: Dict[str, Any] = {}
    if extra_json is not None:
        if isinstance(extra_json, dict):
            extra = dict(extra_json)
        elif callable(extra_json):
            extra = {}
    return extra


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Unwrap Optional[T] / T | None into (T, True); other annotations pass through."""
    origin = get_origin(annotation)
    args = get_args(annotation)
    if (origin is Union or origin is UnionType) and type(None) in args:
        rest = [a for a in args if a is not type(None)]
        if len(rest) == 1:
            return rest[0], True
        return Union[tuple(rest)], True
    return annotation, False
