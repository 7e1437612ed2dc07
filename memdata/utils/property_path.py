from collections.abc import Mapping
from typing import Any, Callable, Sequence

from memdata.model.util import unwrap_optional


def get_at_path(obj: Any, path: Sequence[str], default: Any = None) -> Any:
    """Read a value at a nested attribute (or mapping key) path."""
    for segment in path:
        if obj is None:
            return default
        if isinstance(obj, Mapping):
            obj = obj.get(segment, default)
        else:
            obj = getattr(obj, segment, default)
    return obj


def set_at_path(target: dict, path: Sequence[str], value: Any) -> dict:
    """Set a value at a nested path of plain dicts, creating missing levels.

    Existing intermediate dicts are merged into, not replaced:

        >>> set_at_path({"id": {"not_equals": 1}}, ["author"], {"id": {"in": [2]}})
        {'id': {'not_equals': 1}, 'author': {'id': {'in': [2]}}}
    """
    if not path:
        raise ValueError("Path must contain at least one segment")
    node = target
    for segment in path[:-1]:
        child = node.get(segment)
        if not isinstance(child, dict):
            child = {}
            node[segment] = child
        node = child
    node[path[-1]] = value
    return target


def _make_container(parent: Any, segment: str) -> Any:
    field = type(parent).model_fields.get(segment) if hasattr(type(parent), "model_fields") else None
    if field is None:
        raise TypeError(f"Cannot create container '{segment}' on {type(parent).__name__}")
    container_cls, _ = unwrap_optional(field.annotation)
    if not isinstance(container_cls, type) or not hasattr(container_cls, "model_construct"):
        raise TypeError(f"Field '{segment}' of {type(parent).__name__} is not an embedded model")
    container = container_cls.model_construct()
    parent.store_raw(segment, container)
    return container


def define_property_at_path(obj: Any, path: Sequence[str], getter: Callable[[], Any]) -> None:
    """Install `getter` as the resolver of the attribute at `path`.

    Intermediate embedded containers are created when missing. Any resolver
    previously installed at the same path is replaced.
    """
    if not path:
        raise ValueError("Path must contain at least one segment")
    container = obj
    for segment in path[:-1]:
        child = getattr(container, segment, None)
        if child is None:
            child = _make_container(container, segment)
        container = child

    resolvers = getattr(container, "_resolvers", None)
    if resolvers is None:
        raise TypeError(f"Cannot define a property at '{'.'.join(path)}' on {type(container).__name__}")
    if container is not obj:
        container.bind_owner(obj, tuple(path[:-1]))
    resolvers[path[-1]] = getter
