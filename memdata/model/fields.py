from typing import Any, Callable, Optional

from pydantic import Field
from pydantic_core import PydanticUndefined


def ModelField(
    default: Any = PydanticUndefined,
    *,
    default_factory: Callable[[], Any] | None = None,
    index: Optional[str] = None,
) -> Any:
    """Define a model field with ORM-specific metadata"""
    extra = {}
    extra["index"] = index
    if default_factory is not None:
        return Field(default_factory=default_factory, json_schema_extra=extra)
    return Field(default, json_schema_extra=extra)


def KeyField(
    default: Any = None,
    *,
    default_factory: Callable[[], Any] | None = None,
) -> Any:
    """Define the primary key field of a model.

    Use `default_factory` to generate keys, e.g. `KeyField(default_factory=uuid.uuid4)`.
    """
    extra = {}
    extra["primary_key"] = True
    if default_factory is not None:
        return Field(default_factory=default_factory, json_schema_extra=extra)
    return Field(default, json_schema_extra=extra)


def RelationField(
    *,
    to: str | None = None,
    nullable: bool = False,
    unique: bool = False,
) -> Any:
    """
    Define a relation field with ORM-specific metadata.

    The field must be annotated with OneOf[...] or ManyOf[...].

    Args:
        to: name of the related model, defaults to the annotation's model
        nullable: whether the relation accepts None
        unique: whether a related entity may be referenced by at most one entity of this model
    """
    extra = {}
    extra["is_relation"] = True
    extra["to"] = to
    extra["nullable"] = nullable
    extra["unique"] = unique
    return Field(default=None, json_schema_extra=extra)
