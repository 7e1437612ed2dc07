from enum import Enum
from types import UnionType
from typing import Any, ForwardRef, Generic, NamedTuple, TypeVar, Union, get_args, get_origin

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema


FOREIGN_MODEL = TypeVar("FOREIGN_MODEL")


class RelationKind(str, Enum):
    ONE_OF = "ONE_OF"
    MANY_OF = "MANY_OF"


class _RelationType:
    kind: RelationKind

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        # references are validated against the store when the relation resolves
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                cls._serialize
            )
        )

    @staticmethod
    def _validate(value: Any) -> Any:
        return value

    @staticmethod
    def _serialize(value: Any) -> Any:
        return value


class OneOf(_RelationType, Generic[FOREIGN_MODEL]):
    """Annotation for a single reference to another model: `author: OneOf["Author"]`."""
    kind = RelationKind.ONE_OF


class ManyOf(_RelationType, Generic[FOREIGN_MODEL]):
    """Annotation for a list of references to another model: `tags: ManyOf["Tag"]`."""
    kind = RelationKind.MANY_OF


class RelationAnnotation(NamedTuple):
    kind: RelationKind
    target: str
    is_optional: bool


def _target_name(arg: Any) -> str:
    if isinstance(arg, ForwardRef):
        return arg.__forward_arg__
    if isinstance(arg, str):
        return arg
    if isinstance(arg, type):
        return arg.__name__
    raise ValueError(f"Cannot determine the related model of {arg!r}")


def parse_relation_annotation(annotation: Any) -> RelationAnnotation | None:
    """Read kind, target model and optionality from a relation annotation.

    Returns None when the annotation is not a OneOf/ManyOf (or Optional of one).
    """
    is_optional = False
    origin = get_origin(annotation)
    if origin is Union or origin is UnionType:
        args = get_args(annotation)
        if type(None) not in args:
            return None
        rest = [a for a in args if a is not type(None)]
        if len(rest) != 1:
            return None
        is_optional = True
        annotation = rest[0]
        origin = get_origin(annotation)

    if origin not in (OneOf, ManyOf):
        if annotation in (OneOf, ManyOf):
            raise ValueError(f"{annotation.__name__} must be parametrized with the related model, e.g. {annotation.__name__}[\"Author\"]")
        return None
    args = get_args(annotation)
    return RelationAnnotation(kind=origin.kind, target=_target_name(args[0]), is_optional=is_optional)
