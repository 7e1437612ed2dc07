from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .relation_types import RelationKind


class RelationAttributes(BaseModel):
    model_config = ConfigDict(frozen=True)

    nullable: bool = False
    unique: bool = False


DEFAULT_RELATION_ATTRIBUTES = RelationAttributes()


class RelationSource(BaseModel):
    """The model and (possibly nested) property path hosting a relation.

    `primary_key` is the name of the source model's primary key field.
    """
    model_config = ConfigDict(frozen=True)

    model_name: str
    primary_key: str
    property_path: tuple[str, ...]


class RelationTarget(BaseModel):
    model_name: str
    primary_key: str | None = None


class RelationDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    to: str
    kind: RelationKind
    attributes: dict[str, Any] = Field(default_factory=dict)

    def merged_attributes(self) -> RelationAttributes:
        return RelationAttributes(**{**DEFAULT_RELATION_ATTRIBUTES.model_dump(), **self.attributes})
