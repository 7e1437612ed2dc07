from .model import Model, Embedded
from .fields import ModelField, KeyField, RelationField
from .namespace import Namespace, ModelFieldInfo, find_primary_key
from .namespace_manager import NamespaceManager
from .relation_types import OneOf, ManyOf, RelationKind
from .relation_info import RelationAttributes, RelationDefinition, RelationSource, RelationTarget
from .relation import Relation

__all__ = [
    "Model",
    "Embedded",
    "ModelField",
    "KeyField",
    "RelationField",
    "Namespace",
    "ModelFieldInfo",
    "find_primary_key",
    "NamespaceManager",
    "OneOf",
    "ManyOf",
    "RelationKind",
    "RelationAttributes",
    "RelationDefinition",
    "RelationSource",
    "RelationTarget",
    "Relation",
]
