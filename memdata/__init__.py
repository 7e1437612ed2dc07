from .model import (
    Model,
    Embedded,
    ModelField,
    KeyField,
    RelationField,
    OneOf,
    ManyOf,
    RelationKind,
    Relation,
    NamespaceManager,
)
from .db import Database
from .factory import Factory, factory
from .model_api import ModelApi
from .config import configure_logging
from .exceptions import (
    RelationError,
    NotAppliedError,
    TargetModelUnresolvableError,
    TargetKeyMissingError,
    NullNotAllowedError,
    DanglingReferenceError,
    UniquenessViolationError,
    EntityError,
    MissingPrimaryKeyError,
    DuplicatePrimaryKeyError,
    EntityNotFoundError,
    QueryError,
)

__all__ = [
    "Model",
    "Embedded",
    "ModelField",
    "KeyField",
    "RelationField",
    "OneOf",
    "ManyOf",
    "RelationKind",
    "Relation",
    "NamespaceManager",
    "Database",
    "Factory",
    "factory",
    "ModelApi",
    "configure_logging",
    "RelationError",
    "NotAppliedError",
    "TargetModelUnresolvableError",
    "TargetKeyMissingError",
    "NullNotAllowedError",
    "DanglingReferenceError",
    "UniquenessViolationError",
    "EntityError",
    "MissingPrimaryKeyError",
    "DuplicatePrimaryKeyError",
    "EntityNotFoundError",
    "QueryError",
]
