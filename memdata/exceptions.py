from typing import Any, Sequence


def _path(path: Sequence[str] | None) -> str:
    return ".".join(path) if path else ""


class RelationError(Exception):
    pass


class NotAppliedError(RelationError):

    def __init__(self, kind: str, target_model: str) -> None:
        self.kind = kind
        self.target_model = target_model
        super().__init__(
            f'Failed to resolve a "{kind}" relational property to "{target_model}": relation has not been applied.'
        )


class TargetModelUnresolvableError(RelationError):

    def __init__(self, kind: str, target_model: str) -> None:
        self.kind = kind
        self.target_model = target_model
        super().__init__(
            f'Failed to create a "{kind}" relation to "{target_model}": referenced model does not exist or has no primary key.'
        )


class TargetKeyMissingError(RelationError):

    def __init__(self, kind: str, source_model: str, property_path: Sequence[str]) -> None:
        self.kind = kind
        self.source_model = source_model
        self.property_path = tuple(property_path)
        super().__init__(
            f'Failed to define a "{kind}" relation at "{_path(property_path)}" on "{source_model}": referenced target model has no primary key set.'
        )


class NullNotAllowedError(RelationError):

    def __init__(self, kind: str, target_model: str) -> None:
        self.kind = kind
        self.target_model = target_model
        super().__init__(
            f'Failed to resolve a "{kind}" relational property to "{target_model}": only nullable relations can resolve with None. '
            f'Declare the relation with "nullable=True" (or an Optional annotation) to support it.'
        )


class DanglingReferenceError(RelationError):

    def __init__(self, source_model: str, property_path: Sequence[str], reference_id: Any, target_key: str) -> None:
        self.source_model = source_model
        self.property_path = tuple(property_path)
        self.reference_id = reference_id
        self.target_key = target_key
        super().__init__(
            f'Failed to define a relational property "{_path(property_path)}" on "{source_model}": '
            f'referenced entity "{reference_id}" ("{target_key}") does not exist.'
        )


class UniquenessViolationError(RelationError):

    def __init__(
        self,
        kind: str,
        source_model: str,
        property_path: Sequence[str],
        source_id: Any,
        target_model: str,
        reference_id: Any,
        owner_id: Any,
    ) -> None:
        self.kind = kind
        self.source_model = source_model
        self.property_path = tuple(property_path)
        self.source_id = source_id
        self.target_model = target_model
        self.reference_id = reference_id
        self.owner_id = owner_id
        super().__init__(
            f'Failed to create a unique "{kind}" relation to "{target_model}" ("{source_model}.{_path(property_path)}") '
            f'for "{source_id}": referenced {target_model} "{reference_id}" belongs to another {source_model} ("{owner_id}").'
        )


class EntityError(Exception):
    pass


class MissingPrimaryKeyError(EntityError):

    def __init__(self, model_name: str, primary_key: str | None) -> None:
        self.model_name = model_name
        self.primary_key = primary_key
        if primary_key is None:
            message = f'Failed to create a "{model_name}" entity: model declares no primary key.'
        else:
            message = f'Failed to create a "{model_name}" entity: expected the primary key "{primary_key}" to have a value, but got None.'
        super().__init__(message)


class DuplicatePrimaryKeyError(EntityError):

    def __init__(self, model_name: str, primary_key: str, primary_id: Any) -> None:
        self.model_name = model_name
        self.primary_key = primary_key
        self.primary_id = primary_id
        super().__init__(
            f'Failed to store a "{model_name}" entity: an entity with the same primary key "{primary_id}" ("{primary_key}") already exists.'
        )


class EntityNotFoundError(EntityError):

    def __init__(self, model_name: str, operation: str, query: Any = None) -> None:
        self.model_name = model_name
        self.operation = operation
        self.query = query
        super().__init__(
            f'Failed to execute "{operation}" on the "{model_name}" model: no entity found matching the query {query!r}.'
        )


class QueryError(Exception):
    pass
