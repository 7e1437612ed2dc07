import logging
from collections.abc import Hashable, Mapping
from typing import TYPE_CHECKING, Any, Callable, Sequence

from memdata.exceptions import (
    DanglingReferenceError,
    MissingPrimaryKeyError,
    NotAppliedError,
    NullNotAllowedError,
    TargetKeyMissingError,
    TargetModelUnresolvableError,
    UniquenessViolationError,
)
from memdata.query.execute_query import execute_query
from memdata.utils.property_path import define_property_at_path, get_at_path, set_at_path
from memdata.utils.string_utils import format_path
from .namespace import find_primary_key
from .relation_info import RelationAttributes, RelationDefinition, RelationSource, RelationTarget
from .relation_types import RelationKind

if TYPE_CHECKING:
    from memdata.db.database import Database
    from .model import Model
    from .namespace_manager import NamespaceManager


logger = logging.getLogger(__name__)


def get_reference_key(reference: Any, primary_key: str) -> Any:
    """Primary key value exposed by a reference (an entity, or any record-shaped value)."""
    if reference is None:
        return None
    if isinstance(reference, Mapping):
        return reference.get(primary_key)
    return getattr(reference, primary_key, None)


class Relation:
    """
    An association from a source model property to a target model.

    A relation is defined once per (model, property path). `apply` binds it to
    the source model and resolves the target's primary key field;
    `resolve_with` validates a set of references against the store and
    installs a resolver that re-queries the target records on every read.
    """

    def __init__(self, definition: RelationDefinition):
        self.kind: RelationKind = definition.kind
        self.attributes: RelationAttributes = definition.merged_attributes()
        self.source: RelationSource | None = None
        self.target = RelationTarget(model_name=definition.to)

        # set by apply()
        self.dictionary: "NamespaceManager | None" = None
        self.db: "Database | None" = None

        logger.debug(
            'constructing a "%s" relation to "%s" with attributes: %s',
            self.kind.value,
            definition.to,
            self.attributes,
        )

    def __repr__(self):
        return f"<Relation {self.kind.value} -> {self.target.model_name}>"

    @property
    def is_applied(self) -> bool:
        return self.source is not None

    def apply(
        self,
        entity: "Model",
        property_path: Sequence[str],
        dictionary: "NamespaceManager",
        db: "Database",
    ) -> None:
        """
        Bind the relation to the entity's model and property path.

        Looks up the target model's primary key in the dictionary. Does not
        touch the store and does not define the property resolver.

        Raises:
            TargetModelUnresolvableError: the target model does not exist or has no primary key
        """
        self.dictionary = dictionary
        self.db = db

        source_primary_key = entity.get_primary_key()
        if source_primary_key is None:
            raise MissingPrimaryKeyError(entity.get_model_name(), None)
        self.source = RelationSource(
            model_name=entity.get_model_name(),
            primary_key=source_primary_key,
            property_path=tuple(property_path),
        )

        target_ns = dictionary.get_namespace_or_none(self.target.model_name)
        target_primary_key = find_primary_key(target_ns)
        if target_ns is None or target_primary_key is None:
            raise TargetModelUnresolvableError(self.kind.value, self.target.model_name)
        self.target.model_name = target_ns.name
        self.target.primary_key = target_primary_key

        logger.debug(
            'applied "%s" relation "%s.%s" -> "%s" ("%s")',
            self.kind.value,
            self.source.model_name,
            format_path(self.source.property_path),
            self.target.model_name,
            self.target.primary_key,
        )

    def resolve_with(self, entity: "Model", references: Any) -> None:
        """
        Update the relation references (values) to resolve the relation with.

        `references` is None, a single record or a list of records; a record is
        anything exposing the target model's primary key as an attribute or key.
        Nothing is installed when validation fails.
        """
        if self.source is None or self.db is None:
            raise NotAppliedError(self.kind.value, self.target.model_name)
        source = self.source

        logger.debug(
            'resolving a "%s" relational property to "%s" on "%s.%s" ("%s")',
            self.kind.value,
            self.target.model_name,
            source.model_name,
            format_path(source.property_path),
            getattr(entity, source.primary_key, None),
        )

        # Support None as the next relation value for nullable relations.
        if references is None:
            if not self.attributes.nullable:
                raise NullNotAllowedError(self.kind.value, self.target.model_name)
            logger.debug("this relation resolves with None")
            self.set_value_resolver(entity, lambda: None)
            self._store_references(entity, None)
            return

        if self.target.primary_key is None:
            raise TargetKeyMissingError(self.kind.value, source.model_name, source.property_path)
        target_key = self.target.primary_key

        references_list = list(references) if isinstance(references, (list, tuple)) else [references]

        with self.db.lock:
            records = self.db.get_model(self.target.model_name)
            logger.debug("records in the referenced model: %s", list(records.keys()))

            # every reference must point to a stored entity
            reference_ids = []
            for reference in references_list:
                reference_id = get_reference_key(reference, target_key)
                if reference_id is None or not isinstance(reference_id, Hashable) or reference_id not in records:
                    raise DanglingReferenceError(source.model_name, source.property_path, reference_id, target_key)
                reference_ids.append(reference_id)

            if self.attributes.unique:
                self._validate_unique(entity, reference_ids)

            self.set_value_resolver(entity, self._make_resolver(reference_ids))
            if self.kind is RelationKind.ONE_OF:
                self._store_references(entity, reference_ids[0] if reference_ids else None)
            else:
                self._store_references(entity, list(reference_ids))

    def _validate_unique(self, entity: "Model", reference_ids: list[Any]) -> None:
        """Ensure no other entity of the source model references the same targets."""
        source = self.source
        target_key = self.target.primary_key
        logger.debug(
            'validating a unique "%s" relation to "%s" on "%s.%s"...',
            self.kind.value,
            self.target.model_name,
            source.model_name,
            format_path(source.property_path),
        )

        entity_id = getattr(entity, source.primary_key)
        # Omit the current entity when querying the other entities
        # that reference the same values.
        where: dict[str, Any] = {source.primary_key: {"not_equals": entity_id}}
        set_at_path(where, source.property_path, {target_key: {"in": reference_ids}})
        extraneous = execute_query(source.model_name, source.primary_key, {"where": where}, self.db)

        logger.debug(
            "found other %s referencing the same %s: %s",
            source.model_name,
            self.target.model_name,
            [getattr(other, source.primary_key) for other in extraneous],
        )
        if not extraneous:
            return

        for reference_id in reference_ids:
            for other in extraneous:
                if reference_id in self._referenced_ids(other):
                    raise UniquenessViolationError(
                        kind=self.kind.value,
                        source_model=source.model_name,
                        property_path=source.property_path,
                        source_id=entity_id,
                        target_model=self.target.model_name,
                        reference_id=reference_id,
                        owner_id=getattr(other, source.primary_key),
                    )
        raise UniquenessViolationError(
            kind=self.kind.value,
            source_model=source.model_name,
            property_path=source.property_path,
            source_id=entity_id,
            target_model=self.target.model_name,
            reference_id=reference_ids[0],
            owner_id=getattr(extraneous[0], source.primary_key),
        )

    def _referenced_ids(self, entity: "Model") -> list[Any]:
        value = get_at_path(entity, self.source.property_path)
        values = value if isinstance(value, list) else [value]
        return [get_reference_key(v, self.target.primary_key) for v in values if v is not None]

    def _make_resolver(self, reference_ids: list[Any]) -> Callable[[], Any]:
        target_model = self.target.model_name
        target_key = self.target.primary_key
        kind = self.kind
        db = self.db

        def resolve() -> Any:
            result = []
            for reference_id in reference_ids:
                result.extend(execute_query(
                    target_model,
                    target_key,
                    {"where": {target_key: {"equals": reference_id}}},
                    db,
                ))
            if kind is RelationKind.ONE_OF:
                return result[0] if result else None
            return result

        return resolve

    def set_value_resolver(self, entity: "Model", resolver: Callable[[], Any]) -> None:
        """Install `resolver` as the live getter at the relation's property path."""
        source = self.source
        kind = self.kind

        def getter() -> Any:
            entity_id = getattr(entity, source.primary_key, None)
            logger.debug(
                'GET "%s.%s" on "%s" ("%s")',
                source.model_name,
                format_path(source.property_path),
                source.model_name,
                entity_id,
            )
            next_value = resolver()
            logger.debug(
                'resolved "%s" relation at "%s.%s" ("%s") to: %s',
                kind.value,
                source.model_name,
                format_path(source.property_path),
                entity_id,
                next_value,
            )
            return next_value

        define_property_at_path(entity, source.property_path, getter)

    def _store_references(self, entity: "Model", keys: Any) -> None:
        container = get_at_path(entity, self.source.property_path[:-1])
        container.store_raw(self.source.property_path[-1], keys)
