import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Dict, Generic, List, Type, TypeVar

from memdata.exceptions import DuplicatePrimaryKeyError, EntityNotFoundError, MissingPrimaryKeyError
from memdata.model.model import Embedded, Model, Resolvable, restore, snapshot
from memdata.model.relation import Relation
from memdata.model.util import unwrap_optional
from memdata.query.execute_query import execute_query
from memdata.query.query_types import OrderBy, Query, QuerySelectorWhere

if TYPE_CHECKING:
    from memdata.db.database import Database
    from memdata.model.namespace_manager import NamespaceManager


logger = logging.getLogger(__name__)

MODEL = TypeVar("MODEL", bound=Model)


class ModelApi(Generic[MODEL]):
    """Create, query, update and delete the entities of one model."""

    def __init__(self, model_name: str, dictionary: "NamespaceManager", db: "Database"):
        self.dictionary = dictionary
        self.db = db
        self.namespace = dictionary.get_namespace(model_name)
        self.model_name = self.namespace.name
        # one relation per property path, shared by all entities of this model
        self.relations: Dict[tuple[str, ...], Relation] = {
            path: Relation(definition)
            for path, definition in self.namespace.iter_relations()
        }

    def __repr__(self):
        return f"<ModelApi {self.model_name}>"

    @property
    def model_cls(self) -> Type[MODEL]:
        return self.namespace.model_cls

    @property
    def primary_key(self) -> str:
        primary_key = self.model_cls.get_primary_key()
        if primary_key is None:
            raise MissingPrimaryKeyError(self.model_name, None)
        return primary_key

    # -------------------------
    # Create
    # -------------------------
    def create(self, data: Mapping[str, Any] | None = None, **values: Any) -> MODEL:
        """
        Create and store an entity.

        Relations given a value are resolved with it (None included). Omitted
        relations resolve to None when nullable and to [] when they are ManyOf;
        other omitted relations stay unresolved and read as None.
        """
        values = {**(data or {}), **values}
        primary_key = self.primary_key
        entity = self.model_cls(**values)
        primary_id = getattr(entity, primary_key)
        if primary_id is None:
            raise MissingPrimaryKeyError(self.model_name, primary_key)

        with self.db.lock:
            if self.db.has(self.model_name, primary_id):
                raise DuplicatePrimaryKeyError(self.model_name, primary_key, primary_id)
            for path, relation in self.relations.items():
                relation.apply(entity, path, self.dictionary, self.db)
                entity.bind_relation(path, relation)
            entity.resolve_relations()
            self.db.create(self.model_name, entity)

        logger.debug('created "%s" entity "%s"', self.model_name, primary_id)
        return entity

    # -------------------------
    # Query
    # -------------------------
    def _execute(self, query: Query) -> List[MODEL]:
        return execute_query(self.model_name, self.primary_key, query, self.db)

    def find_first(
        self,
        where: QuerySelectorWhere | None = None,
        *,
        order_by: OrderBy | None = None,
        strict: bool = False,
    ) -> MODEL | None:
        query: Query = {"where": where or {}}
        if order_by:
            query["order_by"] = order_by
        results = self._execute(query)
        if not results:
            if strict:
                raise EntityNotFoundError(self.model_name, "find_first", where)
            return None
        return results[0]

    def find_many(
        self,
        where: QuerySelectorWhere | None = None,
        *,
        order_by: OrderBy | None = None,
        take: int | None = None,
        skip: int | None = None,
        cursor: Any = None,
        strict: bool = False,
    ) -> List[MODEL]:
        query: Query = {"where": where or {}}
        if order_by:
            query["order_by"] = order_by
        if take is not None:
            query["take"] = take
        if skip is not None:
            query["skip"] = skip
        if cursor is not None:
            query["cursor"] = cursor
        results = self._execute(query)
        if not results and strict:
            raise EntityNotFoundError(self.model_name, "find_many", where)
        return results

    def get_all(self) -> List[MODEL]:
        return self.db.list_entities(self.model_name)

    def count(self, where: QuerySelectorWhere | None = None) -> int:
        if not where:
            return self.db.count(self.model_name)
        return len(self._execute({"where": where}))

    # -------------------------
    # Update
    # -------------------------
    def update(self, where: QuerySelectorWhere, data: Mapping[str, Any], *, strict: bool = False) -> MODEL | None:
        """
        Update the first entity matching `where`.

        `data` values are either the next value or a callable
        `(previous_value, entity) -> next_value`. Nested mappings update
        embedded fields. Nothing changes when the update fails.
        """
        entity = self.find_first(where)
        if entity is None:
            if strict:
                raise EntityNotFoundError(self.model_name, "update", where)
            return None
        return self._update_entity(entity, data)

    def update_many(self, where: QuerySelectorWhere, data: Mapping[str, Any], *, strict: bool = False) -> List[MODEL]:
        entities = self.find_many(where)
        if not entities and strict:
            raise EntityNotFoundError(self.model_name, "update_many", where)
        return [self._update_entity(entity, data) for entity in entities]

    def _update_entity(self, entity: MODEL, data: Mapping[str, Any]) -> MODEL:
        previous_id = entity.primary_id
        with self.db.lock:
            saved = snapshot(entity)
            try:
                self._apply_update(entity, entity, data, ())
                next_id = entity.primary_id
                if next_id is None:
                    raise MissingPrimaryKeyError(self.model_name, self.primary_key)
                if next_id != previous_id:
                    self.db.update(self.model_name, previous_id, entity)
            except Exception:
                restore(saved)
                raise
        logger.debug('updated "%s" entity "%s"', self.model_name, entity.primary_id)
        return entity

    def _apply_update(self, entity: MODEL, container: Resolvable, data: Mapping[str, Any], prefix: tuple[str, ...]) -> None:
        for key, value in data.items():
            path = (*prefix, key)
            if callable(value):
                value = value(getattr(container, key, None), entity)

            relation = self.relations.get(path)
            if relation is not None:
                relation.resolve_with(entity, value)
                continue

            field = type(container).model_fields.get(key)
            embedded_cls, _ = unwrap_optional(field.annotation) if field is not None else (None, False)
            if isinstance(value, Mapping) and isinstance(embedded_cls, type) and issubclass(embedded_cls, Embedded):
                child = getattr(container, key, None)
                if child is None:
                    child = embedded_cls.model_construct()
                    setattr(container, key, child)
                self._apply_update(entity, child, value, path)
                continue

            setattr(container, key, value)

    # -------------------------
    # Delete
    # -------------------------
    def delete(self, where: QuerySelectorWhere, *, strict: bool = False) -> MODEL | None:
        entity = self.find_first(where)
        if entity is None:
            if strict:
                raise EntityNotFoundError(self.model_name, "delete", where)
            return None
        self.db.delete(self.model_name, entity.primary_id)
        return entity

    def delete_many(self, where: QuerySelectorWhere, *, strict: bool = False) -> List[MODEL]:
        entities = self.find_many(where)
        if not entities and strict:
            raise EntityNotFoundError(self.model_name, "delete_many", where)
        with self.db.lock:
            for entity in entities:
                self.db.delete(self.model_name, entity.primary_id)
        return entities
