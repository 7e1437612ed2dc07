import json
from typing import TYPE_CHECKING, Any, Callable, ClassVar

from pydantic import BaseModel, PrivateAttr
from pydantic_core import to_jsonable_python

from .model_meta import ModelMeta
from .namespace import Namespace, find_primary_key
from .relation_types import RelationKind

if TYPE_CHECKING:
    from .relation import Relation


def reference_keys(value: Any) -> Any:
    """Primary key(s) of a resolved relation value."""
    if value is None:
        return None
    if isinstance(value, list):
        return [reference_keys(item) for item in value]
    if isinstance(value, Model):
        return value.primary_id
    return value


def read_assigned(entity: "Resolvable", property_path: tuple[str, ...]) -> tuple[bool, Any]:
    """Whether a value was given at `property_path`, and that raw value."""
    container: Any = entity
    for segment in property_path[:-1]:
        if segment not in container.model_fields_set:
            return False, None
        container = container.__dict__.get(segment)
        if not isinstance(container, Resolvable):
            return False, None
    name = property_path[-1]
    if name not in container.model_fields_set:
        return False, None
    return True, container.__dict__.get(name)


def bind_containers(entity: "Model", property_path: tuple[str, ...]) -> None:
    """Bind the embedded containers along `property_path` to their owning entity."""
    container: Any = entity
    for depth, segment in enumerate(property_path[:-1], start=1):
        container = container.__dict__.get(segment)
        if not isinstance(container, Resolvable):
            return
        container.bind_owner(entity, tuple(property_path[:depth]))


def snapshot(container: "Resolvable") -> list[tuple["Resolvable", dict, dict, set]]:
    saved = [(container, dict(container.__dict__), dict(container._resolvers), set(container.model_fields_set))]
    for value in container.__dict__.values():
        if isinstance(value, Resolvable):
            saved.extend(snapshot(value))
    return saved


def restore(saved: list[tuple["Resolvable", dict, dict, set]]) -> None:
    for container, data, resolvers, fields_set in saved:
        container.__dict__.clear()
        container.__dict__.update(data)
        container._resolvers.clear()
        container._resolvers.update(resolvers)
        container.__pydantic_fields_set__.clear()
        container.__pydantic_fields_set__.update(fields_set)


class Resolvable(BaseModel):
    """Base for containers whose relation attributes are read through live resolvers.

    Reading a relation attribute calls the resolver installed for it; until one
    is installed the raw stored value is returned.
    """

    __relation_fields__: ClassVar[frozenset[str]] = frozenset()

    _resolvers: dict[str, Callable[[], Any]] = PrivateAttr(default_factory=dict)
    _owner: Any = PrivateAttr(default=None)
    _prefix: tuple[str, ...] = PrivateAttr(default=())

    def __getattribute__(self, name: str) -> Any:
        if name in type(self).__relation_fields__:
            return object.__getattribute__(self, "resolve_attribute")(name)
        return super().__getattribute__(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in type(self).__relation_fields__:
            self.assign_relation(name, value)
            return
        if not name.startswith("_") and isinstance(value, Resolvable):
            self.assign_container(name, value)
            return
        super().__setattr__(name, value)

    def resolve_attribute(self, name: str) -> Any:
        resolver = self._resolvers.get(name)
        if resolver is None:
            return self.__dict__.get(name)
        return resolver()

    def store_raw(self, name: str, value: Any) -> None:
        self.__dict__[name] = value
        self.__pydantic_fields_set__.add(name)

    def bind_owner(self, owner: "Model", prefix: tuple[str, ...]) -> None:
        self._owner = owner
        self._prefix = prefix

    def bound_owner(self) -> "Model | None":
        owner = self._owner if self._owner is not None else self
        return owner if isinstance(owner, Model) else None

    def assign_relation(self, name: str, value: Any) -> None:
        owner = self.bound_owner()
        relation = owner.get_relation((*self._prefix, name)) if owner is not None else None
        if relation is None:
            self.store_raw(name, value)
            return
        relation.resolve_with(owner, value)

    def assign_container(self, name: str, container: "Resolvable") -> None:
        """Replace an embedded container, resolving the relations it carries.

        Nothing changes when one of them fails to resolve.
        """
        owner = self.bound_owner()
        prefix = (*self._prefix, name)
        if owner is None or not owner.has_relations_under(prefix):
            super().__setattr__(name, container)
            return
        saved = snapshot(owner)
        try:
            super().__setattr__(name, container)
            owner.resolve_relations(prefix)
        except Exception:
            restore(saved)
            raise

    def _overlay_relations(self, data: dict[str, Any], mode: str) -> dict[str, Any]:
        for name in type(self).__relation_fields__:
            if name in data and name in self._resolvers:
                keys = reference_keys(self._resolvers[name]())
                data[name] = to_jsonable_python(keys) if mode == "json" else keys
        for name, value in self.__dict__.items():
            if isinstance(value, Resolvable) and isinstance(data.get(name), dict):
                data[name] = value._overlay_relations(data[name], mode)
        return data

    def model_dump(self, *, mode: str = "python", **kwargs) -> dict[str, Any]:
        """Dump the model, rendering relations as the primary keys they currently resolve to."""
        data = super().model_dump(mode=mode, **kwargs)
        return self._overlay_relations(data, mode)

    def model_dump_json(self, *, indent: int | None = None, **kwargs) -> str:
        return json.dumps(self.model_dump(mode="json", **kwargs), indent=indent)


class Embedded(Resolvable, metaclass=ModelMeta):
    """A nested container of fields (and relations) that is not an entity on its own."""
    _is_base = True


class Model(Resolvable, metaclass=ModelMeta):
    """Base class for all models."""
    _is_base = True
    _relations: dict[tuple[str, ...], "Relation"] = PrivateAttr(default_factory=dict)

    @classmethod
    def get_namespace(cls) -> Namespace:
        ns = getattr(cls, "_namespace", None)
        if not isinstance(ns, Namespace):
            raise ValueError(f"Namespace not set for {cls.__name__}")
        ns.run_pending_parsers()
        return ns

    @classmethod
    def get_model_name(cls) -> str:
        return cls.get_namespace().name

    @classmethod
    def get_primary_key(cls) -> str | None:
        return find_primary_key(cls.get_namespace())

    @property
    def primary_id(self) -> Any:
        primary_key = self.get_primary_key()
        if primary_key is None:
            raise ValueError(f"{self.__class__.__name__} has no primary key")
        return getattr(self, primary_key)

    def bind_relation(self, property_path: tuple[str, ...], relation: "Relation") -> None:
        self._relations[tuple(property_path)] = relation

    def get_relation(self, property_path: tuple[str, ...]) -> "Relation | None":
        return self._relations.get(tuple(property_path))

    def has_relations_under(self, prefix: tuple[str, ...]) -> bool:
        return any(path[:len(prefix)] == prefix for path in self._relations)

    def resolve_relations(self, prefix: tuple[str, ...] = ()) -> None:
        """
        Resolve the bound relations under `prefix` with the values assigned to them.

        Omitted relations resolve to None when nullable and to [] when they
        are ManyOf; other omitted relations stay unresolved. Containers on
        the way are bound to this entity either way, so later assignments
        are validated.
        """
        for path, relation in self._relations.items():
            if path[:len(prefix)] != prefix:
                continue
            bind_containers(self, path)
            is_set, value = read_assigned(self, path)
            if is_set:
                relation.resolve_with(self, value)
            elif relation.attributes.nullable:
                relation.resolve_with(self, None)
            elif relation.kind is RelationKind.MANY_OF:
                relation.resolve_with(self, [])
