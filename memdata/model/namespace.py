from typing import TYPE_CHECKING, Any, Iterator, List, Optional, Type, get_args, get_origin

from .relation_info import RelationDefinition

if TYPE_CHECKING:
    from .model import Model
    from .field_parser import FieldParser
    from .relation_parser import RelationParser


class ModelFieldInfo:
    def __init__(
        self,
        name: str,
        field_type: Type,
        *,
        default: Any = None,
        is_optional: bool = False,
        is_primary_key: bool = False,
        index: Optional[str] = None,
    ):
        self.name = name
        self.field_type = field_type
        self.default = default
        self.is_optional = is_optional
        self.is_primary_key = is_primary_key
        self.index = index
        origin = get_origin(field_type)
        self.is_list = origin in (list, List)
        self.data_type = get_args(field_type)[0] if self.is_list and get_args(field_type) else field_type

    def __repr__(self):
        return f"<ModelFieldInfo {self.name}: {getattr(self.field_type, '__name__', self.field_type)}>"


class Namespace:
    """Schema of a single model: its fields, primary key and relations."""

    def __init__(self, name: str):
        self.name = name
        self._fields: dict[str, ModelFieldInfo] = {}
        self._relations: dict[tuple[str, ...], RelationDefinition] = {}
        self._model_cls: Optional[Type["Model"]] = None
        self._primary_key_field: Optional[ModelFieldInfo] = None
        # Pending parsers for deferred execution
        self._pending_field_parser: Optional["FieldParser"] = None
        self._pending_relation_parser: Optional["RelationParser"] = None

    # -------------------------
    # Model class binding
    # -------------------------
    def set_model_class(self, model_cls: Type["Model"]):
        self._model_cls = model_cls

    @property
    def model_cls(self) -> Type["Model"]:
        if self._model_cls is None:
            raise ValueError(f"Model class not set for namespace '{self.name}'")
        return self._model_cls

    # -------------------------
    # Field management
    # -------------------------
    def add_field(self, field: ModelFieldInfo):
        if field.name in self._fields:
            raise ValueError(f"Field {field.name} already exists in {self.name}")
        if field.is_primary_key:
            if self._primary_key_field:
                raise ValueError(f"Primary key already defined: {self._primary_key_field.name}")
            self._primary_key_field = field
        self._fields[field.name] = field

    @property
    def primary_key(self) -> str:
        return self.primary_key_field.name

    @property
    def primary_key_field(self) -> ModelFieldInfo:
        if self._primary_key_field is None:
            raise ValueError(f"No primary key defined for namespace '{self.name}'")
        return self._primary_key_field

    def get_field(self, name: str) -> ModelFieldInfo:
        return self._fields[name]

    def has_field(self, name: str) -> bool:
        return name in self._fields

    def iter_fields(self):
        return self._fields.values()

    def get_field_names(self) -> list[str]:
        return list(self._fields.keys())

    # -------------------------
    # Relation management
    # -------------------------
    def add_relation(self, property_path: tuple[str, ...], definition: RelationDefinition) -> RelationDefinition:
        if property_path in self._relations:
            raise ValueError(f"Relation {'.'.join(property_path)} already exists in {self.name}")
        self._relations[property_path] = definition
        return definition

    def get_relation(self, property_path: tuple[str, ...]) -> Optional[RelationDefinition]:
        return self._relations.get(tuple(property_path))

    def iter_relations(self) -> Iterator[tuple[tuple[str, ...], RelationDefinition]]:
        return iter(self._relations.items())

    # -------------------------
    # Deferred parsing
    # -------------------------
    def set_pending_parsers(self, field_parser: "FieldParser", relation_parser: "RelationParser"):
        self._pending_field_parser = field_parser
        self._pending_relation_parser = relation_parser

    def run_pending_parsers(self):
        """Run deferred field & relation parsing."""
        if self._pending_field_parser:
            parser, self._pending_field_parser = self._pending_field_parser, None
            parser.parse()
        if self._pending_relation_parser:
            parser, self._pending_relation_parser = self._pending_relation_parser, None
            parser.parse()

    def __repr__(self):
        return f"<Namespace {self.name}>"


def find_primary_key(namespace: Namespace | None) -> str | None:
    """Name of the field marked as primary key, or None when there is none."""
    if namespace is None:
        return None
    namespace.run_pending_parsers()
    if namespace._primary_key_field is None:
        return None
    return namespace._primary_key_field.name
