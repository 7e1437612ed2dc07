from typing import TYPE_CHECKING, Any, Dict, Type

from .namespace import Namespace
from .relation_info import RelationDefinition
from .relation_types import parse_relation_annotation
from .util import unpack_extra, unwrap_optional

if TYPE_CHECKING:
    from .model import Model


class RelationParser:
    def __init__(self, model_cls: Type["Model"], namespace: Namespace):
        self.model_cls = model_cls
        self.namespace = namespace
        self.relations: Dict[tuple[str, ...], RelationDefinition] = {}

    def parse(self):
        """Collect the relations of the model, including those nested in embedded fields"""
        self._parse_container(self.model_cls, (), {self.model_cls})

    def _parse_container(self, container_cls: Type[Any], prefix: tuple[str, ...], visiting: set):
        from .model import Embedded

        for field_name, field_info in container_cls.model_fields.items():
            extra = unpack_extra(field_info)
            path = (*prefix, field_name)
            annotation = parse_relation_annotation(field_info.annotation)

            if annotation is None:
                if extra.get("is_relation", False):
                    raise ValueError(
                        f"Relation field '{'.'.join(path)}' on model '{self.model_cls.__name__}' must be annotated with OneOf[...] or ManyOf[...]"
                    )
                embedded_cls, _ = unwrap_optional(field_info.annotation)
                if isinstance(embedded_cls, type) and issubclass(embedded_cls, Embedded):
                    if embedded_cls in visiting:
                        raise ValueError(f"Embedded model '{embedded_cls.__name__}' cannot contain itself")
                    self._parse_container(embedded_cls, path, visiting | {embedded_cls})
                continue

            attributes = {
                "nullable": bool(extra.get("nullable", False) or annotation.is_optional),
                "unique": bool(extra.get("unique", False)),
            }
            definition = RelationDefinition(
                to=extra.get("to") or annotation.target,
                kind=annotation.kind,
                attributes=attributes,
            )
            self.relations[path] = self.namespace.add_relation(path, definition)
