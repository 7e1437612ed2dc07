from typing import TYPE_CHECKING, Type

from .namespace import ModelFieldInfo, Namespace
from .relation_types import parse_relation_annotation
from .util import unpack_extra, unwrap_optional

if TYPE_CHECKING:
    from .model import Model


class FieldParser:
    def __init__(self, model_cls: Type["Model"], model_name: str, namespace: Namespace):
        self.model_cls = model_cls
        self.model_name = model_name
        self.namespace = namespace

    def parse(self):
        for field_name, field_info in self.model_cls.model_fields.items():
            extra = unpack_extra(field_info)
            if extra.get("is_relation", False) or parse_relation_annotation(field_info.annotation) is not None:
                continue

            field_type, is_optional = unwrap_optional(field_info.annotation)
            self.namespace.add_field(ModelFieldInfo(
                name=field_name,
                field_type=field_type,
                default=field_info.default,
                is_optional=is_optional,
                is_primary_key=extra.get("primary_key", False),
                index=extra.get("index"),
            ))
