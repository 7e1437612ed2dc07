from typing import Any

from pydantic._internal._model_construction import ModelMetaclass

from memdata.utils.string_utils import camel_to_snake
from .namespace import Namespace
from .relation_types import parse_relation_annotation
from .util import unpack_extra


def get_dct_private_attributes(dct: dict[str, Any], key: str, default: Any = None) -> Any:
    """Get a private attribute from a class body, unwrapping PrivateAttr defaults"""
    res = dct.get(key)
    if res is not None and hasattr(res, "default"):
        res = res.default
    if not res:
        return default
    return res


def is_embedded_model(bases: tuple[type, ...]) -> bool:
    return any(base.__name__ == "Embedded" for b in bases for base in b.__mro__)


class ModelMeta(ModelMetaclass, type):
    """
    Metaclass for Model and Embedded classes.
    - Records which fields are relations so reads go through live resolvers.
    - Defers field and relation parsing of models until the namespace is first used.
    """

    def __new__(cls, name, bases, dct, **kwargs):
        if dct.get("_is_base", False):
            return super().__new__(cls, name, bases, dct, **kwargs)

        cls_obj = super().__new__(cls, name, bases, dct, **kwargs)
        cls_obj.__relation_fields__ = frozenset(
            field_name
            for field_name, field_info in cls_obj.model_fields.items()
            if parse_relation_annotation(field_info.annotation) is not None
            or unpack_extra(field_info).get("is_relation", False)
        )
        if is_embedded_model(bases):
            return cls_obj

        model_name = get_dct_private_attributes(dct, "_model_name", camel_to_snake(name))
        ns = Namespace(model_name)

        from .field_parser import FieldParser
        from .relation_parser import RelationParser

        field_parser = FieldParser(model_cls=cls_obj, model_name=model_name, namespace=ns)
        relation_parser = RelationParser(cls_obj, ns)
        ns.set_pending_parsers(field_parser, relation_parser)
        ns.set_model_class(cls_obj)

        cls_obj._namespace = ns
        cls_obj._model_name = model_name
        return cls_obj
