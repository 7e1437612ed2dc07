from typing import TYPE_CHECKING, Dict, Iterable, Iterator, Optional, Type

from .namespace import Namespace
from .relation_info import RelationDefinition

if TYPE_CHECKING:
    from .model import Model


class NamespaceManager:
    """Dictionary of model schemas, keyed by model name.

    Lookups also accept the model's class name, so relations may reference
    `OneOf["Author"]` or `OneOf["author"]` alike.
    """

    def __init__(self, models: Iterable[Type["Model"]] = ()):
        self._registry: Dict[str, Namespace] = {}
        self._class_names: Dict[str, str] = {}
        for model_cls in models:
            self.register_model(model_cls)

    def register_model(self, model_cls: Type["Model"]) -> Namespace:
        ns = model_cls.get_namespace()
        existing = self._registry.get(ns.name)
        if existing is not None and existing is not ns:
            raise ValueError(f"Model name '{ns.name}' is already registered by {existing.model_cls.__name__}")
        self._registry[ns.name] = ns
        self._class_names[model_cls.__name__] = ns.name
        return ns

    def resolve_model_name(self, name: str) -> Optional[str]:
        if name in self._registry:
            return name
        return self._class_names.get(name)

    def get_namespace(self, name: str) -> Namespace:
        ns = self.get_namespace_or_none(name)
        if ns is None:
            raise ValueError(f"Namespace '{name}' not found.")
        return ns

    def get_namespace_or_none(self, name: str) -> Optional[Namespace]:
        model_name = self.resolve_model_name(name)
        if model_name is None:
            return None
        return self._registry[model_name]

    def get_model_class(self, name: str) -> Type["Model"]:
        return self.get_namespace(name).model_cls

    def iter_relations(self, name: str) -> Iterator[tuple[tuple[str, ...], RelationDefinition]]:
        return self.get_namespace(name).iter_relations()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve_model_name(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._registry)

    def __len__(self) -> int:
        return len(self._registry)

    def items(self):
        return self._registry.items()
