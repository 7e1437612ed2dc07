import logging
from typing import Any, Dict, Iterator, Type

from memdata.db.database import Database
from memdata.model.model import Model
from memdata.model.namespace_manager import NamespaceManager
from memdata.model_api import ModelApi


logger = logging.getLogger(__name__)


class Factory:
    """
    A set of models sharing one dictionary and one in-memory store.

    Each model is reachable as an attribute or item, by model name or class name:

        db = factory(Author, Book)
        db.author.create(id=1, name="Ann")
        db["Book"].find_many({"author": {"id": {"equals": 1}}})
    """

    def __init__(self, *models: Type[Model]):
        self.dictionary = NamespaceManager(models)
        self.db = Database(self.dictionary)
        self._apis: Dict[str, ModelApi] = {
            name: ModelApi(name, self.dictionary, self.db)
            for name in self.dictionary
        }
        logger.debug("factory created with models: %s", list(self._apis))

    def __getitem__(self, name: str) -> ModelApi:
        model_name = self.dictionary.resolve_model_name(name)
        if model_name is None:
            raise KeyError(f"Model '{name}' is not registered in this factory")
        return self._apis[model_name]

    def __getattr__(self, name: str) -> ModelApi:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError as e:
            raise AttributeError(str(e)) from e

    def __contains__(self, name: object) -> bool:
        return name in self.dictionary

    def __iter__(self) -> Iterator[str]:
        return iter(self._apis)

    def __repr__(self):
        return f"<Factory {', '.join(self._apis)}>"

    def get_api(self, model: Type[Model] | str) -> ModelApi:
        if isinstance(model, str):
            return self[model]
        return self[model.get_model_name()]


def factory(*models: Type[Model]) -> Factory:
    """Create a factory over the given models."""
    return Factory(*models)
