import logging
import threading
from typing import TYPE_CHECKING, Any, Dict, List

from memdata.exceptions import DuplicatePrimaryKeyError

if TYPE_CHECKING:
    from memdata.model.model import Model
    from memdata.model.namespace_manager import NamespaceManager


logger = logging.getLogger(__name__)


class Database:
    """In-memory entity store: one ordered mapping of primary key -> entity per model."""

    def __init__(self, dictionary: "NamespaceManager"):
        self.dictionary = dictionary
        self._models: Dict[str, Dict[Any, "Model"]] = {name: {} for name in dictionary}
        self.lock = threading.RLock()

    def _model_name(self, model_name: str) -> str:
        name = self.dictionary.resolve_model_name(model_name)
        if name is None or name not in self._models:
            raise ValueError(f"Model '{model_name}' is not registered in this database")
        return name

    def get_model(self, model_name: str) -> Dict[Any, "Model"]:
        """The records of a model, keyed by primary key. Supports `in` and `keys()`."""
        return self._models[self._model_name(model_name)]

    def has(self, model_name: str, primary_id: Any) -> bool:
        return primary_id in self.get_model(model_name)

    def list_entities(self, model_name: str) -> List["Model"]:
        return list(self.get_model(model_name).values())

    def count(self, model_name: str) -> int:
        return len(self.get_model(model_name))

    def create(self, model_name: str, entity: "Model") -> "Model":
        records = self.get_model(model_name)
        primary_key = entity.get_primary_key()
        primary_id = entity.primary_id
        with self.lock:
            if primary_id in records:
                raise DuplicatePrimaryKeyError(model_name, primary_key, primary_id)
            records[primary_id] = entity
        logger.debug('created "%s" entity "%s"', model_name, primary_id)
        return entity

    def update(self, model_name: str, previous_id: Any, entity: "Model") -> "Model":
        """Store `entity` under its current primary key, replacing the record at `previous_id`.

        A changed primary key keeps the record at the same position.
        """
        name = self._model_name(model_name)
        records = self._models[name]
        primary_id = entity.primary_id
        with self.lock:
            if primary_id == previous_id:
                records[primary_id] = entity
            else:
                if primary_id in records:
                    raise DuplicatePrimaryKeyError(model_name, entity.get_primary_key(), primary_id)
                items = list(records.items())
                records.clear()
                for key, value in items:
                    if key == previous_id:
                        records[primary_id] = entity
                    else:
                        records[key] = value
        logger.debug('updated "%s" entity "%s" -> "%s"', model_name, previous_id, primary_id)
        return entity

    def delete(self, model_name: str, primary_id: Any) -> "Model | None":
        with self.lock:
            entity = self.get_model(model_name).pop(primary_id, None)
        logger.debug('deleted "%s" entity "%s"', model_name, primary_id)
        return entity
