import logging
from collections.abc import Hashable, Mapping
from typing import TYPE_CHECKING, Any, List

from memdata.exceptions import QueryError
from .compile_query import compile_query, read_field
from .query_types import FieldOp, OrderBy, Query

if TYPE_CHECKING:
    from memdata.db.database import Database


logger = logging.getLogger(__name__)


def _flatten_order_by(criterion: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> list[tuple[tuple[str, ...], str]]:
    flat = []
    for field, direction in criterion.items():
        path = (*prefix, field)
        if isinstance(direction, Mapping):
            flat.extend(_flatten_order_by(direction, path))
        elif direction in ("asc", "desc"):
            flat.append((path, direction))
        else:
            raise QueryError(f'Failed to sort by "{".".join(path)}": expected "asc" or "desc", got {direction!r}')
    return flat


def _read_path(record: Any, path: tuple[str, ...]) -> Any:
    for field in path:
        if record is None:
            return None
        record = read_field(record, field)
    return record


def sort_results(records: List[Any], order_by: OrderBy) -> List[Any]:
    criteria = [order_by] if isinstance(order_by, Mapping) else list(order_by)
    flat = [item for criterion in criteria for item in _flatten_order_by(criterion)]
    result = list(records)
    # stable sorts, least significant criterion first; None sorts last
    for path, direction in reversed(flat):
        if direction == "asc":
            result.sort(key=lambda r: (_read_path(r, path) is None, _read_path(r, path)))
        else:
            result.sort(key=lambda r: (_read_path(r, path) is not None, _read_path(r, path)), reverse=True)
    return result


def paginate_results(records: List[Any], primary_key: str, query: Query) -> List[Any]:
    if "cursor" in query and query["cursor"] is not None:
        cursor = query["cursor"]
        index = next((i for i, r in enumerate(records) if read_field(r, primary_key) == cursor), None)
        if index is None:
            return []
        records = records[index + 1:]
    skip = query.get("skip") or 0
    take = query.get("take")
    if skip < 0 or (take is not None and take < 0):
        raise QueryError(f"Failed to paginate: skip and take must be non-negative, got skip={skip} take={take}")
    end = skip + take if take is not None else None
    return records[skip:end]


def _primary_key_lookup(primary_key: str, where: Any) -> tuple[bool, Any]:
    if not isinstance(where, Mapping) or list(where.keys()) != [primary_key]:
        return False, None
    condition = where[primary_key]
    if not isinstance(condition, Mapping) or list(condition.keys()) != [FieldOp.EQUALS.value]:
        return False, None
    value = condition[FieldOp.EQUALS.value]
    if not isinstance(value, Hashable):
        return False, None
    return True, value


def execute_query(model_name: str, primary_key: str, query: Query | None, db: "Database") -> List[Any]:
    """
    Return the records of a model matching the query, in store order unless
    `order_by` is given. Returns an empty list when nothing matches.

    Args:
        model_name: the model to query
        primary_key: the model's primary key field name
        query: mapping with optional `where`, `order_by`, `take`, `skip`, `cursor`
        db: the store
    """
    query = query or {}
    where = query.get("where")
    records = db.get_model(model_name)

    is_lookup, primary_id = _primary_key_lookup(primary_key, where)
    if is_lookup:
        record = records.get(primary_id)
        results = [record] if record is not None else []
    else:
        predicate = compile_query(where)
        results = [record for record in list(records.values()) if predicate(record)]

    logger.debug('query "%s" where %s matched %d record(s)', model_name, where, len(results))

    if query.get("order_by"):
        results = sort_results(results, query["order_by"])
    if any(key in query for key in ("cursor", "skip", "take")):
        results = paginate_results(results, primary_key, query)
    return results
