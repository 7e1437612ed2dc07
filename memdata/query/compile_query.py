from collections.abc import Mapping
from typing import Any, Callable

from pydantic import BaseModel

from memdata.exceptions import QueryError
from .query_types import FieldOp, QuerySelectorWhere


def _compare(fn: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def comparator(actual: Any, expected: Any) -> bool:
        if actual is None or expected is None:
            return False
        try:
            return fn(actual, expected)
        except TypeError:
            return False
    return comparator


def _between(actual: Any, expected: Any) -> bool:
    low, high = expected
    return low <= actual <= high


def _contains(actual: Any, expected: Any) -> bool:
    return expected in actual


OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    FieldOp.EQUALS.value: lambda actual, expected: actual == expected,
    FieldOp.NOT_EQUALS.value: lambda actual, expected: actual != expected,
    FieldOp.IN.value: lambda actual, expected: actual in expected,
    FieldOp.NOT_IN.value: lambda actual, expected: actual not in expected,
    FieldOp.GT.value: _compare(lambda actual, expected: actual > expected),
    FieldOp.GTE.value: _compare(lambda actual, expected: actual >= expected),
    FieldOp.LT.value: _compare(lambda actual, expected: actual < expected),
    FieldOp.LTE.value: _compare(lambda actual, expected: actual <= expected),
    FieldOp.BETWEEN.value: _compare(_between),
    FieldOp.NOT_BETWEEN.value: lambda actual, expected: not _compare(_between)(actual, expected),
    FieldOp.CONTAINS.value: _compare(_contains),
    FieldOp.NOT_CONTAINS.value: lambda actual, expected: not _compare(_contains)(actual, expected),
}


def is_operator_node(node: Any) -> bool:
    return isinstance(node, Mapping) and bool(node) and all(key in OPERATORS for key in node)


def read_field(obj: Any, field: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(field)
    return getattr(obj, field, None)


def _match_condition(actual: Any, condition: Any, path: str) -> bool:
    if not isinstance(condition, Mapping):
        raise QueryError(f'Failed to compile the query: expected an operator mapping at "{path}", got {condition!r}')
    if is_operator_node(condition):
        return all(OPERATORS[op](actual, expected) for op, expected in condition.items())

    # nested selector: descend into relations, embedded models and dicts
    if actual is None:
        return False
    if isinstance(actual, (list, tuple)):
        return any(
            match_where(item, condition, path)
            for item in actual
            if item is not None
        )
    if isinstance(actual, (Mapping, BaseModel)):
        return match_where(actual, condition, path)
    unknown = [key for key in condition if key not in OPERATORS]
    raise QueryError(f'Failed to compile the query: unknown operator(s) {unknown} at "{path}"')


def match_where(record: Any, where: QuerySelectorWhere, prefix: str = "") -> bool:
    for field, condition in where.items():
        path = f"{prefix}.{field}" if prefix else field
        if not _match_condition(read_field(record, field), condition, path):
            return False
    return True


def compile_query(where: QuerySelectorWhere | None) -> Callable[[Any], bool]:
    """Compile a `where` selector into a predicate over records."""
    if not where:
        return lambda record: True
    if not isinstance(where, Mapping):
        raise QueryError(f"Failed to compile the query: expected a mapping, got {where!r}")
    return lambda record: match_where(record, where)
