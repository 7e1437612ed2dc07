from enum import Enum
from typing import Any, Literal, Mapping, TypedDict, Union


class FieldOp(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    IN = "in"
    NOT_IN = "not_in"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    BETWEEN = "between"
    NOT_BETWEEN = "not_between"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"


SortDirection = Literal["asc", "desc"]

# {"field": {"equals": 1}} or nested {"author": {"id": {"in": [1, 2]}}}
QuerySelectorWhere = Mapping[str, Any]

# {"field": "asc"} or nested {"author": {"name": "desc"}}
OrderBy = Union[Mapping[str, Any], list[Mapping[str, Any]]]


class Query(TypedDict, total=False):
    where: QuerySelectorWhere
    order_by: OrderBy
    take: int
    skip: int
    cursor: Any
