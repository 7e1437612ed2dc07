from .compile_query import compile_query, match_where, OPERATORS
from .execute_query import execute_query, sort_results, paginate_results
from .query_types import FieldOp, Query, QuerySelectorWhere, OrderBy, SortDirection

__all__ = [
    "compile_query",
    "match_where",
    "OPERATORS",
    "execute_query",
    "sort_results",
    "paginate_results",
    "FieldOp",
    "Query",
    "QuerySelectorWhere",
    "OrderBy",
    "SortDirection",
]
