from typing import List, Optional

import pytest

from memdata import factory
from memdata.exceptions import QueryError
from memdata.model import KeyField, ManyOf, Model, ModelField, OneOf, RelationField
from memdata.query import compile_query, execute_query, paginate_results, sort_results


class Country(Model):
    code: str = KeyField()
    name: str = ModelField()


class Product(Model):
    id: int = KeyField()
    name: str = ModelField()
    price: float = ModelField()
    stock: Optional[int] = ModelField(default=None)
    labels: List[str] = ModelField(default_factory=list)
    origin: OneOf["Country"] | None = RelationField()
    markets: ManyOf["Country"] = RelationField()


@pytest.fixture()
def db():
    db = factory(Country, Product)
    fr = db.country.create(code="fr", name="France")
    it = db.country.create(code="it", name="Italy")
    db.product.create(id=1, name="Cheese", price=12.5, stock=3, labels=["food", "dairy"], origin=fr, markets=[fr, it])
    db.product.create(id=2, name="Pasta", price=2.0, stock=None, labels=["food"], origin=it, markets=[it])
    db.product.create(id=3, name="Wine", price=20.0, stock=10, labels=["drink"], origin=fr)
    db.product.create(id=4, name="Bread", price=2.0, stock=0)
    return db


def ids(records):
    return [record.id for record in records]


# -------------------------
# where
# -------------------------

@pytest.mark.parametrize("where, expected", [
    ({}, [1, 2, 3, 4]),
    ({"name": {"equals": "Pasta"}}, [2]),
    ({"name": {"not_equals": "Pasta"}}, [1, 3, 4]),
    ({"id": {"in": [1, 3, 9]}}, [1, 3]),
    ({"id": {"not_in": [1, 3]}}, [2, 4]),
    ({"price": {"gt": 2.0}}, [1, 3]),
    ({"price": {"gte": 12.5}}, [1, 3]),
    ({"price": {"lt": 12.5}}, [2, 4]),
    ({"price": {"lte": 2.0}}, [2, 4]),
    ({"price": {"between": [2.0, 12.5]}}, [1, 2, 4]),
    ({"price": {"not_between": [2.0, 12.5]}}, [3]),
    ({"name": {"contains": "ea"}}, [4]),
    ({"name": {"not_contains": "e"}}, [2]),
    ({"labels": {"contains": "food"}}, [1, 2]),
    ({"price": {"gte": 2.0, "lt": 20.0}}, [1, 2, 4]),
    ({"price": {"equals": 2.0}, "name": {"equals": "Bread"}}, [4]),
])
def test_where_operators(db, where, expected):
    assert ids(db.product.find_many(where)) == expected


def test_none_never_compares(db):
    assert ids(db.product.find_many({"stock": {"gte": 0}})) == [1, 3, 4]
    assert ids(db.product.find_many({"stock": {"equals": None}})) == [2]


def test_where_through_one_of(db):
    assert ids(db.product.find_many({"origin": {"name": {"equals": "France"}}})) == [1, 3]


def test_where_through_many_of(db):
    assert ids(db.product.find_many({"markets": {"code": {"equals": "it"}}})) == [1, 2]


def test_where_missing_relation_never_matches(db):
    assert ids(db.product.find_many({"origin": {"code": {"not_equals": "xx"}}})) == [1, 2, 3]


def test_unknown_operator(db):
    with pytest.raises(QueryError):
        db.product.find_many({"name": {"like": "Pasta"}})


def test_malformed_condition(db):
    with pytest.raises(QueryError):
        db.product.find_many({"name": "Pasta"})


def test_compile_query_on_mappings():
    predicate = compile_query({"meta": {"size": {"gt": 2}}})
    assert predicate({"meta": {"size": 3}})
    assert not predicate({"meta": {"size": 1}})
    assert not predicate({"meta": None})
    assert compile_query(None)({"anything": 1})


# -------------------------
# order_by
# -------------------------

def test_order_by(db):
    assert ids(db.product.find_many(order_by={"price": "desc"})) == [3, 1, 2, 4]
    assert ids(db.product.find_many(order_by={"price": "asc"})) == [2, 4, 1, 3]


def test_order_by_multiple_criteria(db):
    products = db.product.find_many(order_by=[{"price": "asc"}, {"name": "asc"}])
    assert ids(products) == [4, 2, 1, 3]


def test_order_by_none_sorts_last(db):
    assert ids(db.product.find_many(order_by={"stock": "asc"})) == [4, 1, 3, 2]
    assert ids(db.product.find_many(order_by={"stock": "desc"})) == [3, 1, 4, 2]


def test_order_by_relation(db):
    products = db.product.find_many(
        {"origin": {"code": {"in": ["fr", "it"]}}},
        order_by=[{"origin": {"name": "desc"}}, {"id": "desc"}],
    )
    assert ids(products) == [2, 3, 1]


def test_order_by_invalid_direction(db):
    with pytest.raises(QueryError):
        db.product.find_many(order_by={"price": "up"})


def test_sort_results_is_stable():
    records = [{"k": 1, "n": "a"}, {"k": 0, "n": "b"}, {"k": 1, "n": "c"}]
    assert [r["n"] for r in sort_results(records, {"k": "asc"})] == ["b", "a", "c"]
    assert [r["n"] for r in sort_results(records, {"k": "desc"})] == ["a", "c", "b"]


# -------------------------
# pagination
# -------------------------

def test_take_and_skip(db):
    assert ids(db.product.find_many(take=2)) == [1, 2]
    assert ids(db.product.find_many(skip=1, take=2)) == [2, 3]
    assert ids(db.product.find_many(skip=3)) == [4]
    assert ids(db.product.find_many(skip=10)) == []


def test_cursor(db):
    assert ids(db.product.find_many(cursor=2)) == [3, 4]
    assert ids(db.product.find_many(cursor=2, take=1)) == [3]
    assert ids(db.product.find_many(order_by={"id": "desc"}, cursor=3)) == [2, 1]
    assert db.product.find_many(cursor=99) == []


def test_negative_pagination():
    with pytest.raises(QueryError):
        paginate_results([{"id": 1}], "id", {"take": -1})


def test_find_first_respects_order(db):
    assert db.product.find_first(order_by={"price": "desc"}).name == "Wine"


# -------------------------
# execute_query
# -------------------------

def test_execute_query_primary_key_lookup(db):
    results = execute_query("product", "id", {"where": {"id": {"equals": 3}}}, db.db)
    assert ids(results) == [3]
    assert execute_query("product", "id", {"where": {"id": {"equals": 30}}}, db.db) == []


def test_execute_query_without_query(db):
    assert ids(execute_query("product", "id", None, db.db)) == [1, 2, 3, 4]
