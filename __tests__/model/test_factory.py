import uuid

import pytest

from memdata import Factory, ModelApi, factory
from memdata.exceptions import (
    DanglingReferenceError,
    DuplicatePrimaryKeyError,
    EntityNotFoundError,
    MissingPrimaryKeyError,
)
from memdata.model import KeyField, Model, ModelField, OneOf, RelationField


# -------------------------
# Models
# -------------------------

class User(Model):
    id: str = KeyField(default_factory=lambda: str(uuid.uuid4()))
    first_name: str = ModelField()
    age: int = ModelField(default=0)


class Author(Model):
    id: int = KeyField()
    name: str = ModelField()


class Post(Model):
    id: int = KeyField()
    title: str = ModelField()
    views: int = ModelField(default=0)
    author: OneOf["Author"] = RelationField()


class Note(Model):
    text: str = ModelField()


@pytest.fixture()
def db():
    return factory(User, Author, Post)


# -------------------------
# Factory
# -------------------------

def test_factory_exposes_model_apis(db):
    assert isinstance(db, Factory)
    assert isinstance(db.user, ModelApi)
    assert db.user is db["User"]
    assert db["post"].model_name == "post"
    assert "author" in db
    assert list(db) == ["user", "author", "post"]
    assert db.get_api(Post) is db.post


def test_factory_unknown_model(db):
    with pytest.raises(AttributeError):
        db.comment
    with pytest.raises(KeyError):
        db["comment"]


def test_factories_do_not_share_data():
    first = factory(User)
    second = factory(User)
    first.user.create(first_name="John")
    assert first.user.count() == 1
    assert second.user.count() == 0


# -------------------------
# getAll
# -------------------------

def test_get_all_returns_all_entities():
    db = factory(User)
    db.user.create(first_name="John")
    db.user.create(first_name="Kate")
    db.user.create(first_name="Alice")

    all_users = db.user.get_all()
    assert len(all_users) == 3
    assert [user.first_name for user in all_users] == ["John", "Kate", "Alice"]


def test_get_all_returns_empty_list():
    db = factory(User)
    assert db.user.get_all() == []


# -------------------------
# create
# -------------------------

def test_create_from_mapping_and_keywords(db):
    user = db.user.create({"first_name": "John"}, age=30)
    assert user.first_name == "John"
    assert user.age == 30
    assert db.user.find_first({"id": {"equals": user.id}}) is user


def test_create_requires_primary_key_value(db):
    with pytest.raises(MissingPrimaryKeyError) as exc:
        db.author.create(name="Ann")
    assert exc.value.primary_key == "id"


def test_create_requires_primary_key_field():
    db = factory(Note)
    with pytest.raises(MissingPrimaryKeyError) as exc:
        db.note.create(text="hello")
    assert exc.value.primary_key is None


def test_create_rejects_duplicate_primary_key(db):
    db.author.create(id=1, name="Ann")
    with pytest.raises(DuplicatePrimaryKeyError) as exc:
        db.author.create(id=1, name="Bob")
    assert exc.value.primary_id == 1
    assert db.author.find_first({"id": {"equals": 1}}).name == "Ann"


# -------------------------
# find
# -------------------------

def test_find_first_and_many(db):
    ann = db.author.create(id=1, name="Ann")
    bob = db.author.create(id=2, name="Bob")
    assert db.author.find_first({"name": {"equals": "Bob"}}) is bob
    assert db.author.find_many({"id": {"in": [1, 2]}}) == [ann, bob]
    assert db.author.find_first({"name": {"equals": "Eve"}}) is None
    assert db.author.find_many({"name": {"equals": "Eve"}}) == []


def test_find_strict(db):
    with pytest.raises(EntityNotFoundError) as exc:
        db.author.find_first({"id": {"equals": 1}}, strict=True)
    assert exc.value.operation == "find_first"
    with pytest.raises(EntityNotFoundError):
        db.author.find_many({"id": {"equals": 1}}, strict=True)


def test_find_by_relation(db):
    ann = db.author.create(id=1, name="Ann")
    bob = db.author.create(id=2, name="Bob")
    db.post.create(id=1, title="First", author=ann)
    second = db.post.create(id=2, title="Second", author=bob)
    assert db.post.find_many({"author": {"name": {"equals": "Bob"}}}) == [second]


def test_count(db):
    db.author.create(id=1, name="Ann")
    db.author.create(id=2, name="Bob")
    assert db.author.count() == 2
    assert db.author.count({"name": {"equals": "Ann"}}) == 1


# -------------------------
# update
# -------------------------

def test_update_values(db):
    ann = db.author.create(id=1, name="Ann")
    updated = db.author.update({"id": {"equals": 1}}, {"name": "Anna"})
    assert updated is ann
    assert ann.name == "Anna"


def test_update_with_callable(db):
    ann = db.author.create(id=1, name="Ann")
    db.post.create(id=1, title="First", views=3, author=ann)
    post = db.post.update(
        {"id": {"equals": 1}},
        {
            "views": lambda views, post: views + 1,
            "title": lambda title, post: f"{title} by {post.author.name}",
        },
    )
    assert post.views == 4
    assert post.title == "First by Ann"


def test_update_relation(db):
    ann = db.author.create(id=1, name="Ann")
    bob = db.author.create(id=2, name="Bob")
    post = db.post.create(id=1, title="First", author=ann)
    db.post.update({"id": {"equals": 1}}, {"author": bob})
    assert post.author is bob
    assert db.post.find_many({"author": {"id": {"equals": 1}}}) == []


def test_update_primary_key(db):
    db.author.create(id=1, name="Ann")
    db.author.create(id=2, name="Bob")
    db.author.update({"id": {"equals": 1}}, {"id": 10})
    assert db.author.find_first({"id": {"equals": 1}}) is None
    assert db.author.find_first({"id": {"equals": 10}}).name == "Ann"
    assert [author.id for author in db.author.get_all()] == [10, 2]


def test_update_duplicate_primary_key_is_rolled_back(db):
    ann = db.author.create(id=1, name="Ann")
    db.author.create(id=2, name="Bob")
    with pytest.raises(DuplicatePrimaryKeyError):
        db.author.update({"id": {"equals": 1}}, {"name": "Anna", "id": 2})
    assert ann.id == 1
    assert ann.name == "Ann"
    assert db.author.find_first({"id": {"equals": 1}}) is ann


def test_update_failed_relation_is_rolled_back(db):
    ann = db.author.create(id=1, name="Ann")
    post = db.post.create(id=1, title="First", author=ann)
    with pytest.raises(DanglingReferenceError):
        db.post.update({"id": {"equals": 1}}, {"title": "Changed", "author": {"id": 99}})
    assert post.title == "First"
    assert post.author is ann


def test_update_missing(db):
    assert db.author.update({"id": {"equals": 1}}, {"name": "x"}) is None
    with pytest.raises(EntityNotFoundError):
        db.author.update({"id": {"equals": 1}}, {"name": "x"}, strict=True)


def test_update_many(db):
    db.user.create(first_name="John", age=20)
    db.user.create(first_name="Kate", age=30)
    db.user.create(first_name="Alice", age=40)
    updated = db.user.update_many({"age": {"gte": 30}}, {"age": lambda age, user: age + 1})
    assert [user.first_name for user in updated] == ["Kate", "Alice"]
    assert [user.age for user in db.user.get_all()] == [20, 31, 41]


# -------------------------
# delete
# -------------------------

def test_delete(db):
    ann = db.author.create(id=1, name="Ann")
    db.author.create(id=2, name="Bob")
    assert db.author.delete({"id": {"equals": 1}}) is ann
    assert [author.name for author in db.author.get_all()] == ["Bob"]
    assert db.author.delete({"id": {"equals": 1}}) is None
    with pytest.raises(EntityNotFoundError):
        db.author.delete({"id": {"equals": 1}}, strict=True)


def test_delete_many(db):
    db.user.create(first_name="John", age=20)
    db.user.create(first_name="Kate", age=30)
    db.user.create(first_name="Alice", age=40)
    deleted = db.user.delete_many({"age": {"lt": 35}})
    assert [user.first_name for user in deleted] == ["John", "Kate"]
    assert [user.first_name for user in db.user.get_all()] == ["Alice"]
    with pytest.raises(EntityNotFoundError):
        db.user.delete_many({"age": {"lt": 35}}, strict=True)
