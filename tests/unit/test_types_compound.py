"""
Unit tests for compound field types.

Tests cover:
- Arrays: element casting, sorting, uniqueness, tuple storage
- Objects: per-key element casting, read-only storage
- Nested records, record unions and nested collections
- Opaque custom classes and their hooks
- Union ("or") fields
"""

from types import MappingProxyType

import pytest

from recordkit import (
    Collection,
    InvalidArrayElementError,
    InvalidNestedModelError,
    InvalidObjectElementError,
    InvalidTypeParamsError,
    InvalidValueError,
    Model,
    NoCloneMethodError,
    NoEqualMethodError,
    NoToJSONMethodError,
    NotUniqueError,
    array_of,
    collection_of,
    custom_of,
    field,
    mapping_of,
    one_of,
    record_of,
)


def make_model(**fields):
    """Build a record class with the given field descriptions."""

    class Sample(Model):
        @classmethod
        def structure(cls):
            return fields

    return Sample


class User(Model):
    @classmethod
    def structure(cls):
        return {
            "email": {"type": "string", "required": True},
            "name": "string",
        }


class Users(Collection):
    model = User


class Animal(Model):
    @classmethod
    def structure(cls):
        return {"name": "string"}


class Cat(Animal):
    @classmethod
    def structure(cls):
        return {"name": "string", "meow": "boolean"}


class Dog(Animal):
    @classmethod
    def structure(cls):
        return {"name": "string", "woof": "boolean"}


class Money:
    def __init__(self, amount):
        self.amount = amount


class TestArrayType:
    """Tests for array fields."""

    def test_list_literal_shorthand(self):
        """["number"] declares an array of numbers."""
        Sample = make_model(ids=["number"])

        sample = Sample({"ids": [1, "2", 3.0]})

        assert sample.get("ids") == (1, 2, 3)

    def test_empty_list_is_array_of_any(self):
        """[] accepts elements of any type."""
        Sample = make_model(items=[])

        assert Sample({"items": [1, "a", None]}).get("items") == (1, "a", None)

    def test_stored_as_tuple(self):
        """A committed array cannot be mutated in place."""
        Sample = make_model(ids=array_of("number"))
        source = [1, 2]

        sample = Sample({"ids": source})
        source.append(3)

        assert isinstance(sample.get("ids"), tuple)
        assert sample.get("ids") == (1, 2)

    def test_tuple_is_not_a_list(self):
        """Stored arrays compare to lists through equal(), not ==."""
        Sample = make_model(ids=["number"])

        sample = Sample({"ids": [1, 2]})

        assert sample.get("ids") != [1, 2]
        assert sample.equal({"ids": [1, 2]})
        assert sample.to_json()["ids"] == [1, 2]

    def test_element_error_names_position(self):
        """Element failures wrap the child message."""
        Sample = make_model(ids=["number"])

        with pytest.raises(InvalidArrayElementError) as exc_info:
            Sample({"ids": [1, "x"]})

        assert exc_info.value.message == (
            'invalid array[number] for ids: [1,"x"],\n invalid number for 1: "x"'
        )
        assert isinstance(exc_info.value.__cause__, InvalidValueError)

    def test_non_sequence_is_rejected(self):
        """Only lists and tuples are arrays."""
        Sample = make_model(ids=["number"])

        with pytest.raises(InvalidValueError) as exc_info:
            Sample({"ids": "1,2"})

        assert exc_info.value.message == 'invalid array[number] for ids: "1,2"'

    def test_sort_natural(self):
        """sort=True sorts elements in natural order."""
        Sample = make_model(ids=array_of("number", sort=True))

        assert Sample({"ids": [3, 1, 2]}).get("ids") == (1, 2, 3)

    def test_sort_comparator(self):
        """A comparator is used like cmp(a, b)."""
        Sample = make_model(ids=array_of("number", sort=lambda a, b: b - a))

        assert Sample({"ids": [3, 1, 2]}).get("ids") == (3, 2, 1)

    def test_sort_keeps_none_last(self):
        """None elements skip the comparison and end up last."""
        Natural = make_model(ids=array_of("number", sort=True))
        Reversed = make_model(ids=array_of("number", sort=lambda a, b: b - a))

        assert Natural({"ids": [3, None, 1]}).get("ids") == (1, 3, None)
        assert Reversed({"ids": [None, 1, 3]}).get("ids") == (3, 1, None)

    def test_sort_mixed_types(self):
        """Values that cannot be ordered compare equal instead of failing."""
        Sample = make_model(items=array_of("any", sort=True))

        items = Sample({"items": [2, "a", 1]}).get("items")

        assert len(items) == 3
        assert set(items) == {1, 2, "a"}

    def test_unique(self):
        """Duplicates are rejected."""
        Sample = make_model(ids=array_of("number", unique=True))

        with pytest.raises(NotUniqueError) as exc_info:
            Sample({"ids": [1, 2, 1]})

        assert exc_info.value.message == "ids is not unique: [1,2,1]"

    def test_unique_ignores_none(self):
        """None is never a duplicate."""
        Sample = make_model(ids=array_of("number", unique=True))

        assert Sample({"ids": [None, None, 1]}).get("ids") == (None, None, 1)

    def test_empty_as_null_and_null_as_empty(self):
        """Empty arrays and None convert into each other."""
        EmptyAsNull = make_model(ids=array_of("number", empty_as_null=True))
        NullAsEmpty = make_model(ids=array_of("number", null_as_empty=True))

        assert EmptyAsNull({"ids": []}).get("ids") is None
        assert NullAsEmpty().get("ids") == ()

    def test_equal_content_is_no_change(self):
        """Setting an array with the same elements emits nothing."""
        Sample = make_model(ids=["number"])
        sample = Sample({"ids": [1, 2]})
        events = []
        sample.on("change", events.append)

        sample.set("ids", [1, "2"])

        assert events == []

    def test_to_json_is_list(self):
        """Arrays project to lists."""
        Sample = make_model(ids=["number"])

        assert Sample({"ids": (1, 2)}).to_json() == {"ids": [1, 2]}


class TestObjectType:
    """Tests for object (map) fields."""

    def test_empty_mapping_shorthand(self):
        """{} declares a map of anything."""
        Sample = make_model(meta={})

        meta = Sample({"meta": {"a": 1, "b": "x"}}).get("meta")

        assert isinstance(meta, MappingProxyType)
        assert dict(meta) == {"a": 1, "b": "x"}

    def test_read_only(self):
        """Committed maps cannot be mutated."""
        Sample = make_model(meta={})
        meta = Sample({"meta": {"a": 1}}).get("meta")

        with pytest.raises(TypeError):
            meta["a"] = 2

    def test_element_type(self):
        """Every value is cast by the element type."""
        Sample = make_model(meta=mapping_of("number"))

        assert dict(Sample({"meta": {"a": "1"}}).get("meta")) == {"a": 1}

    def test_element_error(self):
        """Value failures wrap the child message with the map key."""
        Sample = make_model(meta=mapping_of("number"))

        with pytest.raises(InvalidObjectElementError) as exc_info:
            Sample({"meta": {"a": "x"}})

        assert exc_info.value.message == (
            'invalid object[number] for meta: {"a":"x"},\n invalid number for a: "x"'
        )

    def test_non_mapping_is_rejected(self):
        """Lists are not maps."""
        Sample = make_model(meta={"type": "object"})

        with pytest.raises(InvalidValueError, match="invalid object for meta"):
            Sample({"meta": [1]})

    def test_different_keys_are_a_change(self):
        """Maps with different key sets are different values."""
        Sample = make_model(meta={})
        sample = Sample({"meta": {"a": 1}})
        events = []
        sample.on("change", events.append)

        sample.set("meta", {"a": 1})
        sample.set("meta", {"a": 1, "b": None})

        assert len(events) == 1


class TestModelType:
    """Tests for nested record fields."""

    def test_mapping_becomes_record(self):
        """Plain data is turned into the declared class."""
        Order = make_model(user=User)

        order = Order({"user": {"email": "a@x.com"}})

        assert isinstance(order.get("user"), User)
        assert order.get("user").get("email") == "a@x.com"

    def test_parent_is_owner(self):
        """Nested records get the owning record as parent."""
        Order = make_model(user=User)
        user = User({"email": "a@x.com"})

        order = Order({"user": user})

        assert order.get("user") is user
        assert user.parent is order

    def test_is_valid_keeps_parent(self):
        """is_valid does not move a record to another owner, set() does."""
        Order = make_model(user=User)
        user = User({"email": "a@x.com"})
        first = Order({"user": user})
        second = Order()

        assert second.is_valid({"user": user})
        assert user.parent is first
        assert second.get("user") is None

        second.set("user", user)

        assert user.parent is second

    def test_failed_set_keeps_parent(self):
        """A rejected set() leaves the parent link alone."""
        Order = make_model(
            user=User,
            total={"type": "number", "validate": lambda value: value >= 0},
        )
        user = User({"email": "a@x.com"})
        first = Order({"user": user})
        second = Order()

        with pytest.raises(InvalidValueError):
            second.set({"user": user, "total": -1})

        assert user.parent is first
        assert second.get("user") is None

    def test_nested_error_is_wrapped(self):
        """The child message is appended to the field error."""
        Order = make_model(user=User)

        with pytest.raises(InvalidNestedModelError) as exc_info:
            Order({"user": {}})

        assert exc_info.value.message == "invalid User for user: {},\n required email"

    def test_scalar_is_rejected(self):
        """Only records and mappings are accepted."""
        Order = make_model(user=record_of(User))

        with pytest.raises(InvalidValueError) as exc_info:
            Order({"user": 5})

        assert exc_info.value.message == "invalid User for user: 5"

    def test_same_data_new_record_is_a_change(self):
        """Nested records are compared by identity on set()."""
        Order = make_model(user=User)
        order = Order({"user": {"email": "a@x.com"}})
        events = []
        order.on("change", events.append)

        order.set("user", {"email": "a@x.com"})

        assert len(events) == 1

    def test_union_pick(self):
        """pick chooses the class for plain data."""
        Owner = make_model(
            pet=Animal.or_(Cat, Dog, pick=lambda row: Cat if "meow" in row else Dog)
        )

        assert isinstance(Owner({"pet": {"meow": True}}).get("pet"), Cat)
        assert isinstance(Owner({"pet": {"woof": True}}).get("pet"), Dog)

    def test_union_accepts_base_instances(self):
        """Any instance of the base class passes through."""
        Owner = make_model(pet=Animal.or_(Cat, Dog))
        animal = Animal({"name": "generic"})

        assert Owner({"pet": animal}).get("pet") is animal

    def test_union_without_pick_uses_first_class(self):
        """Plain data becomes the first listed class."""
        Owner = make_model(pet=Animal.or_(Cat, Dog))

        assert isinstance(Owner({"pet": {"name": "tom"}}).get("pet"), Cat)

    def test_union_rejects_unrelated_class(self):
        """Members must subclass the base."""
        with pytest.raises(InvalidTypeParamsError, match="is not a subclass of Animal"):
            Animal.or_(Cat, User)


class TestCollectionType:
    """Tests for nested collection fields."""

    def test_list_becomes_collection(self):
        """A list of rows is turned into the collection class."""
        Team = make_model(users=Users)

        team = Team({"users": [{"email": "a@x.com"}, {"email": "b@x.com"}]})

        assert isinstance(team.get("users"), Users)
        assert len(team.get("users")) == 2
        assert team.get("users").parent is team

    def test_null_as_empty(self):
        """None becomes an empty collection."""
        Team = make_model(users=collection_of(Users, null_as_empty=True))

        users = Team().get("users")

        assert isinstance(users, Users)
        assert len(users) == 0

    def test_invalid_value(self):
        """Only collections, lists and tuples are accepted."""
        Team = make_model(users=Users)

        with pytest.raises(InvalidValueError) as exc_info:
            Team({"users": "x"})

        assert exc_info.value.message == 'invalid collection Users for users: "x"'

    def test_is_valid_keeps_parent(self):
        """is_valid does not move a collection to another owner."""
        Team = make_model(users=Users)
        users = Users([{"email": "a@x.com"}])
        first = Team({"users": users})
        second = Team()

        assert second.is_valid({"users": users})
        assert users.parent is first

    def test_to_json(self):
        """Collections project to lists of objects."""
        Team = make_model(users=Users)

        team = Team({"users": [{"email": "a@x.com"}]})

        assert team.to_json() == {"users": [{"email": "a@x.com", "name": None}]}


class TestCustomClassType:
    """Tests for opaque custom class fields."""

    def test_isinstance_check(self):
        """Instances pass, other values are rejected."""
        Sample = make_model(price=Money)
        money = Money(10)

        assert Sample({"price": money}).get("price") is money
        with pytest.raises(InvalidValueError) as exc_info:
            Sample({"price": 10})
        assert exc_info.value.message == "invalid Money for price: 10"

    def test_to_json_needs_hook(self):
        """Projection without a hook raises."""
        Sample = make_model(price=Money)

        with pytest.raises(NoToJSONMethodError) as exc_info:
            Sample({"price": Money(10)}).to_json()

        assert exc_info.value.message == (
            "cannot convert [object: Money] to json, need toJSON method for this field"
        )

    def test_clone_and_equal_need_hooks(self):
        """Cloning and comparing without hooks raise."""
        Sample = make_model(price=Money)
        sample = Sample({"price": Money(10)})

        with pytest.raises(NoCloneMethodError):
            sample.clone()
        with pytest.raises(NoEqualMethodError):
            sample.equal(Sample({"price": Money(10)}))

    def test_hooks(self):
        """Declared hooks replace the missing behavior."""
        Sample = make_model(
            price=custom_of(
                Money,
                to_json=lambda value: value.amount,
                clone=lambda value: Money(value.amount),
                equal=lambda left, right: right is not None and left.amount == right.amount,
            )
        )
        sample = Sample({"price": Money(10)})

        clone = sample.clone()

        assert sample.to_json() == {"price": 10}
        assert clone.get("price") is not sample.get("price")
        assert sample.equal(clone)

    def test_equal_hook_never_sees_none(self):
        """None on either side is settled before the hook runs."""
        calls = []

        def equal(left, right):
            calls.append((left, right))
            return left.amount == right.amount

        Sample = make_model(price=custom_of(Money, equal=equal))
        sample = Sample({"price": Money(10)})

        assert not sample.equal(Sample())
        assert not Sample().equal(sample)
        assert Sample().equal(Sample())
        assert sample.equal(Sample({"price": Money(10)}))
        assert len(calls) == 1

    def test_new_instance_is_a_change(self):
        """Opaque values are compared by identity on set()."""
        Sample = make_model(price=Money)
        money = Money(10)
        sample = Sample({"price": money})
        events = []
        sample.on("change", events.append)

        sample.set("price", money)
        sample.set("price", Money(10))

        assert len(events) == 1


class TestOrType:
    """Tests for union fields."""

    def test_first_accepting_member_wins(self):
        """Members are tried in order."""
        Sample = make_model(ref=one_of("number", "string"))

        assert Sample({"ref": "10"}).get("ref") == 10
        assert Sample({"ref": "abc"}).get("ref") == "abc"

    def test_all_members_fail(self):
        """The error names every member type."""
        Sample = make_model(ref=one_of("number", "string"))

        with pytest.raises(InvalidValueError) as exc_info:
            Sample({"ref": True})

        assert exc_info.value.message == "invalid number or string for ref: true"

    def test_missing_members(self):
        """An "or" field needs a list of members."""
        Sample = make_model(ref={"type": "or"})

        with pytest.raises(InvalidTypeParamsError) as exc_info:
            Sample()

        assert exc_info.value.message == (
            "ref: expected 'or' array of type descriptions, got: null"
        )

    def test_empty_members(self):
        """An empty member list is rejected."""
        Sample = make_model(ref=one_of())

        with pytest.raises(InvalidTypeParamsError, match="empty 'or' array"):
            Sample()

    def test_union_of_records(self):
        """Record members build records from plain data."""
        Sample = make_model(ref=one_of("number", User))

        sample = Sample({"ref": {"email": "a@x.com"}})

        assert isinstance(sample.get("ref"), User)
        assert sample.to_json() == {"ref": {"email": "a@x.com", "name": None}}


class TestCommonParameters:
    """Tests for parameters shared by every field type."""

    def test_enum(self):
        """Values outside the enum are rejected."""
        Sample = make_model(status=field("string", enum=["open", "closed"]))

        assert Sample({"status": "open"}).get("status") == "open"
        with pytest.raises(InvalidValueError) as exc_info:
            Sample({"status": "draft"})
        assert exc_info.value.message == 'invalid status: "draft"'

    def test_enum_is_strict(self):
        """True does not match 1."""
        Sample = make_model(level=field("any", enum=[1, 2]))

        with pytest.raises(InvalidValueError):
            Sample({"level": True})

    def test_validate_callable(self):
        """A validator returning False rejects the value."""
        Sample = make_model(age=field("number", validate=lambda value: value >= 0))

        with pytest.raises(InvalidValueError, match="invalid age: -1"):
            Sample({"age": -1})

    def test_validate_regex(self):
        """A compiled regex is searched in the value."""
        import re

        Sample = make_model(code=field("string", validate=re.compile(r"^[A-Z]{3}$")))

        assert Sample({"code": "ABC"}).get("code") == "ABC"
        with pytest.raises(InvalidValueError):
            Sample({"code": "abcd"})

    def test_validate_wrong_shape(self):
        """validate must be a callable or a regex."""
        Sample = make_model(code=field("string", validate=5))

        with pytest.raises(InvalidTypeParamsError) as exc_info:
            Sample()

        assert exc_info.value.message == "code: validate should be function or RegExp: 5"

    def test_prepare_hook(self):
        """prepare(value, key, model) runs after type normalization."""
        seen = []

        def prepare(value, key, model):
            seen.append((value, key, type(model).__name__))
            return value * 2

        Sample = make_model(count=field("number", prepare=prepare))

        assert Sample({"count": "2"}).get("count") == 4
        assert seen == [(2, "count", "Sample")]

    def test_callable_default(self):
        """A callable default is called for every record."""
        Sample = make_model(tags=field("array", default=list))

        first = Sample()
        second = Sample()

        assert first.get("tags") == ()
        assert second.get("tags") == ()

    def test_default_is_prepared(self):
        """Defaults go through normalization."""
        Sample = make_model(price=field("number", default="5"))

        assert Sample().get("price") == 5
