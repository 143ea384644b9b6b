import pytest

from jsonmap import MappedObject
from jsonmap.exceptions import AccessError, SchemaError, ValidationError
from jsonmap.mapper import validate_required
from tests.models import Address, ItemCollection
from tests.models.shop import Customer, Order


class User(MappedObject):
    PROPERTIES = {
        "name": "string",
        "surname": "string",
        "age": "int",
    }


class Meta(MappedObject):
    PROPERTIES = {
        "result": "bool",
        "version": "string",
        "took": "float",
    }


class Data(MappedObject):
    PROPERTIES = {
        "users": "User[]",
        "meta": "Meta",
    }


class EnvelopedData(Data):
    def format_json(self, json_data):
        json_data["users"] = (json_data.get("users") or {}).get("user") or []
        return json_data


class Profile(MappedObject):
    PROPERTIES = {
        "login": "string",
        "scores": "int[]",
        "extra": "array",
        "owner": "User",
    }
    ALIASES = {"login": "user_login"}
    REQUIRED = ["user_login|string"]


USERS = [
    {"name": "John", "surname": "Smith", "age": 24},
    {"name": "Marry", "surname": "Cary", "age": 22},
]
META = {"result": True, "version": "1.0", "took": "0.035"}


def test_round_trip_scalar_write() -> None:
    user = User({"name": "John", "surname": "Smith", "age": 24})
    assert user.age == 24
    user.age = "31"
    assert user.age == 31
    assert type(user.age) is int


def test_end_to_end() -> None:
    data = Data({"users": [{"name": "John", "age": 24}], "meta": META})

    assert isinstance(data.users, list)
    assert len(data.users) == 1
    assert isinstance(data.users[0], User)
    assert data.users[0].age == 24
    assert data.users[0].name == "John"
    assert isinstance(data.meta, Meta)
    assert data.meta.took == pytest.approx(0.035)
    assert data.meta.result is True
    assert data.meta.version == "1.0"


def test_nested_list_keeps_order() -> None:
    data = Data({"users": USERS, "meta": META})
    assert [u.name for u in data.users] == ["John", "Marry"]
    assert [u.age for u in data.users] == [24, 22]


def test_pre_processing_hook_unwraps_envelope() -> None:
    plain = Data({"users": USERS, "meta": META})
    wrapped = EnvelopedData({"users": {"user": USERS}, "meta": META})
    assert [u.name for u in wrapped.users] == [u.name for u in plain.users]
    assert [u.age for u in wrapped.users] == [u.age for u in plain.users]
    assert wrapped.meta.took == plain.meta.took


def test_pre_processing_hook_does_not_modify_input() -> None:
    source = {"users": {"user": USERS}, "meta": META}
    EnvelopedData(source)
    assert source["users"] == {"user": USERS}


def test_pre_processing_hook_missing_envelope() -> None:
    data = EnvelopedData({"meta": META})
    assert data.users == []


def test_permissive_coercion() -> None:
    user = User({"name": 42, "surname": True, "age": "12 years"})
    assert user.name == "42"
    assert user.surname == "1"
    assert user.age == 12

    meta = Meta({"result": "0", "version": 1.5, "took": "fast"})
    assert meta.result is False
    assert meta.version == "1.5"
    assert meta.took == 0.0


def test_absent_properties_are_lazily_coerced() -> None:
    profile = Profile({"user_login": "jsmith"})
    for name in ("scores", "extra", "owner"):
        assert profile.has(name)
        assert profile.raw_value(name) is None

    assert profile.scores == []
    assert profile.extra == []
    assert isinstance(profile.owner, User)
    assert profile.owner.name == ""
    assert profile.owner.age == 0
    # Lazy reads do not replace the stored placeholder
    assert profile.raw_value("owner") is None


def test_null_values_are_placeholders() -> None:
    user = User({"name": None, "surname": "Smith"})
    assert user.raw_value("name") is None
    assert user.raw_value("age") is None
    assert user.name == ""
    assert user.age == 0


def test_absent_nested_list_is_lazily_wrapped() -> None:
    data = Data({}, ItemCollection)
    users = data.users
    assert isinstance(users, ItemCollection)
    assert len(users) == 0


def test_property_map_has_exactly_declared_keys() -> None:
    user = User({"name": "John", "unknown": 1})
    assert user.property_names() == ["name", "surname", "age"]
    assert "unknown" not in user
    with pytest.raises(AccessError):
        user.get("unknown")


def test_undeclared_read_raises_access_error() -> None:
    user = User({"name": "John"})
    with pytest.raises(AccessError) as exc_info:
        user.nickname
    assert exc_info.value.name == "nickname"
    assert "nickname" in str(exc_info.value)
    assert not hasattr(user, "nickname")
    assert getattr(user, "nickname", "default") == "default"


def test_alias_reads_source_key() -> None:
    profile = Profile({"user_login": "jsmith", "login": "ignored"})
    assert profile.login == "jsmith"
    assert not profile.has("user_login")


def test_repeated_scalar_is_coerced_and_not_wrapped() -> None:
    profile = Profile({"user_login": "x", "scores": ["1", 2.7, None]}, ItemCollection)
    assert profile.scores == [1, 2, 0]
    assert type(profile.scores) is list


def test_repeated_scalar_from_single_value() -> None:
    profile = Profile({"user_login": "x", "scores": "5"})
    assert profile.scores == [5]


def test_array_kind_wraps_scalars() -> None:
    profile = Profile({"user_login": "x", "extra": "one"})
    assert profile.extra == ["one"]
    profile.extra = {"a": 1}
    assert profile.extra == {"a": 1}


def test_collection_wrapper_applies_to_nested_lists() -> None:
    data = Data({"users": USERS, "meta": META}, ItemCollection)
    assert isinstance(data.users, ItemCollection)
    assert [u.name for u in data.users] == ["John", "Marry"]
    assert data.collection_wrapper is ItemCollection
    assert data.meta.collection_wrapper is ItemCollection


def test_collection_wrapper_propagates_to_children() -> None:
    order = Order(
        {
            "id": 7,
            "lines": [{"sku": "A1", "qty": "3", "price": "9.5"}],
            "customer": {"name": "Ann", "address": {"city": "Oslo"}},
        },
        ItemCollection,
    )
    assert isinstance(order.lines, ItemCollection)
    assert order.lines[0].collection_wrapper is ItemCollection
    assert order.customer.address.collection_wrapper is ItemCollection


def test_collection_wrapper_by_name() -> None:
    data = Data({"users": USERS}, "tests.models:ItemCollection")
    assert isinstance(data.users, ItemCollection)


def test_collection_wrapper_unknown_name() -> None:
    with pytest.raises(SchemaError):
        Data({"users": USERS}, "tests.models:NoSuchCollection")


def test_namespace_resolution_during_construction() -> None:
    order = Order(
        {
            "id": 7,
            "lines": [
                {"sku": "A1", "qty": "3", "price": "9.5"},
                {"sku": "B2", "qty": 1, "price": 4},
            ],
            "customer": {"name": "Ann", "address": {"street": "Main", "city": "Oslo"}},
            "ship_to": {"city": "Bergen"},
            "tags": ["new", 1],
        }
    )
    assert all(isinstance(line, Order.Line) for line in order.lines)
    assert [line.quantity for line in order.lines] == [3, 1]
    assert [line.price for line in order.lines] == [9.5, 4.0]
    assert isinstance(order.customer, Customer)
    assert isinstance(order.customer.address, Address)
    assert order.customer.address.city == "Oslo"
    assert isinstance(order.ship_to, Address)
    assert order.ship_to.city == "Bergen"
    assert order.tags == ["new", "1"]


def test_nested_required_fields_are_validated() -> None:
    with pytest.raises(ValidationError):
        Order(
            {
                "id": 7,
                "lines": [],
                "customer": {"name": "Ann", "address": {"street": "Main"}},
            }
        )


def test_required_field_missing() -> None:
    with pytest.raises(ValidationError) as exc_info:
        Profile({"login": "jsmith"})
    assert "user_login" in str(exc_info.value)


def test_required_field_type_mismatch() -> None:
    with pytest.raises(ValidationError):
        Order({"id": "7", "lines": []})
    with pytest.raises(ValidationError):
        Order({"id": True, "lines": []})
    with pytest.raises(ValidationError):
        Order({"id": 7, "lines": "A1"})


def test_required_field_only_checks_listed_fields() -> None:
    order = Order({"id": 7, "lines": {}})
    assert order.lines == []
    assert order.customer.name == ""


def test_required_unknown_type_checker() -> None:
    class Strange(MappedObject):
        PROPERTIES = {"name": "string"}
        REQUIRED = ["name|text"]

    with pytest.raises(SchemaError):
        Strange({"name": "x"})


def test_validate_required_checks_raw_data() -> None:
    schema = Profile.mapper_schema()
    validate_required({"user_login": "x"}, schema)
    with pytest.raises(ValidationError):
        validate_required({"user_login": 1}, schema)


def test_unresolvable_nested_type() -> None:
    class Broken(MappedObject):
        PROPERTIES = {"thing": "NoSuchType", "other": "string"}

    with pytest.raises(SchemaError) as exc_info:
        Broken({"thing": {}})
    assert "NoSuchType" in str(exc_info.value)

    # Absent values are not resolved until read
    broken = Broken({"other": "x"})
    with pytest.raises(SchemaError):
        broken.thing


def test_non_mapping_input_is_rejected() -> None:
    with pytest.raises(ValidationError):
        User(["John"])


def test_nested_object_from_non_mapping() -> None:
    class Pair(MappedObject):
        PROPERTIES = {"first": "string", "second": "string"}
        ALIASES = {"first": "0", "second": "1"}

    class Holder(MappedObject):
        PROPERTIES = {"pair": "Pair"}

    holder = Holder({"pair": ["a", "b"]})
    assert holder.pair.first == "a"
    assert holder.pair.second == "b"


def test_nested_list_from_mapping_uses_values() -> None:
    data = Data({"users": {"x": USERS[0], "y": USERS[1]}})
    assert [u.name for u in data.users] == ["John", "Marry"]


def test_write_nested_declared_property() -> None:
    data = Data({"users": USERS, "meta": META})
    data.meta = {"result": 1, "version": 2, "took": 3}
    assert isinstance(data.meta, Meta)
    assert data.meta.result is True
    assert data.meta.version == "2"
    assert data.meta.took == 3.0

    data.users = [{"name": "Zed"}]
    assert [u.name for u in data.users] == ["Zed"]


def test_write_none_to_declared_property() -> None:
    user = User({"name": "John"})
    user.name = None
    assert user.raw_value("name") == ""
    assert user.name == ""


def test_write_undeclared_property() -> None:
    user = User({"name": "John"})
    user.nickname = 42
    assert user.has("nickname")
    assert user.nickname == 42
    user.set("note", None)
    assert user.get("note") is None


def test_remove() -> None:
    user = User({"name": "John", "age": 24})
    del user.age
    assert not user.has("age")
    with pytest.raises(AccessError):
        user.age
    # Removing again is a no-op
    user.remove("age")
    user.remove("never_there")
    # A removed declared property can be written again
    user.age = "5"
    assert user.age == 5


def test_has_does_not_coerce() -> None:
    user = User({})
    assert "age" in user
    assert user.raw_value("age") is None


def test_iteration_and_repr() -> None:
    user = User({"name": "John", "age": 24})
    assert list(user) == ["name", "surname", "age"]
    assert repr(user) == "User(name='John', surname=None, age=24)"


def test_base_class_cannot_be_instantiated() -> None:
    with pytest.raises(SchemaError):
        MappedObject({})


def test_malformed_declaration_fails_at_definition() -> None:
    with pytest.raises(SchemaError):

        class Bad(MappedObject):
            PROPERTIES = {"name": 1}


def test_subclass_inherits_declaration() -> None:
    class Admin(User):
        pass

    admin = Admin({"name": "Root", "age": "99"})
    assert admin.age == 99
    assert Admin.mapper_schema().owner.endswith("Admin")


def test_self_referencing_type() -> None:
    class Node(MappedObject):
        PROPERTIES = {"value": "int", "children": "Node[]"}

    tree = Node({"value": 1, "children": [{"value": 2, "children": [{"value": 3}]}]})
    assert tree.children[0].value == 2
    assert tree.children[0].children[0].value == 3
    assert tree.children[0].children[0].children == []


@pytest.mark.parametrize(
    "name", ["remove", "get", "collection_wrapper", "format_json", "property_names"]
)
def test_property_shadowing_class_attribute_is_rejected(name) -> None:
    with pytest.raises(SchemaError) as exc_info:

        class Command(MappedObject):
            PROPERTIES = {name: "bool", "label": "string"}

    assert name in str(exc_info.value)


def test_property_shadowing_subclass_method_is_rejected() -> None:
    with pytest.raises(SchemaError):

        class Command(MappedObject):
            PROPERTIES = {"run": "bool"}

            def run(self):
                return self.get("run")


def test_schema_tables_are_read_only() -> None:
    schema = Data.mapper_schema()
    with pytest.raises(TypeError):
        schema.properties["extra"] = "string"
    assert "extra" not in Data({}).property_names()
