"""Mapping of decoded JSON-like data onto typed objects.

A mapped type subclasses `MappedObject` and declares its schema as class
attributes::

    class User(MappedObject):
        PROPERTIES = {"name": "string", "age": "int"}

    class Data(MappedObject):
        PROPERTIES = {"users": "User[]", "meta": "Meta"}
        REQUIRED = ["users"]

Construction runs the pre-processing hook, checks the required fields against
the raw data, then materializes every declared property: scalars are coerced,
nested types are constructed recursively and lists of nested types may be
re-wrapped in a collection wrapper. Properties missing from the input are held
as ``None`` and coerced only when read.
"""

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any, Callable, ClassVar, Optional, Union

from jsonmap.coerce import check_type, coerce, is_scalar_type, to_array
from jsonmap.declaration import MapperSchema, TypeDescriptor
from jsonmap.exceptions import AccessError, SchemaError, ValidationError
from jsonmap.registry import (
    load_type,
    qualified_name,
    register_mapped_type,
    resolve_type_name,
)

logger = logging.getLogger(__name__)

CollectionWrapper = Callable[[list], Any]
WrapperSpec = Union[CollectionWrapper, str, None]


def validate_required(data: Mapping[str, Any], schema: MapperSchema) -> None:
    """Check that the raw data carries every required field.

    Raises:
        SchemaError: if a field spec names an unknown type checker
        ValidationError: if a field is missing or fails its type check
    """
    for field in schema.required:
        if field.type_name is not None and not is_scalar_type(field.type_name):
            raise SchemaError(
                f"Type {field.type_name} not found in type checkers: {schema.owner}"
            )
        if field.key not in data:
            raise ValidationError(schema.owner, f"Field {field.key} not found in json")
        if field.type_name is not None and not check_type(
            field.type_name, data[field.key]
        ):
            raise ValidationError(
                schema.owner, f"Field {field.key} is not {field.type_name} in json"
            )


def _resolve_wrapper(wrapper: WrapperSpec) -> Optional[CollectionWrapper]:
    if wrapper is None or callable(wrapper):
        return wrapper
    loaded = load_type(wrapper)
    if not callable(loaded):
        raise SchemaError(f"Collection wrapper {wrapper!r} is not callable")
    return loaded


def _as_elements(value: Any) -> list:
    """Return the ordered elements of an array-coerced value."""
    items = to_array(value)
    if isinstance(items, dict):
        return list(items.values())
    return items


def _as_object_data(value: Any) -> dict:
    """Return data suitable for constructing a single nested object."""
    items = to_array(value)
    if isinstance(items, dict):
        return items
    return {str(index): item for index, item in enumerate(items)}


_DECLARATION_NAMES = frozenset(("PROPERTIES", "ALIASES", "REQUIRED"))


def _class_attribute_names(cls: type) -> frozenset[str]:
    """Public attribute names a declared property would be shadowed by."""
    return frozenset(
        name
        for name in dir(cls)
        if not name.startswith("_") and name not in _DECLARATION_NAMES
    )


class MappedObject:
    """Base class for objects materialized from decoded JSON-like data.

    Subclasses declare:

    Attributes:
        PROPERTIES: Ordered map from property name to type descriptor. A
            descriptor is a scalar kind (string, int, float, bool, array), a
            mapped type name, or either with a ``[]`` suffix for a list.
        ALIASES: Map from property name to the input key it is read from
        REQUIRED: Input keys that must be present, as ``key`` or ``key|type``

    Declared properties are read and written as attributes, or through `get`,
    `set`, `has` and `remove`.
    """

    PROPERTIES: ClassVar[Mapping[str, str]] = {}
    ALIASES: ClassVar[Mapping[str, str]] = {}
    REQUIRED: ClassVar[Sequence[str]] = ()

    __mapper_schema__: ClassVar[MapperSchema]

    __slots__ = ("_values", "_collection_wrapper")

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.__mapper_schema__ = MapperSchema.from_declaration(
            qualified_name(cls),
            cls.PROPERTIES,
            cls.ALIASES,
            cls.REQUIRED,
            reserved=_class_attribute_names(cls),
        )
        register_mapped_type(cls)

    def __init__(
        self, json_data: Mapping[str, Any], collection_wrapper: WrapperSpec = None
    ) -> None:
        schema = self.mapper_schema()
        if not isinstance(json_data, Mapping):
            raise ValidationError(
                schema.owner, f"Expected a mapping, got {type(json_data).__name__}"
            )
        wrapper = _resolve_wrapper(collection_wrapper)
        object.__setattr__(self, "_collection_wrapper", wrapper)
        object.__setattr__(self, "_values", {})

        json_data = self.format_json(dict(json_data))
        if not isinstance(json_data, Mapping):
            raise ValidationError(schema.owner, "Pre-processed data is not a mapping")
        validate_required(json_data, schema)
        self._values.update(self._prepare_data(json_data))
        logger.debug("Constructed %s", schema.owner)

    @classmethod
    def mapper_schema(cls) -> MapperSchema:
        """Return the frozen schema of this type."""
        try:
            return cls.__dict__["__mapper_schema__"]
        except KeyError:
            raise SchemaError(
                f"{cls.__name__} declares no schema and cannot be instantiated"
            ) from None

    @property
    def collection_wrapper(self) -> Optional[CollectionWrapper]:
        return self._collection_wrapper

    # ----------------------------------------------------------------
    # Construction
    # ----------------------------------------------------------------

    def format_json(self, json_data: dict[str, Any]) -> dict[str, Any]:
        """Reshape raw input before validation; identity unless overridden.

        Receives a shallow copy of the constructor input, so it may be edited
        in place.
        """
        return json_data

    def _prepare_data(self, json_data: Mapping[str, Any]) -> dict[str, Any]:
        """Materialize every declared property from the raw data."""
        schema = self.mapper_schema()
        result: dict[str, Any] = {}
        for name in schema.properties:
            value = json_data.get(schema.source_key(name))
            result[name] = None
            if value is not None:
                result[name] = self._resolve_value(name, schema.descriptor(name), value)
        return result

    def _resolve_value(self, name: str, descriptor: TypeDescriptor, value: Any) -> Any:
        """Coerce a value to a declared type, constructing nested objects.

        Raises:
            SchemaError: if a nested type cannot be resolved
        """
        if descriptor.is_scalar:
            if descriptor.repeated:
                return [coerce(descriptor.name, item) for item in _as_elements(value)]
            return coerce(descriptor.name, value)

        mapped_cls = self._nested_type(name, descriptor.name)
        wrapper = self._collection_wrapper
        if descriptor.repeated:
            items = [mapped_cls(item, wrapper) for item in _as_elements(value)]
            if wrapper is not None:
                return wrapper(items)
            return items
        return mapped_cls(_as_object_data(value), wrapper)

    def _nested_type(self, name: str, type_name: str) -> type["MappedObject"]:
        found = resolve_type_name(type_name, type(self))
        if found is None or not issubclass(found, MappedObject):
            raise SchemaError(f"Class {type_name} for field {name} not found")
        return found

    # ----------------------------------------------------------------
    # Access protocol
    # ----------------------------------------------------------------

    def get(self, name: str) -> Any:
        """Read a property, coercing a declared but unset value on demand.

        Raises:
            AccessError: if the property is not present
        """
        schema = self.mapper_schema()
        if name not in self._values:
            raise AccessError(schema.owner, name)
        value = self._values[name]
        if value is None and schema.is_declared(name):
            value = self._resolve_value(name, schema.descriptor(name), value)
        return value

    def set(self, name: str, value: Any) -> None:
        """Write a property, coercing the value if the property is declared."""
        schema = self.mapper_schema()
        if schema.is_declared(name):
            value = self._resolve_value(name, schema.descriptor(name), value)
        self._values[name] = value

    def has(self, name: str) -> bool:
        return name in self._values

    def remove(self, name: str) -> None:
        self._values.pop(name, None)

    def property_names(self) -> list[str]:
        """Return the names currently held, in materialization order."""
        return list(self._values)

    def raw_value(self, name: str) -> Any:
        """Return the stored value of a property without lazy coercion.

        Raises:
            AccessError: if the property is not present
        """
        try:
            return self._values[name]
        except KeyError:
            raise AccessError(self.mapper_schema().owner, name) from None

    def __getattr__(self, name: str) -> Any:
        # Only called when normal lookup fails; private names are never properties
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in MappedObject.__slots__:
            object.__setattr__(self, name, value)
        else:
            self.set(name, value)

    def __delattr__(self, name: str) -> None:
        self.remove(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.property_names())

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"{self.__class__.__name__}({fields})"
