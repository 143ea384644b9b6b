"""Declarative schema attached to each mapped type.

A mapped type declares three class attributes::

    PROPERTIES = {"users": "User[]", "meta": "Meta", "age": "int"}
    ALIASES = {"age": "user_age"}
    REQUIRED = ["users", "user_age|int"]

These are checked once, when the class is defined, and frozen into a
`MapperSchema` which the mapping engine reads for every construction.
"""

from collections.abc import Collection, Mapping, Sequence
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Optional, Self

import attrs
import schema

from jsonmap.coerce import is_scalar_type
from jsonmap.exceptions import SchemaError

REPEATED_SUFFIX = "[]"
TYPE_SEPARATOR = "|"

_declaration_schema = schema.Schema(
    {
        "properties": {schema.Optional(str): str},
        "aliases": {schema.Optional(str): str},
        "required": [str],
    },
    name="MapperDeclaration",
)


@attrs.frozen
class TypeDescriptor:
    """Parsed form of a declared type string.

    Attributes:
        name: Base type name, either a scalar kind or a mapped type name
        repeated: Whether the declaration denotes a list of the base type
    """

    name: str
    repeated: bool = False

    @property
    def is_scalar(self) -> bool:
        return is_scalar_type(self.name)

    def __str__(self) -> str:
        return self.name + REPEATED_SUFFIX if self.repeated else self.name


@lru_cache(maxsize=None)
def parse_type(descriptor: str) -> TypeDescriptor:
    """Split a declared type string into its base name and repeated flag."""
    if descriptor.endswith(REPEATED_SUFFIX):
        return TypeDescriptor(descriptor[: -len(REPEATED_SUFFIX)], repeated=True)
    return TypeDescriptor(descriptor)


@attrs.frozen
class FieldSpec:
    """A required source key, optionally constrained to a scalar kind."""

    key: str
    type_name: Optional[str] = None

    def __str__(self) -> str:
        if self.type_name is None:
            return self.key
        return f"{self.key}{TYPE_SEPARATOR}{self.type_name}"


def parse_field_spec(spec: str) -> FieldSpec:
    """Parse a required field spec of the form ``key`` or ``key|type``.

    The type name is not checked here; unknown checkers are reported when
    the field spec is checked against data.
    """
    key, sep, type_name = spec.partition(TYPE_SEPARATOR)
    return FieldSpec(key, type_name if sep else None)


def _frozen_mapping(mapping: Mapping[str, str]) -> Mapping[str, str]:
    """Copy a mapping into a read-only view."""
    return MappingProxyType(dict(mapping))


@attrs.frozen
class MapperSchema:
    """Immutable property, alias and required-field metadata for one mapped type.

    Attributes:
        owner: Dotted path of the type the schema belongs to
        properties: Ordered map from property name to type descriptor string
        aliases: Map from property name to the key read from input data
        required: Required field specs, in declaration order
    """

    owner: str
    properties: Mapping[str, str] = attrs.field(
        factory=dict, converter=_frozen_mapping
    )
    aliases: Mapping[str, str] = attrs.field(factory=dict, converter=_frozen_mapping)
    required: tuple[FieldSpec, ...] = attrs.field(factory=tuple, converter=tuple)

    def source_key(self, name: str) -> str:
        """Return the input key a property is read from."""
        return self.aliases.get(name, name)

    def is_declared(self, name: str) -> bool:
        return name in self.properties

    def descriptor(self, name: str) -> TypeDescriptor:
        """Return the parsed type of a declared property.

        Raises:
            KeyError: if the property is not declared
        """
        return parse_type(self.properties[name])

    @classmethod
    def from_declaration(
        cls,
        owner: str,
        properties: Mapping[str, str],
        aliases: Optional[Mapping[str, str]] = None,
        required: Optional[Sequence[str]] = None,
        *,
        reserved: Collection[str] = (),
    ) -> Self:
        """Validate a class-level declaration and freeze it.

        Args:
            owner: Dotted path of the declaring type
            properties: Property name to type descriptor
            aliases: Property name to input key
            required: Required field specs
            reserved: Names that may not be declared as properties, such as
                the attributes of the declaring class

        Raises:
            SchemaError: if the declaration is malformed
        """
        state: dict[str, Any] = {
            "properties": dict(properties),
            "aliases": dict(aliases or {}),
            "required": list(required or []),
        }
        try:
            parsed = _declaration_schema.validate(state)
        except schema.SchemaError as exe:
            raise SchemaError(f"Malformed mapper declaration for {owner}") from exe

        unknown = [
            name for name in parsed["aliases"] if name not in parsed["properties"]
        ]
        if unknown:
            raise SchemaError(
                f"Aliases given for undeclared properties {unknown} in {owner}"
            )

        clashes = [name for name in parsed["properties"] if name in reserved]
        if clashes:
            raise SchemaError(
                f"Properties {clashes} shadow class attributes of {owner}"
            )

        return cls(
            owner,
            properties=parsed["properties"],
            aliases=parsed["aliases"],
            required=[parse_field_spec(spec) for spec in parsed["required"]],
        )
