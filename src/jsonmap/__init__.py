"""Map decoded JSON-like data onto typed objects with declarative schemas."""

__version__ = "0.1.0"

from jsonmap.exceptions import (
    AccessError,
    MapperError,
    SchemaError,
    SerializationError,
    ValidationError,
)
from jsonmap.mapper import MappedObject, validate_required
from jsonmap.registry import register_mapped_type, resolve_type_name
