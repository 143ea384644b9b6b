"""Exceptions for the mapping engine."""


class MapperError(RuntimeError):
    """Base error in mapping code."""


class SerializationError(MapperError):
    """Error reading or decoding input data."""


class ValidationError(MapperError):
    """Input data does not satisfy the required fields of a mapped type."""

    def __init__(self, owner: str, message: str) -> None:
        super().__init__(owner, message)
        self.owner = owner
        self.message = message

    def __str__(self) -> str:
        return f"{self.message}: {self.owner}"


class SchemaError(MapperError):
    """A mapped type declaration cannot be interpreted."""


class AccessError(MapperError, AttributeError):
    """Read of a property that is not present on a mapped object."""

    def __init__(self, owner: str, name: str) -> None:
        super().__init__(owner, name)
        self.owner = owner
        self.name = name

    def __str__(self) -> str:
        return f"Property {self.name} not found in {self.owner}"
