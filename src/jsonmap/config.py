"""Parse and validate config for the mapping CLI."""

import logging
from collections.abc import Collection, Iterable, Mapping
from pathlib import Path
from typing import Any, Optional, Self

import attrs
import yaml

from jsonmap.exceptions import SchemaError, SerializationError
from jsonmap.registry import load_type

CONFIG_TYPE_KEY = "__config_type"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _type_name_field():
    """Construct a config field that accepts a ``module:QualName`` string."""
    return attrs.field(
        default=None,
        validator=attrs.validators.optional(
            attrs.validators.matches_re(r"^[\w.]+:[\w.]+$")
        ),
    )


def _path_field():
    """Construct a config field that accepts a single path."""
    return attrs.field(
        default=None,
        converter=attrs.converters.optional(Path),
        metadata={CONFIG_TYPE_KEY: "path"},
    )


def _log_level_field():
    return attrs.field(
        default=None,
        converter=attrs.converters.optional(lambda level: str(level).upper()),
        validator=attrs.validators.optional(attrs.validators.in_(LOG_LEVELS)),
    )


@attrs.mutable(kw_only=True, eq=False)
class MapperConfig:
    """Config object for the mapping CLI.

    Attributes:
        root_type: mapped type to construct from the input, as ``module:QualName``
        collection_wrapper: optional wrapper for nested lists, as ``module:QualName``
        input_path: data file to map
        log_level: name of the logging level to configure
    """

    root_type: Optional[str] = _type_name_field()
    collection_wrapper: Optional[str] = _type_name_field()
    input_path: Optional[Path] = _path_field()
    log_level: Optional[str] = _log_level_field()

    def check_fields(self, required_fields: Iterable[str]) -> None:
        """Raise error if any required fields are unset.

        Raises:
            ValueError: If an invalid field is requested
            AttributeError: If a required field is unset
        """
        # noinspection PyTypeChecker
        valid_fields = attrs.fields_dict(type(self)).keys()
        for field in required_fields:
            if field not in valid_fields:
                raise ValueError(f"{field!r} is not a valid field name.")
            if getattr(self, field) is None:
                raise AttributeError(f"Required field {field!r} is unset.")

    def resolve_paths(self, root_point: Path) -> None:
        """Resolve relative paths by rooting at a provided directory."""
        # noinspection PyTypeChecker
        for attrib in attrs.fields(type(self)):
            if attrib.metadata.get(CONFIG_TYPE_KEY) != "path":
                continue
            old_path = getattr(self, attrib.name)
            if old_path is not None and not old_path.is_absolute():
                setattr(self, attrib.name, root_point / old_path)

    def update(self, other: Self) -> None:
        """Updates config values from another config object."""
        for name in attrs.fields_dict(type(other)):
            # Values in other override
            if getattr(other, name) is not None:
                setattr(self, name, getattr(other, name))
        # noinspection PyTypeChecker
        attrs.validate(self)

    @property
    def logging_level(self) -> int:
        """Numeric logging level, defaulting to warnings."""
        return getattr(logging, self.log_level or "WARNING")

    def resolve_root_type(self) -> type:
        """Load the configured root type.

        Raises:
            AttributeError: if no root type is configured
            SchemaError: if the type cannot be loaded
        """
        self.check_fields(("root_type",))
        loaded = load_type(self.root_type)
        if not isinstance(loaded, type):
            raise SchemaError(f"{self.root_type!r} does not name a type")
        return loaded

    def resolve_collection_wrapper(self) -> Optional[Any]:
        """Load the configured collection wrapper, if any."""
        if self.collection_wrapper is None:
            return None
        return load_type(self.collection_wrapper)

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[str, Any], *, root_path: Optional[Path] = None
    ) -> Self:
        """Construct config from a mapping."""
        new_conf = cls(**mapping)
        if root_path is not None:
            new_conf.resolve_paths(root_path)
        return new_conf

    @classmethod
    def from_namespace(
        cls,
        namespace: object,
        use_fields: Optional[Collection[str]],
        *,
        root_path: Optional[Path] = None,
    ) -> Self:
        """Construct a config from another dataclass-like object."""
        # noinspection PyTypeChecker
        field_names = attrs.fields_dict(cls).keys()
        if use_fields is not None:
            if any(_name not in field_names for _name in use_fields):
                raise ValueError(f"Unknown fields in {use_fields}")
            field_names = use_fields
        config_dict = {k: v for k, v in vars(namespace).items() if k in field_names}
        return cls.from_mapping(config_dict, root_path=root_path)

    @classmethod
    def from_file(cls, file: Path) -> Self:
        """Construct config object from config file.

        Raises:
            SerializationError: if the file is not a yaml mapping of config fields
        """
        conf_root = file.parent.resolve()
        try:
            with open(file, encoding="utf8") as _fh:
                file_conf = yaml.safe_load(_fh)
        except OSError as exe:
            raise SerializationError(f"Could not read config file {file.name}") from exe
        except yaml.YAMLError as exe:
            raise SerializationError(f"Could not parse {file.name} as yaml") from exe
        if file_conf is None:
            file_conf = {}
        if not isinstance(file_conf, Mapping):
            raise SerializationError(f"Config file {file.name} is not a mapping")
        try:
            return cls.from_mapping(file_conf, root_path=conf_root)
        except (TypeError, ValueError) as exe:
            raise SerializationError(f"Invalid config in {file.name}") from exe
