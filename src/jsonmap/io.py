"""Methods to decode input data files into generic nested data.

The mapping engine itself only accepts decoded data (dicts, lists and scalars);
these helpers cover reading that data from JSON or YAML text.
"""

import json
from pathlib import Path
from typing import Any

import yaml

from jsonmap.exceptions import SerializationError

JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yml", ".yaml")


def load_data_text(text: str, fmt: str = "json", *, source: str = "<string>") -> Any:
    """Decode JSON or YAML text.

    Args:
        text: Serialized data
        fmt: Either "json" or "yaml"
        source: Name used in error messages

    Raises:
        SerializationError: if the text cannot be decoded
        ValueError: if the format is not recognized
    """
    if fmt == "yaml":
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exe:
            raise SerializationError(f"Could not parse {source} as yaml") from exe
    elif fmt == "json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exe:
            raise SerializationError(f"Could not parse {source} as json") from exe
    else:
        raise ValueError(f"Unrecognized data format {fmt}")


def load_data_file(file_path: Path) -> Any:
    """Deserialize a file based on its extension."""
    file_type = file_path.suffix
    if file_type in YAML_SUFFIXES:
        fmt = "yaml"
    elif file_type in JSON_SUFFIXES:
        fmt = "json"
    else:
        raise ValueError(f"Unrecognized file type {file_type}")

    try:
        with open(file_path, encoding="utf8") as fh:
            file_contents = fh.read()
    except OSError as exe:
        raise SerializationError(f"Could not read file {file_path.name}") from exe

    return load_data_text(file_contents, fmt, source=f"file {file_path.name}")
