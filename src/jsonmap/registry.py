"""Registry of mapped types and resolution of declared nested type names.

Every mapped type is registered when its class is created, keyed by its dotted
path ``module.QualName``. Nested types in a schema may then be named:

- bare (``"User"``), resolved relative to the declaring type by walking outward
  through its dotted path, starting with the type's own scope, until a
  registered ``<prefix>.User`` is found;
- rooted, in entry point form (``"package.models:User"``), looked up directly.
"""

import importlib
import logging
from typing import Any, Optional

from jsonmap.exceptions import SchemaError

logger = logging.getLogger(__name__)

ROOT_SEPARATOR = ":"

# Global store of mapped types, keyed by dotted path
_mapped_type_map: dict[str, type] = {}


def qualified_name(cls: type) -> str:
    """Return the dotted path a class is registered under."""
    return f"{cls.__module__}.{cls.__qualname__}"


def register_mapped_type(cls: type) -> type:
    """Register a mapped type globally for name resolution.

    A type defined again under the same path (e.g. a module reload) replaces
    the previous registration.
    """
    path = qualified_name(cls)
    previous = _mapped_type_map.get(path)
    if previous is not None and previous is not cls:
        logger.warning("Replacing mapped type registered as %s", path)
    _mapped_type_map[path] = cls
    logger.debug("Registered mapped type %s", path)
    return cls


def lookup_type(path: str) -> Optional[type]:
    """Return the type registered under a dotted path, if any."""
    return _mapped_type_map.get(path)


def is_rooted(type_name: str) -> bool:
    return ROOT_SEPARATOR in type_name


def _split_rooted(type_name: str) -> tuple[str, str]:
    module_name, _, qual_name = type_name.partition(ROOT_SEPARATOR)
    if not module_name or not qual_name:
        raise SchemaError(f"Malformed type name {type_name!r}")
    return module_name, qual_name


def load_type(type_name: str) -> Any:
    """Load an object named in ``module:QualName`` form.

    Registered mapped types are returned directly. Otherwise the module is
    imported (registering any mapped types it defines) and the qualified name
    is looked up attribute by attribute, so that arbitrary classes such as
    collection wrappers can be named the same way.

    Raises:
        SchemaError: if the module or the name cannot be loaded
    """
    module_name, qual_name = _split_rooted(type_name)
    path = f"{module_name}.{qual_name}"
    found = lookup_type(path)
    if found is not None:
        return found

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exe:
        raise SchemaError(f"Could not import module for {type_name!r}") from exe
    for attr in qual_name.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as exe:
            raise SchemaError(f"Type {type_name!r} not found") from exe
    return obj


def resolve_type_name(type_name: str, owner: type) -> Optional[type]:
    """Resolve a nested type name declared by a mapped type.

    Args:
        type_name: Bare or rooted type name from a schema
        owner: Mapped type whose schema declares the name

    Returns:
        The registered type, or None if the name cannot be resolved
    """
    if is_rooted(type_name):
        try:
            found = load_type(type_name)
        except SchemaError:
            logger.debug("Rooted type %s could not be loaded", type_name)
            return None
        return found if isinstance(found, type) else None

    # Walk outward from the owner's own scope (for nested classes) to the root
    segments = qualified_name(owner).split(".")
    while True:
        candidate = ".".join([*segments, type_name])
        found = lookup_type(candidate)
        if found is not None:
            logger.debug(
                "Resolved %s to %s for %s", type_name, candidate, owner.__qualname__
            )
            return found
        if not segments:
            return None
        segments.pop()
