"""Basic utilities for formatting mapped objects as text."""

import sys
from collections.abc import Mapping
from typing import Any, List, Optional, TextIO

from jsonmap.mapper import MappedObject


def _dump_lines(value, indent, step):
    # type: (Any, int, int) -> List[str]
    pad = " " * indent
    if isinstance(value, MappedObject):
        lines = [f"{type(value).__name__} {{"]
        for name in value.property_names():
            child = _dump_lines(value.raw_value(name), indent + step, step)
            lines.append(f"{pad}{' ' * step}{name}: {child[0]}")
            lines.extend(child[1:])
        lines.append(pad + "}")
        return lines
    if isinstance(value, Mapping):
        items = list(value.items())
        opener, closer = "{", "}"
    elif isinstance(value, (list, tuple)):
        items = list(enumerate(value))
        opener, closer = "[", "]"
    elif hasattr(value, "__iter__") and not isinstance(value, (str, bytes)):
        # Collection wrappers are shown through their iteration order
        items = list(enumerate(value))
        opener, closer = f"{type(value).__name__} [", "]"
    else:
        return [repr(value)]

    if not items:
        return [opener + closer]
    lines = [opener]
    for key, item in items:
        child = _dump_lines(item, indent + step, step)
        lines.append(f"{pad}{' ' * step}[{key!r}] {child[0]}")
        lines.extend(child[1:])
    lines.append(pad + closer)
    return lines


def dump_mapped(value, indent=2):
    # type: (Any, int) -> str
    """Render a mapped object graph as an indented tree.

    Args:
        value: Mapped object (or any nested value) to render
        indent: Spaces added per nesting level

    Returns:
        Multiline string representation of the stored values
    """
    return "\n".join(_dump_lines(value, 0, indent)) + "\n"


def write_mapped(value, out_stream=None, indent=2):
    # type: (Any, Optional[TextIO], int) -> None
    """Write the tree representation of a mapped object onto a stream.

    Writes to the current ``sys.stdout`` unless a stream is given.
    """
    if out_stream is None:
        out_stream = sys.stdout
    out_stream.write(dump_mapped(value, indent))
