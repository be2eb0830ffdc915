"""Attribute path resolution shared by translated reads and writes.

``address.city``, ``address[city]`` and ``states[0]`` all address a location
inside a value map. Reads and writes split names with the same helper so they
always land on the same key.
"""
import re
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any, List

_SEGMENT = re.compile(r"[^.\[\]]+")


def split_path(attribute: str) -> List[str]:
    return _SEGMENT.findall(attribute)


def root_name(attribute: str) -> str:
    """Top-level attribute a path starts from."""
    segments = split_path(attribute)
    return segments[0] if segments else attribute


def _is_list(node: Any) -> bool:
    return isinstance(node, Sequence) and not isinstance(node, (str, bytes, bytearray))


def get_path(data: Any, attribute: str, default: Any = None) -> Any:
    segments = split_path(attribute)
    if not segments:
        return default

    node = data
    for segment in segments:
        if isinstance(node, Mapping):
            if segment not in node:
                return default
            node = node[segment]
        elif _is_list(node) and segment.isdigit():
            index = int(segment)
            if index >= len(node):
                return default
            node = node[index]
        else:
            return default
    return node


def set_path(data: MutableMapping, attribute: str, value: Any) -> Any:
    """Write ``value`` at ``attribute``, creating intermediate maps as needed.

    Intermediate values that are not containers are replaced by empty maps.
    """
    segments = split_path(attribute)
    if not segments:
        raise ValueError(f"Attribute path {attribute!r} has no segments")

    node: Any = data
    for segment in segments[:-1]:
        key = _key_for(node, segment, attribute)
        child = node[key] if isinstance(node, MutableSequence) else node.get(key)
        if not isinstance(child, (MutableMapping, MutableSequence)):
            child = node[key] = {}
        node = child

    node[_key_for(node, segments[-1], attribute)] = value
    return value


def _key_for(node: Any, segment: str, attribute: str) -> Any:
    if not isinstance(node, MutableSequence):
        return segment
    if segment.isdigit() and int(segment) < len(node):
        return int(segment)
    raise ValueError(f"Cannot set {attribute!r}: '{segment}' does not address a list item")
