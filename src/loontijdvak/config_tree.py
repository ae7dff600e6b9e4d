"""Dot-path access into nested assignment configuration.

Assignment configuration is a tree of string-keyed mappings whose leaves are
scalars or lists. ``get_path`` distinguishes three states at a path:

- ``ABSENT``: some segment does not exist, or an intermediate is not a mapping
- ``None``: the key exists with a null value
- any other value: present

Forfait mapping treats both ``ABSENT`` and ``None`` as "no value".
"""

from __future__ import annotations

from typing import Any, Dict, List, Union

ConfigValue = Union[None, bool, int, float, str, List[Any], "ConfigTree"]
ConfigTree = Dict[str, ConfigValue]


class _Absent:
    """Sentinel type for a path that does not resolve."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT: Any = _Absent()


def split_path(path: str) -> list[str]:
    """Split a dot path into segments; empty segments are rejected."""
    segments = path.split(".")
    if not path or any(s == "" for s in segments):
        raise ValueError(f"Invalid configuration path: '{path}'")
    return segments


def get_path(tree: Any, path: str) -> Any:
    """Resolve a dot path, returning ABSENT when any segment is missing."""
    current = tree
    for segment in split_path(path):
        if not isinstance(current, dict) or segment not in current:
            return ABSENT
        current = current[segment]
    return current


def is_present(value: Any) -> bool:
    """True for a resolved value that is neither ABSENT nor None."""
    return value is not ABSENT and value is not None


def set_path(tree: ConfigTree, path: str, value: ConfigValue) -> None:
    """Write a value at a dot path, creating intermediate mappings.

    An intermediate that exists but is not a mapping is replaced by one.
    """
    *parents, leaf = split_path(path)
    current = tree
    for segment in parents:
        child = current.get(segment)
        if not isinstance(child, dict):
            child = {}
            current[segment] = child
        current = child
    current[leaf] = value
