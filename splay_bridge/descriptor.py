"""Descriptor model: the serializable tree a remote component returns.

A descriptor names a component (``type``), carries its ``props``, optional
ordered ``children`` and an optional reconciliation ``key``. Two reserved
types drive rendering instead of a components-map lookup:

- ``__null__`` renders nothing (no props, no children)
- ``__fragment__`` is a transparent wrapper around its children (no props)
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace as _dc_replace
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from splay_bridge.runtime.errors import FormatError

NULL_TYPE = "__null__"
FRAGMENT_TYPE = "__fragment__"
SENTINEL_TYPES = frozenset({NULL_TYPE, FRAGMENT_TYPE})

Key = Union[str, int]


def is_sentinel(type_name: str) -> bool:
    return type_name in SENTINEL_TYPES


@dataclass(frozen=True)
class Descriptor:
    type: str
    props: Mapping[str, Any] = field(default_factory=dict, hash=False)
    children: Optional[Tuple["Descriptor", ...]] = None
    key: Optional[Key] = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not self.type:
            raise FormatError("Descriptor type must be a non-empty string")
        if not isinstance(self.props, Mapping):
            raise FormatError(f"Descriptor {self.type!r}: props must be a mapping")
        object.__setattr__(self, "props", MappingProxyType(dict(self.props)))

        children = self.children
        if children is not None:
            if isinstance(children, (str, bytes, Mapping)) or not isinstance(children, Iterable):
                raise FormatError(f"Descriptor {self.type!r}: children must be a sequence")
            children = tuple(children)
            for child in children:
                if not isinstance(child, Descriptor):
                    raise FormatError(f"Descriptor {self.type!r}: child {child!r} is not a Descriptor")
        if self.type == FRAGMENT_TYPE and children is None:
            children = ()
        object.__setattr__(self, "children", children)

        if self.key is not None and (isinstance(self.key, bool) or not isinstance(self.key, (str, int))):
            raise FormatError(f"Descriptor {self.type!r}: key must be a string or an integer")

        if self.type == NULL_TYPE and (self.props or self.children):
            raise FormatError("__null__ descriptors carry no props and no children")
        if self.type == FRAGMENT_TYPE and self.props:
            raise FormatError("__fragment__ descriptors carry no props")

    @property
    def is_null(self) -> bool:
        return self.type == NULL_TYPE

    @property
    def is_fragment(self) -> bool:
        return self.type == FRAGMENT_TYPE

    def iter_children(self) -> Tuple["Descriptor", ...]:
        return self.children or ()

    def replace(self, **changes: Any) -> "Descriptor":
        return _dc_replace(self, **changes)


def element(type_name: str, props: Optional[Mapping[str, Any]] = None, *children: Descriptor, key: Optional[Key] = None) -> Descriptor:
    """Shorthand constructor; children are omitted entirely when none are given."""
    return Descriptor(type_name, dict(props or {}), tuple(children) if children else None, key)


def null() -> Descriptor:
    return Descriptor(NULL_TYPE)


def fragment(*children: Descriptor, key: Optional[Key] = None) -> Descriptor:
    return Descriptor(FRAGMENT_TYPE, {}, tuple(children), key)


def count_nodes(descriptor: Descriptor) -> int:
    total = 0
    stack = [descriptor]
    while stack:
        node = stack.pop()
        total += 1
        stack.extend(node.iter_children())
    return total


