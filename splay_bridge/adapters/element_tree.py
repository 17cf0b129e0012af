from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


class _FragmentType:
    def __repr__(self) -> str:
        return "Fragment"


# framework-side fragment primitive for the element tree
Fragment = _FragmentType()


@dataclass(frozen=True)
class Element:
    """Plain element value, the smallest target a ``create_element`` contract can have."""

    type: Any
    props: Mapping[str, Any] = field(default_factory=dict)
    children: Tuple[Any, ...] = ()

    @property
    def key(self) -> Optional[Any]:
        return self.props.get("key")

    @property
    def is_fragment(self) -> bool:
        return self.type is Fragment


def create_element(type: Any, props: Optional[Mapping[str, Any]], *children: Any) -> Element:
    return Element(type, dict(props or {}), tuple(children))


def to_dict(node: Any) -> Any:
    """Debug view of an element tree (component types rendered by name)."""
    if not isinstance(node, Element):
        return node
    type_name = node.type if isinstance(node.type, str) else getattr(node.type, "__name__", repr(node.type))
    out: Dict[str, Any] = {"type": type_name, "props": dict(node.props)}
    if node.children:
        out["children"] = [to_dict(c) for c in node.children]
    return out
