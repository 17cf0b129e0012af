from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Collection, FrozenSet, List, Mapping, Set, Tuple

from splay_bridge.descriptor import Descriptor, is_sentinel

Path = Tuple[int, ...]


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    unknown_types: FrozenSet[str] = frozenset()


def walk(descriptor: Descriptor, visitor: Callable[[Descriptor, Path], Any]) -> None:
    """Depth-first, pre-order visit of every node (sentinels included)."""
    stack: List[Tuple[Descriptor, Path]] = [(descriptor, ())]
    while stack:
        node, path = stack.pop()
        visitor(node, path)
        children = node.iter_children()
        for idx in range(len(children) - 1, -1, -1):
            stack.append((children[idx], path + (idx,)))


def transform(descriptor: Descriptor, fn: Callable[[Descriptor], Descriptor]) -> Descriptor:
    """Rewrite top-down: fn sees a node before its children, and the children
    that get visited are the ones on the node fn returned."""
    node = fn(descriptor)
    if node.children is None:
        return node
    return node.replace(children=tuple(transform(child, fn) for child in node.children))


def find(descriptor: Descriptor, predicate: Callable[[Descriptor], bool]) -> List[Descriptor]:
    matches: List[Descriptor] = []
    walk(descriptor, lambda node, _path: matches.append(node) if predicate(node) else None)
    return matches


def get_used_types(descriptor: Descriptor) -> Set[str]:
    used: Set[str] = set()
    walk(descriptor, lambda node, _path: used.add(node.type))
    return used


def validate(descriptor: Descriptor, known_types: Collection[str]) -> ValidationResult:
    known = set(known_types)
    unknown = frozenset(t for t in get_used_types(descriptor) if not is_sentinel(t) and t not in known)
    return ValidationResult(valid=not unknown, unknown_types=unknown)


def is_empty_prop(value: Any) -> bool:
    # 0 and False are meaningful values and are kept
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (Mapping, list, tuple)):
        return len(value) == 0
    return False


def compact(descriptor: Descriptor) -> Descriptor:
    def _strip(node: Descriptor) -> Descriptor:
        return node.replace(props={k: v for k, v in node.props.items() if not is_empty_prop(v)})
    return transform(descriptor, _strip)
