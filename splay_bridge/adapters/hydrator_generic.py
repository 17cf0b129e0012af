"""Hydration: turn a resolved descriptor tree into application values.

Each node is classified exactly once into a ``NodeKind`` and handled by the
matching entry of a dispatch table:

- NULL      -> ``on_null()`` or the engine's empty value; no render function runs
- FRAGMENT  -> children hydrated in order, then ``on_fragment(children)``
- KNOWN     -> children hydrated first, then ``render(props, children, key)``
- UNKNOWN   -> ``fallback(descriptor)``; without a fallback ``UnknownComponentError``

The unknown-type policy is fixed: no fallback means a hard failure naming the
type and its child-index path. There is no degraded render.
"""
from __future__ import annotations
from enum import Enum
from typing import AbstractSet, Any, Callable, Dict, List, Mapping, Optional, Tuple

from splay_bridge.descriptor import FRAGMENT_TYPE, NULL_TYPE, Descriptor, Key
from splay_bridge.ports.hydrator import DescriptorHydrator
from splay_bridge.runtime.errors import UnknownComponentError

RenderFn = Callable[[Dict[str, Any], List[Any], Optional[Key]], Any]
FallbackFn = Callable[[Descriptor], Any]

Path = Tuple[int, ...]


class NodeKind(Enum):
    NULL = "null"
    FRAGMENT = "fragment"
    KNOWN = "known"
    UNKNOWN = "unknown"


_SENTINEL_KINDS: Dict[str, NodeKind] = {NULL_TYPE: NodeKind.NULL, FRAGMENT_TYPE: NodeKind.FRAGMENT}


class Hydrator(DescriptorHydrator):
    def __init__(
        self,
        components: Mapping[str, RenderFn],
        *,
        fallback: Optional[FallbackFn] = None,
        on_null: Optional[Callable[[], Any]] = None,
        on_fragment: Optional[Callable[[List[Any]], Any]] = None,
    ) -> None:
        self._components: Dict[str, RenderFn] = dict(components)
        self.fallback = fallback
        self.on_null = on_null
        self.on_fragment = on_fragment
        self._dispatch: Dict[NodeKind, Callable[[Descriptor, Path], Any]] = {
            NodeKind.NULL: self._hydrate_null,
            NodeKind.FRAGMENT: self._hydrate_fragment,
            NodeKind.KNOWN: self._hydrate_known,
            NodeKind.UNKNOWN: self._hydrate_unknown,
        }

    @property
    def known_types(self) -> AbstractSet[str]:
        return self._components.keys()

    def classify(self, type_name: str) -> NodeKind:
        kind = _SENTINEL_KINDS.get(type_name)
        if kind is not None:
            return kind
        return NodeKind.KNOWN if type_name in self._components else NodeKind.UNKNOWN

    def hydrate(self, descriptor: Descriptor) -> Any:
        return self._hydrate(descriptor, ())

    def _hydrate(self, node: Descriptor, path: Path) -> Any:
        return self._dispatch[self.classify(node.type)](node, path)

    def _hydrate_children(self, node: Descriptor, path: Path) -> List[Any]:
        return [self._hydrate(child, path + (idx,)) for idx, child in enumerate(node.iter_children())]

    # --- per-kind handlers; the framework adapter overrides these ---

    def empty(self) -> Any:
        return None

    def _hydrate_null(self, node: Descriptor, path: Path) -> Any:
        if self.on_null is not None:
            return self.on_null()
        return self.empty()

    def _hydrate_fragment(self, node: Descriptor, path: Path) -> Any:
        children = self._hydrate_children(node, path)
        if self.on_fragment is not None:
            return self.on_fragment(children)
        return children

    def _hydrate_known(self, node: Descriptor, path: Path) -> Any:
        children = self._hydrate_children(node, path)
        return self._components[node.type](dict(node.props), children, node.key)

    def _hydrate_unknown(self, node: Descriptor, path: Path) -> Any:
        if self.fallback is None:
            raise UnknownComponentError(node.type, path)
        return self.fallback(node)


def create_hydrator(
    components: Mapping[str, RenderFn],
    fallback: Optional[FallbackFn] = None,
    on_null: Optional[Callable[[], Any]] = None,
    on_fragment: Optional[Callable[[List[Any]], Any]] = None,
) -> Hydrator:
    return Hydrator(components, fallback=fallback, on_null=on_null, on_fragment=on_fragment)
