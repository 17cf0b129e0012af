from __future__ import annotations
from typing import Any, Dict, Mapping, Optional

from splay_bridge.adapters.hydrator_generic import Hydrator, Path
from splay_bridge.descriptor import Descriptor
from splay_bridge.ports.framework import CreateElement
from splay_bridge.runtime.errors import UnknownComponentError


class FrameworkHydrator(Hydrator):
    """Hydrator that materializes through a framework's ``create_element``.

    ``components`` maps descriptor types to framework component types,
    ``fragment`` is the framework's fragment primitive and ``empty`` is what a
    ``__null__`` node becomes.
    """

    def __init__(
        self,
        create_element: CreateElement,
        components: Mapping[str, Any],
        *,
        fragment: Any,
        fallback: Any = None,
        empty: Any = None,
    ) -> None:
        super().__init__(components)
        self.create_element = create_element
        self.fragment = fragment
        self.fallback_component = fallback
        self._empty = empty

    def empty(self) -> Any:
        return self._empty

    def _hydrate_fragment(self, node: Descriptor, path: Path) -> Any:
        children = self._hydrate_children(node, path)
        props: Dict[str, Any] = {} if node.key is None else {"key": node.key}
        return self.create_element(self.fragment, props, *children)

    def _hydrate_known(self, node: Descriptor, path: Path) -> Any:
        children = self._hydrate_children(node, path)
        props = dict(node.props)
        if node.key is not None:
            props["key"] = node.key
        return self.create_element(self._components[node.type], props, *children)

    def _hydrate_unknown(self, node: Descriptor, path: Path) -> Any:
        if self.fallback_component is None:
            raise UnknownComponentError(node.type, path)
        props: Dict[str, Any] = {"descriptor": node}
        if node.key is not None:
            props["key"] = node.key
        return self.create_element(self.fallback_component, props)


def create_framework_hydrator(
    create_element: CreateElement,
    components: Mapping[str, Any],
    fragment: Any,
    fallback: Optional[Any] = None,
    empty: Any = None,
) -> FrameworkHydrator:
    return FrameworkHydrator(create_element, components, fragment=fragment, fallback=fallback, empty=empty)
