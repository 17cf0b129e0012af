from __future__ import annotations
from typing import AbstractSet, Any, Protocol

from splay_bridge.descriptor import Descriptor


class DescriptorHydrator(Protocol):
    @property
    def known_types(self) -> AbstractSet[str]: ...

    def hydrate(self, descriptor: Descriptor) -> Any: ...
