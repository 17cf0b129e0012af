from __future__ import annotations
from typing import AsyncIterator, Awaitable, Callable, Optional, Protocol, Union

from splay_bridge.descriptor import Descriptor
from splay_bridge.ports.rpc import Context

Resolver = Callable[[Context], Union[Awaitable[Descriptor], AsyncIterator[Descriptor]]]


class ComponentRegistry(Protocol):
    def get(self, name: str) -> Optional[Resolver]: ...
