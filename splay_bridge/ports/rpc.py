from __future__ import annotations
from typing import Any, AsyncIterator, Awaitable, Mapping, Protocol, Sequence

from splay_bridge.descriptor import Descriptor

Context = Mapping[str, Any]


class CallFn(Protocol):
    def __call__(self, path: Sequence[str], ctx: Context) -> Awaitable[Descriptor]: ...


class StreamFn(Protocol):
    def __call__(self, path: Sequence[str], ctx: Context) -> AsyncIterator[Descriptor]: ...
