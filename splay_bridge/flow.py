from __future__ import annotations
import inspect
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator

from splay_bridge.descriptor import Descriptor, null
from splay_bridge.ports.hydrator import DescriptorHydrator
from splay_bridge.ports.registry import ComponentRegistry
from splay_bridge.ports.rpc import Context
from splay_bridge.runtime.errors import ComponentNotRegistered
from splay_bridge.runtime.tree import validate

logger = logging.getLogger(__name__)


@dataclass
class Bridge:
    registry: ComponentRegistry
    hydrator: DescriptorHydrator

    def _resolve(self, name: str, ctx: Context) -> Any:
        resolver = self.registry.get(name)
        if resolver is None:
            raise ComponentNotRegistered(name)
        return resolver(ctx)

    def hydrate(self, name: str, descriptor: Descriptor) -> Any:
        report = validate(descriptor, self.hydrator.known_types)
        if not report.valid:
            logger.warning("%s: descriptor uses unmapped types %s", name, sorted(report.unknown_types))
        return self.hydrator.hydrate(descriptor)

    async def render(self, name: str, ctx: Context) -> Any:
        """Resolve one descriptor and hydrate it. For a streaming resolver the last item wins."""
        result = self._resolve(name, ctx)
        if inspect.isawaitable(result):
            return self.hydrate(name, await result)

        last = None
        async for descriptor in result:
            last = descriptor
        if last is None:
            return self.hydrator.hydrate(null())
        return self.hydrate(name, last)

    async def render_stream(self, name: str, ctx: Context) -> AsyncIterator[Any]:
        result = self._resolve(name, ctx)
        if inspect.isawaitable(result):
            yield self.hydrate(name, await result)
            return
        try:
            async for descriptor in result:
                yield self.hydrate(name, descriptor)
        finally:
            aclose = getattr(result, "aclose", None)
            if aclose is not None:
                await aclose()
