"""Registries that turn a component name into an RPC-backed resolver.

- ClientRegistry:    ``await resolver(ctx)`` -> one Descriptor via ``call``
- StreamingRegistry: ``async for d in resolver(ctx)`` via ``stream``, behind a bounded buffer
- DualRegistry:      picks one of the two per ``get`` from an ``is_streaming`` predicate

Resolvers never validate or retry; whatever the collaborator returns or
raises reaches the caller unchanged.
"""
from __future__ import annotations
import asyncio
import logging
from abc import abstractmethod
from typing import Any, AsyncIterator, Callable, Dict, Mapping, Optional, Sequence, Union

from splay_bridge.descriptor import Descriptor
from splay_bridge.ports.registry import ComponentRegistry, Resolver
from splay_bridge.ports.rpc import CallFn, Context, StreamFn
from splay_bridge.runtime.buffer import BoundedBuffer
from splay_bridge.runtime.config import RegistryConfig

logger = logging.getLogger(__name__)

ConfigLike = Union[RegistryConfig, Mapping[str, Any], None]


class _NamedRegistry(ComponentRegistry):
    def __init__(self, config: RegistryConfig) -> None:
        self.config = config
        self._entries: Optional[Dict[str, Resolver]] = None
        if config.names is not None:
            self._entries = {name: self._build(name) for name in config.names if name}

    @property
    def namespace(self) -> Optional[str]:
        return self.config.namespace

    def get(self, name: str) -> Optional[Resolver]:
        if not name:
            return None
        if self._entries is not None:
            return self._entries.get(name)
        return self._build(name)

    @abstractmethod
    def _build(self, name: str) -> Resolver: ...


class ClientRegistry(_NamedRegistry):
    def __init__(self, call: CallFn, config: RegistryConfig) -> None:
        self._call = call
        super().__init__(config)

    def _build(self, name: str) -> Resolver:
        path = self.config.path_for(name)

        async def resolve(ctx: Context) -> Descriptor:
            logger.debug("call %s", ".".join(path))
            return await self._call(list(path), ctx)

        return resolve


async def _pump(source: AsyncIterator[Descriptor], buffer: BoundedBuffer[Descriptor]) -> None:
    try:
        while True:
            # pull upstream only once the item has somewhere to go
            await buffer.wait_for_space()
            try:
                item = await source.__anext__()
            except StopAsyncIteration:
                break
            await buffer.put(item)
    except Exception as exc:
        await buffer.close(exc)
    else:
        await buffer.close()
    finally:
        aclose = getattr(source, "aclose", None)
        if aclose is not None:
            await aclose()


class StreamingRegistry(_NamedRegistry):
    def __init__(self, stream: StreamFn, config: RegistryConfig) -> None:
        self._stream = stream
        super().__init__(config)

    @property
    def buffer_size(self) -> int:
        return self.config.buffer_size

    def _build(self, name: str) -> Resolver:
        path = self.config.path_for(name)

        def resolve(ctx: Context) -> AsyncIterator[Descriptor]:
            return self._open(list(path), ctx)

        return resolve

    async def _open(self, path: Sequence[str], ctx: Context) -> AsyncIterator[Descriptor]:
        # one buffer per open stream, never shared between invocations
        buffer: BoundedBuffer[Descriptor] = BoundedBuffer(self.config.buffer_size)
        logger.debug("stream %s (buffer=%d)", ".".join(path), buffer.capacity)
        producer = asyncio.ensure_future(_pump(self._stream(list(path), ctx).__aiter__(), buffer))
        try:
            async for item in buffer:
                yield item
        finally:
            if not producer.done():
                producer.cancel()
            await asyncio.gather(producer, return_exceptions=True)
            logger.debug("stream %s closed (high water %d)", ".".join(path), buffer.high_water)


class DualRegistry(ComponentRegistry):
    def __init__(self, call: CallFn, stream: StreamFn, is_streaming: Callable[[str], bool], config: RegistryConfig) -> None:
        self.client = ClientRegistry(call, config)
        self.streaming = StreamingRegistry(stream, config)
        self._is_streaming = is_streaming

    def get(self, name: str) -> Optional[Resolver]:
        # evaluated on every lookup, the answer may change between calls
        if self._is_streaming(name):
            return self.streaming.get(name)
        return self.client.get(name)


def create_client_registry(call: CallFn, config: ConfigLike = None, **overrides: Any) -> ClientRegistry:
    return ClientRegistry(call, RegistryConfig.coerce(config, **overrides))


def create_streaming_registry(stream: StreamFn, config: ConfigLike = None, **overrides: Any) -> StreamingRegistry:
    return StreamingRegistry(stream, RegistryConfig.coerce(config, **overrides))


def create_dual_registry(
    call: CallFn,
    stream: StreamFn,
    is_streaming: Callable[[str], bool],
    config: ConfigLike = None,
    **overrides: Any,
) -> DualRegistry:
    return DualRegistry(call, stream, is_streaming, RegistryConfig.coerce(config, **overrides))
