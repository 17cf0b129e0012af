from __future__ import annotations
import inspect
import time
from typing import Any, AsyncIterable, AsyncIterator, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Union

from splay_bridge._version import __version__
from splay_bridge.descriptor import Descriptor
from splay_bridge.ports.rpc import Context
from splay_bridge.runtime.errors import ProcedureNotFound

BRIDGE_NAMESPACE = "splay.bridge"

Result = Union[Descriptor, Mapping[str, Any]]
ProcedureFn = Callable[[Context], Union[Result, Awaitable[Result]]]
StreamProcedureFn = Callable[[Context], AsyncIterable[Descriptor]]


def now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def dotted(path: Union[str, Sequence[str]]) -> str:
    return path if isinstance(path, str) else ".".join(path)


class LocalRpc:
    """In-process procedure table implementing the ``call`` / ``stream`` ports.

    Procedures are keyed by dotted path (``["ui", "user-card"]`` -> ``"ui.user-card"``).
    """

    def __init__(self) -> None:
        self.procedures: Dict[str, ProcedureFn] = {}
        self.stream_procedures: Dict[str, StreamProcedureFn] = {}
        self.call_log: List[str] = []

    def register(self, path: Union[str, Sequence[str]], fn: ProcedureFn) -> None:
        self.procedures[dotted(path)] = fn

    def register_stream(self, path: Union[str, Sequence[str]], fn: StreamProcedureFn) -> None:
        self.stream_procedures[dotted(path)] = fn

    def procedure(self, path: Union[str, Sequence[str]]) -> Callable[[ProcedureFn], ProcedureFn]:
        def deco(fn: ProcedureFn) -> ProcedureFn:
            self.register(path, fn)
            return fn
        return deco

    def stream_procedure(self, path: Union[str, Sequence[str]]) -> Callable[[StreamProcedureFn], StreamProcedureFn]:
        def deco(fn: StreamProcedureFn) -> StreamProcedureFn:
            self.register_stream(path, fn)
            return fn
        return deco

    def is_streaming(self, path: Union[str, Sequence[str]]) -> bool:
        return dotted(path) in self.stream_procedures

    async def call(self, path: Sequence[str], ctx: Context) -> Result:
        key = dotted(path)
        fn = self.procedures.get(key)
        if fn is None:
            raise ProcedureNotFound(key.split("."))
        self.call_log.append(key)
        out = fn(ctx)
        if inspect.isawaitable(out):
            out = await out
        return out

    def stream(self, path: Sequence[str], ctx: Context) -> AsyncIterator[Descriptor]:
        key = dotted(path)
        fn = self.stream_procedures.get(key)
        if fn is None:
            raise ProcedureNotFound(key.split("."))
        self.call_log.append(key)
        return fn(ctx).__aiter__()


def with_bridge_procedures(rpc: Optional[LocalRpc] = None) -> LocalRpc:
    """Install the built-in ``splay.bridge.info`` and ``splay.bridge.health`` procedures."""
    rpc = rpc or LocalRpc()

    def info(ctx: Context) -> Dict[str, Any]:
        return {"name": "splay-bridge", "version": __version__, "namespace": BRIDGE_NAMESPACE}

    def health(ctx: Context) -> Dict[str, Any]:
        return {"status": "ok", "ts": now_iso()}

    rpc.register(f"{BRIDGE_NAMESPACE}.info", info)
    rpc.register(f"{BRIDGE_NAMESPACE}.health", health)
    return rpc
