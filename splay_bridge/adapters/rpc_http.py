from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import httpx

from splay_bridge.adapters.rpc_local import dotted
from splay_bridge.descriptor import Descriptor
from splay_bridge.ports.rpc import Context
from splay_bridge.runtime.codec import from_wire
from splay_bridge.runtime.config import BridgeSettings
from splay_bridge.runtime.errors import (
    ERROR_TIMEOUT,
    ERROR_TRANSIENT,
    ERROR_UPSTREAM,
    FormatError,
    TransportError,
    classify_error,
    code_for_status,
)
from splay_bridge.runtime.retry import run_with_retry

logger = logging.getLogger(__name__)


def _transport_error(exc: httpx.HTTPError, what: str) -> TransportError:
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return TransportError(f"{what}: HTTP {status}", code=code_for_status(status), status=status)
    if isinstance(exc, httpx.TimeoutException):
        return TransportError(f"{what}: timed out", code=ERROR_TIMEOUT)
    return TransportError(f"{what}: {exc}", code=ERROR_TRANSIENT)


class HttpRpcClient:
    """``call`` / ``stream`` over HTTP, speaking to a ``splay_server`` router.

    Convention:
      - call:   POST {base_url}/v1/rpc/{dotted.path}     JSON {"ctx": {...}} -> {"result": <descriptor>}
      - stream: POST {base_url}/v1/stream/{dotted.path}  JSON {"ctx": {...}} -> text/event-stream, one descriptor per ``data:`` frame
    A stream that fails server-side ends with an ``event: error`` frame.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 15.0,
        retry_cfg: Optional[Dict[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.retry_cfg = retry_cfg or {"max_attempts": 1}
        self._client = client or httpx.AsyncClient()

    @classmethod
    def from_settings(cls, settings: Optional[BridgeSettings] = None) -> "HttpRpcClient":
        settings = settings or BridgeSettings.from_env()
        return cls(settings.rpc_url, timeout_s=settings.rpc_timeout_s, retry_cfg=settings.retry_config())

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpRpcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def call_raw(self, path: Sequence[str], ctx: Context) -> Any:
        """Call a procedure and return its decoded ``result`` without descriptor parsing."""
        name = dotted(path)
        url = f"{self.base_url}/v1/rpc/{name}"

        async def once() -> Any:
            try:
                resp = await self._client.post(url, json={"ctx": dict(ctx)}, timeout=self.timeout_s)
                resp.raise_for_status()
            except httpx.HTTPError as exc:
                raise _transport_error(exc, name) from exc
            data = resp.json()
            # expected: {"result": {...}} OR the bare result
            if isinstance(data, dict) and "result" in data:
                return data["result"]
            return data

        out, attempts = await run_with_retry(call=once, classify_error=classify_error, retry_cfg=self.retry_cfg)
        if attempts > 1:
            logger.info("%s succeeded after %d attempts", name, attempts)
        return out

    async def call(self, path: Sequence[str], ctx: Context) -> Descriptor:
        return from_wire(await self.call_raw(path, ctx))

    @staticmethod
    def _frame(name: str, event: str, data: List[str]) -> Descriptor:
        try:
            payload = json.loads("\n".join(data))
        except json.JSONDecodeError as exc:
            raise FormatError(f"{name}: malformed stream frame: {exc}") from exc
        if event == "error":
            message = payload.get("message", "stream failed") if isinstance(payload, dict) else str(payload)
            code = payload.get("code") if isinstance(payload, dict) else None
            raise TransportError(f"{name}: {message}", code=code or ERROR_UPSTREAM)
        return from_wire(payload)

    async def stream(self, path: Sequence[str], ctx: Context) -> AsyncIterator[Descriptor]:
        name = dotted(path)
        url = f"{self.base_url}/v1/stream/{name}"
        try:
            async with self._client.stream("POST", url, json={"ctx": dict(ctx)}, timeout=self.timeout_s) as resp:
                resp.raise_for_status()
                event = "message"
                data: List[str] = []
                async for line in resp.aiter_lines():
                    if line.startswith("event:"):
                        event = line[len("event:"):].strip()
                    elif line.startswith("data:"):
                        data.append(line[len("data:"):].lstrip())
                    elif not line and data:
                        yield self._frame(name, event, data)
                        event, data = "message", []
                # last frame without its blank line
                if data:
                    yield self._frame(name, event, data)
        except httpx.HTTPError as exc:
            raise _transport_error(exc, name) from exc
