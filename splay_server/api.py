from __future__ import annotations
import json
import logging
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from splay_bridge.adapters.rpc_local import BRIDGE_NAMESPACE, LocalRpc
from splay_bridge.descriptor import Descriptor
from splay_bridge.runtime.codec import to_wire
from splay_bridge.runtime.errors import BridgeError, FormatError, ProcedureNotFound, classify_error

logger = logging.getLogger("splay_bridge.server")

router = APIRouter()


class RpcIn(BaseModel):
    ctx: Dict[str, Any] = Field(default_factory=dict)


class RpcOut(BaseModel):
    result: Any


class InfoOut(BaseModel):
    name: str
    version: str
    namespace: str


class HealthOut(BaseModel):
    status: str
    ts: str


def get_rpc(request: Request) -> LocalRpc:
    return request.app.state.rpc


def sse(event: Dict[str, Any], name: Optional[str] = None) -> str:
    head = f"event: {name}\n" if name else ""
    return head + "data: " + json.dumps(event, ensure_ascii=False) + "\n\n"


def _encode(result: Any) -> Any:
    return to_wire(result) if isinstance(result, Descriptor) else result


def _http_error(exc: BridgeError) -> HTTPException:
    if isinstance(exc, ProcedureNotFound):
        status = 404
    elif isinstance(exc, FormatError):
        status = 422
    else:
        status = 502
    return HTTPException(status_code=status, detail={"code": exc.code, "message": str(exc)})


@router.get(f"/v1/{BRIDGE_NAMESPACE}/info", response_model=InfoOut)
async def bridge_info(rpc: LocalRpc = Depends(get_rpc)):
    return await rpc.call([BRIDGE_NAMESPACE, "info"], {})


@router.get(f"/v1/{BRIDGE_NAMESPACE}/health", response_model=HealthOut)
async def bridge_health(rpc: LocalRpc = Depends(get_rpc)):
    return await rpc.call([BRIDGE_NAMESPACE, "health"], {})


@router.post("/v1/rpc/{path}", response_model=RpcOut)
async def rpc_call(path: str, payload: RpcIn, rpc: LocalRpc = Depends(get_rpc)):
    try:
        result = await rpc.call(path.split("."), payload.ctx)
    except BridgeError as exc:
        raise _http_error(exc) from exc
    return {"result": _encode(result)}


@router.post("/v1/stream/{path}")
async def rpc_stream(path: str, payload: RpcIn, rpc: LocalRpc = Depends(get_rpc)):
    try:
        source = rpc.stream(path.split("."), payload.ctx)
    except BridgeError as exc:
        raise _http_error(exc) from exc

    async def gen() -> AsyncIterator[str]:
        try:
            async for descriptor in source:
                yield sse(to_wire(descriptor))
        except Exception as exc:
            # the response has started, the failure travels as the final frame
            logger.exception("stream %s failed", path)
            yield sse({"code": classify_error(exc), "message": str(exc)}, name="error")
        finally:
            aclose = getattr(source, "aclose", None)
            if aclose is not None:
                await aclose()

    return StreamingResponse(gen(), media_type="text/event-stream")
