from __future__ import annotations
from typing import Optional, Sequence, Set

import httpx

ERROR_TRANSPORT = "TRANSPORT"
ERROR_TRANSIENT = "TRANSIENT"
ERROR_TIMEOUT = "TIMEOUT"
ERROR_RATE_LIMIT = "RATE_LIMIT"
ERROR_UPSTREAM = "UPSTREAM"
ERROR_NOT_FOUND = "NOT_FOUND"
ERROR_FORMAT = "FORMAT"
ERROR_VALIDATION = "VALIDATION"
ERROR_UNKNOWN_COMPONENT = "UNKNOWN_COMPONENT"
ERROR_RESOURCE = "RESOURCE"
ERROR_UNKNOWN = "UNKNOWN"

NON_RETRYABLE: Set[str] = {ERROR_NOT_FOUND, ERROR_FORMAT, ERROR_VALIDATION, ERROR_UNKNOWN_COMPONENT, ERROR_RESOURCE}


class BridgeError(Exception):
    code = ERROR_UNKNOWN


class TransportError(BridgeError):
    """Failure reported by an RPC collaborator. Never retried by registries."""

    code = ERROR_TRANSPORT

    def __init__(self, message: str, *, code: Optional[str] = None, status: Optional[int] = None) -> None:
        super().__init__(message)
        if code:
            self.code = code
        self.status = status


class ProcedureNotFound(TransportError):
    code = ERROR_NOT_FOUND

    def __init__(self, path: Sequence[str]) -> None:
        self.path = list(path)
        super().__init__(f"Unknown procedure: {'.'.join(self.path)}", code=ERROR_NOT_FOUND, status=404)


class FormatError(BridgeError, ValueError):
    code = ERROR_FORMAT


class UnknownComponentError(BridgeError, LookupError):
    code = ERROR_UNKNOWN_COMPONENT

    def __init__(self, type_name: str, path: Sequence[int]) -> None:
        self.type_name = type_name
        self.path = tuple(path)
        where = "/".join(str(i) for i in self.path) or "<root>"
        super().__init__(f"No component registered for type {type_name!r} at {where}")


class ComponentNotRegistered(BridgeError, LookupError):
    code = ERROR_NOT_FOUND

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Registry has no resolver for {name!r}")


class ResourceInvariantViolation(BridgeError, RuntimeError):
    code = ERROR_RESOURCE


def code_for_status(status: int) -> str:
    if status == 404:
        return ERROR_NOT_FOUND
    if status == 422 or status == 400:
        return ERROR_FORMAT
    if status == 429:
        return ERROR_RATE_LIMIT
    if status == 408 or status == 504:
        return ERROR_TIMEOUT
    if status >= 500:
        return ERROR_UPSTREAM
    return ERROR_TRANSPORT


def classify_error(exc: Exception) -> str:
    if isinstance(exc, BridgeError):
        return exc.code
    if isinstance(exc, httpx.TimeoutException):
        return ERROR_TIMEOUT
    if isinstance(exc, httpx.HTTPStatusError):
        return code_for_status(exc.response.status_code)
    if isinstance(exc, httpx.TransportError):
        return ERROR_TRANSIENT
    msg = str(exc).lower()
    if "rate" in msg or "429" in msg:
        return ERROR_RATE_LIMIT
    if "timeout" in msg:
        return ERROR_TIMEOUT
    if "not found" in msg or "404" in msg:
        return ERROR_NOT_FOUND
    if "upstream" in msg or "5xx" in msg:
        return ERROR_UPSTREAM
    if "network" in msg or "connection" in exc.__class__.__name__.lower():
        return ERROR_TRANSIENT
    return ERROR_UNKNOWN
