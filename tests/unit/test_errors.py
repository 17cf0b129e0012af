import httpx
import pytest
from splay_bridge.runtime.errors import (
    ERROR_FORMAT,
    ERROR_NOT_FOUND,
    ERROR_RATE_LIMIT,
    ERROR_TIMEOUT,
    ERROR_TRANSIENT,
    ERROR_UNKNOWN,
    ERROR_UPSTREAM,
    FormatError,
    ProcedureNotFound,
    TransportError,
    UnknownComponentError,
    classify_error,
    code_for_status,
)


@pytest.mark.parametrize("status,code", [
    (404, ERROR_NOT_FOUND),
    (422, ERROR_FORMAT),
    (429, ERROR_RATE_LIMIT),
    (504, ERROR_TIMEOUT),
    (502, ERROR_UPSTREAM),
])
def test_code_for_status(status, code):
    assert code_for_status(status) == code


def test_classify_bridge_errors_by_code():
    assert classify_error(ProcedureNotFound(["ui", "x"])) == ERROR_NOT_FOUND
    assert classify_error(FormatError("bad")) == ERROR_FORMAT
    assert classify_error(TransportError("boom", code=ERROR_UPSTREAM)) == ERROR_UPSTREAM


def test_classify_httpx_errors():
    req = httpx.Request("POST", "http://test/v1/rpc/x")
    assert classify_error(httpx.ReadTimeout("slow", request=req)) == ERROR_TIMEOUT
    assert classify_error(httpx.ConnectError("refused", request=req)) == ERROR_TRANSIENT
    resp = httpx.Response(429, request=req)
    assert classify_error(httpx.HTTPStatusError("429", request=req, response=resp)) == ERROR_RATE_LIMIT


def test_classify_by_message():
    assert classify_error(RuntimeError("upstream exploded")) == ERROR_UPSTREAM
    assert classify_error(RuntimeError("something odd")) == ERROR_UNKNOWN


def test_procedure_not_found_message():
    err = ProcedureNotFound(["ui", "missing"])
    assert err.status == 404
    assert "ui.missing" in str(err)


def test_unknown_component_message_names_type_and_path():
    assert "'ghost' at 0/2" in str(UnknownComponentError("ghost", [0, 2]))
    assert "<root>" in str(UnknownComponentError("ghost", ()))
