import logging
import uuid

import pytest
from starlette.responses import PlainTextResponse
from starlette.routing import Route, Router
from starlette.testclient import TestClient

from researchapi.middleware import (
    API_TOKEN_HEADER,
    REQUEST_ID_HEADER,
    APITokenMiddleware,
    ErrorEnvelopeMiddleware,
    HTTPError,
    LoggerMiddleware,
    RecoveryMiddleware,
    RequestIDMiddleware,
    as_http_error,
)

TEST_TOKEN = "token"


async def _ok(request):
    return PlainTextResponse("ok")


async def _created(request):
    return PlainTextResponse("made", status_code=201)


async def _not_found(request):
    raise HTTPError(404, "not found")


async def _wrapped(request):
    raise LookupError("row missing") from HTTPError(409, "conflict")


async def _boom(request):
    raise RuntimeError("kaboom")


async def _echo_id(request):
    return PlainTextResponse(request.state.request_id)


ROUTES = [
    Route("/ok", _ok),
    Route("/created", _created),
    Route("/missing", _not_found),
    Route("/wrapped", _wrapped),
    Route("/boom", _boom),
    Route("/id", _echo_id),
]


def _router():
    return Router(routes=ROUTES)


def assert_error_envelope(resp, want_code):
    body = resp.json()
    error = body["error"]
    assert isinstance(error, dict)
    assert error["code"] == want_code
    assert isinstance(error["message"], str) and error["message"] != ""
    assert "data" not in body


@pytest.mark.parametrize("headers", [{}, {API_TOKEN_HEADER: "wrong-token"}])
def test_api_token_rejects(headers):
    client = TestClient(APITokenMiddleware(_router(), expected=TEST_TOKEN))
    resp = client.get("/ok", headers=headers)
    assert resp.status_code == 401
    assert_error_envelope(resp, 401)
    assert resp.json()["error"]["message"] == "invalid or missing api token"


def test_api_token_accepts_valid():
    client = TestClient(APITokenMiddleware(_router(), expected=TEST_TOKEN))
    resp = client.get("/ok", headers={API_TOKEN_HEADER: TEST_TOKEN})
    assert resp.status_code == 200
    assert resp.text == "ok"


def test_error_envelope_renders_http_error():
    client = TestClient(ErrorEnvelopeMiddleware(_router()))
    resp = client.get("/missing")
    assert resp.status_code == 404
    assert resp.json() == {"error": {"code": 404, "message": "not found"}}


def test_error_envelope_finds_wrapped_http_error():
    client = TestClient(ErrorEnvelopeMiddleware(_router()))
    resp = client.get("/wrapped")
    assert resp.status_code == 409
    assert_error_envelope(resp, 409)


def test_error_envelope_unknown_error_is_500():
    client = TestClient(ErrorEnvelopeMiddleware(_router()))
    resp = client.get("/boom")
    assert resp.status_code == 500
    assert resp.json() == {"error": {"code": 500, "message": "internal server error"}}


def test_error_envelope_passes_success_through():
    client = TestClient(ErrorEnvelopeMiddleware(_router()))
    resp = client.get("/ok")
    assert resp.status_code == 200
    assert resp.text == "ok"


def test_recovery_logs_and_returns_500(caplog):
    logger = logging.getLogger("test.recovery")
    caplog.set_level(logging.ERROR, logger="test.recovery")
    client = TestClient(RecoveryMiddleware(_router(), logger=logger))
    resp = client.get("/boom")
    assert resp.status_code == 500
    assert_error_envelope(resp, 500)
    records = [r for r in caplog.records if r.name == "test.recovery"]
    assert len(records) == 1
    assert records[0].getMessage() == "panic recovered"
    assert records[0].panic == "kaboom"


def test_request_id_generated_when_absent():
    client = TestClient(RequestIDMiddleware(_router()))
    resp = client.get("/id")
    header = resp.headers[REQUEST_ID_HEADER]
    assert str(uuid.UUID(header)) == header
    assert resp.text == header


def test_request_id_propagated_when_present():
    client = TestClient(RequestIDMiddleware(_router()))
    resp = client.get("/id", headers={REQUEST_ID_HEADER: "req-1"})
    assert resp.headers[REQUEST_ID_HEADER] == "req-1"
    assert resp.text == "req-1"


def test_logger_records_request_fields(caplog):
    logger = logging.getLogger("test.http")
    caplog.set_level(logging.INFO, logger="test.http")
    client = TestClient(RequestIDMiddleware(LoggerMiddleware(_router(), logger=logger)))
    resp = client.get("/created", headers={REQUEST_ID_HEADER: "req-42"})
    assert resp.status_code == 201
    records = [r for r in caplog.records if r.name == "test.http"]
    assert len(records) == 1
    record = records[0]
    assert record.method == "GET"
    assert record.path == "/created"
    assert record.status == 201
    assert record.request_id == "req-42"
    assert record.duration_ms >= 0
    assert record.getMessage().startswith("http ")


def test_as_http_error_direct_and_chained():
    sentinel = HTTPError(502, "upstream bad status")
    assert as_http_error(sentinel) is sentinel
    try:
        try:
            raise sentinel
        except HTTPError:
            raise ValueError("context")
    except ValueError as exc:
        assert as_http_error(exc) is sentinel


def test_as_http_error_none_for_plain_errors():
    assert as_http_error(ValueError("x")) is None
    assert as_http_error(None) is None


def test_http_error_str_includes_cause():
    error = HTTPError(400, "invalid json body", ValueError("eof"))
    assert str(error) == "invalid json body: eof"
    assert error.code == 400