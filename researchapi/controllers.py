"""HTTP handlers for sources, arXiv fetches, papers and extractions."""

from __future__ import annotations

import dataclasses
import inspect
import json
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from researchapi.arxiv_responses import to_fetch_response
from researchapi.envelope import data
from researchapi.extraction_responses import (
    ExtractionStatusResponse,
    SubmitExtractionRequest,
    to_extraction_status_response,
)
from researchapi.middleware import HTTPError
from researchapi.paper_responses import to_paper_list_response, to_paper_response

_OK = 200
_CREATED = 201
_ACCEPTED = 202
_NO_CONTENT = 204
_BAD_REQUEST = 400


class Clock(Protocol):
    def now(self) -> datetime: ...


async def _resolve(value: Any) -> Any:
    """Await the value when a collaborator is asynchronous."""
    if inspect.isawaitable(value):
        return await value
    return value


def _respond(payload: Any, status: int = _OK) -> JSONResponse:
    return JSONResponse(data(payload).to_dict(), status_code=status)


def _text(value: Any) -> str:
    return str(value.value) if isinstance(value, Enum) else str(value)


def _plain(value: Any) -> Any:
    if callable(getattr(value, "to_dict", None)):
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


async def _json_object(request: Request) -> dict[str, Any]:
    raw = await request.body()
    try:
        payload = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise HTTPError(_BAD_REQUEST, "invalid json body", exc) from exc
    if not isinstance(payload, dict):
        raise HTTPError(_BAD_REQUEST, "invalid json body")
    return payload


class SourceController:
    """CRUD handlers for monitored sources."""

    def __init__(self, use_case: Any):
        self.use_case = use_case

    async def create(self, request: Request) -> Response:
        payload = await _json_object(request)
        source = await _resolve(self.use_case.create(payload))
        return _respond(_plain(source), _CREATED)

    async def list(self, request: Request) -> Response:
        sources = await _resolve(self.use_case.list())
        return _respond([_plain(source) for source in sources or ()])

    async def get(self, request: Request) -> Response:
        source = await _resolve(self.use_case.get(request.path_params["id"]))
        return _respond(_plain(source))

    async def update(self, request: Request) -> Response:
        payload = await _json_object(request)
        source = await _resolve(self.use_case.update(request.path_params["id"], payload))
        return _respond(_plain(source))

    async def delete(self, request: Request) -> Response:
        await _resolve(self.use_case.delete(request.path_params["id"]))
        return Response(status_code=_NO_CONTENT)


class ArxivController:
    """Triggers a fetch-and-persist cycle and stamps the fetch time."""

    def __init__(self, use_case: Any, clock: Clock):
        self.use_case = use_case
        self.clock = clock

    async def fetch(self, request: Request) -> Response:
        results = await _resolve(self.use_case.fetch())
        return _respond(to_fetch_response(results, self.clock.now()))


class PaperController:
    """Read-only handlers over the persisted paper catalogue."""

    def __init__(self, repo: Any):
        self.repo = repo

    async def get(self, request: Request) -> Response:
        source = request.path_params["source"]
        source_id = request.path_params["source_id"]
        entry = await _resolve(self.repo.find_by_key(source, source_id))
        return _respond(to_paper_response(entry))

    async def list(self, request: Request) -> Response:
        entries = await _resolve(self.repo.list())
        return _respond(to_paper_list_response(entries))


class ExtractionController:
    """Submit extraction jobs and report their status."""

    def __init__(self, use_case: Any):
        self.use_case = use_case

    async def submit(self, request: Request) -> Response:
        raw = await request.body()
        try:
            body = SubmitExtractionRequest.from_json(raw)
        except ValueError as exc:
            raise HTTPError(_BAD_REQUEST, "invalid request", exc) from exc
        result = await _resolve(self.use_case.submit(body))
        response = ExtractionStatusResponse(
            id=result.id,
            source_type=body.source_type,
            source_id=body.source_id,
            status=_text(result.status),
        )
        return _respond(response, _ACCEPTED)

    async def get(self, request: Request) -> Response:
        extraction = await _resolve(self.use_case.get(request.path_params["id"]))
        return _respond(to_extraction_status_response(extraction))