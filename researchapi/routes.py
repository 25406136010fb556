"""Route wiring for the /api surface and application assembly."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import BaseRoute, Mount, Route, Router

from researchapi.controllers import (
    ArxivController,
    Clock,
    ExtractionController,
    PaperController,
    SourceController,
)
from researchapi.envelope import data
from researchapi.middleware import (
    APITokenMiddleware,
    ErrorEnvelopeMiddleware,
    LoggerMiddleware,
    RecoveryMiddleware,
    RequestIDMiddleware,
)


class _SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


@dataclass
class SourceConfig:
    """Dependencies of the source endpoints."""

    use_case: Any = None


@dataclass
class ArxivConfig:
    """Dependencies of the arXiv fetch endpoint."""

    use_case: Any = None


@dataclass
class PaperConfig:
    """Dependencies of the paper catalogue endpoints."""

    repo: Any = None


@dataclass
class ExtractionConfig:
    """Dependencies of the extraction endpoints; the worker is kept for shutdown."""

    use_case: Any = None
    repo: Any = None
    worker: Any = None


@dataclass
class Deps:
    """Shared dependencies; routers append their routes to ``routes``."""

    routes: list[BaseRoute] = field(default_factory=list)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("researchapi"))
    clock: Clock = field(default_factory=_SystemClock)
    source: SourceConfig = field(default_factory=SourceConfig)
    arxiv: ArxivConfig = field(default_factory=ArxivConfig)
    paper: PaperConfig = field(default_factory=PaperConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)


async def _health(request: Request) -> Response:
    return JSONResponse(data({"status": "ok"}).to_dict())


def health_router(deps: Deps) -> None:
    deps.routes.append(Route("/health", _health, methods=["GET"]))


def source_router(deps: Deps) -> None:
    ctrl = SourceController(deps.source.use_case)
    deps.routes.extend(
        [
            Route("/sources", ctrl.create, methods=["POST"]),
            Route("/sources", ctrl.list, methods=["GET"]),
            Route("/sources/{id}", ctrl.get, methods=["GET"]),
            Route("/sources/{id}", ctrl.update, methods=["PATCH"]),
            Route("/sources/{id}", ctrl.delete, methods=["DELETE"]),
        ]
    )


def arxiv_router(deps: Deps) -> None:
    ctrl = ArxivController(deps.arxiv.use_case, deps.clock)
    deps.routes.append(Route("/arxiv/fetch", ctrl.fetch, methods=["GET"]))


def paper_router(deps: Deps) -> None:
    ctrl = PaperController(deps.paper.repo)
    deps.routes.extend(
        [
            Route("/papers", ctrl.list, methods=["GET"]),
            Route("/papers/{source}/{source_id}", ctrl.get, methods=["GET"]),
        ]
    )


def extraction_router(deps: Deps) -> None:
    ctrl = ExtractionController(deps.extraction.use_case)
    deps.routes.extend(
        [
            Route("/extractions", ctrl.submit, methods=["POST"]),
            Route("/extractions/{id}", ctrl.get, methods=["GET"]),
        ]
    )


def setup(deps: Deps) -> None:
    """Register every resource router."""
    health_router(deps)
    source_router(deps)
    arxiv_router(deps)
    paper_router(deps)
    extraction_router(deps)


def create_app(deps: Deps, api_token: str, logger: logging.Logger | None = None) -> Starlette:
    """Build the application: every router under an authenticated /api mount."""
    setup(deps)
    log = logger or deps.logger
    api = APITokenMiddleware(Router(routes=deps.routes), expected=api_token)
    return Starlette(
        routes=[Mount("/api", app=api)],
        middleware=[
            Middleware(RequestIDMiddleware),
            Middleware(LoggerMiddleware, logger=log),
            Middleware(RecoveryMiddleware, logger=log),
            Middleware(ErrorEnvelopeMiddleware),
        ],
    )