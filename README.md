# researchapi

The HTTP layer of a research monitor, built on Starlette. It gives you a
small JSON API for:

- **sources**: create, list, read, update and delete monitored sources;
- **arXiv fetches**: trigger a fetch-and-persist cycle and get back the
  fetched entries, each flagged with `is_new`;
- **papers**: read the persisted paper catalogue, as a whole list (in the
  order your repository returns it) or one paper by its `(source, source_id)`
  key;
- **extractions**: submit a PDF for extraction and poll its status;
- **health**: a liveness probe.

## Modules

| Module | Contents |
|--------|----------|
| `researchapi.envelope` | `Envelope`, `Meta`, `ErrorBody` and the helpers `data`, `data_with_meta`, `err` |
| `researchapi.middleware` | `HTTPError`, `as_http_error`, and the middleware classes `APITokenMiddleware`, `ErrorEnvelopeMiddleware`, `LoggerMiddleware`, `RecoveryMiddleware`, `RequestIDMiddleware` |
| `researchapi.arxiv_responses` | `EntryResponse`, `FetchResponse`, `to_fetch_response` |
| `researchapi.paper_responses` | `PaperResponse`, `PaperListResponse`, `to_paper_response`, `to_paper_list_response` |
| `researchapi.extraction_responses` | `SubmitExtractionRequest`, `MetadataDTO`, `ExtractionStatusResponse`, `to_extraction_status_response` |
| `researchapi.controllers` | `SourceController`, `ArxivController`, `PaperController`, `ExtractionController` |
| `researchapi.routes` | `Deps`, `SourceConfig`, `ArxivConfig`, `PaperConfig`, `ExtractionConfig`, the routers and `create_app` |

## Building the application

You supply the collaborators; the package wires them into routes. Each
collaborator method may be a plain function or a coroutine function; the
controllers await the result when it is awaitable.

| Config | Field | Methods the controllers call |
|--------|-------|------------------------------|
| `SourceConfig` | `use_case` | `create(payload)`, `list()`, `get(id)`, `update(id, payload)`, `delete(id)` |
| `ArxivConfig` | `use_case` | `fetch()` returning results with `.entry` and `.is_new` |
| `PaperConfig` | `repo` | `find_by_key(source, source_id)`, `list()` |
| `ExtractionConfig` | `use_case` | `submit(request)` returning an object with `.id` and `.status`; `get(id)` returning an extraction record |

`ExtractionConfig` also has `repo` and `worker` fields, which are kept only
for the caller's own use (for example, stopping a worker at shutdown).
`Deps` additionally carries `logger` (a `logging.Logger`), `clock` (any
object with `now()`, defaulting to the current UTC time) and `routes`, the
list the routers append to.

```python
from researchapi.routes import Deps, PaperConfig, create_app


class MemoryPapers:
    def __init__(self):
        self.entries = []

    def list(self):
        return self.entries

    def find_by_key(self, source, source_id):
        ...


app = create_app(Deps(paper=PaperConfig(repo=MemoryPapers())), api_token="token")
```

`create_app(deps, api_token, logger=None)` calls `setup(deps)`, which runs
`health_router`, `source_router`, `arxiv_router`, `paper_router` and
`extraction_router`, mounts all of them under `/api` behind
`APITokenMiddleware`, and returns a `Starlette` application. Every router is
registered; a route whose collaborator is left as `None` answers `500` when
called.

## Endpoints

Every route requires the `X-API-Token` header to equal the configured
token; a missing or wrong token yields `401` with
`"invalid or missing api token"`.

| Method | Path                                | Success |
|--------|-------------------------------------|---------|
| GET    | `/api/health`                       | 200     |
| POST   | `/api/sources`                      | 201     |
| GET    | `/api/sources`                      | 200     |
| GET    | `/api/sources/{id}`                 | 200     |
| PATCH  | `/api/sources/{id}`                 | 200     |
| DELETE | `/api/sources/{id}`                 | 204     |
| GET    | `/api/arxiv/fetch`                  | 200     |
| GET    | `/api/papers`                       | 200     |
| GET    | `/api/papers/{source}/{source_id}`  | 200     |
| POST   | `/api/extractions`                  | 202     |
| GET    | `/api/extractions/{id}`             | 200     |

Source bodies must be JSON objects, otherwise the answer is `400` with
`"invalid json body"`. Extraction submissions must be JSON objects with
non-empty string fields `source_type`, `source_id` and `pdf_path`, otherwise
the answer is `400` with `"invalid request"`. Source results that are
dataclasses are rendered field by field; datetimes anywhere in a response are
rendered as RFC 3339 strings.

## Response envelopes

Successful bodies are wrapped as `{"data": ...}`; failures as
`{"error": {"code": <status>, "message": "..."}}`.

```python
from researchapi.envelope import data, err
from researchapi.paper_responses import to_paper_list_response

data({"status": "ok"}).to_dict()
# {'data': {'status': 'ok'}}

err(404, "not found").to_dict()
# {'error': {'code': 404, 'message': 'not found'}}

to_paper_list_response([]).to_dict()
# {'papers': [], 'count': 0}
```

An empty catalogue or an empty fetch renders as an empty array
(`"papers": []`, `"entries": []`), never `null`. The fetch response carries
`entries`, `count` and `fetched_at`, stamped from the clock. A paper's
`version` is left out when empty.

Extraction status responses carry only `id`, `source_type`, `source_id` and
`status` while a job is pending or running. When the status is `done` and
an artifact is present they add `title`, `body_markdown` and a `metadata`
block (`content_type`, `word_count`); when it is `failed` and a failure is
present they add `failure_reason` and `failure_message`.

## Errors and middleware

Raise `HTTPError(code, message)` from a collaborator to choose the status
and message of the error envelope. `as_http_error` finds an `HTTPError`
anywhere in an exception's cause or context chain, so wrapped errors keep
their status. Any other exception becomes `500` with
`"internal server error"`.

`create_app` installs, from outermost inward:

1. `RequestIDMiddleware`: reuses the incoming `X-Request-ID` or generates a
   UUID, stores it as `request.state.request_id` and echoes it in the
   response header;
2. `LoggerMiddleware`: logs one `http` line per request with method, path,
   status, duration in milliseconds and request id;
3. `RecoveryMiddleware`: logs `"panic recovered"` and answers `500` for any
   exception that gets this far;
4. `ErrorEnvelopeMiddleware`: renders raised exceptions as error envelopes;

and, on the `/api` mount, `APITokenMiddleware`.

## What this package does not do

It has no storage, no arXiv client, no extraction engine or background
worker, and no command to start a server. Repositories, use cases and
workers come from your own code through `Deps`; the application returned by
`create_app` is a plain ASGI app to hand to the ASGI server of your choice.

## Tests

Install the `test` extra and run `pytest`.