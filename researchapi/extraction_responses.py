"""Request and response shapes for the extraction endpoints."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

_DONE = "done"
_FAILED = "failed"


def _text(value: Any) -> str:
    return str(value.value) if isinstance(value, Enum) else str(value)


@dataclass(frozen=True)
class SubmitExtractionRequest:
    """The body of a submit request; every field is required and non-empty."""

    source_type: str
    source_id: str
    pdf_path: str

    @classmethod
    def from_json(cls, payload: Mapping[str, Any] | str | bytes) -> SubmitExtractionRequest:
        """Bind a JSON body, raising ValueError when it is not acceptable."""
        if isinstance(payload, (str, bytes, bytearray)):
            try:
                payload = json.loads(payload)
            except (ValueError, UnicodeDecodeError) as exc:
                raise ValueError(f"malformed json: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise ValueError("request body must be a json object")
        values: dict[str, str] = {}
        for name in ("source_type", "source_id", "pdf_path"):
            value = payload.get(name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"field {name} must be a string")
            if not value:
                raise ValueError(f"field {name} is required")
            values[name] = value
        return cls(**values)


@dataclass(frozen=True)
class MetadataDTO:
    """Metadata of a finished extraction artifact."""

    content_type: str
    word_count: int

    def to_dict(self) -> dict[str, Any]:
        return {"content_type": self.content_type, "word_count": self.word_count}


@dataclass(frozen=True)
class ExtractionStatusResponse:
    """Status of an extraction; artifact or failure fields appear only when set."""

    id: str
    source_type: str
    source_id: str
    status: str
    title: str = ""
    body_markdown: str = ""
    metadata: MetadataDTO | None = None
    failure_reason: str = ""
    failure_message: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "source_type": self.source_type,
            "source_id": self.source_id,
            "status": self.status,
        }
        if self.title:
            out["title"] = self.title
        if self.body_markdown:
            out["body_markdown"] = self.body_markdown
        if self.metadata is not None:
            out["metadata"] = self.metadata.to_dict()
        if self.failure_reason:
            out["failure_reason"] = self.failure_reason
        if self.failure_message:
            out["failure_message"] = self.failure_message
        return out


def to_extraction_status_response(extraction: Any) -> ExtractionStatusResponse:
    """Map an extraction record to its wire shape, filling branches by status."""
    status = _text(extraction.status)
    title = body = reason = message = ""
    metadata = None

    artifact = getattr(extraction, "artifact", None)
    if status == _DONE and artifact is not None:
        title = artifact.title
        body = artifact.body_markdown
        metadata = MetadataDTO(
            content_type=artifact.metadata.content_type,
            word_count=artifact.metadata.word_count,
        )

    failure = getattr(extraction, "failure", None)
    if status == _FAILED and failure is not None:
        reason = _text(failure.reason)
        message = failure.message

    return ExtractionStatusResponse(
        id=extraction.id,
        source_type=extraction.source_type,
        source_id=extraction.source_id,
        status=status,
        title=title,
        body_markdown=body,
        metadata=metadata,
        failure_reason=reason,
        failure_message=message,
    )