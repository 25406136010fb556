"""JSON response envelopes shared by every endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


def _rfc3339(moment: datetime) -> str:
    """Render a datetime as RFC 3339 with trailing fractional zeros trimmed."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.replace(microsecond=0, tzinfo=None).isoformat()
    if moment.microsecond:
        text += f".{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset()
    if not offset:
        return text + "Z"
    seconds = int(offset.total_seconds())
    sign = "+" if seconds >= 0 else "-"
    hours, remainder = divmod(abs(seconds), 3600)
    return f"{text}{sign}{hours:02d}:{remainder // 60:02d}"


def _jsonable(value: Any) -> Any:
    """Convert response objects into plain JSON-ready values."""
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, datetime):
        return _rfc3339(value)
    return value


@dataclass(frozen=True)
class Meta:
    """Pagination metadata attached to a data envelope."""

    next_cursor: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"next_cursor": self.next_cursor} if self.next_cursor else {}


@dataclass(frozen=True)
class ErrorBody:
    """The error object carried by an error envelope."""

    code: int
    message: str
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            out["details"] = _jsonable(self.details)
        return out


@dataclass(frozen=True)
class Envelope:
    """Top-level response body: data, optional meta, or an error."""

    data: Any = None
    meta: Meta | None = None
    error: ErrorBody | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.data is not None:
            out["data"] = _jsonable(self.data)
        if self.meta is not None:
            out["meta"] = self.meta.to_dict()
        if self.error is not None:
            out["error"] = self.error.to_dict()
        return out


def data(value: Any) -> Envelope:
    """Wrap a successful payload."""
    return Envelope(data=value)


def data_with_meta(value: Any, meta: Meta) -> Envelope:
    """Wrap a successful payload together with pagination metadata."""
    return Envelope(data=value, meta=meta)


def err(code: int, message: str) -> Envelope:
    """Build an error envelope."""
    return Envelope(error=ErrorBody(code=code, message=message))