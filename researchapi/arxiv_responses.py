"""Wire shapes for the arXiv fetch endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Protocol, Sequence

from researchapi.envelope import _rfc3339


class _PaperEntry(Protocol):
    source: str
    source_id: str
    version: str
    title: str
    authors: Sequence[str]
    abstract: str
    primary_category: str
    categories: Sequence[str]
    submitted_at: datetime
    updated_at: datetime
    pdf_url: str
    abs_url: str


class _FetchResult(Protocol):
    entry: _PaperEntry
    is_new: bool


@dataclass(frozen=True)
class EntryResponse:
    """One fetched paper, with whether persistence inserted it."""

    source: str
    source_id: str
    title: str
    abstract: str
    primary_category: str
    submitted_at: datetime
    updated_at: datetime
    pdf_url: str
    abs_url: str
    is_new: bool
    version: str = ""
    authors: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"source": self.source, "source_id": self.source_id}
        if self.version:
            out["version"] = self.version
        out.update(
            title=self.title,
            authors=list(self.authors),
            abstract=self.abstract,
            primary_category=self.primary_category,
            categories=list(self.categories),
            submitted_at=_rfc3339(self.submitted_at),
            updated_at=_rfc3339(self.updated_at),
            pdf_url=self.pdf_url,
            abs_url=self.abs_url,
            is_new=self.is_new,
        )
        return out


@dataclass(frozen=True)
class FetchResponse:
    """Top-level body of a fetch: entries, their count and the fetch time."""

    entries: list[EntryResponse]
    count: int
    fetched_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": [entry.to_dict() for entry in self.entries],
            "count": self.count,
            "fetched_at": _rfc3339(self.fetched_at),
        }


def to_fetch_response(results: Iterable[_FetchResult] | None, fetched_at: datetime) -> FetchResponse:
    """Map fetch results into the wire shape, keeping their order."""
    entries = [
        EntryResponse(
            source=r.entry.source,
            source_id=r.entry.source_id,
            version=r.entry.version,
            title=r.entry.title,
            authors=list(r.entry.authors),
            abstract=r.entry.abstract,
            primary_category=r.entry.primary_category,
            categories=list(r.entry.categories),
            submitted_at=r.entry.submitted_at,
            updated_at=r.entry.updated_at,
            pdf_url=r.entry.pdf_url,
            abs_url=r.entry.abs_url,
            is_new=r.is_new,
        )
        for r in results or ()
    ]
    return FetchResponse(entries=entries, count=len(entries), fetched_at=fetched_at)