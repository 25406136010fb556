"""Wire shapes for the paper catalogue read endpoints."""

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


@dataclass(frozen=True)
class PaperResponse:
    """One persisted paper."""

    source: str
    source_id: str
    title: str
    abstract: str
    primary_category: str
    submitted_at: datetime
    updated_at: datetime
    pdf_url: str
    abs_url: str
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
        )
        return out


@dataclass(frozen=True)
class PaperListResponse:
    """The full catalogue listing."""

    papers: list[PaperResponse]
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"papers": [paper.to_dict() for paper in self.papers], "count": self.count}


def to_paper_response(entry: _PaperEntry) -> PaperResponse:
    """Map a single catalogue entry into its wire shape."""
    return PaperResponse(
        source=entry.source,
        source_id=entry.source_id,
        version=entry.version,
        title=entry.title,
        authors=list(entry.authors),
        abstract=entry.abstract,
        primary_category=entry.primary_category,
        categories=list(entry.categories),
        submitted_at=entry.submitted_at,
        updated_at=entry.updated_at,
        pdf_url=entry.pdf_url,
        abs_url=entry.abs_url,
    )


def to_paper_list_response(entries: Iterable[_PaperEntry] | None) -> PaperListResponse:
    """Map entries into the list shape, keeping their order."""
    papers = [to_paper_response(entry) for entry in entries or ()]
    return PaperListResponse(papers=papers, count=len(papers))