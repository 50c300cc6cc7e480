"""Typed contracts shared by API handlers and Python interfaces."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from blog_gen.core.content_schema import ContentIssue, TocEntry


class ContractModel(BaseModel):
    """Base model config used by all API contracts."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class HealthResponse(ContractModel):
    """Simple health payload used by probes."""

    status: Literal["ok"] = "ok"
    service: str = "blog_gen"
    documents: int = Field(ge=0)


class TocEntryResponse(ContractModel):
    """One heading of a rendered document's table of contents."""

    level: int = Field(ge=1, le=6)
    text: str
    anchor: str
    children: list[TocEntryResponse] = Field(default_factory=list)

    @classmethod
    def from_entry(cls, entry: TocEntry) -> TocEntryResponse:
        return cls(
            level=entry.level,
            text=entry.text,
            anchor=entry.anchor,
            children=[cls.from_entry(child) for child in entry.children],
        )


class IssueResponse(ContractModel):
    """A recovered loading or rendering problem."""

    code: str
    message: str

    @classmethod
    def from_issue(cls, issue: ContentIssue) -> IssueResponse:
        return cls(code=issue.code, message=issue.message)


class DocumentSummaryResponse(ContractModel):
    """Projected listing record; only requested fields are set."""

    path: str | None = None
    title: str | None = None
    author: str | None = None
    created_at: str | None = None
    description: str | None = None
    tags: list[str] | None = None


class RenderedDocumentResponse(ContractModel):
    """A document rendered to HTML with its table of contents."""

    path: str
    title: str
    author: str
    created_at: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    html: str
    toc: list[TocEntryResponse] = Field(default_factory=list)
    issues: list[IssueResponse] = Field(default_factory=list)
