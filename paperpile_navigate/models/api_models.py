"""Pydantic models for arXiv and Semantic Scholar API responses."""
from typing import Optional, List
from pydantic import BaseModel, Field


class ArxivPaper(BaseModel):
    """Paper metadata parsed from an arXiv Atom entry."""

    id: str
    title: str
    summary: str = ""
    authors: List[str] = Field(default_factory=list)
    published: str = ""
    updated: str = ""
    categories: List[str] = Field(default_factory=list)
    pdf_url: str = ""
    abs_url: str = ""
    doi: Optional[str] = None
    journal_ref: Optional[str] = None


class ExternalIds(BaseModel):
    """External paper identifiers."""

    ArXiv: Optional[str] = None
    DOI: Optional[str] = None
    CorpusId: Optional[int] = None


class ReferencedPaper(BaseModel):
    """Cited paper as returned by the references endpoint."""

    paperId: Optional[str] = None
    externalIds: Optional[ExternalIds] = None


class ReferenceItem(BaseModel):
    """One entry of a Semantic Scholar reference list."""

    citedPaper: Optional[ReferencedPaper] = None
