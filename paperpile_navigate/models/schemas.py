"""Pydantic request/response models for the HTTP surface and batch import."""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field

from paperpile_navigate.utils.config import settings


# ========================================
# Similarity & embedding
# ========================================

class CandidatePaper(BaseModel):
    id: Any
    title: str = ""
    summary: str = ""


class SimilarityRequest(BaseModel):
    papers: List[CandidatePaper]
    threshold: float = Field(default_factory=lambda: settings.similarity_threshold, ge=0, le=1)
    generation: Optional[int] = None


class WorldlineMatch(BaseModel):
    worldlineId: int
    worldlineName: str
    worldlineColor: str
    score: float


class SimilarityResult(BaseModel):
    paperId: Any
    matches: List[WorldlineMatch]


class SimilarityResponse(BaseModel):
    results: List[SimilarityResult]
    generation: Optional[int] = None


class EmbeddingPaper(BaseModel):
    id: Any
    title: str = ""
    summary: str = ""
    categories: Any = None


class EmbeddingRequest(BaseModel):
    papers: List[EmbeddingPaper]


class EmbeddingResponse(BaseModel):
    positions: Dict[str, float]


# ========================================
# Batch import
# ========================================

class NewWorldline(BaseModel):
    # at least one non-blank character
    name: str = Field(pattern=r"\S")
    color: str = Field(default_factory=lambda: settings.default_worldline_color)


class BatchImportRequest(BaseModel):
    """
    Batch import body.

    Accepts both the multi-worldline shape (worldline_ids, new_worldlines)
    and the single-worldline shape (worldline_id, worldline_name,
    worldline_color) older clients send.
    """

    arxiv_ids: Optional[List[str]] = None
    worldline_ids: List[int] = Field(default_factory=list)
    new_worldlines: List[NewWorldline] = Field(default_factory=list)
    worldline_id: Optional[int] = None
    worldline_name: Optional[str] = None
    worldline_color: Optional[str] = None
    tag_ids: List[int] = Field(default_factory=list)

    def target_worldline_ids(self) -> List[int]:
        ids = list(self.worldline_ids)
        if self.worldline_id is not None and self.worldline_id not in ids:
            ids.append(self.worldline_id)
        return ids

    def worldlines_to_create(self) -> List[NewWorldline]:
        created = list(self.new_worldlines)
        if self.worldline_id is None and self.worldline_name and self.worldline_name.strip():
            created.append(NewWorldline(
                name=self.worldline_name.strip(),
                color=self.worldline_color or settings.default_worldline_color,
            ))
        return created


class BatchImportResult(BaseModel):
    """Outcome of a batch import; always fully populated, even on errors."""

    success: bool = True
    papers_added: int = 0
    citations_created: int = 0
    worldline_ids: List[int] = Field(default_factory=list)
    tags_applied: int = 0
    errors: List[str] = Field(default_factory=list)

    @property
    def worldline_id(self) -> Optional[int]:
        return self.worldline_ids[0] if self.worldline_ids else None


# ========================================
# Citations, worldlines, papers, tags
# ========================================

class CitationRequest(BaseModel):
    citing_paper_id: Optional[int] = None
    cited_paper_id: Optional[int] = None


class WorldlineRequest(BaseModel):
    name: Optional[str] = None
    color: str = Field(default_factory=lambda: settings.default_worldline_color)


class WorldlinePaperRequest(BaseModel):
    paper_id: int
    position: int = 0


class PaperRequest(BaseModel):
    arxiv_id: Optional[str] = None
    title: Optional[str] = None
    summary: str = ""
    authors: Any = None
    published: str = ""
    updated: str = ""
    categories: Any = None
    pdf_url: str = ""
    abs_url: str = ""
    doi: Optional[str] = None
    journal_ref: Optional[str] = None


class StatusRequest(BaseModel):
    status: str


class TagRequest(BaseModel):
    name: Optional[str] = None
    color: str = Field(default_factory=lambda: settings.default_tag_color)


class PaperTagRequest(BaseModel):
    tag_id: int
