from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from paperpile_navigate.api.arxiv import ArxivClient
from paperpile_navigate.api.semantic_scholar import SemanticScholarClient
from paperpile_navigate.backend.deps import (
    get_arxiv_client,
    get_batch_import_task,
    get_citation_repo,
    get_paper_repo,
    get_s2_client,
    get_worldline_repo,
)
from paperpile_navigate.database.repositories import (
    CitationRepository,
    PaperRepository,
    WorldlineRepository,
)
from paperpile_navigate.models.schemas import (
    BatchImportRequest,
    CitationRequest,
    EmbeddingRequest,
    EmbeddingResponse,
    SimilarityRequest,
    SimilarityResponse,
    WorldlinePaperRequest,
    WorldlineRequest,
)
from paperpile_navigate.tasks.batch_import import BatchImportTask
from paperpile_navigate.tasks.citation_graph_construction import CitationGraphConstructionTask
from paperpile_navigate.tasks.topic_embedding import TopicEmbeddingTask
from paperpile_navigate.tasks.worldline_similarity import WorldlineSimilarityTask
from paperpile_navigate.utils.errors import APIError, NotFoundError
from paperpile_navigate.utils.id_mapper import IDMapper
from paperpile_navigate.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/worldlines", tags=["worldlines"])


def _require_worldline(repo: WorldlineRepository, worldline_id: int) -> dict:
    worldline = repo.get(worldline_id)
    if worldline is None:
        raise NotFoundError("Worldline not found")
    return worldline


# ============== Similarity & layout ==============

@router.post("/similarity", response_model=SimilarityResponse)
def check_similarity(
    body: SimilarityRequest,
    worldline_repo: WorldlineRepository = Depends(get_worldline_repo),
):
    """Score browsed papers against every non-empty worldline."""
    results = WorldlineSimilarityTask().execute(
        [p.model_dump() for p in body.papers],
        worldline_repo.list_with_papers(),
        body.threshold,
    )
    return SimilarityResponse(results=results, generation=body.generation)


@router.post("/embedding", response_model=EmbeddingResponse)
def compute_embedding(body: EmbeddingRequest):
    """Topic-axis positions for an arbitrary set of papers."""
    positions = TopicEmbeddingTask().execute([p.model_dump() for p in body.papers])
    return EmbeddingResponse(positions={str(k): v for k, v in positions.items()})


# ============== Batch import ==============

@router.post("/batch-import", status_code=201)
async def batch_import(
    body: BatchImportRequest,
    task: BatchImportTask = Depends(get_batch_import_task),
):
    """Import papers, infer citations among them, assign worldlines and tags."""
    if not body.arxiv_ids:
        raise HTTPException(status_code=400, detail="arxiv_ids array is required")

    result = await task.execute(
        body.arxiv_ids,
        worldline_ids=body.target_worldline_ids(),
        new_worldlines=body.worldlines_to_create(),
        tag_ids=body.tag_ids,
    )
    # worldline_id kept for single-worldline clients
    return {**result.model_dump(), "worldline_id": result.worldline_id}


# ============== Citations ==============

@router.get("/citations")
def list_citations(citation_repo: CitationRepository = Depends(get_citation_repo)):
    return citation_repo.list_all()


@router.post("/citations", status_code=201)
def add_citation(
    body: CitationRequest,
    citation_repo: CitationRepository = Depends(get_citation_repo),
    paper_repo: PaperRepository = Depends(get_paper_repo),
):
    """Add a directed edge; an existing edge is reported as success."""
    if not body.citing_paper_id or not body.cited_paper_id:
        raise HTTPException(
            status_code=400, detail="citing_paper_id and cited_paper_id are required"
        )
    if body.citing_paper_id != body.cited_paper_id:
        for paper_id in (body.citing_paper_id, body.cited_paper_id):
            if paper_repo.get_by_id(paper_id) is None:
                raise HTTPException(status_code=404, detail=f"Paper not found: {paper_id}")

    created = citation_repo.add(body.citing_paper_id, body.cited_paper_id)
    return {"success": True, "created": created}


@router.delete("/citations")
def remove_citation(
    body: CitationRequest,
    citation_repo: CitationRepository = Depends(get_citation_repo),
):
    if not body.citing_paper_id or not body.cited_paper_id:
        raise HTTPException(
            status_code=400, detail="citing_paper_id and cited_paper_id are required"
        )
    citation_repo.remove(body.citing_paper_id, body.cited_paper_id)
    return {"success": True}


@router.get("/citations/discover/{arxiv_id:path}")
async def discover_citations(
    arxiv_id: str,
    s2_client: SemanticScholarClient = Depends(get_s2_client),
):
    """Citing and referenced papers from Semantic Scholar."""
    arxiv_id = IDMapper.normalize_arxiv_id(arxiv_id)
    citations = references = None

    try:
        citations = await s2_client.get_citations(arxiv_id)
    except APIError as e:
        logger.warning(f"Citation lookup failed for {arxiv_id}: {e}")
    try:
        references = await s2_client.get_references(arxiv_id)
    except APIError as e:
        logger.warning(f"Reference lookup failed for {arxiv_id}: {e}")

    if citations is None and references is None:
        raise HTTPException(status_code=502, detail="Semantic Scholar API unavailable")
    return {"citations": citations or [], "references": references or []}


@router.post("/citations/import", status_code=201)
async def import_citation(
    arxiv_id: Optional[str] = Body(None),
    source_paper_id: Optional[int] = Body(None),
    direction: Optional[str] = Body(None),
    paper_repo: PaperRepository = Depends(get_paper_repo),
    citation_repo: CitationRepository = Depends(get_citation_repo),
    arxiv_client: ArxivClient = Depends(get_arxiv_client),
):
    """
    Save a paper by arXiv ID and link it to a library paper.

    direction "cites": the source paper cites the imported one.
    direction "cited_by": the imported paper cites the source paper.
    """
    if not arxiv_id or not source_paper_id or direction not in ("cites", "cited_by"):
        raise HTTPException(
            status_code=400,
            detail="arxiv_id, source_paper_id, and direction are required",
        )
    if paper_repo.get_by_id(source_paper_id) is None:
        raise HTTPException(status_code=404, detail="Source paper not found")

    arxiv_id = IDMapper.normalize_arxiv_id(arxiv_id)
    paper = paper_repo.get_by_arxiv_id(arxiv_id)
    if paper is None:
        try:
            fetched = await arxiv_client.get_paper(arxiv_id)
        except APIError as e:
            logger.error(f"arXiv lookup failed for {arxiv_id}: {e}")
            raise HTTPException(status_code=502, detail="arXiv API unavailable")
        if not fetched:
            raise HTTPException(status_code=404, detail="Paper not found on arXiv")
        paper = paper_repo.get_by_id(paper_repo.upsert({**fetched, "arxiv_id": arxiv_id}))

    if direction == "cites":
        citation_repo.add(source_paper_id, paper["id"])
    else:
        citation_repo.add(paper["id"], source_paper_id)
    return {"paper": paper, "success": True}


@router.get("/related-papers/{arxiv_id:path}")
def related_papers(
    arxiv_id: str,
    worldline_repo: WorldlineRepository = Depends(get_worldline_repo),
):
    """Papers sharing at least one worldline with the given paper."""
    return worldline_repo.related_papers(IDMapper.normalize_arxiv_id(arxiv_id))


# ============== Worldlines ==============

@router.get("")
def list_worldlines(worldline_repo: WorldlineRepository = Depends(get_worldline_repo)):
    return worldline_repo.list_all()


@router.post("", status_code=201)
def create_worldline(
    body: WorldlineRequest,
    worldline_repo: WorldlineRepository = Depends(get_worldline_repo),
):
    if not body.name or not body.name.strip():
        raise HTTPException(status_code=400, detail="name is required")
    worldline_id = worldline_repo.create(body.name, body.color)
    return {"id": worldline_id, "name": body.name.strip(), "color": body.color}


@router.put("/{worldline_id}")
def update_worldline(
    worldline_id: int,
    body: WorldlineRequest,
    worldline_repo: WorldlineRepository = Depends(get_worldline_repo),
):
    if not body.name or not body.name.strip():
        raise HTTPException(status_code=400, detail="name is required")
    if not worldline_repo.update(worldline_id, body.name, body.color):
        raise NotFoundError("Worldline not found")
    return {"success": True}


@router.delete("/{worldline_id}")
def delete_worldline(
    worldline_id: int,
    worldline_repo: WorldlineRepository = Depends(get_worldline_repo),
):
    if not worldline_repo.delete(worldline_id):
        raise NotFoundError("Worldline not found")
    return {"success": True}


@router.get("/{worldline_id}/papers")
def list_worldline_papers(
    worldline_id: int,
    worldline_repo: WorldlineRepository = Depends(get_worldline_repo),
):
    _require_worldline(worldline_repo, worldline_id)
    return worldline_repo.list_papers(worldline_id)


@router.post("/{worldline_id}/papers", status_code=201)
def add_worldline_paper(
    worldline_id: int,
    body: WorldlinePaperRequest,
    worldline_repo: WorldlineRepository = Depends(get_worldline_repo),
    paper_repo: PaperRepository = Depends(get_paper_repo),
):
    """Add a paper, or move it if it is already a member."""
    _require_worldline(worldline_repo, worldline_id)
    if paper_repo.get_by_id(body.paper_id) is None:
        raise NotFoundError("Paper not found")
    worldline_repo.add_paper(worldline_id, body.paper_id, body.position)
    return {"success": True}


@router.delete("/{worldline_id}/papers/{paper_id}")
def remove_worldline_paper(
    worldline_id: int,
    paper_id: int,
    worldline_repo: WorldlineRepository = Depends(get_worldline_repo),
):
    worldline_repo.remove_paper(worldline_id, paper_id)
    return {"success": True}


@router.get("/{worldline_id}/embedding", response_model=EmbeddingResponse)
def worldline_embedding(
    worldline_id: int,
    worldline_repo: WorldlineRepository = Depends(get_worldline_repo),
):
    """Topic-axis positions of a worldline's members, keyed by paper id."""
    _require_worldline(worldline_repo, worldline_id)
    positions = TopicEmbeddingTask().execute(worldline_repo.list_papers(worldline_id))
    return EmbeddingResponse(positions={str(k): v for k, v in positions.items()})


@router.get("/{worldline_id}/graph")
def worldline_graph(
    worldline_id: int,
    worldline_repo: WorldlineRepository = Depends(get_worldline_repo),
    citation_repo: CitationRepository = Depends(get_citation_repo),
):
    """Citation graph among a worldline's members."""
    _require_worldline(worldline_repo, worldline_id)
    papers = worldline_repo.list_papers(worldline_id)
    citations = citation_repo.list_among(p["id"] for p in papers)
    return CitationGraphConstructionTask().execute(papers, citations)
