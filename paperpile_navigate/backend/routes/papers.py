from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from paperpile_navigate.backend.deps import get_paper_repo, get_tag_repo, get_worldline_repo
from paperpile_navigate.database.repositories import (
    PaperRepository,
    TagRepository,
    WorldlineRepository,
)
from paperpile_navigate.models.schemas import PaperRequest, PaperTagRequest, StatusRequest
from paperpile_navigate.utils.errors import NotFoundError

router = APIRouter(prefix="/api/papers", tags=["papers"])


def _require_paper(repo: PaperRepository, paper_id: int) -> dict:
    paper = repo.get_by_id(paper_id)
    if paper is None:
        raise NotFoundError("Paper not found")
    return paper


@router.get("")
def list_papers(
    status: Optional[str] = Query(default=None),
    tag_id: Optional[int] = Query(default=None),
    paper_repo: PaperRepository = Depends(get_paper_repo),
):
    """Saved papers, newest first, optionally filtered by status or tag."""
    return paper_repo.list_saved(status=status, tag_id=tag_id)


@router.post("", status_code=201)
def save_paper(
    body: PaperRequest,
    response: Response,
    paper_repo: PaperRepository = Depends(get_paper_repo),
):
    """Save a paper; an already saved paper is returned unchanged with 200."""
    if not body.arxiv_id or not body.title:
        raise HTTPException(status_code=400, detail="arxiv_id and title are required")

    existing = paper_repo.get_by_arxiv_id(body.arxiv_id)
    if existing:
        response.status_code = 200
        return existing

    paper_id = paper_repo.upsert(body.model_dump())
    return paper_repo.get_by_id(paper_id)


@router.get("/{paper_id}")
def get_paper(
    paper_id: int,
    paper_repo: PaperRepository = Depends(get_paper_repo),
    worldline_repo: WorldlineRepository = Depends(get_worldline_repo),
):
    paper = _require_paper(paper_repo, paper_id)
    return {**paper, "worldlines": worldline_repo.memberships(paper_id)}


@router.patch("/{paper_id}/status")
def update_status(
    paper_id: int,
    body: StatusRequest,
    paper_repo: PaperRepository = Depends(get_paper_repo),
):
    if not paper_repo.update_status(paper_id, body.status):
        raise NotFoundError("Paper not found")
    return {"success": True}


@router.delete("/{paper_id}")
def delete_paper(paper_id: int, paper_repo: PaperRepository = Depends(get_paper_repo)):
    if not paper_repo.delete(paper_id):
        raise NotFoundError("Paper not found")
    return {"success": True}


# ============== Tags on papers ==============

@router.get("/{paper_id}/tags")
def list_paper_tags(
    paper_id: int,
    paper_repo: PaperRepository = Depends(get_paper_repo),
    tag_repo: TagRepository = Depends(get_tag_repo),
):
    _require_paper(paper_repo, paper_id)
    return tag_repo.list_for_paper(paper_id)


@router.post("/{paper_id}/tags", status_code=201)
def add_paper_tag(
    paper_id: int,
    body: PaperTagRequest,
    paper_repo: PaperRepository = Depends(get_paper_repo),
    tag_repo: TagRepository = Depends(get_tag_repo),
):
    _require_paper(paper_repo, paper_id)
    if tag_repo.get(body.tag_id) is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    tag_repo.add_to_paper(paper_id, body.tag_id)
    return {"success": True}


@router.delete("/{paper_id}/tags/{tag_id}")
def remove_paper_tag(
    paper_id: int,
    tag_id: int,
    tag_repo: TagRepository = Depends(get_tag_repo),
):
    tag_repo.remove_from_paper(paper_id, tag_id)
    return {"success": True}
