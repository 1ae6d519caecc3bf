from fastapi import APIRouter, Depends, HTTPException

from paperpile_navigate.backend.deps import get_tag_repo
from paperpile_navigate.database.repositories import TagRepository
from paperpile_navigate.models.schemas import TagRequest

router = APIRouter(prefix="/api/tags", tags=["tags"])


@router.get("")
def list_tags(tag_repo: TagRepository = Depends(get_tag_repo)):
    return tag_repo.list_all()


@router.post("", status_code=201)
def create_tag(body: TagRequest, tag_repo: TagRepository = Depends(get_tag_repo)):
    if not body.name or not body.name.strip():
        raise HTTPException(status_code=400, detail="Name is required")
    if tag_repo.get_by_name(body.name) is not None:
        raise HTTPException(status_code=409, detail="Tag already exists")

    tag_id = tag_repo.create(body.name, body.color)
    return {"id": tag_id, "name": body.name.strip(), "color": body.color}


@router.put("/{tag_id}")
def update_tag(tag_id: int, body: TagRequest, tag_repo: TagRepository = Depends(get_tag_repo)):
    if not body.name or not body.name.strip():
        raise HTTPException(status_code=400, detail="Name is required")
    existing = tag_repo.get_by_name(body.name)
    if existing is not None and existing["id"] != tag_id:
        raise HTTPException(status_code=409, detail="Tag already exists")
    if not tag_repo.update(tag_id, body.name, body.color):
        raise HTTPException(status_code=404, detail="Tag not found")
    return {"success": True}


@router.delete("/{tag_id}")
def delete_tag(tag_id: int, tag_repo: TagRepository = Depends(get_tag_repo)):
    if not tag_repo.delete(tag_id):
        raise HTTPException(status_code=404, detail="Tag not found")
    return {"success": True}
