"""Fixtures for route tests: TestClient wired to the in-memory database and fake API clients."""
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from paperpile_navigate.backend.deps import (
    get_arxiv_client,
    get_batch_import_task,
    get_db,
    get_s2_client,
)
from paperpile_navigate.backend.main import app
from paperpile_navigate.database.repositories import PaperRepository, WorldlineRepository
from paperpile_navigate.tasks.batch_import import BatchImportTask
from tests.conftest import make_paper

LIBRARY = {
    "2301.00001": make_paper("2301.00001", "Attention transformers", "Self attention for sequence models"),
    "2302.00002": make_paper("2302.00002", "Diffusion models", "Denoising diffusion generates images"),
}


@pytest.fixture
def arxiv_client():
    client = MagicMock()
    client.get_paper = AsyncMock(side_effect=lambda arxiv_id: LIBRARY.get(arxiv_id))
    return client


@pytest.fixture
def s2_client():
    client = MagicMock()
    client.get_reference_arxiv_ids = AsyncMock(return_value=[])
    client.get_citations = AsyncMock(return_value=[{"paperId": "c", "title": "Citing"}])
    client.get_references = AsyncMock(return_value=[{"paperId": "r", "title": "Ref"}])
    return client


@pytest.fixture
def client(db, arxiv_client, s2_client):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_arxiv_client] = lambda: arxiv_client
    app.dependency_overrides[get_s2_client] = lambda: s2_client
    app.dependency_overrides[get_batch_import_task] = lambda: BatchImportTask(
        arxiv_client=arxiv_client, s2_client=s2_client, db=db, sleep=AsyncMock()
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def saved(db):
    """Two saved papers and a worldline containing the first."""
    with db.get_session() as session:
        papers = PaperRepository(session)
        p1 = papers.upsert(LIBRARY["2301.00001"])
        p2 = papers.upsert(LIBRARY["2302.00002"])
        worldlines = WorldlineRepository(session)
        w1 = worldlines.create("Transformers", "#ff0000")
        worldlines.add_paper(w1, p1, 0)
    return {"p1": p1, "p2": p2, "w1": w1}

