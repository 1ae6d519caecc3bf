"""FastAPI dependencies: database session, repositories and API clients."""
from typing import AsyncGenerator, Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from paperpile_navigate.api.arxiv import ArxivClient
from paperpile_navigate.api.semantic_scholar import SemanticScholarClient
from paperpile_navigate.database.connection import DatabaseConnection
from paperpile_navigate.database.repositories import (
    PaperRepository,
    CitationRepository,
    WorldlineRepository,
    TagRepository,
)
from paperpile_navigate.tasks.batch_import import BatchImportTask


def get_db() -> DatabaseConnection:
    return DatabaseConnection()


def get_session(db: DatabaseConnection = Depends(get_db)) -> Generator[Session, None, None]:
    """Yield a session for one request; commits on success, rolls back on error."""
    with db.get_session() as session:
        yield session


def get_paper_repo(session: Session = Depends(get_session)) -> PaperRepository:
    return PaperRepository(session)


def get_citation_repo(session: Session = Depends(get_session)) -> CitationRepository:
    return CitationRepository(session)


def get_worldline_repo(session: Session = Depends(get_session)) -> WorldlineRepository:
    return WorldlineRepository(session)


def get_tag_repo(session: Session = Depends(get_session)) -> TagRepository:
    return TagRepository(session)


async def get_arxiv_client() -> AsyncGenerator[ArxivClient, None]:
    client = ArxivClient()
    try:
        yield client
    finally:
        await client.close()


async def get_s2_client() -> AsyncGenerator[SemanticScholarClient, None]:
    client = SemanticScholarClient()
    try:
        yield client
    finally:
        await client.close()


def get_batch_import_task(
    db: DatabaseConnection = Depends(get_db),
    arxiv_client: ArxivClient = Depends(get_arxiv_client),
    s2_client: SemanticScholarClient = Depends(get_s2_client),
) -> BatchImportTask:
    """Batch import manages its own short sessions, so it gets the connection."""
    return BatchImportTask(arxiv_client=arxiv_client, s2_client=s2_client, db=db)
