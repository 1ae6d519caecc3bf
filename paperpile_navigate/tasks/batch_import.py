"""Batch import task - Save papers, infer citations, assign worldlines and tags."""
import asyncio
from typing import Dict, Any, List, Optional, Callable, Awaitable
from paperpile_navigate.api.arxiv import ArxivClient
from paperpile_navigate.api.semantic_scholar import SemanticScholarClient
from paperpile_navigate.database.connection import DatabaseConnection
from paperpile_navigate.database.repositories import (
    PaperRepository,
    CitationRepository,
    WorldlineRepository,
    TagRepository,
)
from paperpile_navigate.models.schemas import BatchImportResult, NewWorldline
from paperpile_navigate.utils.config import settings
from paperpile_navigate.utils.errors import APIError, ValidationError
from paperpile_navigate.utils.id_mapper import IDMapper
from paperpile_navigate.utils.logging import get_logger

logger = get_logger(__name__)


class BatchImportTask:
    """
    Import a list of arXiv papers in one pass.

    Steps run in order: resolve and save papers, infer citation edges among
    the batch from Semantic Scholar reference lists, attach the papers to
    worldlines in publication order, then apply tags. A failure on one paper
    never aborts the others.
    """

    def __init__(
        self,
        arxiv_client: Optional[ArxivClient] = None,
        s2_client: Optional[SemanticScholarClient] = None,
        db: Optional[DatabaseConnection] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        request_delay: Optional[float] = None,
    ):
        """
        Initialize task with its collaborators.

        Args:
            arxiv_client: Paper metadata source
            s2_client: Semantic Scholar client for reference lists
            db: Database connection providing get_session()
            sleep: Coroutine used for the delay between Semantic Scholar calls
            request_delay: Seconds between Semantic Scholar calls
        """
        self.arxiv_client = arxiv_client or ArxivClient()
        self.s2_client = s2_client or SemanticScholarClient()
        self.db = db or DatabaseConnection()
        self.sleep = sleep
        self.request_delay = (
            settings.semantic_scholar_request_delay if request_delay is None else request_delay
        )

    async def execute(
        self,
        arxiv_ids: List[str],
        worldline_ids: Optional[List[int]] = None,
        new_worldlines: Optional[List[NewWorldline]] = None,
        tag_ids: Optional[List[int]] = None,
    ) -> BatchImportResult:
        """
        Run the batch import.

        Args:
            arxiv_ids: Raw arXiv IDs (whitespace and version suffixes allowed)
            worldline_ids: Existing worldlines to append the papers to
            new_worldlines: Worldlines to create and fill with the papers
            tag_ids: Tags to apply to every imported paper

        Returns:
            BatchImportResult with counts and per-paper error strings

        Raises:
            ValidationError: If no usable arXiv ID was given
        """
        ids = IDMapper.normalize_batch(arxiv_ids or [])
        if not ids:
            raise ValidationError("arxiv_ids array is required")

        logger.info(f"Starting batch import of {len(ids)} papers")
        result = BatchImportResult()

        papers = await self._resolve_papers(ids, result)
        result.papers_added = len(papers)

        result.citations_created = await self._infer_citations(papers)

        # Database work runs off the event loop
        result.worldline_ids = await asyncio.to_thread(
            self._assign_worldlines, papers, worldline_ids or [], new_worldlines or [], result
        )
        result.tags_applied = await asyncio.to_thread(
            self._apply_tags, papers, tag_ids or [], result
        )

        logger.info(
            f"Batch import complete: {result.papers_added} papers, "
            f"{result.citations_created} citations, {result.tags_applied} tags, "
            f"{len(result.errors)} errors"
        )
        return result

    async def _resolve_papers(
        self, ids: List[str], result: BatchImportResult
    ) -> Dict[str, Dict[str, Any]]:
        """
        Load stored papers or fetch and save new ones.

        Returns:
            arxiv_id -> stored paper row, in batch order
        """
        papers: Dict[str, Dict[str, Any]] = {}

        for arxiv_id in ids:
            existing = await asyncio.to_thread(self._load_paper, arxiv_id)
            if existing:
                papers[arxiv_id] = existing
                continue

            try:
                fetched = await self.arxiv_client.get_paper(arxiv_id)
            except APIError as e:
                logger.error(f"Failed to fetch {arxiv_id} from arXiv: {e}")
                result.errors.append(f"Failed to fetch: {arxiv_id}")
                continue

            if not fetched:
                result.errors.append(f"Not found: {arxiv_id}")
                continue

            papers[arxiv_id] = await asyncio.to_thread(self._save_paper, arxiv_id, fetched)

        return papers

    def _load_paper(self, arxiv_id: str) -> Optional[Dict[str, Any]]:
        with self.db.get_session() as session:
            return PaperRepository(session).get_by_arxiv_id(arxiv_id)

    def _save_paper(self, arxiv_id: str, fetched: Dict[str, Any]) -> Dict[str, Any]:
        with self.db.get_session() as session:
            repo = PaperRepository(session)
            paper_id = repo.upsert({**fetched, "arxiv_id": arxiv_id})
            return repo.get_by_id(paper_id)

    async def _infer_citations(self, papers: Dict[str, Dict[str, Any]]) -> int:
        """
        Create edges for references that point at other papers of the batch.

        Semantic Scholar is queried one paper at a time with a fixed delay
        between requests. A failed lookup only skips that paper.
        """
        created = 0

        for idx, (arxiv_id, paper) in enumerate(papers.items()):
            if idx > 0:
                await self.sleep(self.request_delay)

            try:
                referenced = await self.s2_client.get_reference_arxiv_ids(arxiv_id)
            except APIError as e:
                logger.warning(f"Skipping citation inference for {arxiv_id}: {e}")
                continue

            cited_ids = [
                papers[ref_id]["id"]
                for ref_id in referenced
                if ref_id in papers and ref_id != arxiv_id
            ]
            created += await asyncio.to_thread(self._store_edges, paper["id"], cited_ids)

        return created

    def _store_edges(self, citing_id: int, cited_ids: List[int]) -> int:
        """Add citing -> cited edges; returns how many were new."""
        if not cited_ids:
            return 0
        with self.db.get_session() as session:
            citation_repo = CitationRepository(session)
            return sum(1 for cited_id in cited_ids if citation_repo.add(citing_id, cited_id))

    def _assign_worldlines(
        self,
        papers: Dict[str, Dict[str, Any]],
        worldline_ids: List[int],
        new_worldlines: List[NewWorldline],
        result: BatchImportResult,
    ) -> List[int]:
        """
        Append the papers to each target worldline, oldest first.

        Positions continue after the worldline's current members; papers
        already in a worldline keep their existing position.
        """
        if not worldline_ids and not new_worldlines:
            return []

        # sorted() is stable: equal dates keep batch order
        ordered = sorted(papers.values(), key=lambda p: p.get("published") or "")
        targets: List[int] = []

        with self.db.get_session() as session:
            worldline_repo = WorldlineRepository(session)

            for worldline in new_worldlines:
                targets.append(worldline_repo.create(worldline.name, worldline.color))

            for worldline_id in worldline_ids:
                if worldline_id in targets:
                    continue
                if worldline_repo.get(worldline_id) is None:
                    result.errors.append(f"Worldline not found: {worldline_id}")
                    continue
                targets.append(worldline_id)

            for worldline_id in targets:
                offset = worldline_repo.count_papers(worldline_id)
                added = 0
                for paper in ordered:
                    if worldline_repo.add_paper_if_absent(worldline_id, paper["id"], offset + added):
                        added += 1
                logger.info(f"Added {added} papers to worldline {worldline_id}")

        return targets

    def _apply_tags(
        self, papers: Dict[str, Dict[str, Any]], tag_ids: List[int], result: BatchImportResult
    ) -> int:
        """Tag every paper; returns the number of new tag assignments."""
        if not tag_ids or not papers:
            return 0

        applied = 0
        with self.db.get_session() as session:
            tag_repo = TagRepository(session)
            valid_tags = []
            for tag_id in dict.fromkeys(tag_ids):
                if tag_repo.get(tag_id) is None:
                    result.errors.append(f"Tag not found: {tag_id}")
                else:
                    valid_tags.append(tag_id)

            for paper in papers.values():
                for tag_id in valid_tags:
                    if tag_repo.add_to_paper(paper["id"], tag_id):
                        applied += 1

        return applied
