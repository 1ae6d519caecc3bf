"""Semantic Scholar API client."""
from typing import Optional, Dict, Any, List
from pydantic import ValidationError as PayloadValidationError
from paperpile_navigate.api.base import BaseAPIClient
from paperpile_navigate.models.api_models import ReferenceItem
from paperpile_navigate.utils.config import settings
from paperpile_navigate.utils.errors import APIError
from paperpile_navigate.utils.id_mapper import IDMapper
from paperpile_navigate.utils.logging import get_logger

logger = get_logger(__name__)

DISCOVER_FIELDS = "title,authors,year,externalIds,url,abstract"


class SemanticScholarClient(BaseAPIClient):
    """Semantic Scholar Graph API client."""

    def __init__(self):
        super().__init__(
            base_url=settings.semantic_scholar_base_url,
            timeout=settings.request_timeout,
            max_retries=settings.semantic_scholar_max_retries,
            default_retry_after=settings.semantic_scholar_default_retry_after,
        )
        self.api_key = settings.semantic_scholar_api_key

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers with API key if available."""
        headers = {}
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    async def get_paper(self, paper_id: str) -> Optional[Dict[str, Any]]:
        """
        Get paper metadata by arXiv ID.

        Args:
            paper_id: arXiv ID

        Returns:
            Paper metadata dictionary
        """
        s2_id = IDMapper.to_semantic_scholar_id(paper_id)

        async def fetch():
            return await self._make_request(
                method="GET",
                endpoint=f"paper/{s2_id}",
                params={"fields": DISCOVER_FIELDS},
                headers=self._get_headers(),
            )

        return await self._retry_on_rate_limit(fetch)

    async def get_reference_arxiv_ids(
        self, arxiv_id: str, limit: Optional[int] = None
    ) -> List[str]:
        """
        Get the normalized arXiv IDs of papers referenced by a paper.

        References without an arXiv ID are dropped.

        Args:
            arxiv_id: arXiv ID of the citing paper
            limit: Maximum number of references to retrieve

        Returns:
            arXiv IDs in reference-list order, version suffixes stripped

        Raises:
            RateLimitError: If still rate limited after the retry ceiling
            APIError: If the request fails or the reference list is malformed
        """
        s2_id = IDMapper.to_semantic_scholar_id(arxiv_id)
        limit = limit or settings.semantic_scholar_reference_limit

        async def fetch():
            return await self._make_request(
                method="GET",
                endpoint=f"paper/{s2_id}/references",
                params={"fields": "externalIds", "limit": limit},
                headers=self._get_headers(),
            )

        result = await self._retry_on_rate_limit(fetch)

        if result is not None and not isinstance(result, dict):
            raise APIError(f"Malformed reference list for {arxiv_id}: expected an object")
        try:
            items = [ReferenceItem.model_validate(raw) for raw in (result or {}).get("data") or []]
        except PayloadValidationError as e:
            raise APIError(f"Malformed reference list for {arxiv_id}: {e}")

        arxiv_ids = []
        for item in items:
            if item.citedPaper is None:
                continue
            ref_id = IDMapper.extract_arxiv_id(item.citedPaper.model_dump())
            if ref_id:
                arxiv_ids.append(ref_id)

        logger.info(f"Fetched {len(arxiv_ids)} arXiv references for {arxiv_id}")
        return arxiv_ids

    async def _get_linked_papers(self, arxiv_id: str, edge: str, key: str, limit: int) -> List[Dict[str, Any]]:
        s2_id = IDMapper.to_semantic_scholar_id(arxiv_id)

        async def fetch():
            return await self._make_request(
                method="GET",
                endpoint=f"paper/{s2_id}/{edge}",
                params={"fields": DISCOVER_FIELDS, "limit": limit},
                headers=self._get_headers(),
            )

        result = await self._retry_on_rate_limit(fetch)
        return [
            item[key]
            for item in (result or {}).get("data") or []
            if item.get(key) and item[key].get("title")
        ]

    async def get_citations(self, arxiv_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Get papers citing this paper (entries without a title dropped)."""
        limit = limit or settings.semantic_scholar_discover_limit
        return await self._get_linked_papers(arxiv_id, "citations", "citingPaper", limit)

    async def get_references(self, arxiv_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Get papers referenced by this paper (entries without a title dropped)."""
        limit = limit or settings.semantic_scholar_discover_limit
        return await self._get_linked_papers(arxiv_id, "references", "citedPaper", limit)
