"""ID mapping utilities for arXiv and Semantic Scholar paper identification."""
import re
from typing import Optional, Dict, Any, Iterable, List
from paperpile_navigate.utils.logging import get_logger

logger = get_logger(__name__)

_VERSION_SUFFIX = re.compile(r"v\d+$")
_ABS_URL = re.compile(r"arxiv\.org/(?:abs|pdf|html)/(.+?)(?:\.pdf)?/?$")


class IDMapper:
    """Map paper IDs between arXiv and Semantic Scholar."""

    @staticmethod
    def normalize_arxiv_id(arxiv_id: str) -> str:
        """
        Strip whitespace and a trailing version suffix.

        "2301.00001v2" -> "2301.00001", "hep-th/9901001v1" -> "hep-th/9901001".

        Args:
            arxiv_id: Raw arXiv identifier

        Returns:
            Normalized identifier (may be empty)
        """
        return _VERSION_SUFFIX.sub("", (arxiv_id or "").strip())

    @staticmethod
    def normalize_batch(arxiv_ids: Iterable[str]) -> List[str]:
        """
        Normalize, drop empties and deduplicate, keeping first-seen order.

        Args:
            arxiv_ids: Raw identifiers

        Returns:
            Unique normalized identifiers
        """
        seen = set()
        unique = []
        for raw in arxiv_ids:
            arxiv_id = IDMapper.normalize_arxiv_id(raw)
            if not arxiv_id or arxiv_id in seen:
                continue
            seen.add(arxiv_id)
            unique.append(arxiv_id)
        return unique

    @staticmethod
    def from_entry_url(id_url: str) -> str:
        """
        Extract an arXiv ID from an Atom entry URL.

        Atom ids look like http://arxiv.org/abs/2301.00001v1.

        Args:
            id_url: Entry id URL

        Returns:
            Normalized arXiv ID, or the input normalized if it is not a URL
        """
        match = _ABS_URL.search(id_url or "")
        if match:
            return IDMapper.normalize_arxiv_id(match.group(1))
        return IDMapper.normalize_arxiv_id(id_url)

    @staticmethod
    def extract_arxiv_id(paper_data: Dict[str, Any]) -> Optional[str]:
        """
        Extract a normalized ArXiv ID from Semantic Scholar paper data.

        Args:
            paper_data: Paper metadata (Semantic Scholar format)

        Returns:
            ArXiv ID or None
        """
        external_ids = (paper_data or {}).get("externalIds") or {}
        arxiv_id = external_ids.get("ArXiv")
        if arxiv_id:
            return IDMapper.normalize_arxiv_id(arxiv_id)
        return None

    @staticmethod
    def to_semantic_scholar_id(arxiv_id: str) -> str:
        """Semantic Scholar accepts arXiv ids with an ARXIV: prefix."""
        return f"ARXIV:{IDMapper.normalize_arxiv_id(arxiv_id)}"
