"""arXiv Atom API client (paper metadata source)."""
import re
import xml.etree.ElementTree as ET
from typing import Optional, Dict, Any, List
from paperpile_navigate.api.base import BaseAPIClient
from paperpile_navigate.models.api_models import ArxivPaper
from paperpile_navigate.utils.config import settings
from paperpile_navigate.utils.errors import APIError
from paperpile_navigate.utils.id_mapper import IDMapper
from paperpile_navigate.utils.logging import get_logger

logger = get_logger(__name__)

NS = {
    "a": "http://www.w3.org/2005/Atom",
    "arxiv": "http://arxiv.org/schemas/atom",
}


def _clean(text: Optional[str]) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def parse_entry(entry: ET.Element) -> ArxivPaper:
    """
    Convert one Atom <entry> into an ArxivPaper.

    Args:
        entry: Atom entry element

    Returns:
        Parsed paper
    """
    arxiv_id = IDMapper.from_entry_url(entry.findtext("a:id", default="", namespaces=NS))

    pdf_url = None
    abs_url = None
    for link in entry.findall("a:link", NS):
        href = link.attrib.get("href", "")
        if link.attrib.get("title") == "pdf":
            pdf_url = href
        elif link.attrib.get("type") == "text/html" and abs_url is None:
            abs_url = href

    return ArxivPaper(
        id=arxiv_id,
        title=_clean(entry.findtext("a:title", default="", namespaces=NS)),
        summary=_clean(entry.findtext("a:summary", default="", namespaces=NS)),
        authors=[
            _clean(a.findtext("a:name", default="", namespaces=NS))
            for a in entry.findall("a:author", NS)
        ],
        published=entry.findtext("a:published", default="", namespaces=NS).strip(),
        updated=entry.findtext("a:updated", default="", namespaces=NS).strip(),
        categories=[c.attrib.get("term", "") for c in entry.findall("a:category", NS)],
        pdf_url=pdf_url or f"https://arxiv.org/pdf/{arxiv_id}",
        abs_url=abs_url or f"https://arxiv.org/abs/{arxiv_id}",
        doi=_clean(entry.findtext("arxiv:doi", default="", namespaces=NS)) or None,
        journal_ref=_clean(entry.findtext("arxiv:journal_ref", default="", namespaces=NS)) or None,
    )


def parse_feed(xml_text: str) -> List[ArxivPaper]:
    """
    Parse an arXiv Atom feed.

    arXiv answers unknown ids with a single "Error" entry whose id points at
    api/errors; those entries are dropped.

    Raises:
        APIError: If the feed is not well-formed XML
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise APIError(f"Malformed arXiv feed: {e}")

    papers = []
    for entry in root.findall("a:entry", NS):
        entry_id = entry.findtext("a:id", default="", namespaces=NS)
        if "api/errors" in entry_id or not entry.findtext("a:title", default="", namespaces=NS):
            continue
        papers.append(parse_entry(entry))
    return papers


class ArxivClient(BaseAPIClient):
    """Look up paper metadata on the arXiv export API."""

    def __init__(self):
        super().__init__(
            base_url=settings.arxiv_base_url,
            timeout=settings.request_timeout,
            max_retries=settings.arxiv_max_retries,
            default_retry_after=settings.arxiv_default_retry_after,
        )

    async def get_paper(self, paper_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a paper by arXiv ID.

        Args:
            paper_id: arXiv ID (version suffix optional)

        Returns:
            Paper dictionary, or None when arXiv has no such paper
        """
        arxiv_id = IDMapper.normalize_arxiv_id(paper_id)

        async def fetch():
            return await self._make_text_request(
                method="GET",
                endpoint="",
                params={"id_list": arxiv_id},
            )

        xml_text = await self._retry_on_rate_limit(fetch)
        papers = parse_feed(xml_text)
        if not papers:
            logger.info(f"arXiv has no entry for {arxiv_id}")
            return None

        paper = papers[0]
        logger.info(f"Fetched from arXiv: {arxiv_id}: {paper.title}")
        return paper.model_dump()
