"""Data access layer - Repository pattern for database operations."""
import json
from typing import List, Dict, Any, Optional, Iterable
from sqlalchemy import text, bindparam
from paperpile_navigate.utils.errors import ValidationError
from paperpile_navigate.utils.logging import get_logger

logger = get_logger(__name__)

PAPER_STATUSES = ("new", "reading", "reviewed", "exported")


def _row_to_dict(row) -> Dict[str, Any]:
    return dict(row._mapping)


def _as_json_list(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(list(value or []))


class PaperRepository:
    """Repository for papers table operations."""

    def __init__(self, session):
        """Initialize with database session."""
        self.session = session

    def upsert(self, paper: Dict[str, Any]) -> int:
        """
        Insert a paper, or refresh the mutable fields of an existing one.

        Conflicts on arxiv_id update title/summary/authors/updated/categories;
        added_at and status are never touched.

        Args:
            paper: Paper dictionary (arxiv_id and title required; authors and
                categories may be lists or JSON strings)

        Returns:
            Integer id of the stored paper
        """
        if not paper.get("arxiv_id") or not paper.get("title"):
            raise ValidationError("arxiv_id and title are required")

        arxiv_id = paper["arxiv_id"]
        params = {
            "arxiv_id": arxiv_id,
            "title": paper["title"],
            "summary": paper.get("summary") or "",
            "authors": _as_json_list(paper.get("authors")),
            "published": paper.get("published") or "",
            "updated": paper.get("updated") or paper.get("published") or "",
            "categories": _as_json_list(paper.get("categories")),
            "pdf_url": paper.get("pdf_url") or f"https://arxiv.org/pdf/{arxiv_id}",
            "abs_url": paper.get("abs_url") or f"https://arxiv.org/abs/{arxiv_id}",
            "doi": paper.get("doi"),
            "journal_ref": paper.get("journal_ref"),
        }

        upsert_query = text(
            """
            INSERT INTO papers (
                arxiv_id, title, summary, authors, published, updated,
                categories, pdf_url, abs_url, doi, journal_ref
            ) VALUES (
                :arxiv_id, :title, :summary, :authors, :published, :updated,
                :categories, :pdf_url, :abs_url, :doi, :journal_ref
            )
            ON CONFLICT (arxiv_id) DO UPDATE SET
                title = excluded.title,
                summary = excluded.summary,
                authors = excluded.authors,
                updated = excluded.updated,
                categories = excluded.categories
        """
        )
        self.session.execute(upsert_query, params)

        paper_id = self.session.execute(
            text("SELECT id FROM papers WHERE arxiv_id = :arxiv_id"),
            {"arxiv_id": arxiv_id},
        ).scalar_one()

        logger.info(f"Upserted paper {arxiv_id} (id={paper_id})")
        return paper_id

    def get_by_id(self, paper_id: int) -> Optional[Dict[str, Any]]:
        """Get paper by integer id, or None."""
        row = self.session.execute(
            text("SELECT * FROM papers WHERE id = :paper_id"), {"paper_id": paper_id}
        ).fetchone()
        return _row_to_dict(row) if row else None

    def get_by_arxiv_id(self, arxiv_id: str) -> Optional[Dict[str, Any]]:
        """Get paper by arXiv id, or None."""
        row = self.session.execute(
            text("SELECT * FROM papers WHERE arxiv_id = :arxiv_id"), {"arxiv_id": arxiv_id}
        ).fetchone()
        return _row_to_dict(row) if row else None

    def get_by_ids(self, paper_ids: Iterable[int]) -> List[Dict[str, Any]]:
        """Get papers by integer ids (missing ids are skipped)."""
        paper_ids = list(paper_ids)
        if not paper_ids:
            return []
        query = text("SELECT * FROM papers WHERE id IN :ids ORDER BY id").bindparams(
            bindparam("ids", expanding=True)
        )
        return [_row_to_dict(r) for r in self.session.execute(query, {"ids": paper_ids})]

    def list_saved(self, status: Optional[str] = None, tag_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        List saved papers, newest first.

        Args:
            status: Only papers with this status
            tag_id: Only papers carrying this tag (takes precedence over status)
        """
        if tag_id:
            query = text(
                """
                SELECT p.* FROM papers p
                JOIN paper_tags pt ON p.id = pt.paper_id
                WHERE pt.tag_id = :tag_id
                ORDER BY p.added_at DESC, p.id DESC
            """
            )
            rows = self.session.execute(query, {"tag_id": tag_id})
        elif status:
            rows = self.session.execute(
                text("SELECT * FROM papers WHERE status = :status ORDER BY added_at DESC, id DESC"),
                {"status": status},
            )
        else:
            rows = self.session.execute(text("SELECT * FROM papers ORDER BY added_at DESC, id DESC"))
        return [_row_to_dict(r) for r in rows]

    def update_status(self, paper_id: int, status: str) -> bool:
        """Set paper status. Returns False when the paper does not exist."""
        if status not in PAPER_STATUSES:
            raise ValidationError(f"Invalid status: {status}")
        result = self.session.execute(
            text("UPDATE papers SET status = :status WHERE id = :paper_id"),
            {"status": status, "paper_id": paper_id},
        )
        return result.rowcount > 0

    def delete(self, paper_id: int) -> bool:
        """Delete a paper; citations, memberships and tags cascade."""
        result = self.session.execute(
            text("DELETE FROM papers WHERE id = :paper_id"), {"paper_id": paper_id}
        )
        return result.rowcount > 0


class CitationRepository:
    """Repository for paper_citations table operations."""

    def __init__(self, session):
        """Initialize with database session."""
        self.session = session

    def add(self, citing_paper_id: int, cited_paper_id: int) -> bool:
        """
        Add a directed citation edge.

        Duplicate edges are a no-op. The reverse pair is a distinct edge.

        Args:
            citing_paper_id: Paper that cites
            cited_paper_id: Paper being cited

        Returns:
            True if a new edge was created

        Raises:
            ValidationError: On a self-citation
        """
        if citing_paper_id == cited_paper_id:
            raise ValidationError("A paper cannot cite itself")

        result = self.session.execute(
            text(
                """
                INSERT INTO paper_citations (citing_paper_id, cited_paper_id)
                VALUES (:citing, :cited)
                ON CONFLICT (citing_paper_id, cited_paper_id) DO NOTHING
            """
            ),
            {"citing": citing_paper_id, "cited": cited_paper_id},
        )
        return result.rowcount > 0

    def remove(self, citing_paper_id: int, cited_paper_id: int) -> bool:
        """Remove a directed citation edge. Returns False if it did not exist."""
        result = self.session.execute(
            text(
                """
                DELETE FROM paper_citations
                WHERE citing_paper_id = :citing AND cited_paper_id = :cited
            """
            ),
            {"citing": citing_paper_id, "cited": cited_paper_id},
        )
        return result.rowcount > 0

    def exists(self, citing_paper_id: int, cited_paper_id: int) -> bool:
        row = self.session.execute(
            text(
                """
                SELECT 1 FROM paper_citations
                WHERE citing_paper_id = :citing AND cited_paper_id = :cited
            """
            ),
            {"citing": citing_paper_id, "cited": cited_paper_id},
        ).fetchone()
        return row is not None

    def list_all(self) -> List[Dict[str, Any]]:
        """All citation edges in insertion order."""
        rows = self.session.execute(
            text(
                """
                SELECT id, citing_paper_id, cited_paper_id, created_at
                FROM paper_citations ORDER BY id
            """
            )
        )
        return [_row_to_dict(r) for r in rows]

    def list_among(self, paper_ids: Iterable[int]) -> List[Dict[str, Any]]:
        """Citation edges whose endpoints are both in paper_ids."""
        paper_ids = list(paper_ids)
        if not paper_ids:
            return []
        query = text(
            """
            SELECT id, citing_paper_id, cited_paper_id, created_at
            FROM paper_citations
            WHERE citing_paper_id IN :citing_ids AND cited_paper_id IN :cited_ids
            ORDER BY id
        """
        ).bindparams(
            bindparam("citing_ids", expanding=True),
            bindparam("cited_ids", expanding=True),
        )
        rows = self.session.execute(query, {"citing_ids": paper_ids, "cited_ids": paper_ids})
        return [_row_to_dict(r) for r in rows]


class WorldlineRepository:
    """Repository for worldlines and worldline_papers table operations."""

    def __init__(self, session):
        """Initialize with database session."""
        self.session = session

    def create(self, name: str, color: str) -> int:
        """Create a worldline and return its id."""
        if not name or not name.strip():
            raise ValidationError("name is required")
        result = self.session.execute(
            text("INSERT INTO worldlines (name, color) VALUES (:name, :color)"),
            {"name": name.strip(), "color": color},
        )
        logger.info(f"Created worldline '{name.strip()}' (id={result.lastrowid})")
        return result.lastrowid

    def get(self, worldline_id: int) -> Optional[Dict[str, Any]]:
        row = self.session.execute(
            text("SELECT * FROM worldlines WHERE id = :id"), {"id": worldline_id}
        ).fetchone()
        return _row_to_dict(row) if row else None

    def list_all(self) -> List[Dict[str, Any]]:
        rows = self.session.execute(text("SELECT * FROM worldlines ORDER BY created_at, id"))
        return [_row_to_dict(r) for r in rows]

    def update(self, worldline_id: int, name: str, color: str) -> bool:
        if not name or not name.strip():
            raise ValidationError("name is required")
        result = self.session.execute(
            text("UPDATE worldlines SET name = :name, color = :color WHERE id = :id"),
            {"name": name.strip(), "color": color, "id": worldline_id},
        )
        return result.rowcount > 0

    def delete(self, worldline_id: int) -> bool:
        """Delete a worldline; its memberships cascade, papers remain."""
        result = self.session.execute(
            text("DELETE FROM worldlines WHERE id = :id"), {"id": worldline_id}
        )
        return result.rowcount > 0

    def add_paper(self, worldline_id: int, paper_id: int, position: int) -> None:
        """
        Add a paper to a worldline at a position.

        Re-adding a paper replaces its position; there is never more than one
        membership row per (worldline, paper).
        """
        self.session.execute(
            text(
                """
                INSERT INTO worldline_papers (worldline_id, paper_id, position)
                VALUES (:worldline_id, :paper_id, :position)
                ON CONFLICT (worldline_id, paper_id) DO UPDATE SET
                    position = excluded.position
            """
            ),
            {"worldline_id": worldline_id, "paper_id": paper_id, "position": position},
        )

    def add_paper_if_absent(self, worldline_id: int, paper_id: int, position: int) -> bool:
        """Add a paper unless already a member. Returns True if added."""
        result = self.session.execute(
            text(
                """
                INSERT INTO worldline_papers (worldline_id, paper_id, position)
                VALUES (:worldline_id, :paper_id, :position)
                ON CONFLICT (worldline_id, paper_id) DO NOTHING
            """
            ),
            {"worldline_id": worldline_id, "paper_id": paper_id, "position": position},
        )
        return result.rowcount > 0

    def remove_paper(self, worldline_id: int, paper_id: int) -> bool:
        result = self.session.execute(
            text(
                """
                DELETE FROM worldline_papers
                WHERE worldline_id = :worldline_id AND paper_id = :paper_id
            """
            ),
            {"worldline_id": worldline_id, "paper_id": paper_id},
        )
        return result.rowcount > 0

    def list_papers(self, worldline_id: int) -> List[Dict[str, Any]]:
        """Member papers ordered by position (then id for equal positions)."""
        rows = self.session.execute(
            text(
                """
                SELECT p.*, wp.position FROM papers p
                JOIN worldline_papers wp ON p.id = wp.paper_id
                WHERE wp.worldline_id = :worldline_id
                ORDER BY wp.position, p.id
            """
            ),
            {"worldline_id": worldline_id},
        )
        return [_row_to_dict(r) for r in rows]

    def count_papers(self, worldline_id: int) -> int:
        return self.session.execute(
            text("SELECT COUNT(*) FROM worldline_papers WHERE worldline_id = :worldline_id"),
            {"worldline_id": worldline_id},
        ).scalar_one()

    def memberships(self, paper_id: int) -> List[Dict[str, Any]]:
        """Worldlines a paper belongs to, with its position in each."""
        rows = self.session.execute(
            text(
                """
                SELECT worldline_id, position FROM worldline_papers
                WHERE paper_id = :paper_id ORDER BY worldline_id
            """
            ),
            {"paper_id": paper_id},
        )
        return [_row_to_dict(r) for r in rows]

    def list_with_papers(self) -> List[Dict[str, Any]]:
        """
        All worldlines with the title/summary of their member papers.

        Returns:
            [{id, name, color, papers: [{title, summary}]}] with members in
            position order; worldlines without members have an empty list
        """
        rows = self.session.execute(
            text(
                """
                SELECT w.id, w.name, w.color, p.title, p.summary
                FROM worldlines w
                LEFT JOIN worldline_papers wp ON wp.worldline_id = w.id
                LEFT JOIN papers p ON p.id = wp.paper_id
                ORDER BY w.id, wp.position, p.id
            """
            )
        )

        worldlines: Dict[int, Dict[str, Any]] = {}
        for row in rows:
            entry = worldlines.setdefault(
                row.id, {"id": row.id, "name": row.name, "color": row.color, "papers": []}
            )
            if row.title is not None:
                entry["papers"].append({"title": row.title, "summary": row.summary or ""})
        return list(worldlines.values())

    def related_papers(self, arxiv_id: str) -> List[Dict[str, Any]]:
        """Papers sharing at least one worldline with the given paper."""
        rows = self.session.execute(
            text(
                """
                SELECT DISTINCT other.arxiv_id AS arxivId, other.title AS title
                FROM papers p
                JOIN worldline_papers wp ON wp.paper_id = p.id
                JOIN worldline_papers wp2 ON wp2.worldline_id = wp.worldline_id
                JOIN papers other ON other.id = wp2.paper_id
                WHERE p.arxiv_id = :arxiv_id AND other.id != p.id
                ORDER BY other.title
            """
            ),
            {"arxiv_id": arxiv_id},
        )
        return [_row_to_dict(r) for r in rows]


class TagRepository:
    """Repository for tags and paper_tags table operations."""

    def __init__(self, session):
        """Initialize with database session."""
        self.session = session

    def create(self, name: str, color: str) -> int:
        if not name or not name.strip():
            raise ValidationError("Name is required")
        result = self.session.execute(
            text("INSERT INTO tags (name, color) VALUES (:name, :color)"),
            {"name": name.strip(), "color": color},
        )
        return result.lastrowid

    def get(self, tag_id: int) -> Optional[Dict[str, Any]]:
        row = self.session.execute(
            text("SELECT * FROM tags WHERE id = :id"), {"id": tag_id}
        ).fetchone()
        return _row_to_dict(row) if row else None

    def get_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        row = self.session.execute(
            text("SELECT * FROM tags WHERE name = :name"), {"name": name.strip()}
        ).fetchone()
        return _row_to_dict(row) if row else None

    def list_all(self) -> List[Dict[str, Any]]:
        return [_row_to_dict(r) for r in self.session.execute(text("SELECT * FROM tags ORDER BY name"))]

    def update(self, tag_id: int, name: str, color: str) -> bool:
        if not name or not name.strip():
            raise ValidationError("Name is required")
        result = self.session.execute(
            text("UPDATE tags SET name = :name, color = :color WHERE id = :id"),
            {"name": name.strip(), "color": color, "id": tag_id},
        )
        return result.rowcount > 0

    def delete(self, tag_id: int) -> bool:
        """Delete a tag; its paper assignments cascade."""
        result = self.session.execute(text("DELETE FROM tags WHERE id = :id"), {"id": tag_id})
        return result.rowcount > 0

    def add_to_paper(self, paper_id: int, tag_id: int) -> bool:
        """Tag a paper. Duplicate assignment is a no-op; returns True if added."""
        result = self.session.execute(
            text(
                """
                INSERT INTO paper_tags (paper_id, tag_id) VALUES (:paper_id, :tag_id)
                ON CONFLICT (paper_id, tag_id) DO NOTHING
            """
            ),
            {"paper_id": paper_id, "tag_id": tag_id},
        )
        return result.rowcount > 0

    def remove_from_paper(self, paper_id: int, tag_id: int) -> bool:
        result = self.session.execute(
            text("DELETE FROM paper_tags WHERE paper_id = :paper_id AND tag_id = :tag_id"),
            {"paper_id": paper_id, "tag_id": tag_id},
        )
        return result.rowcount > 0

    def list_for_paper(self, paper_id: int) -> List[Dict[str, Any]]:
        rows = self.session.execute(
            text(
                """
                SELECT t.* FROM tags t
                JOIN paper_tags pt ON t.id = pt.tag_id
                WHERE pt.paper_id = :paper_id
                ORDER BY t.name
            """
            ),
            {"paper_id": paper_id},
        )
        return [_row_to_dict(r) for r in rows]
