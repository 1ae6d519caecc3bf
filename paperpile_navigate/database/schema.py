"""Relational schema for papers, citations, worldlines and tags."""
from sqlalchemy import text
from sqlalchemy.engine import Engine

from paperpile_navigate.utils.logging import get_logger

logger = get_logger(__name__)

# One statement per entry: SQLite executes a single statement per call.
SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS papers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        arxiv_id TEXT UNIQUE NOT NULL,
        title TEXT NOT NULL,
        summary TEXT NOT NULL DEFAULT '',
        authors TEXT NOT NULL DEFAULT '[]',
        published TEXT NOT NULL DEFAULT '',
        updated TEXT NOT NULL DEFAULT '',
        categories TEXT NOT NULL DEFAULT '[]',
        pdf_url TEXT NOT NULL DEFAULT '',
        abs_url TEXT NOT NULL DEFAULT '',
        doi TEXT,
        journal_ref TEXT,
        added_at TEXT DEFAULT (datetime('now')),
        status TEXT DEFAULT 'new' CHECK(status IN ('new', 'reading', 'reviewed', 'exported'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tags (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT UNIQUE NOT NULL,
        color TEXT NOT NULL DEFAULT '#6366f1'
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS paper_tags (
        paper_id INTEGER NOT NULL REFERENCES papers(id) ON DELETE CASCADE,
        tag_id INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
        PRIMARY KEY (paper_id, tag_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS paper_citations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        citing_paper_id INTEGER NOT NULL REFERENCES papers(id) ON DELETE CASCADE,
        cited_paper_id INTEGER NOT NULL REFERENCES papers(id) ON DELETE CASCADE,
        created_at TEXT DEFAULT (datetime('now')),
        UNIQUE (citing_paper_id, cited_paper_id),
        CHECK (citing_paper_id != cited_paper_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS worldlines (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        color TEXT NOT NULL DEFAULT '#6366f1',
        created_at TEXT DEFAULT (datetime('now'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS worldline_papers (
        worldline_id INTEGER NOT NULL REFERENCES worldlines(id) ON DELETE CASCADE,
        paper_id INTEGER NOT NULL REFERENCES papers(id) ON DELETE CASCADE,
        position INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (worldline_id, paper_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_papers_arxiv_id ON papers(arxiv_id)",
    "CREATE INDEX IF NOT EXISTS idx_paper_tags_tag_id ON paper_tags(tag_id)",
    "CREATE INDEX IF NOT EXISTS idx_citations_citing ON paper_citations(citing_paper_id)",
    "CREATE INDEX IF NOT EXISTS idx_citations_cited ON paper_citations(cited_paper_id)",
    "CREATE INDEX IF NOT EXISTS idx_worldline_papers_paper ON worldline_papers(paper_id)",
]


def init_database(engine: Engine) -> None:
    """Create all tables and indexes (idempotent)."""
    with engine.begin() as conn:
        for statement in SCHEMA_STATEMENTS:
            conn.execute(text(statement))
    logger.info("Database schema initialized")
