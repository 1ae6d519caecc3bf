"""
Pytest configuration, shared data factory helpers and terminal formatting.

- Adds project root to sys.path so imports like
  'from paperpile_navigate.utils.id_mapper import IDMapper' work.
- Factory helpers are shared by unit and integration tests.
"""
import os
import sys

# Project root (directory containing paperpile_navigate/, tests/, scripts/)
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def make_paper(
    arxiv_id="2301.00001",
    title="Test Paper",
    summary="Test abstract.",
    published="2023-01-01T00:00:00Z",
    categories=None,
    authors=None,
):
    """Paper dict as returned by ArxivClient.get_paper and accepted by PaperRepository.upsert."""
    return {
        "id": arxiv_id,
        "arxiv_id": arxiv_id,
        "title": title,
        "summary": summary,
        "authors": authors or ["Alice Smith"],
        "published": published,
        "updated": published,
        "categories": categories or ["cs.LG"],
        "pdf_url": f"https://arxiv.org/pdf/{arxiv_id}",
        "abs_url": f"https://arxiv.org/abs/{arxiv_id}",
        "doi": None,
        "journal_ref": None,
    }


def make_reference(arxiv_id=None, paper_id="s2ref"):
    """One item of a Semantic Scholar references response."""
    external_ids = {"ArXiv": arxiv_id} if arxiv_id else {"DOI": "10.1234/x"}
    return {"citedPaper": {"paperId": paper_id, "externalIds": external_ids}}


def make_atom_entry(arxiv_id="2301.00001v1", title="Test Paper", published="2023-01-01T00:00:00Z"):
    return f"""
  <entry>
    <id>http://arxiv.org/abs/{arxiv_id}</id>
    <updated>{published}</updated>
    <published>{published}</published>
    <title>{title}</title>
    <summary>  A summary
      spread over lines.  </summary>
    <author><name>Alice Smith</name></author>
    <author><name>Bob Jones</name></author>
    <arxiv:doi>10.1000/xyz</arxiv:doi>
    <link href="http://arxiv.org/abs/{arxiv_id}" rel="alternate" type="text/html"/>
    <link title="pdf" href="http://arxiv.org/pdf/{arxiv_id}" rel="related" type="application/pdf"/>
    <arxiv:primary_category term="cs.CL" scheme="http://arxiv.org/schemas/atom"/>
    <category term="cs.CL" scheme="http://arxiv.org/schemas/atom"/>
    <category term="cs.LG" scheme="http://arxiv.org/schemas/atom"/>
  </entry>"""


def make_atom_feed(*entries):
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<feed xmlns="http://www.w3.org/2005/Atom" '
        'xmlns:arxiv="http://arxiv.org/schemas/atom">\n'
        "  <title>arXiv Query</title>"
        + "".join(entries)
        + "\n</feed>"
    )


# ─── Terminal formatting for visual clarity ───────────────────────────────

BANNER = "=" * 60
SECTION = "-" * 60


def pytest_configure(config):
    """Print banner at start of test run."""
    if config.getoption("verbose", 0) >= 0:
        print(f"\n{BANNER}")
        print("  paperpile-navigate - Test Run")
        print(f"{BANNER}\n")


def pytest_sessionstart(session):
    """Print section when session starts."""
    print("  Session started.")
    print(f"{SECTION}\n")


def pytest_sessionfinish(session, exitstatus):
    """Print summary and banner at end of run."""
    print(f"\n{SECTION}")
    if exitstatus == 0:
        print("  Result: ALL PASSED")
    else:
        print("  Result: FAILED (see above)")
    print(f"{BANNER}\n")
