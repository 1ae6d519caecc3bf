"""Fixtures for integration tests: real clients over mock transports, in-memory database."""
import json
import os
import sys

import httpx
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from paperpile_navigate.api.arxiv import ArxivClient
from paperpile_navigate.api.semantic_scholar import SemanticScholarClient
from paperpile_navigate.database.connection import DatabaseConnection
from paperpile_navigate.database.schema import init_database
from tests.conftest import make_atom_entry, make_atom_feed, make_reference

# Three language-model papers plus one vision paper; 2005.14165 cites the other two.
ARXIV_ENTRIES = {
    "1706.03762": ("Attention is all you need", "2017-06-12T17:57:34Z"),
    "1810.04805": ("BERT pre-training of deep bidirectional transformers", "2018-10-11T00:50:01Z"),
    "2005.14165": ("Language models are few-shot learners", "2020-05-28T17:29:03Z"),
    "1512.03385": ("Deep residual learning for image recognition", "2015-12-10T19:51:55Z"),
}

REFERENCES = {
    "1810.04805": ["1706.03762", "1301.03781"],
    "2005.14165": ["1706.03762", "1810.04805", None],
    "1706.03762": ["1512.03385"],
}


def _arxiv_handler(request: httpx.Request) -> httpx.Response:
    arxiv_id = request.url.params.get("id_list", "")
    if arxiv_id not in ARXIV_ENTRIES:
        return httpx.Response(200, text=make_atom_feed())
    title, published = ARXIV_ENTRIES[arxiv_id]
    return httpx.Response(200, text=make_atom_feed(make_atom_entry(f"{arxiv_id}v1", title, published)))


def _s2_handler(request: httpx.Request) -> httpx.Response:
    # .../paper/ARXIV:<id>/references
    s2_id = request.url.path.split("/paper/")[1].rsplit("/references", 1)[0]
    arxiv_id = s2_id.split(":", 1)[1]
    if arxiv_id not in REFERENCES:
        return httpx.Response(404, json={"error": "Paper not found"})
    data = [make_reference(ref, f"s2-{i}") for i, ref in enumerate(REFERENCES[arxiv_id])]
    return httpx.Response(200, text=json.dumps({"data": data}))


@pytest.fixture
def db():
    conn = DatabaseConnection.configure("sqlite://")
    init_database(conn.engine)
    yield conn
    conn.engine.dispose()


@pytest.fixture
def arxiv_client():
    client = ArxivClient()
    client.client = httpx.AsyncClient(transport=httpx.MockTransport(_arxiv_handler))
    return client


@pytest.fixture
def s2_client():
    client = SemanticScholarClient()
    client.client = httpx.AsyncClient(transport=httpx.MockTransport(_s2_handler))
    return client
