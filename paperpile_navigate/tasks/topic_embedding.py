"""Topic embedding task - deterministic 1-D layout via power-iteration PCA."""
import math
from typing import Dict, Any, List, Hashable
import numpy as np
from paperpile_navigate.tasks.text_vectorizer import document_frequency, paper_tokens
from paperpile_navigate.utils.logging import get_logger

logger = get_logger(__name__)

SMALL_SET_SIZE = 3
MIN_VOCABULARY = 3
MAX_VOCABULARY = 500
MAX_DF_RATIO = 0.9
POWER_ITERATIONS = 100
LOW, HIGH = 0.1, 0.9


def even_spacing(papers: List[Dict[str, Any]]) -> Dict[Hashable, float]:
    """Positions (i + 1) / (n + 1) in input order."""
    n = len(papers)
    return {paper["id"]: (i + 1) / (n + 1) for i, paper in enumerate(papers)}


class TopicEmbeddingTask:
    """Place papers on a single topic axis for visual layout."""

    def execute(self, papers: List[Dict[str, Any]]) -> Dict[Hashable, float]:
        """
        Compute one scalar position per paper.

        Identical input always produces identical output: the power iteration
        starts from a fixed vector and the component sign is canonicalised.

        Args:
            papers: [{id, title, summary, categories}]

        Returns:
            paper id -> position in [0.1, 0.9]
        """
        if not papers:
            return {}
        if len(papers) <= SMALL_SET_SIZE:
            return even_spacing(papers)

        docs = [
            paper_tokens(p.get("title") or "", p.get("summary") or "", p.get("categories"))
            for p in papers
        ]
        df = document_frequency(docs)
        vocab = self._build_vocabulary(df, len(docs))

        if len(vocab) < MIN_VOCABULARY:
            logger.info(
                f"Vocabulary too small for embedding ({len(vocab)} terms), using even spacing"
            )
            return even_spacing(papers)

        matrix = self._tfidf_matrix(docs, vocab, df)
        centered = matrix - matrix.mean(axis=0)
        component = self._principal_component(centered)
        values = centered @ component

        low, high = float(values.min()), float(values.max())
        value_range = (high - low) or 1.0
        positions = (values - low) / value_range * (HIGH - LOW) + LOW

        logger.debug(f"Embedded {len(papers)} papers over {len(vocab)} terms")
        return {paper["id"]: float(x) for paper, x in zip(papers, positions)}

    def _build_vocabulary(self, df: Dict[str, int], n_docs: int) -> List[str]:
        """
        Terms in at least two documents but not near-universal.

        At most MAX_VOCABULARY terms by descending document frequency; ties
        keep first-seen order (sorted() is stable).
        """
        max_df = max(2, math.floor(n_docs * MAX_DF_RATIO))
        eligible = [(term, count) for term, count in df.items() if 2 <= count <= max_df]
        eligible = sorted(eligible, key=lambda item: item[1], reverse=True)
        return [term for term, _ in eligible[:MAX_VOCABULARY]]

    def _tfidf_matrix(
        self, docs: List[List[str]], vocab: List[str], df: Dict[str, int]
    ) -> np.ndarray:
        """Dense N x V matrix; tf counts only vocabulary tokens, idf = log(N / df)."""
        n_docs = len(docs)
        index = {term: j for j, term in enumerate(vocab)}
        idf = np.array([math.log(n_docs / df[term]) for term in vocab])

        matrix = np.zeros((n_docs, len(vocab)))
        for i, doc in enumerate(docs):
            mapped = [index[t] for t in doc if t in index]
            if not mapped:
                continue
            counts = np.bincount(mapped, minlength=len(vocab))
            matrix[i] = counts / len(mapped) * idf
        return matrix

    def _principal_component(self, centered: np.ndarray) -> np.ndarray:
        """
        Dominant direction of variance by power iteration.

        Starts from pc[j] = (j + 1) / V and runs a fixed number of rounds,
        stopping early if the direction collapses to zero.
        """
        n_terms = centered.shape[1]
        component = np.arange(1, n_terms + 1, dtype=float) / n_terms

        for _ in range(POWER_ITERATIONS):
            projection = centered @ component
            candidate = centered.T @ projection
            norm = float(np.linalg.norm(candidate))
            if norm == 0:
                break
            component = candidate / norm

        # PCA sign is arbitrary; pin it so the largest weight is positive
        if component[int(np.argmax(np.abs(component)))] < 0:
            component = -component
        return component
