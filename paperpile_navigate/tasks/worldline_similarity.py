"""Worldline similarity task - TF-IDF cosine matching of papers to worldlines."""
import math
from typing import Dict, Any, List
from paperpile_navigate.tasks.text_vectorizer import (
    TermVector,
    inverse_document_frequency,
    term_frequency,
    tokenize,
)
from paperpile_navigate.utils.logging import get_logger

logger = get_logger(__name__)


def _weighted_text(title: str, summary: str) -> str:
    # Title repeated so it outweighs the abstract.
    return f"{title} {title} {summary}"


def cosine_similarity(vec1: TermVector, vec2: TermVector, idf: Dict[str, float]) -> float:
    """
    Cosine of two TF vectors after IDF weighting.

    Only the union of the two vectors' terms is visited. Returns 0 when
    either weighted vector has zero norm.
    """
    dot_product = 0.0
    norm1 = 0.0
    norm2 = 0.0

    # dict.fromkeys keeps a stable union order, so sums are reproducible
    for term in dict.fromkeys([*vec1, *vec2]):
        weight = idf.get(term, 1.0)
        v1 = vec1.get(term, 0.0) * weight
        v2 = vec2.get(term, 0.0) * weight
        dot_product += v1 * v2
        norm1 += v1 * v1
        norm2 += v2 * v2

    if norm1 == 0 or norm2 == 0:
        return 0.0
    return min(1.0, dot_product / (math.sqrt(norm1) * math.sqrt(norm2)))


class WorldlineSimilarityTask:
    """Score candidate papers against worldline text profiles."""

    def execute(
        self,
        candidates: List[Dict[str, Any]],
        worldline_profiles: List[Dict[str, Any]],
        threshold: float,
    ) -> List[Dict[str, Any]]:
        """
        Match candidate papers to worldlines.

        Args:
            candidates: [{id, title, summary}]
            worldline_profiles: [{id, name, color, papers: [{title, summary}]}]
            threshold: Minimum score for a match to be reported

        Returns:
            [{paperId, matches: [{worldlineId, worldlineName, worldlineColor, score}]}]
            for papers with at least one match; matches sorted by descending
            score, scores rounded to 3 decimals
        """
        profiles = [p for p in worldline_profiles if p.get("papers")]
        if not candidates or not profiles:
            return []

        candidate_tfs = [
            term_frequency(tokenize(_weighted_text(c.get("title") or "", c.get("summary") or "")))
            for c in candidates
        ]
        profile_tfs = [
            term_frequency(tokenize(" ".join(
                _weighted_text(p.get("title") or "", p.get("summary") or "")
                for p in profile["papers"]
            )))
            for profile in profiles
        ]

        idf = inverse_document_frequency(candidate_tfs + profile_tfs)

        results = []
        for candidate, candidate_tf in zip(candidates, candidate_tfs):
            matches = []
            for profile, profile_tf in zip(profiles, profile_tfs):
                score = cosine_similarity(candidate_tf, profile_tf, idf)
                if score >= threshold:
                    matches.append({
                        "worldlineId": profile["id"],
                        "worldlineName": profile["name"],
                        "worldlineColor": profile["color"],
                        "score": round(score, 3),
                    })
            if matches:
                matches.sort(key=lambda m: m["score"], reverse=True)
                results.append({"paperId": candidate["id"], "matches": matches})

        logger.info(
            f"Scored {len(candidates)} papers against {len(profiles)} worldlines: "
            f"{len(results)} papers matched at threshold {threshold}"
        )
        return results
