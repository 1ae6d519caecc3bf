"""Tokenization, term frequency and corpus statistics for paper text."""
import json
import math
import re
from collections import Counter
from typing import Dict, Iterable, List, Sequence, Union

TermVector = Dict[str, float]

CATEGORY_REPEAT = 3
MIN_TOKEN_LENGTH = 3

STOP_WORDS = frozenset([
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "is", "are", "was", "were", "be", "been",
    "being", "have", "has", "had", "do", "does", "did", "will", "would",
    "could", "should", "may", "might", "shall", "can", "it", "its",
    "this", "that", "these", "those", "we", "our", "they", "their",
    "them", "us", "he", "she", "his", "her", "which", "who", "whom",
    "what", "when", "where", "why", "how", "if", "then", "than",
    "so", "no", "not", "only", "very", "also", "just", "about",
    "such", "each", "all", "both", "more", "most", "other", "some",
    "any", "into", "over", "after", "before", "between", "through",
    "during", "above", "below", "up", "down", "out", "off", "as",
    "new", "use", "used", "using", "based", "show", "shows", "shown",
    "paper", "propose", "proposed", "method", "methods", "approach",
    "results", "result", "work", "study", "present", "data",
])

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def tokenize(text: str) -> List[str]:
    """
    Split text into lowercase alphanumeric tokens.

    Tokens shorter than three characters and stop words are dropped.
    """
    return [
        token
        for token in _NON_ALNUM.split((text or "").lower())
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def category_tokens(categories: Union[str, Sequence[str], None]) -> List[str]:
    """
    Fold category labels into tokens: "cs.AI" -> ["cs", "ai"].

    Accepts a list of labels or the JSON-encoded list stored on a paper row.
    Malformed JSON yields no tokens.
    """
    if isinstance(categories, str):
        try:
            categories = json.loads(categories)
        except ValueError:
            return []
    if not isinstance(categories, (list, tuple)):
        return []

    tokens = []
    for label in categories:
        if not isinstance(label, str):
            continue
        tokens.extend(part.lower() for part in label.split(".") if part)
    return tokens


def paper_tokens(title: str, summary: str, categories=None) -> List[str]:
    """Title, abstract, then category tokens repeated CATEGORY_REPEAT times."""
    cats = category_tokens(categories)
    return tokenize(title) + tokenize(summary) + cats * CATEGORY_REPEAT


def term_frequency(tokens: Sequence[str]) -> TermVector:
    """Raw counts divided by document length; empty documents give {}."""
    total = len(tokens)
    if total == 0:
        return {}
    return {term: count / total for term, count in Counter(tokens).items()}


def document_frequency(documents: Iterable[Iterable[str]]) -> Dict[str, int]:
    """
    Number of documents containing each term.

    Args:
        documents: Token sequences or term vectors (anything iterable over terms)

    Returns:
        term -> document count, in first-seen order
    """
    df: Dict[str, int] = {}
    for doc in documents:
        for term in dict.fromkeys(doc):
            df[term] = df.get(term, 0) + 1
    return df


def inverse_document_frequency(documents: Sequence[TermVector]) -> Dict[str, float]:
    """
    Smoothed IDF over every term observed in documents.

    idf = log((N + 1) / (df + 1)) + 1, always positive.
    """
    n_docs = len(documents)
    return {
        term: math.log((n_docs + 1) / (df + 1)) + 1
        for term, df in document_frequency(documents).items()
    }
