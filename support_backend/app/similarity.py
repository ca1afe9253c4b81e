#!/usr/bin/env python3
"""
Similarity module for the support assistant.

This module selects the documentation snippets that go into the prompt using a
normalized Levenshtein similarity over titles and contents. It is a plain
lexical scorer: no index, no embeddings.
"""

from typing import Any, List, Mapping, Union

from pydantic import BaseModel

from ..schemas.documents import Document, ScoredDocument

SUBSTRING_SCORE = 0.9
TITLE_WEIGHT = 0.6
CONTENT_WEIGHT = 0.4
MAX_RESULTS = 5


def get_edit_distance(str1: str, str2: str) -> int:
    """
    Levenshtein distance with unit costs for insertion, deletion and substitution.

    Args:
        str1: First string
        str2: Second string

    Returns:
        Minimum number of single-character edits
    """
    previous = list(range(len(str2) + 1))
    for i, c1 in enumerate(str1, 1):
        current = [i]
        for j, c2 in enumerate(str2, 1):
            if c1 == c2:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], previous[j], current[j - 1]) + 1)
        previous = current
    return previous[-1]


def calculate_similarity(str1: str, str2: str) -> float:
    """
    Calculate similarity between two strings (0 to 1).

    Exact matches score 1.0 and substring containment scores a flat 0.9;
    anything else is the edit distance normalized by the longer length.
    """
    s1 = str1.lower()
    s2 = str2.lower()

    if s1 == s2:
        return 1.0

    if s2 in s1 or s1 in s2:
        return SUBSTRING_SCORE

    longer, shorter = (s1, s2) if len(s1) > len(s2) else (s2, s1)
    if len(longer) == 0:
        return 1.0

    edit_distance = get_edit_distance(longer, shorter)
    return max(0.0, (len(longer) - edit_distance) / len(longer))


def _field(doc: Union[Document, Mapping[str, Any]], name: str) -> str:
    value = doc.get(name) if isinstance(doc, Mapping) else getattr(doc, name, "")
    return value if isinstance(value, str) else ""


def _source_fields(doc) -> dict:
    if isinstance(doc, Mapping):
        return {k: v for k, v in doc.items() if isinstance(k, str)}
    if isinstance(doc, BaseModel):
        return doc.model_dump()
    return {}


def find_relevant_docs(query: str, documents: Any, threshold: float = 0.3) -> List[ScoredDocument]:
    """
    Rank documents against a query.

    Args:
        query: User query
        documents: List of Document objects or {"title", "content"} mappings
        threshold: Minimum combined similarity score (0-1)

    Returns:
        At most five documents, best first; equal scores keep source order.
        Extra fields on a source entry (such as an id) are carried through.
    """
    if not isinstance(documents, (list, tuple)):
        return []

    scored = []
    for doc in documents:
        title = _field(doc, "title")
        content = _field(doc, "content")
        title_similarity = calculate_similarity(query, title)
        content_similarity = calculate_similarity(query, content)

        # Weight title matches higher
        combined = title_similarity * TITLE_WEIGHT + content_similarity * CONTENT_WEIGHT
        if combined >= threshold:
            fields = _source_fields(doc)
            fields.update(title=title, content=content, similarity=combined)
            scored.append(ScoredDocument.model_validate(fields))

    scored.sort(key=lambda d: d.similarity, reverse=True)
    return scored[:MAX_RESULTS]


def score_relevance(query: str, text: str) -> float:
    """Fraction of query words that appear in the text."""
    query_words = query.lower().split()
    if not query_words:
        return 0.0
    text_lower = text.lower()
    matches = sum(1 for word in query_words if word in text_lower)
    return matches / len(query_words)
