"""Relevance scoring for retrieved medical documents.

Each candidate is scored by summing independent signals: how it was found,
title and content term hits, category fit for the query type, source authority
and content length. Primary sub-queries get a small multiplicative boost and
candidates with no term hit at all are halved.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from .schemas import Document, MatchType, QueryType, ScoredDocument

EXACT_MATCH_BONUS = 25.0
TYPE_MATCH_BONUS = 10.0
FULL_QUERY_TITLE_BONUS = 20.0
TITLE_TERM_BONUS = 15.0
CONTENT_FREQUENCY_WEIGHT = 5.0
CONTENT_TERM_CAP = 15.0
PREFERRED_TYPE_BONUS = 12.0
AUTHORITY_BONUS = 10.0
BALANCED_LENGTH_BONUS = 8.0
LONG_CONTENT_BONUS = 5.0
ABSTRACT_BONUS = 3.0
PRIMARY_QUERY_BOOST = 1.1
NO_MATCH_PENALTY = 0.5
SCORE_SCALE = 100.0

PREFERRED_DOC_TYPES: dict[QueryType, tuple[str, ...]] = {
    QueryType.DEFINITION: ("article", "guide"),
    QueryType.SYMPTOMS: ("article", "abstract"),
    QueryType.CAUSES: ("abstract", "article"),
    QueryType.TREATMENT: ("guide", "abstract"),
    QueryType.PREVENTION: ("guide", "article"),
    QueryType.DIAGNOSIS: ("guide", "abstract"),
    QueryType.PROGNOSIS: ("abstract", "article"),
    QueryType.RISK_FACTORS: ("abstract", "article"),
    QueryType.GENERAL: ("article", "guide"),
}

AUTHORITATIVE_SOURCES = (
    "medlineplus",
    "pubmed",
    "clinical guidelines",
    "mayo clinic",
    "nih",
    "cdc",
    "who",
)


@dataclass(frozen=True)
class Candidate:
    """A document as surfaced by one retrieval stage."""

    document: Document
    match_type: MatchType
    matched_term: str | None = None


def preferred_doc_types(query_type: QueryType) -> tuple[str, ...]:
    return PREFERRED_DOC_TYPES.get(query_type, PREFERRED_DOC_TYPES[QueryType.GENERAL])


def deduplicate_candidates(candidates: Sequence[Candidate]) -> list[Candidate]:
    """Drop repeated document ids, keeping the first stage that found each one."""

    seen: set[str] = set()
    unique: list[Candidate] = []
    for candidate in candidates:
        if candidate.document.id not in seen:
            seen.add(candidate.document.id)
            unique.append(candidate)
    return unique


def normalize_score(score: float) -> float:
    return min(max(score / SCORE_SCALE, 0.0), 1.0)


def score_candidate(
    candidate: Candidate,
    query: str,
    query_type: QueryType,
    terms: Sequence[str],
    priority: int,
) -> tuple[float, list[str]]:
    doc = candidate.document
    title = doc.title.lower()
    content = doc.content.lower()
    matched: list[str] = []
    score = 0.0

    if candidate.match_type == MatchType.EXACT:
        score += EXACT_MATCH_BONUS
    elif candidate.match_type == MatchType.TYPE:
        score += TYPE_MATCH_BONUS

    if query.lower() in title:
        score += FULL_QUERY_TITLE_BONUS
        matched.append("full_query")

    for term in terms:
        if term in title:
            score += TITLE_TERM_BONUS
            matched.append(term)

    for term in terms:
        occurrences = content.count(term)
        if occurrences > 0:
            score += min(math.log2(occurrences + 1) * CONTENT_FREQUENCY_WEIGHT, CONTENT_TERM_CAP)
            matched.append(term)

    if doc.doc_type in preferred_doc_types(query_type):
        score += PREFERRED_TYPE_BONUS

    source = doc.source.lower()
    if any(name in source for name in AUTHORITATIVE_SOURCES):
        score += AUTHORITY_BONUS

    length = len(doc.content)
    if 200 < length < 2000:
        score += BALANCED_LENGTH_BONUS
    elif length >= 2000:
        score += LONG_CONTENT_BONUS

    if priority == 1:
        score *= PRIMARY_QUERY_BOOST

    if doc.doc_type == "abstract":
        score += ABSTRACT_BONUS

    if not matched:
        score *= NO_MATCH_PENALTY

    return round(score, 2), list(dict.fromkeys(matched))


def rank_documents(
    candidates: Sequence[Candidate],
    query: str,
    query_type: QueryType,
    terms: Sequence[str],
    priority: int,
) -> list[ScoredDocument]:
    """Score candidates and sort them by descending score, ties in discovery order."""

    scored: list[ScoredDocument] = []
    for candidate in candidates:
        score, matched_terms = score_candidate(candidate, query, query_type, terms, priority)
        doc = candidate.document
        scored.append(
            ScoredDocument(
                **doc.model_dump(exclude={"metadata"}),
                metadata={"content_length": len(doc.content), "created_at": doc.created_at, **doc.metadata},
                score=score,
                relevance_score=normalize_score(score),
                match_type=candidate.match_type,
                matched_terms=matched_terms,
            )
        )
    return sorted(scored, key=lambda item: item.score, reverse=True)
