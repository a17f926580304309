"""Rule-based decomposition of medical questions into typed sub-queries."""

from __future__ import annotations

import re

from .schemas import QueryType, SubQuery

# Checked in order; a type is detected when any of its phrases occurs in the question.
_TYPE_KEYWORDS: tuple[tuple[QueryType, tuple[str, ...]], ...] = (
    (QueryType.DEFINITION, ("what is", "what are", "define")),
    (QueryType.SYMPTOMS, ("symptoms of", "signs of", "how do i know")),
    (QueryType.CAUSES, ("causes of", "why does", "what causes")),
    (QueryType.TREATMENT, ("treatment for", "how to treat", "cure for")),
    (QueryType.PREVENTION, ("prevent", "prevention", "avoid")),
    (QueryType.DIAGNOSIS, ("diagnosis", "how to diagnose", "test for")),
    (QueryType.PROGNOSIS, ("prognosis", "outcome", "recovery")),
    (QueryType.RISK_FACTORS, ("risk factors", "who gets")),
)

_TEMPLATES: dict[QueryType, tuple[str, int]] = {
    QueryType.DEFINITION: ("What is {condition}?", 1),
    QueryType.GENERAL: ("What is {condition}?", 1),
    QueryType.SYMPTOMS: ("What are the symptoms of {condition}?", 2),
    QueryType.CAUSES: ("What causes {condition}?", 2),
    QueryType.RISK_FACTORS: ("What are the risk factors for {condition}?", 2),
    QueryType.TREATMENT: ("How is {condition} treated?", 3),
    QueryType.DIAGNOSIS: ("How is {condition} diagnosed?", 3),
    QueryType.PREVENTION: ("How can {condition} be prevented?", 4),
    QueryType.PROGNOSIS: ("What is the prognosis for {condition}?", 4),
}

_CONDITION_PATTERNS = (
    re.compile(r"(?:symptoms of|causes of|treatment for|diagnose|prevent)\s+([a-z\s]+?)(?:\?|$)", re.IGNORECASE),
    re.compile(r"(?:what is|what are|define|about)\s+([a-z\s]+?)(?:\?|$|symptoms|treatment|causes)", re.IGNORECASE),
    re.compile(r"^([a-z\s]+?)(?:\s+symptoms|\s+treatment|\s+causes)?$", re.IGNORECASE),
)

_LEADING_ARTICLE = re.compile(r"^(?:the|a|an)\s+", re.IGNORECASE)


def detect_query_types(question: str) -> list[QueryType]:
    """Return every query type whose keyword table hits, or ``[GENERAL]``."""

    text = question.lower()
    detected = [qtype for qtype, phrases in _TYPE_KEYWORDS if any(phrase in text for phrase in phrases)]
    return detected or [QueryType.GENERAL]


def extract_condition(question: str) -> str | None:
    """Isolate the medical condition a question is about, if one can be found."""

    text = question.strip()
    for pattern in _CONDITION_PATTERNS:
        match = pattern.search(text)
        if not match or not match.group(1):
            continue
        condition = _LEADING_ARTICLE.sub("", match.group(1).strip()).strip()
        if 2 < len(condition) < 50:
            return condition
    return None


def decompose_query(question: str) -> list[SubQuery]:
    """Split a question into sub-queries ordered by ascending priority."""

    condition = extract_condition(question)
    sub_queries: list[SubQuery] = []
    for qtype in detect_query_types(question):
        template, priority = _TEMPLATES[qtype]
        text = template.format(condition=condition) if condition else question
        sub_queries.append(SubQuery(text=text, type=qtype, priority=priority))

    if not sub_queries:
        sub_queries.append(SubQuery(text=question, type=QueryType.GENERAL, priority=1))

    return sorted(sub_queries, key=lambda sq: sq.priority)
