"""Answer-quality metrics for validation runs."""

from __future__ import annotations

from typing import Any


def compute_term_recall(answer: str, expected_terms: list[str]) -> float:
    """Share of expected terms that appear in the answer text (1.0 when none are expected)."""

    if not expected_terms:
        return 1.0

    text = answer.lower()
    hits = sum(1 for term in expected_terms if term.lower() in text)
    return hits / len(expected_terms)


def compute_type_coverage(sub_query_types: list[str], expected_types: list[str]) -> float:
    if not expected_types:
        return 1.0

    produced = set(sub_query_types)
    return sum(1 for qtype in expected_types if qtype in produced) / len(expected_types)


def citation_summary(citations: list[dict[str, Any]]) -> dict[str, float | int | bool]:
    """Count citations by type and flag whether the answer is cited at all."""

    documents = sum(1 for c in citations if c.get("type") == "document")
    return {
        "citations": len(citations),
        "document_citations": documents,
        "graph_citations": len(citations) - documents,
        "cited": bool(citations),
    }
