from datetime import datetime, timezone

import pytest

from medrag.qa.ranker import Candidate, deduplicate_candidates, normalize_score, rank_documents, score_candidate
from medrag.qa.schemas import Document, MatchType, QueryType

CONTENT = (
    "Asthma is a chronic inflammatory disease of the airways. Common triggers include allergens, "
    "respiratory infections, exercise, cold air and air pollution. Avoiding triggers and using "
    "controller medications as prescribed keeps most patients symptom free."
)


def _doc(doc_id, title, content=CONTENT, source="MedlinePlus", doc_type="article", **extra):
    return Document(id=doc_id, title=title, content=content, source=source, doc_type=doc_type, **extra)


def test_exact_query_phrase_in_title_scores_higher():
    terms = ["asthma", "triggers"]
    with_phrase = Candidate(_doc("a", "Asthma triggers"), MatchType.KEYWORD)
    without_phrase = Candidate(_doc("b", "Triggers of asthma"), MatchType.KEYWORD)

    ranked = rank_documents([without_phrase, with_phrase], "asthma triggers", QueryType.GENERAL, terms, 2)

    assert [doc.id for doc in ranked] == ["a", "b"]
    assert ranked[0].score > ranked[1].score
    assert "full_query" in ranked[0].matched_terms


def test_ranking_is_deterministic():
    candidates = [
        Candidate(_doc("a", "Asthma triggers"), MatchType.EXACT),
        Candidate(_doc("b", "Asthma care", doc_type="guide", source="Clinical Guidelines"), MatchType.TYPE),
        Candidate(_doc("c", "Air quality", doc_type="abstract", source="PubMed"), MatchType.KEYWORD, "triggers"),
    ]
    args = ("What triggers asthma?", QueryType.CAUSES, ["triggers", "asthma"], 1)

    first = rank_documents(candidates, *args)
    second = rank_documents(candidates, *args)

    assert [(d.id, d.score) for d in first] == [(d.id, d.score) for d in second]


def test_ties_keep_discovery_order():
    candidates = [Candidate(_doc(doc_id, "Asthma overview"), MatchType.KEYWORD) for doc_id in ("x", "y", "z")]

    ranked = rank_documents(candidates, "asthma", QueryType.GENERAL, ["asthma"], 2)

    assert [d.id for d in ranked] == ["x", "y", "z"]
    assert len({d.score for d in ranked}) == 1


def test_unmatched_document_is_halved():
    candidate = Candidate(_doc("a", "Unrelated", content="Short note.", source="Blog"), MatchType.TYPE)

    score, matched = score_candidate(candidate, "gout", QueryType.GENERAL, ["gout"], 2)

    # type match 10 + preferred article 12, halved
    assert score == 11.0
    assert matched == []


def test_primary_priority_boost():
    candidate = Candidate(_doc("a", "Asthma", doc_type="note", source="Blog"), MatchType.KEYWORD)

    primary, _ = score_candidate(candidate, "asthma", QueryType.GENERAL, ["asthma"], 1)
    secondary, _ = score_candidate(candidate, "asthma", QueryType.GENERAL, ["asthma"], 2)

    assert primary == pytest.approx(secondary * 1.1, abs=0.01)


def test_content_frequency_bonus_is_capped():
    candidate = Candidate(
        _doc("a", "Notes", content="asthma " * 100, source="Blog", doc_type="note"), MatchType.KEYWORD
    )

    score, matched = score_candidate(candidate, "asthma", QueryType.GENERAL, ["asthma"], 2)

    # capped content bonus 15 + balanced length 8
    assert score == 23.0
    assert matched == ["asthma"]


def test_normalize_score_clamps():
    assert normalize_score(150) == 1.0
    assert normalize_score(-5) == 0.0
    assert normalize_score(42) == pytest.approx(0.42)


def test_deduplicate_keeps_first_stage():
    doc = _doc("a", "Asthma triggers")
    candidates = [
        Candidate(doc, MatchType.EXACT),
        Candidate(doc, MatchType.KEYWORD, "asthma"),
        Candidate(_doc("b", "Other"), MatchType.KEYWORD, "asthma"),
        Candidate(doc, MatchType.TYPE),
    ]

    unique = deduplicate_candidates(candidates)

    assert [(c.document.id, c.match_type) for c in unique] == [("a", MatchType.EXACT), ("b", MatchType.KEYWORD)]


def test_ranked_document_metadata_passthrough():
    created = datetime(2024, 5, 1, tzinfo=timezone.utc)
    candidate = Candidate(_doc("a", "Asthma", metadata={"pmid": "123"}, created_at=created), MatchType.KEYWORD)

    ranked = rank_documents([candidate], "asthma", QueryType.GENERAL, ["asthma"], 1)[0]

    assert ranked.metadata == {"content_length": len(CONTENT), "created_at": created, "pmid": "123"}
    assert ranked.match_type == MatchType.KEYWORD
    assert 0.0 <= ranked.relevance_score <= 1.0
