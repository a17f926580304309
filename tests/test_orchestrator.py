import time

import pytest

from medrag.qa.citations import DISCLAIMER
from medrag.qa.config import PipelineSettings
from medrag.qa.errors import InputValidationError, SessionError, StoreError, StoreUnavailableError
from medrag.qa.orchestrator import AnswerPipeline, assess_data_quality, limit_sub_queries, sanitize_question
from medrag.qa.schemas import CitationType, DataQuality, Document, Entity, QueryType, Role, SubQuery
from medrag.qa.seed_data import build_seeded_stores
from medrag.qa.stores import InMemoryDocumentStore, InMemoryGraphStore, InMemorySessionStore

HYPERTENSION = Entity(
    id="ent-1",
    name="Hypertension",
    description="High blood pressure, a condition where the force of blood against artery walls is too high.",
    entity_type="disease",
    source="MedlinePlus",
)
ARTICLE = Document(
    id="doc-1",
    title="Hypertension: The Silent Killer",
    content="Hypertension, or high blood pressure, often has no symptoms but can lead to serious complications.",
    source="American Heart Association",
    doc_type="article",
)


class SlowGraphStore(InMemoryGraphStore):
    def find_entities(self, term, limit=5):
        time.sleep(1.0)
        return super().find_entities(term, limit)


class BrokenGraphStore:
    def find_entities(self, term, limit=5):
        raise RuntimeError("graph index corrupted")

    def find_relationships(self, entity_id, limit=10):
        return []


class AssistantSaveFails(InMemorySessionStore):
    def append_message(self, session_id, message):
        if message.role == Role.ASSISTANT:
            raise StoreError("chat_messages: insert failed")
        super().append_message(session_id, message)


class NoSessions(InMemorySessionStore):
    def create_session(self):
        raise StoreUnavailableError("chat_sessions: connection refused")


def _pipeline(graph=None, docs=None, sessions=None, **settings):
    if graph is None and docs is None:
        graph, docs = build_seeded_stores()
    delays = []
    pipeline = AnswerPipeline(
        graph,
        docs,
        sessions or InMemorySessionStore(),
        settings=PipelineSettings(**settings),
        sleep=delays.append,
    )
    return pipeline, delays


def test_single_entity_and_article_end_to_end():
    pipeline, _ = _pipeline(InMemoryGraphStore([HYPERTENSION]), InMemoryDocumentStore([ARTICLE]))

    response = pipeline.answer("What is hypertension?")

    assert [(c.id, c.type) for c in response.citations] == [
        (1, CitationType.KNOWLEDGE_GRAPH),
        (2, CitationType.DOCUMENT),
    ]
    assert response.citations[1].title == "Hypertension: The Silent Killer"
    assert response.metadata.sub_queries == ["What is hypertension?"]
    assert response.metadata.entities_found == 1
    assert response.metadata.documents_found == 1
    assert response.metadata.data_quality == DataQuality.LOW
    assert response.answer.endswith(DISCLAIMER)
    assert "[1]" in response.answer and "[2]" in response.answer


def test_history_records_user_and_assistant_messages():
    pipeline, _ = _pipeline()

    response = pipeline.answer("  What are the   symptoms of diabetes?  ")
    messages = pipeline.history(response.session_id)

    assert [m.role for m in messages] == [Role.USER, Role.ASSISTANT]
    assert messages[0].content == "What are the symptoms of diabetes?"
    assert messages[1].content == response.answer
    assert [sq.type for sq in messages[1].sub_queries] == [QueryType.DEFINITION, QueryType.SYMPTOMS]


def test_follow_up_reuses_session():
    pipeline, _ = _pipeline()

    first = pipeline.answer("What is asthma?")
    second = pipeline.answer("How is asthma treated?", session_id=first.session_id)

    assert second.session_id == first.session_id
    assert len(pipeline.history(first.session_id)) == 4


def test_slow_graph_branch_times_out():
    graph, docs = build_seeded_stores()
    pipeline, _ = _pipeline(SlowGraphStore(graph.entities, graph.relationships), docs, branch_timeout=0.2)

    response = pipeline.answer("What is hypertension?")

    assert response.metadata.entities_found == 0
    assert response.metadata.documents_found >= 1
    assert response.citations


def test_failing_branch_is_treated_as_empty():
    _, docs = build_seeded_stores()
    pipeline, _ = _pipeline(BrokenGraphStore(), docs)

    response = pipeline.answer("What is asthma?")

    assert response.metadata.entities_found == 0
    assert response.metadata.documents_found >= 1


def test_no_evidence_answer_is_persisted():
    pipeline, _ = _pipeline(InMemoryGraphStore(), InMemoryDocumentStore())

    response = pipeline.answer("What is zzzz?")

    assert response.answer.startswith('I couldn\'t find specific information about "What is zzzz?"')
    assert response.answer.endswith(DISCLAIMER)
    assert response.citations == []
    assert response.metadata.data_quality == DataQuality.NONE
    assert len(pipeline.history(response.session_id)) == 2


def test_assistant_save_failure_is_tolerated():
    graph, docs = build_seeded_stores()
    sessions = AssistantSaveFails()
    pipeline, delays = _pipeline(graph, docs, sessions)

    response = pipeline.answer("What is asthma?")

    assert response.success is True
    assert delays == [1.0, 2.0]
    assert [m.role for m in pipeline.history(response.session_id)] == [Role.USER]


def test_session_creation_exhaustion_raises():
    graph, docs = build_seeded_stores()
    pipeline, delays = _pipeline(graph, docs, NoSessions(), retry_delay=0.5)

    with pytest.raises(StoreError, match="failed after 3 attempts"):
        pipeline.answer("What is asthma?")
    assert delays == [0.5, 1.0]


def test_unknown_session_is_rejected():
    pipeline, _ = _pipeline()

    with pytest.raises(SessionError):
        pipeline.answer("What is asthma?", session_id="missing")
    with pytest.raises(SessionError):
        pipeline.history("missing")
    with pytest.raises(InputValidationError):
        pipeline.history(None)


@pytest.mark.parametrize(
    "question",
    ["", "   ", None, 42, "x" * 5001, "<script>alert(1)</script>", "javascript:void(0)", "img onerror=alert(1)"],
)
def test_invalid_questions_are_rejected(question):
    pipeline, _ = _pipeline()

    with pytest.raises(InputValidationError):
        pipeline.answer(question)


def test_sanitize_collapses_whitespace_and_strips_brackets():
    assert sanitize_question("  What   is\nasthma<>? ") == "What is asthma?"
    assert sanitize_question("a" * 20, max_length=5) == "aaaaa"


def test_limit_sub_queries_drops_blank_and_caps():
    sub_queries = [SubQuery(text=t, type=QueryType.GENERAL, priority=1) for t in ["a", " ", "b", "c"]]

    assert [sq.text for sq in limit_sub_queries(sub_queries, 2)] == ["a", "b"]


@pytest.mark.parametrize(
    "entities,documents,expected",
    [
        (0, 0, DataQuality.NONE),
        (2, 1, DataQuality.LOW),
        (0, 1, DataQuality.LOW),
        (5, 4, DataQuality.MEDIUM),
        (2, 3, DataQuality.MEDIUM),
        (10, 0, DataQuality.HIGH),
        (1, 5, DataQuality.HIGH),
    ],
)
def test_assess_data_quality(entities, documents, expected):
    assert assess_data_quality(entities, documents) == expected


def test_zero_retries_still_attempts_once():
    graph, docs = build_seeded_stores()
    failing, delays = _pipeline(graph, docs, NoSessions(), max_retries=0)

    with pytest.raises(StoreError, match="failed after 1 attempts"):
        failing.answer("What is asthma?")
    assert delays == []

    working, _ = _pipeline(graph, docs, max_retries=0)
    response = working.answer("What is asthma?")
    assert len(working.history(response.session_id)) == 2
