"""End-to-end orchestration of the medical Q&A pipeline.

Flow per request:
1. validate and sanitize the question
2. resolve or create the session, persist the user message
3. decompose into sub-queries
4. run graph navigation and document retrieval concurrently under one timeout
5. synthesize sections, attach citations
6. persist the assistant message (best effort) and build the response envelope
"""

from __future__ import annotations

import logging
import re
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Sequence, TypeVar

from .citations import DISCLAIMER, verify_answer
from .config import DEFAULT_SETTINGS, PipelineSettings
from .decomposer import decompose_query
from .errors import InputValidationError, SessionError, StoreError
from .navigator import KnowledgeGraphNavigator
from .retriever import DocumentRetriever
from .schemas import (
    AnswerResult,
    ChatMetadata,
    ChatResponse,
    DataQuality,
    EntityMatch,
    Message,
    NavigationResult,
    QueryType,
    RetrievalResult,
    Role,
    ScoredDocument,
    Section,
    SubQuery,
)
from .stores import DocumentStore, GraphStore, SessionStore
from .synthesizer import SYSTEM_SOURCE, synthesize_answer

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SUSPICIOUS_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE) for pattern in (r"<script", r"javascript:", r"\bon\w+\s*=", r"eval\(")
)

SYNTHESIS_FAILURE_MESSAGE = (
    "I encountered an issue processing your query. Please try rephrasing your question "
    "or contact support if the issue persists."
)
VERIFICATION_FAILURE_MESSAGE = (
    "An error occurred while verifying the answer. Please try again or contact support."
)
NO_EVIDENCE_ANSWER = """I couldn't find specific information about "{question}" in the medical knowledge base. This could be because:

1. The topic is highly specialized or emerging
2. Different terminology might be used in medical literature
3. The information may not be available in the current database

**Recommendations:**
- Try rephrasing your question with different medical terms
- Consult a healthcare professional for personalized advice
- Check authoritative medical sources like PubMed or MedlinePlus

{disclaimer}"""


def validate_question(question: Any, settings: PipelineSettings = DEFAULT_SETTINGS) -> None:
    if not question:
        raise InputValidationError("Message is required")
    if not isinstance(question, str):
        raise InputValidationError("Message must be a string")

    trimmed = question.strip()
    if len(trimmed) < settings.min_message_length:
        raise InputValidationError("Message is too short")
    if len(trimmed) > settings.max_message_length:
        raise InputValidationError(
            f"Message exceeds maximum length of {settings.max_message_length} characters"
        )
    if any(pattern.search(trimmed) for pattern in _SUSPICIOUS_PATTERNS):
        raise InputValidationError("Message contains invalid content")


def sanitize_question(question: str, max_length: int = DEFAULT_SETTINGS.max_message_length) -> str:
    collapsed = re.sub(r"\s+", " ", question.strip())
    return re.sub(r"[<>]", "", collapsed)[:max_length]


def limit_sub_queries(sub_queries: Sequence[SubQuery], max_sub_queries: int) -> list[SubQuery]:
    return [sq for sq in sub_queries if sq.text.strip()][:max_sub_queries]


def collect_entities(results: Sequence[NavigationResult]) -> list[EntityMatch]:
    """Flatten per-sub-query matches, keeping the first occurrence of each entity id."""

    seen: set[str] = set()
    entities: list[EntityMatch] = []
    for result in results:
        for match in result.entities:
            if match.entity.id not in seen:
                seen.add(match.entity.id)
                entities.append(match)
    return entities


def collect_documents(results: Sequence[RetrievalResult]) -> list[ScoredDocument]:
    seen: set[str] = set()
    documents: list[ScoredDocument] = []
    for result in results:
        for doc in result.documents:
            if doc.id not in seen:
                seen.add(doc.id)
                documents.append(doc)
    return documents


def assess_data_quality(entity_count: int, document_count: int) -> DataQuality:
    if entity_count == 0 and document_count == 0:
        return DataQuality.NONE
    if entity_count < 3 and document_count < 2:
        return DataQuality.LOW
    if entity_count < 10 and document_count < 5:
        return DataQuality.MEDIUM
    return DataQuality.HIGH


def no_evidence_answer(question: str) -> AnswerResult:
    return AnswerResult(
        answer=NO_EVIDENCE_ANSWER.format(question=question, disclaimer=DISCLAIMER),
        citations=[],
        verified=False,
    )


class AnswerPipeline:
    """Answer medical questions from a knowledge graph and a document corpus."""

    def __init__(
        self,
        graph_store: GraphStore,
        document_store: DocumentStore,
        session_store: SessionStore,
        settings: PipelineSettings = DEFAULT_SETTINGS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.navigator = KnowledgeGraphNavigator(graph_store)
        self.retriever = DocumentRetriever(document_store)
        self.session_store = session_store
        self.settings = settings
        self._sleep = sleep

    # -- persistence -----------------------------------------------------

    def _with_retry(self, operation: Callable[[], T], description: str) -> T:
        attempts = max(1, self.settings.max_retries)
        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                return operation()
            except SessionError:
                raise
            except Exception as exc:
                last_error = exc
                logger.warning("%s attempt %d/%d failed: %s", description, attempt, attempts, exc)
                if attempt < attempts:
                    self._sleep(self.settings.retry_delay * attempt)
        raise StoreError(f"{description} failed after {attempts} attempts") from last_error

    def _resolve_session(self, session_id: str | None) -> str:
        if not session_id:
            return self._with_retry(self.session_store.create_session, "Session creation")
        if not self.session_store.session_exists(session_id):
            raise SessionError(f"Invalid session ID: {session_id}")
        return session_id

    def _save_message(self, session_id: str, message: Message) -> None:
        self._with_retry(
            lambda: self.session_store.append_message(session_id, message),
            f"Save {message.role.value} message",
        )

    # -- pipeline stages -------------------------------------------------

    def _decompose(self, question: str) -> list[SubQuery]:
        try:
            sub_queries = decompose_query(question)
        except Exception:
            logger.exception("Query decomposition failed, using general fallback")
            sub_queries = [
                SubQuery(text=question, type=QueryType.GENERAL, priority=1),
                SubQuery(text=f"What is {question}?", type=QueryType.DEFINITION, priority=2),
            ]
        return limit_sub_queries(sub_queries, self.settings.max_sub_queries)

    def _branch_outcome(self, name: str, future: Future) -> list:
        if not future.done():
            future.cancel()
            logger.error("%s timed out after %.1fs; continuing without it", name, self.settings.branch_timeout)
            return []
        error = future.exception()
        if error is not None:
            logger.error("%s failed; continuing without it: %s", name, error, exc_info=error)
            return []
        return future.result()

    def gather_evidence(
        self, sub_queries: Sequence[SubQuery]
    ) -> tuple[list[NavigationResult], list[RetrievalResult]]:
        """Run navigation and retrieval concurrently; a failed or late branch yields ``[]``."""

        if not sub_queries:
            return [], []

        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="medrag-branch")
        try:
            navigation = executor.submit(self.navigator.navigate_all, sub_queries)
            retrieval = executor.submit(self.retriever.retrieve_all, sub_queries)
            wait((navigation, retrieval), timeout=self.settings.branch_timeout)
            return (
                self._branch_outcome("Knowledge graph navigation", navigation),
                self._branch_outcome("Document retrieval", retrieval),
            )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _synthesize(
        self,
        question: str,
        sub_queries: Sequence[SubQuery],
        entities: Sequence[EntityMatch],
        documents: Sequence[ScoredDocument],
    ) -> list[Section]:
        try:
            return synthesize_answer(question, sub_queries, entities, documents)
        except Exception:
            logger.exception("Answer synthesis failed")
            return [Section(type=QueryType.GENERAL.value, content=SYNTHESIS_FAILURE_MESSAGE, source=SYSTEM_SOURCE)]

    def _verify(
        self,
        sections: Sequence[Section],
        entities: Sequence[EntityMatch],
        documents: Sequence[ScoredDocument],
    ) -> AnswerResult:
        try:
            return verify_answer(sections, entities, documents)
        except Exception:
            logger.exception("Citation verification failed")
            return AnswerResult(answer=VERIFICATION_FAILURE_MESSAGE, citations=[], verified=False)

    # -- public operations -----------------------------------------------

    def answer(self, question: Any, session_id: str | None = None) -> ChatResponse:
        started = time.perf_counter()

        validate_question(question, self.settings)
        message = sanitize_question(question, self.settings.max_message_length)

        session_id = self._resolve_session(session_id)
        self._save_message(session_id, Message(role=Role.USER, content=message))

        sub_queries = self._decompose(message)
        navigation, retrieval = self.gather_evidence(sub_queries)
        entities = collect_entities(navigation)[: self.settings.max_entities]
        documents = collect_documents(retrieval)[: self.settings.max_documents]

        if not entities and not documents:
            logger.info("No evidence found for session %s", session_id)
            result = no_evidence_answer(message)
        else:
            sections = self._synthesize(message, sub_queries, entities, documents)
            result = self._verify(sections, entities, documents)

        assistant_message = Message(
            role=Role.ASSISTANT,
            content=result.answer,
            sub_queries=sub_queries,
            retrieved_entities=entities,
            retrieved_docs=documents,
            citations=result.citations,
        )
        try:
            self._save_message(session_id, assistant_message)
        except (StoreError, SessionError) as exc:
            logger.error("Assistant message not persisted for session %s: %s", session_id, exc)

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Answered question | session=%s sub_queries=%d entities=%d documents=%d elapsed_ms=%d",
            session_id,
            len(sub_queries),
            len(entities),
            len(documents),
            elapsed_ms,
        )
        return ChatResponse(
            session_id=session_id,
            answer=result.answer,
            citations=result.citations,
            metadata=ChatMetadata(
                sub_queries=[sq.text for sq in sub_queries],
                entities_found=len(entities),
                documents_found=len(documents),
                processing_time_ms=elapsed_ms,
                data_quality=assess_data_quality(len(entities), len(documents)),
            ),
        )

    def history(self, session_id: str | None) -> list[Message]:
        if not session_id:
            raise InputValidationError("Session ID is required")
        if not self.session_store.session_exists(session_id):
            raise SessionError(f"Session not found: {session_id}")
        return self.session_store.list_messages(session_id)
