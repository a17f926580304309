"""Multi-stage document retrieval for typed sub-queries."""

from __future__ import annotations

import logging
import re
from typing import Sequence

from .errors import StoreError
from .ranker import Candidate, deduplicate_candidates, preferred_doc_types, rank_documents
from .schemas import MatchType, RetrievalResult, ScoredDocument, SubQuery
from .stores import DocumentStore
from .terms import combined_terms

logger = logging.getLogger(__name__)

TOP_K = 5
EXACT_LIMIT = 2
KEYWORD_TERMS = 5
KEYWORD_LIMIT = 3
TYPE_TERMS = 3
TYPE_LIMIT = 2


class DocumentRetriever:
    """Exact-phrase, keyword and type-affinity search feeding one ranked pool."""

    def __init__(self, document_store: DocumentStore, top_k: int = TOP_K):
        self.document_store = document_store
        self.top_k = top_k

    def _exact_stage(self, query: str) -> list[Candidate]:
        phrase = re.sub(r"[?!.,]", "", query).strip()
        if not phrase:
            return []
        try:
            docs = self.document_store.find_documents_by_title(phrase, limit=EXACT_LIMIT)
        except StoreError as exc:
            logger.warning("Exact-phrase search failed for %r: %s", phrase, exc)
            return []
        return [Candidate(doc, MatchType.EXACT) for doc in docs]

    def _keyword_stage(self, terms: Sequence[str]) -> list[Candidate]:
        candidates: list[Candidate] = []
        for term in terms[:KEYWORD_TERMS]:
            try:
                docs = self.document_store.find_documents_by_term(term, limit=KEYWORD_LIMIT)
            except StoreError as exc:
                logger.warning("Keyword search failed for term %r: %s", term, exc)
                continue
            candidates.extend(Candidate(doc, MatchType.KEYWORD, term) for doc in docs)
        return candidates

    def _type_stage(self, sub_query: SubQuery, terms: Sequence[str]) -> list[Candidate]:
        categories = preferred_doc_types(sub_query.type)
        try:
            docs = self.document_store.find_documents_by_category_and_terms(
                categories, list(terms[:TYPE_TERMS]), limit=TYPE_LIMIT
            )
        except StoreError as exc:
            logger.warning("Type-affinity search failed for %s: %s", sub_query.type.value, exc)
            return []
        return [Candidate(doc, MatchType.TYPE) for doc in docs]

    def retrieve(self, sub_query: SubQuery) -> list[ScoredDocument]:
        terms = combined_terms(sub_query.text)
        if not terms:
            return []

        candidates = [
            *self._exact_stage(sub_query.text),
            *self._keyword_stage(terms),
            *self._type_stage(sub_query, terms),
        ]
        ranked = rank_documents(
            deduplicate_candidates(candidates),
            query=sub_query.text,
            query_type=sub_query.type,
            terms=terms,
            priority=sub_query.priority,
        )
        return ranked[: self.top_k]

    def retrieve_all(self, sub_queries: Sequence[SubQuery]) -> list[RetrievalResult]:
        results = [RetrievalResult(sub_query=sq, documents=self.retrieve(sq)) for sq in sub_queries]
        logger.info(
            "Document retrieval finished | sub_queries=%d documents=%d",
            len(results),
            sum(len(r.documents) for r in results),
        )
        return results
