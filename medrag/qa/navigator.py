"""Knowledge-graph navigation for typed sub-queries."""

from __future__ import annotations

import logging
from typing import Sequence

from .errors import StoreError
from .schemas import EntityMatch, NavigationResult, QueryType, SubQuery
from .stores import GraphStore
from .terms import extract_keywords

logger = logging.getLogger(__name__)

ENTITIES_PER_TERM = 5
RELATIONSHIPS_PER_ENTITY = 10
MAX_MATCHES = 10
FALLBACK_MATCHES = 5

# Entity types or relationship-type fragments that count as evidence for a query type.
RELEVANT_CATEGORIES: dict[QueryType, tuple[str, ...]] = {
    QueryType.SYMPTOMS: ("symptom", "sign"),
    QueryType.CAUSES: ("cause", "risk_factor"),
    QueryType.TREATMENT: ("treatment", "drug", "therapy"),
    QueryType.PREVENTION: ("prevention", "lifestyle"),
    QueryType.DIAGNOSIS: ("diagnosis", "test"),
}


def deduplicate_matches(matches: Sequence[EntityMatch]) -> list[EntityMatch]:
    seen: set[str] = set()
    unique: list[EntityMatch] = []
    for match in matches:
        if match.entity.id not in seen:
            seen.add(match.entity.id)
            unique.append(match)
    return unique


def _is_relevant(match: EntityMatch, categories: Sequence[str]) -> bool:
    if match.entity.entity_type in categories:
        return True
    return any(category in rel.relationship_type for rel in match.relationships for category in categories)


def filter_by_query_type(matches: Sequence[EntityMatch], query_type: QueryType) -> list[EntityMatch]:
    """Keep matches relevant to the query type, falling back to unfiltered ones."""

    if query_type in (QueryType.GENERAL, QueryType.DEFINITION):
        return list(matches[:MAX_MATCHES])

    categories = RELEVANT_CATEGORIES.get(query_type, ())
    filtered = [match for match in matches if _is_relevant(match, categories)]
    if filtered:
        return filtered[:MAX_MATCHES]
    return list(matches[:FALLBACK_MATCHES])


class KnowledgeGraphNavigator:
    """Map sub-queries to graph entities and their incident relationships."""

    def __init__(self, graph_store: GraphStore):
        self.graph_store = graph_store

    def _relationships(self, entity_id: str):
        try:
            return self.graph_store.find_relationships(entity_id, limit=RELATIONSHIPS_PER_ENTITY)
        except StoreError as exc:
            logger.warning("Relationship lookup failed for entity %s: %s", entity_id, exc)
            return []

    def navigate(self, sub_query: SubQuery) -> list[EntityMatch]:
        matches: list[EntityMatch] = []
        for term in extract_keywords(sub_query.text):
            try:
                entities = self.graph_store.find_entities(term, limit=ENTITIES_PER_TERM)
            except StoreError as exc:
                logger.warning("Entity search failed for term %r: %s", term, exc)
                continue
            for entity in entities:
                matches.append(EntityMatch(entity=entity, relationships=self._relationships(entity.id)))

        return filter_by_query_type(deduplicate_matches(matches), sub_query.type)

    def navigate_all(self, sub_queries: Sequence[SubQuery]) -> list[NavigationResult]:
        results = [NavigationResult(sub_query=sq, entities=self.navigate(sq)) for sq in sub_queries]
        logger.info(
            "Knowledge graph navigation finished | sub_queries=%d entities=%d",
            len(results),
            sum(len(r.entities) for r in results),
        )
        return results
