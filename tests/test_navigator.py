import pytest

from medrag.qa.errors import StoreError, StoreUnavailableError
from medrag.qa.navigator import KnowledgeGraphNavigator, filter_by_query_type
from medrag.qa.schemas import Entity, EntityMatch, QueryType, Relationship, SubQuery
from medrag.qa.seed_data import build_seeded_stores
from medrag.qa.stores import InMemoryGraphStore


def _entity(idx, name, entity_type="disease", description=None):
    return Entity(id=f"e{idx}", name=name, description=description or f"{name} description", entity_type=entity_type)


class RepeatingGraphStore:
    """Returns the same entity for every term."""

    def __init__(self, entity):
        self.entity = entity

    def find_entities(self, term, limit=5):
        return [self.entity]

    def find_relationships(self, entity_id, limit=10):
        return []


class FlakyGraphStore(InMemoryGraphStore):
    def __init__(self, failing_terms, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.failing_terms = set(failing_terms)

    def find_entities(self, term, limit=5):
        if term in self.failing_terms:
            raise StoreError(f"query failed for {term}")
        return super().find_entities(term, limit)


class UnreachableGraphStore:
    def find_entities(self, term, limit=5):
        raise StoreUnavailableError("connection refused")

    def find_relationships(self, entity_id, limit=10):
        raise StoreUnavailableError("connection refused")


def test_symptoms_query_keeps_symptom_related_entities():
    graph_store, _ = build_seeded_stores()
    navigator = KnowledgeGraphNavigator(graph_store)

    sub_query = SubQuery(text="What are the symptoms of diabetes?", type=QueryType.SYMPTOMS, priority=2)
    matches = navigator.navigate(sub_query)
    names = [m.entity.name for m in matches]

    assert names == ["Type 2 Diabetes", "Increased thirst"]
    assert any(rel.relationship_type == "has_symptom" for rel in matches[0].relationships)


def test_duplicate_entities_collapse_to_first_match():
    navigator = KnowledgeGraphNavigator(RepeatingGraphStore(_entity(1, "Asthma")))

    matches = navigator.navigate(SubQuery(text="asthma wheezing triggers", type=QueryType.GENERAL, priority=1))

    assert [m.entity.id for m in matches] == ["e1"]


def test_definition_returns_first_ten_unfiltered():
    matches = [EntityMatch(entity=_entity(i, f"Thing {i}", entity_type="drug")) for i in range(15)]

    assert len(filter_by_query_type(matches, QueryType.DEFINITION)) == 10


def test_type_filter_uses_relationship_types():
    disease = EntityMatch(
        entity=_entity(1, "Migraine"),
        relationships=[
            Relationship(id="r1", from_entity_id="e9", to_entity_id="e1", relationship_type="treated_by_drug")
        ],
    )
    other = EntityMatch(entity=_entity(2, "Nausea", entity_type="symptom"))

    assert filter_by_query_type([other, disease], QueryType.TREATMENT) == [disease]


def test_type_filter_falls_back_to_first_five_unfiltered():
    matches = [EntityMatch(entity=_entity(i, f"Disease {i}")) for i in range(8)]

    filtered = filter_by_query_type(matches, QueryType.DIAGNOSIS)

    assert filtered == matches[:5]


def test_failed_term_is_skipped():
    graph_store, _ = build_seeded_stores()
    flaky = FlakyGraphStore({"asthma"}, graph_store.entities, graph_store.relationships)
    navigator = KnowledgeGraphNavigator(flaky)

    matches = navigator.navigate(SubQuery(text="asthma wheezing", type=QueryType.GENERAL, priority=1))

    assert [m.entity.name for m in matches] == ["Wheezing"]


def test_unreachable_store_returns_empty_list():
    navigator = KnowledgeGraphNavigator(UnreachableGraphStore())

    assert navigator.navigate(SubQuery(text="What is asthma?", type=QueryType.DEFINITION, priority=1)) == []


@pytest.mark.parametrize("query_type", [QueryType.SYMPTOMS, QueryType.DEFINITION])
def test_navigate_all_groups_results_per_sub_query(query_type):
    graph_store, _ = build_seeded_stores()
    navigator = KnowledgeGraphNavigator(graph_store)
    sub_queries = [
        SubQuery(text="asthma", type=query_type, priority=1),
        SubQuery(text="zzzz", type=query_type, priority=2),
    ]

    results = navigator.navigate_all(sub_queries)

    assert [r.sub_query for r in results] == sub_queries
    assert results[0].entities
    assert results[1].entities == []
