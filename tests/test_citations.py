import pytest

from medrag.qa.citations import DISCLAIMER, build_citation, verify_answer
from medrag.qa.schemas import CitationType, Document, Entity, EntityMatch, Section

DOC = Document(
    id="doc-1",
    title="Understanding Asthma",
    content="Asthma is a chronic condition affecting the airways in the lungs.",
    source="MedlinePlus",
)
ASTHMA = EntityMatch(
    entity=Entity(id="e1", name="Asthma", description="Airway disease.", entity_type="disease", source="PubMed")
)


@pytest.mark.parametrize("count", range(6))
def test_citation_ids_are_sequential(count):
    sections = [Section(type="general", content=f"Finding {i}", source="Registry") for i in range(count)]

    result = verify_answer(sections, [], [])

    assert [c.id for c in result.citations] == list(range(1, count + 1))
    assert result.verified is (count > 0)


def test_empty_sections_render_only_disclaimer():
    result = verify_answer([], [ASTHMA], [DOC])

    assert result.answer == DISCLAIMER
    assert result.citations == []
    assert result.verified is False


def test_document_prefix_match_wins():
    section = Section(type="definition", content=f"Overview. {DOC.content}", source="Knowledge Graph")

    citation = build_citation(1, section, [DOC], [ASTHMA])

    assert citation.type == CitationType.DOCUMENT
    assert citation.title == "Understanding Asthma"
    assert citation.source == "MedlinePlus"


def test_entity_name_fallback():
    section = Section(type="definition", content="Asthma: Airway disease.", source="Knowledge Graph")

    citation = build_citation(2, section, [DOC], [ASTHMA])

    assert citation.type == CitationType.KNOWLEDGE_GRAPH
    assert citation.title == "Asthma"
    assert citation.source == "PubMed"


def test_unsupported_section_uses_defaults():
    section = Section(type="general", content="Nothing specific.", source="System")

    citation = build_citation(1, section, [DOC], [ASTHMA])

    assert citation.type == CitationType.KNOWLEDGE_GRAPH
    assert citation.title == "Medical Reference"
    assert citation.source == "System"


def test_rendered_answer_layout():
    sections = [
        Section(type="definition", content="Asthma: Airway disease.", source="Knowledge Graph"),
        Section(type="general", content=DOC.content, source="MedlinePlus"),
    ]

    result = verify_answer(sections, [ASTHMA], [DOC])

    assert result.answer.startswith("Asthma: Airway disease. [1]\n\n" + DOC.content + " [2]")
    assert "**References:**\n[1] Asthma - PubMed\n[2] Understanding Asthma - MedlinePlus" in result.answer
    assert result.answer.endswith(DISCLAIMER)
