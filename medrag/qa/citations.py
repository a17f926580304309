"""Citation assignment and final answer rendering."""

from __future__ import annotations

from typing import Sequence

from .schemas import AnswerResult, Citation, CitationType, Document, EntityMatch, Section

DISCLAIMER = (
    "*Disclaimer: This information is for educational purposes only. Always consult with a qualified "
    "healthcare professional for medical advice, diagnosis, or treatment.*"
)
DEFAULT_SOURCE = "Medical Knowledge Base"
DEFAULT_TITLE = "Medical Reference"

# Prefix-overlap heuristic: a document supports a section when the section quotes
# its opening characters. Reordered or differently truncated excerpts are missed.
PREFIX_CHARS = 50


def _supporting_document(section: Section, documents: Sequence[Document]) -> Document | None:
    for doc in documents:
        prefix = doc.content[:PREFIX_CHARS]
        if prefix and prefix in section.content:
            return doc
    return None


def _supporting_entity(section: Section, entities: Sequence[EntityMatch]) -> EntityMatch | None:
    for item in entities:
        if item.entity.name and item.entity.name in section.content:
            return item
    return None


def build_citation(
    citation_id: int,
    section: Section,
    documents: Sequence[Document],
    entities: Sequence[EntityMatch],
) -> Citation:
    doc = _supporting_document(section, documents)
    match = _supporting_entity(section, entities)
    entity = match.entity if match else None

    if doc and doc.source:
        source = doc.source
    elif entity and entity.source:
        source = entity.source
    else:
        source = section.source or DEFAULT_SOURCE

    if doc:
        title = doc.title
    elif entity:
        title = entity.name
    else:
        title = DEFAULT_TITLE

    return Citation(
        id=citation_id,
        source=source,
        title=title,
        type=CitationType.DOCUMENT if doc else CitationType.KNOWLEDGE_GRAPH,
    )


def render_answer(sections: Sequence[Section], citations: Sequence[Citation]) -> str:
    parts = [f"{section.content} [{citation.id}]\n\n" for section, citation in zip(sections, citations)]
    if citations:
        parts.append("\n**References:**\n")
        parts.extend(f"[{c.id}] {c.title} - {c.source}\n" for c in citations)
    parts.append(f"\n\n{DISCLAIMER}")
    return "".join(parts).strip()


def verify_answer(
    sections: Sequence[Section],
    entities: Sequence[EntityMatch],
    documents: Sequence[Document],
) -> AnswerResult:
    """Attach a numbered citation to every section and render the answer text."""

    citations = [
        build_citation(idx, section, documents, entities) for idx, section in enumerate(sections, start=1)
    ]
    return AnswerResult(
        answer=render_answer(sections, citations),
        citations=citations,
        verified=bool(citations),
    )
