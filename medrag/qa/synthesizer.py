"""Compose ordered answer sections from graph and document evidence."""

from __future__ import annotations

import re
from typing import Sequence

from .schemas import Document, EntityMatch, QueryType, Section, SubQuery

NO_EVIDENCE_MESSAGE = (
    "I couldn't find specific information about \"{question}\" in the medical database. "
    "This might be a specialized topic or a very recent development. "
    "Please consult a healthcare professional for accurate information."
)
LIMITED_EVIDENCE_MESSAGE = (
    "Based on available information, I found limited details about your query. "
    "For accurate medical guidance, please consult a qualified healthcare professional."
)
SYSTEM_SOURCE = "System"
GRAPH_SOURCE = "Knowledge Graph"
DEFAULT_SOURCE = "Medical Knowledge Base"

MAX_ENTITY_DESCRIPTIONS = 3
MAX_DOCUMENT_EXCERPTS = 2
EXCERPT_CHARS = 400


def significant_words(text: str) -> list[str]:
    words = (re.sub(r"[^\w]", "", word) for word in text.lower().split())
    return [word for word in words if len(word) > 3]


def _mentions(texts: Sequence[str | None], words: Sequence[str]) -> bool:
    lowered = [(text or "").lower() for text in texts]
    return any(word in text for word in words for text in lowered)


def relevant_documents(documents: Sequence[Document], query: str) -> list[Document]:
    words = significant_words(query)
    return [doc for doc in documents if _mentions((doc.content, doc.title), words)]


def relevant_entities(entities: Sequence[EntityMatch], query: str) -> list[EntityMatch]:
    words = significant_words(query)
    return [item for item in entities if _mentions((item.entity.name, item.entity.description), words)]


def _section_content(entities: Sequence[EntityMatch], documents: Sequence[Document]) -> str:
    descriptions = [
        item.entity.description for item in entities[:MAX_ENTITY_DESCRIPTIONS] if item.entity.description
    ]
    excerpts = [doc.content[:EXCERPT_CHARS] for doc in documents[:MAX_DOCUMENT_EXCERPTS] if doc.content]
    return " ".join([*descriptions, *excerpts]).strip()


def _definition_section(entities: Sequence[EntityMatch]) -> Section | None:
    main = entities[0].entity
    if not main.name or not main.description:
        return None
    return Section(
        type=QueryType.DEFINITION.value,
        content=f"{main.name}: {main.description}",
        source=main.source or GRAPH_SOURCE,
    )


def synthesize_answer(
    question: str,
    sub_queries: Sequence[SubQuery],
    entities: Sequence[EntityMatch],
    documents: Sequence[Document],
) -> list[Section]:
    """Build one section per answerable sub-query, led by a definition when possible."""

    if not entities and not documents:
        content = NO_EVIDENCE_MESSAGE.format(question=question)
        return [Section(type=QueryType.GENERAL.value, content=content, source=SYSTEM_SOURCE)]

    sections: list[Section] = []
    if entities:
        definition = _definition_section(entities)
        if definition is not None:
            sections.append(definition)

    for sub_query in sorted(sub_queries, key=lambda sq: sq.priority):
        docs = relevant_documents(documents, sub_query.text)
        ents = relevant_entities(entities, sub_query.text)
        if not docs and not ents:
            continue

        content = _section_content(ents, docs)
        if not content:
            continue

        if docs and docs[0].source:
            source = docs[0].source
        elif ents and ents[0].entity.source:
            source = ents[0].entity.source
        else:
            source = DEFAULT_SOURCE
        sections.append(Section(type=sub_query.type.value, content=content, source=source))

    if not sections:
        sections.append(Section(type=QueryType.GENERAL.value, content=LIMITED_EVIDENCE_MESSAGE, source=SYSTEM_SOURCE))

    return sections
