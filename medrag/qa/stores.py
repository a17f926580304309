"""Collaborator contracts for the pipeline and in-memory implementations.

The pipeline only depends on the protocols below. The in-memory stores back the
Streamlit demo, the validation suite and the tests; ``supabase_client`` provides
the same contracts over a hosted Postgres.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Iterable, Protocol, Sequence

from .errors import SessionError
from .schemas import Document, Entity, Message, Relationship


class GraphStore(Protocol):
    def find_entities(self, term: str, limit: int = 5) -> list[Entity]: ...

    def find_relationships(self, entity_id: str, limit: int = 10) -> list[Relationship]: ...


class DocumentStore(Protocol):
    def find_documents_by_title(self, phrase: str, limit: int = 2) -> list[Document]: ...

    def find_documents_by_term(self, term: str, limit: int = 3) -> list[Document]: ...

    def find_documents_by_category_and_terms(
        self, categories: Sequence[str], terms: Sequence[str], limit: int = 2
    ) -> list[Document]: ...


class SessionStore(Protocol):
    def create_session(self) -> str: ...

    def session_exists(self, session_id: str) -> bool: ...

    def append_message(self, session_id: str, message: Message) -> None: ...

    def list_messages(self, session_id: str) -> list[Message]: ...


def _contains(haystack: str | None, needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


class InMemoryGraphStore:
    """Case-insensitive substring search over a fixed set of entities and edges."""

    def __init__(self, entities: Iterable[Entity] = (), relationships: Iterable[Relationship] = ()):
        self.entities = list(entities)
        self.relationships = list(relationships)

    def find_entities(self, term: str, limit: int = 5) -> list[Entity]:
        hits = [e for e in self.entities if _contains(e.name, term) or _contains(e.description, term)]
        return hits[:limit]

    def find_relationships(self, entity_id: str, limit: int = 10) -> list[Relationship]:
        hits = [r for r in self.relationships if entity_id in (r.from_entity_id, r.to_entity_id)]
        return hits[:limit]


class InMemoryDocumentStore:
    def __init__(self, documents: Iterable[Document] = ()):
        self.documents = list(documents)

    def find_documents_by_title(self, phrase: str, limit: int = 2) -> list[Document]:
        return [d for d in self.documents if _contains(d.title, phrase)][:limit]

    def find_documents_by_term(self, term: str, limit: int = 3) -> list[Document]:
        return [d for d in self.documents if _contains(d.title, term) or _contains(d.content, term)][:limit]

    def find_documents_by_category_and_terms(
        self, categories: Sequence[str], terms: Sequence[str], limit: int = 2
    ) -> list[Document]:
        hits = [
            d
            for d in self.documents
            if d.doc_type in categories and any(_contains(d.content, term) for term in terms)
        ]
        return hits[:limit]


class InMemorySessionStore:
    def __init__(self):
        self._messages: dict[str, list[Message]] = {}

    def create_session(self) -> str:
        session_id = str(uuid.uuid4())
        self._messages[session_id] = []
        return session_id

    def session_exists(self, session_id: str) -> bool:
        return session_id in self._messages

    def append_message(self, session_id: str, message: Message) -> None:
        if session_id not in self._messages:
            raise SessionError(f"unknown session: {session_id}")
        stamped = message.model_copy(update={"created_at": message.created_at or datetime.now(tz=timezone.utc)})
        self._messages[session_id].append(stamped)

    def list_messages(self, session_id: str) -> list[Message]:
        if session_id not in self._messages:
            raise SessionError(f"unknown session: {session_id}")
        return list(self._messages[session_id])
