"""Supabase (PostgREST) client implementing the graph, document and session stores."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Sequence, TypeVar

import requests

from .errors import StoreError, StoreUnavailableError
from .schemas import Document, Entity, Message, Relationship

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENTITIES_TABLE = "knowledge_graph_entities"
RELATIONSHIPS_TABLE = "knowledge_graph_relationships"
DOCUMENTS_TABLE = "medical_documents"
SESSIONS_TABLE = "chat_sessions"
MESSAGES_TABLE = "chat_messages"


def _quoted(value: str) -> str:
    """Quote a filter value for use inside a PostgREST ``or=(...)`` group."""

    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def ilike_any(columns: Sequence[str], terms: Sequence[str]) -> str:
    clauses = [f"{column}.ilike.{_quoted(f'*{term}*')}" for term in terms for column in columns]
    return f"({','.join(clauses)})"


def _parsed(table: str, parser: Callable[[Any], T], rows: Any) -> T:
    """Run a row parser, reporting malformed rows as a store error."""

    try:
        return parser(rows)
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise StoreError(f"{table}: malformed row: {exc!r}") from exc


class SupabaseClient:
    """Minimal PostgREST client covering the pipeline's store contracts."""

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 15,
    ):
        self.url = (url or os.getenv("SUPABASE_URL", "")).rstrip("/")
        self.key = key or os.getenv("SUPABASE_KEY")
        if not self.url or not self.key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be configured")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "apikey": self.key,
                "Authorization": f"Bearer {self.key}",
                "Content-Type": "application/json",
            }
        )

    @property
    def rest_url(self) -> str:
        return f"{self.url}/rest/v1"

    def _request(
        self,
        method: str,
        table: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Any:
        headers = {"Prefer": prefer} if prefer else None
        try:
            resp = self.session.request(
                method,
                f"{self.rest_url}/{table}",
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json() if resp.content else []
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise StoreUnavailableError(f"{table}: {exc}") from exc
        except requests.RequestException as exc:
            raise StoreError(f"{table}: {exc}") from exc
        except ValueError as exc:
            raise StoreError(f"{table}: invalid JSON response: {exc}") from exc

    # -- graph store ----------------------------------------------------

    def find_entities(self, term: str, limit: int = 5) -> list[Entity]:
        rows = self._request(
            "GET",
            ENTITIES_TABLE,
            params={"select": "*", "or": ilike_any(("name", "description"), [term]), "limit": limit},
        )
        return _parsed(ENTITIES_TABLE, self.parse_entities, rows)

    def find_relationships(self, entity_id: str, limit: int = 10) -> list[Relationship]:
        rows = self._request(
            "GET",
            RELATIONSHIPS_TABLE,
            params={
                "select": "*",
                "or": f"(from_entity_id.eq.{entity_id},to_entity_id.eq.{entity_id})",
                "limit": limit,
            },
        )
        return _parsed(RELATIONSHIPS_TABLE, self.parse_relationships, rows)

    # -- document store -------------------------------------------------

    def find_documents_by_title(self, phrase: str, limit: int = 2) -> list[Document]:
        rows = self._request(
            "GET",
            DOCUMENTS_TABLE,
            params={"select": "*", "or": ilike_any(("title",), [phrase]), "limit": limit},
        )
        return _parsed(DOCUMENTS_TABLE, self.parse_documents, rows)

    def find_documents_by_term(self, term: str, limit: int = 3) -> list[Document]:
        rows = self._request(
            "GET",
            DOCUMENTS_TABLE,
            params={"select": "*", "or": ilike_any(("title", "content"), [term]), "limit": limit},
        )
        return _parsed(DOCUMENTS_TABLE, self.parse_documents, rows)

    def find_documents_by_category_and_terms(
        self, categories: Sequence[str], terms: Sequence[str], limit: int = 2
    ) -> list[Document]:
        if not categories or not terms:
            return []
        rows = self._request(
            "GET",
            DOCUMENTS_TABLE,
            params={
                "select": "*",
                "doc_type": f"in.({','.join(_quoted(c) for c in categories)})",
                "or": ilike_any(("content",), terms),
                "limit": limit,
            },
        )
        return _parsed(DOCUMENTS_TABLE, self.parse_documents, rows)

    # -- session store --------------------------------------------------

    def create_session(self) -> str:
        rows = self._request("POST", SESSIONS_TABLE, json={}, prefer="return=representation")
        if not rows:
            raise StoreError("chat_sessions: insert returned no row")
        return _parsed(SESSIONS_TABLE, lambda r: str(r[0]["id"]), rows)

    def session_exists(self, session_id: str) -> bool:
        # Ids that are not uuids are rejected by PostgREST; treat any rejection as unknown.
        try:
            rows = self._request("GET", SESSIONS_TABLE, params={"select": "id", "id": f"eq.{session_id}"})
        except StoreUnavailableError:
            raise
        except StoreError as exc:
            logger.warning("Session lookup rejected for %r: %s", session_id, exc)
            return False
        return bool(rows)

    def append_message(self, session_id: str, message: Message) -> None:
        row = {"session_id": session_id, **message.model_dump(mode="json", exclude_none=True)}
        self._request("POST", MESSAGES_TABLE, json=row, prefer="return=minimal")

    def list_messages(self, session_id: str) -> list[Message]:
        rows = self._request(
            "GET",
            MESSAGES_TABLE,
            params={"select": "*", "session_id": f"eq.{session_id}", "order": "created_at.asc"},
        )
        return _parsed(MESSAGES_TABLE, self.parse_messages, rows)

    # -- row parsing ----------------------------------------------------

    @staticmethod
    def parse_entities(rows: list[dict[str, Any]]) -> list[Entity]:
        return [
            Entity(
                id=str(row["id"]),
                name=row.get("name") or "",
                description=row.get("description"),
                entity_type=row.get("entity_type") or "unknown",
                source=row.get("source"),
            )
            for row in rows
        ]

    @staticmethod
    def parse_relationships(rows: list[dict[str, Any]]) -> list[Relationship]:
        return [
            Relationship(
                id=str(row["id"]),
                from_entity_id=str(row["from_entity_id"]),
                to_entity_id=str(row["to_entity_id"]),
                relationship_type=row.get("relationship_type") or "",
                confidence=row.get("confidence"),
                source=row.get("source"),
            )
            for row in rows
        ]

    @staticmethod
    def parse_documents(rows: list[dict[str, Any]]) -> list[Document]:
        return [
            Document(
                id=str(row["id"]),
                title=row.get("title") or "Untitled",
                content=row.get("content") or "",
                source=row.get("source") or "",
                doc_type=row.get("doc_type") or "article",
                metadata=row.get("metadata") or {},
                created_at=row.get("created_at"),
            )
            for row in rows
        ]

    @staticmethod
    def parse_messages(rows: list[dict[str, Any]]) -> list[Message]:
        fields = set(Message.model_fields)
        return [
            Message.model_validate({k: v for k, v in row.items() if k in fields and v is not None})
            for row in rows
        ]
