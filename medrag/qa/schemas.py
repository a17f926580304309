"""Schemas for the medical knowledge-graph Q&A pipeline."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class QueryType(str, Enum):
    DEFINITION = "definition"
    SYMPTOMS = "symptoms"
    CAUSES = "causes"
    TREATMENT = "treatment"
    PREVENTION = "prevention"
    DIAGNOSIS = "diagnosis"
    PROGNOSIS = "prognosis"
    RISK_FACTORS = "risk_factors"
    GENERAL = "general"


class MatchType(str, Enum):
    EXACT = "exact"
    KEYWORD = "keyword"
    TYPE = "type"


class CitationType(str, Enum):
    DOCUMENT = "document"
    KNOWLEDGE_GRAPH = "knowledge_graph"


class DataQuality(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SubQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    type: QueryType
    priority: int = Field(ge=1)


class Entity(BaseModel):
    id: str
    name: str
    description: str | None = None
    entity_type: str
    source: str | None = None


class Relationship(BaseModel):
    id: str
    from_entity_id: str
    to_entity_id: str
    relationship_type: str
    confidence: float | None = None
    source: str | None = None


class EntityMatch(BaseModel):
    """An entity together with its incident edges."""

    entity: Entity
    relationships: list[Relationship] = Field(default_factory=list)


class Document(BaseModel):
    id: str
    title: str
    content: str = ""
    source: str = ""
    doc_type: str = "article"
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class ScoredDocument(Document):
    """A ranked document as returned by one retrieval call."""

    score: float = 0.0
    relevance_score: float = Field(default=0.0, ge=0.0, le=1.0)
    match_type: MatchType = MatchType.KEYWORD
    matched_terms: list[str] = Field(default_factory=list)


class NavigationResult(BaseModel):
    sub_query: SubQuery
    entities: list[EntityMatch] = Field(default_factory=list)


class RetrievalResult(BaseModel):
    sub_query: SubQuery
    documents: list[ScoredDocument] = Field(default_factory=list)


class Section(BaseModel):
    type: str
    content: str
    source: str


class Citation(BaseModel):
    id: int = Field(ge=1)
    source: str
    title: str
    type: CitationType


class AnswerResult(BaseModel):
    answer: str
    citations: list[Citation] = Field(default_factory=list)
    verified: bool = False


class Message(BaseModel):
    role: Role
    content: str
    sub_queries: list[SubQuery] | None = None
    retrieved_entities: list[EntityMatch] | None = None
    retrieved_docs: list[ScoredDocument] | None = None
    citations: list[Citation] | None = None
    created_at: datetime | None = None


class _WireModel(BaseModel):
    """Response models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatMetadata(_WireModel):
    sub_queries: list[str] = Field(default_factory=list)
    entities_found: int = 0
    documents_found: int = 0
    processing_time_ms: int = 0
    data_quality: DataQuality = DataQuality.NONE


class ChatResponse(_WireModel):
    success: bool = True
    session_id: str
    answer: str
    citations: list[Citation] = Field(default_factory=list)
    metadata: ChatMetadata


class ErrorResponse(_WireModel):
    error: str
    code: str
    message: str
    details: str | None = None
