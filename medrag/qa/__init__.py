"""Knowledge-graph and document-backed medical Q&A pipeline."""

from .citations import verify_answer
from .decomposer import decompose_query
from .navigator import KnowledgeGraphNavigator
from .orchestrator import AnswerPipeline
from .retriever import DocumentRetriever
from .schemas import AnswerResult, ChatResponse, SubQuery
from .synthesizer import synthesize_answer

__all__ = [
    "AnswerPipeline",
    "AnswerResult",
    "ChatResponse",
    "DocumentRetriever",
    "KnowledgeGraphNavigator",
    "SubQuery",
    "decompose_query",
    "synthesize_answer",
    "verify_answer",
]
