"""Streamlit chat UI for the medical knowledge-graph Q&A pipeline."""

from __future__ import annotations

import logging
import os

import streamlit as st
from dotenv import load_dotenv

from medrag.qa.api import handle_chat, handle_history
from medrag.qa.config import PipelineSettings
from medrag.qa.orchestrator import AnswerPipeline
from medrag.qa.seed_data import build_seeded_stores
from medrag.qa.stores import InMemorySessionStore
from medrag.qa.supabase_client import SupabaseClient

load_dotenv()
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))


@st.cache_resource
def _build_pipeline() -> AnswerPipeline:
    """Use Supabase when credentials are configured, otherwise the sample corpus."""

    settings = PipelineSettings.from_env()
    if os.getenv("SUPABASE_URL") and os.getenv("SUPABASE_KEY"):
        client = SupabaseClient()
        return AnswerPipeline(client, client, client, settings=settings)

    graph_store, document_store = build_seeded_stores()
    return AnswerPipeline(graph_store, document_store, InMemorySessionStore(), settings=settings)


def _render_citations(citations: list[dict]) -> None:
    if not citations:
        return
    with st.expander(f"Sources ({len(citations)})", expanded=False):
        for citation in citations:
            kind = "Document" if citation["type"] == "document" else "Knowledge graph"
            st.write(f"[{citation['id']}] **{citation['title']}** - {citation['source']} ({kind})")


def _render_metadata(metadata: dict) -> None:
    st.caption(
        f"Data quality: {metadata['dataQuality']} | entities: {metadata['entitiesFound']} | "
        f"documents: {metadata['documentsFound']} | {metadata['processingTimeMs']} ms"
    )
    if metadata["subQueries"]:
        st.caption("Sub-queries: " + "; ".join(metadata["subQueries"]))


def _render_history(pipeline: AnswerPipeline, session_id: str | None) -> None:
    if not session_id:
        return
    status, body = handle_history(pipeline, session_id)
    if status != 200:
        st.warning(body["message"])
        st.session_state.pop("session_id", None)
        return
    for message in body["messages"]:
        with st.chat_message(message["role"]):
            st.markdown(message["content"])
            _render_citations(message.get("citations") or [])


st.set_page_config(page_title="Medical Knowledge Assistant", layout="wide")
st.title("Medical Knowledge Assistant")
st.caption("Educational reference only. Not patient-specific medical advice.")

pipeline = _build_pipeline()

with st.sidebar:
    st.subheader("Conversation")
    if st.button("New conversation"):
        st.session_state.pop("session_id", None)
    st.write(f"Session: `{st.session_state.get('session_id', 'new')}`")

_render_history(pipeline, st.session_state.get("session_id"))

question = st.chat_input("Ask a medical question, e.g. What are the symptoms of diabetes?")
if question:
    with st.chat_message("user"):
        st.markdown(question)

    with st.spinner("Searching the knowledge graph and medical documents..."):
        status, body = handle_chat(pipeline, {"question": question, "sessionId": st.session_state.get("session_id")})

    with st.chat_message("assistant"):
        if status != 200:
            st.error(body["message"])
            if body.get("details"):
                st.caption(body["details"])
        else:
            st.session_state["session_id"] = body["sessionId"]
            st.markdown(body["answer"])
            _render_citations(body["citations"])
            _render_metadata(body["metadata"])
