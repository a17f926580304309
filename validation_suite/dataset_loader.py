"""Loading helpers for validation question cases and evaluation corpora."""

from __future__ import annotations

import json
from pathlib import Path

from medrag.qa.schemas import Document, Entity, Relationship
from medrag.qa.stores import InMemoryDocumentStore, InMemoryGraphStore


def _read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


def _normalize_case(raw: dict, index: int) -> dict:
    question = str(raw.get("question", "")).strip()
    if not question:
        raise ValueError(f"Case #{index} has no question")
    return {
        "case_id": str(raw.get("id") or f"case-{index:03d}"),
        "question": question,
        "expected_terms": [str(t).lower() for t in raw.get("expected_terms", [])],
        "expected_types": [str(t) for t in raw.get("expected_types", [])],
    }


def load_cases(path: str) -> list[dict]:
    """Load question cases from a JSON file, a JSONL file, or a directory of either."""

    case_path = Path(path)
    if not case_path.exists():
        raise FileNotFoundError(f"Case path not found: {path}")

    files = sorted(case_path.glob("*.json*")) if case_path.is_dir() else [case_path]
    raw_cases: list[dict] = []
    for file in files:
        if file.suffix.lower() == ".jsonl":
            lines = file.read_text(encoding="utf-8").splitlines()
            raw_cases.extend(json.loads(line) for line in lines if line.strip())
            continue
        payload = _read_json(file)
        if isinstance(payload, dict):
            payload = payload.get("cases", [])
        if isinstance(payload, list):
            raw_cases.extend(payload)

    return [_normalize_case(raw, idx) for idx, raw in enumerate(raw_cases, start=1)]


def load_corpus(path: str) -> tuple[InMemoryGraphStore, InMemoryDocumentStore]:
    """Build in-memory stores from ``{"entities": [...], "relationships": [...], "documents": [...]}``."""

    corpus_path = Path(path)
    if not corpus_path.exists():
        raise FileNotFoundError(f"Corpus file not found: {path}")

    payload = _read_json(corpus_path)
    entities = [Entity.model_validate(row) for row in payload.get("entities", [])]
    relationships = [Relationship.model_validate(row) for row in payload.get("relationships", [])]
    documents = [Document.model_validate(row) for row in payload.get("documents", [])]
    return InMemoryGraphStore(entities, relationships), InMemoryDocumentStore(documents)
