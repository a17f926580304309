"""Transport-neutral request handlers returning ``(status, body)`` pairs."""

from __future__ import annotations

import logging
from typing import Any

from .errors import InputValidationError, classify_error, error_payload
from .orchestrator import AnswerPipeline

logger = logging.getLogger(__name__)


def handle_chat(pipeline: AnswerPipeline, payload: Any) -> tuple[int, dict]:
    """Answer one chat request body ``{"question": ..., "sessionId": ...}``."""

    include_details = not pipeline.settings.is_production
    try:
        if not isinstance(payload, dict):
            raise InputValidationError("Invalid JSON in request body")
        question = payload.get("question", payload.get("message"))
        response = pipeline.answer(question, session_id=payload.get("sessionId"))
    except Exception as exc:
        logger.error("Chat request failed [%s]: %s", classify_error(exc).value, exc)
        return error_payload(exc, include_details)
    return 200, response.model_dump(by_alias=True, mode="json")


def handle_history(pipeline: AnswerPipeline, session_id: str | None) -> tuple[int, dict]:
    include_details = not pipeline.settings.is_production
    try:
        messages = pipeline.history(session_id)
    except Exception as exc:
        logger.error("History request failed [%s]: %s", classify_error(exc).value, exc)
        return error_payload(exc, include_details)
    return 200, {
        "success": True,
        "sessionId": session_id,
        "messages": [m.model_dump(mode="json", exclude_none=True) for m in messages],
        "count": len(messages),
    }
