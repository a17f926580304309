"""Runtime settings for the answer pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else default


@dataclass(frozen=True)
class PipelineSettings:
    """Limits, retry policy and timeouts for one pipeline instance."""

    max_message_length: int = 5000
    min_message_length: int = 1
    max_retries: int = 3
    retry_delay: float = 1.0
    branch_timeout: float = 30.0
    max_sub_queries: int = 10
    max_entities: int = 50
    max_documents: int = 20
    environment: str = "development"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls) -> "PipelineSettings":
        defaults = cls()
        return cls(
            max_message_length=_env_int("MEDRAG_MAX_MESSAGE_LENGTH", defaults.max_message_length),
            min_message_length=_env_int("MEDRAG_MIN_MESSAGE_LENGTH", defaults.min_message_length),
            max_retries=_env_int("MEDRAG_MAX_RETRIES", defaults.max_retries),
            retry_delay=_env_float("MEDRAG_RETRY_DELAY", defaults.retry_delay),
            branch_timeout=_env_float("MEDRAG_BRANCH_TIMEOUT", defaults.branch_timeout),
            max_sub_queries=_env_int("MEDRAG_MAX_SUB_QUERIES", defaults.max_sub_queries),
            max_entities=_env_int("MEDRAG_MAX_ENTITIES", defaults.max_entities),
            max_documents=_env_int("MEDRAG_MAX_DOCUMENTS", defaults.max_documents),
            environment=os.getenv("MEDRAG_ENV", defaults.environment),
        )


DEFAULT_SETTINGS = PipelineSettings()
