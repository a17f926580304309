"""Answer-quality thresholds for validation runs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationThresholds:
    """Acceptance criteria for validation runs."""

    min_term_recall: float = 0.5
    min_type_coverage: float = 1.0
    min_cited_rate: float = 0.9


THRESHOLDS = ValidationThresholds()
